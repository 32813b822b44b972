"""Rust type mapping for Axum / SQLx projects."""

from typing import List

from ..domain.models import FieldType, SqlColumn
from ..domain.naming import to_snake_case
from .base import BaseTypeMapper


def _has_time_zone(sql_type: str) -> bool:
    upper = (sql_type or "").upper()
    return "TZ" in upper or "WITH TIME ZONE" in upper


class RustTypeMapper(BaseTypeMapper):
    language = "rust"
    keywords = frozenset({
        "as", "async", "await", "break", "const", "continue", "crate", "dyn",
        "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
        "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
        "self", "static", "struct", "super", "trait", "true", "type", "unsafe",
        "use", "where", "while", "abstract", "final", "override", "typeof",
        "yield",
    })

    TYPE_MAP = {
        FieldType.INTEGER: "i32",
        FieldType.LONG: "i64",
        FieldType.SHORT: "i16",
        FieldType.BYTE: "i16",
        FieldType.DECIMAL: "Decimal",
        FieldType.FLOAT: "f32",
        FieldType.DOUBLE: "f64",
        FieldType.BOOLEAN: "bool",
        FieldType.STRING: "String",
        FieldType.DATE: "NaiveDate",
        FieldType.TIME: "NaiveTime",
        FieldType.DATETIME: "DateTime<Utc>",
        FieldType.UUID: "Uuid",
        FieldType.JSON: "serde_json::Value",
        FieldType.BINARY: "Vec<u8>",
        FieldType.DURATION: "PgInterval",
    }
    FALLBACK_TYPE = "serde_json::Value"
    IMPORTS = {
        "Decimal": "use rust_decimal::Decimal;",
        "NaiveDate": "use chrono::NaiveDate;",
        "NaiveTime": "use chrono::NaiveTime;",
        "DateTime": "use chrono::{DateTime, Utc};",
        "NaiveDateTime": "use chrono::NaiveDateTime;",
        "Uuid": "use uuid::Uuid;",
        "PgInterval": "use sqlx::postgres::types::PgInterval;",
    }

    def base_type(self, column: SqlColumn) -> str:
        # sqlx decodes TIMESTAMP only into NaiveDateTime and TIMESTAMPTZ only into DateTime<Utc>
        if column.field_type == FieldType.DATETIME and not _has_time_zone(column.sql_type):
            return "NaiveDateTime"
        return super().base_type(column)

    def list_type(self, type_name: str) -> str:
        return f"Vec<{type_name}>"

    def nullable_type(self, type_name: str) -> str:
        return f"Option<{type_name}>"

    def string_literal(self, text: str) -> str:
        return super().string_literal(text) + ".to_string()"

    def field_name(self, column_name: str) -> str:
        """Rust fields are snake_case; keywords become raw identifiers."""
        name = to_snake_case(column_name)
        if name in self.keywords:
            return f"r#{name}"
        return name

    def validate_attributes(self, column: SqlColumn) -> List[str]:
        """``validator`` crate attributes for request structs."""
        attributes = []
        if column.is_string and column.length:
            minimum = ", min = 1" if not column.nullable else ""
            attributes.append(f"#[validate(length(max = {column.length}{minimum}))]")
        if column.is_string and "email" in column.name.lower():
            attributes.append("#[validate(email)]")
        return attributes
