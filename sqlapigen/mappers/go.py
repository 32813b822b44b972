"""
Go type mapping.

``GoTypeMapper`` targets GORM models (Gin projects); ``GoChiTypeMapper``
targets hand-written pgx queries where nullable columns use pgtype wrappers.
"""

from typing import Dict

from ..domain.models import FieldType, SqlColumn
from ..domain.naming import to_camel_case, to_pascal_case, to_snake_case
from .base import BaseTypeMapper

GO_KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
    "map", "package", "range", "return", "select", "struct", "switch", "type",
    "var",
})

# Initialisms written in capitals by Go naming conventions
GO_INITIALISMS = {
    "id": "ID",
    "url": "URL",
    "uri": "URI",
    "api": "API",
    "uuid": "UUID",
    "http": "HTTP",
    "json": "JSON",
    "ip": "IP",
    "sql": "SQL",
    "html": "HTML",
}


def go_exported_name(name: str) -> str:
    """PascalCase with Go initialisms (``user_id`` -> ``UserID``)."""
    words = to_snake_case(name).split("_")
    return "".join(GO_INITIALISMS.get(word, to_pascal_case(word)) for word in words if word)


def go_unexported_name(name: str) -> str:
    """camelCase with Go initialisms (``user_id`` -> ``userID``)."""
    words = [word for word in to_snake_case(name).split("_") if word]
    if not words:
        return name
    rest = "".join(GO_INITIALISMS.get(word, to_pascal_case(word)) for word in words[1:])
    return words[0] + rest


class GoTypeMapper(BaseTypeMapper):
    language = "go"
    keywords = GO_KEYWORDS

    TYPE_MAP = {
        FieldType.INTEGER: "int",
        FieldType.LONG: "int64",
        FieldType.SHORT: "int16",
        FieldType.BYTE: "int8",
        FieldType.DECIMAL: "decimal.Decimal",
        FieldType.FLOAT: "float32",
        FieldType.DOUBLE: "float64",
        FieldType.BOOLEAN: "bool",
        FieldType.STRING: "string",
        FieldType.DATE: "time.Time",
        FieldType.TIME: "string",
        FieldType.DATETIME: "time.Time",
        FieldType.UUID: "uuid.UUID",
        FieldType.JSON: "datatypes.JSON",
        FieldType.BINARY: "[]byte",
        FieldType.DURATION: "time.Duration",
    }
    FALLBACK_TYPE = "any"
    IMPORTS = {
        "decimal.Decimal": "github.com/shopspring/decimal",
        "time.Time": "time",
        "time.Duration": "time",
        "uuid.UUID": "github.com/google/uuid",
        "datatypes.JSON": "gorm.io/datatypes",
    }

    def list_type(self, type_name: str) -> str:
        return f"[]{type_name}"

    def nullable_type(self, type_name: str) -> str:
        # Slices and JSON already have a nil value
        if type_name.startswith(("[]", "*")) or type_name in ("datatypes.JSON", "any"):
            return type_name
        return f"*{type_name}"

    def field_name(self, column_name: str) -> str:
        return go_exported_name(column_name)

    def json_name(self, column_name: str) -> str:
        return to_camel_case(column_name)

    def struct_tags(self, column: SqlColumn) -> str:
        """GORM, JSON and binding tags for a model field."""
        gorm = [f"column:{column.name}"]
        if column.primary_key:
            gorm.append("primaryKey")
            if column.auto_increment:
                gorm.append("autoIncrement")
        elif not column.nullable:
            gorm.append("not null")
        if column.is_string and column.length:
            gorm.append(f"size:{column.length}")
        if column.unique and not column.primary_key:
            gorm.append("uniqueIndex")

        json_tag = self.json_name(column.name)
        if column.nullable:
            json_tag += ",omitempty"
        return f'gorm:"{";".join(gorm)}" json:"{json_tag}"'

    def binding_tag(self, column: SqlColumn) -> str:
        """Gin validator tag for request DTO fields."""
        rules = []
        if not column.nullable and column.field_type != FieldType.BOOLEAN:
            rules.append("required")
        else:
            rules.append("omitempty")
        if column.is_string and column.length:
            rules.append(f"max={column.length}")
        if "email" in column.name.lower() and column.is_string:
            rules.append("email")
        return f'binding:"{",".join(rules)}"'


class GoChiTypeMapper(GoTypeMapper):
    """pgx flavour: sized integers and pgtype wrappers for nullable columns."""

    TYPE_MAP = dict(GoTypeMapper.TYPE_MAP)
    TYPE_MAP.update({
        FieldType.INTEGER: "int32",
        FieldType.BYTE: "int16",
        FieldType.JSON: "json.RawMessage",
        FieldType.TIME: "pgtype.Time",
    })
    IMPORTS = {
        "decimal.Decimal": "github.com/shopspring/decimal",
        "time.Time": "time",
        "time.Duration": "time",
        "uuid.UUID": "github.com/google/uuid",
        "json.RawMessage": "encoding/json",
        "pgtype.Text": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Int2": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Int4": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Int8": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Bool": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Float4": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Float8": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Timestamptz": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Date": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Time": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.UUID": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Numeric": "github.com/jackc/pgx/v5/pgtype",
        "pgtype.Interval": "github.com/jackc/pgx/v5/pgtype",
    }

    NULLABLE_TYPES: Dict[FieldType, str] = {
        FieldType.INTEGER: "pgtype.Int4",
        FieldType.LONG: "pgtype.Int8",
        FieldType.SHORT: "pgtype.Int2",
        FieldType.BYTE: "pgtype.Int2",
        FieldType.DECIMAL: "pgtype.Numeric",
        FieldType.FLOAT: "pgtype.Float4",
        FieldType.DOUBLE: "pgtype.Float8",
        FieldType.BOOLEAN: "pgtype.Bool",
        FieldType.STRING: "pgtype.Text",
        FieldType.DATE: "pgtype.Date",
        FieldType.TIME: "pgtype.Time",
        FieldType.DATETIME: "pgtype.Timestamptz",
        FieldType.UUID: "pgtype.UUID",
        FieldType.DURATION: "pgtype.Interval",
    }

    def column_type(self, column: SqlColumn) -> str:
        if column.nullable and not column.primary_key and column.field_type in self.NULLABLE_TYPES:
            return self.NULLABLE_TYPES[column.field_type]
        return self.base_type(column)

    def struct_tags(self, column: SqlColumn) -> str:
        return f'json:"{self.json_name(column.name)}" db:"{column.name}"'

    def pointer_type(self, column: SqlColumn) -> str:
        """Optional field type for partial-update requests."""
        return f"*{self.column_type(column)}"

    @staticmethod
    def placeholder(position: int) -> str:
        """pgx positional parameter (``$1``)."""
        return f"${position}"
