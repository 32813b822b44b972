"""Java type mapping for Spring Boot / JPA projects."""

from typing import List

from ..domain.models import FieldType, SqlColumn
from .base import BaseTypeMapper


class JavaTypeMapper(BaseTypeMapper):
    language = "java"
    keywords = frozenset({
        "abstract", "assert", "boolean", "break", "byte", "case", "catch", "char",
        "class", "const", "continue", "default", "do", "double", "else", "enum",
        "extends", "final", "finally", "float", "for", "goto", "if", "implements",
        "import", "instanceof", "int", "interface", "long", "native", "new",
        "package", "private", "protected", "public", "return", "short", "static",
        "strictfp", "super", "switch", "synchronized", "this", "throw", "throws",
        "transient", "try", "void", "volatile", "while", "record", "var", "yield",
    })
    keyword_suffix = "Value"

    TYPE_MAP = {
        FieldType.INTEGER: "Integer",
        FieldType.LONG: "Long",
        FieldType.SHORT: "Short",
        FieldType.BYTE: "Byte",
        FieldType.DECIMAL: "BigDecimal",
        FieldType.FLOAT: "Float",
        FieldType.DOUBLE: "Double",
        FieldType.BOOLEAN: "Boolean",
        FieldType.STRING: "String",
        FieldType.DATE: "LocalDate",
        FieldType.TIME: "LocalTime",
        FieldType.DATETIME: "LocalDateTime",
        FieldType.UUID: "UUID",
        FieldType.JSON: "String",
        FieldType.BINARY: "byte[]",
        FieldType.DURATION: "Duration",
    }
    FALLBACK_TYPE = "Object"
    IMPORTS = {
        "BigDecimal": "java.math.BigDecimal",
        "LocalDate": "java.time.LocalDate",
        "LocalTime": "java.time.LocalTime",
        "LocalDateTime": "java.time.LocalDateTime",
        "Duration": "java.time.Duration",
        "UUID": "java.util.UUID",
        "List": "java.util.List",
    }

    def list_type(self, type_name: str) -> str:
        return f"List<{type_name}>"

    def validation_annotations(self, column: SqlColumn) -> List[str]:
        """Bean Validation annotations for a request DTO field."""
        if column.primary_key:
            return []

        annotations = []
        if not column.nullable:
            annotations.append("@NotBlank" if column.is_string else "@NotNull")
        if column.is_string and column.length:
            annotations.append(f"@Size(max = {column.length})")
        if column.unique:
            # Enforced by the unique constraint, not Bean Validation
            annotations.append("// @Unique")
        return annotations

    def column_annotation(self, column: SqlColumn) -> str:
        """``@Column(...)`` with the attributes that differ from JPA defaults."""
        attributes = [f'name = "{column.name}"']
        if not column.nullable and not column.primary_key:
            attributes.append("nullable = false")
        if column.unique and not column.primary_key:
            attributes.append("unique = true")
        if column.is_string and column.length:
            attributes.append(f"length = {column.length}")
        if column.field_type == FieldType.DECIMAL and column.precision:
            attributes.append(f"precision = {column.precision}")
            if column.scale is not None:
                attributes.append(f"scale = {column.scale}")
        if column.field_type == FieldType.JSON:
            attributes.append('columnDefinition = "jsonb"')
        return f"@Column({', '.join(attributes)})"
