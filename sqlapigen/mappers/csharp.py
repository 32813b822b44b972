"""C# type mapping for ASP.NET Core / Entity Framework Core projects."""

from typing import List

from ..domain.models import FieldType, SqlColumn
from ..domain.naming import to_pascal_case
from .base import BaseTypeMapper


class CSharpTypeMapper(BaseTypeMapper):
    language = "csharp"
    keywords = frozenset({
        "abstract", "as", "base", "bool", "break", "byte", "case", "catch", "char",
        "checked", "class", "const", "continue", "decimal", "default", "delegate",
        "do", "double", "else", "enum", "event", "explicit", "extern", "false",
        "finally", "fixed", "float", "for", "foreach", "goto", "if", "implicit",
        "in", "int", "interface", "internal", "is", "lock", "long", "namespace",
        "new", "null", "object", "operator", "out", "override", "params",
        "private", "protected", "public", "readonly", "ref", "return", "sbyte",
        "sealed", "short", "sizeof", "stackalloc", "static", "string", "struct",
        "switch", "this", "throw", "true", "try", "typeof", "uint", "ulong",
        "unchecked", "unsafe", "ushort", "using", "virtual", "void", "volatile",
        "while",
    })

    TYPE_MAP = {
        FieldType.INTEGER: "int",
        FieldType.LONG: "long",
        FieldType.SHORT: "short",
        FieldType.BYTE: "byte",
        FieldType.DECIMAL: "decimal",
        FieldType.FLOAT: "float",
        FieldType.DOUBLE: "double",
        FieldType.BOOLEAN: "bool",
        FieldType.STRING: "string",
        FieldType.DATE: "DateOnly",
        FieldType.TIME: "TimeOnly",
        FieldType.DATETIME: "DateTime",
        FieldType.UUID: "Guid",
        FieldType.JSON: "string",
        FieldType.BINARY: "byte[]",
        FieldType.DURATION: "TimeSpan",
    }
    FALLBACK_TYPE = "object"

    def list_type(self, type_name: str) -> str:
        return f"List<{type_name}>"

    def nullable_type(self, type_name: str) -> str:
        return type_name if type_name.endswith("?") else f"{type_name}?"

    def string_literal(self, text: str) -> str:
        return '"' + text.replace('"', '""') + '"'

    def field_name(self, column_name: str) -> str:
        """Properties are PascalCase in C#."""
        return self.safe_name(to_pascal_case(column_name))

    def data_annotations(self, column: SqlColumn) -> List[str]:
        attributes = []
        if column.primary_key:
            attributes.append("[Key]")
            if column.auto_increment:
                attributes.append("[DatabaseGenerated(DatabaseGeneratedOption.Identity)]")
        elif not column.nullable:
            attributes.append("[Required]")
        if column.is_string and column.length:
            attributes.append(f"[MaxLength({column.length})]")
        if column.field_type == FieldType.DECIMAL and column.precision:
            attributes.append(f"[Precision({column.precision}, {column.scale or 0})]")
        attributes.append(f'[Column("{column.name}")]')
        return attributes
