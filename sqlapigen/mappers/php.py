"""PHP type mapping for Laravel / Eloquent projects."""

from typing import List, Optional

from ..domain.models import FieldType, SqlColumn
from ..domain.naming import to_snake_case
from .base import BaseTypeMapper


def _is_current_timestamp(default: Optional[str]) -> bool:
    return default is not None and default.strip().upper() in ("CURRENT_TIMESTAMP", "NOW()", "LOCALTIMESTAMP")


class PhpTypeMapper(BaseTypeMapper):
    language = "php"
    keywords = frozenset({
        "abstract", "and", "array", "as", "break", "callable", "case", "catch",
        "class", "clone", "const", "continue", "declare", "default", "do", "echo",
        "else", "elseif", "empty", "enddeclare", "endfor", "endforeach", "endif",
        "endswitch", "endwhile", "eval", "exit", "extends", "final", "finally",
        "fn", "for", "foreach", "function", "global", "goto", "if", "implements",
        "include", "instanceof", "insteadof", "interface", "isset", "list",
        "match", "namespace", "new", "or", "print", "private", "protected",
        "public", "readonly", "require", "return", "static", "switch", "throw",
        "trait", "try", "unset", "use", "var", "while", "xor", "yield",
    })

    TYPE_MAP = {
        FieldType.INTEGER: "int",
        FieldType.LONG: "int",
        FieldType.SHORT: "int",
        FieldType.BYTE: "int",
        FieldType.DECIMAL: "string",
        FieldType.FLOAT: "float",
        FieldType.DOUBLE: "float",
        FieldType.BOOLEAN: "bool",
        FieldType.STRING: "string",
        FieldType.DATE: "Carbon",
        FieldType.TIME: "string",
        FieldType.DATETIME: "Carbon",
        FieldType.UUID: "string",
        FieldType.JSON: "array",
        FieldType.BINARY: "string",
        FieldType.DURATION: "string",
    }
    FALLBACK_TYPE = "mixed"
    IMPORTS = {"Carbon": "Illuminate\\Support\\Carbon"}

    MIGRATION_METHODS = {
        FieldType.INTEGER: "integer",
        FieldType.LONG: "bigInteger",
        FieldType.SHORT: "smallInteger",
        FieldType.BYTE: "tinyInteger",
        FieldType.DECIMAL: "decimal",
        FieldType.FLOAT: "float",
        FieldType.DOUBLE: "double",
        FieldType.BOOLEAN: "boolean",
        FieldType.STRING: "string",
        FieldType.DATE: "date",
        FieldType.TIME: "time",
        FieldType.DATETIME: "timestamp",
        FieldType.UUID: "uuid",
        FieldType.JSON: "json",
        FieldType.BINARY: "binary",
        FieldType.DURATION: "string",
        FieldType.ARRAY: "json",
    }

    CASTS = {
        FieldType.INTEGER: "integer",
        FieldType.LONG: "integer",
        FieldType.SHORT: "integer",
        FieldType.BYTE: "integer",
        FieldType.FLOAT: "float",
        FieldType.DOUBLE: "float",
        FieldType.BOOLEAN: "boolean",
        FieldType.DATE: "date",
        FieldType.DATETIME: "datetime",
        FieldType.JSON: "array",
        FieldType.ARRAY: "array",
    }

    RULES = {
        FieldType.INTEGER: "integer",
        FieldType.LONG: "integer",
        FieldType.SHORT: "integer",
        FieldType.BYTE: "integer",
        FieldType.DECIMAL: "numeric",
        FieldType.FLOAT: "numeric",
        FieldType.DOUBLE: "numeric",
        FieldType.BOOLEAN: "boolean",
        FieldType.STRING: "string",
        FieldType.DATE: "date",
        FieldType.DATETIME: "date",
        FieldType.UUID: "uuid",
        FieldType.JSON: "array",
        FieldType.ARRAY: "array",
    }

    TRUE_LITERAL = "true"
    FALSE_LITERAL = "false"

    def list_type(self, type_name: str) -> str:
        return "array"

    def nullable_type(self, type_name: str) -> str:
        if type_name == "mixed":
            return type_name
        return f"?{type_name}"

    def string_literal(self, text: str) -> str:
        escaped = text.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"

    def field_name(self, column_name: str) -> str:
        """Eloquent attributes keep the snake_case column name."""
        return to_snake_case(column_name)

    def migration_column(self, column: SqlColumn) -> str:
        """Schema builder call for a column, without the trailing semicolon."""
        method = self.MIGRATION_METHODS.get(column.field_type, "text")
        args = [f"'{column.name}'"]
        if column.is_string and column.length:
            args.append(str(column.length))
        elif column.is_string:
            method = "text"
        if column.field_type == FieldType.DECIMAL:
            args.extend([str(column.precision or 19), str(column.scale if column.scale is not None else 2)])

        call = f"$table->{method}({', '.join(args)})"
        if column.nullable:
            call += "->nullable()"
        if column.unique:
            call += "->unique()"
        default = self.default_value(column)
        if default is not None:
            call += f"->default({default})"
        elif column.is_temporal and _is_current_timestamp(column.default_value):
            call += "->useCurrent()"
        return call

    def cast(self, column: SqlColumn) -> Optional[str]:
        if column.field_type == FieldType.DECIMAL:
            return f"decimal:{column.scale if column.scale is not None else 2}"
        return self.CASTS.get(column.field_type)

    def validation_rules(self, column: SqlColumn, table_name: str, update: bool = False) -> str:
        """Laravel validation rule string for a form request."""
        rules: List[str] = []
        if update:
            rules.append("sometimes")
        rules.append("nullable" if column.nullable else "required")
        rule = self.RULES.get(column.field_type)
        if rule == "string" and "email" in column.name.lower():
            rules.append("email")
        elif rule:
            rules.append(rule)
        if column.is_string and column.length:
            rules.append(f"max:{column.length}")
        if column.unique:
            rules.append(f"unique:{table_name},{column.name}")
        return "|".join(rules)
