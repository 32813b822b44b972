"""TypeScript type mapping for NestJS / TypeORM projects."""

from typing import List

from ..domain.models import FieldType, SqlColumn
from .base import BaseTypeMapper


class TypeScriptTypeMapper(BaseTypeMapper):
    language = "typescript"
    keywords = frozenset({
        "break", "case", "catch", "class", "const", "continue", "debugger",
        "default", "delete", "do", "else", "enum", "export", "extends", "false",
        "finally", "for", "function", "if", "import", "in", "instanceof", "new",
        "null", "return", "super", "switch", "this", "throw", "true", "try",
        "typeof", "var", "void", "while", "with", "implements", "interface",
        "let", "package", "private", "protected", "public", "static", "yield",
    })

    TYPE_MAP = {
        FieldType.INTEGER: "number",
        FieldType.LONG: "number",
        FieldType.SHORT: "number",
        FieldType.BYTE: "number",
        # Decimals travel as strings to keep their precision
        FieldType.DECIMAL: "string",
        FieldType.FLOAT: "number",
        FieldType.DOUBLE: "number",
        FieldType.BOOLEAN: "boolean",
        FieldType.STRING: "string",
        FieldType.DATE: "string",
        FieldType.TIME: "string",
        FieldType.DATETIME: "Date",
        FieldType.UUID: "string",
        FieldType.JSON: "Record<string, unknown>",
        FieldType.BINARY: "Buffer",
        FieldType.DURATION: "string",
    }
    FALLBACK_TYPE = "unknown"

    COLUMN_TYPES = {
        FieldType.INTEGER: "int",
        FieldType.LONG: "bigint",
        FieldType.SHORT: "smallint",
        FieldType.BYTE: "smallint",
        FieldType.DECIMAL: "decimal",
        FieldType.FLOAT: "real",
        FieldType.DOUBLE: "double precision",
        FieldType.BOOLEAN: "boolean",
        FieldType.STRING: "varchar",
        FieldType.DATE: "date",
        FieldType.TIME: "time",
        FieldType.DATETIME: "timestamp",
        FieldType.UUID: "uuid",
        FieldType.JSON: "jsonb",
        FieldType.BINARY: "bytea",
        FieldType.DURATION: "interval",
    }

    VALIDATORS = {
        FieldType.INTEGER: "IsInt",
        FieldType.LONG: "IsInt",
        FieldType.SHORT: "IsInt",
        FieldType.BYTE: "IsInt",
        FieldType.DECIMAL: "IsNumberString",
        FieldType.FLOAT: "IsNumber",
        FieldType.DOUBLE: "IsNumber",
        FieldType.BOOLEAN: "IsBoolean",
        FieldType.STRING: "IsString",
        FieldType.DATE: "IsDateString",
        FieldType.TIME: "IsString",
        FieldType.DATETIME: "IsDateString",
        FieldType.UUID: "IsUUID",
        FieldType.JSON: "IsObject",
    }

    def list_type(self, type_name: str) -> str:
        if " " in type_name or "|" in type_name:
            return f"Array<{type_name}>"
        return f"{type_name}[]"

    def nullable_type(self, type_name: str) -> str:
        return f"{type_name} | null"

    def string_literal(self, text: str) -> str:
        escaped = text.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"

    def column_options(self, column: SqlColumn) -> str:
        """TypeORM ``@Column`` options object."""
        column_type = "text" if column.is_string and not column.length else self.COLUMN_TYPES.get(
            column.element_type if column.is_array else column.field_type, "text"
        )
        options = [f"name: '{column.name}'", f"type: '{column_type}'"]
        if column.is_array:
            options.append("array: true")
        if column.is_string and column.length:
            options.append(f"length: {column.length}")
        if column.field_type == FieldType.DECIMAL and column.precision:
            options.append(f"precision: {column.precision}")
            options.append(f"scale: {column.scale or 0}")
        if column.nullable:
            options.append("nullable: true")
        if column.unique:
            options.append("unique: true")
        default = self.default_value(column)
        if default is not None:
            options.append(f"default: {default}")
        return "{ " + ", ".join(options) + " }"

    def validator_decorators(self, column: SqlColumn) -> List[str]:
        """class-validator decorators for a create DTO property."""
        decorators = []
        if column.nullable:
            decorators.append("@IsOptional()")
        else:
            decorators.append("@IsNotEmpty()" if column.is_string else "@IsDefined()")
        if column.is_array:
            decorators.append("@IsArray()")
        else:
            validator = self.VALIDATORS.get(column.field_type)
            if validator == "IsString" and "email" in column.name.lower():
                validator = "IsEmail"
            if validator:
                decorators.append(f"@{validator}()")
        if column.is_string and column.length:
            decorators.append(f"@MaxLength({column.length})")
        return decorators

    def validator_imports(self, columns) -> List[str]:
        names = set()
        for column in columns:
            for decorator in self.validator_decorators(column):
                names.add(decorator[1:decorator.index("(")])
        return sorted(names)
