"""Python type mapping for FastAPI / SQLAlchemy / Pydantic projects."""

import keyword
from typing import List

from ..domain.models import FieldType, SqlColumn
from ..domain.naming import to_snake_case
from .base import BaseTypeMapper


class PythonTypeMapper(BaseTypeMapper):
    language = "python"
    keywords = frozenset(keyword.kwlist)

    TYPE_MAP = {
        FieldType.INTEGER: "int",
        FieldType.LONG: "int",
        FieldType.SHORT: "int",
        FieldType.BYTE: "int",
        FieldType.DECIMAL: "Decimal",
        FieldType.FLOAT: "float",
        FieldType.DOUBLE: "float",
        FieldType.BOOLEAN: "bool",
        FieldType.STRING: "str",
        FieldType.DATE: "date",
        FieldType.TIME: "time",
        FieldType.DATETIME: "datetime",
        FieldType.UUID: "UUID",
        FieldType.JSON: "dict",
        FieldType.BINARY: "bytes",
        FieldType.DURATION: "timedelta",
    }
    FALLBACK_TYPE = "Any"
    IMPORTS = {
        "Decimal": "from decimal import Decimal",
        "date": "from datetime import date",
        "time": "from datetime import time",
        "datetime": "from datetime import datetime",
        "timedelta": "from datetime import timedelta",
        "UUID": "from uuid import UUID",
        "Any": "from typing import Any",
        "EmailStr": "from pydantic import EmailStr",
    }

    SQLALCHEMY_TYPES = {
        FieldType.INTEGER: "Integer",
        FieldType.LONG: "BigInteger",
        FieldType.SHORT: "SmallInteger",
        FieldType.BYTE: "SmallInteger",
        FieldType.FLOAT: "Float",
        FieldType.DOUBLE: "Double",
        FieldType.BOOLEAN: "Boolean",
        FieldType.DATE: "Date",
        FieldType.TIME: "Time",
        FieldType.DATETIME: "DateTime(timezone=True)",
        FieldType.UUID: "Uuid",
        FieldType.JSON: "JSON",
        FieldType.BINARY: "LargeBinary",
        FieldType.DURATION: "Interval",
    }

    TRUE_LITERAL = "True"
    FALSE_LITERAL = "False"

    def list_type(self, type_name: str) -> str:
        return f"list[{type_name}]"

    def nullable_type(self, type_name: str) -> str:
        return f"{type_name} | None"

    def field_name(self, column_name: str) -> str:
        return self.safe_name(to_snake_case(column_name))

    def sqlalchemy_type(self, column: SqlColumn) -> str:
        if column.is_array:
            element = SqlColumn(name=column.name, sql_type=column.sql_type[:-2], field_type=column.element_type)
            return f"ARRAY({self.sqlalchemy_type(element)})"
        if column.is_string:
            return f"String({column.length or 255})"
        if column.field_type == FieldType.DECIMAL:
            scale = column.scale if column.scale is not None else 2
            return f"Numeric({column.precision or 19}, {scale})"
        return self.SQLALCHEMY_TYPES.get(column.field_type, "String")

    def sqlalchemy_imports(self, columns) -> List[str]:
        names = set()
        for column in columns:
            type_expr = self.sqlalchemy_type(column)
            names.add(type_expr.split("(")[0])
            if column.is_array:
                names.add(type_expr[len("ARRAY("):].split("(")[0].rstrip(")"))
        return sorted(names)

    def pydantic_type(self, column: SqlColumn) -> str:
        """Schema field type; email-like string columns validate as ``EmailStr``."""
        if column.is_string and "email" in column.name.lower():
            type_name = "EmailStr"
        else:
            type_name = self.base_type(column)
        if column.nullable and not column.primary_key:
            return self.nullable_type(type_name)
        return type_name

    def pydantic_imports(self, columns) -> List[str]:
        imports = set()
        for column in columns:
            for token in self.pydantic_type(column).replace("[", " ").replace("]", " ").replace("|", " ").split():
                if token in self.IMPORTS:
                    imports.add(self.IMPORTS[token])
        return sorted(imports)
