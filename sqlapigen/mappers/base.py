"""
Base class for per-language type mappers.

A type mapper turns canonical FieldTypes into the type names of one target
language and applies that language's identifier conventions.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, FrozenSet, Iterable, List, Optional

from ..domain.models import FieldType, SqlColumn, SqlTable
from ..domain.naming import safe_identifier, to_camel_case, to_entity_name

_TYPE_TOKEN_RE = re.compile(r"[\w\.\\]+")
_NUMERIC_LITERAL_RE = re.compile(r"^-?\d+(\.\d+)?$")


class BaseTypeMapper(ABC):
    """Maps schema columns to the types and names of one language."""

    language: str = ""
    keywords: FrozenSet[str] = frozenset()
    keyword_suffix: str = "_"

    TYPE_MAP: Dict[FieldType, str] = {}
    FALLBACK_TYPE: str = "Object"
    # Type name -> import line or module needed to use it
    IMPORTS: Dict[str, str] = {}

    TRUE_LITERAL = "true"
    FALSE_LITERAL = "false"

    def map_field_type(self, field_type: FieldType) -> str:
        return self.TYPE_MAP.get(field_type, self.FALLBACK_TYPE)

    @abstractmethod
    def list_type(self, type_name: str) -> str:
        """Collection type holding ``type_name`` elements."""

    def nullable_type(self, type_name: str) -> str:
        """Type used for a nullable column; most languages use the type itself."""
        return type_name

    def base_type(self, column: SqlColumn) -> str:
        """Non-nullable type of a column; arrays map to the language list type."""
        if column.is_array:
            return self.list_type(self.map_field_type(column.element_type))
        return self.map_field_type(column.field_type)

    def column_type(self, column: SqlColumn) -> str:
        type_name = self.base_type(column)
        if column.nullable and not column.primary_key:
            return self.nullable_type(type_name)
        return type_name

    def primary_key_type(self, table: SqlTable) -> str:
        pk = table.primary_key_column
        if pk is None:
            return self.map_field_type(FieldType.LONG)
        return self.base_type(pk)

    def string_literal(self, text: str) -> str:
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    def default_value(self, column: SqlColumn) -> Optional[str]:
        """
        Literal for a column's SQL default, or None when it is an expression
        (``now()``, ``CURRENT_TIMESTAMP``) or absent.
        """
        raw = column.default_value
        if raw is None:
            return None
        raw = raw.strip()
        upper = raw.upper()

        if column.field_type == FieldType.BOOLEAN:
            if upper in ("TRUE", "'T'", "1", "'1'"):
                return self.TRUE_LITERAL
            if upper in ("FALSE", "'F'", "0", "'0'"):
                return self.FALSE_LITERAL
            return None
        if raw.startswith("'") and raw.endswith("'") and len(raw) >= 2:
            if not column.is_string:
                return None
            return self.string_literal(raw[1:-1].replace("''", "'"))
        if column.is_numeric and _NUMERIC_LITERAL_RE.match(raw):
            return raw
        return None

    def required_imports(self, columns: Iterable[SqlColumn]) -> List[str]:
        """Sorted, de-duplicated imports for the types of ``columns``."""
        imports = set()
        for column in columns:
            for token in _TYPE_TOKEN_RE.findall(self.column_type(column)):
                if token in self.IMPORTS:
                    imports.add(self.IMPORTS[token])
        return sorted(imports)

    def safe_name(self, name: str) -> str:
        return safe_identifier(name, self.keywords, self.keyword_suffix)

    def field_name(self, column_name: str) -> str:
        return self.safe_name(to_camel_case(column_name))

    def class_name(self, table_name: str) -> str:
        return to_entity_name(table_name)
