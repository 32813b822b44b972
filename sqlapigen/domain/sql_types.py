"""
Resolution of raw SQL type names into canonical field types.
"""

import re
from typing import Optional, Tuple

from ..constants import SqlKeywords, SqlTypeNames
from .models import FieldType


_TYPE_ARGS_RE = re.compile(r"\(.*\)")
_SPACES_RE = re.compile(r"\s+")
_PLAIN_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_LOOKUP = {
    type_name: FieldType[group]
    for group, type_names in SqlTypeNames.GROUPS.items()
    for type_name in type_names
}


def normalize_sql_type(sql_type: str) -> str:
    """Upper-case a SQL type and drop its arguments (``varchar(50)`` -> ``VARCHAR``)."""
    if not sql_type:
        return ""
    base = _TYPE_ARGS_RE.sub("", sql_type)
    return _SPACES_RE.sub(" ", base).strip().upper()


def is_array_type(sql_type: str) -> bool:
    return bool(sql_type) and sql_type.strip().endswith("[]")


def resolve_field_type(sql_type: Optional[str]) -> FieldType:
    """
    Map a SQL type name to a FieldType.

    Example:
        >>> resolve_field_type("VARCHAR(100)")
        <FieldType.STRING: 'string'>
        >>> resolve_field_type("int[]")
        <FieldType.ARRAY: 'array'>
    """
    if not sql_type:
        return FieldType.UNKNOWN
    if is_array_type(sql_type):
        return FieldType.ARRAY

    normalized = normalize_sql_type(sql_type)
    if normalized in _LOOKUP:
        return _LOOKUP[normalized]

    # "TIMESTAMP(6) WITH TIME ZONE" and similar keep words after the arguments
    head = normalized.split(" ")[0]
    return _LOOKUP.get(head, FieldType.UNKNOWN)


def element_field_type(sql_type: str) -> FieldType:
    """Element type of an array column (``TEXT[]`` -> STRING)."""
    if not is_array_type(sql_type):
        return resolve_field_type(sql_type)
    return resolve_field_type(sql_type.strip()[:-2])


def parse_type_arguments(sql_type: str) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """
    Extract (length, precision, scale) from type arguments.

    The first argument is always the length; with two arguments they are
    also the precision and scale.
    Non-numeric arguments (``VARCHAR(MAX)``) are ignored.
    """
    match = re.search(r"\(([^)]*)\)", sql_type or "")
    if not match:
        return None, None, None

    args = [arg.strip() for arg in match.group(1).split(",") if arg.strip()]
    numbers = [int(arg) for arg in args if arg.isdigit()]
    if len(numbers) != len(args) or not numbers:
        return None, None, None
    if len(numbers) == 1:
        return numbers[0], None, None
    return numbers[0], numbers[0], numbers[1]


def quote_identifier(name: str) -> str:
    """
    Double-quote an identifier that PostgreSQL would not accept bare.

    Schema-qualified names are quoted part by part.

    Example:
        >>> quote_identifier("order")
        '"order"'
        >>> quote_identifier("orders")
        'orders'
        >>> quote_identifier("sales.order")
        'sales."order"'
    """
    if not name:
        return name
    if "." in name and not name.startswith('"'):
        return ".".join(quote_identifier(part) for part in name.split("."))
    if name.lower() in SqlKeywords.RESERVED or not _PLAIN_IDENTIFIER_RE.match(name):
        return '"' + name.replace('"', '""') + '"'
    return name
