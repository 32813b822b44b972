"""
Naming convention utilities.

Converts database identifiers between snake_case, camelCase, PascalCase and
kebab-case, and handles English inflection for table and entity names.
"""

import re
from typing import Iterable, Optional

import inflect

from ..constants import ColumnNames


# Initialize inflect engine for pluralization
p = inflect.engine()

_WORD_SPLIT_RE = re.compile(r"[_\-\s]+")
_ALREADY_SINGULAR_SUFFIXES = ("ss", "us", "is")


def _split_words(name: str):
    return [word for word in _WORD_SPLIT_RE.split(name) if word]


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase, PascalCase or kebab-case to snake_case.

    Example:
        >>> to_snake_case("UserAccount")
        'user_account'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not name:
        return name

    name = re.sub(r"[\-\s]+", "_", name)
    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return re.sub("_+", "_", name).lower()


def to_kebab_case(name: str) -> str:
    """Convert any supported casing to kebab-case (``order_items`` -> ``order-items``)."""
    if not name:
        return name
    return to_snake_case(name).replace("_", "-")


def to_pascal_case(name: str) -> str:
    """
    Convert snake_case or kebab-case to PascalCase.

    Words written entirely in capitals are lower-cased after their first
    letter; mixed-case words keep their inner capitals so ``userName``
    becomes ``UserName``.

    Example:
        >>> to_pascal_case("user_name")
        'UserName'
        >>> to_pascal_case("USER_ID")
        'UserId'
    """
    if not name:
        return name

    parts = []
    for word in _split_words(name):
        rest = word[1:].lower() if word.isupper() else word[1:]
        parts.append(word[0].upper() + rest)
    return "".join(parts)


def to_camel_case(name: str) -> str:
    """
    Convert to camelCase.

    Example:
        >>> to_camel_case("user__id")
        'userId'
        >>> to_camel_case("ID")
        'id'
    """
    if not name:
        return name
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def _inflect_last_word(name: str, inflector) -> str:
    head, sep, last = name.rpartition("_")
    return f"{head}{sep}{inflector(last)}"


def _plural_word(word: str) -> str:
    if not word:
        return word
    plural = p.plural_noun(word)
    return plural if plural else word + "s"


def _singular_word(word: str) -> str:
    if not word or word.lower().endswith(_ALREADY_SINGULAR_SUFFIXES):
        return word
    singular = p.singular_noun(word)
    # inflect returns False when the word is already singular
    if singular is False or not singular:
        return word
    return singular


def pluralize(word: str) -> str:
    """
    Pluralize the last word of an identifier.

    Example:
        >>> pluralize("category")
        'categories'
        >>> pluralize("order_item")
        'order_items'
    """
    if not word:
        return word
    return _inflect_last_word(word, _plural_word)


def singularize(word: str) -> str:
    """
    Singularize the last word of an identifier.

    Words ending in ``ss``, ``us`` or ``is`` are treated as singular
    (``address``, ``status``, ``analysis``).
    """
    if not word:
        return word
    return _inflect_last_word(word, _singular_word)


def to_entity_name(table_name: str) -> str:
    """Entity class name for a table: singular, PascalCase (``order_items`` -> ``OrderItem``)."""
    if not table_name:
        return table_name
    return to_pascal_case(singularize(table_name))


def to_property_name(column_name: str) -> str:
    """Strip a trailing ``_id`` from a foreign key column name."""
    if not column_name or column_name.lower() == "id":
        return column_name
    return re.sub(r"_id$", "", column_name, flags=re.IGNORECASE)


def is_audit_field(column_name: Optional[str]) -> bool:
    """True for identity and audit bookkeeping columns."""
    if not column_name:
        return False
    return column_name.lower() in ColumnNames.AUDIT_FIELDS


def is_base_column(column_name: Optional[str]) -> bool:
    """True for columns supplied by a shared base entity."""
    if not column_name:
        return False
    return column_name.lower() in ColumnNames.BASE_COLUMNS


def safe_identifier(name: str, keywords: Iterable[str], suffix: str = "_") -> str:
    """
    Escape a reserved word of the target language.

    Example:
        >>> safe_identifier("class", {"class"})
        'class_'
    """
    if name in keywords:
        return name + suffix
    return name
