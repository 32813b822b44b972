"""
SQL DDL parser.

Reads CREATE TABLE / CREATE INDEX / ALTER TABLE / CREATE FUNCTION
statements into the schema object model. Statements are split and comments
stripped with sqlparse; the clauses inside each statement are read with
regular expressions. Anything that cannot be understood is recorded in
``SqlSchema.parse_errors`` and parsing continues.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

import sqlparse

from ..constants import SqlTypeNames
from ..domain.models import (
    FieldType,
    ForeignKeyAction,
    FunctionType,
    IndexType,
    ParameterMode,
    SqlColumn,
    SqlForeignKey,
    SqlFunction,
    SqlIndex,
    SqlParameter,
    SqlSchema,
    SqlTable,
)
from ..domain.sql_types import normalize_sql_type, parse_type_arguments, resolve_field_type
from ..exceptions import SchemaParseError

logger = logging.getLogger(__name__)

INLINE_SOURCE_NAME = "inline-sql"

_IDENT = r"[\w\"`\[\]$]+"
_QUALIFIED_IDENT = r"[\w\"`\[\]$\.]+"

_CREATE_TABLE_RE = re.compile(
    r"^CREATE\s+(?:(?:GLOBAL|LOCAL)\s+)?(?:TEMP(?:ORARY)?\s+)?(?:UNLOGGED\s+)?TABLE\s+"
    r"(?:IF\s+NOT\s+EXISTS\s+)?(" + _QUALIFIED_IDENT + r")\s*\(",
    re.IGNORECASE,
)
_CREATE_INDEX_RE = re.compile(
    r"^CREATE\s+(UNIQUE\s+)?INDEX\s+(?:CONCURRENTLY\s+)?(?:IF\s+NOT\s+EXISTS\s+)?"
    r"(" + _QUALIFIED_IDENT + r")?\s*ON\s+(?:ONLY\s+)?(" + _QUALIFIED_IDENT + r")"
    r"\s*(?:USING\s+(\w+)\s*)?\(",
    re.IGNORECASE,
)
_ALTER_TABLE_RE = re.compile(
    r"^ALTER\s+TABLE\s+(?:IF\s+EXISTS\s+)?(?:ONLY\s+)?(" + _QUALIFIED_IDENT + r")\s+(.*)$",
    re.IGNORECASE | re.DOTALL,
)
_ALTER_ADD_FK_RE = re.compile(
    r"ADD\s+(?:CONSTRAINT\s+(" + _IDENT + r")\s+)?FOREIGN\s+KEY\s*\(([^)]*)\)\s*"
    r"REFERENCES\s+(" + _QUALIFIED_IDENT + r")\s*(?:\(([^)]*)\))?([^,]*)",
    re.IGNORECASE,
)
_ALTER_ADD_PK_RE = re.compile(
    r"ADD\s+(?:CONSTRAINT\s+" + _IDENT + r"\s+)?PRIMARY\s+KEY\s*\(([^)]*)\)",
    re.IGNORECASE,
)
_CREATE_FUNCTION_RE = re.compile(
    r"CREATE\s+(?:OR\s+REPLACE\s+)?(FUNCTION|PROCEDURE)\s+(" + _QUALIFIED_IDENT + r")\s*"
    r"\(((?:[^()]|\([^()]*\))*)\)"
    r"\s*(?:RETURNS\s+([^$;]+?))?\s*(?:LANGUAGE\s+(\w+))?\s*AS\s*\$(\w*)\$(.*?)\$\6\$"
    r"(?:\s*LANGUAGE\s+(\w+))?",
    re.IGNORECASE | re.DOTALL,
)
_DOLLAR_BODY_RE = re.compile(r"\$(\w*)\$.*?\$\1\$", re.DOTALL)
_CREATE_EXTENSION_RE = re.compile(
    r"^CREATE\s+EXTENSION\s+(?:IF\s+NOT\s+EXISTS\s+)?(" + _IDENT + r")", re.IGNORECASE
)
_CREATE_ENUM_TYPE_RE = re.compile(
    r"^CREATE\s+TYPE\s+(" + _QUALIFIED_IDENT + r")\s+AS\s+ENUM\b", re.IGNORECASE
)
_COMMENT_ON_RE = re.compile(
    r"^COMMENT\s+ON\s+(TABLE|COLUMN)\s+(" + _QUALIFIED_IDENT + r")\s+IS\s+'((?:[^']|'')*)'",
    re.IGNORECASE,
)
_SKIPPED_CREATE_RE = re.compile(
    r"^CREATE\s+(?:OR\s+REPLACE\s+)?(?:FUNCTION|PROCEDURE|TRIGGER|VIEW|MATERIALIZED\s+VIEW|SEQUENCE|SCHEMA|TYPE|DOMAIN|ROLE|DATABASE)\b",
    re.IGNORECASE,
)

_COLUMN_RE = re.compile(
    r"^(?P<name>" + _IDENT + r")\s+"
    r"(?P<type>[A-Za-z_]\w*(?:\s+(?:VARYING|PRECISION))?"
    r"(?:\s*\([^)]*\))?"
    r"(?:\s+(?:WITH|WITHOUT)\s+TIME\s+ZONE)?"
    r"(?:\s*\[\])?)"
    r"(?P<specs>.*)$",
    re.IGNORECASE | re.DOTALL,
)
_REFERENCES_RE = re.compile(
    r"REFERENCES\s+(" + _QUALIFIED_IDENT + r")\s*(?:\(\s*(" + _IDENT + r")\s*\))?",
    re.IGNORECASE,
)
_ON_DELETE_RE = re.compile(
    r"ON\s+DELETE\s+(CASCADE|SET\s+NULL|SET\s+DEFAULT|RESTRICT|NO\s+ACTION)", re.IGNORECASE
)
_ON_UPDATE_RE = re.compile(
    r"ON\s+UPDATE\s+(CASCADE|SET\s+NULL|SET\s+DEFAULT|RESTRICT|NO\s+ACTION)", re.IGNORECASE
)
_DEFAULT_RE = re.compile(r"DEFAULT\s+('(?:[^']|'')*'|\S+)", re.IGNORECASE)
_COLUMN_COMMENT_RE = re.compile(r"COMMENT\s+'((?:[^']|'')*)'", re.IGNORECASE)
_CONSTRAINT_NAME_RE = re.compile(r"^CONSTRAINT\s+(" + _IDENT + r")\s+(.*)$", re.IGNORECASE | re.DOTALL)
_TABLE_PK_RE = re.compile(r"^PRIMARY\s+KEY\s*\(([^)]*)\)", re.IGNORECASE)
_TABLE_UNIQUE_RE = re.compile(
    r"^UNIQUE(?:\s+(?:KEY|INDEX))?(?:\s+(" + _IDENT + r"))?\s*\(([^)]*)\)", re.IGNORECASE
)
_TABLE_FK_RE = re.compile(
    r"^FOREIGN\s+KEY\s*\(([^)]*)\)\s*REFERENCES\s+(" + _QUALIFIED_IDENT + r")\s*(?:\(([^)]*)\))?(.*)$",
    re.IGNORECASE | re.DOTALL,
)
_TABLE_CHECK_RE = re.compile(r"^CHECK\s*\((.*)\)\s*$", re.IGNORECASE | re.DOTALL)
_INLINE_CHECK_RE = re.compile(r"\bCHECK\s*\(", re.IGNORECASE)
_TABLE_INDEX_RE = re.compile(
    r"^(?:INDEX|KEY)\s+(?:(" + _IDENT + r")\s*)?\(([^)]*)\)", re.IGNORECASE
)
_IGNORED_TABLE_ELEMENT_RE = re.compile(r"^(?:EXCLUDE|LIKE|FULLTEXT|SPATIAL|PERIOD)\b", re.IGNORECASE)

_AUTO_INCREMENT_MARKERS = ("AUTO_INCREMENT", "AUTOINCREMENT", "GENERATED", "IDENTITY")


def strip_identifier(identifier: Optional[str]) -> Optional[str]:
    """Remove SQL quoting from an identifier (``"users"``, `` `users` ``, ``[users]``)."""
    if identifier is None:
        return None
    return identifier.strip().strip('"`[]')


def split_qualified_name(identifier: str) -> Tuple[Optional[str], str]:
    """Split ``schema.table`` into its parts; schema is None when absent."""
    parts = [strip_identifier(part) for part in identifier.split(".")]
    if len(parts) == 1:
        return None, parts[0]
    return parts[-2], parts[-1]


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on ``separator`` outside parentheses and quotes."""
    parts = []
    depth = 0
    quote: Optional[str] = None
    current = []
    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [part for part in parts if part]


def extract_parenthesized(text: str, open_index: int) -> Tuple[str, int]:
    """
    Return the text inside the parentheses opening at ``open_index`` and the
    index just past the matching close.

    Raises:
        ValueError: If the parentheses are not balanced.
    """
    depth = 0
    quote: Optional[str] = None
    for index in range(open_index, len(text)):
        char = text[index]
        if quote:
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return text[open_index + 1:index], index + 1
    raise ValueError("unbalanced parentheses")


def _column_list(text: str) -> List[str]:
    """Column names from an index or key list, dropping ordering and length suffixes."""
    columns = []
    for part in split_top_level(text):
        name = part.split()[0]
        name = re.sub(r"\(\d+\)$", "", name)
        columns.append(strip_identifier(name))
    return columns


def _unquote_literal(value: str) -> str:
    return value.replace("''", "'")


class SqlSchemaParser:
    """Parses SQL DDL into a SqlSchema."""

    def parse_file(self, path: Union[str, Path]) -> SqlSchema:
        sql_file = Path(path)
        try:
            content = sql_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SchemaParseError(f"Cannot read schema file: {e}", source=str(sql_file)) from e
        return self.parse(content, sql_file.name)

    def parse_string(self, sql: str) -> SqlSchema:
        return self.parse(sql, INLINE_SOURCE_NAME)

    def parse(self, sql: str, source_name: str) -> SqlSchema:
        """Parse DDL text. Never raises on malformed statements."""
        schema = SqlSchema(name=source_name, source_file=source_name)
        enum_types: List[str] = []

        schema.functions.extend(self._extract_functions(sql))
        cleaned = _DOLLAR_BODY_RE.sub("''", sql)
        cleaned = sqlparse.format(cleaned, strip_comments=True)

        for raw_statement in sqlparse.split(cleaned):
            statement = raw_statement.strip().rstrip(";").strip()
            if not statement:
                continue
            try:
                self._dispatch(statement, schema, enum_types)
            except ValueError as e:
                message = f"Error parsing statement: {e}: {statement[:50]}"
                logger.warning(message)
                schema.parse_errors.append(message)

        self._resolve_enum_columns(schema, enum_types)
        logger.debug(
            f"Parsed {len(schema.tables)} tables, {len(schema.functions)} functions, "
            f"{len(schema.standalone_indexes)} indexes from {source_name}"
        )
        return schema

    def _dispatch(self, statement: str, schema: SqlSchema, enum_types: List[str]) -> None:
        statement_type = sqlparse.parse(statement)[0].get_type()

        if statement_type == "ALTER":
            self._process_alter(statement, schema)
            return

        if statement_type == "CREATE":
            if _CREATE_TABLE_RE.match(statement):
                schema.tables.append(self._parse_create_table(statement))
                return
            if _CREATE_INDEX_RE.match(statement):
                schema.standalone_indexes.append(self._parse_create_index(statement))
                return
            extension = _CREATE_EXTENSION_RE.match(statement)
            if extension:
                schema.extensions.append(strip_identifier(extension.group(1)))
                return
            enum_type = _CREATE_ENUM_TYPE_RE.match(statement)
            if enum_type:
                enum_types.append(split_qualified_name(enum_type.group(1))[1].upper())
                return
            if re.match(r"^CREATE\s+(?:\w+\s+)*TABLE\b", statement, re.IGNORECASE):
                schema.parse_errors.append(f"Could not parse CREATE TABLE: {statement[:50]}")
                return
            if not _SKIPPED_CREATE_RE.match(statement):
                logger.debug(f"Ignoring unsupported CREATE statement: {statement[:50]}")
            return

        comment = _COMMENT_ON_RE.match(statement)
        if comment:
            self._apply_comment(comment, schema)
            return

        logger.debug(f"Ignoring {statement_type} statement: {statement[:50]}")

    # --- CREATE TABLE -------------------------------------------------------

    def _parse_create_table(self, statement: str) -> SqlTable:
        header = _CREATE_TABLE_RE.match(statement)
        schema_name, table_name = split_qualified_name(header.group(1))
        try:
            body, _ = extract_parenthesized(statement, header.end() - 1)
        except ValueError:
            raise ValueError(f"Could not parse CREATE TABLE {table_name}") from None

        table = SqlTable(name=table_name, schema=schema_name)
        for element in split_top_level(body):
            self._parse_table_element(element, table)
        return table

    def _parse_table_element(self, element: str, table: SqlTable) -> None:
        constraint_name = None
        named = _CONSTRAINT_NAME_RE.match(element)
        if named:
            constraint_name = strip_identifier(named.group(1))
            element = named.group(2).strip()

        primary_key = _TABLE_PK_RE.match(element)
        if primary_key:
            table.primary_key_columns = _column_list(primary_key.group(1))
            for name in table.primary_key_columns:
                column = table.get_column(name)
                if column is not None:
                    column.primary_key = True
                    column.nullable = False
            return

        unique = _TABLE_UNIQUE_RE.match(element)
        if unique:
            columns = _column_list(unique.group(2))
            table.unique_constraints.append(columns)
            if len(columns) == 1:
                column = table.get_column(columns[0])
                if column is not None:
                    column.unique = True
            return

        foreign_key = _TABLE_FK_RE.match(element)
        if foreign_key:
            table.foreign_keys.append(
                self._build_foreign_key(
                    columns=foreign_key.group(1),
                    referenced=foreign_key.group(2),
                    referenced_columns=foreign_key.group(3),
                    actions=foreign_key.group(4),
                    name=constraint_name,
                )
            )
            return

        check = _TABLE_CHECK_RE.match(element)
        if check:
            table.check_constraints.append(check.group(1).strip())
            return

        # "key VARCHAR(100)" is a column named key, not a MySQL KEY clause
        index = _TABLE_INDEX_RE.match(element)
        if index and resolve_field_type(index.group(1)) == FieldType.UNKNOWN:
            columns = _column_list(index.group(2))
            table.indexes.append(
                SqlIndex(
                    name=strip_identifier(index.group(1)) or f"idx_{table.name}_{'_'.join(columns)}",
                    table_name=table.name,
                    columns=columns,
                )
            )
            return

        if _IGNORED_TABLE_ELEMENT_RE.match(element):
            logger.debug(f"Ignoring table element in {table.name}: {element[:40]}")
            return

        self._parse_column(element, table)

    def _parse_column(self, definition: str, table: SqlTable) -> None:
        match = _COLUMN_RE.match(definition)
        if not match:
            raise ValueError(f"Unrecognized column definition in {table.name}: {definition[:40]}")

        name = strip_identifier(match.group("name"))
        sql_type = " ".join(match.group("type").split())
        specs = match.group("specs")
        upper_specs = " ".join(specs.upper().split())
        length, precision, scale = parse_type_arguments(sql_type)

        primary_key = "PRIMARY KEY" in upper_specs
        auto_increment = (
            any(marker in upper_specs for marker in _AUTO_INCREMENT_MARKERS)
            or normalize_sql_type(sql_type) in SqlTypeNames.SERIAL_TYPES
        )
        default = _DEFAULT_RE.search(specs)
        comment = _COLUMN_COMMENT_RE.search(specs)

        column = SqlColumn(
            name=name,
            sql_type=sql_type,
            nullable="NOT NULL" not in upper_specs,
            primary_key=primary_key,
            unique="UNIQUE" in upper_specs,
            auto_increment=auto_increment,
            length=length,
            precision=precision,
            scale=scale,
            default_value=default.group(1).rstrip(",") if default else None,
            comment=_unquote_literal(comment.group(1)) if comment else None,
        )
        table.columns.append(column)
        if primary_key:
            table.primary_key_columns.append(name)

        check = _INLINE_CHECK_RE.search(specs)
        if check:
            expression, _ = extract_parenthesized(specs, check.end() - 1)
            table.check_constraints.append(" ".join(expression.split()))

        reference = _REFERENCES_RE.search(specs)
        if reference:
            table.foreign_keys.append(
                self._build_foreign_key(
                    columns=name,
                    referenced=reference.group(1),
                    referenced_columns=reference.group(2),
                    actions=specs[reference.end():],
                )
            )

    def _build_foreign_key(
        self,
        columns: str,
        referenced: str,
        referenced_columns: Optional[str],
        actions: Optional[str],
        name: Optional[str] = None,
    ) -> SqlForeignKey:
        # Composite keys keep the first column, like the generated entities do
        column_names = _column_list(columns)
        referenced_names = _column_list(referenced_columns) if referenced_columns is not None else ["id"]
        if not column_names:
            raise ValueError("foreign key without columns")
        if not referenced_names:
            raise ValueError(f"foreign key on {column_names[0]} references no columns")
        _, referenced_table = split_qualified_name(referenced)

        on_delete = _ON_DELETE_RE.search(actions or "")
        on_update = _ON_UPDATE_RE.search(actions or "")
        return SqlForeignKey(
            column_name=column_names[0],
            referenced_table=referenced_table,
            referenced_column=referenced_names[0],
            name=name,
            on_delete=ForeignKeyAction.from_sql(on_delete.group(1) if on_delete else None),
            on_update=ForeignKeyAction.from_sql(on_update.group(1) if on_update else None),
        )

    # --- CREATE INDEX / ALTER TABLE / COMMENT --------------------------------

    def _parse_create_index(self, statement: str) -> SqlIndex:
        match = _CREATE_INDEX_RE.match(statement)
        _, table_name = split_qualified_name(match.group(3))
        columns_text, _ = extract_parenthesized(statement, match.end() - 1)
        columns = _column_list(columns_text)
        index_name = match.group(2)
        return SqlIndex(
            name=split_qualified_name(index_name)[1] if index_name else f"idx_{table_name}_{'_'.join(columns)}",
            table_name=table_name,
            columns=columns,
            unique=bool(match.group(1)),
            index_type=IndexType.from_sql(match.group(4)),
        )

    def _process_alter(self, statement: str, schema: SqlSchema) -> None:
        match = _ALTER_TABLE_RE.match(statement)
        if not match:
            logger.debug(f"Ignoring ALTER statement: {statement[:50]}")
            return

        _, table_name = split_qualified_name(match.group(1))
        table = schema.get_table(table_name)
        if table is None:
            schema.parse_errors.append(f"ALTER references unknown table: {table_name}")
            return

        actions = match.group(2)
        for fk in _ALTER_ADD_FK_RE.finditer(actions):
            table.foreign_keys.append(
                self._build_foreign_key(
                    columns=fk.group(2),
                    referenced=fk.group(3),
                    referenced_columns=fk.group(4),
                    actions=fk.group(5),
                    name=strip_identifier(fk.group(1)),
                )
            )
        primary_key = _ALTER_ADD_PK_RE.search(actions)
        if primary_key:
            table.primary_key_columns = _column_list(primary_key.group(1))
            for name in table.primary_key_columns:
                column = table.get_column(name)
                if column is not None:
                    column.primary_key = True
                    column.nullable = False

    def _apply_comment(self, match: re.Match, schema: SqlSchema) -> None:
        target_kind = match.group(1).upper()
        parts = [strip_identifier(part) for part in match.group(2).split(".")]
        text = _unquote_literal(match.group(3))
        if target_kind == "TABLE":
            table = schema.get_table(parts[-1])
            if table is not None:
                table.comment = text
            return
        if len(parts) < 2:
            return
        table = schema.get_table(parts[-2])
        column = table.get_column(parts[-1]) if table is not None else None
        if column is not None:
            column.comment = text

    # --- Functions -----------------------------------------------------------

    def _extract_functions(self, sql: str) -> List[SqlFunction]:
        functions = []
        for match in _CREATE_FUNCTION_RE.finditer(sql):
            kind, name, params, returns, language, _, body, trailing_language = match.groups()
            functions.append(
                SqlFunction(
                    name=split_qualified_name(name)[1],
                    function_type=FunctionType.PROCEDURE if kind.upper() == "PROCEDURE" else FunctionType.FUNCTION,
                    parameters=self._parse_parameters(params),
                    return_type=" ".join(returns.split()) if returns else None,
                    language=(language or trailing_language or "sql").lower(),
                    body=body.strip(),
                )
            )
        return functions

    def _parse_parameters(self, params: str) -> List[SqlParameter]:
        parameters: List[SqlParameter] = []
        for raw in split_top_level(params or ""):
            # DEFAULT expressions are not part of the signature we generate
            raw = re.split(r"\s+DEFAULT\s+|\s*=\s*", raw, maxsplit=1, flags=re.IGNORECASE)[0]
            parts = raw.split(None, 2)
            mode = ParameterMode.IN
            if len(parts) >= 2 and parts[0].upper() in ParameterMode.__members__:
                mode = ParameterMode[parts[0].upper()]
                parts = parts[1:]

            if len(parts) >= 2:
                name, sql_type = parts[0], " ".join(parts[1:])
            else:
                name, sql_type = f"param{len(parameters) + 1}", parts[0]
            parameters.append(SqlParameter(name=strip_identifier(name), sql_type=sql_type, mode=mode))
        return parameters

    @staticmethod
    def _resolve_enum_columns(schema: SqlSchema, enum_types: List[str]) -> None:
        """Columns typed with a declared ENUM type are strings."""
        if not enum_types:
            return
        for table in schema.tables:
            for column in table.columns:
                if column.field_type == FieldType.UNKNOWN and normalize_sql_type(column.sql_type) in enum_types:
                    column.field_type = FieldType.STRING
