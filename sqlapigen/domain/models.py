"""
Schema object model.

These dataclasses describe a parsed SQL schema (tables, columns, keys,
indexes, stored functions) and the relationships between tables. They are
the single input of every code generator and do not depend on any target
language.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..constants import ColumnNames
from .naming import (
    is_base_column,
    pluralize,
    singularize,
    to_camel_case,
    to_entity_name,
    to_kebab_case,
    to_property_name,
    to_snake_case,
)


class FieldType(Enum):
    """Canonical, language-neutral column types."""

    INTEGER = "integer"
    LONG = "long"
    SHORT = "short"
    BYTE = "byte"
    DECIMAL = "decimal"
    FLOAT = "float"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    STRING = "string"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    UUID = "uuid"
    JSON = "json"
    BINARY = "binary"
    DURATION = "duration"
    ARRAY = "array"
    UNKNOWN = "unknown"


NUMERIC_TYPES = frozenset({
    FieldType.INTEGER, FieldType.LONG, FieldType.SHORT, FieldType.BYTE,
    FieldType.DECIMAL, FieldType.FLOAT, FieldType.DOUBLE,
})
TEMPORAL_TYPES = frozenset({FieldType.DATE, FieldType.TIME, FieldType.DATETIME})


class RelationType(Enum):
    """Types of relationships between tables."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"
    MANY_TO_ONE = "many_to_one"
    MANY_TO_MANY = "many_to_many"


class ForeignKeyAction(Enum):
    """Referential actions for ON DELETE / ON UPDATE."""

    CASCADE = "CASCADE"
    SET_NULL = "SET NULL"
    SET_DEFAULT = "SET DEFAULT"
    RESTRICT = "RESTRICT"
    NO_ACTION = "NO ACTION"

    @classmethod
    def from_sql(cls, text: Optional[str]) -> "ForeignKeyAction":
        """Parse ``SET NULL`` style text; anything unknown is NO_ACTION."""
        if not text:
            return cls.NO_ACTION
        normalized = " ".join(text.upper().replace("_", " ").split())
        for action in cls:
            if action.value == normalized:
                return action
        return cls.NO_ACTION


class IndexType(Enum):
    BTREE = "btree"
    HASH = "hash"
    GIN = "gin"
    GIST = "gist"
    BRIN = "brin"

    @classmethod
    def from_sql(cls, text: Optional[str]) -> "IndexType":
        if not text:
            return cls.BTREE
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.BTREE


class ParameterMode(Enum):
    IN = "IN"
    OUT = "OUT"
    INOUT = "INOUT"


class FunctionType(Enum):
    FUNCTION = "FUNCTION"
    PROCEDURE = "PROCEDURE"


@dataclass
class SqlColumn:
    """A table column with its type and constraints."""

    name: str
    sql_type: str
    field_type: Optional[FieldType] = None
    nullable: bool = True
    primary_key: bool = False
    unique: bool = False
    auto_increment: bool = False
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default_value: Optional[str] = None
    comment: Optional[str] = None

    def __post_init__(self):
        from .sql_types import resolve_field_type

        if self.field_type is None:
            self.field_type = resolve_field_type(self.sql_type)
        if self.primary_key:
            self.nullable = False

    @property
    def field_name(self) -> str:
        """camelCase property name (``user__id`` -> ``userId``)."""
        return to_camel_case(self.name)

    @property
    def snake_name(self) -> str:
        return to_snake_case(self.name)

    @property
    def is_string(self) -> bool:
        return self.field_type == FieldType.STRING

    @property
    def is_numeric(self) -> bool:
        return self.field_type in NUMERIC_TYPES

    @property
    def is_temporal(self) -> bool:
        return self.field_type in TEMPORAL_TYPES

    @property
    def is_array(self) -> bool:
        return self.field_type == FieldType.ARRAY

    @property
    def element_type(self) -> FieldType:
        """Element type for array columns, the column type otherwise."""
        from .sql_types import element_field_type

        return element_field_type(self.sql_type)


@dataclass
class SqlForeignKey:
    """A foreign key constraint from one column to a referenced table."""

    column_name: str
    referenced_table: Optional[str]
    referenced_column: str = "id"
    name: Optional[str] = None
    on_delete: ForeignKeyAction = ForeignKeyAction.NO_ACTION
    on_update: ForeignKeyAction = ForeignKeyAction.NO_ACTION

    @property
    def referenced_entity_name(self) -> Optional[str]:
        """Entity name of the referenced table (``categories`` -> ``Category``)."""
        if not self.referenced_table:
            return None
        return to_entity_name(self.referenced_table.split(".")[-1])

    @property
    def property_name(self) -> str:
        """camelCase reference property (``created_by_id`` -> ``createdBy``)."""
        return to_camel_case(to_property_name(self.column_name))

    def infer_relation_type(self, source_table: "SqlTable") -> RelationType:
        if source_table.is_junction_table:
            return RelationType.MANY_TO_MANY
        column = source_table.get_column(self.column_name)
        if column is not None and column.unique:
            return RelationType.ONE_TO_ONE
        return RelationType.MANY_TO_ONE


@dataclass
class SqlIndex:
    name: str
    table_name: str
    columns: List[str] = field(default_factory=list)
    unique: bool = False
    index_type: IndexType = IndexType.BTREE


@dataclass
class SqlParameter:
    name: str
    sql_type: str
    mode: ParameterMode = ParameterMode.IN
    field_type: Optional[FieldType] = None

    def __post_init__(self):
        from .sql_types import resolve_field_type

        if self.field_type is None:
            self.field_type = resolve_field_type(self.sql_type)


@dataclass
class SqlFunction:
    """A stored function or procedure declared in the schema."""

    name: str
    function_type: FunctionType = FunctionType.FUNCTION
    parameters: List[SqlParameter] = field(default_factory=list)
    return_type: Optional[str] = None
    language: str = "sql"
    body: Optional[str] = None

    @property
    def method_name(self) -> str:
        return to_camel_case(self.name)


@dataclass
class SqlTable:
    """A table with its columns, keys and indexes."""

    name: str
    schema: Optional[str] = None
    comment: Optional[str] = None
    columns: List[SqlColumn] = field(default_factory=list)
    foreign_keys: List[SqlForeignKey] = field(default_factory=list)
    indexes: List[SqlIndex] = field(default_factory=list)
    primary_key_columns: List[str] = field(default_factory=list)
    unique_constraints: List[List[str]] = field(default_factory=list)
    check_constraints: List[str] = field(default_factory=list)

    @property
    def is_junction_table(self) -> bool:
        """Exactly two foreign keys that together form the primary key."""
        if len(self.foreign_keys) != 2 or len(self.primary_key_columns) != 2:
            return False
        pk = {column.lower() for column in self.primary_key_columns}
        return all(fk.column_name.lower() in pk for fk in self.foreign_keys)

    @property
    def is_audit_table(self) -> bool:
        lowered = self.name.lower()
        return lowered.endswith(ColumnNames.AUDIT_TABLE_SUFFIXES) or lowered in ColumnNames.AUDIT_TABLE_NAMES

    @property
    def entity_name(self) -> str:
        return to_entity_name(self.name)

    @property
    def entity_variable_name(self) -> str:
        return to_camel_case(self.entity_name)

    @property
    def module_name(self) -> str:
        return self.name.lower().replace("_", "")

    @property
    def snake_name(self) -> str:
        return to_snake_case(singularize(self.name))

    @property
    def kebab_name(self) -> str:
        return to_kebab_case(pluralize(singularize(self.name)))

    def get_column(self, name: str) -> Optional[SqlColumn]:
        lowered = name.lower()
        for column in self.columns:
            if column.name.lower() == lowered:
                return column
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None

    def get_foreign_key(self, column_name: str) -> Optional[SqlForeignKey]:
        lowered = column_name.lower()
        for fk in self.foreign_keys:
            if fk.column_name.lower() == lowered:
                return fk
        return None

    @property
    def primary_key_column(self) -> Optional[SqlColumn]:
        if not self.primary_key_columns:
            return None
        return self.get_column(self.primary_key_columns[0])

    @property
    def has_composite_primary_key(self) -> bool:
        return len(self.primary_key_columns) > 1

    @property
    def foreign_key_column_names(self) -> List[str]:
        return [fk.column_name.lower() for fk in self.foreign_keys]

    @property
    def business_columns(self) -> List[SqlColumn]:
        """Columns that are not keys and not supplied by the base entity."""
        fk_columns = set(self.foreign_key_column_names)
        return [
            column for column in self.columns
            if not column.primary_key
            and column.name.lower() not in fk_columns
            and not is_base_column(column.name)
        ]

    @property
    def extends_base(self) -> bool:
        return any(self.has_column(marker) for marker in ColumnNames.BASE_MARKERS)

    @property
    def supports_soft_delete(self) -> bool:
        return self.has_column(ColumnNames.SOFT_DELETE)

    @property
    def table_unique_constraints(self) -> List[List[str]]:
        """UNIQUE constraints not already carried by a unique column."""
        constraints = []
        for columns in self.unique_constraints:
            if len(columns) == 1:
                column = self.get_column(columns[0])
                if column is not None and column.unique:
                    continue
            constraints.append(columns)
        return constraints


@dataclass
class TableRelationship:
    """A foreign key resolved against both of its tables."""

    source_table: SqlTable
    target_table: SqlTable
    foreign_key: SqlForeignKey
    relation_type: RelationType

    @property
    def property_name(self) -> str:
        return self.foreign_key.property_name

    @property
    def source_entity(self) -> str:
        return self.source_table.entity_name

    @property
    def target_entity(self) -> str:
        return self.target_table.entity_name


@dataclass
class ManyToManyRelation:
    """A many-to-many link through a junction table, seen from one side."""

    junction_table: SqlTable
    join_column: str
    inverse_join_column: str
    target_table: SqlTable

    @property
    def property_name(self) -> str:
        """Collection name on the owning entity (``roles``)."""
        return to_camel_case(pluralize(to_snake_case(self.target_table.entity_name)))

    @property
    def target_entity(self) -> str:
        return self.target_table.entity_name


@dataclass
class SqlSchema:
    """A parsed schema: tables, functions and whatever could not be parsed."""

    name: str = "schema"
    source_file: Optional[str] = None
    tables: List[SqlTable] = field(default_factory=list)
    functions: List[SqlFunction] = field(default_factory=list)
    standalone_indexes: List[SqlIndex] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)
    parse_errors: List[str] = field(default_factory=list)

    @property
    def entity_tables(self) -> List[SqlTable]:
        """Tables that become entities: not junction tables, not audit tables."""
        return [t for t in self.tables if not t.is_junction_table and not t.is_audit_table]

    @property
    def junction_tables(self) -> List[SqlTable]:
        return [t for t in self.tables if t.is_junction_table]

    def get_table(self, name: Optional[str]) -> Optional[SqlTable]:
        if not name:
            return None
        lowered = name.split(".")[-1].lower()
        for table in self.tables:
            if table.name.lower() == lowered:
                return table
        return None

    def indexes_for(self, table: SqlTable) -> List[SqlIndex]:
        """Inline indexes of ``table`` followed by the CREATE INDEX statements on it."""
        lowered = table.name.lower()
        standalone = [
            index for index in self.standalone_indexes
            if index.table_name.split(".")[-1].lower() == lowered
        ]
        return table.indexes + standalone

    def all_relationships(self) -> List[TableRelationship]:
        relationships = []
        for table in self.tables:
            for fk in table.foreign_keys:
                target = self.get_table(fk.referenced_table)
                if target is None:
                    continue
                relationships.append(
                    TableRelationship(
                        source_table=table,
                        target_table=target,
                        foreign_key=fk,
                        relation_type=fk.infer_relation_type(table),
                    )
                )
        return relationships

    def tables_by_module(self) -> Dict[str, List[SqlTable]]:
        grouped: Dict[str, List[SqlTable]] = {}
        for table in self.entity_tables:
            grouped.setdefault(table.module_name, []).append(table)
        return grouped

    def functions_by_table(self) -> Dict[str, List[SqlFunction]]:
        """Attach each function to the first table whose singular name it contains."""
        grouped: Dict[str, List[SqlFunction]] = {}
        for function in self.functions:
            lowered = function.name.lower()
            key = ColumnNames.GLOBAL_FUNCTIONS_KEY
            for table in self.entity_tables:
                if singularize(table.name).lower() in lowered:
                    key = table.name
                    break
            grouped.setdefault(key, []).append(function)
        return grouped

    def validate(self) -> List[str]:
        """Return human-readable issues; an empty list means the schema is usable."""
        issues = []
        for table in self.tables:
            if not table.primary_key_columns:
                issues.append(f"Table '{table.name}' has no primary key")
            for fk in table.foreign_keys:
                if self.get_table(fk.referenced_table) is None:
                    issues.append(
                        f"Foreign key in '{table.name}' references non-existent table '{fk.referenced_table}'"
                    )

        seen: Dict[str, str] = {}
        for table in self.entity_tables:
            entity = table.entity_name
            if entity in seen:
                issues.append(f"Multiple tables would generate entity name '{entity}'")
            else:
                seen[entity] = table.name
        return issues
