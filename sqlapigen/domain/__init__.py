"""
Domain module: the schema object model, naming conventions and
relationship analysis shared by the parser and every generator.
"""

from .models import (
    FieldType,
    ForeignKeyAction,
    FunctionType,
    IndexType,
    ManyToManyRelation,
    ParameterMode,
    RelationType,
    SqlColumn,
    SqlForeignKey,
    SqlFunction,
    SqlIndex,
    SqlParameter,
    SqlSchema,
    SqlTable,
    TableRelationship,
)

from .naming import (
    is_audit_field,
    pluralize,
    safe_identifier,
    singularize,
    to_camel_case,
    to_entity_name,
    to_kebab_case,
    to_pascal_case,
    to_property_name,
    to_snake_case,
)

from .relationships import RelationshipAnalyzer

from .sql_types import resolve_field_type

__all__ = [
    # Schema model
    'FieldType',
    'ForeignKeyAction',
    'FunctionType',
    'IndexType',
    'ManyToManyRelation',
    'ParameterMode',
    'RelationType',
    'SqlColumn',
    'SqlForeignKey',
    'SqlFunction',
    'SqlIndex',
    'SqlParameter',
    'SqlSchema',
    'SqlTable',
    'TableRelationship',

    # Naming
    'is_audit_field',
    'pluralize',
    'safe_identifier',
    'singularize',
    'to_camel_case',
    'to_entity_name',
    'to_kebab_case',
    'to_pascal_case',
    'to_property_name',
    'to_snake_case',

    # Relationships
    'RelationshipAnalyzer',

    # Types
    'resolve_field_type',
]
