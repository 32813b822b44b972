"""
Template context construction.

Every template receives the same shape: a project context (names, versions,
feature flags, options) with a list of ``EntityContext`` objects, one per
entity table, whose names and types were already resolved by the
generator's type mapper.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set

from ..constants import ColumnNames, DefaultConfig
from ..domain.models import FieldType, RelationType, SqlColumn, SqlFunction, SqlSchema, SqlTable
from ..domain.naming import (
    is_base_column,
    pluralize,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_snake_case,
)
from ..domain.relationships import RelationshipAnalyzer

if TYPE_CHECKING:
    from .base import Feature, ProjectConfig, ProjectGenerator

logger = logging.getLogger(__name__)

FILTERABLE_TYPES = frozenset({
    FieldType.STRING, FieldType.BOOLEAN, FieldType.INTEGER, FieldType.LONG,
    FieldType.SHORT, FieldType.UUID, FieldType.DATE,
})

RATE_LIMIT_PERIODS = {"second": 1, "minute": 60, "hour": 3600, "day": 86400}


def sample_value(column: SqlColumn, variant: int = 0) -> Any:
    """Deterministic JSON-compatible example value for generated tests."""
    field_type = column.field_type
    if field_type == FieldType.STRING:
        if "email" in column.name.lower():
            value = f"user{variant}@example.com"
        else:
            value = f"{'updated' if variant else 'test'} {column.name}"
        return value[:column.length] if column.length else value
    if field_type in (FieldType.INTEGER, FieldType.LONG, FieldType.SHORT, FieldType.BYTE):
        return 1 + variant
    if field_type == FieldType.DECIMAL:
        return 10.5 + variant
    if field_type in (FieldType.FLOAT, FieldType.DOUBLE):
        return 1.5 + variant
    if field_type == FieldType.BOOLEAN:
        return variant == 0
    if field_type == FieldType.DATE:
        return f"2024-01-{15 + variant}"
    if field_type == FieldType.TIME:
        return f"{10 + variant}:30:00"
    if field_type == FieldType.DATETIME:
        return f"2024-01-{15 + variant}T10:30:00"
    if field_type == FieldType.UUID:
        return f"123e4567-e89b-12d3-a456-42661417400{variant}"
    if field_type == FieldType.JSON:
        return {"key": f"value{variant}"}
    if field_type == FieldType.ARRAY:
        return []
    if field_type == FieldType.DURATION:
        return f"PT{1 + variant}H"
    if field_type == FieldType.BINARY:
        return "aGVsbG8="
    return f"value{variant}"


@dataclass
class FieldContext:
    """A column as seen by templates."""

    column: SqlColumn
    name: str
    column_name: str
    type: str
    base_type: str
    json_name: str
    snake_name: str
    pascal_name: str
    field_type: str
    nullable: bool
    primary_key: bool
    unique: bool
    auto_increment: bool
    length: Optional[int]
    precision: Optional[int]
    scale: Optional[int]
    default: Optional[str]
    is_foreign_key: bool
    sample: Any
    sample_updated: Any
    comment: Optional[str] = None
    references: Optional[str] = None
    on_delete: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_string(self) -> bool:
        return self.column.is_string

    @property
    def is_numeric(self) -> bool:
        return self.column.is_numeric

    @property
    def is_boolean(self) -> bool:
        return self.column.field_type == FieldType.BOOLEAN

    @property
    def is_temporal(self) -> bool:
        return self.column.is_temporal

    @property
    def is_array(self) -> bool:
        return self.column.is_array

    @property
    def required(self) -> bool:
        return not self.nullable and self.default is None and self.column.default_value is None


@dataclass
class RelationContext:
    """A relationship as seen from one entity."""

    kind: str
    property_name: str
    target_entity: str
    target_table: str
    target_snake: str
    target_kebab: str
    target_variable: str
    target_module: str
    target_pk_type: str
    fk_column: Optional[str] = None
    fk_field: Optional[FieldContext] = None
    referenced_column: Optional[str] = None
    mapped_by: Optional[str] = None
    join_table: Optional[str] = None
    join_column: Optional[str] = None
    inverse_join_column: Optional[str] = None
    nullable: bool = True
    on_delete: str = "NO ACTION"

    @property
    def snake_property(self) -> str:
        return to_snake_case(self.property_name)

    @property
    def pascal_property(self) -> str:
        return to_pascal_case(self.snake_property)


@dataclass
class FunctionContext:
    """A stored function attached to an entity or to the project."""

    function: SqlFunction
    name: str
    method_name: str
    snake_name: str
    parameters: List[Dict[str, str]]
    return_type: Optional[str]
    is_procedure: bool


@dataclass
class EntityContext:
    """Everything templates need to render the files of one entity."""

    table: SqlTable
    table_name: str
    name: str
    variable: str
    snake: str
    plural_snake: str
    plural_camel: str
    plural_pascal: str
    kebab: str
    title: str
    module_name: str
    endpoint: str
    comment: Optional[str]
    pk: FieldContext
    columns: List[FieldContext]
    fields: List[FieldContext]
    business_fields: List[FieldContext]
    reference_fields: List[FieldContext]
    writable_fields: List[FieldContext]
    audit_fields: List[FieldContext]
    filter_fields: List[FieldContext]
    relations: List[RelationContext]
    inverse_relations: List[RelationContext]
    many_to_many: List[RelationContext]
    functions: List[FunctionContext]
    imports: List[str]
    has_created_at: bool
    has_updated_at: bool
    has_deleted_at: bool
    soft_delete: bool
    auditing: bool
    extends_base: bool

    @property
    def pk_type(self) -> str:
        return self.pk.base_type

    @property
    def pk_name(self) -> str:
        return self.pk.name

    @property
    def has_relations(self) -> bool:
        return bool(self.relations or self.inverse_relations or self.many_to_many)

    @property
    def pk_assigned(self) -> bool:
        """True when clients must supply the primary key on create."""
        return not self.pk.auto_increment and self.pk.column.default_value is None

    @property
    def create_fields(self) -> List[FieldContext]:
        return ([self.pk] if self.pk_assigned else []) + self.writable_fields

    @property
    def path_vars(self) -> Dict[str, str]:
        return {
            "entity_name": self.name,
            "entity_snake": self.snake,
            "entity_kebab": self.kebab,
            "entity_slug": to_kebab_case(self.snake),
            "entity_variable": self.variable,
            "entity_plural_snake": self.plural_snake,
            "entity_module": self.module_name,
            "table_name": self.table_name,
        }


def _build_field(column: SqlColumn, table: SqlTable, generator: "ProjectGenerator") -> FieldContext:
    mapper = generator.type_mapper
    fk = table.get_foreign_key(column.name)
    return FieldContext(
        column=column,
        name=mapper.field_name(column.name),
        column_name=column.name,
        type=mapper.column_type(column),
        base_type=mapper.base_type(column),
        json_name=to_camel_case(column.name),
        snake_name=to_snake_case(column.name),
        pascal_name=to_pascal_case(column.name),
        field_type=column.field_type.value,
        nullable=column.nullable,
        primary_key=column.primary_key,
        unique=column.unique,
        auto_increment=column.auto_increment,
        length=column.length,
        precision=column.precision,
        scale=column.scale,
        default=mapper.default_value(column),
        is_foreign_key=fk is not None,
        sample=sample_value(column, 0),
        sample_updated=sample_value(column, 1),
        comment=column.comment,
        references=f"{fk.referenced_table.split('.')[-1]}.{fk.referenced_column}" if fk and fk.referenced_table else None,
        on_delete=fk.on_delete.value if fk else None,
        extras=generator.field_extras(column),
    )


def _generates_entity(table: SqlTable) -> bool:
    return not table.is_junction_table and not table.is_audit_table and table.primary_key_column is not None


def _relation_names(table: SqlTable, mapper) -> Dict[str, str]:
    snake = to_snake_case(table.entity_name)
    return {
        "target_entity": table.entity_name,
        "target_table": table.name,
        "target_snake": table.snake_name,
        "target_kebab": to_kebab_case(pluralize(snake)),
        "target_variable": mapper.safe_name(table.entity_variable_name),
        "target_module": table.module_name,
        "target_pk_type": mapper.primary_key_type(table),
    }


def _build_function(function: SqlFunction, mapper) -> FunctionContext:
    return FunctionContext(
        function=function,
        name=function.name,
        method_name=mapper.safe_name(to_camel_case(function.name)),
        snake_name=to_snake_case(function.name),
        parameters=[
            {
                "name": mapper.safe_name(to_camel_case(param.name)),
                "snake_name": to_snake_case(param.name),
                "sql_name": param.name,
                "type": mapper.map_field_type(param.field_type),
                "mode": param.mode.value,
            }
            for param in function.parameters
        ],
        return_type=function.return_type,
        is_procedure=function.function_type.value == "PROCEDURE",
    )


def build_entity_context(
    table: SqlTable,
    analyzer: RelationshipAnalyzer,
    generator: "ProjectGenerator",
    features: Set["Feature"],
    api_prefix: str,
    functions: Optional[List[SqlFunction]] = None,
) -> EntityContext:
    from .base import Feature

    mapper = generator.type_mapper
    columns = [_build_field(column, table, generator) for column in table.columns]
    by_name = {f.column_name.lower(): f for f in columns}

    pk_column = table.primary_key_column
    if table.has_composite_primary_key:
        logger.warning(
            f"Table '{table.name}' has a composite primary key; using '{pk_column.name}' as the entity id."
        )
    pk = by_name[pk_column.name.lower()]

    business_names = {column.name.lower() for column in table.business_columns}
    fields = [f for f in columns if f.column_name.lower() != pk_column.name.lower()]
    business_fields = [f for f in fields if f.column_name.lower() in business_names]
    reference_fields = [f for f in fields if f.is_foreign_key]
    writable_fields = [f for f in fields if not is_base_column(f.column_name)]
    audit_fields = [f for f in fields if is_base_column(f.column_name)]

    relations = []
    for relationship in analyzer.relationships_for(table):
        if relationship.relation_type == RelationType.MANY_TO_MANY:
            continue
        if not _generates_entity(relationship.target_table):
            continue
        fk = relationship.foreign_key
        fk_field = by_name.get(fk.column_name.lower())
        relations.append(
            RelationContext(
                kind=relationship.relation_type.value,
                property_name=mapper.safe_name(relationship.property_name),
                fk_column=fk.column_name,
                fk_field=fk_field,
                referenced_column=fk.referenced_column,
                nullable=fk_field.nullable if fk_field is not None else True,
                on_delete=fk.on_delete.value,
                **_relation_names(relationship.target_table, mapper),
            )
        )

    inverse_relations = []
    # Collections are mapped by the owning side's reference
    if Feature.ONE_TO_MANY in features and Feature.MANY_TO_ONE in features:
        for relationship in analyzer.inverse_relationships(table):
            source = relationship.source_table
            if not _generates_entity(source):
                continue
            collection = to_camel_case(pluralize(to_snake_case(source.entity_name)))
            # Two foreign keys from the same table need distinct collection names
            if any(r.target_entity == source.entity_name for r in inverse_relations):
                collection = to_camel_case(
                    f"{to_snake_case(relationship.property_name)}_{pluralize(to_snake_case(source.entity_name))}"
                )
            inverse_relations.append(
                RelationContext(
                    kind=RelationType.ONE_TO_MANY.value,
                    property_name=mapper.safe_name(collection),
                    fk_column=relationship.foreign_key.column_name,
                    mapped_by=relationship.property_name,
                    **_relation_names(source, mapper),
                )
            )

    many_to_many = []
    if Feature.MANY_TO_MANY in features:
        for link in analyzer.many_to_many(table):
            if not _generates_entity(link.target_table):
                continue
            many_to_many.append(
                RelationContext(
                    kind=RelationType.MANY_TO_MANY.value,
                    property_name=mapper.safe_name(link.property_name),
                    join_table=link.junction_table.name,
                    join_column=link.join_column,
                    inverse_join_column=link.inverse_join_column,
                    **_relation_names(link.target_table, mapper),
                )
            )

    if Feature.MANY_TO_ONE not in features:
        relations = []

    has_deleted_at = table.has_column(ColumnNames.SOFT_DELETE)
    has_created_at = table.has_column("created_at")
    has_updated_at = table.has_column("updated_at")

    snake = table.snake_name
    plural_snake = pluralize(snake)
    return EntityContext(
        table=table,
        table_name=table.name,
        name=table.entity_name,
        variable=mapper.safe_name(table.entity_variable_name),
        snake=snake,
        plural_snake=plural_snake,
        plural_camel=to_camel_case(plural_snake),
        plural_pascal=to_pascal_case(plural_snake),
        kebab=table.kebab_name,
        title=" ".join(word.capitalize() for word in snake.split("_")),
        module_name=table.module_name,
        endpoint=f"{api_prefix.rstrip('/')}/{table.kebab_name}",
        comment=table.comment,
        pk=pk,
        columns=columns,
        fields=fields,
        business_fields=business_fields,
        reference_fields=reference_fields,
        writable_fields=writable_fields,
        audit_fields=audit_fields,
        filter_fields=[
            f for f in writable_fields if f.column.field_type in FILTERABLE_TYPES
        ] if Feature.FILTERING in features else [],
        relations=relations,
        inverse_relations=inverse_relations,
        many_to_many=many_to_many,
        functions=[_build_function(function, mapper) for function in functions or []],
        imports=mapper.required_imports(table.columns),
        has_created_at=has_created_at,
        has_updated_at=has_updated_at,
        has_deleted_at=has_deleted_at,
        soft_delete=has_deleted_at and Feature.SOFT_DELETE in features,
        auditing=(has_created_at or has_updated_at) and Feature.AUDITING in features,
        extends_base=table.extends_base,
    )


def parse_rate_limit(rate_limit: str):
    """``100/minute`` -> (100, 'minute', 60)."""
    count, _, unit = rate_limit.partition("/")
    unit = unit.strip().lower() or "minute"
    return int(count), unit, RATE_LIMIT_PERIODS.get(unit, 60)


def build_project_context(
    schema: SqlSchema,
    config: "ProjectConfig",
    generator: "ProjectGenerator",
    features: Set["Feature"],
) -> Dict[str, Any]:
    from .base import Feature

    api_prefix = config.option("api_prefix", DefaultConfig.API_PREFIX)
    analyzer = RelationshipAnalyzer(schema)
    functions_by_table = schema.functions_by_table()

    entities = []
    for table in schema.entity_tables:
        if table.primary_key_column is None:
            logger.warning(f"Table '{table.name}' has no primary key, skipping entity generation.")
            continue
        entities.append(
            build_entity_context(
                table,
                analyzer,
                generator,
                features,
                api_prefix,
                functions=functions_by_table.get(table.name),
            )
        )

    rate_count, rate_unit, rate_seconds = parse_rate_limit(
        config.option("rate_limit", DefaultConfig.RATE_LIMIT)
    )
    project_snake = to_snake_case(config.project_name)
    project_slug = to_kebab_case(config.project_name)
    package_path = config.base_package.replace(".", "/")

    return {
        "generator": {
            "language": generator.language,
            "framework": generator.framework,
            "display_name": generator.display_name,
        },
        "project_name": config.project_name,
        "project_slug": project_slug,
        "project_snake": project_snake,
        "project_pascal": to_pascal_case(project_snake),
        "project_title": " ".join(word.capitalize() for word in project_snake.split("_")),
        "base_package": config.base_package,
        "package_path": package_path,
        "language_version": config.language_version or generator.default_language_version,
        "framework_version": config.framework_version or generator.default_framework_version,
        "features": sorted(feature.name for feature in features),
        "has": {feature.value: feature in features for feature in Feature},
        "api_prefix": api_prefix.rstrip("/"),
        "jwt_access_minutes": config.option("jwt_access_token_minutes", DefaultConfig.JWT_ACCESS_TOKEN_MINUTES),
        "jwt_refresh_days": config.option("jwt_refresh_token_days", DefaultConfig.JWT_REFRESH_TOKEN_DAYS),
        "cache_ttl_seconds": config.option("cache_ttl_seconds", DefaultConfig.CACHE_TTL_SECONDS),
        "cache_max_entries": DefaultConfig.CACHE_MAX_ENTRIES,
        "password_reset_minutes": config.option(
            "password_reset_token_minutes", DefaultConfig.PASSWORD_RESET_TOKEN_MINUTES
        ),
        "mail_from": config.option("mail_from", DefaultConfig.MAIL_FROM),
        "rate_limit": f"{rate_count}/{rate_unit}",
        "rate_limit_count": rate_count,
        "rate_limit_unit": rate_unit,
        "rate_limit_seconds": rate_seconds,
        "default_page_size": DefaultConfig.DEFAULT_PAGE_SIZE,
        "max_page_size": DefaultConfig.MAX_PAGE_SIZE,
        "entities": entities,
        "junction_tables": schema.junction_tables,
        "global_functions": [
            _build_function(function, generator.type_mapper)
            for function in functions_by_table.get(ColumnNames.GLOBAL_FUNCTIONS_KEY, [])
        ],
        "schema_source": schema.source_file or schema.name,
        "tables": schema.tables,
        "extensions": schema.extensions,
        "indexes_for": schema.indexes_for,
        "app_port": generator.app_port,
        "first_page": generator.first_page,
        "migration_dir": generator.migration_dir,
        "paths": {
            "project_slug": project_slug,
            "project_snake": project_snake,
            "project_pascal": to_pascal_case(project_snake),
            "package_path": package_path,
        },
    }
