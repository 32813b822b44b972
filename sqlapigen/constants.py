"""
Centralized constants for the SQL API generator.

This module contains configuration defaults, naming sets and the canonical
SQL type table shared by the parser and the per-language type mappers.
"""

from typing import Dict, FrozenSet


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    OUTPUT_DIR = "./generated_api"
    PROJECT_NAME = "my-api"
    BASE_PACKAGE = "com.example.api"
    LANGUAGE = "java"

    API_PREFIX = "/api/v1"
    JWT_ACCESS_TOKEN_MINUTES = 30
    JWT_REFRESH_TOKEN_DAYS = 7
    RATE_LIMIT = "100/minute"
    CACHE_TTL_SECONDS = 300
    CACHE_MAX_ENTRIES = 1000
    PASSWORD_RESET_TOKEN_MINUTES = 30
    MAIL_FROM = "no-reply@example.com"

    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100

    FEATURES = [
        "CRUD",
        "PAGINATION",
        "FILTERING",
        "OPENAPI",
        "DOCKER",
        "MANY_TO_ONE",
        "ONE_TO_MANY",
        "MANY_TO_MANY",
        "UNIT_TESTS",
    ]


class OpenAPIDefaults:
    """Defaults for the generated OpenAPI document."""

    OPENAPI_VERSION = "3.0.3"
    API_VERSION = "1.0.0"
    SERVER_URL = "http://localhost:8080"


# =============================================================================
# NAMING
# =============================================================================

class ColumnNames:
    """Well-known column names."""

    # Columns supplied by a shared base entity instead of per-entity fields
    BASE_COLUMNS: FrozenSet[str] = frozenset({
        "estado",
        "fecha_creacion",
        "fecha_actualizacion",
        "fecha_eliminacion",
        "creado_por",
        "modificado_por",
        "eliminado_por",
        "version",
        "created_at",
        "updated_at",
        "deleted_at",
        "created_by",
        "updated_by",
        "deleted_by",
    })

    AUDIT_FIELDS: FrozenSet[str] = frozenset({
        "id",
        "estado",
        "activo",
        "created_at",
        "updated_at",
        "created_by",
        "updated_by",
        "deleted_at",
        "deleted_by",
    })

    BASE_MARKERS: FrozenSet[str] = frozenset({"estado", "created_at"})

    SOFT_DELETE = "deleted_at"

    AUDIT_TABLE_SUFFIXES = ("_aud", "_audit")
    AUDIT_TABLE_NAMES: FrozenSet[str] = frozenset({"revision_info"})

    GLOBAL_FUNCTIONS_KEY = "_global"


# =============================================================================
# SQL TYPES
# =============================================================================

class SqlTypeNames:
    """Canonical SQL type names grouped by FieldType member name."""

    GROUPS: Dict[str, FrozenSet[str]] = {
        "INTEGER": frozenset({"INTEGER", "INT", "INT4", "SERIAL", "SERIAL4", "MEDIUMINT"}),
        "LONG": frozenset({"BIGINT", "INT8", "BIGSERIAL", "SERIAL8"}),
        "SHORT": frozenset({"SMALLINT", "INT2", "SMALLSERIAL", "SERIAL2"}),
        "BYTE": frozenset({"TINYINT"}),
        "DECIMAL": frozenset({"DECIMAL", "NUMERIC", "NUMBER", "MONEY"}),
        "FLOAT": frozenset({"REAL", "FLOAT4"}),
        "DOUBLE": frozenset({"DOUBLE", "DOUBLE PRECISION", "FLOAT8", "FLOAT"}),
        "BOOLEAN": frozenset({"BOOLEAN", "BOOL", "BIT"}),
        "STRING": frozenset({
            "VARCHAR", "CHARACTER VARYING", "NVARCHAR", "TEXT", "CHAR", "CHARACTER",
            "NCHAR", "CLOB", "NCLOB", "MEDIUMTEXT", "LONGTEXT", "TINYTEXT", "CITEXT",
            "INET", "CIDR", "MACADDR", "ENUM", "POINT", "LINE", "POLYGON",
            "GEOMETRY", "GEOGRAPHY", "XML", "TSVECTOR",
        }),
        "DATE": frozenset({"DATE"}),
        "TIME": frozenset({"TIME", "TIMETZ", "TIME WITH TIME ZONE", "TIME WITHOUT TIME ZONE"}),
        "DATETIME": frozenset({
            "TIMESTAMP", "TIMESTAMPTZ", "DATETIME", "DATETIME2",
            "TIMESTAMP WITH TIME ZONE", "TIMESTAMP WITHOUT TIME ZONE",
        }),
        "UUID": frozenset({"UUID", "UNIQUEIDENTIFIER"}),
        "JSON": frozenset({"JSON", "JSONB"}),
        "BINARY": frozenset({"BYTEA", "BLOB", "BINARY", "VARBINARY", "LONGBLOB"}),
        "DURATION": frozenset({"INTERVAL"}),
    }

    SERIAL_TYPES: FrozenSet[str] = frozenset({
        "SERIAL", "SERIAL2", "SERIAL4", "SERIAL8", "BIGSERIAL", "SMALLSERIAL",
    })



class SqlKeywords:
    """PostgreSQL reserved words that must be quoted when used as identifiers."""

    RESERVED: FrozenSet[str] = frozenset({
        "all", "analyse", "analyze", "and", "any", "array", "as", "asc", "asymmetric",
        "authorization", "binary", "both", "case", "cast", "check", "collate", "collation",
        "column", "concurrently", "constraint", "create", "cross", "current_catalog",
        "current_date", "current_role", "current_schema", "current_time", "current_timestamp",
        "current_user", "default", "deferrable", "desc", "distinct", "do", "else", "end",
        "except", "false", "fetch", "for", "foreign", "freeze", "from", "full", "grant",
        "group", "having", "ilike", "in", "initially", "inner", "intersect", "into", "is",
        "isnull", "join", "lateral", "leading", "left", "like", "limit", "localtime",
        "localtimestamp", "natural", "not", "notnull", "null", "offset", "on", "only", "or",
        "order", "outer", "overlaps", "placing", "primary", "references", "returning", "right",
        "select", "session_user", "similar", "some", "symmetric", "system_user", "table",
        "tablesample", "then", "to", "trailing", "true", "union", "unique", "user", "using",
        "variadic", "verbose", "when", "where", "window", "with",
    })
