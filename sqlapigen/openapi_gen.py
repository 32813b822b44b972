import logging
from typing import Any, Dict, List, Optional, Set

import yaml

from sqlapigen.constants import DefaultConfig, OpenAPIDefaults
from sqlapigen.domain.models import FieldType, SqlColumn, SqlSchema, SqlTable
from sqlapigen.domain.naming import is_base_column, pluralize, to_camel_case, to_snake_case
from sqlapigen.generators.base import Feature
from sqlapigen.generators.context import FILTERABLE_TYPES


logger = logging.getLogger(__name__)

FIELD_TYPE_SCHEMAS: Dict[FieldType, Dict[str, Any]] = {
    FieldType.INTEGER: {"type": "integer", "format": "int32"},
    FieldType.LONG: {"type": "integer", "format": "int64"},
    FieldType.SHORT: {"type": "integer", "format": "int32"},
    FieldType.BYTE: {"type": "integer", "format": "int32"},
    FieldType.DECIMAL: {"type": "number"},
    FieldType.FLOAT: {"type": "number", "format": "float"},
    FieldType.DOUBLE: {"type": "number", "format": "double"},
    FieldType.BOOLEAN: {"type": "boolean"},
    FieldType.STRING: {"type": "string"},
    FieldType.DATE: {"type": "string", "format": "date"},
    FieldType.TIME: {"type": "string", "format": "time"},
    FieldType.DATETIME: {"type": "string", "format": "date-time"},
    FieldType.UUID: {"type": "string", "format": "uuid"},
    FieldType.JSON: {"type": "object", "additionalProperties": True},
    FieldType.BINARY: {"type": "string", "format": "byte"},
    FieldType.DURATION: {"type": "string"},
}

DEFAULT_PAGE_FIELDS = {"items": "array", "page": "integer", "size": "integer", "total": "integer", "totalPages": "integer"}


def column_schema(column: SqlColumn) -> Dict[str, Any]:
    """OpenAPI schema object for one column."""
    if column.is_array:
        element = dict(FIELD_TYPE_SCHEMAS.get(column.element_type, {"type": "string"}))
        schema: Dict[str, Any] = {"type": "array", "items": element}
    else:
        schema = dict(FIELD_TYPE_SCHEMAS.get(column.field_type, {"type": "string"}))
    if column.is_string and column.length:
        schema["maxLength"] = column.length
    if column.nullable:
        schema["nullable"] = True
    if column.comment:
        schema["description"] = column.comment
    return schema


def _property_name(column_name: str, json_case: str) -> str:
    return to_snake_case(column_name) if json_case == "snake" else to_camel_case(column_name)


def _is_read_only(column: SqlColumn) -> bool:
    return column.auto_increment or is_base_column(column.name)


def generate_openapi_schema_object(table: SqlTable, json_case: str = "camel") -> Dict[str, Any]:
    """Response schema: every column of the table."""
    properties = {}
    required = []
    for column in table.columns:
        name = _property_name(column.name, json_case)
        schema = column_schema(column)
        if _is_read_only(column) or column.primary_key:
            schema["readOnly"] = True
        properties[name] = schema
        if not column.nullable:
            required.append(name)

    schema_obj: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema_obj["required"] = required
    if table.comment:
        schema_obj["description"] = table.comment
    return schema_obj


def generate_openapi_input_schema(table: SqlTable, json_case: str = "camel") -> Dict[str, Any]:
    """Request schema for create/update: read-only and generated columns are left out."""
    properties = {}
    required = []
    for column in table.columns:
        if _is_read_only(column):
            continue
        # Generated primary keys are assigned by the database
        if column.primary_key and column.default_value is not None:
            continue
        name = _property_name(column.name, json_case)
        properties[name] = column_schema(column)
        if not column.nullable and column.default_value is None:
            required.append(name)

    schema_obj: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema_obj["required"] = required
    return schema_obj


def _create_path_parameter(name: str, description: str, schema: Dict[str, Any]) -> Dict[str, Any]:
    """Creates a standardized path parameter."""
    return {
        "name": name,
        "in": "path",
        "required": True,
        "description": description,
        "schema": schema,
    }


def _json_body(schema_ref: str, description: str) -> Dict[str, Any]:
    return {
        "description": description,
        "required": True,
        "content": {"application/json": {"schema": {"$ref": schema_ref}}},
    }


def _create_standard_responses(model_name: str, schema_ref: str) -> Dict[str, Any]:
    """Creates standard CRUD response definitions."""
    body = {"application/json": {"schema": {"$ref": schema_ref}}}
    return {
        "retrieve": {
            "200": {"description": f"Details of {model_name}.", "content": body},
            "404": {"$ref": "#/components/responses/NotFound"},
            "default": {"$ref": "#/components/responses/Error"},
        },
        "create": {
            "201": {"description": f"{model_name} created successfully.", "content": body},
            "400": {"$ref": "#/components/responses/InvalidInput"},
            "409": {"$ref": "#/components/responses/Conflict"},
            "default": {"$ref": "#/components/responses/Error"},
        },
        "update": {
            "200": {"description": f"{model_name} updated successfully.", "content": body},
            "400": {"$ref": "#/components/responses/InvalidInput"},
            "404": {"$ref": "#/components/responses/NotFound"},
            "409": {"$ref": "#/components/responses/Conflict"},
            "default": {"$ref": "#/components/responses/Error"},
        },
        "delete": {
            "204": {"description": f"{model_name} deleted successfully."},
            "404": {"$ref": "#/components/responses/NotFound"},
            "default": {"$ref": "#/components/responses/Error"},
        },
    }


def _create_pagination_schema(schema_ref: str, page_fields: Dict[str, str]) -> Dict[str, Any]:
    """Page envelope; the first page field carries the items."""
    properties = {}
    for index, (name, json_type) in enumerate(page_fields.items()):
        if index == 0:
            properties[name] = {"type": "array", "items": {"$ref": schema_ref}}
        else:
            properties[name] = {"type": json_type}
    return {"type": "object", "properties": properties}


def _build_query_parameters(
    table: SqlTable,
    features: Set[Feature],
    json_case: str,
    first_page: int,
) -> List[Dict[str, Any]]:
    """Builds query parameters for the list endpoint."""
    query_parameters = []
    if Feature.PAGINATION in features:
        query_parameters.extend([
            {
                "name": "page",
                "in": "query",
                "required": False,
                "schema": {"type": "integer", "default": first_page, "minimum": first_page},
                "description": "Page number",
            },
            {
                "name": "size",
                "in": "query",
                "required": False,
                "schema": {
                    "type": "integer",
                    "default": DefaultConfig.DEFAULT_PAGE_SIZE,
                    "minimum": 1,
                    "maximum": DefaultConfig.MAX_PAGE_SIZE,
                },
                "description": "Number of results per page",
            },
        ])

    if Feature.FILTERING in features:
        for column in table.columns:
            if column.primary_key or is_base_column(column.name) or column.field_type not in FILTERABLE_TYPES:
                continue
            schema = dict(FIELD_TYPE_SCHEMAS[column.field_type])
            name = _property_name(column.name, json_case)
            query_parameters.append({
                "name": name,
                "in": "query",
                "required": False,
                "schema": schema,
                "description": f"Filter by {name} (exact match)",
            })
    return query_parameters


def generate_paths_for_table(
    table: SqlTable,
    api_prefix: str,
    features: Set[Feature],
    json_case: str = "camel",
    page_fields: Optional[Dict[str, str]] = None,
    first_page: int = 1,
) -> Dict[str, Any]:
    """Generates OpenAPI Path Item Objects for CRUD operations for a table."""
    pk = table.primary_key_column
    if pk is None:
        logger.warning(f"Table {table.name} has no primary key. Skipping CRUD path generation.")
        return {}

    model_name = table.entity_name
    plural_name = to_camel_case(pluralize(to_snake_case(model_name)))
    plural_pascal = plural_name[:1].upper() + plural_name[1:]
    schema_ref = f"#/components/schemas/{model_name}"
    input_schema_ref = f"#/components/schemas/{model_name}Input"
    responses = _create_standard_responses(model_name, schema_ref)

    if Feature.PAGINATION in features:
        list_schema = _create_pagination_schema(schema_ref, page_fields or DEFAULT_PAGE_FIELDS)
    else:
        list_schema = {"type": "array", "items": {"$ref": schema_ref}}

    collection_path = f"{api_prefix}/{table.kebab_name}"
    paths = {
        collection_path: {
            "get": {
                "tags": [model_name],
                "summary": f"List {plural_pascal}",
                "operationId": f"list{plural_pascal}",
                "parameters": _build_query_parameters(table, features, json_case, first_page),
                "responses": {
                    "200": {
                        "description": f"Successfully retrieved list of {plural_pascal}.",
                        "content": {"application/json": {"schema": list_schema}},
                    },
                    "default": {"$ref": "#/components/responses/Error"},
                },
            },
            "post": {
                "tags": [model_name],
                "summary": f"Create a new {model_name}",
                "operationId": f"create{model_name}",
                "requestBody": _json_body(input_schema_ref, f"{model_name} object to create."),
                "responses": responses["create"],
            },
        },
        f"{collection_path}/{{id}}": {
            "parameters": [
                _create_path_parameter("id", f"The primary key of the {model_name}.", column_schema(pk)),
            ],
            "get": {
                "tags": [model_name],
                "summary": f"Retrieve a specific {model_name}",
                "operationId": f"get{model_name}",
                "responses": responses["retrieve"],
            },
            "put": {
                "tags": [model_name],
                "summary": f"Update a {model_name}",
                "operationId": f"update{model_name}",
                "requestBody": _json_body(input_schema_ref, f"{model_name} object to update."),
                "responses": responses["update"],
            },
            "delete": {
                "tags": [model_name],
                "summary": f"Delete a {model_name}",
                "operationId": f"delete{model_name}",
                "responses": responses["delete"],
            },
        },
    }
    return paths


def _auth_paths(api_prefix: str) -> Dict[str, Any]:
    credentials = {"$ref": "#/components/schemas/Credentials"}
    tokens = {
        "description": "Issued tokens.",
        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/TokenPair"}}},
    }
    unauthorized = {"$ref": "#/components/responses/Unauthorized"}
    return {
        f"{api_prefix}/auth/register": {
            "post": {
                "tags": ["Auth"],
                "summary": "Register a new account",
                "operationId": "register",
                "security": [],
                "requestBody": {"required": True, "content": {"application/json": {"schema": credentials}}},
                "responses": {"201": tokens, "409": {"$ref": "#/components/responses/Conflict"}},
            }
        },
        f"{api_prefix}/auth/login": {
            "post": {
                "tags": ["Auth"],
                "summary": "Exchange credentials for tokens",
                "operationId": "login",
                "security": [],
                "requestBody": {"required": True, "content": {"application/json": {"schema": credentials}}},
                "responses": {"200": tokens, "401": unauthorized},
            }
        },
        f"{api_prefix}/auth/refresh": {
            "post": {
                "tags": ["Auth"],
                "summary": "Exchange a refresh token for new tokens",
                "operationId": "refresh",
                "security": [],
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {"refreshToken": {"type": "string"}},
                                "required": ["refreshToken"],
                            }
                        }
                    },
                },
                "responses": {"200": tokens, "401": unauthorized},
            }
        },
    }


def _password_reset_paths(api_prefix: str, json_case: str = "camel") -> Dict[str, Any]:
    def body(*names: str) -> Dict[str, Any]:
        properties = {_property_name(name, json_case): {"type": "string"} for name in names}
        if "new_password" in names:
            properties[_property_name("new_password", json_case)]["minLength"] = 8
        schema = {"type": "object", "properties": properties, "required": list(properties)}
        return {"required": True, "content": {"application/json": {"schema": schema}}}

    message = {
        "description": "Outcome message.",
        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/MessageResponse"}}},
    }
    prefix = f"{api_prefix}/auth/password"
    return {
        f"{prefix}/forgot": {
            "post": {
                "tags": ["Auth"],
                "summary": "Mail a password reset link",
                "description": "Answers the same way whether or not the address is registered.",
                "operationId": "forgotPassword",
                "security": [],
                "requestBody": body("email"),
                "responses": {"200": message},
            }
        },
        f"{prefix}/validate": {
            "post": {
                "tags": ["Auth"],
                "summary": "Check a reset token",
                "operationId": "validateResetToken",
                "security": [],
                "requestBody": body("token"),
                "responses": {
                    "200": {
                        "description": "Whether the token can still be used.",
                        "content": {
                            "application/json": {
                                "schema": {
                                    "type": "object",
                                    "properties": {"valid": {"type": "boolean"}, "message": {"type": "string"}},
                                }
                            }
                        },
                    }
                },
            }
        },
        f"{prefix}/reset": {
            "post": {
                "tags": ["Auth"],
                "summary": "Set a new password with a reset token",
                "operationId": "resetPassword",
                "security": [],
                "requestBody": body("token", "new_password", "confirm_password"),
                "responses": {"200": message, "400": {"$ref": "#/components/responses/InvalidInput"}},
            }
        },
    }


def _error_response(description: str) -> Dict[str, Any]:
    return {
        "description": description,
        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/ErrorDetail"}}},
    }


def generate_openapi_spec(
    schema: SqlSchema,
    config,
    features: Optional[Set[Feature]] = None,
    json_case: str = "camel",
    page_fields: Optional[Dict[str, str]] = None,
    first_page: int = 1,
    server_url: Optional[str] = None,
) -> Dict[str, Any]:
    """Generates the complete OpenAPI specification dictionary."""
    logger.info("Generating OpenAPI specification...")
    features = set(config.features if features is None else features)
    api_prefix = config.option("api_prefix", DefaultConfig.API_PREFIX).rstrip("/")

    schemas: Dict[str, Any] = {}
    all_paths: Dict[str, Any] = {}
    tags = []

    for table in schema.entity_tables:
        if table.primary_key_column is None:
            continue
        model_name = table.entity_name
        tags.append({"name": model_name, "description": f"Operations on {table.name}"})
        schemas[model_name] = generate_openapi_schema_object(table, json_case)
        schemas[f"{model_name}Input"] = generate_openapi_input_schema(table, json_case)
        if Feature.CRUD in features:
            all_paths.update(
                generate_paths_for_table(
                    table,
                    api_prefix,
                    features,
                    json_case=json_case,
                    page_fields=page_fields,
                    first_page=first_page,
                )
            )

    schemas["ErrorDetail"] = {
        "type": "object",
        "properties": {
            "status": {"type": "integer", "description": "HTTP status code."},
            "message": {"type": "string", "description": "A human-readable error message."},
            "errors": {
                "type": "object",
                "additionalProperties": {"type": "array", "items": {"type": "string"}},
                "description": "Field-specific validation errors.",
                "nullable": True,
            },
        },
        "required": ["message"],
    }
    responses = {
        "NotFound": _error_response("The requested resource was not found."),
        "InvalidInput": _error_response("Invalid input provided (e.g., validation error)."),
        "Conflict": _error_response("The request conflicts with existing data."),
        "Error": _error_response("An unexpected server error occurred."),
    }
    components: Dict[str, Any] = {"schemas": schemas, "responses": responses}

    spec: Dict[str, Any] = {
        "openapi": OpenAPIDefaults.OPENAPI_VERSION,
        "info": {
            "title": config.project_name,
            "version": OpenAPIDefaults.API_VERSION,
            "description": f"REST API generated from {schema.source_file or schema.name}.",
        },
        "servers": [{"url": server_url or OpenAPIDefaults.SERVER_URL, "description": "Local server"}],
        "tags": tags,
        "paths": all_paths,
        "components": components,
    }

    if Feature.JWT_AUTH in features:
        schemas["Credentials"] = {
            "type": "object",
            "properties": {
                "email": {"type": "string", "format": "email"},
                "password": {"type": "string", "minLength": 8},
            },
            "required": ["email", "password"],
        }
        schemas["TokenPair"] = {
            "type": "object",
            "properties": {
                "accessToken": {"type": "string"},
                "refreshToken": {"type": "string"},
                "tokenType": {"type": "string", "example": "Bearer"},
            },
        }
        responses["Unauthorized"] = _error_response("Authentication credentials were missing or invalid.")
        components["securitySchemes"] = {
            "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
        }
        spec["security"] = [{"bearerAuth": []}]
        spec["tags"].append({"name": "Auth", "description": "Registration and token issuance"})
        all_paths.update(_auth_paths(api_prefix))
        if Feature.PASSWORD_RESET in features:
            schemas["MessageResponse"] = {"type": "object", "properties": {"message": {"type": "string"}}}
            all_paths.update(_password_reset_paths(api_prefix, json_case))

    logger.info(f"OpenAPI specification generated with {len(all_paths)} paths.")
    return spec


def render_openapi_yaml(spec: Dict[str, Any]) -> str:
    """Dumps the spec to YAML, keeping key order and non-ASCII text."""
    return yaml.safe_dump(spec, sort_keys=False, allow_unicode=True)
