"""OpenAPI 3.0 description of the REST API derived from registered tables."""

from __future__ import annotations

from typing import Any, Optional

from .registry import ModelRegistry, default_registry
from .types import ColumnMeta, SqlType, TableMeta
from .validator import DEFAULT_AUTO_FIELDS

OPENAPI_VERSION = "3.0.3"
API_TITLE = "Drogon Blueprint API"
API_VERSION = "0.1.0"
DOCS_PATH = "/api/docs"
SPEC_PATH = "/api/docs/openapi.json"
DEFAULT_ASSETS_URL = "/swagger-ui"

_SCHEMA_PREFIX = "#/components/schemas/"

_OPENAPI_TYPES = {
    SqlType.INTEGER: "integer",
    SqlType.FLOAT: "number",
    SqlType.DECIMAL: "number",
    SqlType.BOOLEAN: "boolean",
    SqlType.JSON: "object",
}

_OPENAPI_FORMATS = {
    SqlType.INTEGER: "int64",
    SqlType.FLOAT: "float",
    SqlType.DECIMAL: "double",
    SqlType.DATETIME: "date-time",
    SqlType.DATE: "date",
    SqlType.TIME: "time",
    SqlType.UUID: "uuid",
    SqlType.BINARY: "binary",
}


def sql_type_to_openapi_type(sql_type: SqlType) -> str:
    """Return the OpenAPI ``type`` for a SQL type."""
    return _OPENAPI_TYPES.get(sql_type, "string")


def sql_type_to_openapi_format(sql_type: SqlType) -> Optional[str]:
    """Return the OpenAPI ``format`` for a SQL type, or None if it has none."""
    return _OPENAPI_FORMATS.get(sql_type)


def _ref(name: str) -> dict[str, str]:
    return {"$ref": _SCHEMA_PREFIX + name}


def _json_content(schema: dict[str, Any]) -> dict[str, Any]:
    return {"application/json": {"schema": schema}}


def column_schema(col: ColumnMeta) -> dict[str, Any]:
    """Return the property schema of one column."""
    schema: dict[str, Any] = {"type": sql_type_to_openapi_type(col.sql_type)}
    fmt = sql_type_to_openapi_format(col.sql_type)
    if fmt:
        schema["format"] = fmt
    if col.is_nullable:
        schema["nullable"] = True
    if col.max_length is not None:
        schema["maxLength"] = col.max_length
    if col.default_value is not None:
        schema["default"] = col.default_value
    return schema


def _object_schema(
    properties: dict[str, Any], required: Optional[list[str]] = None
) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def table_schema(meta: TableMeta) -> dict[str, Any]:
    """Return the schema of a full row of the table."""
    properties = {col.name: column_schema(col) for col in meta.columns}
    required = [
        col.name
        for col in meta.columns
        if not col.is_nullable
        and not col.is_auto_increment
        and col.default_value is None
    ]
    return _object_schema(properties, required)


def create_schema(meta: TableMeta) -> dict[str, Any]:
    """Return the schema of a create payload: no auto-managed columns."""
    auto_fields = set(DEFAULT_AUTO_FIELDS)
    columns = [
        col
        for col in meta.columns
        if not col.is_auto_increment and col.name not in auto_fields
    ]
    properties = {col.name: column_schema(col) for col in columns}
    required = [
        col.name
        for col in columns
        if not col.is_nullable and col.default_value is None
    ]
    return _object_schema(properties, required)


def update_schema(meta: TableMeta) -> dict[str, Any]:
    """Return the schema of an update payload: every column but primary keys."""
    return _object_schema(
        {col.name: column_schema(col) for col in meta.columns if not col.is_primary_key}
    )


def _error_response() -> dict[str, Any]:
    return {"description": "Validation error", "content": _json_content(_ref("Error"))}


def _paginated_response(table: str) -> dict[str, Any]:
    schema = {
        "type": "object",
        "properties": {
            "data": {"type": "array", "items": _ref(table)},
            "meta": _ref("PaginationMeta"),
        },
    }
    return {"description": "Paginated list", "content": _json_content(schema)}


def _query_param(name: str, schema: dict[str, Any], description: str) -> dict[str, Any]:
    return {"name": name, "in": "query", "schema": schema, "description": description}


def _collection_paths(meta: TableMeta) -> dict[str, Any]:
    name = meta.name
    params = [
        _query_param(
            "limit", {"type": "integer", "default": 20}, "Number of records to return"
        ),
        _query_param(
            "offset", {"type": "integer", "default": 0}, "Number of records to skip"
        ),
        _query_param(
            "sort",
            {"type": "string"},
            "Sort column and direction (e.g., created_at:desc)",
        ),
    ]
    params.extend(
        {
            **_query_param(
                f"filter[{col.name}]", {"type": "string"}, f"Filter by {col.name}"
            ),
            "required": False,
        }
        for col in meta.columns
    )
    get = {
        "tags": [name],
        "summary": f"List {name}",
        "operationId": f"list_{name}",
        "parameters": params,
        "responses": {"200": _paginated_response(name)},
    }
    post = {
        "tags": [name],
        "summary": f"Create {name}",
        "operationId": f"create_{name}",
        "requestBody": {
            "required": True,
            "content": _json_content(_ref(f"{name}_create")),
        },
        "responses": {
            "201": {"description": "Created", "content": _json_content(_ref(name))},
            "422": _error_response(),
        },
    }
    return {"get": get, "post": post}


def _item_paths(meta: TableMeta) -> dict[str, Any]:
    name = meta.name

    def params() -> list[dict[str, Any]]:
        return [
            {
                "name": "id",
                "in": "path",
                "required": True,
                "schema": {"type": "string"},
                "description": "Primary key value",
            }
        ]

    def ok() -> dict[str, Any]:
        return {"description": "Success", "content": _json_content(_ref(name))}

    def not_found() -> dict[str, Any]:
        return {"description": "Not found"}

    get = {
        "tags": [name],
        "summary": f"Get {name} by ID",
        "operationId": f"get_{name}",
        "parameters": params(),
        "responses": {"200": ok(), "404": not_found()},
    }
    put = {
        "tags": [name],
        "summary": f"Update {name}",
        "operationId": f"update_{name}",
        "parameters": params(),
        "requestBody": {
            "required": True,
            "content": _json_content(_ref(f"{name}_update")),
        },
        "responses": {"200": ok(), "404": not_found(), "422": _error_response()},
    }
    delete = {
        "tags": [name],
        "summary": f"Delete {name}",
        "operationId": f"delete_{name}",
        "parameters": params(),
        "responses": {"200": ok(), "404": not_found()},
    }
    return {"get": get, "put": put, "delete": delete}


def _bulk_paths(name: str) -> dict[str, Any]:
    post = {
        "tags": [name],
        "summary": f"Bulk create {name}",
        "operationId": f"bulkCreate_{name}",
        "requestBody": {
            "required": True,
            "content": _json_content({"type": "array", "items": _ref(f"{name}_create")}),
        },
        "responses": {"201": {"description": "Bulk creation result"}},
    }
    return {"post": post}


_SWAGGER_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{title}</title>
    <link rel="stylesheet" href="{assets}/swagger-ui.css">
</head>
<body>
    <div id="swagger-ui"></div>
    <script src="{assets}/swagger-ui-bundle.js"></script>
    <script>
        SwaggerUIBundle({{
            url: "{spec_url}",
            dom_id: '#swagger-ui',
            presets: [SwaggerUIBundle.presets.apis, SwaggerUIBundle.SwaggerUIStandalonePreset],
            layout: "StandaloneLayout"
        }});
    </script>
</body>
</html>"""


class OpenApiGenerator:
    """Builds the OpenAPI document and the Swagger UI page for a registry."""

    def __init__(
        self,
        registry: Optional[ModelRegistry] = None,
        *,
        host: str = "0.0.0.0",
        port: int = 8080,
        environment: str = "development",
        assets_url: str = DEFAULT_ASSETS_URL,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self.host = host
        self.port = port
        self.environment = environment
        self.assets_url = assets_url.rstrip("/")

    @property
    def server_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def spec_url(self) -> str:
        return self.server_url + SPEC_PATH

    def _tables(self) -> list[TableMeta]:
        tables = []
        for name in self.registry.table_names():
            meta = self.registry.get_table(name)
            if meta is not None:
                tables.append(meta)
        return tables

    def generate_spec(self) -> dict[str, Any]:
        """Return the complete OpenAPI document."""
        tables = self._tables()
        return {
            "openapi": OPENAPI_VERSION,
            "info": {
                "title": API_TITLE,
                "description": "Auto-generated REST API from database schema",
                "version": API_VERSION,
                "contact": {"name": "Blueprint Framework"},
            },
            "servers": [{"url": self.server_url, "description": self.environment}],
            "paths": self._paths(tables),
            "components": self._components(tables),
        }

    def swagger_html(self) -> str:
        """Return the Swagger UI page pointing at this server's spec."""
        return _SWAGGER_TEMPLATE.format(
            title=API_TITLE, assets=self.assets_url, spec_url=self.spec_url
        )

    @staticmethod
    def _paths(tables: list[TableMeta]) -> dict[str, Any]:
        paths: dict[str, Any] = {}
        for meta in tables:
            base = f"/api/v1/{meta.name}"
            paths[base] = _collection_paths(meta)
            paths[base + "/{id}"] = _item_paths(meta)
            paths[base + "/bulk"] = _bulk_paths(meta.name)
        paths["/health"] = {
            "get": {
                "tags": ["system"],
                "summary": "Health check",
                "operationId": "healthCheck",
                "responses": {"200": {"description": "Health status"}},
            }
        }
        return paths

    @staticmethod
    def _components(tables: list[TableMeta]) -> dict[str, Any]:
        schemas: dict[str, Any] = {}
        for meta in tables:
            schemas[meta.name] = table_schema(meta)
            schemas[f"{meta.name}_create"] = create_schema(meta)
            schemas[f"{meta.name}_update"] = update_schema(meta)
        schemas["Error"] = {
            "type": "object",
            "properties": {
                "error": {
                    "type": "object",
                    "properties": {
                        "message": {"type": "string"},
                        "status": {"type": "integer"},
                        "details": {"type": "object"},
                    },
                }
            },
        }
        schemas["PaginationMeta"] = {
            "type": "object",
            "properties": {
                "total": {"type": "integer"},
                "limit": {"type": "integer"},
                "offset": {"type": "integer"},
                "has_more": {"type": "boolean"},
            },
        }
        return {
            "schemas": schemas,
            "securitySchemes": {
                "bearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}
            },
        }