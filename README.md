# tablegate

Building blocks for serving database tables over a REST API, driven by the
schema the database already has. The package has no runtime dependencies.

- **Metadata** (`tablegate.types`): `SqlType`, `JsonType`, `ColumnMeta`,
  `ForeignKeyMeta` and `TableMeta` (with `get_column`, `has_column`,
  `is_generic_field`).
- **Registry** (`tablegate.registry`): `ModelRegistry`, a thread-safe store of
  `TableMeta` by table name, and `default_registry()` for a process-wide one.
- **Type mapping** (`tablegate.type_mapper`): `map_mysql_type`,
  `map_postgres_type` and `map_sqlite_type` return a `TypeMapping` of
  `sql_type` and `json_type`.
- **Introspection** (`tablegate.introspect`, `tablegate.mysql`,
  `tablegate.postgres`, `tablegate.sqlite`, `tablegate.factory`): read tables,
  columns, primary keys and foreign keys from MySQL, PostgreSQL or SQLite and
  register them.
- **Validation** (`tablegate.validator`): `validate_create`, `validate_update`
  and `errors_to_json`.
- **Protection**: `FieldGuard` (`tablegate.field_guard`) strips
  mass-assignment fields; `generate_uuid` and `inject_code`
  (`tablegate.codes`) fill in a `code` column; `inject_create`,
  `inject_update`, `inject_create_with_meta` and `inject_update_with_meta`
  (`tablegate.audit`) stamp audit columns.
- **Queries** (`tablegate.query`): `QueryBuilder` builds parameterised SELECT,
  INSERT, UPDATE, DELETE and COUNT statements, with table and column names
  checked against a registry.
- **Serialisation** (`tablegate.serializer`): `serialize_row`,
  `serialize_result` and `serialize_row_raw`.
- **OpenAPI** (`tablegate.openapi`): `OpenApiGenerator` produces an OpenAPI
  3.0.3 document and a Swagger UI page for every registered table.

## Installation

```
pip install tablegate
```

## Describing a table

```python
from tablegate.types import ColumnMeta, JsonType, SqlType, TableMeta
from tablegate.registry import ModelRegistry

users = TableMeta(
    name="users",
    columns=[
        ColumnMeta(name="id", raw_type="INTEGER", sql_type=SqlType.INTEGER,
                   json_type=JsonType.NUMBER, is_nullable=False,
                   is_primary_key=True, is_auto_increment=True),
        ColumnMeta(name="email", raw_type="varchar", sql_type=SqlType.STRING,
                   json_type=JsonType.STRING, is_nullable=False, max_length=255),
        ColumnMeta(name="code", raw_type="varchar", sql_type=SqlType.STRING),
        ColumnMeta(name="created_at", raw_type="timestamp", sql_type=SqlType.DATETIME),
        ColumnMeta(name="created_by", raw_type="varchar", sql_type=SqlType.STRING),
    ],
    primary_keys=["id"],
)

registry = ModelRegistry()
registry.register_table("users", users)
```

## The database handle

Introspectors and `QueryBuilder` talk to the database through an object you
supply. It needs one coroutine method:

```python
async def execute(self, sql: str, params: Sequence[str]) -> QueryResult: ...
```

`QueryResult` (from `tablegate.query`) holds `rows`, a list of mappings from
column name to value (the introspectors also call `.get` on them), and
`affected_rows`. Every parameter is passed as a string.

## Introspecting a database

```python
from tablegate.factory import create_introspector

introspector = create_introspector("sqlite3")   # or "mysql", "postgresql"
tables = await introspector.introspect_schema(db, "main", registry)
```

`create_introspector` raises `ValueError` for any other engine name.
`introspect_schema` registers each discovered table (in `default_registry()`
if no registry is given), marks its primary-key columns, and returns the
registered `TableMeta` list. SQLite ignores the schema argument and skips
tables whose names contain anything other than ASCII letters, digits, `_` and
`.` (see `tablegate.sqlite.is_valid_table_name`).

## Validating a request

```python
from tablegate.validator import errors_to_json, validate_create

errors = validate_create({"email": 42}, users)
print(errors_to_json(errors))
# [{'field': 'email', 'code': 'INVALID_TYPE', 'message': "Field 'email' expects type varchar"}]
```

`validate_create` reports `REQUIRED`, `INVALID_TYPE`, `TOO_LONG` and
`UNKNOWN_FIELD`; it skips auto-increment columns and the auto-managed fields
(`id`, `code`, `created_at`, `updated_at`, `created_by`, `modified_by`,
`deleted_at`, `deleted_by` by default). `validate_update` reports
`UNKNOWN_FIELD`, `IMMUTABLE` (primary keys), `INVALID_TYPE` and `TOO_LONG`.
Lengths are counted in UTF-8 bytes.

## Protecting and stamping input

```python
from tablegate.audit import inject_create_with_meta
from tablegate.codes import inject_code
from tablegate.field_guard import FieldGuard

guard = FieldGuard()
data = guard.sanitize("users", {"id": 7, "email": "someone@example.com"})
# {'email': 'someone@example.com'}
inject_code(data, users)                     # sets data["code"] to a UUID v4
inject_create_with_meta(data, "user-1", users)
# sets created_at and created_by, the audit columns users has
```

`FieldGuard` always blocks `id`, `created_at`, `updated_at`, `created_by`,
`modified_by`, `deleted_at` and `deleted_by`; `add_blocked_field`,
`set_blocked_fields` and `reset` manage extra per-table fields, and
`blocked_fields` shows the effective set. `inject_code` leaves a non-empty
`code` alone. Audit timestamps are UTC in the form `YYYY-MM-DD HH:MM:SS`
(`now_timestamp()`).

## Building a query

```python
from tablegate.query import Dialect, QueryBuilder

builder = QueryBuilder(db, registry=registry, dialect=Dialect.POSTGRES)
sql, params = (
    builder.table("users")
    .where("email", "LIKE", "%@example.com")
    .order_by("id", "desc")
    .limit(20)
    .build_select()
)
# 'SELECT * FROM "users" WHERE "email" LIKE $1 ORDER BY "id" DESC LIMIT 20'
# ['%@example.com']
```

The dialect (`"postgresql"`, `"mysql"` or `"sqlite3"`) decides quoting and
placeholders: MySQL uses backticks and `?`, the others double quotes and
`$1, $2, ...`. Operators are `=`, `!=`, `<>`, `<`, `>`, `<=`, `>=`, `LIKE` and
`NOT LIKE`; there are also `where_eq`, `where_null`, `where_not_null`,
`where_in`, `select`, `offset` and `reset`. Unknown tables, columns, operators
or directions raise `ValueError`.

`build_insert`, `build_update`, `build_delete` and `build_count` return the
other statements; insert and update columns come out in name order, and a
`None` value in an update sets the column to `NULL`. Outside MySQL, INSERT,
UPDATE and DELETE end in `RETURNING *`.

`execute_select`, `execute_insert`, `execute_update`, `execute_delete` and
`execute_count` run the same statements through the handle. On MySQL,
`execute_insert` reads the new row back via `LAST_INSERT_ID()`, and
`execute_update` reads the row back when the WHERE clause names the first
primary key.

## Serialising rows

```python
from tablegate.serializer import serialize_result

serialize_result(result, users)
```

Values are typed by column: integers, numbers, booleans and parsed JSON;
everything else, and columns the table does not know, become strings; NULL
becomes `None`. A row may be a mapping, an object with `keys()`, or
(name, value) pairs. `serialize_row_raw` turns every non-NULL value into a
string.

## OpenAPI

```python
from tablegate.openapi import OpenApiGenerator

generator = OpenApiGenerator(registry, host="localhost", port=8080)
spec = generator.generate_spec()
page = generator.swagger_html()
```

The spec has list, create, get, update, delete and bulk-create paths under
`/api/v1/<table>`, a `/health` path, and per-table row, `_create` and
`_update` schemas. `swagger_html()` loads Swagger UI's `swagger-ui.css` and
`swagger-ui-bundle.js` from `assets_url` (default `/swagger-ui`) and points it
at `http://<host>:<port>/api/docs/openapi.json`.

## What the package does not do

- It has no HTTP server and registers no routes: the REST endpoints the
  OpenAPI document describes, and the `/api/docs` pages, are for your web
  framework to serve.
- It does not serve the Swagger UI assets.
- It includes no database driver or connection pool; you supply the handle.
- It reads no configuration from files or the environment, and installs no
  command.