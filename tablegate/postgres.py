"""Schema discovery for PostgreSQL through information_schema."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .introspect import SchemaIntrospector, _optional_int, _optional_text, _text
from .query import Executor
from .type_mapper import map_postgres_type
from .types import ColumnMeta, ForeignKeyMeta

_CATALOG = "information_schema"


def _query(columns: Iterable[str], source: str, condition: str, order: Iterable[str]) -> str:
    return (
        f"SELECT {', '.join(columns)} FROM {source} "
        f"WHERE {condition} ORDER BY {', '.join(order)}"
    )


def _join(view: str, alias: str) -> str:
    """Join a catalog view to the table_constraints alias ``tc``."""
    return (
        f"JOIN {_CATALOG}.{view} AS {alias} "
        f"ON tc.constraint_name = {alias}.constraint_name "
        f"AND tc.table_schema = {alias}.table_schema"
    )


def _constraint_filter(kind: str) -> str:
    return f"tc.table_schema = $1 AND tc.constraint_type = '{kind}'"


_CONSTRAINTS = f"{_CATALOG}.table_constraints AS tc"
_KEY_USAGE = _join("key_column_usage", "kcu")

TABLES_SQL = _query(
    ["table_name"],
    f"{_CATALOG}.tables",
    "table_schema = $1 AND table_type = 'BASE TABLE'",
    ["table_name"],
)

COLUMNS_SQL = _query(
    [
        "table_name",
        "column_name",
        "ordinal_position",
        "column_default",
        "is_nullable",
        "data_type",
        "udt_name",
        "character_maximum_length",
        "numeric_precision",
        "numeric_scale",
        "is_identity",
    ],
    f"{_CATALOG}.columns",
    "table_schema = $1",
    ["table_name", "ordinal_position"],
)

PRIMARY_KEYS_SQL = _query(
    ["tc.table_name", "kcu.column_name", "kcu.ordinal_position"],
    f"{_CONSTRAINTS} {_KEY_USAGE}",
    _constraint_filter("PRIMARY KEY"),
    ["tc.table_name", "kcu.ordinal_position"],
)

FOREIGN_KEYS_SQL = _query(
    [
        "tc.table_name",
        "kcu.column_name",
        "tc.constraint_name",
        "ccu.table_name AS referenced_table_name",
        "ccu.column_name AS referenced_column_name",
    ],
    f"{_CONSTRAINTS} {_KEY_USAGE} {_join('constraint_column_usage', 'ccu')}",
    _constraint_filter("FOREIGN KEY"),
    ["tc.table_name", "tc.constraint_name"],
)


def _column(row: Mapping[str, Any]) -> ColumnMeta:
    udt_name = _text(row["udt_name"])
    mapping = map_postgres_type(_text(row["data_type"]), udt_name)
    default = _optional_text(row.get("column_default"))
    # nextval() defaults come from serial sequences; identity columns say so
    auto_increment = (default is not None and default.startswith("nextval(")) or (
        _text(row.get("is_identity")) == "YES"
    )
    return ColumnMeta(
        name=_text(row["column_name"]),
        raw_type=udt_name,
        sql_type=mapping.sql_type,
        json_type=mapping.json_type,
        is_nullable=_text(row["is_nullable"]) == "YES",
        is_auto_increment=auto_increment,
        default_value=default,
        max_length=_optional_int(row.get("character_maximum_length")),
        precision=_optional_int(row.get("numeric_precision")),
        scale=_optional_int(row.get("numeric_scale")),
        ordinal_position=int(row["ordinal_position"]),
    )


class PostgresIntrospector(SchemaIntrospector):
    """Reads table metadata from PostgreSQL's information_schema."""

    async def discover_tables(self, db: Executor, schema: str) -> list[str]:
        result = await db.execute(TABLES_SQL, [schema])
        return [_text(row["table_name"]) for row in result]

    async def discover_all_columns(
        self, db: Executor, schema: str
    ) -> dict[str, list[ColumnMeta]]:
        result = await db.execute(COLUMNS_SQL, [schema])
        columns: dict[str, list[ColumnMeta]] = {}
        for row in result:
            columns.setdefault(_text(row["table_name"]), []).append(_column(row))
        return columns

    async def discover_all_primary_keys(
        self, db: Executor, schema: str
    ) -> dict[str, list[str]]:
        result = await db.execute(PRIMARY_KEYS_SQL, [schema])
        keys: dict[str, list[str]] = {}
        for row in result:
            keys.setdefault(_text(row["table_name"]), []).append(
                _text(row["column_name"])
            )
        return keys

    async def discover_all_foreign_keys(
        self, db: Executor, schema: str
    ) -> dict[str, list[ForeignKeyMeta]]:
        result = await db.execute(FOREIGN_KEYS_SQL, [schema])
        keys: dict[str, list[ForeignKeyMeta]] = {}
        for row in result:
            keys.setdefault(_text(row["table_name"]), []).append(
                ForeignKeyMeta(
                    column_name=_text(row["column_name"]),
                    referenced_table=_text(row["referenced_table_name"]),
                    referenced_column=_text(row["referenced_column_name"]),
                    constraint_name=_text(row["constraint_name"]),
                )
            )
        return keys