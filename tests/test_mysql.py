import pytest

from tablegate.mysql import MySQLIntrospector
from tablegate.query import QueryResult
from tablegate.registry import ModelRegistry
from tablegate.types import ForeignKeyMeta, JsonType, SqlType


class FakeDb:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    async def execute(self, sql, params):
        self.calls.append((sql, list(params)))
        for marker, rows in self.responses.items():
            if marker in sql:
                return QueryResult(rows=list(rows))
        return QueryResult()


def column_row(table, name, position, data_type, column_type, **extra):
    row = {
        "TABLE_NAME": table,
        "COLUMN_NAME": name,
        "ORDINAL_POSITION": position,
        "COLUMN_DEFAULT": None,
        "IS_NULLABLE": "NO",
        "DATA_TYPE": data_type,
        "CHARACTER_MAXIMUM_LENGTH": None,
        "NUMERIC_PRECISION": None,
        "NUMERIC_SCALE": None,
        "COLUMN_TYPE": column_type,
        "EXTRA": "",
    }
    row.update(extra)
    return row


RESPONSES = {
    "CONSTRAINT_NAME = 'PRIMARY'": [
        {"TABLE_NAME": "links", "COLUMN_NAME": "a_id"},
        {"TABLE_NAME": "links", "COLUMN_NAME": "b_id"},
        {"TABLE_NAME": "users", "COLUMN_NAME": "id"},
    ],
    "REFERENCED_TABLE_NAME IS NOT NULL": [
        {
            "TABLE_NAME": "links",
            "COLUMN_NAME": "a_id",
            "CONSTRAINT_NAME": "links_a",
            "REFERENCED_TABLE_NAME": "users",
            "REFERENCED_COLUMN_NAME": "id",
        }
    ],
    "INFORMATION_SCHEMA.TABLES": [
        {"TABLE_NAME": "links"},
        {"TABLE_NAME": "users"},
    ],
    "INFORMATION_SCHEMA.COLUMNS": [
        column_row("links", "a_id", 1, "int", "int", EXTRA=""),
        column_row("links", "b_id", 2, "int", "int"),
        column_row("users", "id", 1, "bigint", "bigint unsigned", EXTRA="auto_increment"),
        column_row(
            "users",
            "email",
            2,
            "varchar",
            "varchar(120)",
            CHARACTER_MAXIMUM_LENGTH=120,
            IS_NULLABLE="YES",
        ),
        column_row("users", "active", 3, "tinyint", "tinyint(1)", COLUMN_DEFAULT="1"),
        column_row(
            "users",
            "balance",
            4,
            "decimal",
            "decimal(10,2)",
            NUMERIC_PRECISION=10,
            NUMERIC_SCALE=2,
        ),
    ],
}


@pytest.mark.asyncio
async def test_discover_tables_binds_schema():
    db = FakeDb(RESPONSES)
    tables = await MySQLIntrospector().discover_tables(db, "shop")
    assert tables == ["links", "users"]
    assert db.calls[0][1] == ["shop"]
    assert "TABLE_TYPE = 'BASE TABLE'" in db.calls[0][0]


@pytest.mark.asyncio
async def test_columns_are_grouped_by_table_in_order():
    columns = await MySQLIntrospector().discover_all_columns(FakeDb(RESPONSES), "shop")
    assert [c.name for c in columns["links"]] == ["a_id", "b_id"]
    assert [c.name for c in columns["users"]] == ["id", "email", "active", "balance"]


@pytest.mark.asyncio
async def test_column_attributes():
    columns = await MySQLIntrospector().discover_all_columns(FakeDb(RESPONSES), "shop")
    user_id, email, active, balance = columns["users"]
    assert user_id.is_auto_increment is True
    assert user_id.raw_type == "bigint unsigned"
    assert user_id.sql_type is SqlType.INTEGER
    assert email.is_nullable is True
    assert email.max_length == 120
    assert email.sql_type is SqlType.STRING
    assert active.is_nullable is False
    assert active.default_value == "1"
    assert active.is_auto_increment is False
    assert balance.precision == 10 and balance.scale == 2
    assert balance.ordinal_position == 4


@pytest.mark.asyncio
async def test_tinyint_one_is_boolean():
    columns = await MySQLIntrospector().discover_all_columns(FakeDb(RESPONSES), "shop")
    active = columns["users"][2]
    assert active.sql_type is SqlType.BOOLEAN
    assert active.json_type is JsonType.BOOLEAN


@pytest.mark.asyncio
async def test_primary_keys_keep_order():
    pks = await MySQLIntrospector().discover_all_primary_keys(FakeDb(RESPONSES), "shop")
    assert pks == {"links": ["a_id", "b_id"], "users": ["id"]}


@pytest.mark.asyncio
async def test_foreign_keys():
    fks = await MySQLIntrospector().discover_all_foreign_keys(FakeDb(RESPONSES), "shop")
    assert fks == {"links": [ForeignKeyMeta("a_id", "users", "id", "links_a")]}


@pytest.mark.asyncio
async def test_full_introspection_marks_keys():
    registry = ModelRegistry()
    await MySQLIntrospector().introspect_schema(FakeDb(RESPONSES), "shop", registry)
    links = registry.get_table("links")
    assert [c.is_primary_key for c in links.columns] == [True, True]
    users = registry.get_table("users")
    assert [c.name for c in users.columns if c.is_primary_key] == ["id"]
    assert registry.table_count() == 2


@pytest.mark.asyncio
async def test_empty_schema():
    db = FakeDb({})
    introspector = MySQLIntrospector()
    assert await introspector.discover_tables(db, "none") == []
    assert await introspector.discover_all_columns(db, "none") == {}
    assert await introspector.discover_all_primary_keys(db, "none") == {}
    assert await introspector.discover_all_foreign_keys(db, "none") == {}