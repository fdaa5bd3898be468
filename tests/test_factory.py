import pytest

from tablegate.factory import create_introspector
from tablegate.introspect import SchemaIntrospector
from tablegate.mysql import MySQLIntrospector
from tablegate.postgres import PostgresIntrospector
from tablegate.sqlite import SQLiteIntrospector


@pytest.mark.parametrize(
    "engine, expected",
    [
        ("mysql", MySQLIntrospector),
        ("postgresql", PostgresIntrospector),
        ("sqlite3", SQLiteIntrospector),
    ],
)
def test_known_engines(engine, expected):
    introspector = create_introspector(engine)
    assert type(introspector) is expected
    assert isinstance(introspector, SchemaIntrospector)


def test_each_call_returns_a_new_instance():
    assert create_introspector("mysql") is not create_introspector("mysql") or False
    first = create_introspector("sqlite3")
    second = create_introspector("sqlite3")
    assert first is not second
    assert type(first) is type(second)


@pytest.mark.parametrize("engine", ["oracle", "", "MySQL", "postgres", "sqlite"])
def test_unsupported_engine_raises(engine):
    with pytest.raises(ValueError, match="Unsupported database engine"):
        create_introspector(engine)


def test_error_names_the_engine():
    with pytest.raises(ValueError) as info:
        create_introspector("oracle")
    assert str(info.value) == "Unsupported database engine: oracle"