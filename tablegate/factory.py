"""Choose the schema introspector for a database engine."""

from __future__ import annotations

from .introspect import SchemaIntrospector
from .mysql import MySQLIntrospector
from .postgres import PostgresIntrospector
from .sqlite import SQLiteIntrospector

_INTROSPECTORS: dict[str, type[SchemaIntrospector]] = {
    "mysql": MySQLIntrospector,
    "postgresql": PostgresIntrospector,
    "sqlite3": SQLiteIntrospector,
}


def create_introspector(db_engine: str) -> SchemaIntrospector:
    """Return a new introspector for ``mysql``, ``postgresql`` or ``sqlite3``.

    Raises ValueError for any other engine name.
    """
    try:
        cls = _INTROSPECTORS[db_engine]
    except KeyError:
        raise ValueError(f"Unsupported database engine: {db_engine}") from None
    return cls()