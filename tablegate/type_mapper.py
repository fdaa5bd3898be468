"""Map database-specific column types onto SqlType and JsonType."""

from __future__ import annotations

from typing import NamedTuple

from .types import JsonType, SqlType


class TypeMapping(NamedTuple):
    """The SQL and JSON types a database column type maps to."""

    sql_type: SqlType
    json_type: JsonType


_INTEGER = TypeMapping(SqlType.INTEGER, JsonType.NUMBER)
_FLOAT = TypeMapping(SqlType.FLOAT, JsonType.NUMBER)
_DECIMAL = TypeMapping(SqlType.DECIMAL, JsonType.NUMBER)
_STRING = TypeMapping(SqlType.STRING, JsonType.STRING)
_BOOLEAN = TypeMapping(SqlType.BOOLEAN, JsonType.BOOLEAN)
_DATETIME = TypeMapping(SqlType.DATETIME, JsonType.STRING)
_DATE = TypeMapping(SqlType.DATE, JsonType.STRING)
_TIME = TypeMapping(SqlType.TIME, JsonType.STRING)
_JSON = TypeMapping(SqlType.JSON, JsonType.OBJECT)
_BINARY = TypeMapping(SqlType.BINARY, JsonType.STRING)
_UUID = TypeMapping(SqlType.UUID, JsonType.STRING)
_UNKNOWN = TypeMapping(SqlType.UNKNOWN, JsonType.STRING)

_MYSQL_TYPES: dict[str, TypeMapping] = {
    **dict.fromkeys(("INT", "BIGINT", "SMALLINT", "MEDIUMINT"), _INTEGER),
    **dict.fromkeys(("FLOAT", "DOUBLE"), _FLOAT),
    **dict.fromkeys(("DECIMAL", "NUMERIC"), _DECIMAL),
    **dict.fromkeys(
        (
            "VARCHAR",
            "CHAR",
            "TEXT",
            "MEDIUMTEXT",
            "LONGTEXT",
            "TINYTEXT",
            "ENUM",
            "SET",
        ),
        _STRING,
    ),
    **dict.fromkeys(("DATETIME", "TIMESTAMP"), _DATETIME),
    "DATE": _DATE,
    "TIME": _TIME,
    "JSON": _JSON,
    **dict.fromkeys(
        ("BLOB", "MEDIUMBLOB", "LONGBLOB", "TINYBLOB", "BINARY", "VARBINARY"),
        _BINARY,
    ),
}

_POSTGRES_UDT_TYPES: dict[str, TypeMapping] = {
    "BOOL": _BOOLEAN,
    **dict.fromkeys(("INT2", "INT4", "INT8", "SERIAL", "BIGSERIAL"), _INTEGER),
    **dict.fromkeys(("FLOAT4", "FLOAT8"), _FLOAT),
    "NUMERIC": _DECIMAL,
    "UUID": _UUID,
    **dict.fromkeys(("JSON", "JSONB"), _JSON),
    **dict.fromkeys(("TIMESTAMP", "TIMESTAMPTZ"), _DATETIME),
    "DATE": _DATE,
    **dict.fromkeys(("TIME", "TIMETZ"), _TIME),
    "BYTEA": _BINARY,
}

_POSTGRES_TEXT_TYPES = frozenset({"CHARACTER VARYING", "CHARACTER", "TEXT"})


def map_mysql_type(data_type: str, column_type: str) -> TypeMapping:
    """Map a MySQL DATA_TYPE / COLUMN_TYPE pair."""
    dt = data_type.upper()
    if dt == "TINYINT":
        # BOOLEAN is stored as tinyint(1)
        return _BOOLEAN if "tinyint(1)" in column_type else _INTEGER
    return _MYSQL_TYPES.get(dt, _UNKNOWN)


def map_postgres_type(data_type: str, udt_name: str) -> TypeMapping:
    """Map a PostgreSQL data_type / udt_name pair."""
    mapping = _POSTGRES_UDT_TYPES.get(udt_name.upper())
    if mapping is not None:
        return mapping
    if data_type.upper() in _POSTGRES_TEXT_TYPES:
        return _STRING
    return _UNKNOWN


def map_sqlite_type(declared_type: str) -> TypeMapping:
    """Map a SQLite declared type using SQLite's affinity rules."""
    upper = declared_type.upper()
    if "INT" in upper:
        return _INTEGER
    if any(token in upper for token in ("CHAR", "CLOB", "TEXT")):
        return _STRING
    if "BLOB" in upper or not upper:
        return _BINARY
    if any(token in upper for token in ("REAL", "FLOA", "DOUB")):
        return _FLOAT
    if "BOOL" in upper:
        return _BOOLEAN
    if "DATE" in upper or "TIME" in upper:
        return _DATETIME
    return _DECIMAL