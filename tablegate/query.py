"""Parameterised SQL statements over tables known to a ModelRegistry."""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Union

from .registry import ModelRegistry, default_registry
from .types import TableMeta

logger = logging.getLogger(__name__)

VALID_OPERATORS = frozenset(
    {"=", "!=", "<>", "<", ">", "<=", ">=", "LIKE", "NOT LIKE"}
)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_UINT64_MAX = 2**64 - 1


class Dialect(enum.Enum):
    """SQL dialect; decides identifier quoting and placeholder style."""

    POSTGRES = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite3"

    def quote(self, name: str) -> str:
        """Quote an identifier for this dialect."""
        if self is Dialect.MYSQL:
            return f"`{name}`"
        return f'"{name}"'


@dataclass
class QueryResult:
    """Rows returned by a statement and the number of rows it touched."""

    rows: list[Mapping[str, Any]] = field(default_factory=list)
    affected_rows: int = 0

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Mapping[str, Any]]:
        return iter(self.rows)

    def __getitem__(self, index: int) -> Mapping[str, Any]:
        return self.rows[index]


class Executor(Protocol):
    """Anything that can run a parameterised statement asynchronously."""

    async def execute(self, sql: str, params: Sequence[str]) -> QueryResult:
        ...


@dataclass(frozen=True)
class WhereCondition:
    """One ANDed condition of a WHERE clause."""

    column: str
    op: str
    values: tuple[str, ...] = ()
    is_null_check: bool = False


@dataclass(frozen=True)
class OrderByClause:
    """One column of an ORDER BY clause."""

    column: str
    direction: str


def value_to_param(value: Any) -> str:
    """Render a JSON value as the text bound to a statement parameter."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer() and _INT64_MIN <= value <= _UINT64_MAX:
            return str(int(value))
        return "%g" % value
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


class _Placeholders:
    """Hands out positional placeholders in the dialect's style."""

    def __init__(self, dialect: Dialect, start: int = 1) -> None:
        self.dialect = dialect
        self.index = start

    def next(self) -> str:
        current = self.index
        self.index += 1
        return "?" if self.dialect is Dialect.MYSQL else f"${current}"


Statement = tuple[str, list[str]]


class QueryBuilder:
    """Fluent builder for SELECT, INSERT, UPDATE, DELETE and COUNT statements.

    Table and column names are checked against the registry, and every value
    is passed as a bound parameter.
    """

    def __init__(
        self,
        db: Optional[Executor] = None,
        *,
        dialect: Union[Dialect, str] = Dialect.POSTGRES,
        registry: Optional[ModelRegistry] = None,
    ) -> None:
        self._db = db
        self.dialect = Dialect(dialect)
        self._registry = registry if registry is not None else default_registry()
        self._table_name = ""
        self._table_meta: Optional[TableMeta] = None
        self._select: list[str] = []
        self._where: list[WhereCondition] = []
        self._order_by: list[OrderByClause] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def table_meta(self) -> Optional[TableMeta]:
        return self._table_meta

    @property
    def _is_mysql(self) -> bool:
        return self.dialect is Dialect.MYSQL

    # --- building -------------------------------------------------------

    def table(self, table_name: str) -> QueryBuilder:
        """Choose the table; it must be registered."""
        meta = self._registry.get_table(table_name)
        if meta is None:
            raise ValueError(f"Table '{table_name}' not found in ModelRegistry")
        self._table_meta = meta
        self._table_name = table_name
        return self

    def select(self, columns: Sequence[str]) -> QueryBuilder:
        """Restrict the selected columns; an empty list selects everything."""
        columns = list(columns)
        for column in columns:
            self._validate_column(column)
        self._select = columns
        return self

    def where(self, column: str, op: str, value: Any) -> QueryBuilder:
        """Add ``column op value``; the operator is matched case-insensitively."""
        self._validate_column(column)
        upper_op = op.upper()
        if upper_op not in VALID_OPERATORS:
            raise ValueError(f"Invalid operator: {op}")
        self._where.append(WhereCondition(column, upper_op, (value_to_param(value),)))
        return self

    def where_eq(self, column: str, value: Any) -> QueryBuilder:
        """Add ``column = value``."""
        return self.where(column, "=", value)

    def where_null(self, column: str) -> QueryBuilder:
        """Add ``column IS NULL``."""
        self._validate_column(column)
        self._where.append(WhereCondition(column, "IS NULL", is_null_check=True))
        return self

    def where_not_null(self, column: str) -> QueryBuilder:
        """Add ``column IS NOT NULL``."""
        self._validate_column(column)
        self._where.append(WhereCondition(column, "IS NOT NULL", is_null_check=True))
        return self

    def where_in(self, column: str, values: Sequence[Any]) -> QueryBuilder:
        """Add ``column IN (...)``; ``values`` must be a non-empty list."""
        self._validate_column(column)
        if not isinstance(values, (list, tuple)) or not values:
            raise ValueError("whereIn requires a non-empty JSON array")
        self._where.append(
            WhereCondition(column, "IN", tuple(value_to_param(v) for v in values))
        )
        return self

    def order_by(self, column: str, direction: str = "ASC") -> QueryBuilder:
        """Add an ORDER BY column; direction is ASC or DESC, any case."""
        self._validate_column(column)
        upper = direction.upper()
        if upper not in ("ASC", "DESC"):
            raise ValueError("Order direction must be ASC or DESC")
        self._order_by.append(OrderByClause(column, upper))
        return self

    def limit(self, count: int) -> QueryBuilder:
        """Set LIMIT."""
        self._limit = self._non_negative(count, "limit")
        return self

    def offset(self, count: int) -> QueryBuilder:
        """Set OFFSET."""
        self._offset = self._non_negative(count, "offset")
        return self

    def reset(self) -> QueryBuilder:
        """Forget the table and every clause so the builder can be reused."""
        self._table_name = ""
        self._table_meta = None
        self._select = []
        self._where = []
        self._order_by = []
        self._limit = None
        self._offset = None
        return self

    # --- SQL generation -------------------------------------------------

    def build_select(self) -> Statement:
        """Return the SELECT statement and its parameters."""
        self._require_table("SELECT")
        columns = ", ".join(map(self._quote, self._select)) if self._select else "*"
        where, params, _ = self._where_clause()
        sql = (
            f"SELECT {columns} FROM {self._quote(self._table_name)}"
            f"{where}{self._order_by_clause()}{self._limit_offset_clause()}"
        )
        return sql, params

    def build_insert(self, data: Mapping[str, Any]) -> Statement:
        """Return the INSERT statement for one row and its parameters."""
        self._require_table("INSERT")
        if not isinstance(data, Mapping) or not data:
            raise ValueError("INSERT data must be a non-empty JSON object")
        placeholders = _Placeholders(self.dialect)
        columns = sorted(data)
        for column in columns:
            self._validate_column(column)
        names = ", ".join(map(self._quote, columns))
        marks = ", ".join(placeholders.next() for _ in columns)
        params = [value_to_param(data[column]) for column in columns]
        sql = f"INSERT INTO {self._quote(self._table_name)} ({names}) VALUES ({marks})"
        if not self._is_mysql:
            sql += " RETURNING *"
        return sql, params

    def build_update(self, data: Mapping[str, Any]) -> Statement:
        """Return the UPDATE statement and its parameters; None sets NULL."""
        self._require_table("UPDATE")
        if not isinstance(data, Mapping) or not data:
            raise ValueError("UPDATE data must be a non-empty JSON object")
        placeholders = _Placeholders(self.dialect)
        assignments = []
        params: list[str] = []
        for column in sorted(data):
            self._validate_column(column)
            value = data[column]
            if value is None:
                assignments.append(f"{self._quote(column)} = NULL")
            else:
                assignments.append(f"{self._quote(column)} = {placeholders.next()}")
                params.append(value_to_param(value))
        where, where_params, _ = self._where_clause(placeholders.index)
        sql = f"UPDATE {self._quote(self._table_name)} SET {', '.join(assignments)}{where}"
        params.extend(where_params)
        if not self._is_mysql:
            sql += " RETURNING *"
        return sql, params

    def build_delete(self) -> Statement:
        """Return the DELETE statement and its parameters."""
        self._require_table("DELETE")
        where, params, _ = self._where_clause()
        sql = f"DELETE FROM {self._quote(self._table_name)}{where}"
        if not self._is_mysql:
            sql += " RETURNING *"
        return sql, params

    def build_count(self) -> Statement:
        """Return the COUNT statement and its parameters."""
        self._require_table("COUNT")
        where, params, _ = self._where_clause()
        sql = f"SELECT COUNT(*) AS count FROM {self._quote(self._table_name)}{where}"
        return sql, params

    # --- execution ------------------------------------------------------

    async def execute_select(self) -> QueryResult:
        """Run the SELECT."""
        return await self._exec(*self.build_select())

    async def execute_insert(self, data: Mapping[str, Any]) -> QueryResult:
        """Run the INSERT and return the inserted row."""
        result = await self._exec(*self.build_insert(data))
        meta = self._table_meta
        if self._is_mysql and meta is not None and meta.primary_keys:
            last_id = await self._exec("SELECT LAST_INSERT_ID() AS id", [])
            if len(last_id) > 0:
                result = await self._select_by_key(
                    meta.primary_keys[0], value_to_param(last_id[0]["id"])
                )
        return result

    async def execute_update(self, data: Mapping[str, Any]) -> QueryResult:
        """Run the UPDATE and return the updated rows."""
        result = await self._exec(*self.build_update(data))
        meta = self._table_meta
        if (
            self._is_mysql
            and result.affected_rows > 0
            and meta is not None
            and meta.primary_keys
            and self._where
        ):
            pk = meta.primary_keys[0]
            cond = next(
                (c for c in self._where if c.column == pk and c.values), None
            )
            if cond is not None:
                result = await self._select_by_key(pk, cond.values[0])
        return result

    async def execute_delete(self) -> QueryResult:
        """Run the DELETE."""
        return await self._exec(*self.build_delete())

    async def execute_count(self) -> int:
        """Run the COUNT and return the number of matching rows."""
        result = await self._exec(*self.build_count())
        if len(result) > 0:
            return int(result[0]["count"])
        return 0

    # --- helpers --------------------------------------------------------

    @staticmethod
    def _non_negative(count: int, what: str) -> int:
        if count < 0:
            raise ValueError(f"{what} must not be negative")
        return count

    def _require_table(self, action: str) -> None:
        if not self._table_name:
            raise RuntimeError(f"No table specified for {action}")

    def _validate_column(self, column: str) -> None:
        if self._table_meta is None:
            raise RuntimeError("Cannot validate column: no table selected")
        if not self._table_meta.has_column(column):
            raise ValueError(
                f"Column '{column}' does not exist in table '{self._table_name}'"
            )

    def _quote(self, name: str) -> str:
        return self.dialect.quote(name)

    def _where_clause(self, start: int = 1) -> tuple[str, list[str], int]:
        if not self._where:
            return "", [], start
        placeholders = _Placeholders(self.dialect, start)
        parts = []
        params: list[str] = []
        for cond in self._where:
            column = self._quote(cond.column)
            if cond.is_null_check:
                parts.append(f"{column} {cond.op}")
            elif cond.op == "IN":
                marks = ", ".join(placeholders.next() for _ in cond.values)
                parts.append(f"{column} IN ({marks})")
                params.extend(cond.values)
            else:
                parts.append(f"{column} {cond.op} {placeholders.next()}")
                params.append(cond.values[0])
        return " WHERE " + " AND ".join(parts), params, placeholders.index

    def _order_by_clause(self) -> str:
        if not self._order_by:
            return ""
        return " ORDER BY " + ", ".join(
            f"{self._quote(clause.column)} {clause.direction}"
            for clause in self._order_by
        )

    def _limit_offset_clause(self) -> str:
        sql = ""
        if self._limit is not None:
            sql += f" LIMIT {self._limit}"
        if self._offset is not None:
            sql += f" OFFSET {self._offset}"
        return sql

    async def _select_by_key(self, pk: str, value: str) -> QueryResult:
        placeholder = _Placeholders(self.dialect).next()
        sql = (
            f"SELECT * FROM {self._quote(self._table_name)} "
            f"WHERE {self._quote(pk)} = {placeholder}"
        )
        return await self._exec(sql, [value])

    async def _exec(self, sql: str, params: list[str]) -> QueryResult:
        if self._db is None:
            raise RuntimeError("No database executor configured")
        logger.debug("QueryBuilder SQL: %s", sql)
        return await self._db.execute(sql, params)