"""DB-API execution.

:class:`Driver` bundles a DB-API connection with the :class:`StatementConfig`
of its dialect. Every call prepares the statement for that dialect, runs it
on a fresh cursor and returns plain Python values. Dump flags passed among
the parameters write diagnostics to a writer after the statement ran.
"""

import contextlib
import sys
from collections.abc import Generator, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional

from sqlbind.bulk import BulkInsert
from sqlbind.config import DialectRegistry, StatementConfig
from sqlbind.dialects import Dialect
from sqlbind.exceptions import SQLBindError, wrap_exceptions
from sqlbind.parameters.types import DumpArg
from sqlbind.statement import PreparedStatement, format_literal, prepare
from sqlbind.utils.logging import get_logger

if TYPE_CHECKING:
    from sqlbind.protocols import WriterProtocol
    from sqlbind.typing import DictRow

__all__ = ("DBAPICursor", "Driver")

logger = get_logger("driver")


class DBAPICursor:
    """Context manager for DB-API cursor management."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection
        self.cursor: Optional[Any] = None

    def __enter__(self) -> Any:
        self.cursor = self.connection.cursor()
        return self.cursor

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.cursor is not None:
            with contextlib.suppress(Exception):
                self.cursor.close()


def _rows(cursor: Any) -> "list[DictRow]":
    if cursor.description is None:
        return []
    columns = [col[0] for col in cursor.description]
    return [dict(row) if isinstance(row, Mapping) else dict(zip(columns, row)) for row in cursor.fetchall()]


def _run(cursor: Any, statement: PreparedStatement) -> None:
    if statement.parameters:
        cursor.execute(statement.sql, statement.driver_parameters)
    else:
        cursor.execute(statement.sql)


def _write_rows(out: "WriterProtocol", rows: "Sequence[Mapping[str, Any]]", vertical: bool) -> None:
    if vertical:
        for row in rows:
            width = max((len(c) for c in row), default=0)
            for column, value in row.items():
                out.write(f"{column.ljust(width)}  {_cell(value)}\n")
            out.write("\n")
        return

    columns = list(rows[0]) if rows else []
    cells = [[_cell(row[c]) for c in columns] for row in rows]
    widths = [max([len(c), *(len(r[i]) for r in cells)]) for i, c in enumerate(columns)]
    out.write("  ".join(c.ljust(w) for c, w in zip(columns, widths)).rstrip() + "\n")
    for row_cells in cells:
        out.write("  ".join(v.ljust(w) for v, w in zip(row_cells, widths)).rstrip() + "\n")


def _cell(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    return str(value)


class Driver:
    """A DB-API connection and the dialect configuration it speaks.

    Args:
        connection: An open DB-API 2.0 connection.
        statement_config: Dialect configuration; resolved from the
            connection's driver module through the default registry when
            not given.
    """

    __slots__ = ("connection", "statement_config")

    def __init__(self, connection: Any, statement_config: "StatementConfig | None" = None) -> None:
        self.connection = connection
        self.statement_config = statement_config or DialectRegistry.default().for_connection(connection)

    @classmethod
    def from_connection(cls, connection: Any, registry: "DialectRegistry | None" = None) -> "Driver":
        """Create a driver, resolving the dialect through a registry."""
        registry = registry or DialectRegistry.default()
        return cls(connection, registry.for_connection(connection))

    @property
    def dialect(self) -> Dialect:
        return self.statement_config.dialect

    def with_cursor(self) -> DBAPICursor:
        return DBAPICursor(self.connection)

    def prepare(self, sql: str, *params: Any) -> PreparedStatement:
        """Prepare a statement for this connection's dialect; see :func:`sqlbind.prepare`."""
        return prepare(self.statement_config, sql, *params)

    def execute(self, statement: PreparedStatement) -> int:
        """Run a prepared statement and return the affected row count."""
        with wrap_exceptions(), self.with_cursor() as cursor:
            _run(cursor, statement)
            count = cursor.rowcount if cursor.rowcount and cursor.rowcount > 0 else 0
        if statement.dump:
            self._dump(statement, None)
        return count

    def fetch(self, statement: PreparedStatement) -> "list[DictRow]":
        """Run a prepared statement and return its rows."""
        with wrap_exceptions(), self.with_cursor() as cursor:
            _run(cursor, statement)
            rows = _rows(cursor)
        if statement.dump:
            self._dump(statement, rows)
        return rows

    def exec(self, sql: str, *params: Any) -> int:
        """Execute a statement and return the affected row count."""
        return self.execute(self.prepare(sql, *params))

    def select(self, sql: str, *params: Any) -> "list[DictRow]":
        """Execute a query and return all rows."""
        return self.fetch(self.prepare(sql, *params))

    def get(self, sql: str, *params: Any) -> "DictRow | None":
        """Execute a query and return the first row, or ``None``."""
        rows = self.select(sql, *params)
        return rows[0] if rows else None

    def get_value(self, sql: str, *params: Any) -> Any:
        """Execute a query and return the first column of the first row."""
        row = self.get(sql, *params)
        if row is None:
            return None
        return next(iter(row.values()), None)

    def insert_id(self, sql: str, *params: Any, column: str = "id") -> Any:
        """Execute an insert and return the generated id.

        PostgreSQL has no ``lastrowid``, so ``returning <column>`` is
        appended to the statement there.
        """
        if self.dialect is Dialect.POSTGRESQL:
            return self.get_value(f"{sql.rstrip().rstrip(';')} returning {column}", *params)
        statement = self.prepare(sql, *params)
        with wrap_exceptions(), self.with_cursor() as cursor:
            _run(cursor, statement)
            last_id = cursor.lastrowid
        if statement.dump:
            self._dump(statement, None)
        return last_id

    def column_types(self, table: str) -> "dict[str, str]":
        """The declared type of every column of a table, keyed by column name."""
        if self.dialect is Dialect.SQLITE:
            rows = self.select(f"pragma table_info({format_literal(table)})")
            return {row["name"]: str(row["type"]).lower() for row in rows}

        schema, _, name = table.rpartition(".")
        current = "current_schema()" if self.dialect is Dialect.POSTGRESQL else "database()"
        rows = self.select(
            "select column_name, data_type from information_schema.columns "
            f"where table_name = ? and table_schema = {'?' if schema else current}",
            name,
            *([schema] if schema else []),
        )
        return {str(row["column_name"]): str(row["data_type"]) for row in rows}

    def bulk_insert(
        self,
        table: str,
        columns: "Sequence[str]",
        *,
        column_types: "dict[str, str] | None" = None,
        limit: "int | None" = None,
        correlation_id: "str | None" = None,
    ) -> BulkInsert:
        """Start a bulk insert; see :class:`~sqlbind.bulk.BulkInsert`."""
        return BulkInsert(
            self, table, columns, column_types=column_types, limit=limit, correlation_id=correlation_id
        )

    def begin(self) -> None:
        """Begin a database transaction.

        DB-API connections open a transaction implicitly; only SQLite in
        autocommit mode needs an explicit ``begin``.
        """
        if self.dialect is Dialect.SQLITE and not getattr(self.connection, "in_transaction", True):
            with wrap_exceptions():
                self.connection.execute("begin")

    def commit(self) -> None:
        """Commit the current transaction."""
        with wrap_exceptions():
            self.connection.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        with wrap_exceptions():
            self.connection.rollback()

    @contextlib.contextmanager
    def transaction(self) -> Generator["Driver", None, None]:
        """Run a block in a transaction; commit on success, roll back on error."""
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def _dump(self, statement: PreparedStatement, rows: "list[dict[str, Any]] | None") -> None:
        out: WriterProtocol = statement.dump_writer or self.statement_config.dump_writer or sys.stderr
        flags = statement.dump or DumpArg(0)
        if DumpArg.QUERY in flags:
            out.write(f"Query: {statement.interpolated()}\n")
        if DumpArg.RESULT in flags and rows is not None:
            _write_rows(out, rows, vertical=DumpArg.VERTICAL in flags)
        if DumpArg.EXPLAIN in flags:
            self._explain(out, statement)

    def _explain(self, out: "WriterProtocol", statement: PreparedStatement) -> None:
        prefix = {
            Dialect.SQLITE: "explain query plan ",
            Dialect.POSTGRESQL: "explain analyze ",
        }.get(self.dialect, "explain ")
        plan = PreparedStatement(
            prefix + statement.sql, statement.parameters, statement.parameter_style, segments=statement.segments
        )
        try:
            rows = self.fetch(plan)
        except SQLBindError as exc:
            logger.warning("could not explain statement: %s", exc)
            return
        detail = "detail" if rows and "detail" in rows[0] else None
        out.write("EXPLAIN:\n")
        for row in rows:
            value = row[detail] if detail else next(iter(row.values()), "")
            out.write(f"\t{value}\n")
