"""Bulk inserts.

:class:`BulkInsert` buffers rows and sends as many of them per statement as
the dialect allows. Generic dialects get a multi-row ``values`` list with one
placeholder per cell; PostgreSQL gets one array parameter per column fed to
``unnest()``, so the batch size no longer multiplies the parameter count.

Errors never escape ``values()``. Each failed flush is recorded and reported
by :meth:`BulkInsert.errors` and :meth:`BulkInsert.finish`.
"""

import logging
import threading
import uuid
from collections.abc import Sequence
from types import TracebackType
from typing import TYPE_CHECKING, Any, Final

from sqlbind.array import Array
from sqlbind.dialects import quote_identifier
from sqlbind.exceptions import BulkFlushError, BulkInsertError, ImproperConfigurationError
from sqlbind.parameters.converter import ParameterConverter
from sqlbind.parameters.types import Placeholder, Segment
from sqlbind.protocols import ColumnMetadataProtocol
from sqlbind.statement import PreparedStatement
from sqlbind.utils.logging import correlation_context, get_correlation_id, get_logger, log_with_context

if TYPE_CHECKING:
    from sqlbind.parameters.types import DumpArg
    from sqlbind.protocols import ExecutionProtocol

__all__ = ("BulkInsert", "normalize_column_type", "row_limit")

logger = get_logger("bulk")

_TYPE_ALIASES: Final = {
    "timestamp without time zone": "timestamp",
    "character varying": "text",
}


def normalize_column_type(type_name: str) -> str:
    """Map an ``information_schema`` type name to one usable in a cast."""
    return _TYPE_ALIASES.get(type_name, type_name)


def row_limit(max_parameters: int, column_count: int) -> int:
    """Number of rows one statement may carry.

    One row's worth of parameters is kept free, and there is always room
    for at least one row.
    """
    return max(1, max_parameters // column_count - 1)


class _RowMajor:
    """Rows in a ``values (?,?),(?,?)`` list."""

    __slots__ = ("rows",)

    def __init__(self) -> None:
        self.rows: list[tuple[Any, ...]] = []

    def __len__(self) -> int:
        return len(self.rows)

    def add(self, row: "tuple[Any, ...]") -> None:
        self.rows.append(row)

    def clear(self) -> None:
        self.rows = []

    def segments(self, head: str) -> "list[Segment]":
        segments: list[Segment] = [head, " values "]
        for i, row in enumerate(self.rows):
            segments.append(",(" if i else "(")
            for j, value in enumerate(row):
                if j:
                    segments.append(",")
                segments.append(Placeholder(value))
            segments.append(")")
        return segments


class _ColumnMajor:
    """One growing list per column, each bound as a typed array."""

    __slots__ = ("columns", "types")

    def __init__(self, types: "list[str]") -> None:
        self.types = types
        self.columns: list[list[Any]] = [[] for _ in types]

    def __len__(self) -> int:
        return len(self.columns[0])

    def add(self, row: "tuple[Any, ...]") -> None:
        for column, value in zip(self.columns, row):
            column.append(value)

    def clear(self) -> None:
        self.columns = [[] for _ in self.types]

    def segments(self, head: str) -> "list[Segment]":
        segments: list[Segment] = [head, " select * from unnest("]
        for i, (values, type_name) in enumerate(zip(self.columns, self.types)):
            if i:
                segments.append(", ")
            segments.extend((Placeholder(Array(values)), f"::{type_name}[]"))
        segments.append(")")
        return segments


class BulkInsert:
    """Insert many rows with as few statements as possible.

    Example::

        with driver.bulk_insert("tbl", ["a", "b"]) as ins:
            for row in rows:
                ins.values(*row)

    Args:
        executor: Dialect configuration and execution primitive.
        table: Table name; quoted for the dialect.
        columns: Column names, in the order values are given.
        column_types: Column type names for the array strategy. Looked up
            through ``executor.column_types()`` when not given.
        limit: Rows per statement; computed from the dialect's parameter
            limit when not given.
        correlation_id: Tags the log records of every flush, including those
            of the executor; defaults to the caller's current correlation
            id, or a new one.

    Raises:
        ImproperConfigurationError: If ``columns`` is empty, or a column type
            cannot be determined for the array strategy.
    """

    def __init__(
        self,
        executor: "ExecutionProtocol",
        table: str,
        columns: "Sequence[str]",
        *,
        column_types: "dict[str, str] | None" = None,
        limit: "int | None" = None,
        correlation_id: "str | None" = None,
    ) -> None:
        if not columns:
            msg = f"bulk insert into {table!r} needs at least one column"
            raise ImproperConfigurationError(msg)

        self._executor = executor
        self._config = executor.statement_config
        self.correlation_id = correlation_id or get_correlation_id() or uuid.uuid4().hex
        self._converter = ParameterConverter(self._config.parameter_config)
        self.table = table
        self.columns = list(columns)
        self.limit = limit if limit is not None else row_limit(self._config.max_parameters, len(self.columns))
        if self.limit < 1:
            msg = f"bulk insert limit must be positive, got {self.limit}"
            raise ImproperConfigurationError(msg)

        self._conflict = ""
        self._returning: list[str] = []
        self._dump: DumpArg | None = None
        self._lock = threading.Lock()
        self._errors: list[BulkFlushError] = []
        self._returned: list[dict[str, Any]] = []
        self._rejected: list[tuple[Any, ...]] = []
        self._flushes = 0

        self._buffer: _RowMajor | _ColumnMajor
        if self._config.dialect.supports_arrays:
            self._buffer = _ColumnMajor(self._resolve_types(column_types))
        else:
            self._buffer = _RowMajor()

    def _resolve_types(self, column_types: "dict[str, str] | None") -> "list[str]":
        if column_types is None:
            if not isinstance(self._executor, ColumnMetadataProtocol):
                msg = f"column types for {self.table!r} are required for an array bulk insert"
                raise ImproperConfigurationError(msg)
            column_types = self._executor.column_types(self.table)
        missing = [c for c in self.columns if c not in column_types]
        if missing:
            msg = f"no column type found for {', '.join(missing)} in {self.table!r}"
            raise ImproperConfigurationError(msg)
        return [normalize_column_type(column_types[c]) for c in self.columns]

    @property
    def flush_count(self) -> int:
        """Number of flushes performed so far."""
        return self._flushes

    def on_conflict(self, clause: str) -> "BulkInsert":
        """Set the ``on conflict ...`` clause, including the ``on conflict`` keywords."""
        self._conflict = clause
        return self

    def returning(self, *columns: str) -> "BulkInsert":
        """Return these columns from every flush; see :meth:`returned`."""
        if columns and not self._config.dialect.supports_returning:
            msg = f"{self._config.dialect} does not support returning"
            raise ImproperConfigurationError(msg)
        self._returning = list(columns)
        return self

    def dump(self, flags: "DumpArg | None") -> "BulkInsert":
        """Attach dump flags to every statement this insert runs."""
        self._dump = flags
        return self

    def values(self, *row: Any) -> None:
        """Add one row.

        Pending rows are flushed first when adding this row would meet or
        exceed :attr:`limit`, so a statement carries at most ``limit - 1``
        rows (one row when the limit is one or two).

        A row whose length does not match the columns is rejected and
        reported with the next flush; it is never sent to the database.
        """
        with self._lock:
            if len(self._buffer) and len(self._buffer) + 1 >= self.limit:
                self._flush()
            if len(row) != len(self.columns):
                self._rejected.append(row)
                return
            self._buffer.add(row)

    def returned(self) -> "list[dict[str, Any]]":
        """Rows returned since the last call; each row is returned only once."""
        with self._lock:
            rows, self._returned = self._returned, []
            return rows

    def errors(self) -> "BulkInsertError | None":
        """All errors so far, combined, or ``None``."""
        with self._lock:
            if not self._errors:
                return None
            return BulkInsertError(self._errors)

    def finish(self) -> "BulkInsertError | None":
        """Flush pending rows and return all errors so far.

        Can be called more than once.
        """
        with self._lock:
            if len(self._buffer) or self._rejected:
                self._flush()
        return self.errors()

    def build(self) -> "PreparedStatement | None":
        """The statement the next flush would run, without running it."""
        with self._lock:
            return self._statement()

    def _statement(self) -> "PreparedStatement | None":
        if not len(self._buffer):
            return None
        head = f"insert into {quote_identifier(self.table, self._config.dialect)} ({','.join(self.columns)})"
        segments = self._buffer.segments(head)
        if self._conflict:
            segments.append(f" {self._conflict}")
        if self._returning:
            segments.append(f" returning {','.join(self._returning)}")
        sql, args = self._converter.render(segments)
        return PreparedStatement(sql, args, self._config.parameter_style, self._dump, segments=segments)

    def _flush(self) -> None:
        with correlation_context(self.correlation_id):
            self._flush_batch()

    def _flush_batch(self) -> None:
        statement = self._statement()
        rows = len(self._buffer)
        rejected, self._rejected = self._rejected, []
        self._buffer.clear()
        self._flushes += 1

        error: BulkFlushError | None = None
        if statement is not None:
            log_with_context(
                logger,
                logging.DEBUG,
                "bulk insert flush",
                table=self.table,
                row_count=rows,
                parameter_count=len(statement.parameters),
            )
            try:
                if self._returning:
                    self._returned.extend(self._executor.fetch(statement))
                else:
                    self._executor.execute(statement)
            except Exception as exc:  # noqa: BLE001
                error = BulkFlushError(f"bulk insert into {self.table} failed: {exc}", statement.sql, rejected)
                error.__cause__ = exc

        if error is None and rejected:
            error = BulkFlushError(
                f"{len(rejected)} rows rejected: expected {len(self.columns)} values",
                statement.sql if statement is not None else None,
                rejected,
            )
        if error is not None:
            log_with_context(
                logger,
                logging.WARNING,
                "bulk insert flush failed",
                table=self.table,
                row_count=rows,
                rejected_count=len(rejected),
            )
            self._errors.append(error)

    def __enter__(self) -> "BulkInsert":
        return self

    def __exit__(
        self,
        exc_type: "type[BaseException] | None",
        exc_val: "BaseException | None",
        exc_tb: "TracebackType | None",
    ) -> None:
        if exc_type is not None:
            return
        error = self.finish()
        if error is not None:
            raise error
