"""Runtime-checkable protocols for sqlbind.

These describe the capabilities the pipeline inspects on parameter values and
the collaborators it calls out to, so that ``isinstance()`` checks replace
ad hoc ``hasattr()`` probing.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sqlbind.config import StatementConfig
    from sqlbind.statement import PreparedStatement

__all__ = (
    "ColumnMetadataProtocol",
    "DataclassProtocol",
    "ExecutionProtocol",
    "SupportsSQLValue",
    "WriterProtocol",
)


@runtime_checkable
class SupportsSQLValue(Protocol):
    """A value that serializes itself to a single bind value.

    Implementations are always bound as one scalar, never merged as a bag of
    fields and never expanded as a list.
    """

    def sql_value(self) -> Any:
        """Return the value handed to the driver."""
        ...


@runtime_checkable
class DataclassProtocol(Protocol):
    """Protocol for instance checking dataclasses"""

    __dataclass_fields__: ClassVar[dict[str, Any]]


@runtime_checkable
class WriterProtocol(Protocol):
    """Anything that text can be written to (dump output)."""

    def write(self, s: str, /) -> Any: ...


@runtime_checkable
class ColumnMetadataProtocol(Protocol):
    """Look up the declared SQL type name of each column of a table."""

    def column_types(self, table: str) -> "dict[str, str]": ...


@runtime_checkable
class ExecutionProtocol(Protocol):
    """The dialect and execution primitive bundle used by the bulk builder.

    ``statement_config`` fixes the dialect; ``execute`` runs a prepared
    statement and returns the affected row count; ``fetch`` runs it and
    returns the rows.
    """

    statement_config: "StatementConfig"

    def execute(self, statement: "PreparedStatement") -> int: ...

    def fetch(self, statement: "PreparedStatement") -> "Sequence[dict[str, Any]]": ...
