from collections.abc import Generator, Sequence
from contextlib import contextmanager
from typing import Any, Optional

__all__ = (
    "BulkFlushError",
    "BulkInsertError",
    "ConditionalError",
    "DuplicateParameterError",
    "ExtraParameterError",
    "ImproperConfigurationError",
    "MissingParameterError",
    "ParameterError",
    "ParameterModeError",
    "ParameterStyleMismatchError",
    "PrepareError",
    "SQLBindError",
    "SerializationError",
    "UnresolvedConditionalError",
    "UnsupportedConditionalTypeError",
    "UnsupportedParameterError",
    "wrap_exceptions",
)


class SQLBindError(Exception):
    """Base exception class from which all sqlbind exceptions inherit."""

    detail: str

    def __init__(self, *args: Any, detail: str = "") -> None:
        """Initialize ``SQLBindError``.

        Args:
            *args: args are converted to :class:`str` before passing to :class:`Exception`
            detail: detail of the exception.
        """
        str_args = [str(arg) for arg in args if arg]
        if not detail:
            if str_args:
                detail, *str_args = str_args
            elif hasattr(self, "detail"):
                detail = self.detail
        self.detail = detail
        super().__init__(*str_args)

    def __repr__(self) -> str:
        if self.detail:
            return f"{self.__class__.__name__} - {self.detail}"
        return self.__class__.__name__

    def __str__(self) -> str:
        return " ".join((*self.args, self.detail)).strip()


class ImproperConfigurationError(SQLBindError):
    """Improper Configuration error.

    Raised for an unknown dialect, an empty column list, or missing column metadata.
    """


class SerializationError(SQLBindError):
    """Encoding or decoding of an object failed."""


# -- Parameter Errors --
class ParameterError(SQLBindError):
    """Base class for parameter-related errors."""

    sql: Optional[str]

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        """Initialize with optional SQL context."""
        detail_message = message
        if sql:
            detail_message = f"{message}\nSQL: {sql}"
        super().__init__(detail=detail_message)
        self.sql = sql


class DuplicateParameterError(ParameterError):
    """Raised when the same parameter name is supplied by more than one source."""

    name: str

    def __init__(self, name: str) -> None:
        super().__init__(f"parameter given more than once: {name!r}")
        self.name = name


class ParameterModeError(ParameterError):
    """Raised when named and positional parameters are mixed in one call."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or "cannot mix named and positional parameters")


class UnsupportedParameterError(ParameterError):
    """Raised when a parameter has a shape the normalizer does not accept."""


class MissingParameterError(ParameterError):
    """Raised when a placeholder has no value to bind."""


class ExtraParameterError(ParameterError):
    """Raised when extra parameters are provided."""


class ParameterStyleMismatchError(ParameterError):
    """Raised when a statement mixes ``?`` and ``$n`` placeholders."""


class ConditionalError(ParameterError):
    """Base class for conditional template errors."""


class UnresolvedConditionalError(ConditionalError):
    """Raised when a conditional references a name that was not passed."""

    name: str

    def __init__(self, name: str, sql: Optional[str] = None) -> None:
        super().__init__(f"could not find parameter for conditional: {name!r}", sql)
        self.name = name


class UnsupportedConditionalTypeError(ConditionalError):
    """Raised when a conditional's value has no defined truthiness."""

    name: str

    def __init__(self, name: str, value: Any) -> None:
        super().__init__(f"unsupported conditional type {type(value).__name__} for {name!r}")
        self.name = name


class PrepareError(SQLBindError):
    """Raised by ``prepare()`` when one of its stages fails.

    The failing stage's exception is available as ``__cause__``.
    """

    stage: str

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(detail=f"sqlbind.prepare: {stage}: {message}")
        self.stage = stage


# -- Bulk Errors --
class BulkFlushError(SQLBindError):
    """A single bulk insert flush that failed or rejected rows."""

    query: Optional[str]
    rejected_rows: "list[tuple[Any, ...]]"

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        rejected_rows: "Optional[Sequence[tuple[Any, ...]]]" = None,
    ) -> None:
        detail_message = message
        if query:
            detail_message = f"{message} (query={query!r})"
        super().__init__(detail=detail_message)
        self.query = query
        self.rejected_rows = list(rejected_rows or ())


class BulkInsertError(SQLBindError):
    """All errors accumulated over the lifetime of a bulk insert."""

    errors: "list[BulkFlushError]"

    def __init__(self, errors: "Sequence[BulkFlushError]") -> None:
        lines = "\n".join(str(err) for err in errors)
        super().__init__(detail=f"{len(errors)} errors:\n{lines}")
        self.errors = list(errors)


@contextmanager
def wrap_exceptions() -> Generator[None, None, None]:
    """Re-raise driver exceptions as :class:`SQLBindError`, chaining the original."""
    try:
        yield

    except SQLBindError:
        raise
    except Exception as exc:
        msg = f"An error occurred during the operation: {exc}"
        raise SQLBindError(detail=msg) from exc
