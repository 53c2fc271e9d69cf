"""Statement preparation.

:func:`prepare` runs the caller's text and parameters through the pipeline:

1. normalize the parameter sources into a positional list or a name table,
2. resolve ``{{:name ...}}`` conditionals (named mode only),
3. bind ``:name`` references, or ``?`` / ``$n`` placeholders,
4. expand list values into one placeholder per element,
5. render the driver's placeholder style and coerce values.

Every call produces a fresh :class:`PreparedStatement`; nothing is cached
across calls apart from the placeholder scan of identical text.
"""

import datetime
import logging
from collections.abc import Generator
from contextlib import contextmanager
from decimal import Decimal
from functools import singledispatch
from typing import TYPE_CHECKING, Any

from mypy_extensions import mypyc_attr

from sqlbind.exceptions import ParameterError, PrepareError, SerializationError
from sqlbind.parameters.binder import bind_named, bind_positional
from sqlbind.parameters.conditionals import resolve_conditionals
from sqlbind.parameters.converter import ParameterConverter
from sqlbind.parameters.expander import expand_slices
from sqlbind.parameters.normalizer import normalize_parameters
from sqlbind.parameters.types import ParameterStyle, Placeholder
from sqlbind.utils.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from sqlbind.config import StatementConfig
    from sqlbind.parameters.types import DumpArg, Segment
    from sqlbind.protocols import WriterProtocol

__all__ = ("PreparedStatement", "format_literal", "prepare")

logger = get_logger("statement")


@mypyc_attr(allow_interpreted_subclasses=False)
class PreparedStatement:
    """Driver-ready statement text and its ordered arguments."""

    __slots__ = ("dump", "dump_writer", "parameter_style", "parameters", "segments", "sql")

    def __init__(
        self,
        sql: str,
        parameters: "list[Any] | None" = None,
        parameter_style: ParameterStyle = ParameterStyle.QMARK,
        dump: "DumpArg | None" = None,
        dump_writer: "WriterProtocol | None" = None,
        segments: "list[Segment] | None" = None,
    ) -> None:
        self.sql = sql
        self.parameters = parameters if parameters is not None else []
        self.parameter_style = parameter_style
        self.dump = dump
        self.dump_writer = dump_writer
        self.segments = segments

    @property
    def driver_parameters(self) -> "list[Any] | dict[str, Any]":
        """The arguments in the shape a DB-API ``execute()`` expects.

        Named output styles need a mapping keyed by the generated names.
        """
        if self.parameter_style is ParameterStyle.NAMED_COLON:
            return {f"arg{i}": v for i, v in enumerate(self.parameters, 1)}
        if self.parameter_style is ParameterStyle.NAMED_AT:
            return {f"p{i}": v for i, v in enumerate(self.parameters, 1)}
        return self.parameters

    def interpolated(self) -> str:
        """The statement with its arguments written in as SQL literals.

        For diagnostics only; never execute the result.
        """
        if self.segments is None:
            text = self.sql
        else:
            args = iter(self.parameters)
            text = "".join(format_literal(next(args)) if isinstance(s, Placeholder) else s for s in self.segments)
        return text if text.rstrip().endswith(";") else text.rstrip() + ";"

    def __iter__(self) -> "Generator[Any, None, None]":
        yield self.sql
        yield self.parameters

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PreparedStatement):
            return False
        return self.sql == other.sql and self.parameters == other.parameters

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PreparedStatement(sql={self.sql!r}, parameters={self.parameters!r})"


@singledispatch
def format_literal(value: Any) -> str:
    """Write a bind value as an SQL literal, for diagnostic output."""
    return format_literal(str(value))


@format_literal.register(type(None))
def _(value: None) -> str:
    return "NULL"


@format_literal.register
def _(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


@format_literal.register
def _(value: bool) -> str:
    return "true" if value else "false"


@format_literal.register(int)
@format_literal.register(float)
@format_literal.register(Decimal)
def _(value: "int | float | Decimal") -> str:
    return str(value)


@format_literal.register(bytes)
@format_literal.register(bytearray)
def _(value: "bytes | bytearray") -> str:
    return f"x'{value.hex()}'"


@format_literal.register(datetime.date)
@format_literal.register(datetime.time)
def _(value: "datetime.date | datetime.time") -> str:
    return format_literal(value.isoformat())


@format_literal.register(list)
@format_literal.register(tuple)
def _(value: "list[Any] | tuple[Any, ...]") -> str:
    return "(" + ", ".join(format_literal(v) for v in value) + ")"


@contextmanager
def _stage(name: str) -> Generator[None, None, None]:
    try:
        yield
    except (ParameterError, SerializationError) as exc:
        raise PrepareError(name, exc.detail) from exc


def prepare(config: "StatementConfig", sql: str, *params: Any) -> PreparedStatement:
    """Prepare a statement for execution.

    Named mode is used as soon as one parameter is a mapping or a record
    (dataclass, msgspec struct, pydantic model, attrs class); all other
    parameters are positional. :class:`~sqlbind.parameters.types.DumpArg`
    flags and a writer may be passed among the parameters; they end up on
    the result and are never bound.

    Positional arguments must match the placeholders exactly: arguments
    given for a statement without any placeholder are rejected with
    :class:`~sqlbind.exceptions.ExtraParameterError` rather than ignored.
    Without any argument the text is returned unscanned.

    Args:
        config: The dialect configuration of the connection.
        sql: Statement text.
        *params: Parameter sources.

    Raises:
        PrepareError: If any stage fails; the stage's error is the cause.

    Returns:
        The prepared statement.
    """
    with _stage("normalize"):
        normalized = normalize_parameters(params)

    style = config.parameter_style
    if not normalized.is_named and not normalized.positional:
        return PreparedStatement(sql, [], style, normalized.dump, normalized.dump_writer)

    if normalized.is_named:
        with _stage("conditionals"):
            text = resolve_conditionals(sql, normalized.named)
        with _stage("bind"):
            segments = bind_named(text, normalized.named)
    else:
        with _stage("bind"):
            segments = bind_positional(sql, normalized.positional)

    with _stage("expand"):
        segments = expand_slices(segments)

    with _stage("rebind"):
        text, args = ParameterConverter(config.parameter_config).render(segments)

    log_with_context(
        logger,
        logging.DEBUG,
        "statement prepared",
        mode="named" if normalized.is_named else "positional",
        placeholder_count=len(args),
        dialect=config.dialect.value,
    )
    return PreparedStatement(text, args, style, normalized.dump, normalized.dump_writer, segments)
