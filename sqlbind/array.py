"""PostgreSQL array values.

:class:`Array` wraps a sequence so it is bound as one array parameter
instead of being expanded into a list of placeholders. Drivers that bind
Python lists natively receive the list; everything else receives the
array's text form (``{1,2,3}``).
"""

import datetime
from collections.abc import Iterable
from decimal import Decimal
from functools import singledispatch
from typing import Any

from sqlbind.exceptions import SerializationError

__all__ = ("Array", "format_timestamp")


def format_timestamp(value: datetime.datetime) -> str:
    """Format a datetime in PostgreSQL's timestamp text format.

    Fractional seconds are trimmed of trailing zeros. Aware datetimes get
    ``Z`` for UTC or a ``+HH:MM`` offset (with seconds when non-zero).

    Args:
        value: The datetime to format.

    Returns:
        The timestamp text.
    """
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is None:
        return text
    if not offset:
        return text + "Z"
    sign = "-" if offset < datetime.timedelta(0) else "+"
    seconds = int(abs(offset).total_seconds())
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    text += f"{sign}{hours:02d}:{minutes:02d}"
    if seconds:
        text += f":{seconds:02d}"
    return text


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


@singledispatch
def _encode_element(value: Any) -> str:
    msg = f"cannot encode {type(value).__name__} as an array element"
    raise SerializationError(msg)


@_encode_element.register(type(None))
def _(value: None) -> str:
    return "NULL"


@_encode_element.register
def _(value: str) -> str:
    return _quote(value)


@_encode_element.register(bytes)
@_encode_element.register(bytearray)
def _(value: "bytes | bytearray") -> str:
    return f'"\\\\x{value.hex()}"'


@_encode_element.register
def _(value: bool) -> str:
    return "true" if value else "false"


@_encode_element.register(int)
@_encode_element.register(Decimal)
def _(value: "int | Decimal") -> str:
    return str(value)


@_encode_element.register
def _(value: float) -> str:
    return repr(value)


@_encode_element.register
def _(value: datetime.datetime) -> str:
    return _quote(format_timestamp(value))


@_encode_element.register(datetime.date)
@_encode_element.register(datetime.time)
def _(value: "datetime.date | datetime.time") -> str:
    return _quote(value.isoformat())


@_encode_element.register(list)
@_encode_element.register(tuple)
def _(value: "list[Any] | tuple[Any, ...]") -> str:
    return _encode_array(value)


def _encode_array(values: "Iterable[Any]") -> str:
    return "{" + ",".join(_encode_element(v) for v in values) + "}"


class Array:
    """A sequence bound as a single PostgreSQL array parameter.

    Example::

        driver.select("select * from t where id = any(:ids)", {"ids": Array([1, 2, 3])})
    """

    __slots__ = ("values",)

    def __init__(self, values: "Iterable[Any] | None") -> None:
        self.values = None if values is None else list(values)

    def sql_value(self) -> "str | None":
        """Return the array literal, or ``None`` for a NULL array."""
        if self.values is None:
            return None
        return _encode_array(self.values)

    def to_list(self) -> "list[Any] | None":
        return None if self.values is None else list(self.values)

    def append(self, value: Any) -> None:
        if self.values is None:
            self.values = []
        self.values.append(value)

    def __len__(self) -> int:
        return 0 if self.values is None else len(self.values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Array):
            return False
        return self.values == other.values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Array({self.values!r})"
