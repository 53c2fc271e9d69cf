"""Conditional template resolution.

``{{:name body}}`` keeps ``body`` when the named parameter is truthy and
``{{:name! body}}`` keeps it when it is falsy. Directives do not nest: the
first ``}}`` after a directive start closes it. Anything in double braces
that does not start with ``:name`` followed by whitespace is left alone.
"""

import datetime
import re
from collections.abc import Mapping
from decimal import Decimal
from functools import singledispatch
from typing import Any, Final

from sqlbind.array import Array
from sqlbind.exceptions import UnresolvedConditionalError, UnsupportedConditionalTypeError
from sqlbind.utils.type_guards import is_sql_value

__all__ = ("has_conditionals", "is_truthy", "resolve_conditionals")


_CONDITIONAL_REGEX: Final = re.compile(
    r"\{\{:(?P<name>[^\W\d]\w*)(?P<negate>!)?[ \t\r\n](?P<body>.*?)\}\}",
    re.DOTALL,
)
_LINE_END_REGEX: Final = re.compile(r"[ \t]*\r?\n")


@singledispatch
def _truthiness(value: Any, name: str) -> bool:
    if is_sql_value(value):
        return _truthiness(value.sql_value(), name)
    raise UnsupportedConditionalTypeError(name, value)


@_truthiness.register
def _(value: bool, name: str) -> bool:
    return value


@_truthiness.register(type(None))
def _(value: None, name: str) -> bool:
    return False


@_truthiness.register(str)
@_truthiness.register(bytes)
@_truthiness.register(bytearray)
@_truthiness.register(list)
@_truthiness.register(tuple)
@_truthiness.register(set)
@_truthiness.register(frozenset)
def _(value: Any, name: str) -> bool:
    return len(value) > 0


@_truthiness.register
def _(value: Array, name: str) -> bool:
    return len(value) > 0


@_truthiness.register(int)
@_truthiness.register(float)
@_truthiness.register(Decimal)
def _(value: Any, name: str) -> bool:
    return value > 0


@_truthiness.register
def _(value: datetime.timedelta, name: str) -> bool:
    return value > datetime.timedelta(0)


@_truthiness.register
def _(value: datetime.datetime, name: str) -> bool:
    return value.replace(tzinfo=None) != datetime.datetime.min


@_truthiness.register
def _(value: datetime.date, name: str) -> bool:
    return value != datetime.date.min


@_truthiness.register
def _(value: datetime.time, name: str) -> bool:
    return value.replace(tzinfo=None) != datetime.time.min


def is_truthy(name: str, value: Any) -> bool:
    """Evaluate whether a conditional's value counts as true.

    Booleans are themselves; strings, byte strings and lists are true when
    non-empty; numbers when greater than zero; ``None`` and zero-valued
    dates and times are false. Self-serializing values are judged by what
    they serialize to.

    Args:
        name: Parameter name, for error messages.
        value: The parameter value.

    Raises:
        UnsupportedConditionalTypeError: For any other type.

    Returns:
        Whether the conditional is truthy.
    """
    return _truthiness(value, name)


def has_conditionals(sql: str) -> bool:
    return "{{:" in sql and _CONDITIONAL_REGEX.search(sql) is not None


def _strip_trailing_blanks(out: "list[str]") -> bool:
    """Strip spaces and tabs off the output; report whether a line start was reached.

    Newlines are never removed: one may be what ends a ``--`` comment.
    """
    while out:
        stripped = out[-1].rstrip(" \t")
        if stripped:
            out[-1] = stripped
            return stripped.endswith("\n")
        out.pop()
    return True


def resolve_conditionals(sql: str, params: "Mapping[str, Any]") -> str:
    """Resolve every conditional directive in a statement.

    The output is built in one forward pass over the original text. A kept
    directive loses ``{{:name``, the separator after it and the closing
    ``}}``. A dropped directive loses its whole span; when it is followed by
    whitespace or the end of the text, the spaces and tabs before it are
    dropped too. Newlines before it are kept so a preceding ``--`` comment
    still ends where it did; a directive alone on its line takes its line
    break with it instead.

    Args:
        sql: Statement text.
        params: The merged named parameter table.

    Raises:
        UnresolvedConditionalError: If a directive names an absent parameter.
        UnsupportedConditionalTypeError: If the value has no truthiness.

    Returns:
        The statement with all directives resolved.
    """
    if not has_conditionals(sql):
        return sql

    out: list[str] = []
    cursor = 0
    for match in _CONDITIONAL_REGEX.finditer(sql):
        out.append(sql[cursor : match.start()])
        cursor = match.end()

        name = match.group("name")
        if name not in params:
            raise UnresolvedConditionalError(name, sql)
        include = is_truthy(name, params[name])
        if match.group("negate"):
            include = not include

        if include:
            out.append(match.group("body"))
        elif cursor == len(sql) or sql[cursor].isspace():
            if _strip_trailing_blanks(out):
                line_end = _LINE_END_REGEX.match(sql, cursor)
                if line_end is not None:
                    cursor = line_end.end()

    out.append(sql[cursor:])
    return "".join(out)
