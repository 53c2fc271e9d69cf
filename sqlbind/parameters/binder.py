"""Placeholder binding.

Binding turns statement text into segments: literal SQL chunks and one
:class:`~sqlbind.parameters.types.Placeholder` per bind position. A value
that is a :class:`~sqlbind.parameters.types.SQL` fragment is spliced into
the text instead of producing a placeholder.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from sqlbind.exceptions import ExtraParameterError, MissingParameterError
from sqlbind.parameters.types import SQL, Placeholder, Segment
from sqlbind.parameters.validator import ParameterInfo, ParameterValidator

__all__ = ("bind_named", "bind_positional")

_validator = ParameterValidator()


def _bind(
    sql: str, found: "Sequence[ParameterInfo]", values: "Sequence[Any]", names: "Sequence[str | None]"
) -> "list[Segment]":
    segments: list[Segment] = []
    cursor = 0
    for info, value, name in zip(found, values, names):
        segments.append(sql[cursor : info.position])
        cursor = info.end
        if isinstance(value, SQL):
            segments.append(str(value))
        else:
            segments.append(Placeholder(value, name))
    segments.append(sql[cursor:])
    return [s for s in segments if not isinstance(s, str) or s]


def bind_named(sql: str, params: "Mapping[str, Any]") -> "list[Segment]":
    """Bind ``:name`` references against the merged name table.

    Every occurrence gets its own placeholder, so a name used twice binds
    its value twice. ``::type`` casts, string literals and comments are not
    references.

    Args:
        sql: Statement text, conditionals already resolved.
        params: The merged named parameter table.

    Raises:
        MissingParameterError: If a reference names an absent parameter.

    Returns:
        Segments in text order.
    """
    found = _validator.extract_parameters(sql, named=True)
    values: list[Any] = []
    names: list[str | None] = []
    for info in found:
        name = info.name or ""
        if name not in params:
            msg = f"missing named parameter {name!r}"
            raise MissingParameterError(msg, sql)
        values.append(params[name])
        names.append(name)
    return _bind(sql, found, values, names)


def bind_positional(sql: str, args: "Sequence[Any]") -> "list[Segment]":
    """Bind ``?`` or ``$n`` placeholders against positional arguments.

    ``?`` consumes arguments in order and the counts must match. ``$n``
    refers to the n-th argument (1-based), may repeat, and every argument
    must be referenced at least once.

    Args:
        sql: Statement text.
        args: Positional arguments in call order.

    Raises:
        MissingParameterError: If a placeholder has no argument.
        ExtraParameterError: If an argument is never used.
        ParameterStyleMismatchError: If ``?`` and ``$n`` are mixed.

    Returns:
        Segments in text order.
    """
    found = _validator.extract_parameters(sql, named=False)
    if not found:
        if args:
            msg = f"{len(args)} arguments given for a statement without placeholders"
            raise ExtraParameterError(msg, sql)
        return [sql] if sql else []

    if found[0].name is None:
        if len(found) > len(args):
            msg = f"more placeholders than arguments: {len(found)} placeholders, {len(args)} arguments"
            raise MissingParameterError(msg, sql)
        if len(found) < len(args):
            msg = f"more arguments than placeholders: {len(found)} placeholders, {len(args)} arguments"
            raise ExtraParameterError(msg, sql)
        return _bind(sql, found, args, [None] * len(found))

    values: list[Any] = []
    used: set[int] = set()
    for info in found:
        index = int(info.name or 0) - 1
        if not 0 <= index < len(args):
            msg = f"{info.placeholder_text} refers past the {len(args)} given arguments"
            raise MissingParameterError(msg, sql)
        used.add(index)
        values.append(args[index])
    unused = sorted(set(range(len(args))) - used)
    if unused:
        msg = f"arguments never referenced: {', '.join(f'${i + 1}' for i in unused)}"
        raise ExtraParameterError(msg, sql)
    return _bind(sql, found, values, [None] * len(found))
