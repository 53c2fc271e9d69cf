"""Placeholder extraction.

A single regex walks the statement left to right. String literals, quoted
identifiers, dollar-quoted bodies, comments, PostgreSQL casts and the
PostgreSQL ``?`` JSON operators are matched first so that anything that
looks like a placeholder inside them is skipped.
"""

import re
from functools import lru_cache
from typing import Final

from mypy_extensions import mypyc_attr

from sqlbind.exceptions import ParameterStyleMismatchError
from sqlbind.parameters.types import ParameterStyle

__all__ = ("ParameterInfo", "ParameterValidator")


_PARAMETER_REGEX: Final = re.compile(
    r"""
    (?P<dquote>"(?:[^"\\]|\\.)*") |
    (?P<squote>'(?:[^'\\]|\\.)*') |
    (?P<backtick>`[^`]*`) |
    (?P<dollar_quoted_string>\$(?P<dollar_quote_tag_inner>[^\W\d]\w*)?\$[\s\S]*?\$(?(dollar_quote_tag_inner)(?P=dollar_quote_tag_inner))\$) |
    (?P<line_comment>--[^\r\n]*) |
    (?P<block_comment>/\*(?:[^*]|\*(?!/))*\*/) |
    (?P<pg_q_operator>\?\?|\?\||\?&) |
    (?P<pg_cast>::(?P<cast_type>\w+)) |
    (?P<positional_colon>:(?P<colon_num>\d+)) |
    (?P<named_colon>:(?P<colon_name>[^\W\d]\w*)) |
    (?P<numeric>\$(?P<numeric_num>\d+)) |
    (?P<qmark>\?)
    """,
    re.VERBOSE | re.MULTILINE | re.DOTALL,
)


@mypyc_attr(allow_interpreted_subclasses=False)
class ParameterInfo:
    """A placeholder found in statement text."""

    __slots__ = ("name", "ordinal", "placeholder_text", "position", "style")

    def __init__(
        self, name: "str | None", style: ParameterStyle, position: int, ordinal: int, placeholder_text: str
    ) -> None:
        self.name = name
        self.style = style
        self.position = position
        self.ordinal = ordinal
        self.placeholder_text = placeholder_text

    @property
    def end(self) -> int:
        return self.position + len(self.placeholder_text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, type(self)):
            return False
        return self.name == other.name and self.style == other.style and self.position == other.position

    def __hash__(self) -> int:
        return hash((self.name, self.style, self.position))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, ordinal={self.ordinal!r}, "
            f"placeholder_text={self.placeholder_text!r}, position={self.position!r}, style={self.style!r})"
        )


@lru_cache(maxsize=1000)
def _extract_parameters(sql: str, named: bool) -> "tuple[ParameterInfo, ...]":
    parameters: list[ParameterInfo] = []
    for match in _PARAMETER_REGEX.finditer(sql):
        kind = match.lastgroup
        if named:
            if kind != "named_colon":
                continue
            name: "str | None" = match.group("colon_name")
            style = ParameterStyle.NAMED_COLON
        elif kind == "qmark":
            name = None
            style = ParameterStyle.QMARK
        elif kind == "numeric":
            name = match.group("numeric_num")
            style = ParameterStyle.NUMERIC
        else:
            continue
        parameters.append(
            ParameterInfo(
                name=name, style=style, position=match.start(), ordinal=len(parameters), placeholder_text=match.group()
            )
        )

    if not named and len({p.style for p in parameters}) > 1:
        msg = "cannot mix '?' and '$n' placeholders"
        raise ParameterStyleMismatchError(msg, sql)
    return tuple(parameters)


class ParameterValidator:
    """Extracts placeholders from statement text.

    Stateless; results are memoized per ``(sql, named)`` pair in a bounded,
    thread-safe cache shared by all instances.
    """

    __slots__ = ()

    def extract_parameters(self, sql: str, named: bool) -> "tuple[ParameterInfo, ...]":
        """Extract placeholders from a statement.

        In named mode only ``:name`` tokens are placeholders; in positional
        mode only ``?`` and ``$n``.

        Args:
            sql: Statement text.
            named: Whether the call uses named parameters.

        Raises:
            ParameterStyleMismatchError: If positional text mixes ``?`` and ``$n``.

        Returns:
            Placeholders ordered by position.
        """
        return _extract_parameters(sql, named)
