"""Core parameter types used throughout sqlbind.

A statement travels between pipeline stages as a list of *segments*: plain
``str`` chunks of SQL that are passed through untouched, and
:class:`Placeholder` tokens that each stand for exactly one bind value. Only
the final rebinding step turns placeholders into dialect-specific text, so
no stage ever rescans literal SQL for a marker character.
"""

from enum import Enum, Flag, auto
from typing import Any, Union

from mypy_extensions import mypyc_attr
from typing_extensions import TypeAlias

__all__ = (
    "SQL",
    "DumpArg",
    "ParameterKind",
    "ParameterStyle",
    "Placeholder",
    "Segment",
    "segments_to_sql",
)


class ParameterStyle(str, Enum):
    """Placeholder style expected by a driver."""

    QMARK = "qmark"
    NAMED_COLON = "named_colon"
    NUMERIC = "numeric"
    POSITIONAL_COLON = "positional_colon"
    NAMED_AT = "named_at"
    POSITIONAL_PYFORMAT = "pyformat_positional"

    def __str__(self) -> str:
        """String representation for better error messages.

        Returns:
            The enum value as a string.
        """
        return self.value


class ParameterKind(Enum):
    """Shape of a single caller-supplied parameter."""

    SCALAR = auto()
    SELF_SERIALIZING = auto()
    LIST = auto()
    KEYED_BAG = auto()
    LABELED_RECORD = auto()

    @property
    def is_named(self) -> bool:
        return self in {ParameterKind.KEYED_BAG, ParameterKind.LABELED_RECORD}


class DumpArg(Flag):
    """Sentinels requesting diagnostic output; never sent to the driver.

    ``QUERY`` writes the query with its arguments, ``EXPLAIN`` the query plan,
    ``RESULT`` the result rows, ``VERTICAL`` prints the result one column per line.
    """

    QUERY = 1
    EXPLAIN = 2
    RESULT = 4
    VERTICAL = 8
    ALL = 7


class SQL(str):
    """A trusted SQL fragment.

    Passed as a parameter value it is spliced into the statement text
    verbatim instead of being bound. Never wrap user input in this.
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"SQL({str.__repr__(self)})"


@mypyc_attr(allow_interpreted_subclasses=False)
class Placeholder:
    """A bind position in a statement and the value bound to it.

    ``name`` is the named parameter the value came from, if any.
    """

    __slots__ = ("name", "value")

    def __init__(self, value: Any, name: "str | None" = None) -> None:
        self.value = value
        self.name = name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Placeholder):
            return False
        return self.name == other.name and self.value == other.value

    def __hash__(self) -> int:
        return hash((self.name, repr(self.value)))

    def __repr__(self) -> str:
        if self.name is None:
            return f"Placeholder({self.value!r})"
        return f"Placeholder({self.value!r}, name={self.name!r})"


Segment: TypeAlias = Union[str, Placeholder]


def segments_to_sql(segments: "list[Segment]", marker: str = "?") -> str:
    """Render segments with a fixed marker, for logging and error messages."""
    return "".join(marker if isinstance(s, Placeholder) else s for s in segments)
