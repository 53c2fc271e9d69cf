"""Dialect rebinding.

The last pipeline stage renders segments into driver text. Literal chunks are
copied through; each placeholder becomes the driver's marker and its value
is serialized and coerced for the driver.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final

from mypy_extensions import mypyc_attr

from sqlbind.array import Array
from sqlbind.exceptions import UnsupportedParameterError
from sqlbind.parameters.types import ParameterStyle, Placeholder, Segment
from sqlbind.utils.type_guards import is_sql_value

if TYPE_CHECKING:
    from sqlbind.config import ParameterStyleConfig

__all__ = ("ParameterConverter", "placeholder_marker")


_MARKERS: Final["dict[ParameterStyle, Callable[[int], str]]"] = {
    ParameterStyle.QMARK: lambda n: "?",
    ParameterStyle.NUMERIC: lambda n: f"${n}",
    ParameterStyle.POSITIONAL_COLON: lambda n: f":{n}",
    ParameterStyle.NAMED_COLON: lambda n: f":arg{n}",
    ParameterStyle.NAMED_AT: lambda n: f"@p{n}",
    ParameterStyle.POSITIONAL_PYFORMAT: lambda n: "%s",
}


def placeholder_marker(style: ParameterStyle, ordinal: int) -> str:
    """Return the marker for the placeholder at a 1-based ordinal."""
    try:
        return _MARKERS[style](ordinal)
    except KeyError:
        msg = f"unsupported parameter style: {style}"
        raise UnsupportedParameterError(msg) from None


@mypyc_attr(allow_interpreted_subclasses=False)
class ParameterConverter:
    """Renders bound segments for one driver configuration."""

    __slots__ = ("parameter_config",)

    def __init__(self, parameter_config: "ParameterStyleConfig") -> None:
        self.parameter_config = parameter_config

    def render(self, segments: "list[Segment]") -> "tuple[str, list[Any]]":
        """Render segments to driver text and arguments.

        With the ``%s`` style, ``%`` in literal text is doubled when the
        statement has at least one placeholder; the driver only interprets
        ``%`` when it is given arguments.

        Args:
            segments: Bound and expanded segments.

        Returns:
            The statement text and its arguments in placeholder order.
        """
        style = self.parameter_config.default_parameter_style
        escape_percent = style is ParameterStyle.POSITIONAL_PYFORMAT and any(
            isinstance(s, Placeholder) for s in segments
        )
        parts: list[str] = []
        args: list[Any] = []
        for segment in segments:
            if isinstance(segment, Placeholder):
                args.append(self.convert_value(segment.value))
                parts.append(placeholder_marker(style, len(args)))
            elif escape_percent:
                parts.append(segment.replace("%", "%%"))
            else:
                parts.append(segment)
        return "".join(parts), args

    def convert_value(self, value: Any) -> Any:
        """Serialize and coerce a single bind value.

        Args:
            value: The value a placeholder carries.

        Returns:
            The value handed to the driver.
        """
        if value is None:
            return None
        if isinstance(value, Array) and self.parameter_config.has_native_array_binding:
            return value.to_list()
        if is_sql_value(value):
            value = value.sql_value()
            if value is None:
                return None
        coerce = self.parameter_config.type_coercion_map.get(type(value))
        if coerce is None:
            return value
        coerced = coerce(value)
        if isinstance(coerced, (list, tuple)):
            return [self.convert_value(item) for item in coerced]
        return coerced
