"""Slice expansion.

``where id in (?)`` with ``[1, 2, 3]`` becomes ``where id in (?, ?, ?)``
with three values. An empty list leaves no placeholder at all, so the SQL
around it must tolerate an empty set.
"""

from sqlbind.parameters.normalizer import is_list_value
from sqlbind.parameters.types import SQL, Placeholder, Segment

__all__ = ("expand_slices",)


def expand_slices(segments: "list[Segment]") -> "list[Segment]":
    """Expand list-valued placeholders into one placeholder per element.

    Byte strings and self-serializing values are never expanded. Elements of
    an expanded set follow the set's iteration order. An element that is an
    :class:`~sqlbind.parameters.types.SQL` fragment is spliced verbatim.

    Args:
        segments: Bound segments.

    Returns:
        Segments with every list value flattened in place.
    """
    if not any(isinstance(s, Placeholder) and is_list_value(s.value) for s in segments):
        return segments

    expanded: list[Segment] = []
    for segment in segments:
        if not isinstance(segment, Placeholder) or not is_list_value(segment.value):
            expanded.append(segment)
            continue
        for i, item in enumerate(segment.value):
            if i:
                expanded.append(", ")
            expanded.append(str(item) if isinstance(item, SQL) else Placeholder(item, segment.name))
    return expanded
