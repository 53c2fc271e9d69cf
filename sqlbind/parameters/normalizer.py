"""Parameter normalization.

Every argument passed to ``prepare()`` is classified exactly once into a
:class:`~sqlbind.parameters.types.ParameterKind`. Keyed bags and labeled
records are folded into one ordered name to value table; everything else is
kept as an ordered positional list. Dump sentinels and an optional output
writer are filtered out before classification.
"""

from collections.abc import Sequence
from typing import Any

from sqlbind.exceptions import DuplicateParameterError, ParameterModeError
from sqlbind.parameters.types import DumpArg, ParameterKind
from sqlbind.protocols import WriterProtocol
from sqlbind.utils.type_guards import is_labeled_record, is_mapping, is_sql_value, schema_dump

__all__ = ("NormalizedParameters", "classify_parameter", "is_list_value", "normalize_parameters")


def is_list_value(value: Any) -> bool:
    """Check if a value is list-shaped for binding purposes.

    Strings and byte sequences are scalars; ``SQL`` fragments are strings.
    """
    return isinstance(value, (list, tuple, set, frozenset)) and not is_sql_value(value)


def classify_parameter(value: Any) -> ParameterKind:
    """Classify a single parameter source.

    The self-serializing capability wins over every structural shape, so a
    value object that happens to be a dataclass or a mapping is still bound
    as one scalar.

    Args:
        value: The caller-supplied parameter.

    Returns:
        The parameter kind.
    """
    if value is None:
        return ParameterKind.SCALAR
    if is_sql_value(value):
        return ParameterKind.SELF_SERIALIZING
    if is_mapping(value):
        return ParameterKind.KEYED_BAG
    if is_labeled_record(value):
        return ParameterKind.LABELED_RECORD
    if is_list_value(value):
        return ParameterKind.LIST
    return ParameterKind.SCALAR


class NormalizedParameters:
    """The result of normalizing the parameters of one call.

    Exactly one of ``positional`` and ``named`` is meaningful, as indicated
    by ``is_named``.
    """

    __slots__ = ("dump", "dump_writer", "is_named", "named", "positional")

    def __init__(
        self,
        positional: "list[Any] | None" = None,
        named: "dict[str, Any] | None" = None,
        dump: "DumpArg | None" = None,
        dump_writer: "WriterProtocol | None" = None,
    ) -> None:
        self.is_named = named is not None
        self.positional = positional if positional is not None else []
        self.named = named if named is not None else {}
        self.dump = dump
        self.dump_writer = dump_writer

    @property
    def is_empty(self) -> bool:
        return not self.positional and not self.named

    def __repr__(self) -> str:
        if self.is_named:
            return f"NormalizedParameters(named={self.named!r})"
        return f"NormalizedParameters(positional={self.positional!r})"


def _merge(merged: "dict[str, Any]", source: "dict[str, Any]") -> None:
    for key, value in source.items():
        if key in merged:
            raise DuplicateParameterError(key)
        merged[key] = value


def normalize_parameters(params: "Sequence[Any]") -> NormalizedParameters:
    """Normalize the parameters of one ``prepare()`` call.

    Args:
        params: Caller-supplied parameter sources, in call order.

    Raises:
        DuplicateParameterError: If two named sources define the same name.
        ParameterModeError: If named and positional sources are mixed.

    Returns:
        The positional list or merged name table, plus any dump sentinels.
    """
    dump: "DumpArg | None" = None
    dump_writer: "WriterProtocol | None" = None
    positional: list[Any] = []
    named: dict[str, Any] = {}
    has_named = False

    for param in params:
        if isinstance(param, DumpArg):
            dump = param if dump is None else dump | param
            continue
        if isinstance(param, WriterProtocol) and not isinstance(param, type) and not is_sql_value(param):
            dump_writer = param
            continue

        kind = classify_parameter(param)
        if kind.is_named:
            has_named = True
            _merge(named, schema_dump(param))
        else:
            positional.append(param)

    if has_named:
        if positional:
            raise ParameterModeError
        return NormalizedParameters(named=named, dump=dump, dump_writer=dump_writer)
    return NormalizedParameters(positional=positional, dump=dump, dump_writer=dump_writer)
