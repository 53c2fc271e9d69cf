"""The statement preparation stages."""

from sqlbind.parameters.binder import bind_named, bind_positional
from sqlbind.parameters.conditionals import has_conditionals, is_truthy, resolve_conditionals
from sqlbind.parameters.converter import ParameterConverter, placeholder_marker
from sqlbind.parameters.expander import expand_slices
from sqlbind.parameters.normalizer import (
    NormalizedParameters,
    classify_parameter,
    is_list_value,
    normalize_parameters,
)
from sqlbind.parameters.types import SQL, DumpArg, ParameterKind, ParameterStyle, Placeholder, Segment, segments_to_sql
from sqlbind.parameters.validator import ParameterInfo, ParameterValidator

__all__ = (
    "SQL",
    "DumpArg",
    "NormalizedParameters",
    "ParameterConverter",
    "ParameterInfo",
    "ParameterKind",
    "ParameterStyle",
    "ParameterValidator",
    "Placeholder",
    "Segment",
    "bind_named",
    "bind_positional",
    "classify_parameter",
    "expand_slices",
    "has_conditionals",
    "is_list_value",
    "is_truthy",
    "normalize_parameters",
    "placeholder_marker",
    "resolve_conditionals",
    "segments_to_sql",
)
