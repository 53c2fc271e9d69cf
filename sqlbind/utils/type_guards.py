"""Type guard functions for runtime type checking in sqlbind.

This module provides type-safe runtime checks used by the parameter
normalizer to tell labeled records (dataclasses, msgspec structs, pydantic
models, attrs classes) apart from other values.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import msgspec

from sqlbind.protocols import DataclassProtocol, SupportsSQLValue
from sqlbind.typing import ATTRS_INSTALLED, PYDANTIC_INSTALLED

if TYPE_CHECKING:
    from typing_extensions import TypeGuard

__all__ = (
    "dataclass_to_dict",
    "is_attrs_instance",
    "is_dataclass_instance",
    "is_labeled_record",
    "is_mapping",
    "is_msgspec_struct",
    "is_pydantic_model",
    "is_sql_value",
    "schema_dump",
)


def is_sql_value(obj: Any) -> "TypeGuard[SupportsSQLValue]":
    """Check if an object serializes itself to a single bind value.

    Args:
        obj: The object to check

    Returns:
        True if the object implements ``sql_value()``
    """
    return not isinstance(obj, type) and isinstance(obj, SupportsSQLValue)


def is_mapping(obj: Any) -> "TypeGuard[Mapping[str, Any]]":
    """Check if a value is a keyed bag.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, Mapping)


def is_dataclass_instance(obj: Any) -> "TypeGuard[DataclassProtocol]":
    """Check if an object is a dataclass instance.

    Args:
        obj: An object to check.

    Returns:
        True if the object is a dataclass instance.
    """
    return not isinstance(obj, type) and hasattr(type(obj), "__dataclass_fields__")


def is_msgspec_struct(obj: Any) -> "TypeGuard[msgspec.Struct]":
    """Check if a value is a msgspec struct.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    return isinstance(obj, msgspec.Struct)


def is_pydantic_model(obj: Any) -> bool:
    """Check if a value is a pydantic model instance.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    if not PYDANTIC_INSTALLED or isinstance(obj, type):
        return False
    from pydantic import BaseModel

    return isinstance(obj, BaseModel)


def is_attrs_instance(obj: Any) -> bool:
    """Check if a value is an instance of an attrs class.

    Args:
        obj: Value to check.

    Returns:
        bool
    """
    if not ATTRS_INSTALLED or isinstance(obj, type):
        return False
    import attrs

    return attrs.has(type(obj))


def is_labeled_record(obj: Any) -> bool:
    """Check if a value is a struct-like record with named fields."""
    return is_dataclass_instance(obj) or is_msgspec_struct(obj) or is_pydantic_model(obj) or is_attrs_instance(obj)


def dataclass_to_dict(obj: "DataclassProtocol") -> "dict[str, Any]":
    """Convert a dataclass to a dictionary.

    Unlike :func:`dataclasses.asdict` this does not deepcopy values and does not
    recurse into nested dataclasses; a nested dataclass stays a single value.

    Args:
        obj: A dataclass instance.

    Returns:
        A dictionary of key/value pairs in field order.
    """
    from dataclasses import fields

    return {field.name: getattr(obj, field.name) for field in fields(obj)}  # type: ignore[arg-type]


def schema_dump(data: Any) -> "dict[str, Any]":
    """Dump a labeled record or keyed bag to a name to value dictionary.

    Field order is preserved. Values are returned as-is, without recursing.

    Args:
        data: A mapping, dataclass, msgspec struct, pydantic model or attrs instance.

    Returns:
        :type:`dict[str, Any]`
    """
    if is_mapping(data):
        return dict(data)
    if is_dataclass_instance(data):
        return dataclass_to_dict(data)
    if is_msgspec_struct(data):
        return {f: getattr(data, f) for f in data.__struct_fields__}
    if is_pydantic_model(data):
        return {name: getattr(data, name) for name in type(data).model_fields}
    if is_attrs_instance(data):
        import attrs

        return {field.name: getattr(data, field.name) for field in attrs.fields(type(data))}
    msg = f"cannot read named fields from {type(data).__name__}"
    raise TypeError(msg)
