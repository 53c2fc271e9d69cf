import datetime
import enum
from decimal import Decimal
from typing import Any, Literal, overload

import msgspec

__all__ = ("encode_json",)


def _type_to_string(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (Decimal, datetime.timedelta)):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    return repr(value)


_msgspec_json_encoder = msgspec.json.Encoder(enc_hook=_type_to_string)


@overload
def encode_json(data: Any, *, as_bytes: Literal[False] = ...) -> str: ...


@overload
def encode_json(data: Any, *, as_bytes: Literal[True]) -> bytes: ...


def encode_json(data: Any, *, as_bytes: bool = False) -> "str | bytes":
    """Encode data to JSON using msgspec.

    Values msgspec cannot encode natively are passed through ``repr()``.
    """
    encoded = _msgspec_json_encoder.encode(data)
    if as_bytes:
        return encoded
    return encoded.decode("utf-8")
