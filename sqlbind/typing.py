from importlib.util import find_spec
from typing import Any, Final

from typing_extensions import TypeAlias

__all__ = (
    "ATTRS_INSTALLED",
    "PYDANTIC_INSTALLED",
    "DictRow",
)

PYDANTIC_INSTALLED: Final[bool] = find_spec("pydantic") is not None
"""Whether pydantic models can appear as labeled records."""
ATTRS_INSTALLED: Final[bool] = find_spec("attrs") is not None
"""Whether attrs classes can appear as labeled records."""

DictRow: TypeAlias = "dict[str, Any]"
"""A row returned by the driver, keyed by column name."""
