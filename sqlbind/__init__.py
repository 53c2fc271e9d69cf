"""sqlbind: near-raw SQL with conditional templates and dialect-aware binding."""

from sqlbind import exceptions, parameters, typing, utils
from sqlbind.__metadata__ import __version__
from sqlbind.array import Array, format_timestamp
from sqlbind.bulk import BulkInsert
from sqlbind.config import DialectRegistry, ParameterStyleConfig, StatementConfig
from sqlbind.dialects import Dialect, quote_identifier
from sqlbind.driver import Driver
from sqlbind.exceptions import (
    BulkFlushError,
    BulkInsertError,
    ParameterError,
    PrepareError,
    SQLBindError,
)
from sqlbind.parameters import SQL, DumpArg, ParameterStyle, Placeholder
from sqlbind.statement import PreparedStatement, prepare
from sqlbind.utils.logging import configure_logging, get_logger

__all__ = (
    "SQL",
    "Array",
    "BulkFlushError",
    "BulkInsert",
    "BulkInsertError",
    "Dialect",
    "DialectRegistry",
    "Driver",
    "DumpArg",
    "ParameterError",
    "ParameterStyle",
    "ParameterStyleConfig",
    "Placeholder",
    "PrepareError",
    "PreparedStatement",
    "SQLBindError",
    "StatementConfig",
    "__version__",
    "configure_logging",
    "exceptions",
    "format_timestamp",
    "get_logger",
    "parameters",
    "prepare",
    "quote_identifier",
    "typing",
    "utils",
)
