"""SQL dialects and their conventions.

A dialect decides the default placeholder style, whether the driver can bind
a native array (which enables the column-major bulk insert), the parameter
count limit that caps row-major bulk inserts, and how identifiers are quoted.
"""

from enum import Enum
from typing import Final

from sqlglot import exp

from sqlbind.exceptions import ImproperConfigurationError
from sqlbind.parameters.types import ParameterStyle

__all__ = ("DIALECT_ALIASES", "Dialect", "quote_identifier")


class Dialect(str, Enum):
    """An SQL dialect; several drivers can share one dialect."""

    UNKNOWN = "unknown"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MARIADB = "mariadb"

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self]

    @classmethod
    def from_name(cls, name: "str | Dialect") -> "Dialect":
        """Look up a dialect by name or alias, case-insensitively.

        Raises:
            ImproperConfigurationError: If the name is not a known dialect.
        """
        if isinstance(name, Dialect):
            return name
        dialect = DIALECT_ALIASES.get(name.lower())
        if dialect is None:
            msg = f"unknown SQL dialect: {name!r}"
            raise ImproperConfigurationError(msg)
        return dialect

    @property
    def sqlglot_dialect(self) -> "str | None":
        return _SQLGLOT_DIALECTS[self]

    @property
    def default_parameter_style(self) -> ParameterStyle:
        return _PARAMETER_STYLES[self]

    @property
    def supports_arrays(self) -> bool:
        """Whether a whole column can be bound as one array parameter."""
        return self is Dialect.POSTGRESQL

    @property
    def supports_returning(self) -> bool:
        return self is not Dialect.UNKNOWN

    @property
    def max_parameters(self) -> int:
        """Maximum number of bind parameters in one statement."""
        return _MAX_PARAMETERS[self]


_DISPLAY_NAMES: Final = {
    Dialect.UNKNOWN: "(unknown)",
    Dialect.SQLITE: "SQLite",
    Dialect.POSTGRESQL: "PostgreSQL",
    Dialect.MARIADB: "MariaDB",
}

_SQLGLOT_DIALECTS: Final = {
    Dialect.UNKNOWN: None,
    Dialect.SQLITE: "sqlite",
    Dialect.POSTGRESQL: "postgres",
    Dialect.MARIADB: "mysql",
}

_PARAMETER_STYLES: Final = {
    Dialect.UNKNOWN: ParameterStyle.QMARK,
    Dialect.SQLITE: ParameterStyle.QMARK,
    Dialect.POSTGRESQL: ParameterStyle.POSITIONAL_PYFORMAT,
    Dialect.MARIADB: ParameterStyle.POSITIONAL_PYFORMAT,
}

# SQLITE_MAX_VARIABLE_NUMBER is 32766 since SQLite 3.32; PostgreSQL and
# MariaDB use a 16-bit parameter count in their wire protocols.
_MAX_PARAMETERS: Final = {
    Dialect.UNKNOWN: 999,
    Dialect.SQLITE: 32766,
    Dialect.POSTGRESQL: 65535,
    Dialect.MARIADB: 65535,
}

DIALECT_ALIASES: Final[dict[str, Dialect]] = {
    "unknown": Dialect.UNKNOWN,
    "postgresql": Dialect.POSTGRESQL,
    "postgres": Dialect.POSTGRESQL,
    "psql": Dialect.POSTGRESQL,
    "pgsql": Dialect.POSTGRESQL,
    "sqlite": Dialect.SQLITE,
    "sqlite3": Dialect.SQLITE,
    "mysql": Dialect.MARIADB,
    "mariadb": Dialect.MARIADB,
}


def quote_identifier(name: str, dialect: Dialect) -> str:
    """Quote a possibly schema-qualified identifier for a dialect.

    ``public.tbl`` becomes ``"public"."tbl"`` for PostgreSQL and
    ```public`.`tbl``` for MariaDB.

    Args:
        name: Identifier, optionally dotted.
        dialect: Target dialect.

    Returns:
        The quoted identifier.
    """
    parts = [part.strip('"`') for part in name.split(".")]
    return ".".join(exp.to_identifier(part, quoted=True).sql(dialect=dialect.sqlglot_dialect) for part in parts)
