"""Statement configuration.

A :class:`StatementConfig` is the small "current dialect" value every
prepare call and bulk insert receives explicitly. A :class:`DialectRegistry`
maps dialect names and DB-API module names to configurations; it is an
ordinary value built once at start-up and passed to whoever resolves
connections, never a module-level global the pipeline consults.
"""

import datetime
from collections.abc import Callable
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlbind.dialects import DIALECT_ALIASES, Dialect
from sqlbind.exceptions import ImproperConfigurationError
from sqlbind.parameters.types import ParameterStyle

if TYPE_CHECKING:
    from sqlbind.protocols import WriterProtocol

__all__ = (
    "DialectRegistry",
    "ParameterStyleConfig",
    "StatementConfig",
    "default_parameter_config",
)


class ParameterStyleConfig:
    """Declarative configuration for a driver's parameter handling."""

    __slots__ = ("default_parameter_style", "has_native_array_binding", "type_coercion_map")

    def __init__(
        self,
        default_parameter_style: ParameterStyle,
        type_coercion_map: "dict[type, Callable[[Any], Any]] | None" = None,
        has_native_array_binding: bool = False,
    ) -> None:
        """Initialize driver parameter configuration.

        Args:
            default_parameter_style: The placeholder style the driver expects
            type_coercion_map: Mapping of exact value types to their coercion functions
            has_native_array_binding: Whether the driver binds a Python list as an SQL array
        """
        self.default_parameter_style = default_parameter_style
        self.type_coercion_map = type_coercion_map or {}
        self.has_native_array_binding = has_native_array_binding

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterStyleConfig):
            return False
        return (
            self.default_parameter_style == other.default_parameter_style
            and self.type_coercion_map == other.type_coercion_map
            and self.has_native_array_binding == other.has_native_array_binding
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"ParameterStyleConfig(default_parameter_style={self.default_parameter_style!r}, "
            f"has_native_array_binding={self.has_native_array_binding!r})"
        )


def _sqlite_coercions() -> "dict[type, Callable[[Any], Any]]":
    return {
        bool: int,
        Decimal: str,
        datetime.datetime: lambda v: v.isoformat(sep=" "),
        datetime.date: lambda v: v.isoformat(),
        datetime.time: lambda v: v.isoformat(),
    }


def default_parameter_config(dialect: Dialect) -> ParameterStyleConfig:
    """The parameter configuration used when none is given for a dialect."""
    if dialect is Dialect.SQLITE:
        return ParameterStyleConfig(ParameterStyle.QMARK, type_coercion_map=_sqlite_coercions())
    return ParameterStyleConfig(dialect.default_parameter_style)


class StatementConfig:
    """The dialect fixed for a connection plus everything derived from it.

    Args:
        dialect: Dialect or dialect name.
        parameter_config: Parameter handling; defaults from the dialect.
        max_parameters: Bind parameter limit for bulk inserts; defaults from the dialect.
        dump_writer: Where dump output goes when a call passes no writer; stderr if None.
    """

    __slots__ = ("dialect", "dump_writer", "max_parameters", "parameter_config")

    def __init__(
        self,
        dialect: "Dialect | str" = Dialect.UNKNOWN,
        parameter_config: "ParameterStyleConfig | None" = None,
        max_parameters: "int | None" = None,
        dump_writer: "WriterProtocol | None" = None,
    ) -> None:
        self.dialect = Dialect.from_name(dialect)
        self.parameter_config = parameter_config or default_parameter_config(self.dialect)
        self.max_parameters = max_parameters if max_parameters is not None else self.dialect.max_parameters
        if self.max_parameters < 1:
            msg = f"max_parameters must be positive, got {self.max_parameters}"
            raise ImproperConfigurationError(msg)
        self.dump_writer = dump_writer

    @property
    def parameter_style(self) -> ParameterStyle:
        return self.parameter_config.default_parameter_style

    def replace(self, **kwargs: Any) -> "StatementConfig":
        """Return a copy with some attributes replaced."""
        values = {
            "dialect": self.dialect,
            "parameter_config": self.parameter_config,
            "max_parameters": self.max_parameters,
            "dump_writer": self.dump_writer,
        }
        unknown = set(kwargs) - set(values)
        if unknown:
            msg = f"unknown StatementConfig attributes: {', '.join(sorted(unknown))}"
            raise ImproperConfigurationError(msg)
        values.update(kwargs)
        return StatementConfig(**values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StatementConfig):
            return False
        return (
            self.dialect == other.dialect
            and self.parameter_config == other.parameter_config
            and self.max_parameters == other.max_parameters
            and self.dump_writer is other.dump_writer
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"StatementConfig(dialect={self.dialect.value!r}, parameter_style={self.parameter_style!r}, "
            f"max_parameters={self.max_parameters!r})"
        )


_DRIVER_MODULES: "dict[str, tuple[Dialect, ParameterStyle, bool]]" = {
    "sqlite3": (Dialect.SQLITE, ParameterStyle.QMARK, False),
    "aiosqlite": (Dialect.SQLITE, ParameterStyle.QMARK, False),
    "psycopg": (Dialect.POSTGRESQL, ParameterStyle.POSITIONAL_PYFORMAT, True),
    "psycopg2": (Dialect.POSTGRESQL, ParameterStyle.POSITIONAL_PYFORMAT, True),
    "asyncpg": (Dialect.POSTGRESQL, ParameterStyle.NUMERIC, True),
    "pg8000": (Dialect.POSTGRESQL, ParameterStyle.POSITIONAL_PYFORMAT, True),
    "pymysql": (Dialect.MARIADB, ParameterStyle.POSITIONAL_PYFORMAT, False),
    "MySQLdb": (Dialect.MARIADB, ParameterStyle.POSITIONAL_PYFORMAT, False),
    "mariadb": (Dialect.MARIADB, ParameterStyle.QMARK, False),
    "oracledb": (Dialect.UNKNOWN, ParameterStyle.POSITIONAL_COLON, False),
}


class DialectRegistry:
    """Maps dialect aliases and DB-API module names to statement configurations.

    Build one with :meth:`default` at start-up and pass it to whatever opens
    connections.
    """

    __slots__ = ("_configs",)

    def __init__(self, configs: "dict[str, StatementConfig] | None" = None) -> None:
        self._configs: dict[str, StatementConfig] = dict(configs or {})

    @classmethod
    def default(cls) -> "DialectRegistry":
        """A registry knowing the dialect aliases and the common DB-API drivers."""
        registry = cls()
        for alias, dialect in DIALECT_ALIASES.items():
            registry.register(alias, StatementConfig(dialect))
        for module, (dialect, style, native_arrays) in _DRIVER_MODULES.items():
            parameter_config = default_parameter_config(dialect)
            registry.register(
                module,
                StatementConfig(
                    dialect,
                    parameter_config=ParameterStyleConfig(
                        style,
                        type_coercion_map=parameter_config.type_coercion_map,
                        has_native_array_binding=native_arrays,
                    ),
                ),
            )
        return registry

    def register(self, name: str, config: StatementConfig) -> None:
        """Register (or replace) the configuration for a name."""
        self._configs[name.lower()] = config

    def get(self, name: str) -> StatementConfig:
        """Look up a configuration by dialect alias or driver module name.

        Raises:
            ImproperConfigurationError: If nothing is registered under the name.
        """
        config = self._configs.get(name.lower())
        if config is None:
            msg = f"no SQL dialect registered for {name!r}"
            raise ImproperConfigurationError(msg)
        return config

    def for_connection(self, connection: Any) -> StatementConfig:
        """Resolve the configuration from a DB-API connection's module."""
        module = type(connection).__module__.split(".")[0]
        return self.get(module)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._configs

    def names(self) -> "list[str]":
        return sorted(self._configs)
