"""Tests for statement configuration and the dialect registry."""

import sqlite3
from unittest.mock import Mock

import pytest

from sqlbind.config import DialectRegistry, ParameterStyleConfig, StatementConfig, default_parameter_config
from sqlbind.dialects import Dialect
from sqlbind.exceptions import ImproperConfigurationError
from sqlbind.parameters.types import ParameterStyle


def test_defaults_follow_dialect() -> None:
    config = StatementConfig()

    assert config.dialect is Dialect.UNKNOWN
    assert config.parameter_style is ParameterStyle.QMARK
    assert config.max_parameters == 999
    assert config.dump_writer is None


@pytest.mark.parametrize(
    ("name", "dialect", "style", "max_parameters"),
    [
        ("sqlite", Dialect.SQLITE, ParameterStyle.QMARK, 32766),
        ("postgres", Dialect.POSTGRESQL, ParameterStyle.POSITIONAL_PYFORMAT, 65535),
        ("PostgreSQL", Dialect.POSTGRESQL, ParameterStyle.POSITIONAL_PYFORMAT, 65535),
        ("mysql", Dialect.MARIADB, ParameterStyle.POSITIONAL_PYFORMAT, 65535),
    ],
)
def test_dialect_names(name: str, dialect: Dialect, style: ParameterStyle, max_parameters: int) -> None:
    config = StatementConfig(name)

    assert config.dialect is dialect
    assert config.parameter_style is style
    assert config.max_parameters == max_parameters


def test_unknown_dialect_name() -> None:
    with pytest.raises(ImproperConfigurationError, match="oracle"):
        StatementConfig("oracle")


def test_max_parameters_must_be_positive() -> None:
    with pytest.raises(ImproperConfigurationError):
        StatementConfig(max_parameters=0)


def test_sqlite_default_coercions() -> None:
    config = default_parameter_config(Dialect.SQLITE)

    assert bool in config.type_coercion_map
    assert default_parameter_config(Dialect.POSTGRESQL).type_coercion_map == {}


def test_replace() -> None:
    writer = Mock(spec=["write"])
    config = StatementConfig(Dialect.SQLITE)

    replaced = config.replace(max_parameters=10, dump_writer=writer)

    assert replaced.dialect is Dialect.SQLITE
    assert replaced.max_parameters == 10
    assert replaced.dump_writer is writer
    assert config.max_parameters == 32766


def test_replace_rejects_unknown_attributes() -> None:
    with pytest.raises(ImproperConfigurationError, match="style"):
        StatementConfig().replace(style=ParameterStyle.NUMERIC)


def test_equality() -> None:
    assert StatementConfig("sqlite") == StatementConfig(Dialect.SQLITE)
    assert StatementConfig("sqlite") != StatementConfig("postgres")
    assert ParameterStyleConfig(ParameterStyle.QMARK) == ParameterStyleConfig(ParameterStyle.QMARK)


@pytest.mark.parametrize(
    ("name", "dialect", "style", "native_arrays"),
    [
        ("sqlite3", Dialect.SQLITE, ParameterStyle.QMARK, False),
        ("psycopg", Dialect.POSTGRESQL, ParameterStyle.POSITIONAL_PYFORMAT, True),
        ("asyncpg", Dialect.POSTGRESQL, ParameterStyle.NUMERIC, True),
        ("pymysql", Dialect.MARIADB, ParameterStyle.POSITIONAL_PYFORMAT, False),
        ("mariadb", Dialect.MARIADB, ParameterStyle.QMARK, False),
        ("oracledb", Dialect.UNKNOWN, ParameterStyle.POSITIONAL_COLON, False),
        ("pgsql", Dialect.POSTGRESQL, ParameterStyle.POSITIONAL_PYFORMAT, False),
    ],
)
def test_default_registry(name: str, dialect: Dialect, style: ParameterStyle, native_arrays: bool) -> None:
    config = DialectRegistry.default().get(name)

    assert config.dialect is dialect
    assert config.parameter_style is style
    assert config.parameter_config.has_native_array_binding is native_arrays


def test_registry_keeps_sqlite_coercions_for_driver_modules() -> None:
    config = DialectRegistry.default().get("sqlite3")

    assert config.parameter_config.type_coercion_map[bool] is int


def test_registry_register_and_lookup() -> None:
    registry = DialectRegistry()
    config = StatementConfig(Dialect.POSTGRESQL, max_parameters=100)

    registry.register("Custom", config)

    assert "custom" in registry
    assert "CUSTOM" in registry
    assert 42 not in registry
    assert registry.get("custom") is config
    assert registry.names() == ["custom"]


def test_registry_unknown_name() -> None:
    with pytest.raises(ImproperConfigurationError, match="no SQL dialect registered"):
        DialectRegistry().get("sqlite")


def test_registry_for_connection() -> None:
    connection = sqlite3.connect(":memory:")
    try:
        config = DialectRegistry.default().for_connection(connection)
    finally:
        connection.close()

    assert config.dialect is Dialect.SQLITE
