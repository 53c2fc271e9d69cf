import sqlite3
from collections.abc import Generator
from unittest.mock import Mock

import pytest

from sqlbind import Dialect, Driver, ParameterStyle, ParameterStyleConfig, StatementConfig


@pytest.fixture
def generic_config() -> StatementConfig:
    return StatementConfig()


@pytest.fixture
def sqlite_config() -> StatementConfig:
    return StatementConfig(Dialect.SQLITE)


@pytest.fixture
def postgres_config() -> StatementConfig:
    return StatementConfig(Dialect.POSTGRESQL)


@pytest.fixture
def numeric_config() -> StatementConfig:
    """PostgreSQL with ``$n`` placeholders, as asyncpg uses."""
    return StatementConfig(Dialect.POSTGRESQL, parameter_config=ParameterStyleConfig(ParameterStyle.NUMERIC))


@pytest.fixture
def executor(generic_config: StatementConfig) -> Mock:
    """An execution primitive double for the generic dialect."""
    mock = Mock(spec=["statement_config", "execute", "fetch"])
    mock.statement_config = generic_config
    mock.execute.return_value = 0
    mock.fetch.return_value = []
    return mock


@pytest.fixture
def sqlite_connection() -> Generator[sqlite3.Connection, None, None]:
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


@pytest.fixture
def sqlite_driver(sqlite_connection: sqlite3.Connection) -> Driver:
    driver = Driver(sqlite_connection)
    driver.exec("create table items (id integer primary key, name text not null, price real, active boolean)")
    return driver
