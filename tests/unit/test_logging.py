import json
import logging
from unittest.mock import Mock

import pytest

from sqlbind import StatementConfig, prepare
from sqlbind.bulk import BulkInsert
from sqlbind.utils.logging import (
    CorrelationIDFilter,
    StructuredFormatter,
    configure_logging,
    correlation_context,
    get_correlation_id,
    get_logger,
    log_with_context,
)


def test_get_logger_namespace() -> None:
    assert get_logger("bulk").name == "sqlbind.bulk"
    assert get_logger("sqlbind.driver").name == "sqlbind.driver"
    assert get_logger("sqlbindings").name == "sqlbind.sqlbindings"
    assert get_logger().name == "sqlbind"


def test_get_logger_adds_one_filter() -> None:
    logger = get_logger("filters")
    get_logger("filters")

    assert sum(isinstance(f, CorrelationIDFilter) for f in logger.filters) == 1


def test_correlation_context_restores_previous_id() -> None:
    assert get_correlation_id() is None

    with correlation_context("outer"):
        with correlation_context() as inner:
            assert get_correlation_id() == inner
            assert inner != "outer"
        assert get_correlation_id() == "outer"

    assert get_correlation_id() is None


def test_structured_formatter() -> None:
    record = logging.LogRecord("sqlbind.test", logging.INFO, __file__, 1, "statement prepared", None, None)
    record.extra_fields = {"placeholder_count": 2}
    with correlation_context("abc"):
        CorrelationIDFilter().filter(record)

    entry = json.loads(StructuredFormatter().format(record))

    assert entry["message"] == "statement prepared"
    assert entry["level"] == "INFO"
    assert entry["placeholder_count"] == 2
    assert entry["correlation_id"] == "abc"


def test_structured_formatter_without_correlation_id() -> None:
    record = logging.LogRecord("sqlbind.test", logging.INFO, __file__, 1, "plain", None, None)

    assert "correlation_id" not in json.loads(StructuredFormatter().format(record))


def test_log_with_context(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("context")

    with caplog.at_level(logging.DEBUG, logger="sqlbind.context"):
        log_with_context(logger, logging.DEBUG, "bulk insert flush", rows=3)

    assert caplog.records[-1].extra_fields == {"rows": 3}


def test_log_with_context_skips_disabled_levels(caplog: pytest.LogCaptureFixture) -> None:
    logger = get_logger("quiet")

    with caplog.at_level(logging.WARNING, logger="sqlbind.quiet"):
        log_with_context(logger, logging.DEBUG, "hidden")

    assert not caplog.records


def test_prepare_logs_carry_caller_correlation_id(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="sqlbind.statement"), correlation_context("request-1"):
        prepare(StatementConfig(), "select ?", 1)

    record = next(r for r in caplog.records if r.getMessage() == "statement prepared")
    assert record.correlation_id == "request-1"
    assert record.extra_fields["placeholder_count"] == 1


def test_bulk_flushes_share_session_correlation_id(caplog: pytest.LogCaptureFixture, executor: Mock) -> None:
    executor.execute.side_effect = [0, RuntimeError("boom")]
    insert = BulkInsert(executor, "t", ["a"], limit=1)

    with caplog.at_level(logging.DEBUG, logger="sqlbind.bulk"):
        insert.values(1)
        insert.values(2)
        insert.finish()

    records = [r for r in caplog.records if r.name == "sqlbind.bulk"]
    assert [r.getMessage() for r in records] == ["bulk insert flush", "bulk insert flush", "bulk insert flush failed"]
    assert {r.correlation_id for r in records} == {insert.correlation_id}
    assert get_correlation_id() is None


def test_bulk_insert_adopts_caller_correlation_id(executor: Mock) -> None:
    with correlation_context("job-7"):
        insert = BulkInsert(executor, "t", ["a"])

    assert insert.correlation_id == "job-7"
    assert BulkInsert(executor, "t", ["a"], correlation_id="explicit").correlation_id == "explicit"
    assert BulkInsert(executor, "t", ["a"]).correlation_id != BulkInsert(executor, "t", ["a"]).correlation_id


def test_configure_logging_with_handlers() -> None:
    handler = logging.NullHandler()
    root = logging.getLogger("sqlbind")
    previous = (root.level, list(root.handlers), root.propagate)
    try:
        configure_logging("debug", handlers=[handler])

        assert root.level == logging.DEBUG
        assert root.handlers == [handler]
        assert isinstance(handler.formatter, StructuredFormatter)
    finally:
        root.setLevel(previous[0])
        root.handlers[:] = previous[1]
        root.propagate = previous[2]
