import pytest

from sqlbind.exceptions import (
    BulkFlushError,
    BulkInsertError,
    DuplicateParameterError,
    ParameterError,
    PrepareError,
    SQLBindError,
    UnresolvedConditionalError,
    wrap_exceptions,
)


def test_detail_from_first_argument() -> None:
    error = SQLBindError("something failed")

    assert error.detail == "something failed"
    assert str(error) == "something failed"
    assert repr(error) == "SQLBindError - something failed"


def test_parameter_error_includes_sql() -> None:
    error = ParameterError("bad parameter", "select ?")

    assert str(error) == "bad parameter\nSQL: select ?"
    assert error.sql == "select ?"


def test_duplicate_parameter_error() -> None:
    error = DuplicateParameterError("x")

    assert error.name == "x"
    assert "'x'" in str(error)


def test_unresolved_conditional_error() -> None:
    error = UnresolvedConditionalError("flag")

    assert error.name == "flag"
    assert str(error) == "could not find parameter for conditional: 'flag'"


def test_prepare_error_names_stage() -> None:
    error = PrepareError("bind", "missing named parameter 'b'")

    assert error.stage == "bind"
    assert str(error) == "sqlbind.prepare: bind: missing named parameter 'b'"


def test_bulk_errors() -> None:
    flush = BulkFlushError("1 rows rejected: expected 2 values", "insert into t", [(1,)])
    error = BulkInsertError([flush, BulkFlushError("boom")])

    assert flush.rejected_rows == [(1,)]
    assert "insert into t" in str(flush)
    assert str(error).startswith("2 errors:\n")
    assert error.errors[1].query is None


def test_wrap_exceptions() -> None:
    with pytest.raises(SQLBindError) as exc_info, wrap_exceptions():
        raise ValueError("driver failure")

    assert isinstance(exc_info.value.__cause__, ValueError)
    assert "driver failure" in str(exc_info.value)


def test_wrap_exceptions_passes_own_errors() -> None:
    with pytest.raises(PrepareError), wrap_exceptions():
        raise PrepareError("bind", "x")
