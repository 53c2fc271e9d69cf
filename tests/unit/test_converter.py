"""Tests for placeholder rendering and value coercion."""

import datetime
from decimal import Decimal

import pytest

from sqlbind.array import Array
from sqlbind.config import ParameterStyleConfig, default_parameter_config
from sqlbind.dialects import Dialect
from sqlbind.parameters.converter import ParameterConverter, placeholder_marker
from sqlbind.parameters.types import ParameterStyle, Placeholder, Segment


@pytest.mark.parametrize(
    ("style", "expected"),
    [
        (ParameterStyle.QMARK, "select ?, ? from t"),
        (ParameterStyle.NUMERIC, "select $1, $2 from t"),
        (ParameterStyle.POSITIONAL_COLON, "select :1, :2 from t"),
        (ParameterStyle.NAMED_COLON, "select :arg1, :arg2 from t"),
        (ParameterStyle.NAMED_AT, "select @p1, @p2 from t"),
        (ParameterStyle.POSITIONAL_PYFORMAT, "select %s, %s from t"),
    ],
)
def test_render_styles(style: ParameterStyle, expected: str) -> None:
    segments: list[Segment] = ["select ", Placeholder("a"), ", ", Placeholder("b"), " from t"]

    sql, args = ParameterConverter(ParameterStyleConfig(style)).render(segments)

    assert sql == expected
    assert args == ["a", "b"]


def test_placeholder_marker_numbers_from_one() -> None:
    assert placeholder_marker(ParameterStyle.NUMERIC, 1) == "$1"


def test_pyformat_doubles_literal_percent() -> None:
    converter = ParameterConverter(ParameterStyleConfig(ParameterStyle.POSITIONAL_PYFORMAT))

    sql, _ = converter.render(["select * from t where name like '100%' and id = ", Placeholder(1)])

    assert sql == "select * from t where name like '100%%' and id = %s"


def test_pyformat_without_placeholders_keeps_percent() -> None:
    converter = ParameterConverter(ParameterStyleConfig(ParameterStyle.POSITIONAL_PYFORMAT))

    assert converter.render(["select '100%'"]) == ("select '100%'", [])


def test_qmark_keeps_percent() -> None:
    converter = ParameterConverter(ParameterStyleConfig(ParameterStyle.QMARK))

    sql, _ = converter.render(["select '5%', ", Placeholder(1)])

    assert sql == "select '5%', ?"


def test_sqlite_coercions() -> None:
    converter = ParameterConverter(default_parameter_config(Dialect.SQLITE))

    assert converter.convert_value(True) == 1
    assert converter.convert_value(Decimal("1.50")) == "1.50"
    assert converter.convert_value(datetime.datetime(2020, 6, 18, 1, 2, 3)) == "2020-06-18 01:02:03"
    assert converter.convert_value(datetime.date(2020, 6, 18)) == "2020-06-18"
    assert converter.convert_value(None) is None
    assert converter.convert_value("x") == "x"


def test_coercion_matches_exact_type() -> None:
    config = ParameterStyleConfig(ParameterStyle.QMARK, type_coercion_map={int: str})
    converter = ParameterConverter(config)

    assert converter.convert_value(5) == "5"
    assert converter.convert_value(True) is True


def test_self_serializing_value_is_serialized() -> None:
    class Point:
        def sql_value(self) -> str:
            return "(1,2)"

    converter = ParameterConverter(ParameterStyleConfig(ParameterStyle.QMARK))

    assert converter.render(["select ", Placeholder(Point())]) == ("select ?", ["(1,2)"])


def test_array_as_text_literal() -> None:
    converter = ParameterConverter(ParameterStyleConfig(ParameterStyle.POSITIONAL_PYFORMAT))

    assert converter.convert_value(Array([1, 2])) == "{1,2}"
    assert converter.convert_value(Array(None)) is None


def test_array_bound_natively() -> None:
    config = ParameterStyleConfig(ParameterStyle.POSITIONAL_PYFORMAT, has_native_array_binding=True)

    assert ParameterConverter(config).convert_value(Array([1, 2])) == [1, 2]
