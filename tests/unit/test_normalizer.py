"""Tests for parameter classification and merging."""

import datetime
import io
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import msgspec
import pytest

from sqlbind.array import Array
from sqlbind.exceptions import DuplicateParameterError, ParameterModeError
from sqlbind.parameters.normalizer import classify_parameter, is_list_value, normalize_parameters
from sqlbind.parameters.types import SQL, DumpArg, ParameterKind


@dataclass
class Person:
    name: str
    age: int


class PersonStruct(msgspec.Struct):
    name: str
    age: int


@dataclass
class Money:
    """A record that serializes itself; never merged as fields."""

    amount: Decimal
    currency: str

    def sql_value(self) -> str:
        return f"{self.amount} {self.currency}"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ParameterKind.SCALAR),
        (1, ParameterKind.SCALAR),
        ("text", ParameterKind.SCALAR),
        (b"blob", ParameterKind.SCALAR),
        (SQL("now()"), ParameterKind.SCALAR),
        (datetime.datetime(2020, 6, 18), ParameterKind.SCALAR),
        (Decimal("1.5"), ParameterKind.SCALAR),
        ([1, 2], ParameterKind.LIST),
        ((1, 2), ParameterKind.LIST),
        ({1, 2}, ParameterKind.LIST),
        (frozenset(), ParameterKind.LIST),
        ({"a": 1}, ParameterKind.KEYED_BAG),
        (Person("x", 1), ParameterKind.LABELED_RECORD),
        (PersonStruct("x", 1), ParameterKind.LABELED_RECORD),
        (Money(Decimal("1"), "EUR"), ParameterKind.SELF_SERIALIZING),
        (Array([1, 2]), ParameterKind.SELF_SERIALIZING),
    ],
)
def test_classify_parameter(value: Any, expected: ParameterKind) -> None:
    assert classify_parameter(value) is expected


def test_is_list_value_excludes_strings_and_bytes() -> None:
    assert is_list_value([1])
    assert not is_list_value("abc")
    assert not is_list_value(b"abc")
    assert not is_list_value(bytearray(b"abc"))


def test_normalize_positional() -> None:
    result = normalize_parameters(["a", 1, [2, 3]])

    assert not result.is_named
    assert result.positional == ["a", 1, [2, 3]]
    assert result.named == {}


def test_normalize_merges_mapping_and_record() -> None:
    result = normalize_parameters([{"x": "Y"}, Person("n", 42)])

    assert result.is_named
    assert result.named == {"x": "Y", "name": "n", "age": 42}
    assert list(result.named) == ["x", "name", "age"]


def test_normalize_msgspec_struct() -> None:
    result = normalize_parameters([PersonStruct("n", 3)])

    assert result.named == {"name": "n", "age": 3}


def test_merge_of_disjoint_sources_is_commutative() -> None:
    a = {"a": 1, "b": 2}
    b = {"c": 3}

    assert normalize_parameters([a, b]).named == normalize_parameters([b, a]).named


@pytest.mark.parametrize("order", [0, 1])
def test_duplicate_name_is_rejected_in_any_order(order: int) -> None:
    sources: list[Any] = [{"x": 1}, Person("n", 2)]
    sources.append({"name": "other"})
    if order:
        sources.reverse()

    with pytest.raises(DuplicateParameterError, match="parameter given more than once: 'name'"):
        normalize_parameters(sources)


def test_mixing_named_and_positional_is_rejected() -> None:
    with pytest.raises(ParameterModeError, match="cannot mix named and positional parameters"):
        normalize_parameters([{"x": 1}, 42])


def test_self_serializing_record_is_positional() -> None:
    money = Money(Decimal("9.99"), "EUR")

    result = normalize_parameters([money])

    assert not result.is_named
    assert result.positional == [money]


def test_dump_flags_and_writer_are_filtered() -> None:
    out = io.StringIO()

    result = normalize_parameters([1, DumpArg.QUERY, out, DumpArg.RESULT])

    assert result.positional == [1]
    assert result.dump == DumpArg.QUERY | DumpArg.RESULT
    assert result.dump_writer is out


def test_empty_mapping_is_named_mode() -> None:
    result = normalize_parameters([{}])

    assert result.is_named
    assert result.is_empty


def test_pydantic_model_is_labeled_record() -> None:
    pydantic = pytest.importorskip("pydantic")

    class Filter(pydantic.BaseModel):
        status: str
        limit: int = 10

    result = normalize_parameters([Filter(status="open")])

    assert result.named == {"status": "open", "limit": 10}


def test_attrs_instance_is_labeled_record() -> None:
    attrs = pytest.importorskip("attrs")

    @attrs.define
    class Range:
        low: int
        high: int

    assert classify_parameter(Range(1, 2)) is ParameterKind.LABELED_RECORD
    assert normalize_parameters([Range(1, 2)]).named == {"low": 1, "high": 2}
