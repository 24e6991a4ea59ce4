"""Unit tests for the AttributeValue tagged union."""

import pytest

from testrun_stream.attribute_value import (
    AttributeType,
    AttributeValue,
    image_from_wire,
    image_to_wire,
)
from testrun_stream.errors import InvalidAttributeValueError


# Test narrowing accessors


@pytest.mark.unit
def test_string_accessors() -> None:
    value = AttributeValue.string("abc")

    assert value.type == AttributeType.S
    assert value.as_s() == "abc"
    assert value.as_n() is None
    assert value.as_bool() is None
    assert value.as_l() is None
    assert value.as_m() is None
    assert value.as_ss() == []


@pytest.mark.unit
def test_number_is_kept_as_text_and_parsed_lazily() -> None:
    value = AttributeValue.number("12345678901234567890.5")

    assert value.value == "12345678901234567890.5"
    assert value.as_n() == pytest.approx(12345678901234567890.5)
    assert value.as_s() is None


@pytest.mark.unit
def test_unparseable_number_reads_as_absent() -> None:
    value = AttributeValue(AttributeType.N, "not-a-number")

    assert value.as_n() is None


@pytest.mark.unit
def test_number_rejects_booleans() -> None:
    with pytest.raises(InvalidAttributeValueError):
        AttributeValue.number(True)


@pytest.mark.unit
def test_number_set_drops_unparseable_members() -> None:
    value = AttributeValue(AttributeType.NS, ("1", "2.5", "x"))

    assert value.as_ns() == [1.0, 2.5]
    assert AttributeValue.string("1").as_ns() == []


@pytest.mark.unit
def test_bool_null_and_sets() -> None:
    assert AttributeValue.boolean(False).as_bool() is False
    assert AttributeValue.null().as_null() is True
    assert AttributeValue.null().as_bool() is None
    assert AttributeValue.string_set(["a", "b"]).as_ss() == ["a", "b"]
    assert AttributeValue.number_set([1, 2]).value == ("1", "2")


@pytest.mark.unit
def test_list_and_map_accessors() -> None:
    nested = AttributeValue.map_of(
        {"tags": AttributeValue.list_of([AttributeValue.string("x")])}
    )

    inner = nested.as_m()
    assert inner is not None
    items = inner["tags"].as_l()
    assert items == (AttributeValue.string("x"),)
    assert nested.as_l() is None


@pytest.mark.unit
def test_payload_must_match_variant() -> None:
    with pytest.raises(InvalidAttributeValueError):
        AttributeValue(AttributeType.S, 5)
    with pytest.raises(InvalidAttributeValueError):
        AttributeValue(AttributeType.L, ("not-an-attribute",))
    with pytest.raises(InvalidAttributeValueError):
        AttributeValue(AttributeType.BOOL, "true")


# Test wire conversion


@pytest.mark.unit
def test_from_wire_nested_structure() -> None:
    wire = {
        "M": {
            "count": {"N": "3"},
            "names": {"SS": ["a", "b"]},
            "items": {"L": [{"S": "x"}, {"BOOL": True}, {"NULL": True}]},
        }
    }

    value = AttributeValue.from_wire(wire)

    assert value.type == AttributeType.M
    assert value.python_value() == {
        "count": 3,
        "names": {"a", "b"},
        "items": ["x", True, None],
    }
    assert value.to_wire() == wire


@pytest.mark.unit
@pytest.mark.parametrize(
    "wire",
    [
        {},
        {"S": "a", "N": "1"},
        {"B": "AAAA"},
        {"BS": ["AAAA"]},
        {"L": "not-a-list"},
        {"M": ["not", "a", "map"]},
        {"SS": "a"},
        {"N": 1},
        "S",
    ],
)
def test_from_wire_rejects_malformed_values(wire: object) -> None:
    with pytest.raises(InvalidAttributeValueError):
        AttributeValue.from_wire(wire)  # type: ignore[arg-type]


@pytest.mark.unit
def test_invalid_attribute_value_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        AttributeValue.from_wire({"X": "1"})


@pytest.mark.unit
def test_image_helpers() -> None:
    wire = {"id": {"S": "abc"}, "size": {"N": "1.5"}}

    image = image_from_wire(wire)

    assert image["id"] == AttributeValue.string("abc")
    assert image["size"].as_n() == 1.5
    assert image_to_wire(image) == wire


@pytest.mark.unit
def test_python_value_numbers() -> None:
    assert AttributeValue.number(7).python_value() == 7
    assert AttributeValue.number("1.25").python_value() == 1.25
    assert AttributeValue(AttributeType.N, "oops").python_value() is None
    assert AttributeValue.number_set(["1", "2"]).python_value() == {1.0, 2.0}
