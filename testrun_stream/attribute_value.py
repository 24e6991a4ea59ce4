"""
DynamoDB attribute values as a closed tagged union.

The store encodes every field as a single-key mapping whose key names the
variant (``{"S": "abc"}``, ``{"N": "1.5"}``, ``{"L": [...]}``). This module
provides:
- ``AttributeValue``, one immutable value per wire attribute
- narrowing accessors that return ``None`` instead of raising
- conversion to and from the boto3/stream wire shape
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from testrun_stream.errors import InvalidAttributeValueError


class AttributeType(str, Enum):
    """Supported DynamoDB type descriptors."""

    BOOL = "BOOL"
    NULL = "NULL"
    N = "N"
    S = "S"
    NS = "NS"
    SS = "SS"
    L = "L"
    M = "M"


def _parse_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class AttributeValue:
    """
    A single DynamoDB attribute value.

    ``type`` selects the active variant and ``value`` carries its payload:
    ``bool`` for BOOL and NULL, ``str`` for S and N (numbers stay textual to
    avoid precision loss), ``tuple[str, ...]`` for SS and NS,
    ``tuple[AttributeValue, ...]`` for L and ``dict[str, AttributeValue]``
    for M.
    """

    type: AttributeType
    value: Any

    def __post_init__(self) -> None:
        kind = self.type
        value = self.value
        if kind in (AttributeType.BOOL, AttributeType.NULL):
            valid = isinstance(value, bool)
        elif kind in (AttributeType.S, AttributeType.N):
            valid = isinstance(value, str)
        elif kind in (AttributeType.SS, AttributeType.NS):
            valid = isinstance(value, tuple) and all(
                isinstance(item, str) for item in value
            )
        elif kind == AttributeType.L:
            valid = isinstance(value, tuple) and all(
                isinstance(item, AttributeValue) for item in value
            )
        else:
            valid = isinstance(value, dict) and all(
                isinstance(k, str) and isinstance(v, AttributeValue)
                for k, v in value.items()
            )
        if not valid:
            raise InvalidAttributeValueError(
                f"Invalid payload for {kind.value} attribute: {value!r}"
            )

    # Constructors

    @classmethod
    def string(cls, value: str) -> "AttributeValue":
        return cls(AttributeType.S, value)

    @classmethod
    def number(cls, value: int | float | str) -> "AttributeValue":
        # bool is an int subclass; refuse it rather than encode True as "True"
        if isinstance(value, bool):
            raise InvalidAttributeValueError("Booleans are not numbers")
        return cls(AttributeType.N, str(value))

    @classmethod
    def boolean(cls, value: bool) -> "AttributeValue":
        return cls(AttributeType.BOOL, value)

    @classmethod
    def null(cls) -> "AttributeValue":
        return cls(AttributeType.NULL, True)

    @classmethod
    def string_set(cls, values: Iterable[str]) -> "AttributeValue":
        return cls(AttributeType.SS, tuple(values))

    @classmethod
    def number_set(cls, values: Iterable[int | float | str]) -> "AttributeValue":
        return cls(AttributeType.NS, tuple(str(v) for v in values))

    @classmethod
    def list_of(cls, values: Iterable["AttributeValue"]) -> "AttributeValue":
        return cls(AttributeType.L, tuple(values))

    @classmethod
    def map_of(cls, values: Mapping[str, "AttributeValue"]) -> "AttributeValue":
        return cls(AttributeType.M, dict(values))

    # Narrowing accessors

    def as_bool(self) -> Optional[bool]:
        return self.value if self.type == AttributeType.BOOL else None

    def as_null(self) -> Optional[bool]:
        return self.value if self.type == AttributeType.NULL else None

    def as_s(self) -> Optional[str]:
        return self.value if self.type == AttributeType.S else None

    def as_n(self) -> Optional[float]:
        """Parse the number lazily; unparseable text yields ``None``."""
        if self.type != AttributeType.N:
            return None
        return _parse_number(self.value)

    def as_ns(self) -> list[float]:
        if self.type != AttributeType.NS:
            return []
        parsed = (_parse_number(item) for item in self.value)
        return [number for number in parsed if number is not None]

    def as_ss(self) -> list[str]:
        if self.type != AttributeType.SS:
            return []
        return list(self.value)

    def as_l(self) -> Optional[Tuple["AttributeValue", ...]]:
        return self.value if self.type == AttributeType.L else None

    def as_m(self) -> Optional[Dict[str, "AttributeValue"]]:
        return self.value if self.type == AttributeType.M else None

    # Wire format

    @classmethod
    def from_wire(cls, wire: Mapping[str, Any]) -> "AttributeValue":
        """
        Build an AttributeValue from its wire shape, e.g. ``{"S": "abc"}``.

        Raises:
            InvalidAttributeValueError: If the mapping does not carry exactly
                one supported type descriptor with a matching payload
        """
        if not isinstance(wire, Mapping) or len(wire) != 1:
            raise InvalidAttributeValueError(
                f"Expected a single type descriptor, got {wire!r}"
            )
        descriptor, payload = next(iter(wire.items()))
        try:
            kind = AttributeType(descriptor)
        except ValueError as exc:
            raise InvalidAttributeValueError(
                f"Unsupported type descriptor: {descriptor!r}"
            ) from exc

        if kind == AttributeType.L:
            if not isinstance(payload, list):
                raise InvalidAttributeValueError("L payload must be a list")
            return cls.list_of(cls.from_wire(item) for item in payload)
        if kind == AttributeType.M:
            if not isinstance(payload, Mapping):
                raise InvalidAttributeValueError("M payload must be a map")
            return cls.map_of(image_from_wire(payload))
        if kind in (AttributeType.SS, AttributeType.NS):
            if not isinstance(payload, list):
                raise InvalidAttributeValueError(
                    f"{kind.value} payload must be a list"
                )
            return cls(kind, tuple(payload))
        return cls(kind, payload)

    def to_wire(self) -> Dict[str, Any]:
        """Convert back to the wire shape accepted by boto3 clients."""
        if self.type == AttributeType.L:
            return {"L": [item.to_wire() for item in self.value]}
        if self.type == AttributeType.M:
            return {"M": image_to_wire(self.value)}
        if self.type in (AttributeType.SS, AttributeType.NS):
            return {self.type.value: list(self.value)}
        return {self.type.value: self.value}

    def python_value(self) -> Any:
        """Convert to a plain Python value, recursing into lists and maps."""
        if self.type == AttributeType.M:
            return {k: v.python_value() for k, v in self.value.items()}
        if self.type == AttributeType.L:
            return [item.python_value() for item in self.value]
        if self.type == AttributeType.N:
            try:
                return int(self.value)
            except ValueError:
                return self.as_n()
        if self.type == AttributeType.NULL:
            return None
        if self.type == AttributeType.SS:
            return set(self.value)
        if self.type == AttributeType.NS:
            return set(self.as_ns())
        return self.value


AttributeMap = Mapping[str, AttributeValue]


def image_from_wire(image: Mapping[str, Any]) -> Dict[str, AttributeValue]:
    """Convert a whole wire item (or stream image) to AttributeValues."""
    if not isinstance(image, Mapping):
        raise InvalidAttributeValueError(f"Expected a map, got {image!r}")
    return {
        str(name): AttributeValue.from_wire(value)
        for name, value in image.items()
    }


def image_to_wire(image: AttributeMap) -> Dict[str, Dict[str, Any]]:
    """Convert a mapping of AttributeValues to the wire item shape."""
    return {name: value.to_wire() for name, value in image.items()}


__all__ = [
    "AttributeMap",
    "AttributeType",
    "AttributeValue",
    "image_from_wire",
    "image_to_wire",
]
