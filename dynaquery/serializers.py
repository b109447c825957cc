"""Conversion of Python values to and from DynamoDB's wrapped-type format.

Each serializer handles exactly one DataType and produces a single-key wrapper
dictionary tagged with the type code, e.g. ``3.14`` becomes ``{"N": "3.14"}``.
Serializers are looked up by data type; MAP and LIST have no registered
serializer because nested documents cannot be used as expression operands.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Iterable
from decimal import Decimal
from typing import Any, ClassVar

from dynaquery.attributes import Attribute
from dynaquery.data_types import DataType
from dynaquery.exceptions import InvalidOperandError, SerializerNotFoundError
from dynaquery.keys import AttributeValue


class AttributeSerializer(ABC):
    """Converts values of one DataType into (and back from) DynamoDB wrappers."""

    data_type: ClassVar[DataType]

    def serialize(self, value: Any) -> AttributeValue:
        """Wrap a Python value, e.g. ``"three"`` -> ``{"S": "three"}``.

        Raises:
            InvalidOperandError: If the value has the wrong Python type.

        """
        if not self.accepts(value):
            raise InvalidOperandError(data_type=self.data_type.code, value=value)
        return {self.data_type.code: self._to_wire(value)}

    def deserialize(self, wrapper: AttributeValue) -> Any:
        """Unwrap a DynamoDB value, e.g. ``{"S": "three"}`` -> ``"three"``."""
        code = self.data_type.code
        if not isinstance(wrapper, dict) or code not in wrapper:
            raise InvalidOperandError(data_type=code, value=wrapper)
        return self._from_wire(wrapper[code])

    @abstractmethod
    def accepts(self, value: Any) -> bool: ...

    @abstractmethod
    def _to_wire(self, value: Any) -> Any: ...

    @abstractmethod
    def _from_wire(self, raw: Any) -> Any: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StringSerializer(AttributeSerializer):
    data_type = DataType.STRING

    def accepts(self, value: Any) -> bool:
        return isinstance(value, str)

    def _to_wire(self, value: str) -> str:
        return value

    def _from_wire(self, raw: str) -> str:
        return raw


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, Decimal):
        return value.is_finite()
    return True


def _parse_number(raw: str) -> int | float:
    try:
        return int(raw)
    except ValueError:
        return float(raw)


class NumberSerializer(AttributeSerializer):
    """Numbers travel as strings. Integral text comes back as int, anything else as float."""

    data_type = DataType.NUMBER

    def accepts(self, value: Any) -> bool:
        return _is_number(value)

    def _to_wire(self, value: int | float | Decimal) -> str:
        return str(value)

    def _from_wire(self, raw: str) -> int | float:
        return _parse_number(raw)


class BinarySerializer(AttributeSerializer):
    data_type = DataType.BINARY

    def accepts(self, value: Any) -> bool:
        return isinstance(value, bytes | bytearray)

    def _to_wire(self, value: bytes | bytearray) -> bytes:
        return bytes(value)

    def _from_wire(self, raw: bytes) -> bytes:
        return bytes(raw)


class BooleanSerializer(AttributeSerializer):
    data_type = DataType.BOOLEAN

    def accepts(self, value: Any) -> bool:
        return isinstance(value, bool)

    def _to_wire(self, value: bool) -> bool:
        return value

    def _from_wire(self, raw: bool) -> bool:
        return bool(raw)


class NullSerializer(AttributeSerializer):
    data_type = DataType.NULL

    def accepts(self, value: Any) -> bool:
        return value is None

    def _to_wire(self, value: None) -> bool:
        return True

    def _from_wire(self, raw: bool) -> None:
        return None


class _SetSerializer(AttributeSerializer):
    """Sets must be non-empty. Element order of first appearance is kept, duplicates dropped."""

    element_serializer: ClassVar[AttributeSerializer]

    def serialize(self, value: Any) -> AttributeValue:
        # Materialize generators so they survive both the check and the conversion.
        if isinstance(value, Iterable) and not isinstance(value, str | bytes | bytearray | dict):
            value = list(value)
        return super().serialize(value)

    def accepts(self, value: Any) -> bool:
        if isinstance(value, str | bytes | bytearray | dict) or not isinstance(value, Iterable):
            return False
        elements = list(value)
        return bool(elements) and all(self.element_serializer.accepts(e) for e in elements)

    def _to_wire(self, value: Iterable[Any]) -> list[Any]:
        members: dict[Any, Any] = {}
        for element in value:
            wire = self.element_serializer._to_wire(element)
            members.setdefault(self._member(wire), wire)
        return list(members.values())

    def _member(self, wire: Any) -> Any:
        """The identity of a wire element within the set."""
        return wire

    def _from_wire(self, raw: list[Any]) -> set[Any]:
        return {self.element_serializer._from_wire(e) for e in raw}


class StringSetSerializer(_SetSerializer):
    data_type = DataType.STRING_SET
    element_serializer = StringSerializer()


class NumberSetSerializer(_SetSerializer):
    data_type = DataType.NUMBER_SET
    element_serializer = NumberSerializer()

    def _member(self, wire: str) -> Decimal:
        # "1" and "1.0" are the same set member.
        return Decimal(wire)


class BinarySetSerializer(_SetSerializer):
    data_type = DataType.BINARY_SET
    element_serializer = BinarySerializer()


_SERIALIZERS: dict[DataType, AttributeSerializer] = {
    serializer.data_type: serializer
    for serializer in (
        StringSerializer(),
        NumberSerializer(),
        BinarySerializer(),
        BooleanSerializer(),
        NullSerializer(),
        StringSetSerializer(),
        NumberSetSerializer(),
        BinarySetSerializer(),
    )
}


def serializer_for(data_type: DataType) -> AttributeSerializer:
    """Return the serializer registered for a data type.

    Raises:
        SerializerNotFoundError: If the data type has no serializer (MAP, LIST).

    """
    try:
        return _SERIALIZERS[data_type]
    except KeyError:
        code = data_type.code if isinstance(data_type, DataType) else str(data_type)
        raise SerializerNotFoundError(code) from None


def serializer_for_attribute(attribute: Attribute) -> AttributeSerializer:
    return serializer_for(attribute.data_type)


def serialize(data_type: DataType, value: Any) -> AttributeValue:
    return serializer_for(data_type).serialize(value)


def deserialize(data_type: DataType, wrapper: AttributeValue) -> Any:
    return serializer_for(data_type).deserialize(wrapper)


__all__ = [
    "AttributeSerializer",
    "BinarySerializer",
    "BinarySetSerializer",
    "BooleanSerializer",
    "NullSerializer",
    "NumberSerializer",
    "NumberSetSerializer",
    "StringSerializer",
    "StringSetSerializer",
    "deserialize",
    "serialize",
    "serializer_for",
    "serializer_for_attribute",
]
