"""Enumerations describing DynamoDB attribute, key and projection types."""

from enum import Enum


class DataType(str, Enum):
    """A DynamoDB attribute type, valued by its wire type code."""

    STRING = "S"
    NUMBER = "N"
    BINARY = "B"
    BOOLEAN = "BOOL"
    NULL = "NULL"
    MAP = "M"
    LIST = "L"
    STRING_SET = "SS"
    NUMBER_SET = "NS"
    BINARY_SET = "BS"

    @property
    def code(self) -> str:
        return self.value

    @property
    def is_key_type(self) -> bool:
        """Whether the type may be used for a table or index key (S, N or B)."""
        return self in _KEY_TYPES

    @property
    def element_type(self) -> "DataType | None":
        """The scalar type of a set's elements, or None for non-set types."""
        return _SET_ELEMENT_TYPES.get(self)


_KEY_TYPES = frozenset({DataType.STRING, DataType.NUMBER, DataType.BINARY})

_SET_ELEMENT_TYPES = {
    DataType.STRING_SET: DataType.STRING,
    DataType.NUMBER_SET: DataType.NUMBER,
    DataType.BINARY_SET: DataType.BINARY,
}


class KeyType(str, Enum):
    """The role of a key attribute."""

    HASH = "HASH"
    RANGE = "RANGE"


class ProjectionType(str, Enum):
    """Which attributes a secondary index copies from the table."""

    ALL = "ALL"
    KEYS_ONLY = "KEYS_ONLY"
    INCLUDE = "INCLUDE"


__all__ = [
    "DataType",
    "KeyType",
    "ProjectionType",
]
