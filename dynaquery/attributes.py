"""Attribute definitions."""

from pydantic import BaseModel, ConfigDict, Field

from dynaquery.data_types import DataType

PATH_SEPARATOR = "."


class Attribute(BaseModel):
    """A named field of a DynamoDB item with its data type.

    Attributes are immutable value objects. A dotted name such as
    ``"address.city"`` is read as a nested path when serializing items, but is
    otherwise treated as a single attribute name.

    Example:
        status = Attribute(name="status", data_type=DataType.STRING)

    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    data_type: DataType

    @property
    def path(self) -> list[str]:
        """The name split into its nested path components."""
        return self.name.split(PATH_SEPARATOR)

    @property
    def is_nested(self) -> bool:
        return PATH_SEPARATOR in self.name

    def __str__(self) -> str:
        return f"{self.name} ({self.data_type.code})"


__all__ = [
    "PATH_SEPARATOR",
    "Attribute",
]
