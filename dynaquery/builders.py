"""Fluent builders for table definitions.

Example:
    table = (
        TableBuilder("orders")
        .with_key("customer_id", DataType.STRING, KeyType.HASH)
        .with_key("order_id", DataType.STRING, KeyType.RANGE)
        .with_attribute("status", DataType.STRING)
        .with_index(
            IndexBuilder("status-index")
            .with_key("status", DataType.STRING, KeyType.HASH)
            .with_projection(ProjectionType.KEYS_ONLY)
        )
        .build()
    )
"""

from collections.abc import Iterable

from typing_extensions import Self

from dynaquery.attributes import Attribute
from dynaquery.data_types import DataType, KeyType, ProjectionType
from dynaquery.exceptions import InvalidDefinitionError
from dynaquery.tables import Index, Key, Table


class AttributeBuilder:
    def __init__(self, name: str) -> None:
        self._name = name
        self._data_type: DataType | None = None

    @classmethod
    def with_name(cls, name: str) -> Self:
        return cls(name)

    @property
    def name(self) -> str:
        return self._name

    @property
    def data_type(self) -> DataType | None:
        return self._data_type

    def with_data_type(self, data_type: DataType) -> Self:
        self._data_type = data_type
        return self

    def validate(self) -> None:
        if not isinstance(self._name, str) or not self._name:
            raise InvalidDefinitionError("Attribute name is invalid")
        if not isinstance(self._data_type, DataType):
            raise InvalidDefinitionError(f"Attribute '{self._name}' has no data type")

    def build(self) -> Attribute:
        self.validate()
        return Attribute(name=self._name, data_type=self._data_type)  # type: ignore[arg-type]


class KeyBuilder:
    def __init__(self, name: str) -> None:
        self._attribute_builder = AttributeBuilder(name)
        self._key_type: KeyType | None = None

    @classmethod
    def with_name(cls, name: str) -> Self:
        return cls(name)

    @property
    def attribute_builder(self) -> AttributeBuilder:
        return self._attribute_builder

    @property
    def key_type(self) -> KeyType | None:
        return self._key_type

    def with_key_type(self, key_type: KeyType) -> Self:
        self._key_type = key_type
        return self

    def with_data_type(self, data_type: DataType) -> Self:
        self._attribute_builder.with_data_type(data_type)
        return self

    def with_attribute_builder(self, attribute_builder: AttributeBuilder) -> Self:
        self._attribute_builder = attribute_builder
        return self

    def validate(self) -> None:
        self._attribute_builder.validate()
        if not isinstance(self._key_type, KeyType):
            raise InvalidDefinitionError(f"Key '{self._attribute_builder.name}' has no key type")

    def build(self) -> Key:
        self.validate()
        return Key(attribute=self._attribute_builder.build(), key_type=self._key_type)  # type: ignore[arg-type]


class IndexBuilder:
    def __init__(self, name: str) -> None:
        self._name = name
        self._keys: list[KeyBuilder] = []
        self._is_global = True
        self._projection_type = ProjectionType.ALL
        self._projected_attributes: tuple[str, ...] = ()

    def with_key(self, name: str, data_type: DataType, key_type: KeyType) -> Self:
        self._keys.append(KeyBuilder(name).with_data_type(data_type).with_key_type(key_type))
        return self

    def with_key_builder(self, key_builder: KeyBuilder) -> Self:
        self._keys.append(key_builder)
        return self

    def as_local(self) -> Self:
        self._is_global = False
        return self

    def with_projection(
        self,
        projection_type: ProjectionType,
        attributes: Iterable[str] = (),
    ) -> Self:
        self._projection_type = projection_type
        self._projected_attributes = tuple(attributes)
        return self

    def build(self) -> Index:
        index = Index(
            name=self._name,
            keys=tuple(k.build() for k in self._keys),
            is_global=self._is_global,
            projection_type=self._projection_type,
            projected_attributes=self._projected_attributes,
        )
        index.ensure_valid()
        return index


class TableBuilder:
    def __init__(self, name: str) -> None:
        self._name = name
        self._keys: list[KeyBuilder] = []
        self._indices: list[IndexBuilder] = []
        self._attributes: list[AttributeBuilder] = []

    @classmethod
    def with_name(cls, name: str) -> Self:
        return cls(name)

    def with_key(self, name: str, data_type: DataType, key_type: KeyType) -> Self:
        self._keys.append(KeyBuilder(name).with_data_type(data_type).with_key_type(key_type))
        return self

    def with_key_builder(self, key_builder: KeyBuilder) -> Self:
        self._keys.append(key_builder)
        return self

    def with_attribute(self, name: str, data_type: DataType) -> Self:
        self._attributes.append(AttributeBuilder(name).with_data_type(data_type))
        return self

    def with_index(self, index_builder: IndexBuilder) -> Self:
        self._indices.append(index_builder)
        return self

    def build(self) -> Table:
        """Build and validate the table.

        Raises:
            InvalidDefinitionError: If the keys, indexes or attributes are invalid.

        """
        table = Table(
            name=self._name,
            keys=tuple(k.build() for k in self._keys),
            indices=tuple(i.build() for i in self._indices),
            attributes=tuple(a.build() for a in self._attributes),
        )
        table.ensure_valid()
        return table


__all__ = [
    "AttributeBuilder",
    "IndexBuilder",
    "KeyBuilder",
    "TableBuilder",
]
