"""Table, key and index definitions.

Definitions are immutable descriptions of a DynamoDB table. They know how to
validate themselves and how to render the structures boto3 expects for
create_table. They are also the source of attribute data types when building
queries and serializing items.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dynaquery.attributes import PATH_SEPARATOR, Attribute
from dynaquery.data_types import KeyType, ProjectionType
from dynaquery.exceptions import IndexNotFoundError, InvalidDefinitionError
from dynaquery.fields import AttributePath

logger = logging.getLogger(__name__)


class Key(BaseModel):
    """A key attribute and its role (HASH or RANGE)."""

    model_config = ConfigDict(frozen=True)

    attribute: Attribute
    key_type: KeyType

    @property
    def name(self) -> str:
        return self.attribute.name

    def to_key_schema(self) -> dict[str, str]:
        return {"AttributeName": self.name, "KeyType": self.key_type.value}

    def to_attribute_definition(self) -> dict[str, str]:
        return {"AttributeName": self.name, "AttributeType": self.attribute.data_type.code}


def _find_key(keys: tuple[Key, ...], key_type: KeyType) -> Key | None:
    return next((k for k in keys if k.key_type is key_type), None)


def _validate_keys(keys: tuple[Key, ...], owner: str) -> None:
    hash_keys = [k for k in keys if k.key_type is KeyType.HASH]
    range_keys = [k for k in keys if k.key_type is KeyType.RANGE]

    if len(hash_keys) != 1:
        raise InvalidDefinitionError(f"{owner} must have exactly one HASH key, got {len(hash_keys)}")
    if len(range_keys) > 1:
        raise InvalidDefinitionError(f"{owner} must have at most one RANGE key, got {len(range_keys)}")

    for key in keys:
        if not key.attribute.data_type.is_key_type:
            raise InvalidDefinitionError(
                f"{owner} key '{key.name}' uses type '{key.attribute.data_type.code}'; "
                "keys must be S, N or B"
            )


class Index(BaseModel):
    """A global or local secondary index."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=3, max_length=255)
    keys: tuple[Key, ...]
    is_global: bool = True
    projection_type: ProjectionType = ProjectionType.ALL
    projected_attributes: tuple[str, ...] = ()

    @property
    def hash_key(self) -> Key:
        key = _find_key(self.keys, KeyType.HASH)
        if key is None:
            raise InvalidDefinitionError(f"Index '{self.name}' has no HASH key")
        return key

    @property
    def range_key(self) -> Key | None:
        return _find_key(self.keys, KeyType.RANGE)

    def ensure_valid(self) -> None:
        _validate_keys(self.keys, f"Index '{self.name}'")

        if self.projection_type is ProjectionType.INCLUDE and not self.projected_attributes:
            raise InvalidDefinitionError(
                f"Index '{self.name}' uses an INCLUDE projection without attributes"
            )
        if self.projection_type is not ProjectionType.INCLUDE and self.projected_attributes:
            raise InvalidDefinitionError(
                f"Index '{self.name}' lists projected attributes without an INCLUDE projection"
            )

    def to_index_schema(self) -> dict[str, Any]:
        projection: dict[str, Any] = {"ProjectionType": self.projection_type.value}
        if self.projected_attributes:
            projection["NonKeyAttributes"] = list(self.projected_attributes)

        return {
            "IndexName": self.name,
            "KeySchema": [k.to_key_schema() for k in self.keys],
            "Projection": projection,
        }


class Table(BaseModel):
    """A DynamoDB table definition.

    Attributes:
        name: The table name.
        keys: The table's HASH key and optional RANGE key.
        indices: Global and local secondary indexes.
        attributes: Non-key attributes with known data types. Key attributes
            (of the table and its indexes) are included automatically.

    Example:
        users = Table(
            name="users",
            keys=(Key(attribute=user_id, key_type=KeyType.HASH),),
            attributes=(status, age),
        )
        users.attr.status == "active"

    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=3, max_length=255)
    keys: tuple[Key, ...]
    indices: tuple[Index, ...] = ()
    attributes: tuple[Attribute, ...] = ()

    @property
    def hash_key(self) -> Key:
        key = _find_key(self.keys, KeyType.HASH)
        if key is None:
            raise InvalidDefinitionError(f"Table '{self.name}' has no HASH key")
        return key

    @property
    def range_key(self) -> Key | None:
        return _find_key(self.keys, KeyType.RANGE)

    @property
    def key_attributes(self) -> list[Attribute]:
        """Distinct key attributes of the table and its indexes, table keys first."""
        seen: dict[str, Attribute] = {}
        for key in (*self.keys, *(k for index in self.indices for k in index.keys)):
            seen.setdefault(key.name, key.attribute)
        return list(seen.values())

    @property
    def all_attributes(self) -> list[Attribute]:
        """Key attributes followed by the declared non-key attributes."""
        seen = {a.name: a for a in self.key_attributes}
        for attribute in self.attributes:
            seen.setdefault(attribute.name, attribute)
        return list(seen.values())

    @property
    def attr(self) -> AttributePath:
        return AttributePath(self)

    def get_attribute(self, name: str) -> Attribute | None:
        return next((a for a in self.all_attributes if a.name == name), None)

    def get_index(self, name: str) -> Index:
        """Return the index with the given name.

        Raises:
            IndexNotFoundError: If no such index is defined.

        """
        for index in self.indices:
            if index.name == name:
                return index
        raise IndexNotFoundError(index_name=name, table_name=self.name)

    def ensure_valid(self) -> None:
        """Raise InvalidDefinitionError if the table could not be created as described."""
        _validate_keys(self.keys, f"Table '{self.name}'")

        names = [index.name for index in self.indices]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidDefinitionError(
                f"Table '{self.name}' has duplicate index names: {', '.join(duplicates)}"
            )

        for index in self.indices:
            index.ensure_valid()
            if not index.is_global and index.hash_key != self.hash_key:
                raise InvalidDefinitionError(
                    f"Local index '{index.name}' must use the table's HASH key '{self.hash_key.name}'"
                )

        declared = [k.attribute for k in self.keys]
        declared.extend(k.attribute for index in self.indices for k in index.keys)
        declared.extend(self.attributes)

        types: dict[str, str] = {}
        for attribute in declared:
            code = attribute.data_type.code
            if types.setdefault(attribute.name, code) != code:
                raise InvalidDefinitionError(
                    f"Attribute '{attribute.name}' is declared with conflicting types "
                    f"'{types[attribute.name]}' and '{code}'"
                )

        for attribute in declared:
            for depth in range(1, len(attribute.path)):
                prefix = PATH_SEPARATOR.join(attribute.path[:depth])
                if prefix in types:
                    raise InvalidDefinitionError(
                        f"Attribute '{attribute.name}' is nested under declared attribute '{prefix}'"
                    )

    def to_create_schema(self, billing_mode: str = "PAY_PER_REQUEST") -> dict[str, Any]:
        """Build the keyword arguments for the create_table operation."""
        self.ensure_valid()

        schema: dict[str, Any] = {
            "TableName": self.name,
            "KeySchema": [k.to_key_schema() for k in self.keys],
            "AttributeDefinitions": [
                {"AttributeName": a.name, "AttributeType": a.data_type.code}
                for a in self.key_attributes
            ],
            "BillingMode": billing_mode,
        }

        global_indices = [i.to_index_schema() for i in self.indices if i.is_global]
        local_indices = [i.to_index_schema() for i in self.indices if not i.is_global]

        if global_indices:
            schema["GlobalSecondaryIndexes"] = global_indices
        if local_indices:
            schema["LocalSecondaryIndexes"] = local_indices

        logger.debug("Create schema for table %s: %s", self.name, schema)

        return schema


__all__ = [
    "Index",
    "Key",
    "Table",
]
