"""Serialization of whole items to and from DynamoDB's wire format.

Attributes with dotted names are read from (and written back to) nested
dictionaries in the Python representation, while the stored attribute keeps
the dotted name. For example, the attribute ``"address.city"`` reads
``source["address"]["city"]`` and is stored as ``{"address.city": {"S": ...}}``.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from boto3.dynamodb.types import TypeDeserializer

from dynaquery.attributes import PATH_SEPARATOR, Attribute
from dynaquery.exceptions import InvalidDefinitionError
from dynaquery.keys import SerializedItem
from dynaquery.serializers import serializer_for_attribute
from dynaquery.tables import Index, Table

_MISSING = object()

_type_deserializer = TypeDeserializer()


def _read(source: Mapping[str, Any], attribute: Attribute) -> Any:
    if not attribute.is_nested:
        return source.get(attribute.name, _MISSING)

    value: Any = source
    for part in attribute.path:
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _write(target: dict[str, Any], attribute: Attribute, value: Any) -> None:
    if not attribute.is_nested:
        target[attribute.name] = value
        return

    *parents, leaf = attribute.path
    node = target
    for part in parents:
        node = node.setdefault(part, {})
    node[leaf] = value


def _ensure_no_overlap(item: Mapping[str, Any], attribute: Attribute) -> None:
    for depth in range(1, len(attribute.path)):
        prefix = PATH_SEPARATOR.join(attribute.path[:depth])
        if prefix in item:
            raise InvalidDefinitionError(
                f"Attribute '{attribute.name}' overlaps attribute '{prefix}' of the item"
            )


def serialize_item(source: Mapping[str, Any], attributes: Sequence[Attribute]) -> SerializedItem:
    """Serialize the given attributes of a Python mapping.

    Attributes that are absent from the source, or set to None (unless typed
    NULL), are skipped.

    Raises:
        SerializerNotFoundError: If an attribute's data type has no serializer.
        InvalidOperandError: If a value does not match its attribute's data type.

    """
    item: SerializedItem = {}

    for attribute in attributes:
        value = _read(source, attribute)
        if value is _MISSING:
            continue
        serializer = serializer_for_attribute(attribute)
        if value is None and not serializer.accepts(None):
            continue
        item[attribute.name] = serializer.serialize(value)

    return item


def deserialize_item(item: Mapping[str, Any], attributes: Sequence[Attribute]) -> dict[str, Any]:
    """Deserialize an item read from DynamoDB.

    Attributes described in ``attributes`` use their registered serializer.
    Anything else is decoded with boto3's TypeDeserializer (which produces
    Decimal for numbers).

    Raises:
        InvalidDefinitionError: If a dotted attribute overlaps another
            attribute of the item, e.g. ``"address.city"`` next to ``"address"``.

    """
    known = {a.name: a for a in attributes}
    result: dict[str, Any] = {}

    for name, wrapper in item.items():
        attribute = known.get(name)
        if attribute is None:
            result[name] = _type_deserializer.deserialize(wrapper)
            continue
        _ensure_no_overlap(item, attribute)
        _write(result, attribute, serializer_for_attribute(attribute).deserialize(wrapper))

    return result


def require_key_values(table: Table, values: Mapping[str, Any], index: Index | None = None) -> None:
    """Raise InvalidDefinitionError unless every key attribute has a value."""
    keys = index.keys if index is not None else table.keys
    for key in keys:
        if _read(values, key.attribute) in (_MISSING, None):
            raise InvalidDefinitionError(
                f"Key attribute '{key.name}' is required for table '{table.name}'"
            )


def build_key(
    table: Table,
    values: Mapping[str, Any],
    index: Index | None = None,
) -> SerializedItem:
    """Serialize the key of an item.

    Args:
        table: The table definition.
        values: A mapping containing (at least) the key attribute values.
        index: Build the key of this index instead of the table's.

    Raises:
        InvalidDefinitionError: If a key attribute value is missing.

    """
    require_key_values(table, values, index)
    keys = index.keys if index is not None else table.keys
    return serialize_item(values, [k.attribute for k in keys])


__all__ = [
    "build_key",
    "deserialize_item",
    "require_key_values",
    "serialize_item",
]
