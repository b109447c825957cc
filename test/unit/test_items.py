"""Tests for item and key serialization."""

from decimal import Decimal

import pytest

from dynaquery.attributes import Attribute
from dynaquery.data_types import DataType
from dynaquery.exceptions import InvalidDefinitionError, InvalidOperandError, SerializerNotFoundError
from dynaquery.items import build_key, deserialize_item, require_key_values, serialize_item
from dynaquery.tables import Table

ID = Attribute(name="id", data_type=DataType.STRING)
TOTAL = Attribute(name="total", data_type=DataType.NUMBER)
CITY = Attribute(name="address.city", data_type=DataType.STRING)
DELETED_AT = Attribute(name="deleted_at", data_type=DataType.NULL)
TAGS = Attribute(name="tags", data_type=DataType.STRING_SET)


class TestSerializeItem:
    """Test serialize_item."""

    def test_serializes_declared_attributes(self) -> None:
        item = serialize_item({"id": "u-1", "total": 12.5, "extra": "ignored"}, [ID, TOTAL])

        assert item == {"id": {"S": "u-1"}, "total": {"N": "12.5"}}

    def test_skips_missing_and_none_values(self) -> None:
        item = serialize_item({"id": "u-1", "total": None}, [ID, TOTAL, TAGS])

        assert item == {"id": {"S": "u-1"}}

    def test_none_is_kept_for_null_attributes(self) -> None:
        item = serialize_item({"deleted_at": None}, [DELETED_AT])

        assert item == {"deleted_at": {"NULL": True}}

    def test_nested_path_is_stored_under_dotted_name(self) -> None:
        item = serialize_item({"address": {"city": "Lisbon"}}, [CITY])

        assert item == {"address.city": {"S": "Lisbon"}}

    def test_partial_nested_path_is_skipped(self) -> None:
        assert serialize_item({"address": "Lisbon"}, [CITY]) == {}
        assert serialize_item({"address": {}}, [CITY]) == {}

    def test_wrong_value_type_raises(self) -> None:
        with pytest.raises(InvalidOperandError):
            serialize_item({"total": "a lot"}, [TOTAL])

    def test_document_attribute_raises(self) -> None:
        profile = Attribute(name="profile", data_type=DataType.MAP)

        with pytest.raises(SerializerNotFoundError):
            serialize_item({"profile": {"a": 1}}, [profile])


class TestDeserializeItem:
    """Test deserialize_item."""

    def test_declared_attributes_use_serializers(self) -> None:
        result = deserialize_item({"id": {"S": "u-1"}, "total": {"N": "3"}}, [ID, TOTAL])

        assert result == {"id": "u-1", "total": 3}
        assert isinstance(result["total"], int)

    def test_dotted_name_is_written_back_nested(self) -> None:
        result = deserialize_item({"address.city": {"S": "Lisbon"}}, [CITY])

        assert result == {"address": {"city": "Lisbon"}}

    @pytest.mark.parametrize(
        "item",
        [
            {"address": {"S": "raw"}, "address.city": {"S": "Paris"}},
            {"address.city": {"S": "Paris"}, "address": {"S": "raw"}},
            {"address.city": {"S": "Paris"}, "address": {"M": {"city": {"S": "Porto"}}}},
        ],
    )
    def test_dotted_name_overlapping_top_level_attribute_raises(self, item: dict[str, object]) -> None:
        with pytest.raises(InvalidDefinitionError, match="'address.city' overlaps attribute 'address'"):
            deserialize_item(item, [CITY])

    def test_undeclared_attributes_use_type_deserializer(self) -> None:
        result = deserialize_item(
            {"score": {"N": "1.5"}, "profile": {"M": {"name": {"S": "Ana"}}}},
            [ID],
        )

        assert result == {"score": Decimal("1.5"), "profile": {"name": "Ana"}}

    def test_sets_come_back_as_sets(self) -> None:
        result = deserialize_item({"tags": {"SS": ["a", "b"]}}, [TAGS])

        assert result == {"tags": {"a", "b"}}


class TestBuildKey:
    """Test build_key."""

    def test_table_key(self, orders_table: Table) -> None:
        key = build_key(orders_table, {"customer_id": "c-1", "order_id": "o-1", "total": 3})

        assert key == {"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}}

    def test_index_key(self, orders_table: Table) -> None:
        index = orders_table.get_index("status-index")

        key = build_key(orders_table, {"status": "paid", "order_id": "o-1"}, index)

        assert key == {"status": {"S": "paid"}, "order_id": {"S": "o-1"}}

    @pytest.mark.parametrize("values", [{"customer_id": "c-1"}, {"customer_id": "c-1", "order_id": None}])
    def test_missing_key_value_raises(self, orders_table: Table, values: dict[str, object]) -> None:
        with pytest.raises(InvalidDefinitionError, match="order_id"):
            build_key(orders_table, values)


class TestRequireKeyValues:
    """Test require_key_values."""

    def test_present_key_values(self, orders_table: Table) -> None:
        require_key_values(orders_table, {"customer_id": "c-1", "order_id": "o-1"})

    def test_missing_index_key_value_raises(self, orders_table: Table) -> None:
        index = orders_table.get_index("status-index")

        with pytest.raises(InvalidDefinitionError, match="status"):
            require_key_values(orders_table, {"customer_id": "c-1", "order_id": "o-1"}, index)
