"""Shared test fixtures and table definitions."""

from pytest import fixture

from dynaquery.builders import IndexBuilder, TableBuilder
from dynaquery.data_types import DataType, KeyType, ProjectionType
from dynaquery.tables import Table


def build_orders_table() -> Table:
    """Orders keyed by customer and order, with a status GSI and a total LSI."""
    return (
        TableBuilder("orders")
        .with_key("customer_id", DataType.STRING, KeyType.HASH)
        .with_key("order_id", DataType.STRING, KeyType.RANGE)
        .with_attribute("total", DataType.NUMBER)
        .with_attribute("tags", DataType.STRING_SET)
        .with_attribute("address.city", DataType.STRING)
        .with_index(
            IndexBuilder("status-index")
            .with_key("status", DataType.STRING, KeyType.HASH)
            .with_key("order_id", DataType.STRING, KeyType.RANGE)
            .with_projection(ProjectionType.ALL)
        )
        .with_index(
            IndexBuilder("total-index")
            .with_key("customer_id", DataType.STRING, KeyType.HASH)
            .with_key("total", DataType.NUMBER, KeyType.RANGE)
            .as_local()
        )
        .build()
    )


@fixture
def orders_table() -> Table:
    return build_orders_table()
