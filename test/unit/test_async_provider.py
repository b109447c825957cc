import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from botocore.exceptions import ClientError

from dynaquery.actions import Query, Scan
from dynaquery.async_provider import AsyncDynamoProvider
from dynaquery.config import ProviderConfig
from dynaquery.exceptions import (
    ConditionCheckFailedError,
    InvalidDefinitionError,
    ProviderDisposedError,
    ProviderNotStartedError,
    TableNotFoundError,
)
from dynaquery.fields import where
from dynaquery.tables import Table

CONFIG = ProviderConfig(region="us-east-1")


def _create_mock_client() -> AsyncMock:
    """Create a mock aioboto3 DynamoDB client.

    get_waiter is a regular method on aiobotocore clients; only the waiter's
    wait() is a coroutine.
    """
    client = AsyncMock()
    client.get_waiter = MagicMock(return_value=AsyncMock())
    return client


def _client_error(code: str, operation: str = "PutItem") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)


async def _started_provider(client: AsyncMock) -> AsyncDynamoProvider:
    provider = AsyncDynamoProvider(CONFIG, client=client)
    await provider.start()
    return provider


class TestAsyncProviderLifecycle:
    """Test start and dispose."""

    @pytest.mark.asyncio
    async def test_start_opens_client_from_session(self) -> None:
        client = _create_mock_client()
        session = MagicMock()
        session.client.return_value.__aenter__.return_value = client

        provider = AsyncDynamoProvider(CONFIG, session=session)
        assert await provider.start() is True

        session.client.assert_called_once_with(
            "dynamodb", region_name="us-east-1", api_version="2012-08-10"
        )
        assert provider.is_started

        await provider.dispose()

        session.client.return_value.__aexit__.assert_awaited_once()
        assert provider.is_disposed

    @pytest.mark.asyncio
    async def test_concurrent_starts_open_one_client(self) -> None:
        session = MagicMock()
        session.client.return_value.__aenter__.return_value = _create_mock_client()

        provider = AsyncDynamoProvider(CONFIG, session=session)
        await asyncio.gather(provider.start(), provider.start(), provider.start())

        session.client.assert_called_once()

    @pytest.mark.asyncio
    async def test_context_manager(self) -> None:
        client = _create_mock_client()

        async with AsyncDynamoProvider(CONFIG, client=client) as provider:
            assert provider.is_started

        assert provider.is_disposed

    @pytest.mark.asyncio
    async def test_not_started_raises(self, orders_table: Table) -> None:
        provider = AsyncDynamoProvider(CONFIG, client=_create_mock_client())

        with pytest.raises(ProviderNotStartedError):
            await provider.get_item(orders_table, {"customer_id": "c-1", "order_id": "o-1"})

    @pytest.mark.asyncio
    async def test_disposed_raises(self, orders_table: Table) -> None:
        provider = await _started_provider(_create_mock_client())
        await provider.dispose()
        await provider.dispose()

        with pytest.raises(ProviderDisposedError):
            await provider.get_item(orders_table, {"customer_id": "c-1", "order_id": "o-1"})
        with pytest.raises(ProviderDisposedError):
            await provider.start()


class TestAsyncProviderTables:
    """Test table creation and deletion."""

    @pytest.mark.asyncio
    async def test_create_table_waits_for_table(self, orders_table: Table) -> None:
        client = _create_mock_client()
        provider = await _started_provider(client)

        assert await provider.create_table(orders_table) is True

        client.create_table.assert_awaited_once_with(**orders_table.to_create_schema())
        client.get_waiter.assert_called_once_with("table_exists")
        client.get_waiter.return_value.wait.assert_awaited_once_with(TableName="orders")

    @pytest.mark.asyncio
    async def test_create_existing_table_returns_false(self, orders_table: Table) -> None:
        client = _create_mock_client()
        client.create_table.side_effect = _client_error("ResourceInUseException", "CreateTable")
        provider = await _started_provider(client)

        assert await provider.create_table(orders_table) is False
        client.get_waiter.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_missing_table_raises(self, orders_table: Table) -> None:
        client = _create_mock_client()
        client.delete_table.side_effect = _client_error("ResourceNotFoundException", "DeleteTable")
        provider = await _started_provider(client)

        with pytest.raises(TableNotFoundError) as exc_info:
            await provider.delete_table(orders_table)

        assert exc_info.value.table_name == "orders"
        assert exc_info.value.operation == "delete_table"


class TestAsyncProviderItems:
    """Test item operations."""

    @pytest.mark.asyncio
    async def test_put_item_writes_declared_attributes(self, orders_table: Table) -> None:
        client = _create_mock_client()
        provider = await _started_provider(client)

        await provider.put_item(
            orders_table,
            {"customer_id": "c-1", "order_id": "o-1", "total": 5, "undeclared": "x"},
        )

        client.put_item.assert_awaited_once_with(
            TableName="orders",
            Item={
                "customer_id": {"S": "c-1"},
                "order_id": {"S": "o-1"},
                "total": {"N": "5"},
            },
        )

    @pytest.mark.asyncio
    async def test_put_item_with_condition(self, orders_table: Table) -> None:
        client = _create_mock_client()
        provider = await _started_provider(client)

        await provider.put_item(
            orders_table,
            {"customer_id": "c-1", "order_id": "o-1"},
            condition=where(orders_table.attr.customer_id.not_exists()),
        )

        kwargs = client.put_item.await_args.kwargs
        assert kwargs["ConditionExpression"] == "attribute_not_exists(#a)"
        assert kwargs["ExpressionAttributeNames"] == {"#a": "customer_id"}
        assert "ExpressionAttributeValues" not in kwargs

    @pytest.mark.asyncio
    async def test_failed_condition_raises(self, orders_table: Table) -> None:
        client = _create_mock_client()
        client.put_item.side_effect = _client_error("ConditionalCheckFailedException")
        provider = await _started_provider(client)

        with pytest.raises(ConditionCheckFailedError) as exc_info:
            await provider.put_item(orders_table, {"customer_id": "c-1", "order_id": "o-1"})

        assert isinstance(exc_info.value.original_error, ClientError)

    @pytest.mark.asyncio
    async def test_put_item_without_key_raises_before_request(self, orders_table: Table) -> None:
        client = _create_mock_client()
        provider = await _started_provider(client)

        with pytest.raises(InvalidDefinitionError):
            await provider.put_item(orders_table, {"customer_id": "c-1"})

        client.put_item.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_item(self, orders_table: Table) -> None:
        client = _create_mock_client()
        client.get_item.return_value = {
            "Item": {
                "customer_id": {"S": "c-1"},
                "order_id": {"S": "o-1"},
                "address.city": {"S": "Porto"},
            }
        }
        provider = await _started_provider(client)

        item = await provider.get_item(
            orders_table, {"customer_id": "c-1", "order_id": "o-1"}, consistent_read=True
        )

        assert item == {"customer_id": "c-1", "order_id": "o-1", "address": {"city": "Porto"}}
        client.get_item.assert_awaited_once_with(
            TableName="orders",
            Key={"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}},
            ConsistentRead=True,
        )

    @pytest.mark.asyncio
    async def test_get_missing_item(self, orders_table: Table) -> None:
        client = _create_mock_client()
        client.get_item.return_value = {}
        provider = await _started_provider(client)

        assert await provider.get_item(orders_table, {"customer_id": "c-1", "order_id": "x"}) is None

    @pytest.mark.asyncio
    async def test_delete_item(self, orders_table: Table) -> None:
        client = _create_mock_client()
        provider = await _started_provider(client)

        await provider.delete_item(orders_table, {"customer_id": "c-1", "order_id": "o-1"})

        client.delete_item.assert_awaited_once_with(
            TableName="orders",
            Key={"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}},
        )


class TestAsyncProviderReads:
    """Test query and scan pagination."""

    @pytest.mark.asyncio
    async def test_query_returns_page(self, orders_table: Table) -> None:
        last_key = {"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}}
        client = _create_mock_client()
        client.query.return_value = {
            "Items": [{"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}, "total": {"N": "7"}}],
            "LastEvaluatedKey": last_key,
        }
        provider = await _started_provider(client)
        query = Query(table=orders_table, key_filter=where(orders_table.attr.customer_id == "c-1"))

        items, last_evaluated_key = await provider.query(query)

        assert items == [{"customer_id": "c-1", "order_id": "o-1", "total": 7}]
        assert last_evaluated_key == last_key
        client.query.assert_awaited_once_with(**query.to_query_schema())

    @pytest.mark.asyncio
    async def test_query_all_follows_pages(self, orders_table: Table) -> None:
        last_key = {"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}}
        pages: list[dict[str, Any]] = [
            {"Items": [{"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}}], "LastEvaluatedKey": last_key},
            {"Items": [{"customer_id": {"S": "c-1"}, "order_id": {"S": "o-2"}}]},
        ]
        client = _create_mock_client()
        client.query.side_effect = pages
        provider = await _started_provider(client)
        query = Query(table=orders_table, key_filter=where(orders_table.attr.customer_id == "c-1"))

        items = await provider.query_all(query)

        assert [item["order_id"] for item in items] == ["o-1", "o-2"]
        assert client.query.await_count == 2
        assert "ExclusiveStartKey" not in client.query.await_args_list[0].kwargs
        assert client.query.await_args_list[1].kwargs["ExclusiveStartKey"] == last_key

    @pytest.mark.asyncio
    async def test_scan_all_follows_pages(self, orders_table: Table) -> None:
        last_key = {"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}}
        client = _create_mock_client()
        client.scan.side_effect = [
            {"Items": [{"customer_id": {"S": "c-1"}, "order_id": {"S": "o-1"}}], "LastEvaluatedKey": last_key},
            {"Items": []},
        ]
        provider = await _started_provider(client)

        items = await provider.scan_all(Scan(table=orders_table, limit=1))

        assert items == [{"customer_id": "c-1", "order_id": "o-1"}]
        assert client.scan.await_args_list[1].kwargs["Limit"] == 1
