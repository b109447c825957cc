"""Asynchronous DynamoDB provider built on aioboto3.

This module mirrors DynamoProvider with awaitable operations. The aioboto3
client is an async context manager. It is held open from start() until
dispose().

Example:
    async with AsyncDynamoProvider(ProviderConfig(region="us-east-1")) as provider:
        await provider.put_item(orders, {"customer_id": "c-1", "order_id": "o-1"})
        page = await provider.query(query)
"""

import asyncio
import logging
from collections.abc import Mapping
from contextlib import AsyncExitStack
from types import TracebackType
from typing import TYPE_CHECKING, Any

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError
from typing_extensions import Self

from dynaquery.actions import Query, Scan
from dynaquery.base import QueryResult, _ProviderBase
from dynaquery.config import ProviderConfig
from dynaquery.exceptions import wrap_client_error
from dynaquery.filters import Filter
from dynaquery.keys import LastEvaluatedKey
from dynaquery.tables import Table

if TYPE_CHECKING:
    from types_aiobotocore_dynamodb import DynamoDBClient as AsyncDynamoDBClient
else:
    AsyncDynamoDBClient = Any

logger = logging.getLogger(__name__)


class AsyncDynamoProvider(_ProviderBase[AsyncDynamoDBClient]):
    """Runs DynamoDB requests through an aioboto3 client.

    Args:
        config: Connection settings.
        session: The aioboto3 session to create the client from (a new one by default).
        client: An existing, already-open async client to use instead. The
            provider does not close clients it did not open.

    """

    _name = "async DynamoDB provider"

    def __init__(
        self,
        config: ProviderConfig,
        *,
        session: aioboto3.Session | None = None,
        client: AsyncDynamoDBClient | None = None,
    ) -> None:
        super().__init__(config, client=client)
        self._session = session
        self._exit_stack: AsyncExitStack | None = None
        self._start_lock = asyncio.Lock()

    async def start(self) -> bool:
        """Open the DynamoDB client. Concurrent and repeated calls open it once."""
        self._ensure_not_disposed()

        async with self._start_lock:
            self._ensure_not_disposed()

            if not self._started:
                if self._client is None:
                    session = self._session or aioboto3.Session()
                    exit_stack = AsyncExitStack()
                    try:
                        self._client = await exit_stack.enter_async_context(
                            session.client("dynamodb", **self._config.client_kwargs())
                        )
                    except BotoCoreError:
                        logger.exception("Async DynamoDB provider failed to start")
                        await exit_stack.aclose()
                        raise
                    self._exit_stack = exit_stack

                self._started = True
                logger.info("Async DynamoDB provider started (region=%s)", self._config.region)

        return self._started

    async def dispose(self) -> None:
        if self._disposed:
            return

        self._disposed = True
        self._started = False
        self._client = None

        if self._exit_stack is not None:
            exit_stack, self._exit_stack = self._exit_stack, None
            await exit_stack.aclose()

        logger.debug("Async DynamoDB provider disposed")

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.dispose()

    async def _call(self, operation: str, table_name: str, **kwargs: Any) -> Any:
        client = self._ensure_usable()
        try:
            return await getattr(client, operation)(**kwargs)
        except ClientError as e:
            logger.error("DynamoDB %s failed for table %s: %s", operation, table_name, e)
            raise wrap_client_error(e, operation=operation, table_name=table_name) from e

    async def create_table(self, table: Table, *, billing_mode: str = "PAY_PER_REQUEST") -> bool:
        """Create a table and wait until it exists.

        Returns:
            True if the table was created, False if it already existed.

        """
        schema = table.to_create_schema(billing_mode=billing_mode)
        client = self._ensure_usable()

        try:
            await client.create_table(**schema)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ResourceInUseException":
                logger.info("DynamoDB table %s already exists", table.name)
                return False
            logger.error("DynamoDB create_table failed for table %s: %s", table.name, e)
            raise wrap_client_error(e, operation="create_table", table_name=table.name) from e

        await client.get_waiter("table_exists").wait(TableName=table.name)
        logger.info("DynamoDB table %s created", table.name)

        return True

    async def delete_table(self, table: Table) -> None:
        await self._call("delete_table", table.name, TableName=table.name)
        logger.info("DynamoDB table %s deleted", table.name)

    async def put_item(
        self,
        table: Table,
        item: Mapping[str, Any],
        *,
        condition: Filter | None = None,
    ) -> None:
        kwargs = self._build_put_kwargs(table=table, item=item, condition=condition)
        await self._call("put_item", table.name, **kwargs)

    async def get_item(
        self,
        table: Table,
        key: Mapping[str, Any],
        *,
        consistent_read: bool = False,
    ) -> dict[str, Any] | None:
        kwargs = self._build_get_kwargs(table=table, key=key, consistent_read=consistent_read)
        response = await self._call("get_item", table.name, **kwargs)
        return self._parse_item(table, response)

    async def delete_item(
        self,
        table: Table,
        key: Mapping[str, Any],
        *,
        condition: Filter | None = None,
    ) -> None:
        kwargs = self._build_delete_kwargs(table=table, key=key, condition=condition)
        await self._call("delete_item", table.name, **kwargs)

    async def query(self, query: Query) -> QueryResult:
        response = await self._call("query", query.table.name, **self._build_read_kwargs(query))
        return self._parse_page(query, response)

    async def query_all(self, query: Query) -> list[dict[str, Any]]:
        """Run a query, following LastEvaluatedKey until every page is read."""
        items: list[dict[str, Any]] = []
        last_key: LastEvaluatedKey | None = query.exclusive_start_key

        while True:
            page_items, last_key = await self.query(query.with_start_key(last_key))
            items.extend(page_items)

            if last_key is None:
                break

        return items

    async def scan(self, scan: Scan) -> QueryResult:
        response = await self._call("scan", scan.table.name, **self._build_read_kwargs(scan))
        return self._parse_page(scan, response)

    async def scan_all(self, scan: Scan) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        last_key: LastEvaluatedKey | None = scan.exclusive_start_key

        while True:
            page_items, last_key = await self.scan(scan.with_start_key(last_key))
            items.extend(page_items)

            if last_key is None:
                break

        return items


__all__ = [
    "AsyncDynamoProvider",
]
