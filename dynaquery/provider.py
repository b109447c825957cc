"""Synchronous DynamoDB provider built on boto3.

The provider turns table, query and scan definitions into requests for the
low-level boto3 DynamoDB client, deserializes the responses, and translates
client errors into Dynaquery exceptions.

Example:
    with DynamoProvider(ProviderConfig(region="us-east-1")) as provider:
        provider.create_table(orders)
        provider.put_item(orders, {"customer_id": "c-1", "order_id": "o-1"})
        shipped = provider.query_all(query)
"""

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import TYPE_CHECKING, Any

import boto3
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
    from mypy_boto3_dynamodb import DynamoDBClient
else:
    DynamoDBClient = Any

logger = logging.getLogger(__name__)


class DynamoProvider(_ProviderBase[DynamoDBClient]):
    """Runs DynamoDB requests through a boto3 client.

    start() must be called once before using other instance methods (or use
    the provider as a context manager). After dispose(), every call raises
    ProviderDisposedError.

    Args:
        config: Connection settings.
        client: An existing boto3 DynamoDB client to use instead of creating one.

    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        client: DynamoDBClient | None = None,
    ) -> None:
        super().__init__(config, client=client)

    def start(self) -> bool:
        """Create the DynamoDB client. Calling start() again has no effect.

        Returns:
            True once the provider is started.

        Raises:
            ProviderDisposedError: If the provider has been disposed.

        """
        self._ensure_not_disposed()

        if not self._started:
            if self._client is None:
                try:
                    self._client = boto3.client("dynamodb", **self._config.client_kwargs())
                except BotoCoreError:
                    logger.exception("DynamoDB provider failed to start")
                    raise

            self._started = True
            logger.info("DynamoDB provider started (region=%s)", self._config.region)

        return self._started

    def dispose(self) -> None:
        if self._disposed:
            return

        self._disposed = True
        self._started = False
        self._client = None
        logger.debug("DynamoDB provider disposed")

    def __enter__(self) -> Self:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.dispose()

    def _call(self, operation: str, table_name: str, **kwargs: Any) -> Any:
        client = self._ensure_usable()
        try:
            return getattr(client, operation)(**kwargs)
        except ClientError as e:
            logger.error("DynamoDB %s failed for table %s: %s", operation, table_name, e)
            raise wrap_client_error(e, operation=operation, table_name=table_name) from e

    def create_table(self, table: Table, *, billing_mode: str = "PAY_PER_REQUEST") -> bool:
        """Create a table and wait until it exists.

        Returns:
            True if the table was created, False if it already existed.

        """
        schema = table.to_create_schema(billing_mode=billing_mode)
        client = self._ensure_usable()

        try:
            client.create_table(**schema)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ResourceInUseException":
                logger.info("DynamoDB table %s already exists", table.name)
                return False
            logger.error("DynamoDB create_table failed for table %s: %s", table.name, e)
            raise wrap_client_error(e, operation="create_table", table_name=table.name) from e

        client.get_waiter("table_exists").wait(TableName=table.name)
        logger.info("DynamoDB table %s created", table.name)

        return True

    def delete_table(self, table: Table) -> None:
        self._call("delete_table", table.name, TableName=table.name)
        logger.info("DynamoDB table %s deleted", table.name)

    def put_item(
        self,
        table: Table,
        item: Mapping[str, Any],
        *,
        condition: Filter | None = None,
    ) -> None:
        """Write an item.

        Args:
            table: The target table.
            item: The item, as a Python mapping. Attributes not declared on the
                table are not written.
            condition: Optional condition that must hold for the write.

        Raises:
            ConditionCheckFailedError: If the condition is not satisfied.

        """
        kwargs = self._build_put_kwargs(table=table, item=item, condition=condition)
        self._call("put_item", table.name, **kwargs)

    def get_item(
        self,
        table: Table,
        key: Mapping[str, Any],
        *,
        consistent_read: bool = False,
    ) -> dict[str, Any] | None:
        """Read an item by its key.

        Returns:
            The deserialized item if found, None otherwise.

        """
        kwargs = self._build_get_kwargs(table=table, key=key, consistent_read=consistent_read)
        response = self._call("get_item", table.name, **kwargs)
        return self._parse_item(table, response)

    def delete_item(
        self,
        table: Table,
        key: Mapping[str, Any],
        *,
        condition: Filter | None = None,
    ) -> None:
        kwargs = self._build_delete_kwargs(table=table, key=key, condition=condition)
        self._call("delete_item", table.name, **kwargs)

    def query(self, query: Query) -> QueryResult:
        """Run one page of a query."""
        response = self._call("query", query.table.name, **self._build_read_kwargs(query))
        return self._parse_page(query, response)

    def query_all(self, query: Query) -> list[dict[str, Any]]:
        """Run a query, following LastEvaluatedKey until every page is read."""
        items: list[dict[str, Any]] = []
        last_key: LastEvaluatedKey | None = query.exclusive_start_key

        while True:
            page_items, last_key = self.query(query.with_start_key(last_key))
            items.extend(page_items)

            if last_key is None:
                break

        return items

    def scan(self, scan: Scan) -> QueryResult:
        """Run one page of a scan."""
        response = self._call("scan", scan.table.name, **self._build_read_kwargs(scan))
        return self._parse_page(scan, response)

    def scan_all(self, scan: Scan) -> list[dict[str, Any]]:
        """Run a scan, following LastEvaluatedKey until every page is read."""
        items: list[dict[str, Any]] = []
        last_key: LastEvaluatedKey | None = scan.exclusive_start_key

        while True:
            page_items, last_key = self.scan(scan.with_start_key(last_key))
            items.extend(page_items)

            if last_key is None:
                break

        return items


__all__ = [
    "DynamoProvider",
]
