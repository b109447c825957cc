"""Shared base functionality for Dynaquery providers.

This module provides the _ProviderBase class, which contains the logic shared
between the synchronous and asynchronous providers: lifecycle state checks,
building request keyword arguments from definitions, and turning responses
into QueryResult values. The subclasses only perform the I/O.
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Generic, NamedTuple, TypeVar

from dynaquery.actions import Action, Query, Scan
from dynaquery.config import ProviderConfig
from dynaquery.exceptions import ProviderDisposedError, ProviderNotStartedError
from dynaquery.expressions import ExpressionBuilder
from dynaquery.filters import Filter
from dynaquery.items import build_key, deserialize_item, require_key_values, serialize_item
from dynaquery.keys import LastEvaluatedKey
from dynaquery.tables import Table

T = TypeVar("T")

logger = logging.getLogger(__name__)

if TYPE_CHECKING:

    class QueryResult(NamedTuple, Generic[T]):
        """Result of a DynamoDB query or scan operation.

        Attributes:
            items: The returned items, deserialized.
            last_evaluated_key: Pagination token for the next page, if any.

        """

        items: list[T]
        last_evaluated_key: LastEvaluatedKey | None
else:

    class QueryResult(NamedTuple):
        """Result of a DynamoDB query or scan operation.

        At runtime this is a non-generic NamedTuple for compatibility. During
        type checking it is treated as `QueryResult[T]`.
        """

        items: list[Any]
        last_evaluated_key: LastEvaluatedKey | None


Client = TypeVar("Client")


class _ProviderBase(Generic[Client]):
    """Internal base class containing shared logic for sync and async providers.

    Do not use this directly. Use DynamoProvider or AsyncDynamoProvider instead.
    """

    _name = "DynamoDB provider"

    def __init__(self, config: ProviderConfig, *, client: Client | None = None) -> None:
        self._config = config
        self._client: Client | None = client
        self._started = False
        self._disposed = False

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def _ensure_not_disposed(self) -> None:
        if self._disposed:
            raise ProviderDisposedError(self._name)

    def _ensure_usable(self) -> Client:
        """Return the client, or raise if the provider cannot be used."""
        self._ensure_not_disposed()
        if not self._started or self._client is None:
            raise ProviderNotStartedError(self._name)
        return self._client

    @staticmethod
    def _condition_kwargs(condition: Filter | None) -> dict[str, Any]:
        if condition is None or condition.is_empty:
            return {}

        builder = ExpressionBuilder()
        kwargs: dict[str, Any] = {
            "ConditionExpression": builder.build_condition_expression(condition),
            "ExpressionAttributeNames": builder.attribute_names,
        }
        if builder.attribute_values:
            kwargs["ExpressionAttributeValues"] = builder.attribute_values
        return kwargs

    @classmethod
    def _build_put_kwargs(
        cls,
        *,
        table: Table,
        item: Mapping[str, Any],
        condition: Filter | None,
    ) -> dict[str, Any]:
        """Build kwargs for put_item. Only attributes declared on the table are written."""
        attributes = table.all_attributes
        require_key_values(table, item)

        undeclared = set(item) - {a.path[0] for a in attributes}
        if undeclared:
            logger.debug(
                "Skipping undeclared attributes for table %s: %s",
                table.name,
                ", ".join(sorted(undeclared)),
            )

        return {
            "TableName": table.name,
            "Item": serialize_item(item, attributes),
            **cls._condition_kwargs(condition),
        }

    @staticmethod
    def _build_get_kwargs(
        *,
        table: Table,
        key: Mapping[str, Any],
        consistent_read: bool,
    ) -> dict[str, Any]:
        return {
            "TableName": table.name,
            "Key": build_key(table, key),
            "ConsistentRead": consistent_read,
        }

    @classmethod
    def _build_delete_kwargs(
        cls,
        *,
        table: Table,
        key: Mapping[str, Any],
        condition: Filter | None,
    ) -> dict[str, Any]:
        return {
            "TableName": table.name,
            "Key": build_key(table, key),
            **cls._condition_kwargs(condition),
        }

    @staticmethod
    def _build_read_kwargs(action: Query | Scan) -> dict[str, Any]:
        if isinstance(action, Query):
            return action.to_query_schema()
        return action.to_scan_schema()

    @staticmethod
    def _parse_item(table: Table, response: Mapping[str, Any]) -> dict[str, Any] | None:
        item = response.get("Item")
        if item is None:
            return None
        return deserialize_item(item, table.all_attributes)

    @staticmethod
    def _parse_page(action: Action, response: Mapping[str, Any]) -> QueryResult:
        attributes = action.table.all_attributes
        items = [deserialize_item(item, attributes) for item in response.get("Items", [])]
        last_evaluated_key: LastEvaluatedKey | None = response.get("LastEvaluatedKey")

        logger.debug(
            "%s returned %d item(s)%s",
            action.description,
            len(items),
            " with more pages" if last_evaluated_key else "",
        )

        return QueryResult(items=items, last_evaluated_key=last_evaluated_key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(region={self._config.region!r})"


__all__ = [
    "QueryResult",
    "_ProviderBase",
]
