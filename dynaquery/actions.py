"""Query and scan definitions.

An action describes a read against a table (or one of its indexes). It
validates itself against the table definition and compiles into the keyword
arguments expected by the low-level boto3 client's query and scan operations.
"""

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from dynaquery.attributes import Attribute
from dynaquery.data_types import KeyType
from dynaquery.exceptions import InvalidDefinitionError
from dynaquery.expressions import ExpressionBuilder
from dynaquery.filters import Filter
from dynaquery.keys import LastEvaluatedKey
from dynaquery.operators import OperatorType
from dynaquery.tables import Index, Key, Table

logger = logging.getLogger(__name__)


class Action(BaseModel):
    """Base class for reads that target a table.

    Attributes:
        table: The table to read.
        index: An index of the table to read instead (optional).
        description: A description of the action, for logging.

    """

    model_config = ConfigDict(frozen=True)

    table: Table
    index: Index | None = None
    description: str = "[Unnamed Action]"

    @property
    def keys(self) -> tuple[Key, ...]:
        """The keys of the index, if any, otherwise of the table."""
        return self.index.keys if self.index is not None else self.table.keys

    def _validate_target(self) -> None:
        self.table.ensure_valid()

        if self.index is not None and self.index not in self.table.indices:
            raise InvalidDefinitionError(
                f"Index '{self.index.name}' does not belong to table '{self.table.name}'"
            )

    def _base_schema(
        self,
        builder: ExpressionBuilder,
        attributes: Sequence[Attribute],
    ) -> dict[str, Any]:
        schema: dict[str, Any] = {"TableName": self.table.name}

        if self.index is not None:
            schema["IndexName"] = self.index.name

        if attributes:
            schema["ProjectionExpression"] = builder.build_projection_expression(
                list(attributes)
            )

        return schema

    @staticmethod
    def _finish_schema(
        schema: dict[str, Any],
        builder: ExpressionBuilder,
        *,
        limit: int | None,
        consistent_read: bool,
        exclusive_start_key: LastEvaluatedKey | None,
    ) -> dict[str, Any]:
        names = builder.attribute_names
        if names:
            schema["ExpressionAttributeNames"] = names

        values = builder.attribute_values
        if values:
            schema["ExpressionAttributeValues"] = values

        if limit is not None:
            schema["Limit"] = limit

        schema["ConsistentRead"] = consistent_read

        if exclusive_start_key is not None:
            schema["ExclusiveStartKey"] = exclusive_start_key

        return schema


class Query(Action):
    """The definition of a table (or index) query.

    Attributes:
        key_filter: Conditions on the key. It must test the hash key for
            equality and may add one condition on the range key.
        results_filter: Conditions applied to items after the key condition.
        attributes: Attributes to select. If empty, all attributes are selected.
        limit: Maximum number of items to evaluate per page.
        consistent_read: Whether to use strongly consistent reads.
        scan_forward: Whether to traverse the range key in ascending order.
        exclusive_start_key: Pagination token from a previous page.

    Example:
        query = Query(
            table=orders,
            key_filter=where(orders.attr.customer_id == "c-1"),
            results_filter=where(orders.attr.status == "shipped"),
        )
        client.query(**query.to_query_schema())

    """

    description: str = "[Unnamed Query]"

    key_filter: Filter
    results_filter: Filter | None = None
    attributes: tuple[Attribute, ...] = ()
    limit: int | None = Field(default=None, gt=0)
    consistent_read: bool = False
    scan_forward: bool = True
    exclusive_start_key: LastEvaluatedKey | None = None

    def ensure_valid(self) -> None:
        """Raise InvalidDefinitionError if the query cannot be run as described."""
        self._validate_target()

        self.key_filter.ensure_valid()
        if self.results_filter is not None:
            self.results_filter.ensure_valid()

        keys = self.keys
        hash_key = next(k for k in keys if k.key_type is KeyType.HASH)
        range_key = next((k for k in keys if k.key_type is KeyType.RANGE), None)

        hash_expressions = [
            e for e in self.key_filter.expressions if e.attribute.name == hash_key.name
        ]
        if len(hash_expressions) != 1:
            raise InvalidDefinitionError(
                f"The key filter must reference the hash key '{hash_key.name}' exactly once"
            )
        if hash_expressions[0].operator_type is not OperatorType.EQUALS:
            raise InvalidDefinitionError(
                f"The hash key '{hash_key.name}' must be compared with EQUALS"
            )

        for expression in self.key_filter.expressions:
            name = expression.attribute.name
            if name == hash_key.name:
                key = hash_key
            elif range_key is not None and name == range_key.name:
                key = range_key
                if not expression.operator_type.key_condition:
                    raise InvalidDefinitionError(
                        f"Operator {expression.operator_type.name} cannot be used in a key condition"
                    )
            else:
                raise InvalidDefinitionError(
                    f"The key filter references '{name}', which is not a key attribute"
                )
            if expression.attribute.data_type is not key.attribute.data_type:
                raise InvalidDefinitionError(
                    f"Key attribute '{name}' is typed {key.attribute.data_type.code}, "
                    f"but the key filter uses {expression.attribute.data_type.code}"
                )

        if len(self.key_filter.expressions) > 2:
            raise InvalidDefinitionError("The key filter may reference the range key only once")

        if self.consistent_read and self.index is not None and self.index.is_global:
            raise InvalidDefinitionError("Consistent reads are not supported on global indexes")

    def to_query_schema(self) -> dict[str, Any]:
        """Output the keyword arguments for the DynamoDB client's query operation.

        Aliases are assigned to the projection first, then the key filter, then
        the results filter, which continues the key filter's value numbering.
        """
        self.ensure_valid()

        builder = ExpressionBuilder()
        schema = self._base_schema(builder, self.attributes)

        schema["KeyConditionExpression"] = builder.build_condition_expression(self.key_filter)

        if self.results_filter is not None and not self.results_filter.is_empty:
            schema["FilterExpression"] = builder.build_condition_expression(self.results_filter)

        schema["ScanIndexForward"] = self.scan_forward

        schema = self._finish_schema(
            schema,
            builder,
            limit=self.limit,
            consistent_read=self.consistent_read,
            exclusive_start_key=self.exclusive_start_key,
        )

        logger.debug("Query schema for %s: %s", self.description, schema)

        return schema

    def with_start_key(self, exclusive_start_key: LastEvaluatedKey | None) -> "Query":
        """Return a copy of the query that resumes from a pagination token."""
        return self.model_copy(update={"exclusive_start_key": exclusive_start_key})


class Scan(Action):
    """The definition of a table (or index) scan.

    Attributes:
        filter: Conditions applied to scanned items (optional).
        attributes: Attributes to select. If empty, all attributes are selected.
        limit: Maximum number of items to evaluate per page.
        consistent_read: Whether to use strongly consistent reads.
        exclusive_start_key: Pagination token from a previous page.

    """

    description: str = "[Unnamed Scan]"

    filter: Filter | None = None
    attributes: tuple[Attribute, ...] = ()
    limit: int | None = Field(default=None, gt=0)
    consistent_read: bool = False
    exclusive_start_key: LastEvaluatedKey | None = None

    def ensure_valid(self) -> None:
        self._validate_target()

        if self.filter is not None:
            self.filter.ensure_valid()

        if self.consistent_read and self.index is not None and self.index.is_global:
            raise InvalidDefinitionError("Consistent reads are not supported on global indexes")

    def to_scan_schema(self) -> dict[str, Any]:
        """Output the keyword arguments for the DynamoDB client's scan operation."""
        self.ensure_valid()

        builder = ExpressionBuilder()
        schema = self._base_schema(builder, self.attributes)

        if self.filter is not None and not self.filter.is_empty:
            schema["FilterExpression"] = builder.build_condition_expression(self.filter)

        schema = self._finish_schema(
            schema,
            builder,
            limit=self.limit,
            consistent_read=self.consistent_read,
            exclusive_start_key=self.exclusive_start_key,
        )

        logger.debug("Scan schema for %s: %s", self.description, schema)

        return schema

    def with_start_key(self, exclusive_start_key: LastEvaluatedKey | None) -> "Scan":
        return self.model_copy(update={"exclusive_start_key": exclusive_start_key})


__all__ = [
    "Action",
    "Query",
    "Scan",
]
