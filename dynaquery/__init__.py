"""Dynaquery: DynamoDB table definitions, expression compilation and providers."""

from dynaquery.actions import Action, Query, Scan
from dynaquery.async_provider import AsyncDynamoProvider
from dynaquery.attributes import Attribute
from dynaquery.base import QueryResult
from dynaquery.builders import AttributeBuilder, IndexBuilder, KeyBuilder, TableBuilder
from dynaquery.config import ProviderConfig
from dynaquery.data_types import DataType, KeyType, ProjectionType
from dynaquery.exceptions import (
    ConditionCheckFailedError,
    ConfigurationError,
    DynamoDBClientError,
    DynaqueryError,
    IndexNotFoundError,
    InvalidArgumentError,
    InvalidDefinitionError,
    InvalidOperandError,
    OperandCountError,
    OperationError,
    ProviderDisposedError,
    ProviderNotStartedError,
    SerializerNotFoundError,
    TableNotFoundError,
    ThroughputExceededError,
    ValidationError,
)
from dynaquery.expressions import (
    ExpressionBuilder,
    FilterExpressionData,
    ProjectionData,
    compile_filter,
    compile_projection,
)
from dynaquery.fields import ExpressionField, where
from dynaquery.filters import Expression, Filter
from dynaquery.items import build_key, deserialize_item, serialize_item
from dynaquery.operators import OperatorType
from dynaquery.provider import DynamoProvider
from dynaquery.tables import Index, Key, Table

__all__ = [
    "Action",
    "AsyncDynamoProvider",
    "Attribute",
    "AttributeBuilder",
    "ConditionCheckFailedError",
    "ConfigurationError",
    "DataType",
    "DynamoDBClientError",
    "DynamoProvider",
    "DynaqueryError",
    "Expression",
    "ExpressionBuilder",
    "ExpressionField",
    "Filter",
    "FilterExpressionData",
    "Index",
    "IndexBuilder",
    "IndexNotFoundError",
    "InvalidArgumentError",
    "InvalidDefinitionError",
    "InvalidOperandError",
    "Key",
    "KeyBuilder",
    "KeyType",
    "OperandCountError",
    "OperationError",
    "OperatorType",
    "ProjectionData",
    "ProjectionType",
    "ProviderConfig",
    "ProviderDisposedError",
    "ProviderNotStartedError",
    "Query",
    "QueryResult",
    "Scan",
    "SerializerNotFoundError",
    "Table",
    "TableBuilder",
    "TableNotFoundError",
    "ThroughputExceededError",
    "ValidationError",
    "build_key",
    "compile_filter",
    "compile_projection",
    "deserialize_item",
    "serialize_item",
    "where",
]
