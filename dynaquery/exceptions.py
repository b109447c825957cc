"""Dynaquery exceptions.

This module defines the exception hierarchy for the Dynaquery library.
All custom exceptions inherit from DynaqueryError, allowing users to catch
all library-specific errors with a single except clause.

Exception categories:
- ValidationError: Malformed input detected before any request is built or sent.
  These are raised synchronously and are never worth retrying.
- OperationError: Failures while talking to DynamoDB (or using a provider in the
  wrong lifecycle state).

Note: Pydantic validation errors raised while constructing definitions are
intentionally not wrapped and will bubble up as pydantic.ValidationError.
"""

from typing import Any


class DynaqueryError(Exception):
    """Base exception for all Dynaquery errors.

    Example:
        try:
            provider.query(query)
        except DynaqueryError as e:
            pass

    """


# =============================================================================
# Validation errors
# =============================================================================


class ValidationError(DynaqueryError):
    """Base class for errors caused by invalid input (filters, attributes, schemas)."""


class OperandCountError(ValidationError):
    """Raised when an expression's operand does not match its operator's arity.

    Example:
        Expression(attribute=price, operator_type=OperatorType.BETWEEN, operand=[10])
        Raises OperandCountError when the expression is validated or compiled.

    Attributes:
        operator: Name of the operator.
        operand: The operand that was supplied.

    """

    def __init__(self, *, operator: str, expected: str, operand: Any) -> None:
        self.operator = operator
        self.operand = operand
        super().__init__(f"{operator} requires {expected}, got {operand!r}")


class InvalidOperandError(ValidationError):
    """Raised when a value cannot be serialized as the requested data type.

    Attributes:
        data_type: The DynamoDB type code the value was serialized as.
        value: The rejected value.

    """

    def __init__(self, *, data_type: str, value: Any) -> None:
        self.data_type = data_type
        self.value = value
        super().__init__(f"Value {value!r} cannot be serialized as DynamoDB type '{data_type}'")


class SerializerNotFoundError(ValidationError):
    """Raised when no serializer is registered for a data type."""

    def __init__(self, data_type: str) -> None:
        self.data_type = data_type
        super().__init__(f"No serializer is registered for DynamoDB type '{data_type}'")


class InvalidArgumentError(ValidationError):
    """Raised when an argument has the wrong shape (e.g. a negative alias offset).

    Attributes:
        argument: Name of the offending argument.
        value: The rejected value.

    """

    def __init__(self, *, argument: str, value: Any, expected: str) -> None:
        self.argument = argument
        self.value = value
        super().__init__(f"Argument '{argument}' must be {expected}, got {value!r}")


class InvalidDefinitionError(ValidationError):
    """Raised when a table, index, key or action definition is invalid.

    Example:
        A table with two HASH keys, or a query whose key filter does not
        reference the partition key.

    """


class IndexNotFoundError(ValidationError):
    """Raised when a specified index does not exist on the table.

    Attributes:
        index_name: Name of the index that was not found.
        table_name: Name of the table that was searched.

    """

    def __init__(self, *, index_name: str, table_name: str | None = None) -> None:
        self.index_name = index_name
        self.table_name = table_name
        if table_name:
            message = f"Index '{index_name}' not found on table '{table_name}'"
        else:
            message = f"Index '{index_name}' not found on table"
        super().__init__(message)


class ConfigurationError(ValidationError):
    """Raised when provider configuration is missing or invalid."""


# =============================================================================
# Operation errors
# =============================================================================


class OperationError(DynaqueryError):
    """Base class for errors raised while executing requests."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        table_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.operation = operation
        self.table_name = table_name
        self.original_error = original_error
        super().__init__(message)


class ProviderDisposedError(OperationError):
    """Raised when a provider is used after dispose() was called."""

    def __init__(self, provider: str = "DynamoDB provider") -> None:
        super().__init__(f"The {provider} has been disposed")


class ProviderNotStartedError(OperationError):
    """Raised when a provider is used before start() was called."""

    def __init__(self, provider: str = "DynamoDB provider") -> None:
        super().__init__(f"The {provider} has not been started")


class ConditionCheckFailedError(OperationError):
    """Raised when a conditional write is rejected by DynamoDB.

    Attributes:
        condition: The condition expression that failed, when known.

    """

    def __init__(
        self,
        *,
        operation: str | None = None,
        table_name: str | None = None,
        condition: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.condition = condition
        message = "Conditional check failed"
        if operation:
            message = f"{message} in {operation} operation"
        if table_name:
            message = f"{message} on table '{table_name}'"
        super().__init__(
            message,
            operation=operation,
            table_name=table_name,
            original_error=original_error,
        )


class TableNotFoundError(OperationError):
    """Raised when the target table (or index) does not exist."""

    def __init__(
        self,
        *,
        operation: str | None = None,
        table_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        if table_name:
            message = f"Table '{table_name}' not found"
        else:
            message = "Table not found"
        super().__init__(
            message,
            operation=operation,
            table_name=table_name,
            original_error=original_error,
        )


class ThroughputExceededError(OperationError):
    """Raised when DynamoDB throttles a request."""

    def __init__(
        self,
        *,
        operation: str | None = None,
        table_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        message = "Provisioned throughput exceeded"
        if operation:
            message = f"{message} in {operation} operation"
        super().__init__(
            message,
            operation=operation,
            table_name=table_name,
            original_error=original_error,
        )


class DynamoDBClientError(OperationError):
    """Raised for any other DynamoDB client error.

    Attributes:
        error_code: The AWS error code (e.g. "ValidationException").

    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        operation: str | None = None,
        table_name: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.error_code = error_code
        if error_code:
            message = f"{error_code}: {message}"
        super().__init__(
            message,
            operation=operation,
            table_name=table_name,
            original_error=original_error,
        )


_THROTTLING_CODES = frozenset(
    {
        "ProvisionedThroughputExceededException",
        "ThrottlingException",
        "RequestLimitExceeded",
    }
)


def wrap_client_error(
    error: Exception,
    *,
    operation: str | None = None,
    table_name: str | None = None,
) -> OperationError:
    """Translate a botocore ClientError into the matching OperationError.

    Args:
        error: The exception raised by boto3/aioboto3. It is expected to carry a
            ``response`` dictionary shaped like botocore's ClientError.
        operation: The operation being performed (for the error message).
        table_name: The table targeted by the request.

    Returns:
        The wrapped exception. Callers should ``raise wrapped from error``.

    """
    response = getattr(error, "response", None) or {}
    details = response.get("Error", {})
    code = details.get("Code", "")
    message = details.get("Message", str(error))

    if code == "ConditionalCheckFailedException":
        return ConditionCheckFailedError(
            operation=operation,
            table_name=table_name,
            original_error=error,
        )
    if code == "ResourceNotFoundException":
        return TableNotFoundError(
            operation=operation,
            table_name=table_name,
            original_error=error,
        )
    if code in _THROTTLING_CODES:
        return ThroughputExceededError(
            operation=operation,
            table_name=table_name,
            original_error=error,
        )
    return DynamoDBClientError(
        message,
        error_code=code or None,
        operation=operation,
        table_name=table_name,
        original_error=error,
    )


__all__ = [
    "ConditionCheckFailedError",
    "ConfigurationError",
    "DynamoDBClientError",
    "DynaqueryError",
    "IndexNotFoundError",
    "InvalidArgumentError",
    "InvalidDefinitionError",
    "InvalidOperandError",
    "OperandCountError",
    "OperationError",
    "ProviderDisposedError",
    "ProviderNotStartedError",
    "SerializerNotFoundError",
    "TableNotFoundError",
    "ThroughputExceededError",
    "ValidationError",
    "wrap_client_error",
]
