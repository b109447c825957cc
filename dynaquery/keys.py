"""Type aliases for DynamoDB wire-format values.

Type aliases:
    AttributeValue: A single value in DynamoDB's wrapped-type format, a dictionary
        with one type code key. Example: {"N": "3.14"}

    SerializedItem: A dictionary mapping attribute names to AttributeValues. This is
        the format the low-level boto3 client uses for Item, Key and the entries of
        Items in query/scan responses.

    LastEvaluatedKey: The pagination token returned by query and scan operations.
        Pass it back as exclusive_start_key to continue pagination. Has the same
        structure as SerializedItem but uses TypeAliasType for better type inference.
"""

from typing import Any, TypeAlias

from typing_extensions import TypeAliasType

AttributeValue: TypeAlias = dict[str, Any]
SerializedItem: TypeAlias = dict[str, AttributeValue]
LastEvaluatedKey = TypeAliasType("LastEvaluatedKey", SerializedItem)


__all__ = [
    "AttributeValue",
    "LastEvaluatedKey",
    "SerializedItem",
]
