"""Comparison and condition operators used in filter expressions.

Each OperatorType carries its behavior as data: how many operands it takes and
a formatter that renders ``(attribute_name, operand_aliases)`` into an
expression fragment.
"""

from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

# DynamoDB limit on the number of values in an IN comparison.
MAX_IN_OPERANDS = 100

Formatter = Callable[[str, Any], str]


def _comparison(symbol: str) -> Formatter:
    return lambda name, alias: f"{name} {symbol} {alias}"


def _function(function: str) -> Formatter:
    return lambda name, alias: f"{function}({name}, {alias})"


def _between(name: str, aliases: Sequence[str]) -> str:
    return f"{name} BETWEEN {aliases[0]} AND {aliases[1]}"


def _in(name: str, aliases: Sequence[str]) -> str:
    return f"{name} IN ({', '.join(aliases)})"


def _exists(name: str, _: Any) -> str:
    return f"attribute_exists({name})"


def _not_exists(name: str, _: Any) -> str:
    return f"attribute_not_exists({name})"


class OperatorType(Enum):
    """A condition operator.

    Members are defined as ``(description, operand_count, formatter, variadic)``.
    A variadic operator accepts ``operand_count`` up to MAX_IN_OPERANDS operands.

    Example:
        OperatorType.BETWEEN.format("price", [":a0", ":a1"])
        Returns "price BETWEEN :a0 AND :a1".

    """

    EQUALS = ("equals", 1, _comparison("="), False)
    NOT_EQUALS = ("not equals", 1, _comparison("<>"), False)
    LESS_THAN = ("less than", 1, _comparison("<"), False)
    LESS_THAN_OR_EQUAL_TO = ("less than or equal to", 1, _comparison("<="), False)
    GREATER_THAN = ("greater than", 1, _comparison(">"), False)
    GREATER_THAN_OR_EQUAL_TO = ("greater than or equal to", 1, _comparison(">="), False)
    BETWEEN = ("between", 2, _between, False)
    IN = ("in", 1, _in, True)
    BEGINS_WITH = ("begins with", 1, _function("begins_with"), False)
    CONTAINS = ("contains", 1, _function("contains"), False)
    ATTRIBUTE_EXISTS = ("attribute exists", 0, _exists, False)
    ATTRIBUTE_NOT_EXISTS = ("attribute does not exist", 0, _not_exists, False)

    def __init__(
        self,
        description: str,
        operand_count: int,
        formatter: Formatter,
        variadic: bool,
    ) -> None:
        self.description = description
        self.operand_count = operand_count
        self.formatter = formatter
        self.variadic = variadic

    @property
    def takes_many(self) -> bool:
        """Whether operands are given as a list, each with its own alias."""
        return self.operand_count > 1 or self.variadic

    @property
    def key_condition(self) -> bool:
        """Whether the operator may appear in a KeyConditionExpression."""
        return self in _KEY_CONDITION_OPERATORS

    @property
    def expected_operands(self) -> str:
        if self.variadic:
            return f"a list of {self.operand_count} to {MAX_IN_OPERANDS} operands"
        if self.operand_count == 0:
            return "no operand"
        if self.operand_count == 1:
            return "a single operand"
        return f"a list of exactly {self.operand_count} operands"

    def accepts(self, operand: Any) -> bool:
        """Check whether an operand matches this operator's arity."""
        if self.operand_count == 0 and not self.variadic:
            return operand is None

        is_list = isinstance(operand, list | tuple)

        if not self.takes_many:
            return operand is not None and not is_list

        if not is_list:
            return False
        if self.variadic:
            return self.operand_count <= len(operand) <= MAX_IN_OPERANDS
        return len(operand) == self.operand_count

    def format(self, name: str, aliases: Any) -> str:
        """Render an expression fragment for an attribute name and its operand alias(es)."""
        return self.formatter(name, aliases)

    def __repr__(self) -> str:
        return f"<OperatorType.{self.name}>"


_KEY_CONDITION_OPERATORS = frozenset(
    {
        OperatorType.EQUALS,
        OperatorType.LESS_THAN,
        OperatorType.LESS_THAN_OR_EQUAL_TO,
        OperatorType.GREATER_THAN,
        OperatorType.GREATER_THAN_OR_EQUAL_TO,
        OperatorType.BETWEEN,
        OperatorType.BEGINS_WITH,
    }
)


__all__ = [
    "MAX_IN_OPERANDS",
    "OperatorType",
]
