"""Fluent attribute access for building filter expressions.

This module provides the ExpressionField and AttributePath classes that enable
the ``table.attr.field_name == value`` pattern. Each comparison returns an
Expression that can be combined into a Filter.
"""

from typing import TYPE_CHECKING, Any

from dynaquery.attributes import Attribute
from dynaquery.filters import Expression, Filter
from dynaquery.operators import OperatorType

if TYPE_CHECKING:
    from dynaquery.tables import Table


class ExpressionField:
    """Builds Expressions for a single attribute.

    Example:
        status = ExpressionField(Attribute(name="status", data_type=DataType.STRING))

        status == "active"
        Returns Expression(status, EQUALS, "active").

        status.begins_with("act")
        Returns Expression(status, BEGINS_WITH, "act").

    """

    __slots__ = ("attribute",)

    def __init__(self, attribute: Attribute) -> None:
        self.attribute = attribute

    def _expression(self, operator_type: OperatorType, operand: Any = None) -> Expression:
        return Expression(attribute=self.attribute, operator_type=operator_type, operand=operand)

    def __eq__(self, value: Any) -> Expression:  # type: ignore[override]
        return self._expression(OperatorType.EQUALS, value)

    def __ne__(self, value: Any) -> Expression:  # type: ignore[override]
        return self._expression(OperatorType.NOT_EQUALS, value)

    def __lt__(self, value: Any) -> Expression:
        return self._expression(OperatorType.LESS_THAN, value)

    def __le__(self, value: Any) -> Expression:
        return self._expression(OperatorType.LESS_THAN_OR_EQUAL_TO, value)

    def __gt__(self, value: Any) -> Expression:
        return self._expression(OperatorType.GREATER_THAN, value)

    def __ge__(self, value: Any) -> Expression:
        return self._expression(OperatorType.GREATER_THAN_OR_EQUAL_TO, value)

    __hash__ = None  # type: ignore[assignment]

    def between(self, low: Any, high: Any) -> Expression:
        return self._expression(OperatorType.BETWEEN, [low, high])

    def is_in(self, *values: Any) -> Expression:
        return self._expression(OperatorType.IN, list(values))

    def begins_with(self, prefix: Any) -> Expression:
        return self._expression(OperatorType.BEGINS_WITH, prefix)

    def contains(self, value: Any) -> Expression:
        return self._expression(OperatorType.CONTAINS, value)

    def exists(self) -> Expression:
        return self._expression(OperatorType.ATTRIBUTE_EXISTS)

    def not_exists(self) -> Expression:
        return self._expression(OperatorType.ATTRIBUTE_NOT_EXISTS)

    def __repr__(self) -> str:
        return f"ExpressionField({self.attribute.name!r})"


class AttributePath:
    """Provides ExpressionField access to the attributes declared on a table.

    Example:
        users.attr.status == "active"
        users.attr.age > 18

        users.attr.unknown
        Raises AttributeError.

    """

    _table: "Table"

    def __init__(self, table: "Table") -> None:
        # Use object.__setattr__ to avoid triggering __setattr__
        object.__setattr__(self, "_table", table)

    def __getattr__(self, name: str) -> ExpressionField:
        table: Table = object.__getattribute__(self, "_table")

        if name.startswith("_"):
            raise AttributeError(f"Cannot access private attribute '{name}'")

        attribute = table.get_attribute(name)
        if attribute is None:
            raise AttributeError(f"Table '{table.name}' has no attribute '{name}'")

        return ExpressionField(attribute)

    def __getitem__(self, name: str) -> ExpressionField:
        """Access attributes whose names are not identifiers (e.g. dotted paths)."""
        try:
            return self.__getattr__(name)
        except AttributeError as e:
            raise KeyError(name) from e

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("AttributePath is read-only")

    def __repr__(self) -> str:
        table = object.__getattribute__(self, "_table")
        return f"AttributePath({table.name})"


def where(*expressions: Expression) -> Filter:
    """Combine expressions into a Filter.

    Example:
        where(users.attr.status == "active", users.attr.age > 18)

    """
    return Filter(expressions=expressions)


__all__ = [
    "AttributePath",
    "ExpressionField",
    "where",
]
