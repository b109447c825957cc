"""Filter expressions: attribute/operator/operand triples combined with AND."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from typing_extensions import Self

from dynaquery.attributes import Attribute
from dynaquery.data_types import DataType
from dynaquery.exceptions import OperandCountError
from dynaquery.operators import OperatorType
from dynaquery.serializers import AttributeSerializer, serializer_for


class Expression(BaseModel):
    """A single condition on an attribute.

    The operand must match the operator's arity: None for operators without
    operands, a single value for one-operand operators, and a list or tuple
    for BETWEEN and IN.

    Example:
        Expression(
            attribute=Attribute(name="status", data_type=DataType.STRING),
            operator_type=OperatorType.EQUALS,
            operand="active",
        )

    """

    model_config = ConfigDict(frozen=True)

    attribute: Attribute
    operator_type: OperatorType
    operand: Any = None

    def operands(self) -> tuple[Any, ...]:
        """The operand values as a tuple (empty for operators without operands)."""
        if self.operator_type.takes_many:
            return tuple(self.operand)
        if self.operator_type.operand_count == 0:
            return ()
        return (self.operand,)

    def operand_data_type(self) -> DataType:
        """The data type operands are serialized as.

        CONTAINS on a set attribute tests for a single element, so the element
        type is used instead of the set type.
        """
        data_type = self.attribute.data_type
        if self.operator_type is OperatorType.CONTAINS and data_type.element_type is not None:
            return data_type.element_type
        return data_type

    def operand_serializer(self) -> AttributeSerializer:
        """Return the serializer for this expression's operands.

        Raises:
            SerializerNotFoundError: If the operand data type has no serializer.

        """
        return serializer_for(self.operand_data_type())

    def ensure_valid(self) -> None:
        """Raise a ValidationError if the expression cannot be compiled.

        Raises:
            OperandCountError: If the operand does not match the operator's arity.
            SerializerNotFoundError: If an operand is required but its data
                type has no serializer.

        """
        operator_type = self.operator_type
        if not operator_type.accepts(self.operand):
            raise OperandCountError(
                operator=operator_type.name,
                expected=operator_type.expected_operands,
                operand=self.operand,
            )
        if operator_type.operand_count > 0:
            self.operand_serializer()


class Filter(BaseModel):
    """An ordered sequence of expressions, combined with logical AND.

    Order only affects alias numbering, not evaluation.

    Example:
        Filter.of(
            Expression(attribute=status, operator_type=OperatorType.EQUALS, operand="active"),
            Expression(attribute=age, operator_type=OperatorType.GREATER_THAN, operand=18),
        )

    """

    model_config = ConfigDict(frozen=True)

    expressions: tuple[Expression, ...] = ()

    @classmethod
    def of(cls, *expressions: Expression) -> Self:
        return cls(expressions=expressions)

    @property
    def attributes(self) -> list[Attribute]:
        """The attributes referenced by the expressions, in expression order."""
        return [e.attribute for e in self.expressions]

    @property
    def is_empty(self) -> bool:
        return not self.expressions

    def ensure_valid(self) -> None:
        """Validate every expression. See Expression.ensure_valid."""
        for expression in self.expressions:
            expression.ensure_valid()

    def __and__(self, other: "Filter | Expression") -> "Filter":
        if isinstance(other, Expression):
            return Filter(expressions=(*self.expressions, other))
        if isinstance(other, Filter):
            return Filter(expressions=(*self.expressions, *other.expressions))
        return NotImplemented


__all__ = [
    "Expression",
    "Filter",
]
