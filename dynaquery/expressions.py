"""Compilation of filters and projections into DynamoDB expression strings.

DynamoDB expressions may not embed literal values, and attribute names that
collide with reserved words must be replaced too. This module generates
placeholder aliases for both:

- value aliases, ``:a``, ``:b``, ... ``:z``, ``:aa``, ``:bb``, ... (``:a0``, ``:a1``
  when an operator takes several operands), collected in ExpressionAttributeValues;
- name aliases, ``#a``, ``#b``, ..., collected in ExpressionAttributeNames.

Alias numbering depends only on position and on the offset passed in, so
filters compiled one after another with each call's ``next_offset`` never
produce the same alias twice.
"""

from collections.abc import Mapping, Sequence
from typing import Any, NamedTuple

from dynaquery.attributes import Attribute
from dynaquery.exceptions import InvalidArgumentError
from dynaquery.filters import Filter
from dynaquery.keys import AttributeValue

ALPHABET_SIZE = 26

DEFAULT_CONNECTIVE = " AND "


def _ensure_index(index: Any, argument: str) -> int:
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise InvalidArgumentError(argument=argument, value=index, expected="a non-negative integer")
    return index


def alias_base(index: int) -> str:
    """Return the alias letters for a global index.

    The letter cycles through ``a``-``z`` and is repeated once more for every
    full pass: 0 -> "a", 25 -> "z", 26 -> "aa", 27 -> "bb", 52 -> "aaa".

    Raises:
        InvalidArgumentError: If the index is negative or not an integer.

    """
    _ensure_index(index, "index")
    letter = chr(ord("a") + index % ALPHABET_SIZE)
    return letter * (1 + index // ALPHABET_SIZE)


def value_alias(index: int, position: int | None = None) -> str:
    """Return a value alias such as ``:a`` or, with a position, ``:a0``."""
    suffix = "" if position is None else str(position)
    return f":{alias_base(index)}{suffix}"


def name_alias(index: int) -> str:
    """Return a name alias such as ``#a``."""
    return f"#{alias_base(index)}"


class FilterExpressionData(NamedTuple):
    """Result of compiling a filter.

    Attributes:
        fragments: One expression fragment per filter expression, in order.
        value_aliases: Mapping of value alias to serialized operand.
        next_offset: The offset to pass when compiling the next filter of the
            same request.

    """

    fragments: list[str]
    value_aliases: dict[str, AttributeValue]
    next_offset: int

    def join(self, connective: str = DEFAULT_CONNECTIVE) -> str:
        """Combine the fragments into a single expression string."""
        return connective.join(self.fragments)


class ProjectionData(NamedTuple):
    """Result of compiling a projection.

    Attributes:
        aliases: Mapping of name alias to attribute name.
        projection: The aliases joined with commas, in input order. Empty
            when every attribute should be returned.

    """

    aliases: dict[str, str]
    projection: str


def compile_filter(
    filter: Filter,
    offset: int = 0,
    *,
    names: Mapping[str, str] | None = None,
) -> FilterExpressionData:
    """Compile a filter into expression fragments and value aliases.

    Every expression is validated before anything is emitted, so a failure
    never yields partial output.

    Args:
        filter: The filter to compile.
        offset: Global index of the filter's first expression. Pass the
            previous result's ``next_offset`` when compiling several filters
            for the same request.
        names: Optional mapping of attribute name to name alias. Mapped names
            are replaced by their alias in the fragments. Unmapped names are
            used verbatim.

    Returns:
        The fragments, value aliases and next offset.

    Raises:
        InvalidArgumentError: If filter is not a Filter or offset is not a
            non-negative integer.
        OperandCountError: If an operand does not match its operator's arity.
        SerializerNotFoundError: If an attribute's data type has no serializer.
        InvalidOperandError: If an operand cannot be serialized as its
            attribute's data type.

    Example:
        compile_filter(Filter.of(status == "active"))
        Returns FilterExpressionData(["status = :a"], {":a": {"S": "active"}}, 1).

    """
    if not isinstance(filter, Filter):
        raise InvalidArgumentError(argument="filter", value=filter, expected="a Filter")
    _ensure_index(offset, "offset")

    filter.ensure_valid()

    fragments: list[str] = []
    value_aliases: dict[str, AttributeValue] = {}

    for position, expression in enumerate(filter.expressions):
        index = position + offset
        operator_type = expression.operator_type
        operands = expression.operands()

        operand_aliases: str | list[str]
        if operator_type.takes_many:
            serializer = expression.operand_serializer()
            operand_aliases = []
            for i, operand in enumerate(operands):
                alias = value_alias(index, i)
                value_aliases[alias] = serializer.serialize(operand)
                operand_aliases.append(alias)
        elif operator_type.operand_count == 1:
            serializer = expression.operand_serializer()
            operand_aliases = value_alias(index)
            value_aliases[operand_aliases] = serializer.serialize(operands[0])
        else:
            operand_aliases = []

        name = expression.attribute.name
        if names is not None:
            name = names.get(name, name)

        fragments.append(operator_type.format(name, operand_aliases))

    return FilterExpressionData(
        fragments=fragments,
        value_aliases=value_aliases,
        next_offset=offset + len(filter.expressions),
    )


def _ensure_attributes(attributes: Any) -> Sequence[Attribute]:
    if isinstance(attributes, str | bytes) or not isinstance(attributes, Sequence):
        raise InvalidArgumentError(
            argument="attributes", value=attributes, expected="a list of Attributes"
        )
    for attribute in attributes:
        if not isinstance(attribute, Attribute):
            raise InvalidArgumentError(
                argument="attributes", value=attribute, expected="a list of Attributes"
            )
    return attributes


def compile_projection(attributes: Sequence[Attribute]) -> ProjectionData:
    """Compile the attributes to select into a ProjectionExpression.

    Name aliases always start at ``#a``, independently of any value aliases.

    Raises:
        InvalidArgumentError: If attributes is not a sequence of Attributes.

    Example:
        compile_projection([id_attribute, status_attribute])
        Returns ProjectionData({"#a": "id", "#b": "status"}, "#a,#b").

    """
    attributes = _ensure_attributes(attributes)

    aliases: dict[str, str] = {}
    for index, attribute in enumerate(attributes):
        aliases[name_alias(index)] = attribute.name

    return ProjectionData(aliases=aliases, projection=",".join(aliases))


class ExpressionBuilder:
    """Builds the expressions of a single request with shared alias maps.

    Name aliases are assigned once per distinct attribute name, in first-use
    order. Value aliases continue from one condition expression to the next.

    Example:
        builder = ExpressionBuilder()
        projection = builder.build_projection_expression([id_attribute])
        key_condition = builder.build_condition_expression(key_filter)
        filter_expression = builder.build_condition_expression(results_filter)
        names = builder.attribute_names
        values = builder.attribute_values

    """

    def __init__(self) -> None:
        self._names: dict[str, str] = {}
        self._values: dict[str, AttributeValue] = {}
        self._offset = 0

    def _name_alias(self, name: str) -> str:
        alias = self._names.get(name)
        if alias is None:
            alias = name_alias(len(self._names))
            self._names[name] = alias
        return alias

    def build_projection_expression(self, attributes: Sequence[Attribute]) -> str:
        """Return the ProjectionExpression for the attributes (empty selects all).

        Each attribute name is aliased once, so a repeated attribute is only
        projected once.
        """
        attributes = _ensure_attributes(attributes)
        return ",".join(dict.fromkeys(self._name_alias(a.name) for a in attributes))

    def build_condition_expression(
        self,
        filter: Filter,
        connective: str = DEFAULT_CONNECTIVE,
    ) -> str:
        """Compile a filter into a condition expression, using the shared aliases.

        The builder is only updated once the whole filter has compiled.
        """
        if not isinstance(filter, Filter):
            raise InvalidArgumentError(argument="filter", value=filter, expected="a Filter")
        filter.ensure_valid()

        names = dict(self._names)
        for attribute in filter.attributes:
            if attribute.name not in names:
                names[attribute.name] = name_alias(len(names))
        data = compile_filter(filter, self._offset, names=names)

        self._names = names
        self._offset = data.next_offset
        self._values.update(data.value_aliases)

        return data.join(connective)

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def attribute_names(self) -> dict[str, str]:
        """ExpressionAttributeNames: name alias to attribute name."""
        return {alias: name for name, alias in self._names.items()}

    @property
    def attribute_values(self) -> dict[str, AttributeValue]:
        """ExpressionAttributeValues: value alias to serialized operand."""
        return dict(self._values)


__all__ = [
    "ExpressionBuilder",
    "FilterExpressionData",
    "ProjectionData",
    "alias_base",
    "compile_filter",
    "compile_projection",
    "name_alias",
    "value_alias",
]
