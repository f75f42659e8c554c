"""Intermediate Representation (IR) for GraphQL operations and fragments.

This module defines dataclasses that represent fully resolved GraphQL
documents: operations and fragments with their selection sets, already
checked against a schema. Types are graphql-core type objects so the
generator can inspect List/NonNull wrapping exactly.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from graphql import (
    GraphQLCompositeType,
    GraphQLError,
    GraphQLInputType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLSchema,
)

from .options import Options


@dataclass(frozen=True)
class VariableReference:
    """An argument value that refers to an operation variable."""
    variable_name: str


@dataclass
class Argument:
    """A field argument; value is a plain Python value or a VariableReference."""
    name: str
    value: Any


@dataclass
class Field:
    """A field selection."""
    response_key: str
    name: str
    type: GraphQLOutputType
    alias: str | None = None
    args: list[Argument] = field(default_factory=list)
    description: str | None = None
    # Present iff the field's named type is composite
    selection_set: "SelectionSet | None" = None
    # Set while building a type case for fields under @include/@skip
    is_conditional: bool = False


@dataclass
class TypeCondition:
    """A selection scoped to a narrower type (inline fragment or merged spread)."""
    type: GraphQLCompositeType
    selection_set: "SelectionSet"


@dataclass
class FragmentSpread:
    """A reference to a named fragment."""
    fragment_name: str


@dataclass
class BooleanCondition:
    """Selections included only when a variable is true (or false if inverted)."""
    variable_name: str
    inverted: bool
    selection_set: "SelectionSet"


Selection = Union[Field, TypeCondition, FragmentSpread, BooleanCondition]


@dataclass
class SelectionSet:
    """Ordered selections plus the concrete types they can apply to."""
    possible_types: list[GraphQLObjectType]
    selections: list[Selection] = field(default_factory=list)


@dataclass
class Variable:
    """An operation variable definition."""
    name: str
    type: GraphQLInputType


@dataclass
class Operation:
    """Represents a named GraphQL query or mutation."""
    operation_name: str
    operation_type: str  # 'query', 'mutation' or 'subscription'
    variables: list[Variable]
    source: str
    selection_set: SelectionSet
    root_type: GraphQLObjectType | None = None


@dataclass
class Fragment:
    """Represents a named fragment definition."""
    fragment_name: str
    type_condition: GraphQLCompositeType
    possible_types: list[GraphQLObjectType]
    selection_set: SelectionSet
    source: str


@dataclass
class CompilerContext:
    """Complete IR for one generation run."""
    schema: GraphQLSchema
    operations: dict[str, Operation] = field(default_factory=dict)
    fragments: dict[str, Fragment] = field(default_factory=dict)
    # Enums, input objects and custom scalars referenced, in first-use order
    types_used: list[GraphQLNamedType] = field(default_factory=list)
    options: Options = field(default_factory=Options)

    def fragment_named(self, fragment_name: str) -> Fragment:
        """Look up a fragment by name."""
        fragment = self.fragments.get(fragment_name)
        if fragment is None:
            raise GraphQLError(f'Cannot find fragment "{fragment_name}"')
        return fragment
