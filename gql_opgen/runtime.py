"""Runtime support for generated operation modules.

Generated classes are thin typed views over a ``Snapshot``: the plain dict
shape of a GraphQL response object. Every view keeps a reference to its
snapshot, so nested views read and write the same underlying data:

    data = HeroQuery.Data(response["data"])
    data.hero.name = "Luke"
    assert response["data"]["hero"]["name"] == "Luke"

Selection descriptors (GraphQLField and friends) describe what a class
selects so a response can be read or normalized without parsing the
operation again.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

Snapshot = Dict[str, Any]
GraphQLMap = Dict[str, Any]
GraphQLID = str


@dataclass(frozen=True)
class GraphQLVariable:
    """Argument value bound to an operation variable."""
    name: str


class OutputKind(str, Enum):
    SCALAR = "scalar"
    OBJECT = "object"
    LIST = "list"
    NON_NULL = "non_null"


@dataclass
class OutputType:
    """Type tag of a selected field.

    ``of_type`` is the Python type for scalars, the selection list for
    objects and the wrapped OutputType for lists and non-null types.
    """
    kind: OutputKind
    of_type: Any = None

    @classmethod
    def scalar(cls, type_: Any) -> "OutputType":
        return cls(OutputKind.SCALAR, type_)

    @classmethod
    def object(cls, selections: "List[GraphQLSelection]") -> "OutputType":
        return cls(OutputKind.OBJECT, selections)

    @classmethod
    def list(cls, of_type: "OutputType") -> "OutputType":
        return cls(OutputKind.LIST, of_type)

    @classmethod
    def non_null(cls, of_type: "OutputType") -> "OutputType":
        return cls(OutputKind.NON_NULL, of_type)

    @property
    def named_type(self) -> "OutputType":
        """The innermost scalar or object tag."""
        type_ = self
        while type_.kind in (OutputKind.LIST, OutputKind.NON_NULL):
            type_ = type_.of_type
        return type_


@dataclass
class GraphQLField:
    """A field selection; ``arguments`` may contain GraphQLVariable values."""
    name: str
    type: OutputType
    alias: Optional[str] = None
    arguments: Dict[str, Any] = field(default_factory=dict)

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass
class GraphQLFragmentSpread:
    """Selections of another generated class: a fragment or a type condition."""
    fragment: type


@dataclass
class GraphQLBooleanCondition:
    """Selections included only when a variable is true, or false if inverted."""
    variable_name: str
    inverted: bool
    selections: "List[GraphQLSelection]"


GraphQLSelection = Union[GraphQLField, GraphQLFragmentSpread, GraphQLBooleanCondition]


class SnapshotContainer:
    """Base for every generated view over a snapshot."""

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot

    def replace_snapshot(self, snapshot: Snapshot) -> None:
        """Replace the snapshot contents in place.

        Other views sharing the same dict see the new contents.
        """
        if snapshot is self.snapshot:
            return
        contents = dict(snapshot)
        self.snapshot.clear()
        self.snapshot.update(contents)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.snapshot == other.snapshot

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}({self.snapshot!r})"


class GraphQLSelectionSet(SnapshotContainer):
    """Base for classes generated from a selection set."""

    possible_types: ClassVar[List[str]] = []

    @classmethod
    def selections(cls) -> List[GraphQLSelection]:
        return []

    @property
    def typename(self) -> Optional[str]:
        return self.snapshot.get("__typename")


class GraphQLFragment(GraphQLSelectionSet):
    """Base for classes generated from a named fragment."""

    fragment_string: ClassVar[str] = ""


class GraphQLMapConvertible:
    """Base for generated input objects; values live in ``graphql_map``."""

    graphql_map: GraphQLMap

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.graphql_map == other.graphql_map

    def __repr__(self) -> str:
        return f"{type(self).__qualname__}({self.graphql_map!r})"


class GraphQLOperation:
    """Base for generated operation classes."""

    operation_name: ClassVar[str] = ""
    operation_string: ClassVar[str] = ""
    operation_identifier: ClassVar[Optional[str]] = None

    @classmethod
    def request_string(cls) -> str:
        """The operation source followed by every fragment it references."""
        return cls.operation_string

    @property
    def variables(self) -> Optional[GraphQLMap]:
        return None

    def request_body(self) -> Dict[str, Any]:
        """Build the JSON body of a GraphQL-over-HTTP request."""
        body: Dict[str, Any] = {
            "operationName": self.operation_name,
            "query": self.request_string(),
        }
        variables = serialize_variables(self.variables or {})
        if variables:
            body["variables"] = variables
        return body


class GraphQLQuery(GraphQLOperation):
    pass


class GraphQLMutation(GraphQLOperation):
    pass


def serialize_variables(variables: GraphQLMap) -> GraphQLMap:
    """Convert variables to JSON-ready values.

    Enums become their wire strings and input objects their maps. Entries
    whose value is None are left out, at the top level and inside input
    objects.
    """
    result = {}
    for key, value in variables.items():
        if value is None:
            continue  # Skip None values
        result[key] = _serialize_value(value)
    return result


def _serialize_value(value: Any) -> Any:
    if isinstance(value, GraphQLMapConvertible):
        return serialize_variables(value.graphql_map)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_serialize_value(item) for item in value]
    return value
