"""Tests for the runtime support classes used by generated modules."""

from enum import Enum

from gql_opgen.runtime import (
    GraphQLField,
    GraphQLMapConvertible,
    GraphQLQuery,
    GraphQLSelectionSet,
    OutputKind,
    OutputType,
    SnapshotContainer,
    serialize_variables,
)


class Color(str, Enum):
    RED = "RED"
    BLUE = "BLUE"


class PointInput(GraphQLMapConvertible):
    def __init__(self, *, x, y=None, color=None):
        self.graphql_map = {"x": x, "y": y, "color": color}


class Hero(GraphQLSelectionSet):
    possible_types = ["Human", "Droid"]


class HeroQuery(GraphQLQuery):
    operation_name = "Hero"
    operation_string = "query Hero { hero { name } }"

    def __init__(self, *, episode=None):
        self.episode = episode

    @property
    def variables(self):
        return {"episode": self.episode}


# =============================================================================
# Tests: Snapshot Containers
# =============================================================================


class TestSnapshotContainer:
    """Tests for snapshot views."""

    def test_replace_snapshot_in_place(self):
        snapshot = {"__typename": "Human", "name": "Luke"}
        other_view = Hero(snapshot)
        hero = Hero(snapshot)

        hero.replace_snapshot({"__typename": "Droid", "name": "R2-D2"})
        assert hero.snapshot is snapshot
        assert other_view.typename == "Droid"
        assert snapshot == {"__typename": "Droid", "name": "R2-D2"}

    def test_replace_with_same_snapshot(self):
        snapshot = {"__typename": "Human", "name": "Luke"}
        hero = Hero(snapshot)
        hero.replace_snapshot(snapshot)
        assert snapshot == {"__typename": "Human", "name": "Luke"}

    def test_equality(self):
        assert Hero({"name": "Luke"}) == Hero({"name": "Luke"})
        assert Hero({"name": "Luke"}) != Hero({"name": "Leia"})
        assert Hero({"name": "Luke"}) != SnapshotContainer({"name": "Luke"})

    def test_repr(self):
        assert repr(Hero({"name": "Luke"})) == "Hero({'name': 'Luke'})"

    def test_typename_missing(self):
        assert Hero({}).typename is None

    def test_default_selections(self):
        assert GraphQLSelectionSet.selections() == []


# =============================================================================
# Tests: Selection Descriptors
# =============================================================================


class TestDescriptors:
    """Tests for field descriptors and type tags."""

    def test_response_key(self):
        assert GraphQLField("name", OutputType.scalar(str)).response_key == "name"
        assert GraphQLField("name", OutputType.scalar(str), alias="heroName").response_key == "heroName"

    def test_named_type_unwraps(self):
        type_ = OutputType.non_null(OutputType.list(OutputType.non_null(OutputType.scalar(float))))
        assert type_.kind == OutputKind.NON_NULL
        assert type_.named_type == OutputType.scalar(float)

    def test_object_tag(self):
        selections = [GraphQLField("name", OutputType.scalar(str))]
        assert OutputType.object(selections).of_type is selections


# =============================================================================
# Tests: Operations and Variables
# =============================================================================


class TestOperations:
    """Tests for request bodies and variable serialization."""

    def test_serialize_drops_none(self):
        assert serialize_variables({"a": 1, "b": None}) == {"a": 1}

    def test_serialize_input_objects_and_enums(self):
        variables = {
            "points": [PointInput(x=1, color=Color.RED), PointInput(x=2, y=3)],
            "color": Color.BLUE,
        }
        assert serialize_variables(variables) == {
            "points": [{"x": 1, "color": "RED"}, {"x": 2, "y": 3}],
            "color": "BLUE",
        }

    def test_input_object_equality(self):
        assert PointInput(x=1) == PointInput(x=1)
        assert PointInput(x=1) != PointInput(x=2)
        assert repr(PointInput(x=1)) == "PointInput({'x': 1, 'y': None, 'color': None})"

    def test_request_body(self):
        body = HeroQuery(episode=Color.RED).request_body()
        assert body == {
            "operationName": "Hero",
            "query": "query Hero { hero { name } }",
            "variables": {"episode": "RED"},
        }

    def test_request_body_without_variables(self):
        body = HeroQuery().request_body()
        assert body == {"operationName": "Hero", "query": "query Hero { hero { name } }"}

    def test_default_request_string(self):
        assert HeroQuery.request_string() == HeroQuery.operation_string
        assert HeroQuery.operation_identifier is None
