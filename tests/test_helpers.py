"""Unit tests for type mapping and naming rules."""

import pytest
from graphql import (
    GraphQLError,
    GraphQLFloat,
    GraphQLID,
    GraphQLList,
    GraphQLNonNull,
    GraphQLString,
)

from gql_opgen.core.helpers import Helpers
from gql_opgen.core.ir import Argument, Field, FragmentSpread, Variable, VariableReference
from gql_opgen.core.options import Options


@pytest.fixture
def helpers():
    return Helpers(Options())


# =============================================================================
# Tests: Type Names
# =============================================================================


class TestTypeNameFromGraphQLType:
    """Tests for Python type expressions of GraphQL types."""

    def test_nullable_scalar(self, helpers):
        assert helpers.type_name_from_graphql_type(GraphQLString) == "Optional[str]"

    def test_non_null_scalar(self, helpers):
        assert helpers.type_name_from_graphql_type(GraphQLNonNull(GraphQLString)) == "str"

    def test_id(self, helpers):
        assert helpers.type_name_from_graphql_type(GraphQLNonNull(GraphQLID)) == "GraphQLID"

    def test_optional_list_of_non_null(self, helpers):
        type_ = GraphQLList(GraphQLNonNull(GraphQLString))
        assert helpers.type_name_from_graphql_type(type_) == "Optional[List[str]]"

    def test_non_null_list_of_optional(self, helpers):
        type_ = GraphQLNonNull(GraphQLList(GraphQLString))
        assert helpers.type_name_from_graphql_type(type_) == "List[Optional[str]]"

    def test_nested_lists(self, helpers):
        type_ = GraphQLList(GraphQLNonNull(GraphQLList(GraphQLNonNull(GraphQLFloat))))
        assert helpers.type_name_from_graphql_type(type_) == "Optional[List[List[float]]]"

    def test_enum(self, helpers, schema):
        assert helpers.type_name_from_graphql_type(schema.get_type("Episode")) == "Optional[Episode]"

    def test_enum_in_namespace(self, schema):
        helpers = Helpers(Options(namespace="API"))
        episode = GraphQLNonNull(schema.get_type("Episode"))
        assert helpers.type_name_from_graphql_type(episode) == "API.Episode"

    def test_input_object(self, helpers, schema):
        review = GraphQLNonNull(schema.get_type("ReviewInput"))
        assert helpers.type_name_from_graphql_type(review) == "ReviewInput"

    def test_composite_uses_nested_class_name(self, helpers, schema):
        friends = GraphQLList(schema.get_type("Character"))
        assert (
            helpers.type_name_from_graphql_type(friends, "HeroQuery.Data.Hero.Friend")
            == "Optional[List[Optional[HeroQuery.Data.Hero.Friend]]]"
        )

    def test_composite_storage_form(self, helpers, schema):
        pets = GraphQLNonNull(GraphQLList(GraphQLNonNull(schema.get_type("Pet"))))
        assert helpers.type_name_from_graphql_type(pets, "Snapshot") == "List[Snapshot]"

    def test_custom_scalar_as_str(self, helpers, schema):
        assert helpers.type_name_from_graphql_type(schema.get_type("DateTime")) == "Optional[str]"

    def test_custom_scalar_passthrough(self, schema):
        helpers = Helpers(Options(passthrough_custom_scalars=True, custom_scalars_prefix="Custom"))
        assert helpers.type_name_from_graphql_type(schema.get_type("DateTime")) == "Optional[CustomDateTime]"


class TestFieldTypeEnum:
    """Tests for runtime type tags in selection descriptors."""

    def test_non_null_scalar(self, helpers):
        assert (
            helpers.field_type_enum(GraphQLNonNull(GraphQLString), None)
            == "OutputType.non_null(OutputType.scalar(str))"
        )

    def test_list_of_objects(self, helpers, schema):
        friends = GraphQLList(schema.get_type("Character"))
        assert (
            helpers.field_type_enum(friends, "cls.Friend")
            == "OutputType.list(OutputType.object(cls.Friend.selections()))"
        )

    def test_enum(self, helpers, schema):
        assert helpers.field_type_enum(schema.get_type("Episode"), None) == "OutputType.scalar(Episode)"

    def test_unknown_type(self, helpers, schema):
        with pytest.raises(GraphQLError, match="Unknown field type"):
            helpers.field_type_enum(schema.get_type("ReviewInput"), None)


# =============================================================================
# Tests: Names
# =============================================================================


class TestNames:
    """Tests for identifiers derived from GraphQL names."""

    def test_property_name_snake_case(self, helpers):
        assert helpers.property_name("appearsIn") == "appears_in"

    def test_property_name_keyword(self, helpers):
        assert helpers.property_name("from") == "from_"

    def test_property_name_reserved_attribute(self, helpers):
        assert helpers.property_name("snapshot") == "snapshot_"
        assert helpers.property_name("fragments") == "fragments_"
        assert helpers.property_name("self") == "self_"

    def test_property_name_meta_field(self, helpers):
        assert helpers.property_name("__schema") == "schema"
        assert helpers.property_name("__typename") == "typename_"

    def test_property_name_avoids_taken_names(self, helpers):
        assert helpers.property_name("asDog", reserved=["as_dog"]) == "as_dog_"
        assert helpers.property_name("asCat", reserved=["as_dog"]) == "as_cat"

    def test_struct_names(self, helpers):
        assert helpers.struct_name_for_property_name("friends") == "Friend"
        assert helpers.struct_name_for_property_name("allPeople") == "AllPerson"
        assert helpers.struct_name_for_type_condition("Droid") == "AsDroid"
        assert helpers.struct_name_for_fragment_name("heroDetails") == "HeroDetails"
        assert helpers.operation_class_name("heroName") == "HeroName"

    def test_enum_case_name(self, helpers):
        assert helpers.enum_case_name("NEWHOPE") == "NEWHOPE"
        assert helpers.enum_case_name("newHope") == "NEW_HOPE"

    def test_qualified_type_name(self):
        assert Helpers(Options()).qualified_type_name("Episode") == "Episode"
        assert Helpers(Options(namespace="API")).qualified_type_name("Episode") == "API.Episode"

    def test_unique_struct_names_suffixes_collisions(self, helpers):
        names = helpers.unique_struct_names(["friends", "friend", "hero"])
        assert names == {"friends": "Friend", "friend": "Friend2", "hero": "Hero"}

    def test_unique_struct_names_avoids_reserved(self, helpers):
        names = helpers.unique_struct_names(["fragments", "asDroid"], reserved=["Fragment", "AsDroid"])
        assert names == {"fragments": "Fragment2", "asDroid": "AsDroid2"}


# =============================================================================
# Tests: Properties
# =============================================================================


class TestProperties:
    """Tests for Property models."""

    def test_property_from_scalar_field(self, helpers):
        field = Field(response_key="name", name="name", type=GraphQLNonNull(GraphQLString))
        prop = helpers.property_from_field(field)
        assert prop.property_name == "name"
        assert prop.type_name == "str"
        assert not prop.is_optional
        assert prop.struct_name is None

    def test_conditional_non_null_field_is_optional(self, helpers):
        field = Field(
            response_key="name",
            name="name",
            type=GraphQLNonNull(GraphQLString),
            is_conditional=True,
        )
        prop = helpers.property_from_field(field)
        assert prop.is_optional
        assert prop.type_name == "Optional[str]"

    def test_property_from_composite_field(self, helpers, schema):
        field = Field(response_key="friends", name="friends", type=GraphQLList(schema.get_type("Character")))
        prop = helpers.property_from_field(field, "HeroQuery.Data.Hero")
        assert prop.struct_name == "HeroQuery.Data.Hero.Friend"
        assert prop.is_composite
        assert prop.type_name == "Optional[List[Optional[HeroQuery.Data.Hero.Friend]]]"

    def test_property_from_field_with_explicit_struct_name(self, helpers, schema):
        field = Field(response_key="friend", name="friends", type=schema.get_type("Character"))
        prop = helpers.property_from_field(field, "Q.Data", "Friend2")
        assert prop.struct_name == "Q.Data.Friend2"

    def test_property_from_field_avoids_reserved(self, helpers):
        field = Field(response_key="asDroid", name="name", type=GraphQLNonNull(GraphQLString), alias="asDroid")
        prop = helpers.property_from_field(field, reserved=["as_droid"])
        assert prop.property_name == "as_droid_"
        assert prop.name == "asDroid"

    def test_property_from_fragment_spread(self, helpers):
        prop = helpers.property_from_fragment_spread(FragmentSpread("heroDetails"), is_conditional=True)
        assert prop.property_name == "hero_details"
        assert prop.type_name == "Optional[HeroDetails]"

    def test_variable_optionality(self, helpers):
        optional = helpers.property_from_variable(Variable("episode", GraphQLString))
        required = helpers.property_from_variable(Variable("id", GraphQLNonNull(GraphQLID)))
        list_of_non_null = helpers.property_from_variable(
            Variable("ids", GraphQLList(GraphQLNonNull(GraphQLID)))
        )
        assert optional.is_optional
        assert not required.is_optional
        assert not list_of_non_null.is_optional

    def test_variable_avoids_operation_attributes(self, helpers):
        prop = helpers.property_from_variable(Variable("variables", GraphQLString))
        assert prop.property_name == "variables_"
        assert prop.name == "variables"


# =============================================================================
# Tests: Expressions
# =============================================================================


class TestExpressions:
    """Tests for argument literals and element-wise mapping."""

    def test_arguments_keep_order(self, helpers):
        args = [
            Argument("episode", VariableReference("episode")),
            Argument("first", 10),
            Argument("unit", "FOOT"),
        ]
        assert (
            helpers.dictionary_literal_for_field_arguments(args)
            == '{"episode": GraphQLVariable("episode"), "first": 10, "unit": "FOOT"}'
        )

    def test_nested_argument_values(self, helpers):
        args = [Argument("filter", {"tags": ["a", VariableReference("tag")], "active": True, "limit": None})]
        assert (
            helpers.dictionary_literal_for_field_arguments(args)
            == '{"filter": {"tags": ["a", GraphQLVariable("tag")], "active": True, "limit": None}}'
        )

    def test_unsupported_argument_value(self, helpers):
        with pytest.raises(GraphQLError):
            helpers.expression_from_value(object())

    def test_map_non_null(self, helpers, schema):
        type_ = GraphQLNonNull(schema.get_type("Character"))
        assert helpers.map_expression_for_type(type_, "Hero({})", "value") == "Hero(value)"

    def test_map_optional(self, helpers, schema):
        type_ = schema.get_type("Character")
        assert helpers.map_expression_for_type(type_, "Hero({})", "value") == "None if value is None else Hero(value)"

    def test_map_optional_list_of_non_null(self, helpers, schema):
        type_ = GraphQLList(GraphQLNonNull(schema.get_type("Character")))
        assert (
            helpers.map_expression_for_type(type_, "Hero({})", "value")
            == "None if value is None else [Hero(item0) for item0 in value]"
        )

    def test_map_non_null_list_of_optional(self, helpers, schema):
        type_ = GraphQLNonNull(GraphQLList(schema.get_type("Character")))
        assert (
            helpers.map_expression_for_type(type_, "{}.snapshot", "new_value")
            == "[None if item0 is None else item0.snapshot for item0 in new_value]"
        )

    def test_map_nested_lists(self, helpers, schema):
        type_ = GraphQLList(GraphQLList(schema.get_type("Character")))
        expression = helpers.map_expression_for_type(type_, "X({})", "v")
        assert expression == (
            "None if v is None else "
            "[None if item0 is None else [None if item1 is None else X(item1) for item1 in item0] for item0 in v]"
        )
