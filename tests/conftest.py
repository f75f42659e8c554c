"""Shared fixtures: a Star Wars style schema and helpers to compile against it."""

import types

import pytest
from graphql import build_schema, parse

from gql_opgen.core.generator import generate_source
from gql_opgen.core.loader import compile_to_ir
from gql_opgen.core.options import Options

SCHEMA_SDL = '''
schema {
  query: Query
  mutation: Mutation
  subscription: Subscription
}

scalar DateTime

"The episodes in the Star Wars trilogy"
enum Episode {
  "Star Wars Episode IV: A New Hope, released in 1977."
  NEWHOPE
  EMPIRE
  JEDI
}

enum LengthUnit {
  METER
  FOOT
}

interface Character {
  id: ID!
  name: String!
  friends: [Character]
  appearsIn: [Episode]!
}

type Human implements Character {
  id: ID!
  name: String!
  friends: [Character]
  appearsIn: [Episode]!
  "Height in the preferred unit, default is meters"
  height(unit: LengthUnit = METER): Float
  starships: [Starship!]
}

type Droid implements Character {
  id: ID!
  name: String!
  friends: [Character]
  appearsIn: [Episode]!
  primaryFunction: String
}

type Starship {
  id: ID!
  name: String!
  coordinates: [[Float!]!]
}

interface Pet {
  name: String!
}

type Dog implements Pet {
  name: String!
  barkVolume: Int
}

type Cat implements Pet {
  name: String!
  meowVolume: Int
}

union SearchResult = Human | Droid | Starship

type Review {
  stars: Int!
  commentary: String
  createdAt: DateTime
}

input ColorInput {
  red: Int!
  green: Int!
  blue: Int!
}

"The input object sent when someone is creating a new review"
input ReviewInput {
  stars: Int!
  commentary: String
  favoriteColor: ColorInput
}

type Query {
  hero(episode: Episode): Character
  human(id: ID!): Human
  pets: [Pet!]!
  search(text: String): [SearchResult]
  reviews(episode: Episode!): [Review]
  greetings: [String!]
}

type Mutation {
  createReview(episode: Episode, review: ReviewInput!): Review
}

type Subscription {
  reviewAdded(episode: Episode): Review
}
'''


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def schema_sdl():
    return SCHEMA_SDL


@pytest.fixture(scope="session")
def schema():
    """The shared test schema."""
    return build_schema(SCHEMA_SDL)


@pytest.fixture
def compile_document(schema):
    """Compile a document string to a CompilerContext."""

    def _compile(source: str, **options):
        return compile_to_ir(schema, parse(source), Options(**options))

    return _compile


@pytest.fixture
def generate(compile_document):
    """Generate module source for a document string."""

    def _generate(source: str, **options) -> str:
        return generate_source(compile_document(source, **options))

    return _generate


@pytest.fixture
def load_module(generate):
    """Generate a module for a document string and import it."""

    def _load(source: str, **options) -> types.ModuleType:
        code = generate(source, **options)
        module = types.ModuleType("generated_api")
        exec(compile(code, "generated_api.py", "exec"), module.__dict__)
        return module

    return _load
