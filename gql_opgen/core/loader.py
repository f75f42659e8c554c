"""Schema and document loading using graphql-core.

Reads a schema (SDL files or an introspection result) and operation
documents, validates the documents against the schema and compiles them to
the IR consumed by the generator.
"""

import json
import os
from typing import Any

from graphql import (
    BooleanValueNode,
    DocumentNode,
    EnumValueNode,
    FieldNode,
    FloatValueNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLCompositeType,
    GraphQLError,
    GraphQLField,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    InlineFragmentNode,
    IntValueNode,
    ListValueNode,
    NameNode,
    NoUnusedFragmentsRule,
    NullValueNode,
    ObjectValueNode,
    OperationDefinitionNode,
    SchemaMetaFieldDef,
    SelectionSetNode,
    Source,
    StringValueNode,
    TypeMetaFieldDef,
    TypeNameMetaFieldDef,
    ValueNode,
    VariableNode,
    Visitor,
    build_ast_schema,
    build_client_schema,
    concat_ast,
    get_named_type,
    is_abstract_type,
    is_composite_type,
    is_enum_type,
    is_input_object_type,
    is_object_type,
    is_interface_type,
    is_scalar_type,
    is_specified_scalar_type,
    parse,
    print_ast,
    specified_rules,
    type_from_ast,
    validate,
    visit,
)

from .ir import (
    Argument,
    BooleanCondition,
    CompilerContext,
    Field,
    Fragment,
    FragmentSpread,
    Operation,
    Selection,
    SelectionSet,
    TypeCondition,
    Variable,
    VariableReference,
)
from .options import Options

SCHEMA_EXTENSIONS = (".graphql", ".graphqls")
DOCUMENT_EXTENSIONS = (".graphql", ".gql")

# Fragments may be declared in one document and used from another
VALIDATION_RULES = [rule for rule in specified_rules if rule is not NoUnusedFragmentsRule]


def collect_graphql_files(path: str, extensions: tuple[str, ...]) -> list[str]:
    """Collect files with the given extensions from a file or directory path."""
    files = []
    if os.path.isfile(path):
        files.append(path)
    else:
        for root, _, filenames in os.walk(path):
            for filename in filenames:
                if filename.endswith(extensions):
                    files.append(os.path.join(root, filename))
    return sorted(files)


def load_schema(path: str) -> GraphQLSchema:
    """Build a schema from SDL files or an introspection JSON file.

    ``path`` is a single file or a directory searched recursively for
    ``.graphql`` and ``.graphqls`` files, which are combined in sorted order.
    """
    if os.path.isfile(path) and path.endswith(".json"):
        with open(path) as f:
            introspection = json.load(f)
        # Accept both a bare introspection result and a full response
        return build_client_schema(introspection.get("data", introspection))

    files = collect_graphql_files(path, SCHEMA_EXTENSIONS)
    if not files:
        raise GraphQLError(f"No schema files found at {path}")
    return build_ast_schema(concat_ast([_parse_file(file_path) for file_path in files]))


def load_documents(paths: list[str]) -> DocumentNode:
    """Parse and combine every operation document found under ``paths``."""
    files = []
    for path in paths:
        files.extend(collect_graphql_files(path, DOCUMENT_EXTENSIONS))
    if not files:
        raise GraphQLError(f"No GraphQL documents found in {', '.join(paths)}")
    return concat_ast([_parse_file(file_path) for file_path in files])


def _parse_file(file_path: str) -> DocumentNode:
    with open(file_path) as f:
        return parse(Source(f.read(), file_path))


def compile_to_ir(
    schema: GraphQLSchema, document: DocumentNode, options: Options | None = None
) -> CompilerContext:
    """Validate a document against a schema and compile it to the IR.

    Raises:
        GraphQLError: if the document is invalid or uses unsupported constructs
    """
    options = options or Options()

    errors = validate(schema, document, VALIDATION_RULES)
    if errors:
        raise GraphQLError(
            "Validation of GraphQL documents failed:\n" + "\n".join(str(e) for e in errors)
        )

    if options.add_typename:
        document = add_typename_to_document(document)

    return DocumentCompiler(schema, options).compile(document)


# ==========================================================================
# __typename insertion
# ==========================================================================

TYPENAME_FIELD = FieldNode(
    alias=None,
    name=NameNode(value="__typename"),
    arguments=(),
    directives=(),
    selection_set=None,
)


def _is_typename_field(node: Any) -> bool:
    return isinstance(node, FieldNode) and node.alias is None and node.name.value == "__typename"


class TypenameAdder(Visitor):
    """Put ``__typename`` first in every field and fragment selection set.

    Selection sets of operations and inline fragments are left as written.
    """

    def enter_selection_set(self, node, _key, parent, *_args):
        if not isinstance(parent, (FieldNode, FragmentDefinitionNode)):
            return None
        selections = tuple(s for s in node.selections if not _is_typename_field(s))
        if len(selections) == len(node.selections):
            return None
        return SelectionSetNode(selections=selections)

    def leave_field(self, node, *_args):
        return self._with_typename(node)

    def leave_fragment_definition(self, node, *_args):
        return self._with_typename(node)

    @staticmethod
    def _with_typename(node):
        if node.selection_set is None:
            return None
        # AST nodes may be frozen, so build a new one
        attributes = {key: getattr(node, key) for key in node.keys if key != "selection_set"}
        return node.__class__(
            **attributes,
            selection_set=SelectionSetNode(
                selections=(TYPENAME_FIELD, *node.selection_set.selections)
            ),
        )


def add_typename_to_document(document: DocumentNode) -> DocumentNode:
    return visit(document, TypenameAdder())


# ==========================================================================
# Compilation
# ==========================================================================


class DocumentCompiler:
    """Compiles validated operation and fragment definitions to IR."""

    def __init__(self, schema: GraphQLSchema, options: Options):
        self.schema = schema
        self.options = options
        # Insertion ordered, so first use decides declaration order
        self.types_used: dict[str, GraphQLNamedType] = {}

    def compile(self, document: DocumentNode) -> CompilerContext:
        operations: dict[str, Operation] = {}
        fragments: dict[str, Fragment] = {}

        for definition in document.definitions:
            if isinstance(definition, OperationDefinitionNode):
                operation = self.compile_operation(definition)
                operations[operation.operation_name] = operation
            elif isinstance(definition, FragmentDefinitionNode):
                fragment = self.compile_fragment(definition)
                fragments[fragment.fragment_name] = fragment

        return CompilerContext(
            schema=self.schema,
            operations=operations,
            fragments=fragments,
            types_used=list(self.types_used.values()),
            options=self.options,
        )

    def compile_operation(self, node: OperationDefinitionNode) -> Operation:
        if node.name is None:
            raise GraphQLError("Operations must be named", node)

        operation_type = node.operation.value
        root_type = {
            "query": self.schema.query_type,
            "mutation": self.schema.mutation_type,
            "subscription": self.schema.subscription_type,
        }[operation_type]
        if root_type is None:
            raise GraphQLError(f"Schema is not configured for {operation_type} operations", node)

        variables = []
        for definition in node.variable_definitions or ():
            type_ = type_from_ast(self.schema, definition.type)
            if type_ is None:
                raise GraphQLError(f'Unknown type "{print_ast(definition.type)}"', definition)
            self.add_type_used(get_named_type(type_))
            variables.append(Variable(definition.variable.name.value, type_))

        return Operation(
            operation_name=node.name.value,
            operation_type=operation_type,
            variables=variables,
            source=print_ast(node),
            selection_set=self.compile_selection_set(node.selection_set, root_type),
            root_type=root_type,
        )

    def compile_fragment(self, node: FragmentDefinitionNode) -> Fragment:
        type_condition = self.schema.get_type(node.type_condition.name.value)
        if not is_composite_type(type_condition):
            raise GraphQLError(f'Unknown type "{node.type_condition.name.value}"', node)

        return Fragment(
            fragment_name=node.name.value,
            type_condition=type_condition,
            possible_types=self.possible_types(type_condition),
            selection_set=self.compile_selection_set(node.selection_set, type_condition),
            source=print_ast(node),
        )

    def possible_types(self, type_: GraphQLCompositeType) -> list[GraphQLObjectType]:
        if is_abstract_type(type_):
            return list(self.schema.get_possible_types(type_))
        return [type_]

    def compile_selection_set(
        self,
        node: SelectionSetNode,
        parent_type: GraphQLCompositeType,
        possible_types: list[GraphQLObjectType] | None = None,
    ) -> SelectionSet:
        if possible_types is None:
            possible_types = self.possible_types(parent_type)

        selections: list[Selection] = []
        for selection_node in node.selections:
            selections.extend(self.compile_selection(selection_node, parent_type, possible_types))
        return SelectionSet(possible_types, selections)

    def compile_selection(
        self,
        node: Any,
        parent_type: GraphQLCompositeType,
        possible_types: list[GraphQLObjectType],
    ) -> list[Selection]:
        """Compile one selection node, applying @include and @skip.

        A literal condition keeps or drops the selection; a variable
        condition wraps it in a BooleanCondition.
        """
        conditions = inclusion_conditions(node)
        if conditions is None:
            return []

        if isinstance(node, FieldNode):
            selections = [self.compile_field(node, parent_type)]
        elif isinstance(node, InlineFragmentNode):
            selections = self.compile_inline_fragment(node, parent_type, possible_types)
        elif isinstance(node, FragmentSpreadNode):
            selections = [FragmentSpread(node.name.value)]
        else:
            raise GraphQLError(f"Unsupported selection: {node.kind}", node)

        for variable_name, inverted in reversed(conditions):
            selections = [
                BooleanCondition(
                    variable_name=variable_name,
                    inverted=inverted,
                    selection_set=SelectionSet(list(possible_types), selections),
                )
            ]
        return selections

    def compile_field(self, node: FieldNode, parent_type: GraphQLCompositeType) -> Field:
        name = node.name.value
        field_def = self.field_definition(parent_type, name)
        if field_def is None:
            raise GraphQLError(f'Cannot query field "{name}" on type "{parent_type.name}"', node)

        named_type = get_named_type(field_def.type)
        self.add_type_used(named_type)

        selection_set = None
        if is_composite_type(named_type):
            if node.selection_set is None:
                raise GraphQLError(f'Field "{name}" of type "{named_type.name}" must have a selection of subfields', node)
            selection_set = self.compile_selection_set(node.selection_set, named_type)

        alias = node.alias.value if node.alias else None
        return Field(
            response_key=alias or name,
            name=name,
            type=field_def.type,
            alias=alias,
            args=[Argument(arg.name.value, value_from_ast(arg.value)) for arg in node.arguments or ()],
            description=field_def.description,
            selection_set=selection_set,
        )

    def compile_inline_fragment(
        self,
        node: InlineFragmentNode,
        parent_type: GraphQLCompositeType,
        possible_types: list[GraphQLObjectType],
    ) -> list[Selection]:
        if node.type_condition is None:
            # No narrowing; the selections belong to the parent
            return self.compile_selection_set(node.selection_set, parent_type, possible_types).selections

        type_condition = self.schema.get_type(node.type_condition.name.value)
        if not is_composite_type(type_condition):
            raise GraphQLError(f'Unknown type "{node.type_condition.name.value}"', node)

        applicable = self.possible_types(type_condition)
        selection_set = self.compile_selection_set(
            node.selection_set,
            type_condition,
            [t for t in possible_types if t in applicable],
        )
        return [TypeCondition(type=type_condition, selection_set=selection_set)]

    def field_definition(self, parent_type: GraphQLCompositeType, name: str) -> GraphQLField | None:
        if name == "__typename":
            return TypeNameMetaFieldDef
        if parent_type is self.schema.query_type:
            if name == "__schema":
                return SchemaMetaFieldDef
            if name == "__type":
                return TypeMetaFieldDef
        if is_object_type(parent_type) or is_interface_type(parent_type):
            return parent_type.fields.get(name)
        return None

    def add_type_used(self, type_: GraphQLNamedType):
        """Record an enum, input object or custom scalar the output refers to."""
        if type_.name in self.types_used:
            return
        if is_enum_type(type_) or (is_scalar_type(type_) and not is_specified_scalar_type(type_)):
            self.types_used[type_.name] = type_
        elif is_input_object_type(type_):
            self.types_used[type_.name] = type_
            for input_field in type_.fields.values():
                self.add_type_used(get_named_type(input_field.type))


def inclusion_conditions(node: Any) -> list[tuple[str, bool]] | None:
    """Return the variable conditions of a selection, or None if it is never included.

    Each condition is ``(variable_name, inverted)``; ``@skip`` is inverted.
    """
    conditions = []
    for directive in node.directives or ():
        directive_name = directive.name.value
        if directive_name not in ("include", "skip"):
            continue
        inverted = directive_name == "skip"
        value = next(arg.value for arg in directive.arguments if arg.name.value == "if")
        if isinstance(value, VariableNode):
            conditions.append((value.name.value, inverted))
        elif isinstance(value, BooleanValueNode) and value.value == inverted:
            return None
    return conditions


def value_from_ast(node: ValueNode) -> Any:
    """Convert an argument literal to a plain Python value.

    Variables become VariableReference; enum values stay strings.
    """
    if isinstance(node, VariableNode):
        return VariableReference(node.name.value)
    if isinstance(node, IntValueNode):
        return int(node.value)
    if isinstance(node, FloatValueNode):
        return float(node.value)
    if isinstance(node, (StringValueNode, BooleanValueNode, EnumValueNode)):
        return node.value
    if isinstance(node, NullValueNode):
        return None
    if isinstance(node, ListValueNode):
        return [value_from_ast(value) for value in node.values]
    if isinstance(node, ObjectValueNode):
        return {field.name.value: value_from_ast(field.value) for field in node.fields}
    raise GraphQLError(f"Unsupported value: {print_ast(node)}", node)
