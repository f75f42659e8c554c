"""Code generator for GraphQL operations.

Turns a CompilerContext into the source of one Python module: enums and
input objects first, then one class per operation and fragment. Every
selection set becomes a class over an untyped snapshot dict, with typed
properties, a ``selections()`` descriptor list and factory classmethods.

The file header is rendered from a Jinja2 template. A custom template
directory takes precedence over the packaged templates:
    options = Options(template_dir="./my_templates")
    source = generate_source(context)

All references between generated classes made at runtime live inside
function bodies and use fully qualified names, so declaration order within
the module does not matter.
"""

import ast
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Callable, Iterator, Sequence

from graphql import (
    GraphQLEnumType,
    GraphQLError,
    GraphQLInputObjectType,
    GraphQLNamedType,
    get_named_type,
    is_composite_type,
    is_enum_type,
    is_scalar_type,
)
from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .errors import InternalCodegenError
from .helpers import BUILT_IN_SCALAR_MAP, Helpers, Property
from .ir import (
    BooleanCondition,
    CompilerContext,
    Field,
    Fragment,
    FragmentSpread,
    Operation,
    Selection,
    SelectionSet,
    TypeCondition,
)
from .naming import snake_case, string_literal
from .printer import CodeWriter
from .transforms import (
    collect_fragments_referenced,
    generate_operation_id,
    inline_redundant_type_conditions,
    merge_in_fragment_spreads,
)
from .type_case import TypeCase, merge_selection_sets

Scope = tuple[str, ...]


def generate_source(context: CompilerContext) -> str:
    """Generate the complete module source for a compiled document."""
    generator = OperationModuleGenerator(context)

    generator.file_header()

    with generator.namespace_declaration(context.options.namespace):
        for type_ in context.types_used:
            generator.type_declaration_for_graphql_type(type_)

        for operation in context.operations.values():
            generator.class_declaration_for_operation(operation)

        for fragment in context.fragments.values():
            generator.struct_declaration_for_fragment(fragment)

    return generator.validated_output()


class OperationModuleGenerator:
    """Emits declarations for one CompilerContext into a CodeWriter."""

    def __init__(self, context: CompilerContext):
        self.context = context
        self.options = context.options
        self.helpers = Helpers(context.options)
        self.writer = CodeWriter()

        # Custom templates take precedence over the packaged ones
        loaders = []
        if self.options.template_dir:
            template_path = Path(self.options.template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_opgen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def output(self) -> str:
        return self.writer.output

    def validated_output(self) -> str:
        """Return the generated source, checking that it parses."""
        source = self.output
        try:
            ast.parse(source)
        except SyntaxError as e:
            raise ValueError(f"Generated invalid Python: {e}")
        return source

    # Module level

    def file_header(self):
        custom_scalars = []
        if self.options.passthrough_custom_scalars:
            custom_scalars = [
                self.helpers.custom_scalar_name(type_)
                for type_ in self.context.types_used
                if is_scalar_type(type_) and type_.name not in BUILT_IN_SCALAR_MAP
            ]
        template = self.env.get_template("file_header.py.j2")
        header = template.render(
            runtime_module=self.options.runtime_module,
            custom_scalars=custom_scalars,
        )
        self.writer.print_on_newline(header.rstrip())
        self.writer.print_newline_if_needed()

    @contextmanager
    def namespace_declaration(self, namespace: str | None) -> Iterator[None]:
        if not namespace:
            yield
            return
        with self.writer.declaration(namespace):
            yield

    def qualified_name(self, scope: Scope) -> str:
        """Name of a nested declaration as seen from anywhere in the module."""
        return self.helpers.qualified_type_name(".".join(scope))

    # Enums and input objects

    def type_declaration_for_graphql_type(self, type_: GraphQLNamedType):
        if isinstance(type_, GraphQLEnumType):
            self.enumeration_declaration(type_)
        elif isinstance(type_, GraphQLInputObjectType):
            self.struct_declaration_for_input_object_type(type_)

    def enumeration_declaration(self, type_: GraphQLEnumType):
        with self.writer.declaration(type_.name, ["str", "Enum"], type_.description):
            self.writer.print_newline_if_needed()
            for name, value in type_.values.items():
                self.writer.comment(value.description)
                self.writer.print_on_newline(
                    f"{self.helpers.enum_case_name(name)} = {string_literal(name)}"
                )

    def struct_declaration_for_input_object_type(self, type_: GraphQLInputObjectType):
        properties = [
            self.helpers.property_from_input_field(input_field, name)
            for name, input_field in type_.fields.items()
        ]

        with self.writer.declaration(type_.name, ["GraphQLMapConvertible"], type_.description):
            with self.writer.method(
                "__init__", self.parameters_for_properties(properties), returns="None"
            ):
                self.writer.print_wrapped(
                    "self.graphql_map = {",
                    [f"{string_literal(p.name)}: {p.property_name}" for p in properties],
                    "}",
                )

            for prop in properties:
                key = string_literal(prop.name)
                read = f"self.graphql_map.get({key})" if prop.is_optional else f"self.graphql_map[{key}]"
                with self.writer.property_getter(prop.property_name, prop.type_name, prop.description):
                    self.writer.print_on_newline(f"return cast({prop.type_name}, {read})")
                with self.writer.property_setter(prop.property_name, prop.type_name):
                    self.writer.print_on_newline(f"self.graphql_map[{key}] = new_value")

    # Operations and fragments

    def class_declaration_for_operation(self, operation: Operation):
        base_name = self.helpers.operation_class_name(operation.operation_name)
        if operation.operation_type == "query":
            class_name = f"{base_name}Query"
            base = "GraphQLQuery"
        elif operation.operation_type == "mutation":
            class_name = f"{base_name}Mutation"
            base = "GraphQLMutation"
        else:
            raise GraphQLError(f'Unsupported operation type "{operation.operation_type}"')

        scope = (class_name,)

        with self.writer.declaration(class_name, [base]):
            self.writer.print_on_newline(
                f"operation_name = {string_literal(operation.operation_name)}"
            )

            if operation.source:
                self.writer.print_newline_if_needed()
                self.writer.print_on_newline("operation_string = (")
                with self.writer.indented():
                    self.writer.multiline_string(operation.source)
                self.writer.print_on_newline(")")

            fragments_referenced = collect_fragments_referenced(
                self.context, operation.selection_set
            )

            if self.options.generate_operation_ids:
                _, operation_id = generate_operation_id(
                    self.context, operation, fragments_referenced
                )
                self.writer.print_newline_if_needed()
                self.writer.print_on_newline(
                    f"operation_identifier = {string_literal(operation_id)}"
                )

            if fragments_referenced:
                sources = ["cls.operation_string"] + [
                    f"{self.helpers.qualified_type_name(self.helpers.struct_name_for_fragment_name(name))}"
                    ".fragment_string"
                    for name in fragments_referenced
                ]
                with self.writer.method(
                    "request_string", ["cls"], returns="str", decorators=["classmethod"]
                ):
                    self.writer.print_wrapped('return "\\n".join([', sources, "])")

            if operation.variables:
                self.variable_declarations(operation)

            self.struct_declaration_for_selection_set("Data", operation.selection_set, scope)

    def variable_declarations(self, operation: Operation):
        properties = [self.helpers.property_from_variable(v) for v in operation.variables]

        self.writer.print_newline_if_needed()
        for prop in properties:
            self.writer.print_on_newline(f"{prop.property_name}: {prop.type_name}")

        with self.writer.method(
            "__init__", self.parameters_for_properties(properties), returns="None"
        ):
            for prop in properties:
                self.writer.print_on_newline(f"self.{prop.property_name} = {prop.property_name}")

        with self.writer.property_getter("variables", "Optional[GraphQLMap]"):
            self.writer.print_wrapped(
                "return {",
                [f"{string_literal(p.name)}: self.{p.property_name}" for p in properties],
                "}",
            )

    def struct_declaration_for_fragment(self, fragment: Fragment):
        struct_name = self.helpers.struct_name_for_fragment_name(fragment.fragment_name)

        def fragment_string():
            if fragment.source:
                self.writer.print_on_newline("fragment_string = (")
                with self.writer.indented():
                    self.writer.multiline_string(fragment.source)
                self.writer.print_on_newline(")")

        self.struct_declaration_for_selection_set(
            struct_name,
            fragment.selection_set,
            bases=("GraphQLFragment",),
            before=fragment_string,
        )

    # Selection sets

    def struct_declaration_for_selection_set(
        self,
        struct_name: str,
        selection_set: SelectionSet,
        scope: Scope = (),
        bases: Sequence[str] = ("GraphQLSelectionSet",),
        before: Callable[[], None] | None = None,
    ):
        """Declare the class for one selection set and, recursively, its nested classes.

        ``scope`` is the path of enclosing class names; the new class is
        declared at ``scope + (struct_name,)``.
        """
        scope = scope + (struct_name,)
        qualified_name = self.qualified_name(scope)

        type_case = TypeCase(
            inline_redundant_type_conditions(
                self.context, merge_in_fragment_spreads(self.context, selection_set)
            )
        )

        type_conditions = collect_type_conditions(selection_set.selections)
        fragment_spreads = self.fragment_spread_properties(selection_set)

        reserved = [self.helpers.struct_name_for_type_condition(name) for name in type_conditions]
        if fragment_spreads:
            reserved.append("Fragments")
        struct_names = self.helpers.unique_struct_names(
            [
                field.response_key
                for field in type_case.default.fields
                if is_composite_type(get_named_type(field.type))
            ],
            reserved,
        )

        type_condition_properties = [
            self.helpers.property_from_type_condition(type_condition, qualified_name)
            for type_condition in type_conditions.values()
        ]
        accessor_names = [prop.property_name for prop in type_condition_properties]
        fields = [
            self.helpers.property_from_field(
                field, qualified_name, struct_names.get(field.response_key), accessor_names
            )
            for field in type_case.default.fields
            if field.response_key != "__typename"
        ]

        with self.writer.declaration(struct_name, bases):
            if before:
                before()

            self.writer.print_newline_if_needed()
            self.writer.print_wrapped(
                "possible_types = [",
                [string_literal(t.name) for t in selection_set.possible_types],
                "]",
            )

            with self.writer.method(
                "selections",
                ["cls"],
                returns="List[GraphQLSelection]",
                decorators=["classmethod"],
            ):
                self.writer.print_on_newline("return ")
                self.selection_set_initialization(selection_set.selections, struct_names)

            self.initializers_for_type_case(type_case, scope, struct_names, accessor_names)

            for prop in fields:
                self.property_declaration_for_field(prop)

            for prop in type_condition_properties:
                self.property_declaration_for_type_condition(prop)

            if fragment_spreads:
                self.fragments_accessor(qualified_name)

            for prop in type_condition_properties:
                self.struct_declaration_for_selection_set(
                    self.helpers.struct_name_for_type_condition(prop.name),
                    prop.selection_set,
                    scope,
                )

            if fragment_spreads:
                self.fragments_declaration(fragment_spreads)

            for prop in fields:
                if not prop.is_composite:
                    continue
                if prop.selection_set is None:
                    raise InternalCodegenError(
                        f'Composite field "{prop.name}" in {qualified_name} has no selection set'
                    )
                self.struct_declaration_for_selection_set(
                    struct_names[prop.name], prop.selection_set, scope
                )

    def selection_set_initialization(self, selections: list[Selection], struct_names: dict[str, str]):
        """Write the descriptor list for ``selections`` in source order.

        The list is appended to the current line; nested classes are
        referenced through ``cls``.
        """
        if not selections:
            self.writer.print("[]")
            return

        self.writer.print("[")
        with self.writer.indented():
            for selection in selections:
                if isinstance(selection, Field):
                    self.writer.print_on_newline(
                        f"{self.field_descriptor(selection, struct_names)},"
                    )
                elif isinstance(selection, TypeCondition):
                    struct_name = self.helpers.struct_name_for_type_condition(selection.type)
                    self.writer.print_on_newline(f"GraphQLFragmentSpread(cls.{struct_name}),")
                elif isinstance(selection, FragmentSpread):
                    struct_name = self.helpers.qualified_type_name(
                        self.helpers.struct_name_for_fragment_name(selection.fragment_name)
                    )
                    self.writer.print_on_newline(f"GraphQLFragmentSpread({struct_name}),")
                elif isinstance(selection, BooleanCondition):
                    self.writer.print_on_newline(
                        "GraphQLBooleanCondition("
                        f"variable_name={string_literal(selection.variable_name)}, "
                        f"inverted={selection.inverted!r}, "
                        "selections="
                    )
                    self.selection_set_initialization(
                        selection.selection_set.selections, struct_names
                    )
                    self.writer.print("),")
        self.writer.print_on_newline("]")

    def field_descriptor(self, field: Field, struct_names: dict[str, str]) -> str:
        struct_ref = None
        if is_composite_type(get_named_type(field.type)):
            struct_name = struct_names.get(field.response_key)
            if struct_name is None:
                raise InternalCodegenError(
                    f'No nested class declared for field "{field.response_key}"'
                )
            struct_ref = f"cls.{struct_name}"

        arguments = [string_literal(field.name)]
        if field.alias:
            arguments.append(f"alias={string_literal(field.alias)}")
        if field.args:
            arguments.append(
                f"arguments={self.helpers.dictionary_literal_for_field_arguments(field.args)}"
            )
        arguments.append(f"type={self.helpers.field_type_enum(field.type, struct_ref)}")
        return f"GraphQLField({', '.join(arguments)})"

    def initializers_for_type_case(
        self,
        type_case: TypeCase,
        scope: Scope,
        struct_names: dict[str, str],
        accessor_names: Sequence[str] = (),
    ):
        """Declare ``make`` for a single-type selection set, else one ``make_<type>`` per type."""
        qualified_name = self.qualified_name(scope)
        records = type_case.records

        if type_case.is_monomorphic:
            record = records[0]
            properties = [
                self.helpers.property_from_field(
                    field, qualified_name, struct_names.get(field.response_key), accessor_names
                )
                for field in record.fields
                if field.response_key != "__typename"
            ]
            self.factory_declaration("make", record.possible_types[0].name, properties, qualified_name)
            return

        default_keys = {field.response_key for field in type_case.default.fields}
        for record in records:
            for possible_type in record.possible_types:
                # Fields outside the default record live in the type's own nested class
                type_condition_name = (
                    f"{qualified_name}.{self.helpers.struct_name_for_type_condition(possible_type)}"
                )
                properties = [
                    self.helpers.property_from_field(
                        field, qualified_name, struct_names.get(field.response_key), accessor_names
                    )
                    if field.response_key in default_keys
                    else self.helpers.property_from_field(field, type_condition_name)
                    for field in record.fields
                    if field.response_key != "__typename"
                ]
                self.factory_declaration(
                    f"make_{snake_case(possible_type.name)}",
                    possible_type.name,
                    properties,
                    qualified_name,
                )

    def factory_declaration(self, name: str, typename: str, properties: list[Property], returns: str):
        with self.writer.method(
            name,
            self.parameters_for_properties(properties, first="cls"),
            returns=returns,
            decorators=["classmethod"],
        ):
            entries = [f'"__typename": {string_literal(typename)}']
            for prop in properties:
                value = prop.property_name
                if prop.is_composite:
                    value = self.helpers.map_expression_for_type(prop.type, "{}.snapshot", value)
                entries.append(f"{string_literal(prop.name)}: {value}")
            self.writer.print_wrapped("return cls({", entries, "})")

    @staticmethod
    def parameters_for_properties(properties: list[Property], first: str = "self") -> list[str]:
        """Keyword-only parameters; optional ones default to None."""
        if not properties:
            return [first]
        parameters = [first, "*"]
        for prop in properties:
            parameter = f"{prop.property_name}: {prop.type_name}"
            if prop.is_optional:
                parameter += " = None"
            parameters.append(parameter)
        return parameters

    # Properties

    def property_declaration_for_field(self, prop: Property):
        key = string_literal(prop.name)
        read = f"self.snapshot.get({key})" if prop.is_optional else f"self.snapshot[{key}]"
        named_type = get_named_type(prop.type)

        with self.writer.property_getter(prop.property_name, prop.type_name, prop.description):
            if prop.is_composite:
                storage_type = self.helpers.type_name_from_graphql_type(prop.type, "Snapshot")
                self.writer.print_on_newline(f"value = cast({storage_type}, {read})")
                self.writer.print_on_newline(
                    "return "
                    + self.helpers.map_expression_for_type(prop.type, f"{prop.struct_name}({{}})", "value")
                )
            elif is_enum_type(named_type):
                storage_type = self.helpers.type_name_from_graphql_type(prop.type, "str")
                enum_name = self.helpers.qualified_type_name(named_type.name)
                self.writer.print_on_newline(f"value = cast({storage_type}, {read})")
                self.writer.print_on_newline(
                    "return " + self.helpers.map_expression_for_type(prop.type, f"{enum_name}({{}})", "value")
                )
            else:
                self.writer.print_on_newline(f"return cast({prop.type_name}, {read})")

        with self.writer.property_setter(prop.property_name, prop.type_name):
            value = "new_value"
            if prop.is_composite:
                value = self.helpers.map_expression_for_type(prop.type, "{}.snapshot", value)
            self.writer.print_on_newline(f"self.snapshot[{key}] = {value}")

    def property_declaration_for_type_condition(self, prop: Property):
        with self.writer.property_getter(prop.property_name, prop.type_name):
            with self.writer.block(f"if self.typename not in {prop.struct_name}.possible_types"):
                self.writer.print_on_newline("return None")
            self.writer.print_on_newline(f"return {prop.struct_name}(self.snapshot)")

        with self.writer.property_setter(prop.property_name, prop.type_name):
            with self.writer.block("if new_value is None"):
                self.writer.print_on_newline("return")
            self.writer.print_on_newline("self.replace_snapshot(new_value.snapshot)")

    # Fragments

    def fragment_spread_properties(self, selection_set: SelectionSet) -> list[Property]:
        """Accessors for the fragments spread directly in a selection set.

        An accessor is conditional unless every possible type of the
        selection set is a possible type of the fragment.
        """
        properties = {}
        for selection in selection_set.selections:
            if not isinstance(selection, FragmentSpread) or selection.fragment_name in properties:
                continue
            fragment = self.context.fragment_named(selection.fragment_name)
            is_conditional = any(
                type_ not in fragment.possible_types for type_ in selection_set.possible_types
            )
            properties[selection.fragment_name] = self.helpers.property_from_fragment_spread(
                selection, is_conditional
            )
        return list(properties.values())

    def fragments_accessor(self, qualified_name: str):
        fragments_name = f"{qualified_name}.Fragments"
        with self.writer.property_getter("fragments", fragments_name):
            self.writer.print_on_newline(f"return {fragments_name}(self.snapshot)")
        with self.writer.property_setter("fragments", fragments_name):
            self.writer.print_on_newline("self.replace_snapshot(new_value.snapshot)")

    def fragments_declaration(self, fragment_spreads: list[Property]):
        with self.writer.declaration("Fragments", ["SnapshotContainer"]):
            for prop in fragment_spreads:
                with self.writer.property_getter(prop.property_name, prop.type_name):
                    if prop.is_conditional:
                        with self.writer.block(
                            f'if self.snapshot.get("__typename") not in {prop.struct_name}.possible_types'
                        ):
                            self.writer.print_on_newline("return None")
                    self.writer.print_on_newline(f"return {prop.struct_name}(self.snapshot)")

                with self.writer.property_setter(prop.property_name, prop.type_name):
                    if prop.is_conditional:
                        with self.writer.block("if new_value is None"):
                            self.writer.print_on_newline("return")
                    self.writer.print_on_newline("self.replace_snapshot(new_value.snapshot)")


def collect_type_conditions(selections: list[Selection]) -> dict[str, TypeCondition]:
    """Group the type conditions of a selection list by type name.

    Type conditions under boolean conditions are included, with their
    selections wrapped in the same boolean condition so the fields stay
    optional. Conditions on the same type share one nested class, so their
    selections are merged.
    """
    type_conditions: dict[str, TypeCondition] = {}
    for selection in selections:
        if isinstance(selection, TypeCondition):
            found = [selection]
        elif isinstance(selection, BooleanCondition):
            found = [
                TypeCondition(
                    type=type_condition.type,
                    selection_set=SelectionSet(
                        possible_types=list(type_condition.selection_set.possible_types),
                        selections=[replace(selection, selection_set=type_condition.selection_set)],
                    ),
                )
                for type_condition in collect_type_conditions(selection.selection_set.selections).values()
            ]
        else:
            continue

        for type_condition in found:
            name = type_condition.type.name
            existing = type_conditions.get(name)
            if existing is None:
                type_conditions[name] = type_condition
            else:
                type_conditions[name] = TypeCondition(
                    type=existing.type,
                    selection_set=merge_selection_sets(
                        existing.selection_set, type_condition.selection_set
                    ),
                )
    return type_conditions
