"""Type mapping and naming rules for generated classes.

Translates IR names and graphql-core types into Python identifiers and type
expressions. Everything here is a pure function of its arguments and the
run's Options.
"""

from dataclasses import dataclass
from typing import Any, Iterable

from graphql import (
    GraphQLBoolean,
    GraphQLError,
    GraphQLFloat,
    GraphQLID,
    GraphQLInputField,
    GraphQLInt,
    GraphQLNamedType,
    GraphQLString,
    GraphQLType,
    get_named_type,
    is_composite_type,
    is_enum_type,
    is_input_object_type,
    is_list_type,
    is_non_null_type,
    is_scalar_type,
)

from .ir import Argument, Field, FragmentSpread, SelectionSet, TypeCondition, Variable, VariableReference
from .naming import (
    PYTHON_KEYWORDS,
    pascal_case,
    safe_param_name,
    singularize,
    snake_case,
    string_literal,
    upper_case,
)
from .options import Options

BUILT_IN_SCALAR_MAP = {
    GraphQLString.name: "str",
    GraphQLInt.name: "int",
    GraphQLFloat.name: "float",
    GraphQLBoolean.name: "bool",
    GraphQLID.name: "GraphQLID",
}

# Attributes every generated record defines itself
RESERVED_PROPERTY_NAMES = {
    "snapshot",
    "possible_types",
    "selections",
    "fragments",
    "make",
    "typename",
    "replace_snapshot",
    "graphql_map",
    "self",
    "cls",
}

# Attributes and methods of generated operation classes
RESERVED_VARIABLE_NAMES = {
    "variables",
    "operation_name",
    "operation_string",
    "operation_identifier",
    "request_string",
    "request_body",
}


@dataclass
class Property:
    """Accessor model for a field, type condition, fragment spread or variable."""
    property_name: str
    type_name: str
    is_optional: bool = False
    # Wire name: response key for fields, argument name for variables and input fields
    name: str = ""
    type: GraphQLType | None = None
    # Qualified name of the class this property resolves to, if any
    struct_name: str | None = None
    description: str | None = None
    selection_set: SelectionSet | None = None
    is_conditional: bool = False

    @property
    def is_composite(self) -> bool:
        return self.type is not None and is_composite_type(get_named_type(self.type))


class Helpers:
    """Naming and type-mapping rules parameterized by Options."""

    def __init__(self, options: Options):
        self.options = options

    # Types

    def type_name_from_graphql_type(
        self,
        type_: GraphQLType,
        unmodified_type_name: str | None = None,
        is_optional: bool | None = None,
    ) -> str:
        """Return the Python type expression for a (possibly wrapped) GraphQL type.

        ``unmodified_type_name`` replaces the named type at the innermost
        position: the nested class name for composite fields, or
        ``"Snapshot"`` for the storage form of the same field.
        """
        if is_non_null_type(type_):
            return self.type_name_from_graphql_type(type_.of_type, unmodified_type_name, False)
        if is_optional is None:
            is_optional = True

        if is_list_type(type_):
            type_name = f"List[{self.type_name_from_graphql_type(type_.of_type, unmodified_type_name)}]"
        elif unmodified_type_name and (is_composite_type(type_) or unmodified_type_name == "Snapshot"):
            type_name = unmodified_type_name
        elif is_scalar_type(type_):
            type_name = self.type_name_for_scalar_type(type_)
        elif is_enum_type(type_) or is_input_object_type(type_) or is_composite_type(type_):
            type_name = unmodified_type_name or self.qualified_type_name(type_.name)
        else:
            raise GraphQLError(f"Unknown type: {type_}")

        return f"Optional[{type_name}]" if is_optional else type_name

    def type_name_for_scalar_type(self, type_: GraphQLNamedType) -> str:
        built_in = BUILT_IN_SCALAR_MAP.get(type_.name)
        if built_in:
            return built_in
        if self.options.passthrough_custom_scalars:
            return self.custom_scalar_name(type_)
        return "str"

    def custom_scalar_name(self, type_: GraphQLNamedType) -> str:
        return f"{self.options.custom_scalars_prefix}{type_.name}"

    def field_type_enum(self, type_: GraphQLType, struct_ref: str) -> str:
        """Return the runtime type tag expression used in selection descriptors."""
        if is_non_null_type(type_):
            return f"OutputType.non_null({self.field_type_enum(type_.of_type, struct_ref)})"
        if is_list_type(type_):
            return f"OutputType.list({self.field_type_enum(type_.of_type, struct_ref)})"
        if is_scalar_type(type_):
            return f"OutputType.scalar({self.type_name_for_scalar_type(type_)})"
        if is_enum_type(type_):
            return f"OutputType.scalar({self.qualified_type_name(type_.name)})"
        if is_composite_type(type_):
            return f"OutputType.object({struct_ref}.selections())"
        raise GraphQLError(f"Unknown field type: {type_}")

    # Names

    def qualified_type_name(self, name: str) -> str:
        """Name of a top-level declaration as seen from anywhere in the module."""
        if self.options.namespace:
            return f"{self.options.namespace}.{name}"
        return name

    @staticmethod
    def enum_case_name(name: str) -> str:
        return safe_param_name(upper_case(name))

    @staticmethod
    def operation_class_name(name: str) -> str:
        return pascal_case(name)

    @staticmethod
    def struct_name_for_property_name(property_name: str) -> str:
        return pascal_case(singularize(property_name.lstrip("_")))

    @staticmethod
    def struct_name_for_fragment_name(fragment_name: str) -> str:
        return pascal_case(fragment_name)

    @staticmethod
    def struct_name_for_type_condition(type_: GraphQLNamedType | str) -> str:
        name = type_ if isinstance(type_, str) else type_.name
        return "As" + pascal_case(name)

    @staticmethod
    def property_name(name: str, reserved: Iterable[str] = ()) -> str:
        """Map a response key or argument name to a collision-free attribute name.

        ``reserved`` holds names already taken in the enclosing class, such as
        the type condition accessors.
        """
        if name.startswith("__"):
            name = name.lstrip("_")
        name = snake_case(name)
        if name in PYTHON_KEYWORDS or name in RESERVED_PROPERTY_NAMES or name in reserved:
            return f"{name}_"
        return name

    def unique_struct_names(self, response_keys: Iterable[str], reserved: Iterable[str] = ()) -> dict[str, str]:
        """Assign each response key a nested class name unique within one class.

        Names already taken by type-condition classes or the fragments
        aggregate are passed in ``reserved``. Collisions get a numeric suffix
        in first-come order.
        """
        taken = set(reserved)
        names: dict[str, str] = {}
        for key in response_keys:
            base = self.struct_name_for_property_name(key)
            name = base
            counter = 2
            while name in taken:
                name = f"{base}{counter}"
                counter += 1
            taken.add(name)
            names[key] = name
        return names

    # Properties

    def property_from_field(
        self,
        field: Field,
        namespace: str | None = None,
        struct_name: str | None = None,
        reserved: Iterable[str] = (),
    ) -> Property:
        """Build the accessor model for a field.

        ``namespace`` is the qualified name of the class the nested record is
        declared in. A conditional field is optional even when non-null.
        """
        type_ = field.type
        if field.is_conditional and is_non_null_type(type_):
            type_ = type_.of_type

        is_optional = not is_non_null_type(type_)

        qualified_struct_name = None
        unmodified_type_name = None
        if is_composite_type(get_named_type(type_)):
            struct_name = struct_name or self.struct_name_for_property_name(field.response_key)
            qualified_struct_name = f"{namespace}.{struct_name}" if namespace else struct_name
            unmodified_type_name = qualified_struct_name

        return Property(
            property_name=self.property_name(field.response_key, reserved),
            type_name=self.type_name_from_graphql_type(type_, unmodified_type_name),
            is_optional=is_optional,
            name=field.response_key,
            type=type_,
            struct_name=qualified_struct_name,
            description=field.description,
            selection_set=field.selection_set,
            is_conditional=field.is_conditional,
        )

    def property_from_type_condition(self, type_condition: TypeCondition, namespace: str) -> Property:
        struct_name = self.struct_name_for_type_condition(type_condition.type)
        qualified_struct_name = f"{namespace}.{struct_name}"
        return Property(
            property_name=self.property_name(struct_name),
            type_name=f"Optional[{qualified_struct_name}]",
            is_optional=True,
            name=type_condition.type.name,
            struct_name=qualified_struct_name,
            selection_set=type_condition.selection_set,
        )

    def property_from_fragment_spread(self, fragment_spread: FragmentSpread, is_conditional: bool) -> Property:
        struct_name = self.qualified_type_name(
            self.struct_name_for_fragment_name(fragment_spread.fragment_name)
        )
        return Property(
            property_name=self.property_name(fragment_spread.fragment_name),
            type_name=f"Optional[{struct_name}]" if is_conditional else struct_name,
            is_optional=is_conditional,
            name=fragment_spread.fragment_name,
            struct_name=struct_name,
            is_conditional=is_conditional,
        )

    def property_from_input_field(self, input_field: GraphQLInputField, name: str) -> Property:
        return Property(
            property_name=self.property_name(name),
            type_name=self.type_name_from_graphql_type(input_field.type),
            is_optional=not is_non_null_type(input_field.type),
            name=name,
            type=input_field.type,
            description=input_field.description,
        )

    def property_from_variable(self, variable: Variable) -> Property:
        """Build the model for an operation variable.

        A variable is optional unless its type, or for a list its element
        type, is non-null.
        """
        type_ = variable.type
        is_optional = not (
            is_non_null_type(type_) or (is_list_type(type_) and is_non_null_type(type_.of_type))
        )
        property_name = self.property_name(variable.name)
        if property_name in RESERVED_VARIABLE_NAMES:
            property_name += "_"
        return Property(
            property_name=property_name,
            type_name=self.type_name_from_graphql_type(type_),
            is_optional=is_optional,
            name=variable.name,
            type=type_,
        )

    # Expressions

    def dictionary_literal_for_field_arguments(self, args: list[Argument]) -> str:
        """Render arguments as an ordered dict literal."""
        entries = (f"{string_literal(arg.name)}: {self.expression_from_value(arg.value)}" for arg in args)
        return "{" + ", ".join(entries) + "}"

    def expression_from_value(self, value: Any) -> str:
        if isinstance(value, VariableReference):
            return f"GraphQLVariable({string_literal(value.variable_name)})"
        if isinstance(value, list):
            return "[" + ", ".join(self.expression_from_value(item) for item in value) + "]"
        if isinstance(value, dict):
            entries = (f"{string_literal(key)}: {self.expression_from_value(item)}" for key, item in value.items())
            return "{" + ", ".join(entries) + "}"
        if isinstance(value, str):
            return string_literal(value)
        if value is None or isinstance(value, (bool, int, float)):
            return repr(value)
        raise GraphQLError(f"Unsupported argument value: {value!r}")

    def map_expression_for_type(self, type_: GraphQLType, transform: str, value: str, depth: int = 0) -> str:
        """Apply ``transform`` to every element of ``value`` through list and optional layers.

        ``transform`` is a format string with one ``{}`` placeholder for the
        element expression. Each optional layer becomes a ``None`` check and
        each list layer a comprehension, so ``[[T]!]`` maps to
        ``None if v is None else [[... for item1 in item0] for item0 in v]``.
        """
        is_optional = not is_non_null_type(type_)
        if not is_optional:
            type_ = type_.of_type

        if is_list_type(type_):
            item = f"item{depth}"
            inner = self.map_expression_for_type(type_.of_type, transform, item, depth + 1)
            expression = f"[{inner} for {item} in {value}]"
        else:
            expression = transform.format(value)

        if is_optional:
            return f"None if {value} is None else {expression}"
        return expression
