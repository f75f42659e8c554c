"""IR-to-IR passes run before code generation.

Each pass returns a new selection set and never mutates its input.
"""

import hashlib
from dataclasses import replace

from .ir import (
    BooleanCondition,
    CompilerContext,
    Field,
    FragmentSpread,
    Operation,
    SelectionSet,
    TypeCondition,
)


def collect_fragments_referenced(
    context: CompilerContext,
    selection_set: SelectionSet,
    fragment_names: dict[str, None] | None = None,
) -> list[str]:
    """Return the names of all fragments reachable from a selection set.

    Fragments referenced by other fragments are included. The order is the
    order of first reference, which keeps the generated request string stable.
    """
    if fragment_names is None:
        fragment_names = {}

    for selection in selection_set.selections:
        if isinstance(selection, FragmentSpread):
            if selection.fragment_name in fragment_names:
                continue
            fragment_names[selection.fragment_name] = None
            fragment = context.fragment_named(selection.fragment_name)
            collect_fragments_referenced(context, fragment.selection_set, fragment_names)
        elif isinstance(selection, Field):
            if selection.selection_set:
                collect_fragments_referenced(context, selection.selection_set, fragment_names)
        else:
            collect_fragments_referenced(context, selection.selection_set, fragment_names)

    return list(fragment_names)


def merge_in_fragment_spreads(context: CompilerContext, selection_set: SelectionSet) -> SelectionSet:
    """Replace every fragment spread with a type condition holding its selections.

    The type condition's possible types are the enclosing possible types the
    fragment can apply to, in the enclosing order. Field sub-selections are
    left alone; they are merged when their own class is generated.
    """
    selections = []

    for selection in selection_set.selections:
        if isinstance(selection, FragmentSpread):
            fragment = context.fragment_named(selection.fragment_name)
            possible_types = [
                t for t in selection_set.possible_types if t in fragment.possible_types
            ]
            fragment_selection_set = SelectionSet(possible_types, fragment.selection_set.selections)
            selections.append(
                TypeCondition(
                    type=fragment.type_condition,
                    selection_set=merge_in_fragment_spreads(context, fragment_selection_set),
                )
            )
        elif isinstance(selection, (TypeCondition, BooleanCondition)):
            selections.append(
                replace(
                    selection,
                    selection_set=merge_in_fragment_spreads(context, selection.selection_set),
                )
            )
        else:
            selections.append(selection)

    return SelectionSet(list(selection_set.possible_types), selections)


def inline_redundant_type_conditions(
    context: CompilerContext, selection_set: SelectionSet
) -> SelectionSet:
    """Splice in type conditions that apply to every possible type of their parent."""
    selections = []

    for selection in selection_set.selections:
        if isinstance(selection, TypeCondition) and all(
            t in selection.selection_set.possible_types for t in selection_set.possible_types
        ):
            inlined = inline_redundant_type_conditions(
                context,
                SelectionSet(list(selection_set.possible_types), selection.selection_set.selections),
            )
            selections.extend(inlined.selections)
        elif isinstance(selection, (TypeCondition, BooleanCondition)):
            selections.append(
                replace(
                    selection,
                    selection_set=inline_redundant_type_conditions(context, selection.selection_set),
                )
            )
        else:
            selections.append(selection)

    return SelectionSet(list(selection_set.possible_types), selections)


def generate_operation_id(
    context: CompilerContext, operation: Operation, fragments_referenced: list[str]
) -> tuple[str, str]:
    """Return ``(source_with_fragments, operation_id)`` for an operation.

    The id is the hex SHA-256 digest of the operation source followed by the
    source of every referenced fragment, joined by newlines.
    """
    sources = [operation.source]
    sources.extend(context.fragment_named(name).source for name in fragments_referenced)
    source_with_fragments = "\n".join(sources)
    operation_id = hashlib.sha256(source_with_fragments.encode("utf-8")).hexdigest()
    return source_with_fragments, operation_id
