"""Grouping of a selection set's possible types into records.

A record is a set of possible types that share exactly the same applicable
fields. The number of records decides how many initializers a generated
class needs: one plain ``make`` for a single record over a single type,
otherwise one ``make_<type>`` factory per possible type.
"""

from dataclasses import dataclass, field, replace

from graphql import GraphQLObjectType

from .errors import InternalCodegenError
from .ir import BooleanCondition, Field, FragmentSpread, SelectionSet, TypeCondition


@dataclass
class Record:
    possible_types: list[GraphQLObjectType]
    fields: list[Field] = field(default_factory=list)


class TypeCase:
    """Fields of a (fragment-merged) selection set, grouped by possible type.

    Example:
        For ``pets { name ... on Dog { barkVolume } }`` with possible types
        Dog and Cat, ``records`` holds ``[Dog: name, barkVolume]`` and
        ``[Cat: name]`` while ``default`` holds ``[Dog, Cat: name]``.
    """

    def __init__(self, selection_set: SelectionSet):
        self.selection_set = selection_set
        possible_types = list(selection_set.possible_types)

        self.default = Record(
            possible_types,
            list(collect_fields(selection_set, possible_types).values()),
        )

        records: dict[tuple[str, ...], Record] = {}
        for possible_type in possible_types:
            fields = collect_fields(selection_set, [possible_type])
            signature = tuple(fields)
            record = records.get(signature)
            if record is None:
                records[signature] = Record([possible_type], list(fields.values()))
            else:
                record.possible_types.append(possible_type)
        self.records = list(records.values())

    @property
    def is_monomorphic(self) -> bool:
        """True when one record covers exactly one possible type."""
        return len(self.records) == 1 and len(self.records[0].possible_types) == 1


def collect_fields(
    selection_set: SelectionSet,
    types: list[GraphQLObjectType],
    is_conditional: bool = False,
    fields: dict[str, Field] | None = None,
) -> dict[str, Field]:
    """Collect the fields that apply to every type in ``types``, keyed by response key.

    A type condition contributes its fields only when all of ``types`` are
    among its possible types. Fields under a boolean condition are marked
    conditional.
    """
    if fields is None:
        fields = {}

    for selection in selection_set.selections:
        if isinstance(selection, Field):
            _merge_field(fields, selection, is_conditional)
        elif isinstance(selection, BooleanCondition):
            collect_fields(selection.selection_set, types, True, fields)
        elif isinstance(selection, TypeCondition):
            condition_types = selection.selection_set.possible_types
            if types and all(t in condition_types for t in types):
                collect_fields(selection.selection_set, types, is_conditional, fields)
        elif isinstance(selection, FragmentSpread):
            raise InternalCodegenError(
                f'Fragment spread "{selection.fragment_name}" must be merged in before building a type case'
            )

    return fields


def _merge_field(fields: dict[str, Field], field_: Field, is_conditional: bool):
    conditional = is_conditional or field_.is_conditional
    existing = fields.get(field_.response_key)
    if existing is None:
        fields[field_.response_key] = replace(field_, is_conditional=conditional)
        return

    fields[field_.response_key] = replace(
        existing,
        is_conditional=existing.is_conditional and conditional,
        selection_set=merge_selection_sets(existing.selection_set, field_.selection_set),
    )


def merge_selection_sets(
    first: SelectionSet | None, second: SelectionSet | None
) -> SelectionSet | None:
    """Concatenate the selections of two selection sets over the same type."""
    if first is None:
        return second
    if second is None:
        return first
    return SelectionSet(
        possible_types=list(first.possible_types),
        selections=first.selections + second.selections,
    )
