"""Exceptions raised by the code generator.

Input-contract violations (unknown fragment, unsupported operation type,
unresolvable type) are reported as ``graphql.GraphQLError`` so callers see
the same error type the loader raises. Errors defined here signal bugs in
the generator itself.
"""


class InternalCodegenError(RuntimeError):
    """Raised when the generator reaches a state its own invariants rule out."""
