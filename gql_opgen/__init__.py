"""Generate typed Python classes from GraphQL operations."""

__version__ = "0.1.0"
