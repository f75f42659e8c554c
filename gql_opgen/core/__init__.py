"""Core modules for GraphQL operation code generation."""

from .errors import InternalCodegenError
from .generator import OperationModuleGenerator, generate_source
from .helpers import Helpers, Property
from .ir import (
    Argument,
    BooleanCondition,
    CompilerContext,
    Field,
    Fragment,
    FragmentSpread,
    Operation,
    SelectionSet,
    TypeCondition,
    Variable,
    VariableReference,
)
from .loader import DocumentCompiler, compile_to_ir, load_documents, load_schema
from .options import Options
from .printer import CodeWriter
from .type_case import Record, TypeCase

__all__ = [
    # IR types
    "Argument",
    "BooleanCondition",
    "CompilerContext",
    "Field",
    "Fragment",
    "FragmentSpread",
    "Operation",
    "SelectionSet",
    "TypeCondition",
    "Variable",
    "VariableReference",
    # Options
    "Options",
    # Loader
    "DocumentCompiler",
    "compile_to_ir",
    "load_documents",
    "load_schema",
    # Generator
    "CodeWriter",
    "Helpers",
    "Property",
    "Record",
    "TypeCase",
    "OperationModuleGenerator",
    "generate_source",
    # Errors
    "InternalCodegenError",
]
