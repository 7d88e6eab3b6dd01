"""Parsing and printing of JavaScript / TypeScript component sources."""

from .parser import ParsedSource, SourceParser, dialect_for
from .printer import Patch, PatchConflictError, SourcePrinter

__all__ = [
    "ParsedSource",
    "Patch",
    "PatchConflictError",
    "SourceParser",
    "SourcePrinter",
    "dialect_for",
]
