"""Detect React components and wrap them with a render-profiling helper."""

from .engine import InstrumentationEngine, SourceIOError
from .import_path import resolve_import_path
from .models import (
    BatchReport,
    ComponentCandidate,
    DeclarationKind,
    ExportKind,
    TransformResult,
    WrapOutcome,
    WrapRequest,
)

__version__ = "0.1.0"

__all__ = [
    "BatchReport",
    "ComponentCandidate",
    "DeclarationKind",
    "ExportKind",
    "InstrumentationEngine",
    "SourceIOError",
    "TransformResult",
    "WrapOutcome",
    "WrapRequest",
    "resolve_import_path",
]
