"""Core data models shared across profwrap components."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple


class DeclarationKind(str, Enum):
    """Syntactic shape of an exported declaration."""

    FUNCTION = "function-declaration"
    CLASS = "class-declaration"
    VARIABLE = "variable-with-function-initializer"
    REEXPORT = "re-exported-identifier"


class ExportKind(str, Enum):
    """How a declaration leaves its module."""

    DEFAULT = "default"
    NAMED = "named"


@dataclass(frozen=True)
class Dialect:
    """Language flags derived from a file's suffix."""

    typed: bool
    markup: bool


@dataclass
class SourceFile:
    """A component source file read from disk."""

    path: Path
    text: str
    dialect: Dialect


@dataclass(frozen=True)
class ComponentCandidate:
    """An exported declaration classified as a UI component."""

    name: str
    declaration_kind: DeclarationKind
    export_kind: ExportKind
    path: Optional[str] = None

    @property
    def target(self) -> str:
        """Return the ``path::Name`` identifier used by wrap requests."""
        return f"{self.path}::{self.name}" if self.path else self.name


@dataclass(frozen=True)
class ImportTarget:
    """The instrumentation symbol and the module specifier it is imported from."""

    symbol: str
    module: str


@dataclass
class WrapRequest:
    """Request to wrap one component in one file."""

    file_path: Path
    component_name: str
    symbol: str
    import_module: Optional[str] = None
    helper_path: Optional[Path] = None


@dataclass
class TransformResult:
    """Outcome of an in-memory transformation.

    ``success`` is False when nothing matched (unknown name or already wrapped);
    ``source`` then stays ``None`` and callers must not write anything.
    """

    success: bool
    source: Optional[str] = None
    strategy: str = ""
    degraded: bool = False
    wrapped: List[str] = field(default_factory=list)
    reason: Optional[str] = None


@dataclass
class WrapOutcome:
    """Outcome of a file-level wrap."""

    success: bool
    path: Path
    component_name: str
    changed: bool = False
    degraded: bool = False
    reason: Optional[str] = None
    diff: Optional[str] = None


@dataclass
class BatchReport:
    """Aggregated result of wrapping many components."""

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    outcomes: List[WrapOutcome] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    def record(self, outcome: WrapOutcome) -> None:
        self.outcomes.append(outcome)
        if outcome.success:
            self.succeeded += 1
        else:
            self.failed += 1

    def fail(self, target: str, message: str) -> None:
        self.failed += 1
        self.errors[target] = message


@dataclass
class SourceFileMeta:
    """Metadata for a scanned component source file."""

    path: str
    size: int
    dialect: Dialect


@dataclass
class SourceManifest:
    """Normalized view of the component sources under a root."""

    root: str
    files: List[SourceFileMeta]


@dataclass
class ComponentTreeNode:
    """Directory / file / component node for selection trees."""

    name: str
    path: str
    type: str
    children: List["ComponentTreeNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"name": self.name, "path": self.path, "type": self.type}
        if self.children:
            payload["children"] = [child.to_dict() for child in self.children]
        return payload


def split_target(target: str) -> Tuple[str, Optional[str]]:
    """Split a ``path::Name`` target into its file path and component name."""
    if "::" not in target:
        return target, None
    file_part, _, name = target.partition("::")
    return file_part, name or None
