"""Base classes for detection / transformation strategies."""

from abc import ABC, abstractmethod
from typing import List

from ..models import ComponentCandidate, ImportTarget, TransformResult
from ..syntax.parser import ParsedSource


class InstrumentationStrategy(ABC):
    """Contract shared by the syntax-tree engine and the pattern fallback."""

    name: str = "strategy"
    degraded: bool = False

    @abstractmethod
    def supports(self, parsed: ParsedSource) -> bool:
        """Return True when this strategy can handle the parsed source."""

    @abstractmethod
    def detect(self, parsed: ParsedSource) -> List[ComponentCandidate]:
        """Return the exported declarations classified as components."""

    @abstractmethod
    def transform(
        self, parsed: ParsedSource, component_name: str, target: ImportTarget
    ) -> TransformResult:
        """Wrap ``component_name`` with ``target.symbol`` entirely in memory."""
