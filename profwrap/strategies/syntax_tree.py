"""Strategy backed by the tree-sitter detector and transformer."""

from __future__ import annotations

from typing import List

from ..models import ComponentCandidate, ImportTarget, TransformResult
from ..syntax.parser import ParsedSource
from .base import InstrumentationStrategy
from .detector import ComponentDetector
from .transformer import ComponentTransformer


class SyntaxTreeStrategy(InstrumentationStrategy):
    """Full-fidelity strategy for sources that parsed without errors."""

    name = "syntax-tree"

    def __init__(
        self,
        detector: ComponentDetector | None = None,
        transformer: ComponentTransformer | None = None,
    ) -> None:
        self.detector = detector or ComponentDetector()
        self.transformer = transformer or ComponentTransformer()

    def supports(self, parsed: ParsedSource) -> bool:
        return not parsed.has_errors

    def detect(self, parsed: ParsedSource) -> List[ComponentCandidate]:
        return self.detector.candidates(parsed)

    def transform(
        self, parsed: ParsedSource, component_name: str, target: ImportTarget
    ) -> TransformResult:
        return self.transformer.transform(parsed, component_name, target)


__all__ = ["SyntaxTreeStrategy"]
