"""Detection / transformation strategies and capability-based selection."""

from __future__ import annotations

from typing import List, Sequence

from ..config import ProfwrapConfig
from ..syntax.parser import ParsedSource
from ..syntax.printer import SourcePrinter
from .base import InstrumentationStrategy
from .detector import ComponentDetector
from .patterns import PatternStrategy
from .syntax_tree import SyntaxTreeStrategy
from .transformer import ComponentTransformer


def build_strategies(config: ProfwrapConfig | None = None) -> List[InstrumentationStrategy]:
    """Return the strategies in preference order, configured from ``config``."""
    if config is None:
        printer = SourcePrinter()
        detector = ComponentDetector()
        transformer = ComponentTransformer(printer=printer, detector=detector)
    else:
        printer = SourcePrinter(config.printer.quote)
        detector = ComponentDetector(
            component_helpers=config.detection.component_helpers,
            base_classes=config.detection.base_classes,
        )
        transformer = ComponentTransformer(
            printer=printer,
            component_helpers=config.detection.component_helpers,
            detector=detector,
        )
    return [SyntaxTreeStrategy(detector, transformer), PatternStrategy(printer)]


def select_strategy(
    parsed: ParsedSource, strategies: Sequence[InstrumentationStrategy]
) -> InstrumentationStrategy:
    """Return the first strategy whose capability check accepts ``parsed``."""
    for strategy in strategies:
        if strategy.supports(parsed):
            return strategy
    raise LookupError(f"No strategy can handle {parsed.file_name}")


__all__ = [
    "InstrumentationStrategy",
    "PatternStrategy",
    "SyntaxTreeStrategy",
    "build_strategies",
    "select_strategy",
]
