"""Text-pattern fallback used when a source does not parse cleanly.

Deliberately narrower than the syntax-tree strategy: detection only trusts
``export function|const|class Name`` lines, and transformation only rewrites
shapes whose edits never require finding the end of an expression.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..logging import file_logger, get_logger
from ..models import ComponentCandidate, DeclarationKind, ExportKind, ImportTarget, TransformResult
from ..syntax.parser import ParsedSource
from ..syntax.printer import SourcePrinter
from .base import InstrumentationStrategy

_logger = get_logger("patterns")

_EXPORT_DECLARATION = re.compile(
    r"^[ \t]*export[ \t]+(?:async[ \t]+)?(?P<keyword>function\*?|const|class)[ \t]+(?P<name>[A-Z][A-Za-z0-9_$]*)",
    re.MULTILINE,
)

_IMPORT = re.compile(
    r"^[ \t]*import\b(?P<clause>[^'\"]*?)(?P<quote>['\"])(?P<module>[^'\"\n]+)(?P=quote)[ \t]*;?(?:[ \t]*//[^\r\n]*)?",
    re.MULTILINE,
)

_COMPONENT_NAME = re.compile(r"[A-Z][A-Za-z0-9_$]*\Z")

_PROLOGUE = re.compile(r"\A(?:#![^\n]*\n)?(?:[ \t]*(['\"])use [a-z ]+\1[ \t]*;?[ \t]*\r?\n)*")

_KIND_BY_KEYWORD = {
    "function": DeclarationKind.FUNCTION,
    "function*": DeclarationKind.FUNCTION,
    "const": DeclarationKind.VARIABLE,
    "class": DeclarationKind.CLASS,
}


class PatternStrategy(InstrumentationStrategy):
    """Regex-based detect / transform that never raises."""

    name = "pattern"
    degraded = True

    def __init__(self, printer: SourcePrinter | None = None) -> None:
        self.printer = printer or SourcePrinter()

    def supports(self, parsed: ParsedSource) -> bool:
        return True

    def detect(self, parsed: ParsedSource) -> List[ComponentCandidate]:
        seen: set[str] = set()
        found: List[ComponentCandidate] = []
        for match in _EXPORT_DECLARATION.finditer(parsed.text):
            name = match.group("name")
            if name in seen:
                continue
            seen.add(name)
            found.append(
                ComponentCandidate(name, _KIND_BY_KEYWORD[match.group("keyword")], ExportKind.NAMED)
            )
        return found

    def transform(
        self, parsed: ParsedSource, component_name: str, target: ImportTarget
    ) -> TransformResult:
        log = file_logger(_logger, parsed.file_name)
        if not _COMPONENT_NAME.match(component_name):
            log.info("%s does not follow the component naming convention; left unchanged", component_name)
            return TransformResult(success=False, strategy=self.name, degraded=True, reason="no-match")
        text = parsed.text
        newline = self.printer.newline_for(text)
        name = re.escape(component_name)
        symbol = target.symbol
        wrapped: List[str] = []
        appended: List[str] = []

        default_reference = re.compile(
            rf"^(?P<prefix>[ \t]*export[ \t]+default[ \t]+)(?P<name>{name})(?P<suffix>[ \t]*;?)(?=[ \t]*(?://[^\r\n]*)?\r?$)",
            re.MULTILINE,
        )
        text, count = default_reference.subn(
            lambda m: m.group("prefix")
            + self.printer.wrap_call(symbol, component_name, component_name)
            + m.group("suffix"),
            text,
            count=1,
        )
        if count:
            wrapped.append("default-identifier")

        default_declaration = re.compile(
            rf"^(?P<indent>[ \t]*)export[ \t]+default[ \t]+"
            rf"(?P<decl>(?:async[ \t]+)?function[ \t]*\*?[ \t]*{name}\b|class[ \t]+{name}\b|(?:const|let|var)[ \t]+{name}\b)",
            re.MULTILINE,
        )
        if not wrapped and not self._already_exported(text, rf"export[ \t]+default[ \t]+{re.escape(symbol)}\([ \t]*{name}\b"):
            text, count = default_declaration.subn(r"\g<indent>\g<decl>", text, count=1)
            if count:
                wrapped.append("default-declaration")
                appended.append(self.printer.default_export(symbol, component_name))

        named_function = re.compile(
            rf"^(?P<indent>[ \t]*)export[ \t]+(?P<decl>(?:async[ \t]+)?function[ \t]*\*?[ \t]*{name}\b)",
            re.MULTILINE,
        )
        if not self._already_exported(text, rf"export[ \t]+const[ \t]+{name}[ \t]*=[ \t]*{re.escape(symbol)}\("):
            text, count = named_function.subn(r"\g<indent>\g<decl>", text, count=1)
            if count:
                wrapped.append("named-function")
                appended.append(self.printer.named_export(symbol, component_name))

        if not wrapped:
            log.info("Pattern fallback found no unwrapped export named %s", component_name)
            return TransformResult(success=False, strategy=self.name, degraded=True, reason="no-match")

        if appended:
            if text and not text.endswith(("\n", "\r")):
                text += newline
            text += newline.join(appended) + newline

        text = self._ensure_import(text, target, newline)
        if text == parsed.text:
            return TransformResult(success=False, strategy=self.name, degraded=True, reason="unchanged")
        return TransformResult(success=True, source=text, strategy=self.name, degraded=True, wrapped=wrapped)

    @staticmethod
    def _already_exported(text: str, pattern: str) -> bool:
        return re.search(rf"^[ \t]*{pattern}", text, re.MULTILINE) is not None

    def _ensure_import(self, text: str, target: ImportTarget, newline: str) -> str:
        binding = re.compile(rf"\b{re.escape(target.symbol)}\b")
        last: Optional[re.Match[str]] = None
        for match in _IMPORT.finditer(text):
            last = match
            clause = match.group("clause").strip()
            if clause.startswith("type ") or clause.startswith("type{"):
                continue
            if binding.search(clause):
                return text
        statement = self.printer.import_statement(target.symbol, target.module)
        if last is not None:
            return text[: last.end()] + newline + statement + text[last.end() :]
        prologue = _PROLOGUE.match(text)
        offset = prologue.end() if prologue else 0
        return text[:offset] + statement + newline + text[offset:]


__all__ = ["PatternStrategy"]
