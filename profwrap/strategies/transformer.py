"""Rewrites a named component export so it is routed through a wrapper call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from tree_sitter import Node

from ..config import DEFAULT_COMPONENT_HELPERS
from ..logging import file_logger, get_logger
from ..models import DeclarationKind, ExportKind, ImportTarget, TransformResult
from ..syntax.nodes import (
    CLASS_DECLARATIONS,
    FUNCTION_DECLARATIONS,
    FUNCTION_EXPRESSIONS,
    callee_name,
    declaration_name,
    has_keyword,
    is_call_to,
    iter_declarators,
    text_of,
    unwrap,
)
from ..syntax.parser import ParsedSource
from ..syntax.printer import Patch, SourcePrinter
from .detector import ComponentDetector, ExportedDeclaration

_logger = get_logger("transformer")

_NAMED_DEFAULT_VALUES = frozenset({"function_expression", "function", "class"})
_EXPORT_KEYWORDS = ("export", "default")
_TRAILING_BLANKS = b" \t"


@dataclass(frozen=True)
class ImportState:
    """What the module's top-level imports say about the wrapper symbol."""

    has_binding: bool
    insertion_offset: int
    after_existing: bool


def scan_imports(root: Node, symbol: str) -> ImportState:
    """Scan top-level imports once for a value binding of ``symbol``.

    With no imports the insertion point skips a hash-bang line and a directive
    prologue such as ``'use client';``.
    """
    has_binding = False
    last_import: Optional[Node] = None
    for statement in root.named_children:
        if statement.type != "import_statement":
            continue
        last_import = statement
        if not has_binding and not has_keyword(statement, "type"):
            has_binding = symbol in _imported_bindings(statement)

    if last_import is not None:
        return ImportState(has_binding, _end_of_line(last_import), True)

    offset = 0
    for child in root.named_children:
        if child.type == "hash_bang_line" or _is_directive(child):
            offset = child.end_byte
            continue
        if child.type == "comment":
            continue
        break
    return ImportState(has_binding, offset, offset > 0)


def _end_of_line(statement: Node) -> int:
    """End offset of ``statement`` including comments trailing it on its last line."""
    offset = statement.end_byte
    row = statement.end_point[0]
    sibling = statement.next_sibling
    while sibling is not None and sibling.type == "comment" and sibling.start_point[0] == row:
        offset = sibling.end_byte
        row = sibling.end_point[0]
        sibling = sibling.next_sibling
    return offset


def _imported_bindings(statement: Node) -> List[str]:
    names: List[str] = []
    for clause in statement.named_children:
        if clause.type != "import_clause":
            continue
        for item in clause.named_children:
            if item.type == "identifier":
                names.append(text_of(item))
            elif item.type == "namespace_import":
                names.extend(text_of(child) for child in item.named_children if child.type == "identifier")
            elif item.type == "named_imports":
                for specifier in item.named_children:
                    if specifier.type != "import_specifier" or has_keyword(specifier, "type"):
                        continue
                    local = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                    names.append(text_of(local))
    return names


def _is_directive(node: Node) -> bool:
    if node.type != "expression_statement":
        return False
    children = [child for child in node.named_children if child.type != "comment"]
    return len(children) == 1 and children[0].type == "string"


@dataclass
class _Rewrite:
    parsed: ParsedSource
    name: str
    symbol: str
    newline: str
    overloads: List[Node] = field(default_factory=list)


RewriteRule = Callable[[_Rewrite, Node], Optional[List[Patch]]]


class ComponentTransformer:
    """Produces byte patches that wrap one component, then prints them.

    Each supported export shape has its own rule. A rule only fires when the
    matched declaration passes the detector's classification, so names that
    detection would never report are left alone. A value that already is a
    call to the wrapper symbol is skipped too, which makes repeated runs over
    the same file a no-op.
    """

    def __init__(
        self,
        printer: SourcePrinter | None = None,
        component_helpers: Sequence[str] = DEFAULT_COMPONENT_HELPERS,
        detector: ComponentDetector | None = None,
    ) -> None:
        self.printer = printer or SourcePrinter()
        self.component_helpers = frozenset(component_helpers)
        self.detector = detector or ComponentDetector(component_helpers=component_helpers)
        self.rules: Tuple[Tuple[str, RewriteRule], ...] = (
            ("default-declaration", self._wrap_default_declaration),
            ("default-identifier", self._wrap_default_identifier),
            ("named-variable", self._wrap_named_variable),
            ("named-function", self._wrap_named_function),
        )

    def transform(
        self, parsed: ParsedSource, component_name: str, target: ImportTarget
    ) -> TransformResult:
        root = parsed.root
        if root is None:
            return TransformResult(success=False, strategy="syntax-tree", reason="unparsed")

        log = file_logger(_logger, parsed.file_name)
        imports = scan_imports(root, target.symbol)
        rewrite = _Rewrite(
            parsed=parsed,
            name=component_name,
            symbol=target.symbol,
            newline=self.printer.newline_for(parsed.text),
            overloads=_overload_signatures(root, component_name),
        )

        patches: List[Patch] = []
        wrapped: List[str] = []
        for statement in root.named_children:
            if statement.type != "export_statement":
                continue
            for rule_name, rule in self.rules:
                rule_patches = rule(rewrite, statement)
                if rule_patches:
                    log.debug("Wrapping %s via %s", component_name, rule_name)
                    patches.extend(rule_patches)
                    wrapped.append(rule_name)
                    break

        if not patches:
            log.info("No unwrapped component named %s", component_name)
            return TransformResult(success=False, strategy="syntax-tree", reason="no-match")

        if not imports.has_binding:
            statement = self.printer.import_statement(target.symbol, target.module)
            if imports.after_existing:
                patches.append(Patch.insert(imports.insertion_offset, rewrite.newline + statement))
            else:
                patches.append(Patch.insert(imports.insertion_offset, statement + rewrite.newline))

        source = self.printer.render(parsed.source_bytes, patches)
        if source == parsed.text:
            return TransformResult(success=False, strategy="syntax-tree", reason="unchanged")
        return TransformResult(success=True, source=source, strategy="syntax-tree", wrapped=wrapped)

    def is_likely_component(self, node: Optional[Node]) -> bool:
        node = unwrap(node)
        if node is None:
            return False
        if node.type in FUNCTION_EXPRESSIONS:
            return True
        return node.type == "call_expression" and callee_name(node) in self.component_helpers

    def _is_component(
        self, name: str, kind: DeclarationKind, export_kind: ExportKind, node: Optional[Node]
    ) -> bool:
        return self.detector.classify(ExportedDeclaration(name, kind, export_kind, node))

    def _wrap_default_declaration(self, rewrite: _Rewrite, statement: Node) -> Optional[List[Patch]]:
        """``export default function Name() {}`` / ``export default class Name {}``.

        The declaration keeps its body and loses the ``export default``
        keywords; the wrapped default export follows it.
        """
        if not has_keyword(statement, "default"):
            return None
        declaration = statement.child_by_field_name("declaration")
        if declaration is None:
            value = statement.child_by_field_name("value")
            if value is None or value.type not in _NAMED_DEFAULT_VALUES:
                return None
            declaration = value
        if declaration.type not in FUNCTION_DECLARATIONS | CLASS_DECLARATIONS | _NAMED_DEFAULT_VALUES:
            return None
        if declaration_name(declaration) != rewrite.name:
            return None
        kind = DeclarationKind.CLASS if declaration.type in CLASS_DECLARATIONS else DeclarationKind.FUNCTION
        if not self._is_component(rewrite.name, kind, ExportKind.DEFAULT, declaration):
            return None
        return _export_keyword_deletions(rewrite.parsed.source_bytes, statement) + [
            Patch.insert(
                statement.end_byte,
                rewrite.newline + self.printer.default_export(rewrite.symbol, rewrite.name),
            ),
        ]

    def _wrap_default_identifier(self, rewrite: _Rewrite, statement: Node) -> Optional[List[Patch]]:
        """``export default Name;`` becomes ``export default wrap(Name, 'Name');``."""
        if not has_keyword(statement, "default") or statement.child_by_field_name("declaration"):
            return None
        value = statement.child_by_field_name("value")
        if value is None or is_call_to(value, rewrite.symbol):
            return None
        reference = unwrap(value)
        if reference is None or reference.type != "identifier" or text_of(reference) != rewrite.name:
            return None
        if not self._is_component(rewrite.name, DeclarationKind.REEXPORT, ExportKind.DEFAULT, None):
            return None
        return [
            Patch(
                value.start_byte,
                value.end_byte,
                self.printer.wrap_call(rewrite.symbol, rewrite.name, rewrite.name),
            )
        ]

    def _wrap_named_variable(self, rewrite: _Rewrite, statement: Node) -> Optional[List[Patch]]:
        """``export const Name = () => ...`` gets its initializer wrapped in place."""
        if has_keyword(statement, "default"):
            return None
        declaration = statement.child_by_field_name("declaration")
        if declaration is None:
            return None
        patches: List[Patch] = []
        for declarator in iter_declarators(declaration):
            if text_of(declarator.child_by_field_name("name")) != rewrite.name:
                continue
            value = declarator.child_by_field_name("value")
            if value is None or is_call_to(value, rewrite.symbol):
                continue
            if not self.is_likely_component(value):
                continue
            if not self._is_component(rewrite.name, DeclarationKind.VARIABLE, ExportKind.NAMED, value):
                continue
            expression = rewrite.parsed.node_text(value)
            patches.append(
                Patch(
                    value.start_byte,
                    value.end_byte,
                    self.printer.wrap_call(rewrite.symbol, expression, rewrite.name),
                )
            )
        return patches or None

    def _wrap_named_function(self, rewrite: _Rewrite, statement: Node) -> Optional[List[Patch]]:
        """``export function Name() {}`` cannot be wrapped in place.

        The function, along with any exported overload signatures, is demoted
        to a plain declaration and the wrapped export is placed right after
        it, where ``Name`` is already in scope.
        """
        if has_keyword(statement, "default"):
            return None
        declaration = statement.child_by_field_name("declaration")
        if declaration is None or declaration.type not in FUNCTION_DECLARATIONS:
            return None
        if declaration_name(declaration) != rewrite.name:
            return None
        if not self._is_component(rewrite.name, DeclarationKind.FUNCTION, ExportKind.NAMED, declaration):
            return None
        source_bytes = rewrite.parsed.source_bytes
        patches: List[Patch] = []
        for overload in rewrite.overloads:
            patches.extend(_export_keyword_deletions(source_bytes, overload))
        patches.extend(_export_keyword_deletions(source_bytes, statement))
        patches.append(
            Patch.insert(
                statement.end_byte,
                rewrite.newline + self.printer.named_export(rewrite.symbol, rewrite.name),
            )
        )
        return patches


def _overload_signatures(root: Node, name: str) -> List[Node]:
    """Exported ``function Name(...): T;`` signatures preceding an implementation."""
    found: List[Node] = []
    for statement in root.named_children:
        if statement.type != "export_statement" or has_keyword(statement, "default"):
            continue
        declaration = statement.child_by_field_name("declaration")
        if declaration is not None and declaration.type == "function_signature":
            if declaration_name(declaration) == name:
                found.append(statement)
    return found


def _export_keyword_deletions(source_bytes: bytes, statement: Node) -> List[Patch]:
    """Delete the ``export`` / ``default`` tokens and the blanks after each.

    Comments between the keywords and the declaration stay in place.
    """
    patches: List[Patch] = []
    for child in statement.children:
        if child.is_named or child.type not in _EXPORT_KEYWORDS:
            continue
        end = child.end_byte
        while end < len(source_bytes) and source_bytes[end] in _TRAILING_BLANKS:
            end += 1
        patches.append(Patch.delete(child.start_byte, end))
    return patches


__all__ = ["ComponentTransformer", "ImportState", "scan_imports"]
