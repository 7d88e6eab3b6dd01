"""Classifies exported declarations as UI components.

Classification is a pure function of one exported declaration. The heuristics
live in ``DEFAULT_RULES``, an ordered tuple of named predicates: gate rules
must all pass, and any one of the remaining rules accepts the declaration.
Detection favours recall: a false positive is harmless because the
transformer simply finds nothing to wrap, while a false negative leaves a
component unprofiled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from tree_sitter import Node

from ..config import DEFAULT_BASE_CLASSES, DEFAULT_COMPONENT_HELPERS
from ..logging import file_logger, get_logger
from ..models import ComponentCandidate, DeclarationKind, ExportKind
from ..syntax.nodes import (
    CLASS_DECLARATIONS,
    FUNCTION_DECLARATIONS,
    FUNCTION_EXPRESSIONS,
    JSX_NODES,
    SCOPE_BOUNDARIES,
    callee_name,
    declaration_name,
    has_keyword,
    iter_declarators,
    reference_name,
    text_of,
    unwrap,
)
from ..syntax.parser import ParsedSource

MAX_SCAN_DEPTH = 64

_LOGICAL_OPERATORS = frozenset({"&&", "||", "??"})

_logger = get_logger("detector")


@dataclass(frozen=True)
class ExportedDeclaration:
    """One exported binding and the node that defines its value.

    ``node`` is a function or class declaration, a variable initializer, or,
    for re-exports, whatever the local binding resolves to (``None`` when it
    does not resolve inside this file).
    """

    name: str
    kind: DeclarationKind
    export_kind: ExportKind
    node: Optional[Node]


@dataclass(frozen=True)
class DetectionContext:
    component_helpers: FrozenSet[str]
    base_classes: FrozenSet[str]
    max_depth: int = MAX_SCAN_DEPTH


@dataclass(frozen=True)
class DetectionRule:
    name: str
    predicate: Callable[[ExportedDeclaration, DetectionContext], bool]
    gate: bool = False


def has_component_name(decl: ExportedDeclaration, context: DetectionContext) -> bool:
    first = decl.name[:1]
    return first.isalpha() and first.isupper()


def is_default_reference(decl: ExportedDeclaration, context: DetectionContext) -> bool:
    # ``export default Screen`` cannot be inspected without resolving across
    # files, so the naming convention alone decides.
    return decl.kind is DeclarationKind.REEXPORT and decl.export_kind is ExportKind.DEFAULT


def is_markup_function(decl: ExportedDeclaration, context: DetectionContext) -> bool:
    node = decl.node
    if node is None or node.type not in FUNCTION_DECLARATIONS:
        return False
    return function_renders(node, context.max_depth)


def is_class_component(decl: ExportedDeclaration, context: DetectionContext) -> bool:
    node = unwrap(decl.node)
    if node is None or node.type not in CLASS_DECLARATIONS:
        return False
    return extends_base_class(node, context.base_classes) or defines_render(node)


def is_component_initializer(decl: ExportedDeclaration, context: DetectionContext) -> bool:
    node = unwrap(decl.node)
    if node is None:
        return False
    if node.type in FUNCTION_EXPRESSIONS:
        return function_renders(node, context.max_depth)
    if node.type == "call_expression":
        return callee_name(node) in context.component_helpers
    return False


DEFAULT_RULES: Tuple[DetectionRule, ...] = (
    DetectionRule("component-name", has_component_name, gate=True),
    DetectionRule("default-identifier", is_default_reference),
    DetectionRule("function-returns-markup", is_markup_function),
    DetectionRule("class-component", is_class_component),
    DetectionRule("component-initializer", is_component_initializer),
)


def is_markup(node: Optional[Node]) -> bool:
    """True for JSX elements, fragments and ``createElement`` calls."""
    node = unwrap(node)
    if node is None:
        return False
    if node.type in JSX_NODES:
        return True
    if node.type == "call_expression":
        return callee_name(node) == "createElement"
    if node.type == "ternary_expression":
        return is_markup(node.child_by_field_name("consequence")) or is_markup(
            node.child_by_field_name("alternative")
        )
    if node.type == "binary_expression":
        operator = node.child_by_field_name("operator")
        if operator is not None and operator.type in _LOGICAL_OPERATORS:
            return is_markup(node.child_by_field_name("left")) or is_markup(
                node.child_by_field_name("right")
            )
    return False


def function_renders(function: Node, max_depth: int = MAX_SCAN_DEPTH) -> bool:
    """Return True when ``function`` returns markup or has no return at all."""
    body = function.child_by_field_name("body")
    if body is None:
        return True
    if body.type != "statement_block":
        # Expression-bodied arrow: the expression is the return value.
        return is_markup(body)

    found_return = False
    stack: List[Tuple[Node, int]] = [(child, 1) for child in reversed(body.named_children)]
    while stack:
        node, depth = stack.pop()
        if node.type == "return_statement":
            found_return = True
            value = next((child for child in node.named_children if child.type != "comment"), None)
            if is_markup(value):
                return True
            continue
        if node.type in SCOPE_BOUNDARIES or depth >= max_depth:
            continue
        stack.extend((child, depth + 1) for child in reversed(node.named_children))
    return not found_return


def extends_base_class(class_node: Node, base_classes: Iterable[str]) -> bool:
    bases = set(base_classes)
    return any(reference_name(expr) in bases for expr in _superclass_expressions(class_node))


def defines_render(class_node: Node) -> bool:
    body = class_node.child_by_field_name("body")
    if body is None:
        return False
    for member in body.named_children:
        if member.type not in {"method_definition", "public_field_definition", "field_definition"}:
            continue
        name = member.child_by_field_name("name") or member.child_by_field_name("property")
        if text_of(name) == "render":
            return True
    return False


def _superclass_expressions(class_node: Node) -> Iterator[Node]:
    for child in class_node.named_children:
        if child.type != "class_heritage":
            continue
        clauses = [item for item in child.named_children if item.type == "extends_clause"]
        if clauses:
            for clause in clauses:
                yield from clause.children_by_field_name("value")
        else:
            yield from (item for item in child.named_children if item.type != "implements_clause")


def collect_exports(root: Node) -> List[ExportedDeclaration]:
    """Flatten the module's export surface into tagged declarations."""
    local = _local_bindings(root)
    exports: List[ExportedDeclaration] = []
    for statement in root.named_children:
        if statement.type != "export_statement" or has_keyword(statement, "type"):
            continue
        export_kind = ExportKind.DEFAULT if has_keyword(statement, "default") else ExportKind.NAMED
        declaration = statement.child_by_field_name("declaration")
        value = statement.child_by_field_name("value")

        if declaration is None and value is not None and export_kind is ExportKind.DEFAULT:
            value = unwrap(value)
            if value is not None and value.type == "identifier":
                name = text_of(value)
                exports.append(
                    ExportedDeclaration(name, DeclarationKind.REEXPORT, ExportKind.DEFAULT, local.get(name))
                )
                continue
            # ``export default function Name() {}`` may surface as a named expression.
            declaration = value

        if declaration is not None:
            exports.extend(_declared_exports(declaration, export_kind))
        elif statement.child_by_field_name("source") is None:
            exports.extend(_clause_exports(statement, local))
    return exports


def _declared_exports(declaration: Node, export_kind: ExportKind) -> Iterator[ExportedDeclaration]:
    if declaration.type in FUNCTION_DECLARATIONS or declaration.type in {"function_expression", "function"}:
        name = declaration_name(declaration)
        if name:
            yield ExportedDeclaration(name, DeclarationKind.FUNCTION, export_kind, declaration)
    elif declaration.type in CLASS_DECLARATIONS:
        name = declaration_name(declaration)
        if name:
            yield ExportedDeclaration(name, DeclarationKind.CLASS, export_kind, declaration)
    else:
        for declarator in iter_declarators(declaration):
            name_node = declarator.child_by_field_name("name")
            if name_node is None or name_node.type != "identifier":
                continue
            yield ExportedDeclaration(
                text_of(name_node),
                DeclarationKind.VARIABLE,
                export_kind,
                declarator.child_by_field_name("value"),
            )


def _clause_exports(statement: Node, local: Dict[str, Node]) -> Iterator[ExportedDeclaration]:
    for clause in statement.named_children:
        if clause.type != "export_clause":
            continue
        for specifier in clause.named_children:
            if specifier.type != "export_specifier" or has_keyword(specifier, "type"):
                continue
            local_name = text_of(specifier.child_by_field_name("name"))
            exported = text_of(specifier.child_by_field_name("alias")) or local_name
            if not local_name:
                continue
            if exported == "default":
                yield ExportedDeclaration(
                    local_name, DeclarationKind.REEXPORT, ExportKind.DEFAULT, local.get(local_name)
                )
            else:
                yield ExportedDeclaration(
                    exported, DeclarationKind.REEXPORT, ExportKind.NAMED, local.get(local_name)
                )


def _local_bindings(root: Node) -> Dict[str, Node]:
    bindings: Dict[str, Node] = {}
    for statement in root.named_children:
        target = statement
        if statement.type == "export_statement":
            target = statement.child_by_field_name("declaration")
            if target is None:
                continue
        if target.type in FUNCTION_DECLARATIONS or target.type in CLASS_DECLARATIONS:
            name = declaration_name(target)
            if name:
                bindings.setdefault(name, target)
            continue
        for declarator in iter_declarators(target):
            name_node = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name_node is not None and name_node.type == "identifier" and value is not None:
                bindings.setdefault(text_of(name_node), value)
    return bindings


class ComponentDetector:
    """Runs the detection rules over a parsed module's exports."""

    def __init__(
        self,
        component_helpers: Sequence[str] = DEFAULT_COMPONENT_HELPERS,
        base_classes: Sequence[str] = DEFAULT_BASE_CLASSES,
        rules: Sequence[DetectionRule] = DEFAULT_RULES,
        max_depth: int = MAX_SCAN_DEPTH,
    ) -> None:
        self.context = DetectionContext(
            component_helpers=frozenset(component_helpers),
            base_classes=frozenset(base_classes),
            max_depth=max_depth,
        )
        self.rules = tuple(rules)

    def classify(self, decl: ExportedDeclaration) -> bool:
        for rule in self.rules:
            if rule.gate and not rule.predicate(decl, self.context):
                _logger.debug("%s rejected by %s", decl.name, rule.name)
                return False
        for rule in self.rules:
            if not rule.gate and rule.predicate(decl, self.context):
                _logger.debug("%s accepted by %s", decl.name, rule.name)
                return True
        return False

    def candidates(self, parsed: ParsedSource) -> List[ComponentCandidate]:
        root = parsed.root
        if root is None:
            return []
        seen: set[str] = set()
        found: List[ComponentCandidate] = []
        for decl in collect_exports(root):
            if decl.name in seen or not self.classify(decl):
                continue
            seen.add(decl.name)
            found.append(ComponentCandidate(decl.name, decl.kind, decl.export_kind))
        file_logger(_logger, parsed.file_name).debug("Detected %d component(s)", len(found))
        return found


__all__ = [
    "ComponentDetector",
    "DEFAULT_RULES",
    "DetectionContext",
    "DetectionRule",
    "ExportedDeclaration",
    "collect_exports",
    "function_renders",
    "is_markup",
]
