"""Small helpers over tree-sitter JavaScript / TypeScript nodes."""

from __future__ import annotations

from typing import Iterator, Optional

from tree_sitter import Node

# ``function`` is the pre-0.21 grammar name of ``function_expression``.
FUNCTION_EXPRESSIONS = frozenset({"function_expression", "function", "arrow_function"})
FUNCTION_DECLARATIONS = frozenset({"function_declaration"})
CLASS_DECLARATIONS = frozenset({"class_declaration", "abstract_class_declaration", "class"})

# Bodies a return-statement scan must not descend into.
SCOPE_BOUNDARIES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "arrow_function",
        "generator_function",
        "generator_function_declaration",
        "method_definition",
        "class_declaration",
        "abstract_class_declaration",
        "class",
        "class_body",
    }
)

JSX_NODES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})

_TRANSPARENT_WRAPPERS = frozenset(
    {"parenthesized_expression", "as_expression", "satisfies_expression", "non_null_expression"}
)


def text_of(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def has_keyword(node: Node, keyword: str) -> bool:
    """True when ``node`` has an anonymous child token equal to ``keyword``."""
    return any(not child.is_named and child.type == keyword for child in node.children)


def unwrap(node: Optional[Node]) -> Optional[Node]:
    """Strip parentheses and type-only wrappers around an expression."""
    while node is not None and node.type in _TRANSPARENT_WRAPPERS:
        inner = node.child_by_field_name("expression")
        if inner is None:
            inner = next((child for child in node.named_children if child.type != "comment"), None)
        node = inner
    return node


def callee_name(call: Node) -> Optional[str]:
    """Return ``memo`` for both ``memo(...)`` and ``React.memo(...)``."""
    if call.type != "call_expression":
        return None
    function = unwrap(call.child_by_field_name("function"))
    if function is None:
        return None
    if function.type == "identifier":
        return text_of(function)
    if function.type == "member_expression":
        prop = function.child_by_field_name("property")
        return text_of(prop) or None
    return None


def reference_name(node: Optional[Node]) -> Optional[str]:
    """Return the trailing name of an identifier or ``a.b.C`` member chain."""
    node = unwrap(node)
    if node is None:
        return None
    if node.type in {"identifier", "type_identifier"}:
        return text_of(node)
    if node.type in {"member_expression", "nested_identifier"}:
        prop = node.child_by_field_name("property")
        if prop is None and node.named_children:
            prop = node.named_children[-1]
        return text_of(prop) or None
    return None


def declaration_name(node: Node) -> Optional[str]:
    name = node.child_by_field_name("name")
    return text_of(name) or None


def iter_declarators(declaration: Node) -> Iterator[Node]:
    """Yield the ``variable_declarator`` children of a const/let/var statement."""
    if declaration.type not in {"lexical_declaration", "variable_declaration"}:
        return
    for child in declaration.named_children:
        if child.type == "variable_declarator":
            yield child


def is_call_to(node: Optional[Node], symbol: str) -> bool:
    node = unwrap(node)
    return node is not None and node.type == "call_expression" and callee_name(node) == symbol


__all__ = [
    "CLASS_DECLARATIONS",
    "FUNCTION_DECLARATIONS",
    "FUNCTION_EXPRESSIONS",
    "JSX_NODES",
    "SCOPE_BOUNDARIES",
    "callee_name",
    "declaration_name",
    "has_keyword",
    "is_call_to",
    "iter_declarators",
    "reference_name",
    "text_of",
    "unwrap",
]
