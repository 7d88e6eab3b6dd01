from __future__ import annotations

import pytest

from profwrap.models import Dialect
from profwrap.strategies.detector import extends_base_class
from profwrap.syntax.nodes import callee_name, reference_name, unwrap
from profwrap.syntax.parser import SourceParser, dialect_for


@pytest.mark.parametrize(
    ("file_name", "dialect"),
    [
        ("Screen.tsx", Dialect(typed=True, markup=True)),
        ("api.ts", Dialect(typed=True, markup=False)),
        ("App.jsx", Dialect(typed=False, markup=True)),
        ("App.js", Dialect(typed=False, markup=True)),
        ("Card.TSX", Dialect(typed=True, markup=True)),
        ("notes.vue", Dialect(typed=True, markup=True)),
    ],
)
def test_dialect_for(file_name: str, dialect: Dialect) -> None:
    assert dialect_for(file_name) == dialect


def test_clean_parse_has_no_errors() -> None:
    parsed = SourceParser().parse("export const Box = () => <View />;\n", "Box.tsx")

    assert parsed.oversize is False
    assert parsed.has_errors is False
    assert parsed.root is not None
    assert parsed.root.type == "program"


def test_broken_parse_reports_errors() -> None:
    parsed = SourceParser().parse("export const Box = () => <View>;\n", "Box.tsx")

    assert parsed.has_errors is True


def test_typescript_cast_parses_in_ts_files() -> None:
    parsed = SourceParser().parse("const size = <number>raw;\n", "size.ts")

    assert parsed.has_errors is False


def test_oversize_input_is_not_parsed() -> None:
    parsed = SourceParser(max_file_bytes=10).parse("export const Box = 1;\n", "Box.tsx")

    assert parsed.oversize is True
    assert parsed.tree is None
    assert parsed.root is None
    assert parsed.has_errors is True


def test_node_text_uses_byte_offsets() -> None:
    parsed = SourceParser().parse("const label = 'héllo';\nexport const Box = () => <Text>ü</Text>;\n", "Box.tsx")
    statement = parsed.root.named_children[-1]

    assert parsed.node_text(statement) == "export const Box = () => <Text>ü</Text>;"


def test_node_helpers() -> None:
    parsed = SourceParser().parse("const A = (React.memo(Inner) as any);\nclass B extends ui.Base {}\n", "a.tsx")
    declarator = parsed.root.named_children[0].named_children[0]
    call = unwrap(declarator.child_by_field_name("value"))
    class_node = parsed.root.named_children[1]

    assert call.type == "call_expression"
    assert callee_name(call) == "memo"
    assert reference_name(call.child_by_field_name("function")) == "memo"
    assert extends_base_class(class_node, ["Base"]) is True
    assert extends_base_class(class_node, ["Component"]) is False
