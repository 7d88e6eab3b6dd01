"""Tree-sitter powered parsing of component source files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Dict, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from ..config import DEFAULT_MAX_FILE_BYTES
from ..models import Dialect

TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())
TYPESCRIPT_LANGUAGE = Language(tree_sitter_typescript.language_typescript())

_DIALECTS = {
    ".tsx": Dialect(typed=True, markup=True),
    ".ts": Dialect(typed=True, markup=False),
    ".mts": Dialect(typed=True, markup=False),
    ".cts": Dialect(typed=True, markup=False),
    ".jsx": Dialect(typed=False, markup=True),
    ".js": Dialect(typed=False, markup=True),
    ".mjs": Dialect(typed=False, markup=True),
    ".cjs": Dialect(typed=False, markup=True),
}


def dialect_for(file_name: str | PurePath) -> Dialect:
    """Return the dialect implied by a file's suffix.

    Plain ``.js`` files are treated as markup-enabled: React Native projects
    routinely keep JSX in them. Unknown suffixes get the most permissive
    dialect.
    """
    suffix = PurePath(file_name).suffix.lower()
    return _DIALECTS.get(suffix, Dialect(typed=True, markup=True))


@dataclass
class ParsedSource:
    """A parse owned by a single detect or transform call."""

    file_name: str
    text: str
    source_bytes: bytes
    dialect: Dialect
    tree: Optional[Tree]
    oversize: bool = False

    @property
    def root(self) -> Optional[Node]:
        return self.tree.root_node if self.tree is not None else None

    @property
    def has_errors(self) -> bool:
        return self.tree is None or self.tree.root_node.has_error

    def node_text(self, node: Node) -> str:
        return self.source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


class SourceParser:
    """Parses component sources with the grammar matching their dialect.

    Markup dialects use the TSX grammar (a superset of JavaScript with JSX);
    typed non-markup files use the plain TypeScript grammar so ``<T>value``
    casts keep parsing.
    """

    def __init__(self, max_file_bytes: int = DEFAULT_MAX_FILE_BYTES) -> None:
        self.max_file_bytes = max_file_bytes
        self._parsers: Dict[str, Parser] = {}

    def parse(self, text: str, file_name: str | PurePath) -> ParsedSource:
        dialect = dialect_for(file_name)
        source_bytes = text.encode("utf-8")
        if len(source_bytes) > self.max_file_bytes:
            return ParsedSource(
                file_name=str(file_name),
                text=text,
                source_bytes=source_bytes,
                dialect=dialect,
                tree=None,
                oversize=True,
            )
        tree = self._get_parser(dialect).parse(source_bytes)
        return ParsedSource(
            file_name=str(file_name),
            text=text,
            source_bytes=source_bytes,
            dialect=dialect,
            tree=tree,
        )

    def _get_parser(self, dialect: Dialect) -> Parser:
        key = "tsx" if dialect.markup else "typescript"
        parser = self._parsers.get(key)
        if parser is None:
            parser = Parser(TSX_LANGUAGE if dialect.markup else TYPESCRIPT_LANGUAGE)
            self._parsers[key] = parser
        return parser


__all__ = ["ParsedSource", "SourceParser", "dialect_for"]
