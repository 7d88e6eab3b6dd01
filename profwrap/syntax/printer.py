"""Regenerates source text from byte-range patches over the original file.

The parsed tree is never mutated. Rewrite rules describe their change as
``Patch`` objects against the original bytes, and the printer splices them in,
so everything outside the patched ranges (comments, blank lines, indentation)
comes back exactly as it was read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence


@dataclass(frozen=True)
class Patch:
    """Replace ``source[start:end]`` (byte offsets) with ``text``."""

    start: int
    end: int
    text: str

    @classmethod
    def insert(cls, offset: int, text: str) -> "Patch":
        return cls(offset, offset, text)

    @classmethod
    def delete(cls, start: int, end: int) -> "Patch":
        return cls(start, end, "")


class PatchConflictError(ValueError):
    """Raised when two patches rewrite overlapping ranges."""


class SourcePrinter:
    """Formats generated snippets and applies patches."""

    def __init__(self, quote: str = "'") -> None:
        if quote not in {"'", '"'}:
            raise ValueError(f"Unsupported quote character: {quote!r}")
        self.quote = quote

    @staticmethod
    def newline_for(text: str) -> str:
        return "\r\n" if "\r\n" in text else "\n"

    def string_literal(self, value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace(self.quote, f"\\{self.quote}")
        return f"{self.quote}{escaped}{self.quote}"

    def wrap_call(self, symbol: str, expression: str, name: str) -> str:
        return f"{symbol}({expression}, {self.string_literal(name)})"

    def default_export(self, symbol: str, name: str) -> str:
        return f"export default {self.wrap_call(symbol, name, name)};"

    def named_export(self, symbol: str, name: str) -> str:
        return f"export const {name} = {self.wrap_call(symbol, name, name)};"

    def import_statement(self, symbol: str, module: str) -> str:
        return f"import {{ {symbol} }} from {self.string_literal(module)};"

    def render(self, source_bytes: bytes, patches: Sequence[Patch]) -> str:
        """Apply ``patches`` to ``source_bytes`` and return the new text.

        Insertions sharing an offset keep the order they were given in and
        land before a replacement starting at that same offset.
        """
        ordered: List[Patch] = [
            patch
            for _, patch in sorted(
                enumerate(patches),
                key=lambda item: (item[1].start, item[1].end > item[1].start, item[0]),
            )
        ]
        chunks: List[bytes] = []
        cursor = 0
        for patch in ordered:
            if patch.start < cursor or patch.end < patch.start or patch.end > len(source_bytes):
                raise PatchConflictError(f"Patch {patch.start}:{patch.end} overlaps a previous edit")
            chunks.append(source_bytes[cursor : patch.start])
            chunks.append(patch.text.encode("utf-8"))
            cursor = patch.end
        chunks.append(source_bytes[cursor:])
        return b"".join(chunks).decode("utf-8")


__all__ = ["Patch", "PatchConflictError", "SourcePrinter"]
