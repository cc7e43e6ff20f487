"""Syntax-aware extraction of top-level declarations.

A structural splitter turns a file's text into the literal source of its
top-level statements, or reports that it cannot (``None``). The chunker only
depends on the ``StructuralSplitter`` protocol, so any parser front end can be
plugged in. Python goes through the stdlib ``ast`` module, JavaScript and
TypeScript through tree-sitter grammars.
"""

from __future__ import annotations

import ast
import io
import warnings
from typing import TYPE_CHECKING, Protocol

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser

if TYPE_CHECKING:
    from pathlib import Path


class StructuralSplitter(Protocol):
    """Callable contract used by the chunker."""

    def split(self, text: str) -> list[str] | None:
        """Return the top-level declarations of ``text``, or None when unavailable."""
        ...


class NullSplitter:
    """Splitter for languages without a parser front end. Always unavailable."""

    def split(self, text: str) -> list[str] | None:  # noqa: ARG002, PLR6301
        return None


class PythonAstSplitter:
    """Split Python source on top-level statements using the stdlib ``ast`` module.

    Each declaration owns the comment and blank lines above it, so decorators
    stay with what they decorate and no text is lost. Statements sharing a line
    (``import os; import sys``) end up in the same declaration. Source that does
    not parse is reported as unavailable so the line heuristic takes over.
    """

    def split(self, text: str) -> list[str] | None:  # noqa: PLR6301
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", SyntaxWarning)
                tree = ast.parse(text)
        except (SyntaxError, ValueError, RecursionError):
            return None
        if not tree.body:
            return []

        # Break lines where the tokenizer does: \n, \r\n and \r, never on form feeds.
        lines = io.StringIO(text, newline="").readlines()
        declarations: list[str] = []
        consumed = 0
        for node in tree.body:
            end = node.end_lineno or node.lineno
            if end <= consumed:
                continue
            segment = "".join(lines[consumed:end])
            consumed = end
            if segment.strip():
                declarations.append(segment)
        trailer = "".join(lines[consumed:])
        if trailer.strip():
            declarations.append(trailer)
        return declarations


class TreeSitterSplitter:
    """Split source on the top-level children of a tree-sitter syntax tree.

    Comment nodes are attached to the declaration that follows them. A tree
    with syntax errors is reported as unavailable.

    Args:
        language (Language): the tree-sitter grammar to parse with
    """

    def __init__(self, language: Language) -> None:
        self.parser = Parser(language)

    def split(self, text: str) -> list[str] | None:
        source = text.encode("utf-8")
        root = self.parser.parse(source).root_node
        if root.has_error:
            return None

        declarations: list[str] = []
        consumed = 0
        for node in root.children:
            if node.type == "comment" or node.end_byte <= consumed:
                continue
            segment = source[consumed : node.end_byte].decode("utf-8")
            consumed = node.end_byte
            if segment.strip():
                declarations.append(segment)
        trailer = source[consumed:].decode("utf-8")
        if trailer.strip():
            declarations.append(trailer)
        return declarations


_JAVASCRIPT = TreeSitterSplitter(Language(tree_sitter_javascript.language()))

_SPLITTERS: dict[str, StructuralSplitter] = {
    ".py": PythonAstSplitter(),
    ".js": _JAVASCRIPT,
    ".jsx": _JAVASCRIPT,
    ".mjs": _JAVASCRIPT,
    ".cjs": _JAVASCRIPT,
    ".ts": TreeSitterSplitter(Language(tree_sitter_typescript.language_typescript())),
    ".tsx": TreeSitterSplitter(Language(tree_sitter_typescript.language_tsx())),
}

NULL_SPLITTER = NullSplitter()


def splitter_for(path: Path) -> StructuralSplitter:
    """Pick the structural splitter for a file based on its extension.

    Args:
        path (Path): the file about to be chunked

    Returns:
        StructuralSplitter: a parser-backed splitter, or the null splitter
    """
    return _SPLITTERS.get(path.suffix.lower(), NULL_SPLITTER)
