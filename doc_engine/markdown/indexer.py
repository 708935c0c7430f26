"""
AST indexer — derives the path → byte-span map of a Markdown document.

A single pre-order walk keeps a stack of open heading frames.  A heading
closes every open frame at its level or deeper (the section ends where the
next sibling-or-shallower heading starts) and opens its own.  Fenced code
blocks, and optionally paragraphs / list items / block quotes, are recorded
as leaves under the current heading path.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..types import IndexOptions, Path, SourcePosition, SourceRange, Span
from .parser import (
    BLOCK_QUOTE, CODE_BLOCK, HEADING, LIST_ITEM, PARAGRAPH, MarkdownNode,
)
from .slug import SlugCounter, code_slug, slugify

logger = logging.getLogger(__name__)

# Slug used when heading text normalizes to nothing ("# ***", "# 日本語")
EMPTY_HEADING_SLUG = "section"

_OPTIONAL_KINDS: dict[str, tuple[IndexOptions, str]] = {
    PARAGRAPH: (IndexOptions.PARAGRAPHS, "para"),
    LIST_ITEM: (IndexOptions.LIST_ITEMS, "li"),
    BLOCK_QUOTE: (IndexOptions.BLOCK_QUOTES, "quote"),
}


class LineTable:
    """Byte offset of the start of every ``\\n``-separated line of a text."""

    def __init__(self, text: str) -> None:
        data = text.encode("utf-8")
        self.length = len(data)
        self._starts = [0]
        pos = data.find(b"\n")
        while pos != -1:
            self._starts.append(pos + 1)
            pos = data.find(b"\n", pos + 1)

    def offset(self, position: SourcePosition) -> int:
        """Absolute byte offset of a 1-based (line, byte column) position.

        Positions past the end of the text clamp to its length.
        """
        line_idx = max(position.line - 1, 0)
        if line_idx >= len(self._starts):
            return self.length
        offset = self._starts[line_idx] + max(position.column - 1, 0)
        return min(offset, self.length)



@dataclass
class ASTIndex:
    """Path → span map for one text snapshot.

    ``heading_ranges`` holds, for every heading path, the source range of
    the heading declaration itself (not the whole section).
    """
    spans: dict[Path, Span] = field(default_factory=dict)
    heading_ranges: dict[Path, SourceRange] = field(default_factory=dict)
    text_length: int = 0

    def __getitem__(self, path: Path) -> Span:
        return self.spans[tuple(path)]

    def __contains__(self, path) -> bool:
        return tuple(path) in self.spans

    def __len__(self) -> int:
        return len(self.spans)

    def get(self, path, default: Optional[Span] = None) -> Optional[Span]:
        return self.spans.get(tuple(path), default)

    def entries(self) -> list[tuple[Path, Span]]:
        """All entries in document order (outer sections before inner)."""
        return sorted(
            self.spans.items(),
            key=lambda item: (item[1].start, -item[1].end, len(item[0])),
        )

    def to_json(self) -> str:
        return json.dumps([
            {"path": list(path), "start": span.start, "end": span.end}
            for path, span in self.entries()
        ])


@dataclass
class _Frame:
    level: int
    slug: str
    start: int
    declaration: SourceRange


class _IndexBuilder:
    def __init__(self, text: str, options: IndexOptions) -> None:
        self.lines = LineTable(text)
        self.options = options
        self.path: list[str] = []
        self.stack: list[_Frame] = []
        self.slugs = SlugCounter()
        self.index = ASTIndex(text_length=self.lines.length)

    def build(self, root: MarkdownNode) -> ASTIndex:
        self._visit(root)
        self._close_frames(0, self.lines.length)
        return self.index

    # ------------------------------------------------------------------

    def _visit(self, node: MarkdownNode) -> None:
        if node.kind == HEADING:
            self._visit_heading(node)
            return
        if node.kind == CODE_BLOCK:
            self._record_leaf(node, code_slug(node.language))
            return
        optional = _OPTIONAL_KINDS.get(node.kind)
        if optional is not None and optional[0] in self.options:
            self._record_leaf(node, optional[1])
        for child in node.children:
            self._visit(child)

    def _visit_heading(self, node: MarkdownNode) -> None:
        if node.range is None:
            return
        start = self.lines.offset(node.range.start)
        self._close_frames(node.level, start)
        base = slugify(node.text) or EMPTY_HEADING_SLUG
        slug = self.slugs.unique(tuple(self.path), base)
        self.path.append(slug)
        self.stack.append(_Frame(node.level, slug, start, node.range))

    def _record_leaf(self, node: MarkdownNode, base: str) -> None:
        if node.range is None:
            return
        start = self.lines.offset(node.range.start)
        end = max(self.lines.offset(node.range.end), start)
        parent = tuple(self.path)
        slug = self.slugs.unique(parent, base)
        self.index.spans[parent + (slug,)] = Span(start, end)

    def _close_frames(self, level: int, end: int) -> None:
        while self.stack and self.stack[-1].level >= level:
            frame = self.stack.pop()
            path = tuple(self.path)
            self.path.pop()
            self.index.spans[path] = Span(frame.start, max(end, frame.start))
            self.index.heading_ranges[path] = frame.declaration


def build_index(
    root: MarkdownNode,
    text: str,
    options: IndexOptions = IndexOptions.NONE,
) -> ASTIndex:
    """Build the :class:`ASTIndex` of *text* from its parsed tree *root*.

    Parameters
    ----------
    root:
        Document node returned by the parser for exactly this *text*.
    text:
        The source snapshot; spans are UTF-8 byte offsets into it.
    options:
        Extra node kinds to record beyond headings and fenced code blocks.
    """
    index = _IndexBuilder(text, options).build(root)
    logger.debug("Indexed %d paths over %d bytes", len(index), index.text_length)
    return index
