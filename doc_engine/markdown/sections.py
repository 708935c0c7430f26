"""
Section-body queries over an :class:`ASTIndex`.

A heading's section span starts at the heading line; its *body* starts
where the heading declaration ends.  These helpers answer "what is under
this heading" and "is this section empty" without re-parsing.
"""

from __future__ import annotations

from typing import Optional

from ..types import Path, Span
from .indexer import ASTIndex, LineTable


def body_span(index: ASTIndex, path: Path, text: str) -> Optional[Span]:
    """Return the span of a heading section minus its declaration line.

    Returns None when *path* is not a heading path of *index*.
    """
    path = tuple(path)
    declaration = index.heading_ranges.get(path)
    span = index.spans.get(path)
    if declaration is None or span is None:
        return None
    start = LineTable(text).offset(declaration.end)
    start = min(max(start, span.start), span.end)
    return Span(start, span.end)


def section_body(index: ASTIndex, path: Path, text: str) -> Optional[str]:
    span = body_span(index, path, text)
    if span is None:
        return None
    return text.encode("utf-8")[span.start:span.end].decode("utf-8", errors="replace")


def is_section_empty(index: ASTIndex, path: Path, text: str) -> bool:
    """True if the heading at *path* has only whitespace under it.

    Nested subsections count as content.
    """
    body = section_body(index, path, text)
    if body is None:
        raise KeyError(path)
    return not body.strip()


def empty_sections(index: ASTIndex, text: str) -> list[Path]:
    """Heading paths whose sections hold no content, in document order."""
    return [
        path for path, _span in index.entries()
        if path in index.heading_ranges and is_section_empty(index, path, text)
    ]
