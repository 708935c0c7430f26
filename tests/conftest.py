"""
Shared fixtures.

``outline`` builds a flat document tree from the ATX headings and ```
fences of a text, with exact line ranges, so indexer and engine tests can
assert byte offsets without depending on the tree-sitter grammar.
"""

from __future__ import annotations

import os

import pytest

from doc_engine.markdown.parser import (
    CODE_BLOCK, DOCUMENT, HEADING, MarkdownNode, parse_atx_heading,
)
from doc_engine.types import SourceRange


def _outline(text: str) -> MarkdownNode:
    lines = text.split("\n")
    root = MarkdownNode(DOCUMENT, SourceRange.of(1, 1, len(lines), 1))
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("```"):
            info = line[3:].strip()
            j = i + 1
            while j < len(lines) and not lines[j].startswith("```"):
                j += 1
            # ends at the start of the line after the closing fence
            end_line = min(j, len(lines) - 1) + 2
            root.children.append(MarkdownNode(
                CODE_BLOCK, SourceRange.of(i + 1, 1, end_line, 1),
                language=info.split()[0] if info else None,
            ))
            i = j + 1
            continue
        if line.startswith("#"):
            level, title = parse_atx_heading(line)
            root.children.append(MarkdownNode(
                HEADING, SourceRange.of(i + 1, 1, i + 2, 1), level=level, text=title,
            ))
        i += 1
    return root


class OutlineParser:
    def __init__(self) -> None:
        self.calls = 0

    def parse(self, text: str) -> MarkdownNode:
        self.calls += 1
        return _outline(text)


@pytest.fixture
def outline():
    return _outline


@pytest.fixture
def outline_parser():
    return OutlineParser()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep DOCENGINE_* settings from the outer environment out of tests."""
    for key in list(os.environ):
        if key.startswith("DOCENGINE_"):
            monkeypatch.delenv(key, raising=False)
