"""Tests for section-body queries."""

import pytest

from doc_engine.markdown.indexer import build_index
from doc_engine.markdown.sections import (
    body_span, empty_sections, is_section_empty, section_body,
)
from doc_engine.types import Span


TEXT = "# Intro\nHello\n# Empty\n# Parent\n## Child\nx\n"


@pytest.fixture
def index(outline):
    return build_index(outline(TEXT), TEXT)


class TestSectionBody:
    def test_body_excludes_heading_line(self, index):
        assert body_span(index, ("intro",), TEXT) == Span(8, 14)
        assert section_body(index, ("intro",), TEXT) == "Hello\n"

    def test_unknown_path(self, index):
        assert body_span(index, ("nope",), TEXT) is None
        assert section_body(index, ("nope",), TEXT) is None

    def test_subsections_are_body_content(self, index):
        assert section_body(index, ("parent",), TEXT) == "## Child\nx\n"


class TestEmptySections:
    def test_heading_followed_by_sibling_is_empty(self, index):
        assert is_section_empty(index, ("empty",), TEXT)

    def test_section_with_text_is_not_empty(self, index):
        assert not is_section_empty(index, ("intro",), TEXT)

    def test_parent_of_subsection_is_not_empty(self, index):
        assert not is_section_empty(index, ("parent",), TEXT)

    def test_non_heading_path_raises(self, index):
        with pytest.raises(KeyError):
            is_section_empty(index, ("missing",), TEXT)

    def test_empty_sections_lists_all(self, outline):
        text = "# A\n# B\n\n   \n# C\nbody\n## D\n"
        idx = build_index(outline(text), text)
        assert empty_sections(idx, text) == [("a",), ("b",), ("c", "d")]
