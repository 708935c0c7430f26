"""Markdown front-end and path indexing."""

from .parser import MarkdownParser, MarkdownNode
from .slug import slugify, code_slug, SlugCounter
from .indexer import ASTIndex, LineTable, build_index
from .sections import body_span, section_body, is_section_empty, empty_sections

__all__ = [
    "MarkdownParser", "MarkdownNode",
    "slugify", "code_slug", "SlugCounter",
    "ASTIndex", "LineTable", "build_index",
    "body_span", "section_body", "is_section_empty", "empty_sections",
]
