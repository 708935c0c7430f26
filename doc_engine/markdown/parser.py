"""
Tree-sitter Markdown front-end.

Parses raw text with the tree-sitter-markdown block grammar and adapts the
result to a small neutral tree (:class:`MarkdownNode`) whose source ranges
are 1-based line / 1-based byte column, the shape the indexer consumes.

Uses tree-sitter >= 0.22 API with the ``tree_sitter_markdown`` language
package.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..errors import ParseFailure
from ..types import SourceRange

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Neutral node tree
# ---------------------------------------------------------------------------

DOCUMENT = "document"
SECTION = "section"
HEADING = "heading"
CODE_BLOCK = "code_block"
PARAGRAPH = "paragraph"
LIST = "list"
LIST_ITEM = "list_item"
BLOCK_QUOTE = "block_quote"
OTHER = "other"


@dataclass
class MarkdownNode:
    """A block-level node with an optional source range.

    ``level`` and ``text`` are set for headings (``text`` is the plain
    heading text); ``language`` is set for fenced code blocks that declare
    one.
    """
    kind: str
    range: Optional[SourceRange] = None
    level: int = 0
    text: str = ""
    language: Optional[str] = None
    children: list["MarkdownNode"] = field(default_factory=list)

    def walk(self) -> Iterator["MarkdownNode"]:
        """Yield this node and its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


# tree-sitter node type → neutral kind
_KIND_MAP: dict[str, str] = {
    "document": DOCUMENT,
    "section": SECTION,
    "atx_heading": HEADING,
    "setext_heading": HEADING,
    "fenced_code_block": CODE_BLOCK,
    "paragraph": PARAGRAPH,
    "list": LIST,
    "list_item": LIST_ITEM,
    "block_quote": BLOCK_QUOTE,
}

# Nodes whose children carry nothing the indexer records
_LEAF_TYPES = {
    "atx_heading", "setext_heading", "fenced_code_block", "indented_code_block",
    "inline", "html_block", "thematic_break", "link_reference_definition",
    "pipe_table", "minus_metadata", "plus_metadata",
}

# ---------------------------------------------------------------------------
# Language lookup
# ---------------------------------------------------------------------------

_LANG_CACHE: dict[str, object] = {}
_PARSER_CACHE: dict[str, object] = {}


def _get_ts_language():
    """Return the tree_sitter.Language for the Markdown block grammar, or None."""
    if "markdown" in _LANG_CACHE:
        return _LANG_CACHE["markdown"]
    try:
        import tree_sitter as ts  # type: ignore
        import tree_sitter_markdown as m  # type: ignore
        lang_obj = ts.Language(m.language())
    except Exception as exc:
        logger.debug("Cannot load tree-sitter markdown grammar: %s", exc)
        return None
    _LANG_CACHE["markdown"] = lang_obj
    return lang_obj


def _get_ts_parser():
    """Return a cached tree-sitter Parser for Markdown, or None."""
    if "markdown" in _PARSER_CACHE:
        return _PARSER_CACHE["markdown"]
    lang_obj = _get_ts_language()
    if lang_obj is None:
        return None
    try:
        import tree_sitter as ts  # type: ignore
        parser = ts.Parser(lang_obj)
    except Exception as exc:
        logger.warning("Cannot create tree-sitter markdown parser: %s", exc)
        return None
    _PARSER_CACHE["markdown"] = parser
    return parser


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

_ATX_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_ATX_CLOSING_RE = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
_SETEXT_UNDERLINE_RE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_REF_LINK_RE = re.compile(r"\[([^\]]*)\]\[[^\]]*\]")
_ESCAPE_RE = re.compile(r"\\([!-/:-@\[-`{-~])")


def _text(node) -> str:
    """Decode a tree-sitter Node's text as UTF-8."""
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="replace") if node.text else ""


def plain_text(inline: str) -> str:
    """Strip the inline markup that would leak into a slug.

    Link and image destinations are dropped (their labels stay) and
    backslash escapes are resolved.  Emphasis and code markers are left
    alone: slugging removes them anyway.
    """
    out = _IMAGE_RE.sub(r"\1", inline)
    out = _LINK_RE.sub(r"\1", out)
    out = _REF_LINK_RE.sub(r"\1", out)
    out = _ESCAPE_RE.sub(r"\1", out)
    return out.strip()


def parse_atx_heading(raw: str) -> tuple[int, str]:
    """Return ``(level, plain_text)`` for an ATX heading line."""
    line = raw.split("\n", 1)[0].rstrip("\r")
    m = _ATX_RE.match(line)
    if not m:
        return 0, plain_text(line.lstrip(" #"))
    content = _ATX_CLOSING_RE.sub("", m.group(2) or "")
    return len(m.group(1)), plain_text(content)


def parse_setext_heading(raw: str) -> tuple[int, str]:
    """Return ``(level, plain_text)`` for a setext heading block."""
    lines = raw.rstrip("\n").split("\n")
    level = 1
    if lines and _SETEXT_UNDERLINE_RE.match(lines[-1]):
        level = 1 if lines[-1].strip().startswith("=") else 2
        lines = lines[:-1]
    return level, plain_text(" ".join(ln.strip() for ln in lines))


def _fence_language(ts_node) -> Optional[str]:
    """Extract the first word of a fenced block's info string, if any."""
    for child in ts_node.children:
        if child.type == "info_string":
            info = _text(child).strip()
            return info.split()[0] if info else None
    return None


def _source_range(ts_node) -> SourceRange:
    start, end = ts_node.start_point, ts_node.end_point
    return SourceRange.of(start[0] + 1, start[1] + 1, end[0] + 1, end[1] + 1)


# ---------------------------------------------------------------------------
# Tree adaptation
# ---------------------------------------------------------------------------

def _convert(ts_node) -> MarkdownNode:
    kind = _KIND_MAP.get(ts_node.type, OTHER)
    node = MarkdownNode(kind=kind, range=_source_range(ts_node))

    if ts_node.type == "atx_heading":
        node.level, node.text = parse_atx_heading(_text(ts_node))
    elif ts_node.type == "setext_heading":
        node.level, node.text = parse_setext_heading(_text(ts_node))
    elif ts_node.type == "fenced_code_block":
        node.language = _fence_language(ts_node)

    if ts_node.type not in _LEAF_TYPES:
        node.children = [_convert(c) for c in ts_node.children if c.is_named]
    return node


class MarkdownParser:
    """Markdown front-end satisfying the ``parse(text) -> MarkdownNode`` contract."""

    def parse(self, text: str) -> MarkdownNode:
        """Parse *text* and return the root ``document`` node.

        Raises
        ------
        ParseFailure
            If the tree-sitter grammar is unavailable or the parse itself
            fails.
        """
        ts_parser = _get_ts_parser()
        if ts_parser is None:
            raise ParseFailure("tree-sitter markdown grammar unavailable")
        try:
            tree = ts_parser.parse(text.encode("utf-8"))
        except Exception as exc:
            raise ParseFailure(f"Parse error: {exc}") from exc

        root = _convert(tree.root_node)
        root.kind = DOCUMENT
        return root
