"""
Selector resolver — turns a semantic path or an explicit byte range into a
concrete span of one text snapshot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import RangeOutOfBounds, SelectorMiss
from ..markdown.indexer import ASTIndex
from ..markdown.slug import code_slug
from ..types import Path, Selector, Span, join_path

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """The outcome of resolving a selector.

    For the introspection selector ``index_view`` holds the serialized
    index and ``span`` is the zero-width span at the start of the text.
    """
    method: str  # "introspection"|"index"|"range"
    span: Span
    text: str = ""
    path: Path = ()
    index_view: Optional[str] = None


def effective_path(selector: Selector) -> Path:
    """Path looked up in the index: ``path`` plus the code slug of ``field``."""
    if selector.field:
        return selector.path + (code_slug(selector.field),)
    return selector.path


def slice_bytes(data: bytes, span: Span) -> str:
    """Decode the bytes of *span*; partial UTF-8 sequences become U+FFFD."""
    return data[span.start:span.end].decode("utf-8", errors="replace")


def check_bounds(start: int, end: int, length: int) -> Span:
    """Return ``Span(start, end)`` if ``0 <= start <= end <= length``."""
    if start < 0 or end > length or end < start:
        raise RangeOutOfBounds(start, end, length)
    return Span(start, end)


def resolve(index: ASTIndex, selector: Selector, text: str) -> Resolution:
    """Resolve *selector* against *index*, built from exactly *text*.

    Resolution order, first match wins:

    1. ``("*",)`` → serialized view of the whole index
    2. effective path present in the index → its span
    3. explicit byte range → validated against the text length
    4. otherwise → :class:`SelectorMiss`

    Raises
    ------
    SelectorMiss
        If nothing matches.
    RangeOutOfBounds
        If the chosen span does not fit inside *text*.
    """
    if selector.is_introspection:
        logger.debug("Resolved introspection selector (%d entries)", len(index))
        return Resolution(
            method="introspection",
            span=Span(0, 0),
            path=selector.path,
            index_view=index.to_json(),
        )

    data = text.encode("utf-8")
    path = effective_path(selector)

    span = index.get(path)
    if span is not None:
        check_bounds(span.start, span.end, len(data))
        logger.debug("Resolved %r via index to [%d, %d)", join_path(path), span.start, span.end)
        return Resolution(method="index", span=span, text=slice_bytes(data, span), path=path)

    if selector.range is not None:
        span = check_bounds(*selector.range, len(data))
        logger.debug(
            "Path %r not indexed, using explicit range [%d, %d)",
            join_path(path), span.start, span.end,
        )
        return Resolution(method="range", span=span, text=slice_bytes(data, span), path=path)

    raise SelectorMiss(join_path(path))
