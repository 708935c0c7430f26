"""
Edit applier — splices replacement text into a document at a byte span.

The span must come from resolving the selector against the *current*
stored text; a span computed against an older snapshot is meaningless.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..errors import InvalidEdit, RangeOutOfBounds
from ..types import Edit, EditOp, Span

logger = logging.getLogger(__name__)


def validate_edit(edit: Edit) -> None:
    """Reject operation/text mismatches before any splicing happens.

    ``delete`` must not carry text; ``insert`` and ``replace`` must.
    """
    if edit.op is EditOp.DELETE and edit.text is not None:
        raise InvalidEdit("delete does not take text")
    if edit.op in (EditOp.INSERT, EditOp.REPLACE) and edit.text is None:
        raise InvalidEdit(f"{edit.op.value} requires text")


def _on_char_boundary(data: bytes, pos: int) -> bool:
    # UTF-8 continuation bytes are 0b10xxxxxx
    return pos == len(data) or (data[pos] & 0xC0) != 0x80


def splice(text: str, span: Span, op: EditOp, replacement: Optional[str] = None) -> str:
    """Return the full new document text.

    - delete:  prefix + suffix
    - insert:  prefix + replacement + spanned bytes + suffix
    - replace: prefix + replacement + suffix

    ``insert`` keeps the spanned content after the new text; it is a
    zero-width insertion only when *span* itself is zero-width.  A span
    whose ends fall inside a multi-byte character is rejected.
    """
    edit = Edit(op=op, selector=None, text=replacement)  # type: ignore[arg-type]
    validate_edit(edit)
    op = edit.op

    data = text.encode("utf-8")
    if span.end > len(data):
        raise RangeOutOfBounds(span.start, span.end, len(data))
    if not (_on_char_boundary(data, span.start) and _on_char_boundary(data, span.end)):
        raise InvalidEdit(f"span [{span.start}, {span.end}) splits a UTF-8 character")

    prefix, body, suffix = data[:span.start], data[span.start:span.end], data[span.end:]
    if op is EditOp.DELETE:
        out = prefix + suffix
    elif op is EditOp.INSERT:
        out = prefix + replacement.encode("utf-8") + body + suffix
    else:
        out = prefix + replacement.encode("utf-8") + suffix

    logger.debug(
        "Spliced %s at [%d, %d): %d -> %d bytes",
        op.value, span.start, span.end, len(data), len(out),
    )
    return out.decode("utf-8")
