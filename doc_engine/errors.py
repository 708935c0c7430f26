"""
Error taxonomy shared by the engine, the resolver, the applier and the
store backends.

Every failure reaches the caller as its own ``DocError`` subclass so it can
be inspected without string matching.  Only :class:`RevisionConflict` is
worth retrying (after a fresh read); the rest describe malformed requests.
"""

from __future__ import annotations

from typing import Optional


class DocError(Exception):
    """Base class for all document engine errors."""

    retryable = False


class NotFound(DocError):
    """Raised when the store has no document under the requested id."""

    def __init__(self, doc_id: str) -> None:
        self.doc_id = doc_id
        super().__init__(f"document not found: {doc_id!r}")


class SelectorMiss(DocError):
    """Raised when a selector path has no index entry and no range fallback."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"selector did not resolve: {path!r}")


class RangeOutOfBounds(DocError):
    """Raised when an explicit or derived byte range exceeds the text."""

    def __init__(self, start: int, end: int, length: int) -> None:
        self.start = start
        self.end = end
        self.length = length
        super().__init__(
            f"byte range [{start}, {end}) is outside the text (length {length})"
        )


class InvalidEdit(DocError):
    """Raised when an edit request is malformed and cannot be applied."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"invalid edit: {reason}")


class RevisionConflict(DocError):
    """Raised when the store has moved past the caller's expected revision."""

    retryable = True

    def __init__(self, current: Optional[str]) -> None:
        self.current = current
        super().__init__(f"revision conflict: store is at {current!r}")


class ParseFailure(DocError):
    """Raised when the Markdown front-end cannot produce a tree."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"parse failure: {reason}")
