"""
doc_engine — semantic-path editing for Markdown documents.

Public API for library usage::

    from doc_engine import create_engine, Edit, Selector

    engine = create_engine()
    slice_ = await engine.read("notes.md", Selector(path=("install",)))
"""

from .api import create_engine, create_store
from .config import Config
from .engine import DocEngine, EditSession
from .errors import (
    DocError, InvalidEdit, NotFound, ParseFailure, RangeOutOfBounds,
    RevisionConflict, SelectorMiss,
)
from .store import DocumentStore, FileStore, InMemoryStore
from .types import (
    INTROSPECT_PATH, ChangeSummary, DiffEnvelope, Edit, EditOp, IndexOptions,
    Selector, SliceResult, Span,
)

__all__ = [
    "create_engine", "create_store", "Config", "DocEngine", "EditSession",
    "DocError", "InvalidEdit", "NotFound", "ParseFailure", "RangeOutOfBounds",
    "RevisionConflict", "SelectorMiss",
    "DocumentStore", "FileStore", "InMemoryStore",
    "INTROSPECT_PATH", "ChangeSummary", "DiffEnvelope", "Edit", "EditOp",
    "IndexOptions", "Selector", "SliceResult", "Span",
]
