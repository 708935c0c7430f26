"""
Document engine — reads and edits Markdown documents by semantic path.

The engine holds no document state.  Every ``read`` / ``apply`` loads the
current text and revision from the store, indexes that snapshot and
resolves the selector against it.  Edits commit through the store's
compare-and-swap on revision; the patch is computed only once the store
has accepted the revision.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Optional

from .editing.diff import change_counts, unified
from .editing.edit_applier import splice, validate_edit
from .editing.metrics import log_edit_metric
from .editing.selector_resolver import Resolution, resolve
from .errors import DocError
from .markdown.indexer import ASTIndex, build_index
from .markdown.parser import MarkdownParser
from .store.base import DocumentStore
from .types import (
    ChangeSummary, DiffEnvelope, Edit, IndexOptions, Selector, SliceResult, Span,
)

logger = logging.getLogger(__name__)


class _IndexCache:
    """Index of the last snapshot seen in one session, keyed by SHA-256."""

    def __init__(self) -> None:
        self._fingerprint: Optional[str] = None
        self._index: Optional[ASTIndex] = None
        self.builds = 0

    def get(self, text: str, build) -> ASTIndex:
        fingerprint = hashlib.sha256(text.encode("utf-8")).hexdigest()
        if self._index is not None and fingerprint == self._fingerprint:
            logger.debug("Index cache hit (%s)", fingerprint[:12])
            return self._index
        if self._index is not None:
            logger.debug("Snapshot changed, rebuilding index (%s)", fingerprint[:12])
        self._index = build(text)
        self._fingerprint = fingerprint
        self.builds += 1
        return self._index


class _LazyPatch:
    """Diff producer handed to the store; computes the patch at most once.

    Captures the text read before splicing and the spliced text.  The
    arguments the store passes are accepted for the contract but the
    captured snapshot is what gets diffed.
    """

    def __init__(self, old_text: str, new_text: str) -> None:
        self._old_text = old_text
        self._new_text = new_text
        self._patch: Optional[str] = None

    def __call__(self, _old: Optional[str] = None, _new: Optional[str] = None) -> str:
        if self._patch is None:
            self._patch = unified(self._old_text, self._new_text)
        return self._patch


class EditSession:
    """One logical operation (typically a read followed by an apply).

    Calls made through the same session share an index cache; a fresh
    session never sees another session's cache.
    """

    def __init__(self, engine: "DocEngine") -> None:
        self._engine = engine
        self._cache = _IndexCache()

    @property
    def index_builds(self) -> int:
        return self._cache.builds

    def _index(self, text: str) -> ASTIndex:
        return self._cache.get(text, self._engine.index_text)

    async def read(self, doc_id: str, selector: Selector) -> SliceResult:
        """Return the slice of *doc_id* addressed by *selector*.

        With the ``("*",)`` selector the slice text is the JSON view of the
        whole index and the span is ``[0, 0)``.
        """
        text, revision = await self._engine.store.load(doc_id)
        resolution = resolve(self._index(text), selector, text)
        if resolution.index_view is not None:
            return SliceResult(text=resolution.index_view, span=resolution.span, revision=revision)
        return SliceResult(text=resolution.text, span=resolution.span, revision=revision)

    async def apply(
        self,
        edit: Edit,
        doc_id: str,
        expected_revision: str,
        author: str = "unknown",
    ) -> DiffEnvelope:
        """Apply *edit* to *doc_id* if it is still at *expected_revision*.

        Steps, in order and never retried: load, index, resolve, splice,
        commit (the store runs the lazy diff once the new text is
        written).  Nothing is written unless every step before the commit
        succeeded.

        Raises
        ------
        InvalidEdit, SelectorMiss, RangeOutOfBounds, NotFound, ParseFailure
            Malformed requests; nothing was written.
        RevisionConflict
            Another writer committed first; re-read and recompute.
        """
        metric: dict = {
            "doc_id": doc_id,
            "op": edit.op.value,
            "author": author,
        }
        try:
            envelope = await self._apply(edit, doc_id, expected_revision, metric)
        except DocError as exc:
            metric["outcome"] = type(exc).__name__
            self._engine.record_metric(metric)
            raise
        metric["outcome"] = "committed"
        self._engine.record_metric(metric)
        logger.info(
            "Applied %s to %s by %s: %s -> %s",
            edit.op.value, doc_id, author, expected_revision, envelope.new_revision,
        )
        return envelope

    async def _apply(
        self,
        edit: Edit,
        doc_id: str,
        expected_revision: str,
        metric: dict,
    ) -> DiffEnvelope:
        validate_edit(edit)

        text, _current = await self._engine.store.load(doc_id)
        resolution: Resolution = resolve(self._index(text), edit.selector, text)
        metric["resolution_method"] = resolution.method

        span = resolution.span
        old_slice = resolution.text
        if resolution.index_view is not None:
            span, old_slice = Span(0, 0), ""

        new_text = splice(text, span, edit.op, edit.text)
        producer = _LazyPatch(text, new_text)

        new_revision = await self._engine.store.save(
            doc_id, new_text, expected_revision, producer,
        )
        patch = producer()
        deleted, inserted = change_counts(patch)
        metric.update({
            "span": span.to_list(),
            "bytes_delta": len(new_text.encode("utf-8")) - len(text.encode("utf-8")),
            "lines_deleted": deleted,
            "lines_inserted": inserted,
        })

        change = ChangeSummary(
            selector=edit.selector,
            action=edit.op,
            old_text=old_slice,
            new_text=edit.text,
        )
        return DiffEnvelope(
            doc_id=doc_id,
            base_revision=expected_revision,
            new_revision=new_revision,
            changes=[change],
            patch=patch,
        )


class DocEngine:
    """Read and edit documents of a :class:`DocumentStore` by selector.

    Parameters
    ----------
    store:
        Persistence backend; owns all text and revisions.
    index_options:
        Extra node kinds to index beyond headings and fenced code blocks.
    parser:
        Object with ``parse(text) -> MarkdownNode``; defaults to the
        tree-sitter :class:`MarkdownParser`.
    metrics_root:
        When set, every apply outcome is appended to the JSONL metrics log
        under this directory.
    """

    def __init__(
        self,
        store: DocumentStore,
        index_options: IndexOptions = IndexOptions.NONE,
        parser=None,
        metrics_root: Optional[str] = None,
    ) -> None:
        self.store = store
        self.index_options = index_options
        self.parser = parser or MarkdownParser()
        self.metrics_root = metrics_root

    def session(self) -> EditSession:
        return EditSession(self)

    def index_text(self, text: str) -> ASTIndex:
        """Parse and index *text* (no caching)."""
        return build_index(self.parser.parse(text), text, self.index_options)

    async def read(self, doc_id: str, selector: Selector) -> SliceResult:
        return await self.session().read(doc_id, selector)

    async def apply(
        self,
        edit: Edit,
        doc_id: str,
        expected_revision: str,
        author: str = "unknown",
    ) -> DiffEnvelope:
        return await self.session().apply(edit, doc_id, expected_revision, author)

    def record_metric(self, data: dict) -> None:
        if self.metrics_root is not None:
            log_edit_metric(data, self.metrics_root)
