"""
In-memory document store.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import NotFound, RevisionConflict
from .base import DiffProducer, DocumentStore

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    text: str
    revision: str


class InMemoryStore(DocumentStore):
    """Dictionary-backed store; revisions are random hex tokens."""

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    async def load(self, doc_id: str) -> Tuple[str, str]:
        with self._lock:
            entry = self._entries.get(doc_id)
        if entry is None:
            raise NotFound(doc_id)
        return entry.text, entry.revision

    async def save(
        self,
        doc_id: str,
        new_text: str,
        expected_revision: Optional[str],
        diff_producer: Optional[DiffProducer] = None,
    ) -> str:
        with self._lock:
            entry = self._entries.get(doc_id)
            if entry is None:
                if expected_revision:
                    raise NotFound(doc_id)
                old_text = ""
            else:
                if entry.revision != expected_revision:
                    logger.warning(
                        "Revision conflict on %s: expected %s, at %s",
                        doc_id, expected_revision, entry.revision,
                    )
                    raise RevisionConflict(entry.revision)
                old_text = entry.text

            revision = uuid.uuid4().hex
            self._entries[doc_id] = _Entry(new_text, revision)

        logger.info("Saved %s at revision %s", doc_id, revision)
        if diff_producer is not None:
            diff_producer(old_text, new_text)
        return revision

    def __contains__(self, doc_id: str) -> bool:
        return doc_id in self._entries

    def ids(self) -> list[str]:
        with self._lock:
            return sorted(self._entries)
