"""
Store contract — where document text and revisions live.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional, Tuple

# (old_text, new_text) -> patch text; called only after the new text is committed
DiffProducer = Callable[[str, str], str]


class DocumentStore(ABC):
    """Persistence for documents with optimistic revision tokens.

    Implementations own the text and revision of every id.  ``save`` must
    compare ``expected_revision`` with the current revision and persist the
    new text atomically with respect to other ``save`` calls.
    """

    @abstractmethod
    async def load(self, doc_id: str) -> Tuple[str, str]:
        """Return ``(text, revision)``; raise ``NotFound`` for unknown ids."""

    @abstractmethod
    async def save(
        self,
        doc_id: str,
        new_text: str,
        expected_revision: Optional[str],
        diff_producer: Optional[DiffProducer] = None,
    ) -> str:
        """Persist *new_text* if the store is still at *expected_revision*.

        A document is created when *doc_id* is unknown and
        *expected_revision* is empty.  *diff_producer* is invoked with
        ``(old_text, new_text)`` once the new text is committed, outside
        the store lock; an error it raises propagates but does not undo
        the write.

        Returns
        -------
        str
            The new revision token.

        Raises
        ------
        RevisionConflict
            If the current revision differs from *expected_revision*.
        NotFound
            If *doc_id* is unknown and *expected_revision* is not empty.
        """

    async def create(self, doc_id: str, text: str) -> str:
        """Create a new document and return its first revision."""
        return await self.save(doc_id, text, None)


def run_in_thread(func, *args, **kwargs):
    loop = asyncio.get_running_loop()
    return loop.run_in_executor(None, lambda: func(*args, **kwargs))
