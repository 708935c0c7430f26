"""
Directory-backed document store.

Each document is a UTF-8 file under the store directory; its revision token
lives in a sidecar ``<file>.rev``.  A file placed in the directory by other
means (no sidecar yet) gets a content-hash revision until its first save
through the store.
"""

from __future__ import annotations

import hashlib
import logging
import os
import threading
import uuid
from typing import Optional, Tuple

from ..errors import NotFound, ParseFailure, RevisionConflict
from .base import DiffProducer, DocumentStore, run_in_thread

logger = logging.getLogger(__name__)

_REV_SUFFIX = ".rev"
_TMP_SUFFIX = ".docengine_tmp"


class FileStore(DocumentStore):
    """Store documents as files under *directory*.

    Check-and-write is serialized by an in-process lock; separate processes
    writing the same directory are not coordinated.
    """

    def __init__(self, directory: str) -> None:
        self._root = os.path.abspath(directory)
        os.makedirs(self._root, exist_ok=True)
        self._lock = threading.Lock()

    @property
    def root(self) -> str:
        return self._root

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def load(self, doc_id: str) -> Tuple[str, str]:
        return await run_in_thread(self._load_sync, doc_id)

    async def save(
        self,
        doc_id: str,
        new_text: str,
        expected_revision: Optional[str],
        diff_producer: Optional[DiffProducer] = None,
    ) -> str:
        return await run_in_thread(
            self._save_sync, doc_id, new_text, expected_revision, diff_producer,
        )

    def ids(self) -> list[str]:
        """All document ids in the store, sorted."""
        found: list[str] = []
        for dirpath, _dirnames, filenames in os.walk(self._root):
            for name in filenames:
                if name.endswith(_REV_SUFFIX) or name.endswith(_TMP_SUFFIX):
                    continue
                rel = os.path.relpath(os.path.join(dirpath, name), self._root)
                found.append(rel.replace(os.sep, "/"))
        return sorted(found)

    # ------------------------------------------------------------------
    # Blocking implementation
    # ------------------------------------------------------------------

    def _path_for(self, doc_id: str) -> str:
        """Map *doc_id* to a file path, refusing ids outside the root."""
        if not doc_id or doc_id.endswith(_REV_SUFFIX) or doc_id.endswith(_TMP_SUFFIX):
            raise NotFound(doc_id)
        path = os.path.abspath(os.path.join(self._root, doc_id))
        if not path.startswith(self._root + os.sep):
            raise NotFound(doc_id)
        return path

    @staticmethod
    def _read_state(path: str) -> Optional[Tuple[str, str]]:
        """Return ``(text, revision)`` of the file at *path*, or None if absent."""
        try:
            with open(path, "rb") as fh:
                data = fh.read()
        except FileNotFoundError:
            return None
        try:
            with open(path + _REV_SUFFIX, "r", encoding="utf-8") as fh:
                revision = fh.read().strip()
        except FileNotFoundError:
            revision = ""
        if not revision:
            revision = "sha256:" + hashlib.sha256(data).hexdigest()
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseFailure(f"{os.path.basename(path)} is not valid UTF-8: {exc}") from exc
        return text, revision

    def _load_sync(self, doc_id: str) -> Tuple[str, str]:
        path = self._path_for(doc_id)
        # text and sidecar must come from the same commit
        with self._lock:
            state = self._read_state(path)
        if state is None:
            raise NotFound(doc_id)
        return state

    def _save_sync(
        self,
        doc_id: str,
        new_text: str,
        expected_revision: Optional[str],
        diff_producer: Optional[DiffProducer],
    ) -> str:
        path = self._path_for(doc_id)
        with self._lock:
            state = self._read_state(path)
            if state is None:
                if expected_revision:
                    raise NotFound(doc_id)
                old_text = ""
            else:
                old_text, current = state
                if current != expected_revision:
                    logger.warning(
                        "Revision conflict on %s: expected %s, at %s",
                        doc_id, expected_revision, current,
                    )
                    raise RevisionConflict(current)

            revision = uuid.uuid4().hex
            os.makedirs(os.path.dirname(path), exist_ok=True)
            self._safe_write(path, new_text)
            self._safe_write(path + _REV_SUFFIX, revision + "\n")

        logger.info("Saved %s at revision %s", doc_id, revision)
        if diff_producer is not None:
            diff_producer(old_text, new_text)
        return revision

    @staticmethod
    def _safe_write(file_path: str, content: str) -> None:
        """Write content to file atomically via temp file + rename."""
        tmp_path = file_path + _TMP_SUFFIX
        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_path, file_path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
