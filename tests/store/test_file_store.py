"""Tests for the directory-backed store."""

import asyncio
import builtins
import hashlib
import os
import threading
from unittest import mock

import pytest

from doc_engine.errors import NotFound, ParseFailure, RevisionConflict
from doc_engine.store import FileStore


@pytest.fixture
def store(tmp_path):
    return FileStore(str(tmp_path / "docs"))


class TestRoundTrip:
    def test_create_writes_file_and_sidecar(self, store):
        rev = asyncio.run(store.create("notes.md", "# Notes\n"))
        path = os.path.join(store.root, "notes.md")
        with open(path, encoding="utf-8") as f:
            assert f.read() == "# Notes\n"
        with open(path + ".rev", encoding="utf-8") as f:
            assert f.read().strip() == rev

    def test_load_returns_text_and_revision(self, store):
        rev = asyncio.run(store.create("notes.md", "😀 text\r\n"))
        assert asyncio.run(store.load("notes.md")) == ("😀 text\r\n", rev)

    def test_nested_ids(self, store):
        asyncio.run(store.create("guides/setup.md", "x"))
        assert asyncio.run(store.load("guides/setup.md"))[0] == "x"
        assert store.ids() == ["guides/setup.md"]

    def test_ids_skip_sidecars(self, store):
        asyncio.run(store.create("a.md", "a"))
        asyncio.run(store.create("b.md", "b"))
        assert store.ids() == ["a.md", "b.md"]

    def test_no_temp_files_left(self, store):
        asyncio.run(store.create("a.md", "a"))
        assert sorted(os.listdir(store.root)) == ["a.md", "a.md.rev"]


class TestRevisions:
    def test_stale_revision_rejected(self, store):
        rev = asyncio.run(store.create("a.md", "v1"))
        current = asyncio.run(store.save("a.md", "v2", rev))
        with pytest.raises(RevisionConflict) as exc_info:
            asyncio.run(store.save("a.md", "v3", rev))
        assert exc_info.value.current == current
        assert asyncio.run(store.load("a.md"))[0] == "v2"

    def test_external_file_gets_content_hash_revision(self, store):
        path = os.path.join(store.root, "ext.md")
        with open(path, "wb") as f:
            f.write(b"outside")
        text, rev = asyncio.run(store.load("ext.md"))
        assert text == "outside"
        assert rev == "sha256:" + hashlib.sha256(b"outside").hexdigest()

        new_rev = asyncio.run(store.save("ext.md", "inside", rev))
        assert asyncio.run(store.load("ext.md")) == ("inside", new_rev)

    def test_producer_runs_after_check(self, store):
        rev = asyncio.run(store.create("a.md", "old"))
        producer = mock.Mock(return_value="patch")
        asyncio.run(store.save("a.md", "new", rev, producer))
        producer.assert_called_once_with("old", "new")

        stale = mock.Mock()
        with pytest.raises(RevisionConflict):
            asyncio.run(store.save("a.md", "newer", rev, stale))
        stale.assert_not_called()

    def test_producer_runs_with_lock_released(self, store):
        rev = asyncio.run(store.create("a.md", "old"))
        held = []

        def producer(old, new):
            held.append(store._lock.locked())
            return "patch"

        asyncio.run(store.save("a.md", "new", rev, producer))
        assert held == [False]

    def test_undecodable_file_is_a_parse_failure(self, store):
        with open(os.path.join(store.root, "bin.md"), "wb") as f:
            f.write(b"\xff\xfe bad")
        with pytest.raises(ParseFailure):
            asyncio.run(store.load("bin.md"))
        with pytest.raises(ParseFailure):
            asyncio.run(store.save("bin.md", "fixed", "anything"))


class TestConsistentLoad:
    def test_save_between_text_and_revision_reads(self, store, monkeypatch):
        old_rev = asyncio.run(store.create("a.md", "AAAA"))
        rev_path = os.path.join(store.root, "a.md.rev")
        real_open = builtins.open
        writer = []

        def racing_open(path, mode="r", *args, **kwargs):
            # a writer commits after the text was read, before the sidecar
            if path == rev_path and "r" in mode and not writer:
                thread = threading.Thread(
                    target=store._save_sync, args=("a.md", "BBBBBBBB", old_rev, None),
                )
                writer.append(thread)
                thread.start()
                thread.join(timeout=0.2)
            return real_open(path, mode, *args, **kwargs)

        monkeypatch.setattr("doc_engine.store.file_store.open", racing_open, raising=False)
        text, rev = store._load_sync("a.md")
        writer[0].join()

        assert (text, rev) == ("AAAA", old_rev)
        new_text, new_rev = store._load_sync("a.md")
        assert new_text == "BBBBBBBB"
        assert new_rev != old_rev


class TestIds:
    def test_missing(self, store):
        with pytest.raises(NotFound):
            asyncio.run(store.load("missing.md"))

    @pytest.mark.parametrize("doc_id", ["", "../escape.md", "/etc/passwd", "a.md.rev"])
    def test_rejected_ids(self, store, doc_id):
        with pytest.raises(NotFound):
            asyncio.run(store.load(doc_id))
        with pytest.raises(NotFound):
            asyncio.run(store.save(doc_id, "x", None))

    def test_save_unknown_with_revision(self, store):
        with pytest.raises(NotFound):
            asyncio.run(store.save("new.md", "x", "rev"))
