"""Tests for edit metrics logging and stats."""

import json
import os

import pytest

from doc_engine.editing.metrics import log_edit_metric, read_edit_stats


@pytest.fixture
def tmp_root(tmp_path):
    return str(tmp_path)


def _metrics_file(root):
    return os.path.join(root, ".docengine", "metrics", "edit_metrics.jsonl")


class TestLogEditMetric:
    def test_creates_file_and_writes_entry(self, tmp_root):
        log_edit_metric({"doc_id": "a.md", "outcome": "committed"}, root=tmp_root)

        path = _metrics_file(tmp_root)
        assert os.path.isfile(path)
        with open(path) as f:
            lines = f.readlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["doc_id"] == "a.md"
        assert "timestamp" in entry

    def test_appends_multiple_entries(self, tmp_root):
        for doc in ("a.md", "b.md", "c.md"):
            log_edit_metric({"doc_id": doc}, root=tmp_root)
        with open(_metrics_file(tmp_root)) as f:
            assert len(f.readlines()) == 3

    def test_write_failure_is_not_raised(self, tmp_path, caplog):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        log_edit_metric({"doc_id": "a.md"}, root=str(blocker))
        assert "Failed to write edit metrics" in caplog.text


class TestReadEditStats:
    def test_empty_stats(self, tmp_root):
        stats = read_edit_stats(root=tmp_root)
        assert stats["total_edits"] == 0
        assert stats["success_rate"] == 0.0
        assert stats["conflict_rate"] == 0.0
        assert stats["outcomes"] == {}

    def test_stats_from_entries(self, tmp_root):
        entries = [
            {"outcome": "committed", "resolution_method": "index", "bytes_delta": 10},
            {"outcome": "committed", "resolution_method": "range", "bytes_delta": -4},
            {"outcome": "RevisionConflict", "resolution_method": "index"},
            {"outcome": "SelectorMiss"},
        ]
        for entry in entries:
            log_edit_metric(entry, root=tmp_root)

        stats = read_edit_stats(root=tmp_root)
        assert stats["total_edits"] == 4
        assert stats["success_rate"] == pytest.approx(50.0)
        assert stats["conflict_rate"] == pytest.approx(25.0)
        assert stats["avg_bytes_delta"] == pytest.approx(3.0)
        assert stats["resolution_methods"]["index"] == pytest.approx(50.0)
        assert stats["outcomes"]["SelectorMiss"] == pytest.approx(25.0)

    def test_last_n(self, tmp_root):
        log_edit_metric({"outcome": "SelectorMiss"}, root=tmp_root)
        log_edit_metric({"outcome": "committed"}, root=tmp_root)
        stats = read_edit_stats(last_n=1, root=tmp_root)
        assert stats["total_edits"] == 1
        assert stats["success_rate"] == pytest.approx(100.0)

    def test_skips_corrupt_lines(self, tmp_root):
        log_edit_metric({"outcome": "committed"}, root=tmp_root)
        with open(_metrics_file(tmp_root), "a") as f:
            f.write("{not json\n")
        assert read_edit_stats(root=tmp_root)["total_edits"] == 1
