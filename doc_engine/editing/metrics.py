"""
Edit metrics — records apply outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".docengine/metrics"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(root: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = root or os.getcwd()
    return os.path.join(base, _METRICS_DIR, _METRICS_FILE)


def log_edit_metric(data: dict, root: str | None = None) -> None:
    """Append a single apply outcome to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields (doc_id, op, outcome, resolution_method, ...).
    root:
        Directory holding the ``.docengine`` folder. Defaults to CWD.
    """
    path = _metrics_path(root)
    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("Failed to write edit metrics: %s", exc)


def read_edit_stats(last_n: int = 100, root: str | None = None) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        ``total_edits``, ``success_rate`` and ``conflict_rate`` (percent),
        ``outcomes`` and ``resolution_methods`` (percent per key), and
        ``avg_bytes_delta`` over successful edits.
    """
    path = _metrics_path(root)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("Failed to read edit metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "conflict_rate": 0.0,
            "avg_bytes_delta": 0.0,
            "outcomes": {},
            "resolution_methods": {},
        }

    total = len(entries)
    outcomes = Counter(e.get("outcome", "unknown") for e in entries)
    methods = Counter(
        e["resolution_method"] for e in entries if e.get("resolution_method")
    )
    deltas = [
        e.get("bytes_delta", 0) for e in entries
        if e.get("outcome") == "committed"
    ]

    return {
        "total_edits": total,
        "success_rate": outcomes.get("committed", 0) / total * 100,
        "conflict_rate": outcomes.get("RevisionConflict", 0) / total * 100,
        "avg_bytes_delta": sum(deltas) / len(deltas) if deltas else 0.0,
        "outcomes": {k: v / total * 100 for k, v in outcomes.most_common()},
        "resolution_methods": {
            method: count / total * 100 for method, count in methods.most_common()
        },
    }
