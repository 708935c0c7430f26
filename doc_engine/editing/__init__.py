"""Selector resolution, splicing and diffing over indexed documents."""

from .selector_resolver import Resolution, resolve, effective_path
from .edit_applier import splice, validate_edit
from .diff import unified, diff_lines
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "Resolution", "resolve", "effective_path",
    "splice", "validate_edit",
    "unified", "diff_lines",
    "log_edit_metric", "read_edit_stats",
]
