"""
Core data types: paths, byte spans, selectors, edits and their results.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from .errors import InvalidEdit

# Ordered slugs naming a heading hierarchy; () is the document root.
Path = Tuple[str, ...]

INTROSPECT_PATH: Path = ("*",)


def as_path(value: Union[str, Sequence[str], None]) -> Path:
    """Normalize a path given as a sequence or a ``/``-joined string."""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part for part in value.split("/") if part)
    return tuple(value)


def join_path(path: Path) -> str:
    return "/".join(path)


@dataclass(frozen=True, order=True)
class Span:
    """Half-open byte range ``[start, end)`` into one UTF-8 text snapshot."""
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"span start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"span end {self.end} precedes start {self.start}")

    def __len__(self) -> int:
        return self.end - self.start

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    def to_list(self) -> list[int]:
        return [self.start, self.end]


@dataclass(frozen=True)
class SourcePosition:
    """1-based line and 1-based byte column within that line."""
    line: int
    column: int


@dataclass(frozen=True)
class SourceRange:
    start: SourcePosition
    end: SourcePosition

    @classmethod
    def of(cls, start_line: int, start_col: int, end_line: int, end_col: int) -> "SourceRange":
        return cls(SourcePosition(start_line, start_col), SourcePosition(end_line, end_col))


class IndexOptions(enum.Flag):
    """Extra node kinds to index beyond headings and fenced code blocks."""
    NONE = 0
    PARAGRAPHS = enum.auto()
    LIST_ITEMS = enum.auto()
    BLOCK_QUOTES = enum.auto()


class EditOp(str, enum.Enum):
    INSERT = "insert"
    REPLACE = "replace"
    DELETE = "delete"


@dataclass
class Selector:
    """Address of a document region.

    ``path`` names a heading hierarchy (``("*",)`` asks for the whole
    index), ``field`` picks a fenced block by language tag under that path,
    and ``range`` is a raw ``(start, end)`` byte fallback used when the path
    does not resolve.  The range is only checked against the text when it
    is resolved.
    """
    path: Path = ()
    field: Optional[str] = None
    range: Optional[Tuple[int, int]] = None

    def __post_init__(self) -> None:
        self.path = as_path(self.path)
        if isinstance(self.range, Span):
            self.range = (self.range.start, self.range.end)
        elif self.range is not None:
            start, end = self.range
            self.range = (int(start), int(end))

    @property
    def is_introspection(self) -> bool:
        return self.path == INTROSPECT_PATH

    def to_dict(self) -> dict:
        return {
            "path": list(self.path),
            "field": self.field,
            "range": list(self.range) if self.range is not None else None,
        }


@dataclass
class Edit:
    """A single edit request: operation, target and optional text."""
    op: EditOp
    selector: Selector
    text: Optional[str] = None

    def __post_init__(self) -> None:
        try:
            self.op = EditOp(self.op)
        except ValueError:
            raise InvalidEdit(f"unknown operation {self.op!r}") from None


@dataclass
class SliceResult:
    text: str
    span: Span
    revision: str

    def to_dict(self) -> dict:
        return {"text": self.text, "span": self.span.to_list(), "revision": self.revision}


@dataclass
class ChangeSummary:
    """One change inside a diff envelope."""
    selector: Selector
    action: EditOp
    old_text: Optional[str] = None
    new_text: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "selector": self.selector.to_dict(),
            "action": self.action.value,
            "old_text": self.old_text,
            "new_text": self.new_text,
        }


@dataclass
class DiffEnvelope:
    """Everything a caller needs to know about a committed edit."""
    doc_id: str
    base_revision: str
    new_revision: str
    changes: list[ChangeSummary] = field(default_factory=list)
    patch: str = ""

    def to_dict(self) -> dict:
        return {
            "doc_id": self.doc_id,
            "base_revision": self.base_revision,
            "new_revision": self.new_revision,
            "changes": [c.to_dict() for c in self.changes],
            "patch": self.patch,
        }
