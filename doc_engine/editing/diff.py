"""
Line-level diff built on a longest-common-subsequence edit script.

The output is bare: a ``--- old`` / ``+++ new`` header followed
by one ``-`` line per deletion and one ``+`` line per insertion, in document
order, with no context lines or hunk headers.
"""

from __future__ import annotations

DELETE = "-"
INSERT = "+"


def split_lines(text: str) -> list[str]:
    """Split on ``\\n``, keeping a trailing empty line if the text ends with one."""
    return text.split("\n")


def _lcs_row(a: list[str], b: list[str]) -> list[int]:
    """Last row of the LCS length table of *a* against *b*, in O(len(b)) space."""
    prev = [0] * (len(b) + 1)
    for x in a:
        cur = [0]
        for j, y in enumerate(b):
            if x == y:
                cur.append(prev[j] + 1)
            else:
                cur.append(cur[j] if cur[j] >= prev[j + 1] else prev[j + 1])
        prev = cur
    return prev


def _matches(a: list[str], b: list[str], ai: int, bj: int, out: list[tuple[int, int]]) -> None:
    """Append the index pairs of one LCS of *a* and *b* (Hirschberg).

    Indices are offset by *ai* / *bj*; pairs are appended in order.
    """
    # Common prefix and suffix always belong to some longest common
    # subsequence.
    head = 0
    while head < len(a) and head < len(b) and a[head] == b[head]:
        head += 1
    tail = 0
    while (tail < len(a) - head and tail < len(b) - head
           and a[-1 - tail] == b[-1 - tail]):
        tail += 1
    out.extend((ai + k, bj + k) for k in range(head))

    mid_a, mid_b = a[head:len(a) - tail], b[head:len(b) - tail]
    oa, ob = ai + head, bj + head
    if len(mid_a) == 1:
        for j, y in enumerate(mid_b):
            if y == mid_a[0]:
                out.append((oa, ob + j))
                break
    elif mid_a and mid_b:
        half = len(mid_a) // 2
        left = _lcs_row(mid_a[:half], mid_b)
        right = _lcs_row(mid_a[half:][::-1], mid_b[::-1])
        n = len(mid_b)
        split = max(range(n + 1), key=lambda k: left[k] + right[n - k])
        _matches(mid_a[:half], mid_b[:split], oa, ob, out)
        _matches(mid_a[half:], mid_b[split:], oa + half, ob + split, out)

    out.extend((ai + len(a) - tail + k, bj + len(b) - tail + k) for k in range(tail))


def diff_lines(old: list[str], new: list[str]) -> list[tuple[str, str]]:
    """Return the minimal edit script turning *old* into *new*.

    Each entry is ``("-", line)`` or ``("+", line)``.  Between two matched
    lines all deletions come before all insertions, so identical inputs
    always give identical scripts.

    Lines that occur on only one side can never match and are left out of
    the LCS search, so rewriting a document with new content stays linear.
    The search itself runs in linear space.
    """
    shared = set(old) & set(new)
    old_keep = [i for i, line in enumerate(old) if line in shared]
    new_keep = [j for j, line in enumerate(new) if line in shared]

    pairs: list[tuple[int, int]] = []
    _matches([old[i] for i in old_keep], [new[j] for j in new_keep], 0, 0, pairs)

    script: list[tuple[str, str]] = []
    i = j = 0
    for p, q in pairs + [(None, None)]:
        oi = len(old) if p is None else old_keep[p]
        nj = len(new) if q is None else new_keep[q]
        script.extend((DELETE, line) for line in old[i:oi])
        script.extend((INSERT, line) for line in new[j:nj])
        i, j = oi + 1, nj + 1
    return script


def unified(old: str, new: str) -> str:
    """Create the bare unified diff of two texts.

    >>> unified("a\\nb", "a\\nc")
    '--- old\\n+++ new\\n-b\\n+c\\n'
    """
    parts = ["--- old\n", "+++ new\n"]
    for tag, line in diff_lines(split_lines(old), split_lines(new)):
        parts.append(f"{tag}{line}\n")
    return "".join(parts)


def change_counts(patch: str) -> tuple[int, int]:
    """Count ``(deleted, inserted)`` lines of a patch made by :func:`unified`."""
    deleted = inserted = 0
    for line in patch.split("\n")[2:]:
        if line.startswith(DELETE):
            deleted += 1
        elif line.startswith(INSERT):
            inserted += 1
    return deleted, inserted
