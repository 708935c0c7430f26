"""
Slug normalization for heading text and fenced-block language tags.
"""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_MULTI_HYPHEN = re.compile(r"-{2,}")


def slugify(text: str) -> str:
    """Lowercase *text* and collapse every run outside ``[a-z0-9]`` to ``-``.

    >>> slugify("  S p a c e s  ###")
    's-p-a-c-e-s'
    """
    slug = _NON_ALNUM.sub("-", text.lower())
    slug = _MULTI_HYPHEN.sub("-", slug)
    return slug.strip("-")


def code_slug(language: str | None) -> str:
    """Base slug for a fenced code block: ``code-<lang>`` or plain ``code``."""
    lang = slugify(language or "")
    return f"code-{lang}" if lang else "code"


class SlugCounter:
    """Per-parent-path occurrence counter handing out unique slugs.

    The first occurrence of a base slug under a parent stays bare; later
    ones get ``-1``, ``-2``, ... in the order they are requested.  A suffix
    that would collide with a slug already issued under the same parent
    (a heading literally titled "Panel 1" after two "Panel"s) is skipped.
    """

    def __init__(self) -> None:
        self._counts: dict[tuple[str, ...], dict[str, int]] = {}
        self._issued: dict[tuple[str, ...], set[str]] = {}

    def unique(self, parent: tuple[str, ...], base: str) -> str:
        counts = self._counts.setdefault(parent, {})
        issued = self._issued.setdefault(parent, set())
        n = counts.get(base, 0)
        slug = base if n == 0 else f"{base}-{n}"
        while slug in issued:
            n += 1
            slug = f"{base}-{n}"
        counts[base] = n + 1
        issued.add(slug)
        return slug
