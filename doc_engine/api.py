"""
Programmatic API — build a configured engine for library use.

Example usage::

    import asyncio
    from doc_engine import create_engine, Edit, Selector

    engine = create_engine()
    rev = asyncio.run(engine.store.create("notes.md", "# Title\\n\\nHello\\n"))
    env = asyncio.run(engine.apply(
        Edit("replace", Selector(path=("title",)), "# Title\\n\\nHi\\n"),
        "notes.md", rev,
    ))
    print(env.patch)
"""

from __future__ import annotations

import logging

from .config import Config
from .engine import DocEngine
from .store import DocumentStore, FileStore, InMemoryStore

_logger = logging.getLogger(__name__)


def create_store(config: Config) -> DocumentStore:
    """Instantiate the store backend named by *config*."""
    if config.STORE == "file":
        _logger.debug("Using file store at %s", config.STORE_DIR)
        return FileStore(config.STORE_DIR)
    return InMemoryStore()


def create_engine(
    config: Config | None = None,
    store: DocumentStore | None = None,
    parser=None,
) -> DocEngine:
    """Build a :class:`DocEngine` from *config* (loaded from disk if None).

    Args:
        config: Resolved settings; ``Config.load()`` when omitted.
        store: Backend override; otherwise chosen by ``config.STORE``.
        parser: Parser override; defaults to the tree-sitter parser.
    """
    cfg = config or Config.load()
    return DocEngine(
        store if store is not None else create_store(cfg),
        index_options=cfg.index_options(),
        parser=parser,
        metrics_root=cfg.METRICS_ROOT if cfg.METRICS else None,
    )
