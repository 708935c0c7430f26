"""Pluggable document stores with optimistic revisioning."""

from .base import DocumentStore, DiffProducer
from .memory import InMemoryStore
from .file_store import FileStore

__all__ = ["DocumentStore", "DiffProducer", "InMemoryStore", "FileStore"]
