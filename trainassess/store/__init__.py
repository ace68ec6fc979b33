"""
Document Store Adapter

Generic collection-based persistence behind an interface, with an
in-memory backend and a SQLAlchemy backend.
"""

from trainassess.store.base import (
    ATTEMPTS,
    QUESTION_SETS,
    USERS,
    Document,
    DocumentStore,
    new_id
)
from trainassess.store.memory import MemoryDocumentStore
from trainassess.store.sql import SQLDocumentStore

MEMORY_URL = "memory://"


def create_store(url: str, echo: bool = False, pool_timeout: int = 30) -> DocumentStore:
    """
    Create a document store for a URL.

    ``memory://`` selects the in-memory store; anything else is treated as
    an async SQLAlchemy database URL.
    """
    if url.startswith(MEMORY_URL):
        return MemoryDocumentStore()
    return SQLDocumentStore(url, echo=echo, pool_timeout=pool_timeout)


__all__ = [
    'ATTEMPTS',
    'QUESTION_SETS',
    'USERS',
    'Document',
    'DocumentStore',
    'MemoryDocumentStore',
    'SQLDocumentStore',
    'create_store',
    'new_id',
]
