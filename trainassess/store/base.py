"""
Document Store Interface

This module defines the contract every persistence backend implements.
Documents are JSON-compatible dictionaries grouped in named collections;
each carries an ``id`` and a ``version`` counter maintained by the store.
"""

import abc
import uuid
from typing import Any, Dict, List, Optional

Document = Dict[str, Any]

# Collection names
USERS = "users"
QUESTION_SETS = "question_sets"
ATTEMPTS = "attempts"


def new_id() -> str:
    """Generate a document identifier."""
    return uuid.uuid4().hex


def matches(document: Document, filters: Optional[Dict[str, Any]]) -> bool:
    """Check top-level equality filters against a document."""
    if not filters:
        return True
    return all(document.get(key) == value for key, value in filters.items())


def sort_documents(
    documents: List[Document],
    sort_by: Optional[str] = None,
    descending: bool = False
) -> List[Document]:
    """
    Sort documents by a top-level field.

    Missing values sort first in ascending order and last in descending order.
    """
    if not sort_by:
        return documents
    return sorted(
        documents,
        key=lambda doc: (doc.get(sort_by) is not None, doc.get(sort_by) or ""),
        reverse=descending
    )


class DocumentStore(abc.ABC):
    """
    Abstract base class for document stores.

    Stores have an explicit lifecycle: ``open()`` is awaited once at
    application startup and ``close()`` at shutdown.
    """

    async def open(self) -> None:
        """Acquire connections and prepare collections."""

    async def close(self) -> None:
        """Release connections."""

    @abc.abstractmethod
    async def insert(self, collection: str, document: Document) -> Document:
        """
        Insert a new document.

        An ``id`` is generated when the document has none; ``version`` starts at 1.

        Returns:
            The stored document

        Raises:
            ConflictError: If a document with the same id already exists
        """

    @abc.abstractmethod
    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        """Get a document by id, or None."""

    @abc.abstractmethod
    async def find(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Document]:
        """Find documents matching equality filters on top-level fields."""

    async def find_one(self, collection: str, filters: Dict[str, Any]) -> Optional[Document]:
        """Find the first document matching the filters, or None."""
        documents = await self.find(collection, filters)
        return documents[0] if documents else None

    @abc.abstractmethod
    async def replace(
        self,
        collection: str,
        document_id: str,
        document: Document,
        expected_version: Optional[int] = None
    ) -> Optional[Document]:
        """
        Replace a document and bump its version.

        Args:
            collection: Collection name
            document_id: Id of the document to replace
            document: New document body
            expected_version: When given, the write only succeeds if the
                stored version still equals it

        Returns:
            The stored document, or None if the id is unknown

        Raises:
            ConflictError: If ``expected_version`` is stale
        """

    @abc.abstractmethod
    async def delete(self, collection: str, document_id: str) -> bool:
        """Delete a document; True if something was deleted."""

    async def count(self, collection: str, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching the filters."""
        return len(await self.find(collection, filters))
