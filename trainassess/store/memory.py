"""
Memory Document Store Module

This module provides an in-memory implementation of the DocumentStore
interface for development and testing purposes.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from trainassess.common.exceptions import ConflictError
from trainassess.store.base import (
    Document,
    DocumentStore,
    matches,
    new_id,
    sort_documents
)

logger = logging.getLogger(__name__)


class MemoryDocumentStore(DocumentStore):
    """
    In-memory implementation of the DocumentStore.

    Documents are deep-copied on the way in and out so callers never share
    state with the store. Every operation completes without yielding to the
    event loop, which makes version checks atomic.
    """

    def __init__(self, initial_data: Optional[Dict[str, List[Document]]] = None):
        """
        Initialize the store with optional initial data.

        Args:
            initial_data: Optional mapping of collection name to documents
        """
        self._collections: Dict[str, Dict[str, Document]] = {}

        if initial_data:
            for collection, documents in initial_data.items():
                for document in documents:
                    stored = copy.deepcopy(document)
                    stored.setdefault("id", new_id())
                    stored.setdefault("version", 1)
                    self._bucket(collection)[stored["id"]] = stored

    def _bucket(self, collection: str) -> Dict[str, Document]:
        return self._collections.setdefault(collection, {})

    async def open(self) -> None:
        logger.info("Using in-memory document store")

    async def close(self) -> None:
        logger.info("In-memory document store closed")

    async def insert(self, collection: str, document: Document) -> Document:
        stored = copy.deepcopy(document)
        stored["id"] = stored.get("id") or new_id()
        stored["version"] = 1

        bucket = self._bucket(collection)
        if stored["id"] in bucket:
            raise ConflictError(f"Document {stored['id']} already exists in {collection}")

        bucket[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        document = self._bucket(collection).get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def find(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        descending: bool = False
    ) -> List[Document]:
        result = [
            copy.deepcopy(document)
            for document in self._bucket(collection).values()
            if matches(document, filters)
        ]
        return sort_documents(result, sort_by, descending)

    async def replace(
        self,
        collection: str,
        document_id: str,
        document: Document,
        expected_version: Optional[int] = None
    ) -> Optional[Document]:
        bucket = self._bucket(collection)
        current = bucket.get(document_id)
        if current is None:
            return None

        if expected_version is not None and current["version"] != expected_version:
            raise ConflictError(
                f"Document {document_id} was modified concurrently",
                details={"expected_version": expected_version, "current_version": current["version"]}
            )

        stored = copy.deepcopy(document)
        stored["id"] = document_id
        stored["version"] = current["version"] + 1
        bucket[document_id] = stored
        return copy.deepcopy(stored)

    async def delete(self, collection: str, document_id: str) -> bool:
        bucket = self._bucket(collection)
        if document_id in bucket:
            del bucket[document_id]
            return True
        return False
