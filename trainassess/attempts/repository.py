"""
Attempt Repository Module

This module maps Attempt records onto the ``attempts`` collection of a
DocumentStore.
"""

from dataclasses import replace
from typing import List, Optional

from trainassess.attempts.models import Attempt
from trainassess.store import ATTEMPTS, DocumentStore


def _from_document(document) -> Attempt:
    return Attempt.from_dict(document)


def _to_document(attempt: Attempt):
    document = attempt.to_dict()
    if document.get("id") is None:
        document.pop("id")
    return document


class AttemptRepository:
    """
    Repository for attempts.

    Attempts are looked up by id or by their (user, date) key and written
    back with the version they were read at.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_by_id(self, attempt_id: str) -> Optional[Attempt]:
        """
        Get an attempt by its ID.

        Args:
            attempt_id: The ID of the attempt to retrieve

        Returns:
            The Attempt if found, None otherwise
        """
        document = await self.store.get(ATTEMPTS, attempt_id)
        return _from_document(document) if document else None

    async def get_for_user_and_date(self, user_id: str, date: str) -> Optional[Attempt]:
        """Get the attempt a trainee made on a date, if any."""
        document = await self.store.find_one(ATTEMPTS, {"userId": user_id, "date": date})
        return _from_document(document) if document else None

    async def list_for_user(self, user_id: str) -> List[Attempt]:
        """List a trainee's attempts, newest date first."""
        documents = await self.store.find(ATTEMPTS, {"userId": user_id}, sort_by="date", descending=True)
        return [_from_document(document) for document in documents]

    async def list_all(self, date: Optional[str] = None) -> List[Attempt]:
        """
        List attempts, newest submission first.

        Args:
            date: Optional date to restrict the listing to

        Returns:
            Matching attempts
        """
        filters = {"date": date} if date else None
        documents = await self.store.find(ATTEMPTS, filters, sort_by="submittedAt", descending=True)
        return [_from_document(document) for document in documents]

    async def count_for_question_set(self, question_set_id: str) -> int:
        return await self.store.count(ATTEMPTS, {"questionSetId": question_set_id})

    async def create(self, attempt: Attempt) -> Attempt:
        """Insert a new attempt and return it with its id and version."""
        document = await self.store.insert(ATTEMPTS, _to_document(attempt))
        return replace(attempt, id=document["id"], version=document["version"])

    async def update(self, attempt: Attempt) -> Optional[Attempt]:
        """
        Write an attempt back, conditional on the version it was read at.

        Returns:
            The stored attempt, or None if it no longer exists

        Raises:
            ConflictError: If the attempt changed since it was read
        """
        document = await self.store.replace(
            ATTEMPTS,
            attempt.id,
            _to_document(attempt),
            expected_version=attempt.version
        )
        if document is None:
            return None
        return replace(attempt, version=document["version"])

    async def delete(self, attempt_id: str) -> bool:
        return await self.store.delete(ATTEMPTS, attempt_id)
