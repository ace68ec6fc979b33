"""
Question-Set Repository Module

This module maps QuestionSet records onto the ``question_sets`` collection.
"""

from dataclasses import replace
from typing import List, Optional

from trainassess.questions.models import QuestionSet
from trainassess.store import QUESTION_SETS, DocumentStore


class QuestionSetRepository:
    """Repository for question-sets."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_by_id(self, question_set_id: str) -> Optional[QuestionSet]:
        """
        Get a question-set by its ID.

        Args:
            question_set_id: The ID of the question-set to retrieve

        Returns:
            The QuestionSet if found, None otherwise
        """
        document = await self.store.get(QUESTION_SETS, question_set_id)
        return QuestionSet.from_dict(document) if document else None

    async def list_all(self) -> List[QuestionSet]:
        documents = await self.store.find(QUESTION_SETS, sort_by="date", descending=True)
        return [QuestionSet.from_dict(document) for document in documents]

    async def list_by_date(self, date: str) -> List[QuestionSet]:
        documents = await self.store.find(QUESTION_SETS, {"date": date}, sort_by="createdAt")
        return [QuestionSet.from_dict(document) for document in documents]

    async def create(self, question_set: QuestionSet) -> QuestionSet:
        document = question_set.to_dict()
        document.pop("id")
        stored = await self.store.insert(QUESTION_SETS, document)
        return replace(question_set, id=stored["id"])

    async def update(self, question_set: QuestionSet) -> Optional[QuestionSet]:
        """
        Replace a stored question-set.

        Returns:
            The updated QuestionSet, or None if it does not exist
        """
        stored = await self.store.replace(QUESTION_SETS, question_set.id, question_set.to_dict())
        return question_set if stored is not None else None

    async def delete(self, question_set_id: str) -> bool:
        return await self.store.delete(QUESTION_SETS, question_set_id)
