"""
User Repository Module

This module maps User records onto the ``users`` collection. Emails are
stored lower-cased so lookups are case-insensitive.
"""

from dataclasses import replace
from typing import List, Optional

from trainassess.common.auth import UserRole
from trainassess.store import USERS, DocumentStore
from trainassess.users.models import User


class UserRepository:
    """Repository for user accounts."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_by_id(self, user_id: str) -> Optional[User]:
        document = await self.store.get(USERS, user_id)
        return User.from_dict(document) if document else None

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get a user by email address.

        Args:
            email: Address to look up, in any case

        Returns:
            The User if found, None otherwise
        """
        document = await self.store.find_one(USERS, {"email": email.strip().lower()})
        return User.from_dict(document) if document else None

    async def list_all(self, role: Optional[UserRole] = None) -> List[User]:
        filters = {"role": role.value} if role else None
        documents = await self.store.find(USERS, filters, sort_by="createdAt", descending=True)
        return [User.from_dict(document) for document in documents]

    async def count_by_role(self, role: UserRole) -> int:
        return await self.store.count(USERS, {"role": role.value})

    async def create(self, user: User) -> User:
        document = user.to_dict(include_password=True)
        document.pop("id")
        stored = await self.store.insert(USERS, document)
        return replace(user, id=stored["id"])

    async def update(self, user: User) -> Optional[User]:
        stored = await self.store.replace(USERS, user.id, user.to_dict(include_password=True))
        return user if stored is not None else None

    async def delete(self, user_id: str) -> bool:
        return await self.store.delete(USERS, user_id)
