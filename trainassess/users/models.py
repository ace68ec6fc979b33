"""
User Models

Accounts are stored with their password hash; the hash never leaves the
service layer.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from trainassess.common.auth import Identity, UserRole
from trainassess.common.timeutils import from_iso, to_iso, utcnow


@dataclass(frozen=True)
class User:
    """A registered account."""
    id: Optional[str]
    name: str
    email: str
    password_hash: str
    role: UserRole = UserRole.TRAINEE
    created_at: datetime.datetime = field(default_factory=utcnow)
    updated_at: datetime.datetime = field(default_factory=utcnow)

    @property
    def identity(self) -> Identity:
        return Identity(id=self.id, email=self.email, role=self.role, name=self.name)

    def to_dict(self, include_password: bool = False) -> Dict[str, Any]:
        """
        Convert the user to a dictionary.

        Args:
            include_password: Include the password hash, for persistence only

        Returns:
            The camelCase document
        """
        result = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at)
        }
        if include_password:
            result["passwordHash"] = self.password_hash
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            email=data["email"],
            password_hash=data.get("passwordHash", ""),
            role=UserRole(data.get("role", UserRole.TRAINEE.value)),
            created_at=from_iso(data.get("createdAt")) or utcnow(),
            updated_at=from_iso(data.get("updatedAt")) or utcnow()
        )
