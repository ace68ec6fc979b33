"""
Authentication User Models

Roles and the identity attached to every authenticated request.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict


class UserRole(enum.Enum):
    """User roles for authorization."""

    TRAINEE = "trainee"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


@dataclass(frozen=True)
class Identity:
    """
    Identity decoded from a bearer credential.

    Attributes:
        id: User identifier
        email: User's email address
        role: User's role
        name: Display name, used to stamp evaluations
    """
    id: str
    email: str
    role: UserRole
    name: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @property
    def is_trainee(self) -> bool:
        return self.role == UserRole.TRAINEE

    @property
    def is_staff(self) -> bool:
        """Admins and superadmins."""
        return self.role in (UserRole.ADMIN, UserRole.SUPERADMIN)

    def to_claims(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "role": self.role.value,
            "name": self.name
        }
