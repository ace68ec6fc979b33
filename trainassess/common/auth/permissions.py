"""
Capability Table

Declarative mapping of every protected operation to the roles allowed to
perform it. Routers declare the operation they serve; the check happens in
one place.
"""

import enum
from typing import Dict, FrozenSet

from trainassess.common.auth.exceptions import InsufficientPermissionsError
from trainassess.common.auth.user import Identity, UserRole


class Operation(enum.Enum):
    """Operations guarded by the access control gate."""

    SUBMIT_ATTEMPT = "submit_attempt"
    LIST_OWN_ATTEMPTS = "list_own_attempts"
    VIEW_ATTEMPT = "view_attempt"
    LIST_ATTEMPTS = "list_attempts"
    EVALUATE_ATTEMPT = "evaluate_attempt"
    DELETE_ATTEMPT = "delete_attempt"
    VIEW_QUESTION_SETS = "view_question_sets"
    MANAGE_QUESTION_SETS = "manage_question_sets"
    LIST_TRAINEES = "list_trainees"
    MANAGE_USERS = "manage_users"
    VIEW_PROFILE = "view_profile"
    RESET_PASSWORD = "reset_password"


_ALL = frozenset(UserRole)
_STAFF = frozenset({UserRole.ADMIN, UserRole.SUPERADMIN})

PERMISSIONS: Dict[Operation, FrozenSet[UserRole]] = {
    Operation.SUBMIT_ATTEMPT: frozenset({UserRole.TRAINEE}),
    Operation.LIST_OWN_ATTEMPTS: _ALL,
    # Trainees are further restricted to their own attempts by the service.
    Operation.VIEW_ATTEMPT: _ALL,
    Operation.LIST_ATTEMPTS: _STAFF,
    Operation.EVALUATE_ATTEMPT: _STAFF,
    Operation.DELETE_ATTEMPT: _STAFF,
    Operation.VIEW_QUESTION_SETS: _ALL,
    Operation.MANAGE_QUESTION_SETS: _STAFF,
    Operation.LIST_TRAINEES: _STAFF,
    Operation.MANAGE_USERS: frozenset({UserRole.SUPERADMIN}),
    Operation.VIEW_PROFILE: _ALL,
    Operation.RESET_PASSWORD: _ALL,
}


def allowed_roles(operation: Operation) -> FrozenSet[UserRole]:
    """Roles allowed to perform an operation; unknown operations allow nobody."""
    return PERMISSIONS.get(operation, frozenset())


def is_allowed(role: UserRole, operation: Operation) -> bool:
    return role in allowed_roles(operation)


def authorize(identity: Identity, operation: Operation) -> Identity:
    """
    Check an identity against the capability table.

    Returns:
        The identity, for chaining in dependencies

    Raises:
        InsufficientPermissionsError: If the identity's role is not allowed
    """
    if not is_allowed(identity.role, operation):
        raise InsufficientPermissionsError(operation=operation.value)
    return identity
