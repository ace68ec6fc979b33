"""
User Directory Service

Registration, login and account administration. Registration always
creates trainees; admins are created by the superadmin, and one default
superadmin is seeded at startup.
"""

from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from email_validator import EmailNotValidError, validate_email

from trainassess.common.auth import (
    Identity,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    Operation,
    UserRole,
    create_access_token,
    hash_password,
    verify_password
)
from trainassess.common.exceptions import ConflictError, NotFoundError, ValidationError
from trainassess.common.logger import LoggerAdapter, app_logger
from trainassess.common.timeutils import utcnow
from trainassess.users.models import User
from trainassess.users.repository import UserRepository

logger = LoggerAdapter(app_logger.getChild("users"))

MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6

# Roles the superadmin may give to an account.
ASSIGNABLE_ROLES = (UserRole.TRAINEE, UserRole.ADMIN)


def normalize_email(email: Any) -> str:
    """
    Validate an email address and return it lower-cased.

    Raises:
        ValidationError: If the address is malformed
    """
    if not isinstance(email, str):
        raise ValidationError("Invalid email", {"email": "Email is required"})
    try:
        result = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError("Invalid email", {"email": str(e)}) from e
    return result.normalized.lower()


def check_name(name: Any) -> str:
    if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
        raise ValidationError(
            "Invalid name",
            {"name": f"Name must be at least {MIN_NAME_LENGTH} characters"}
        )
    return name.strip()


def check_password(password: Any, field_name: str = "password") -> str:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            "Invalid password",
            {field_name: f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}
        )
    return password


def parse_role(value: Any) -> UserRole:
    try:
        role = value if isinstance(value, UserRole) else UserRole(value)
    except ValueError:
        role = None
    if role not in ASSIGNABLE_ROLES:
        allowed = [r.value for r in ASSIGNABLE_ROLES]
        raise ValidationError("Invalid role", {"role": f"Role must be one of {allowed}"})
    return role


class UserService:
    """Service for accounts and credentials."""

    def __init__(self, store):
        self.users = UserRepository(store)

    def issue_token(self, user: User) -> str:
        return create_access_token(user.identity)

    async def _create(self, name: str, email: str, password: str, role: UserRole) -> User:
        name = check_name(name)
        email = normalize_email(email)
        check_password(password)

        if await self.users.get_by_email(email) is not None:
            raise ConflictError("User with this email already exists", details={"email": email})

        user = await self.users.create(User(
            id=None,
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role
        ))
        logger.with_context(user_id=user.id, role=role.value).info("User created")
        return user

    async def register(self, name: str, email: str, password: str) -> Tuple[User, str]:
        """
        Register a trainee account.

        Returns:
            The new user and an access token for it

        Raises:
            ValidationError: For a short name or password, or a malformed email
            ConflictError: If the email is already registered
        """
        user = await self._create(name, email, password, UserRole.TRAINEE)
        return user, self.issue_token(user)

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials and issue a token.

        An unknown email and a wrong password fail with the same error.
        """
        user = None
        if isinstance(email, str) and email.strip():
            user = await self.users.get_by_email(email)
        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning("Failed login attempt")
            raise InvalidCredentialsError()

        logger.with_context(user_id=user.id).info("User logged in")
        return user, self.issue_token(user)

    async def get_profile(self, user_id: str) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def reset_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """
        Change a user's own password.

        Raises:
            InvalidCredentialsError: If the current password is wrong
            ValidationError: If the new password is too short
        """
        user = await self.get_profile(user_id)
        if not verify_password(current_password or "", user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")
        check_password(new_password, "newPassword")

        await self.users.update(replace(
            user,
            password_hash=hash_password(new_password),
            updated_at=utcnow()
        ))
        logger.with_context(user_id=user_id).info("Password reset")

    async def list_users(self) -> List[User]:
        return await self.users.list_all()

    async def list_trainees(self) -> List[User]:
        return await self.users.list_all(UserRole.TRAINEE)

    async def create_user(self, name: str, email: str, password: str, role: Any = UserRole.TRAINEE) -> User:
        """Create a trainee or admin account on behalf of the superadmin."""
        return await self._create(name, email, password, parse_role(role))

    async def update_user(self, actor: Identity, user_id: str, changes: Dict[str, Any]) -> User:
        """
        Update another account's name, email, role or password.

        Keys absent from ``changes`` (or set to None) are left unchanged.

        Raises:
            NotFoundError: If the user does not exist
            InsufficientPermissionsError: When modifying another superadmin, or
                changing a superadmin's role
            ConflictError: If the new email belongs to another account
        """
        user = await self.get_profile(user_id)
        if user.role == UserRole.SUPERADMIN and user.id != actor.id:
            raise InsufficientPermissionsError(
                "Cannot modify another superadmin account", Operation.MANAGE_USERS.value
            )

        updates: Dict[str, Any] = {}
        if changes.get("name") is not None:
            updates["name"] = check_name(changes["name"])
        if changes.get("email") is not None:
            email = normalize_email(changes["email"])
            other = await self.users.get_by_email(email)
            if other is not None and other.id != user.id:
                raise ConflictError("User with this email already exists", details={"email": email})
            updates["email"] = email
        if changes.get("role") is not None:
            if user.role == UserRole.SUPERADMIN:
                raise InsufficientPermissionsError(
                    "Superadmin role cannot be changed", Operation.MANAGE_USERS.value
                )
            updates["role"] = parse_role(changes["role"])
        if changes.get("password") is not None:
            updates["password_hash"] = hash_password(check_password(changes["password"]))

        updated = await self.users.update(replace(user, updated_at=utcnow(), **updates))
        if updated is None:
            raise NotFoundError("User", user_id)

        logger.with_context(user_id=user_id, actor_id=actor.id).info(
            f"User updated: {sorted(updates) or 'no changes'}"
        )
        return updated

    async def delete_user(self, user_id: str) -> None:
        """
        Delete an account.

        Raises:
            NotFoundError: If the user does not exist
            InsufficientPermissionsError: If the account is a superadmin
        """
        user = await self.get_profile(user_id)
        if user.role == UserRole.SUPERADMIN:
            raise InsufficientPermissionsError(
                "Superadmin accounts cannot be deleted", Operation.MANAGE_USERS.value
            )
        await self.users.delete(user_id)
        logger.with_context(user_id=user_id).info("User deleted")

    async def ensure_default_admin(self, name: str, email: str, password: str) -> Optional[User]:
        """
        Seed a superadmin when none exists.

        Returns:
            The created superadmin, or None if one already existed or the
            email belongs to another account
        """
        if await self.users.count_by_role(UserRole.SUPERADMIN):
            return None

        existing = await self.users.get_by_email(email)
        if existing is not None:
            logger.with_context(user_id=existing.id).error(
                f"Default superadmin not created: {existing.email} is already registered as {existing.role.value}"
            )
            return None

        user = await self._create(name, email, password, UserRole.SUPERADMIN)
        logger.info(f"Default superadmin created: {user.email}")
        return user
