"""
Authentication dependencies for the trainassess API.

FastAPI dependencies that authenticate the bearer credential on a request
and check the caller against the capability table.
"""

from typing import Callable, Optional

from fastapi import Header

from trainassess.common.auth.exceptions import InvalidTokenError, MissingTokenError
from trainassess.common.auth.jwt import get_token_identity
from trainassess.common.auth.permissions import Operation, authorize
from trainassess.common.auth.user import Identity
from trainassess.common.logger import get_logger

logger = get_logger(__name__)


def extract_token_from_header(auth_header: Optional[str]) -> str:
    """
    Extract a JWT token from an Authorization header.

    Raises:
        MissingTokenError: If the header is absent or empty
        InvalidTokenError: If the header is not ``Bearer <token>``
    """
    if not auth_header:
        raise MissingTokenError()

    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise InvalidTokenError("Invalid authorization header format")

    return parts[1]


def authenticate(auth_header: Optional[str]) -> Identity:
    """
    Authenticate a request from its Authorization header.

    Returns:
        The identity carried by the token
    """
    token = extract_token_from_header(auth_header)
    return get_token_identity(token)


def require(operation: Operation) -> Callable:
    """
    Build a dependency that authenticates the caller and authorizes an operation.

    Usage:
        identity: Identity = Depends(require(Operation.EVALUATE_ATTEMPT))
    """
    async def dependency(authorization: Optional[str] = Header(None)) -> Identity:
        identity = authenticate(authorization)
        authorize(identity, operation)
        logger.debug(f"{identity.email} ({identity.role.value}) authorized for {operation.value}")
        return identity

    dependency.__name__ = f"require_{operation.value}"
    return dependency
