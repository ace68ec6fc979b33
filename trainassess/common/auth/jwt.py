"""
JWT Authentication Module

This module provides utilities for JWT-based authentication: creating
access tokens for an identity and validating and decoding them back.
"""

import datetime
import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional

# Using PyJWT for JWT operations
import jwt

from trainassess.common.auth.exceptions import InvalidTokenError, ExpiredTokenError
from trainassess.common.auth.user import Identity, UserRole


class TokenType(enum.Enum):
    """Types of JWT tokens supported by the system."""

    ACCESS = "access"


@dataclass
class JWTConfig:
    """
    Configuration for JWT tokens.

    Attributes:
        secret_key: Secret key used for signing tokens
        algorithm: Algorithm used for signing tokens
        access_token_expires: Access token expiration time in minutes
        token_issuer: Issuer of the tokens
    """
    secret_key: str
    algorithm: str = "HS256"
    access_token_expires: int = 24 * 60  # minutes
    token_issuer: str = "trainassess-api"


# Global JWT configuration, replaced from settings when the app is created
_jwt_config = JWTConfig(secret_key="dev-secret-key")


def set_jwt_config(config: JWTConfig) -> None:
    """Set the global JWT configuration."""
    global _jwt_config
    _jwt_config = config


def get_jwt_config() -> JWTConfig:
    """Get the current JWT configuration."""
    return _jwt_config


def create_access_token(identity: Identity, expires_in: Optional[int] = None) -> str:
    """
    Create a signed access token for an identity.

    Args:
        identity: The identity to encode (id, email, role, name)
        expires_in: Token expiration time in minutes (overrides config)

    Returns:
        The JWT access token as a string
    """
    config = get_jwt_config()

    now = datetime.datetime.now(datetime.timezone.utc)
    minutes = expires_in if expires_in is not None else config.access_token_expires

    payload = {
        "sub": str(identity.id),
        "iat": now,
        "exp": now + datetime.timedelta(minutes=minutes),
        "iss": config.token_issuer,
        "type": TokenType.ACCESS.value
    }
    payload.update(identity.to_claims())

    return jwt.encode(payload, config.secret_key, algorithm=config.algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a token.

    Args:
        token: The token to decode

    Returns:
        The decoded payload

    Raises:
        ExpiredTokenError: If the token has expired
        InvalidTokenError: If the signature, issuer or format is invalid
    """
    config = get_jwt_config()
    try:
        return jwt.decode(
            token,
            config.secret_key,
            algorithms=[config.algorithm],
            issuer=config.token_issuer,
            options={"require": ["exp", "iat", "sub"]}
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredTokenError()
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {e}")


def validate_token(token: str, expected_type: TokenType = TokenType.ACCESS) -> Dict[str, Any]:
    """
    Decode a token and check its type.

    Raises:
        InvalidTokenError: If the token is not of the expected type
    """
    payload = decode_token(token)
    if payload.get("type") != expected_type.value:
        raise InvalidTokenError(f"Expected {expected_type.value} token")
    return payload


def get_token_identity(token: str) -> Identity:
    """
    Build the identity carried by an access token.

    Raises:
        InvalidTokenError: If required claims are missing or the role is unknown
    """
    payload = validate_token(token, TokenType.ACCESS)

    email = payload.get("email")
    role = payload.get("role")
    if not email or not role:
        raise InvalidTokenError("Token is missing identity claims")

    try:
        user_role = UserRole(role)
    except ValueError:
        raise InvalidTokenError(f"Unknown role in token: {role}")

    return Identity(
        id=payload["sub"],
        email=email,
        role=user_role,
        name=payload.get("name", "")
    )
