"""
Authentication Framework

JWT bearer credentials, password hashing and the role-based capability
table that gates every API operation.
"""

from trainassess.common.auth.jwt import (
    create_access_token,
    decode_token,
    validate_token,
    get_token_identity,
    set_jwt_config,
    get_jwt_config,
    TokenType,
    JWTConfig
)

from trainassess.common.auth.user import (
    Identity,
    UserRole
)

from trainassess.common.auth.password import (
    hash_password,
    verify_password
)

from trainassess.common.auth.permissions import (
    Operation,
    PERMISSIONS,
    authorize,
    is_allowed
)

from trainassess.common.auth.dependencies import (
    authenticate,
    require
)

from trainassess.common.auth.exceptions import (
    MissingTokenError,
    InvalidTokenError,
    ExpiredTokenError,
    InvalidCredentialsError,
    InsufficientPermissionsError
)

# Public API
__all__ = [
    # JWT tokens
    'create_access_token',
    'decode_token',
    'validate_token',
    'get_token_identity',
    'set_jwt_config',
    'get_jwt_config',
    'TokenType',
    'JWTConfig',

    # Identity
    'Identity',
    'UserRole',

    # Password utilities
    'hash_password',
    'verify_password',

    # Capability table
    'Operation',
    'PERMISSIONS',
    'authorize',
    'is_allowed',

    # Request authentication
    'authenticate',
    'require',

    # Exceptions
    'MissingTokenError',
    'InvalidTokenError',
    'ExpiredTokenError',
    'InvalidCredentialsError',
    'InsufficientPermissionsError',
]
