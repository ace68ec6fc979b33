"""
Authentication Exceptions

Specialised authentication and authorization errors. They extend the
common taxonomy so the API layer maps them to 401 and 403 respectively.
"""

from trainassess.common.exceptions import AuthenticationError, AuthorizationError


class MissingTokenError(AuthenticationError):
    """Exception raised when a required token is missing."""

    def __init__(self, message: str = "Access token required"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Exception raised when a token is invalid."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class ExpiredTokenError(AuthenticationError):
    """Exception raised when a token has expired."""

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class InvalidCredentialsError(AuthenticationError):
    """Exception raised when credentials are invalid."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class InsufficientPermissionsError(AuthorizationError):
    """Exception raised when a user does not have sufficient permissions."""

    def __init__(self, message: str = "Insufficient permissions", operation: str = None):
        super().__init__(message, operation=operation)
