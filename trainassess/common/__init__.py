"""
Common Components for trainassess

Shared infrastructure used by the user, question-set and attempt modules:
logging, the error taxonomy and authentication.
"""

from trainassess.common.logger import app_logger
from trainassess.common.exceptions import (
    BaseError,
    ErrorCode,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    DependencyError,
    ConfigurationError
)

__all__ = [
    'app_logger',
    'BaseError',
    'ErrorCode',
    'ValidationError',
    'AuthenticationError',
    'AuthorizationError',
    'NotFoundError',
    'ConflictError',
    'DependencyError',
    'ConfigurationError',
]
