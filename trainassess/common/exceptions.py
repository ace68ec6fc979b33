"""
Common Exception Classes

This module defines the error taxonomy used throughout the application.
Every error carries a machine-readable code and the HTTP status the API
layer answers with, so services raise them directly and routers never
build error responses by hand.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes returned to API clients."""
    UNKNOWN_ERROR = "unknown_error"
    VALIDATION_ERROR = "validation_error"
    AUTHENTICATION_ERROR = "authentication_error"
    AUTHORIZATION_ERROR = "authorization_error"
    NOT_FOUND_ERROR = "not_found_error"
    CONFLICT_ERROR = "conflict_error"
    DEPENDENCY_ERROR = "dependency_error"
    CONFIGURATION_ERROR = "configuration_error"


class BaseError(Exception):
    """Base class for all custom exceptions."""

    code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Error message shown to the caller
            details: Optional structured context (field errors, ids)
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as an API error body."""
        body = {
            "status": "error",
            "message": self.message,
            "code": self.code.value
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(BaseError):
    """Raised for malformed or missing input, out-of-range scores and empty answer lists."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 400

    def __init__(self, message: str, errors: Optional[Dict[str, Any]] = None):
        """
        Initialize the validation error.

        Args:
            message: Error message
            errors: Mapping of field path to problem description
        """
        super().__init__(message, details={"errors": errors} if errors else None)
        self.errors = errors or {}


class AuthenticationError(BaseError):
    """Raised when a credential is missing, invalid or expired."""

    code = ErrorCode.AUTHENTICATION_ERROR
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(BaseError):
    """Raised when an authenticated caller's role does not permit the operation."""

    code = ErrorCode.AUTHORIZATION_ERROR
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions", operation: Optional[str] = None):
        super().__init__(message, details={"operation": operation} if operation else None)
        self.operation = operation


class NotFoundError(BaseError):
    """Raised when a user, question-set or attempt id does not exist."""

    code = ErrorCode.NOT_FOUND_ERROR
    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        """
        Initialize the not found error.

        Args:
            resource_type: Type of resource that wasn't found
            resource_id: ID of the resource that wasn't found
        """
        super().__init__(f"{resource_type} not found", details={"id": str(resource_id)})
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(BaseError):
    """Raised when a request conflicts with the current state of a resource."""

    code = ErrorCode.CONFLICT_ERROR
    status_code = 409


class DependencyError(BaseError):
    """Raised when the document store cannot be reached or fails."""

    code = ErrorCode.DEPENDENCY_ERROR
    status_code = 500

    def to_dict(self) -> Dict[str, Any]:
        # The underlying driver message stays in the logs.
        return {
            "status": "error",
            "message": "Internal server error",
            "code": self.code.value
        }


class ConfigurationError(BaseError):
    """Raised for invalid configuration values or files."""

    code = ErrorCode.CONFIGURATION_ERROR
    status_code = 500

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(f"Configuration error: {message}")
        self.config_key = config_key
