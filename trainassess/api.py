"""
Central API router and utilities for the trainassess service.

This module provides:
- A central router that includes the auth, user, question-set and attempt routers
- Exception handlers turning the error taxonomy into JSON responses
- The standard response helpers
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from trainassess.common.exceptions import BaseError, ErrorCode
from trainassess.common.logger import get_logger

logger = get_logger(__name__)

# Prefix shared by every API route
API_PREFIX = "/api"


# Standard API response model
class APIResponse:
    """Standard API response structure"""

    @staticmethod
    def success(data: Any = None, message: str = "Success") -> Dict[str, Any]:
        """
        Create a success response.

        Args:
            data: Response data
            message: Success message

        Returns:
            Response dictionary
        """
        response = {
            "status": "success",
            "message": message
        }
        if data is not None:
            response["data"] = data
        return response

    @staticmethod
    def error(message: str, details: Optional[Any] = None,
              code: Optional[str] = None) -> Dict[str, Any]:
        """
        Create an error response.

        Args:
            message: Error message
            details: Optional error details
            code: Optional error code

        Returns:
            Response dictionary
        """
        response = {
            "status": "error",
            "message": message
        }

        if details:
            response["details"] = details

        if code:
            response["code"] = code

        return response


async def base_error_handler(request: Request, exc: BaseError) -> JSONResponse:
    """
    Convert an application error into its HTTP response.

    Client errors are logged at warning level, server errors at error level
    with the underlying cause.
    """
    if exc.status_code >= 500:
        cause = exc.original_exception or exc
        logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({cause!r})")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.status_code} {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors and return a standardized 400 response.

    Args:
        request: The incoming request
        exc: The validation exception

    Returns:
        A JSON response with error details
    """
    error_details = []
    for error in exc.errors():
        error_details.append({
            "location": [str(part) for part in error.get("loc", [])],
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "")
        })

    logger.warning(f"{request.method} {request.url.path} rejected: invalid request data")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=APIResponse.error(
            "Invalid request data",
            details={"errors": error_details},
            code=ErrorCode.VALIDATION_ERROR.value
        )
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseError, base_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)


def build_router() -> APIRouter:
    """
    Build the router carrying every API route.

    ``/attempts`` is also mounted as ``/submissions`` for older clients.
    """
    from trainassess.attempts.router import router as attempts_router
    from trainassess.questions.router import router as questions_router
    from trainassess.users.router import auth_router, trainees_router, users_router

    main_router = APIRouter(prefix=API_PREFIX)
    main_router.include_router(auth_router, prefix="/auth", tags=["auth"])
    main_router.include_router(users_router, prefix="/users", tags=["users"])
    main_router.include_router(trainees_router, prefix="/trainees", tags=["users"])
    main_router.include_router(questions_router, prefix="/questions", tags=["questions"])
    main_router.include_router(attempts_router, prefix="/attempts", tags=["attempts"])
    main_router.include_router(attempts_router, prefix="/submissions", tags=["attempts"], include_in_schema=False)

    logger.debug(f"API router built with {len(main_router.routes)} routes")
    return main_router
