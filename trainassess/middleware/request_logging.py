"""
Request Logging Middleware

Logs method, path, status and duration of every API request.
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from trainassess.common.logger import get_logger

# Setup module logger
logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware logging API requests."""

    def __init__(self, app, path_prefix: str = "/api"):
        super().__init__(app)
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next):
        """
        Process the request and log its outcome.

        Args:
            request: The incoming request
            call_next: The next middleware/route handler

        Returns:
            The response from the next handler
        """
        path = request.url.path
        if not path.startswith(self.path_prefix):
            return await call_next(request)

        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {path} failed after {time.time() - start_time:.3f}s: {e}"
            )
            raise

        logger.info(
            f"{request.method} {path} {response.status_code} "
            f"in {(time.time() - start_time) * 1000:.1f}ms ip={client_ip}"
        )
        return response
