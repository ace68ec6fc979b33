"""
Middleware Package

This package contains middleware components for the trainassess service.
"""

from trainassess.middleware.request_logging import RequestLoggingMiddleware

__all__ = ['RequestLoggingMiddleware']
