"""API middleware."""

from warehouse.api.middleware.error_handler import ErrorHandlerMiddleware
from warehouse.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
