"""API middleware."""

from scentledger.api.middleware.error_handler import ErrorHandlerMiddleware
from scentledger.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
