"""HTTP middleware."""
from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
