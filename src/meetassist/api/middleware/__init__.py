"""API middleware package."""

from src.meetassist.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
