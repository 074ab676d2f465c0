"""Middleware and exception handlers for the web app."""

from .logging import LoggingMiddleware
from .errors import register_exception_handlers

__all__ = ["LoggingMiddleware", "register_exception_handlers"]
