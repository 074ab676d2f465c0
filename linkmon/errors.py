"""
Error classes for the link monitoring service.

Each error carries the HTTP status code it is rendered with at the API
boundary. Probe failures are not represented here: they collapse into
``Verdict.DOWN`` inside the prober.
"""

from typing import Optional, Dict, Any


class LinkError(Exception):
    """
    Base error class.

    Attributes:
        status_code: HTTP status code (default: 500)
        message: Error message (default: "Internal Server Error")
        details: Optional additional error details
    """
    status_code: int = 500
    message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        """
        Initialize error.

        Args:
            message: Error message (overrides default)
            details: Optional additional error details
        """
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(LinkError):
    """400 Missing or malformed input."""
    status_code = 400
    message = "Validation error"


class NotFoundError(LinkError):
    """404 No link for the given short code."""
    status_code = 404
    message = "Link not found"


class ConflictError(LinkError):
    """409 Short code already taken."""
    status_code = 409
    message = "Short code already exists"


class InternalError(LinkError):
    """500 Unexpected persistence or infrastructure failure."""
    status_code = 500
    message = "Internal Server Error"
