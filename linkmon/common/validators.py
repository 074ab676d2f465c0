"""Input validation for link creation and listing."""

from urllib.parse import urlparse
from typing import Tuple

from ..shortcode import ShortCodeGenerator

MAX_URL_LENGTH = 2048
MAX_PAGE_SIZE = 100


# Paths served by the app itself; a short code must not shadow them
RESERVED_CODES = {
    "api", "healthz", "health", "docs", "redoc", "openapi.json",
    "favicon.ico", "robots.txt", "static", "links", "admin",
}


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a target URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "Target URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {str(e)}"

    if result.scheme not in ("http", "https"):
        return False, "URL must use http or https protocol"

    if not result.netloc:
        return False, "URL must have a valid domain"

    return True, ""


def is_valid_short_code(short_code: str, min_length: int = 4, max_length: int = 20) -> Tuple[bool, str]:
    """Validate a custom short code.

    Args:
        short_code: The short code to validate
        min_length: Minimum length for short code
        max_length: Maximum length for short code

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Short code is required"

    if len(short_code) < min_length:
        return False, f"Short code must be at least {min_length} characters"

    if len(short_code) > max_length:
        return False, f"Short code must be at most {max_length} characters"

    if not ShortCodeGenerator.is_valid_format(short_code):
        return False, "Short code can only contain letters, numbers, hyphens, and underscores"

    if short_code.lower() in RESERVED_CODES:
        return False, f"'{short_code}' is a reserved word and cannot be used"

    return True, ""


def is_valid_page(page: int, limit: int, max_limit: int = MAX_PAGE_SIZE) -> Tuple[bool, str]:
    """Validate pagination parameters."""
    if page < 1:
        return False, "page must be at least 1"
    if limit < 1:
        return False, "limit must be at least 1"
    if limit > max_limit:
        return False, f"limit must be at most {max_limit}"
    return True, ""
