"""Common utilities for the link monitor."""

from .validators import is_valid_url, is_valid_short_code, is_valid_page
from .headers import build_base_url, get_forwarded_path_prefix
from .url_builder import build_short_url, format_uptime
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "is_valid_short_code",
    "is_valid_page",
    "build_base_url",
    "get_forwarded_path_prefix",
    "build_short_url",
    "format_uptime",
    "setup_logging",
    "get_logger",
]
