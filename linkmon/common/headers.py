"""Proxy header handling for building public URLs."""

from typing import Mapping, Optional


def _lower(headers: Mapping[str, str]) -> dict:
    return {k.lower(): v for k, v in headers.items()}


def build_base_url(
    headers: Mapping[str, str],
    fallback_base_url: str,
    request_scheme: Optional[str] = None,
    request_host: Optional[str] = None,
) -> str:
    """Build base URL from headers or fallback.

    Priority:
    1. X-Forwarded-Proto + X-Forwarded-Host
    2. Request scheme + host
    3. Fallback base URL from config

    Returns:
        Base URL (e.g., https://example.com)
    """
    headers_lower = _lower(headers)
    proto = headers_lower.get("x-forwarded-proto")
    host = headers_lower.get("x-forwarded-host")

    if proto and host:
        return f"{proto}://{host}"

    if request_scheme and request_host:
        return f"{request_scheme}://{request_host}"

    return fallback_base_url.rstrip("/")


def get_forwarded_path_prefix(headers: Mapping[str, str]) -> str:
    """Path prefix from X-Forwarded-Prefix, normalized to '/prefix' or ''."""
    value = _lower(headers).get("x-forwarded-prefix")
    if not value:
        return ""
    p = value.strip().strip("/")
    return "/" + p if p else ""
