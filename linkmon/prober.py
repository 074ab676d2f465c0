"""Liveness probing of target URLs."""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import aiohttp

from .database.models import CheckStatus


DEFAULT_PROBE_TIMEOUT_SECONDS = 5.0


class Verdict(str, Enum):
    """Binary outcome of one probe."""

    UP = "UP"
    DOWN = "DOWN"

    def to_check_status(self) -> CheckStatus:
        return CheckStatus(self.value)


def classify_status(status_code: Optional[int]) -> Verdict:
    """Map an HTTP status (or no response at all) to a verdict.

    Only 2xx is UP. ``None`` means the request never produced a response.
    """
    if status_code is not None and 200 <= status_code < 300:
        return Verdict.UP
    return Verdict.DOWN


@dataclass(frozen=True)
class ProbeResult:
    """Verdict of one probe plus what was observed on the wire."""

    url: str
    verdict: Verdict
    status_code: Optional[int] = None
    error: str = ""
    latency_ms: float = 0.0

    @property
    def is_up(self) -> bool:
        return self.verdict is Verdict.UP


class UptimeProber:
    """Issues one HEAD request per probe and never raises on failure."""

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize prober.

        Args:
            timeout_seconds: Total time budget for one probe, connect included
            logger: Optional logger instance
        """
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(__name__)
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            )
        return self._session

    async def probe(self, url: str) -> ProbeResult:
        """Probe a URL once.

        Args:
            url: Target URL

        Returns:
            ProbeResult; any failure (bad URL, DNS, refused connection,
            timeout, non-2xx) yields a DOWN verdict
        """
        start_time = time.monotonic()
        status_code = None
        error = ""

        try:
            session = self._get_session()
            async with session.head(url, allow_redirects=True) as response:
                status_code = response.status
        except asyncio.TimeoutError:
            error = f"Timeout after {self.timeout_seconds}s"
        except Exception as e:
            error = f"{type(e).__name__}: {e}"

        latency_ms = round((time.monotonic() - start_time) * 1000, 2)
        verdict = classify_status(status_code)

        if verdict is Verdict.DOWN:
            self.logger.debug(f"Probe DOWN for {url}: status={status_code} {error}")

        return ProbeResult(
            url=url,
            verdict=verdict,
            status_code=status_code,
            error=error,
            latency_ms=latency_ms,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
