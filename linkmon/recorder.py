"""Probe-then-persist for a single link."""

import asyncio
import logging
from typing import Optional

from .database.base import LinkStoreBase
from .database.models import Link, UptimeCheck
from .errors import InternalError
from .prober import UptimeProber, ProbeResult


class UptimeRecorder:
    """Runs one probe against a link's target and stores the verdict."""

    def __init__(
        self,
        store: LinkStoreBase,
        prober: UptimeProber,
        write_timeout_seconds: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.prober = prober
        self.write_timeout_seconds = write_timeout_seconds
        self.logger = logger or logging.getLogger(__name__)

    async def record(self, link: Link, result: ProbeResult) -> UptimeCheck:
        """Persist a probe result for a link.

        Raises:
            InternalError: If the write does not finish in time
        """
        try:
            return await asyncio.wait_for(
                self.store.add_uptime_check(link.id, result.verdict.to_check_status()),
                timeout=self.write_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise InternalError(
                f"Timed out after {self.write_timeout_seconds}s writing uptime check"
            ) from e

    async def check_and_record(self, link: Link) -> UptimeCheck:
        """Probe ``link.target_url`` once and append the verdict."""
        result = await self.prober.probe(link.target_url)
        check = await self.record(link, result)
        self.logger.debug(
            f"Uptime check {link.short_code}: {result.verdict.value} "
            f"(status={result.status_code}, {result.latency_ms}ms)"
        )
        return check
