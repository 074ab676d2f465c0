"""Business logic service for links, redirects and uptime stats."""

import logging
import time
from typing import Optional, Dict, Any, Callable
from datetime import date, datetime

from .shortcode import ShortCodeGenerator
from .database.base import LinkStoreBase
from .database.models import Link, LinkPage, LinkStats, utc_now
from .errors import ConflictError, InternalError, NotFoundError, ValidationError
from .recorder import UptimeRecorder
from .stats import build_daily_report
from .common.validators import is_valid_url, is_valid_short_code, is_valid_page


STATS_RECENT_CHECKS_LIMIT = 50


class LinkService:
    """Service layer for link management, click accounting and stats."""

    def __init__(
        self,
        store: LinkStoreBase,
        recorder: UptimeRecorder,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
        recent_checks_limit: int = STATS_RECENT_CHECKS_LIMIT,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize link service.

        Args:
            store: Link store
            recorder: Probe-and-persist step used for fresh stats samples
            short_code_generator: Optional short code generator
            logger: Optional logger
            max_collision_retries: Maximum retries on generated-code collision
            recent_checks_limit: Uptime checks shown in a stats response
            clock: Source of the current time
        """
        self.store = store
        self.recorder = recorder
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries
        self.recent_checks_limit = recent_checks_limit
        self.clock = clock

    async def create_link(
        self,
        target_url: Optional[str],
        custom_code: Optional[str] = None,
    ) -> Link:
        """Create a new link.

        Args:
            target_url: URL to redirect to
            custom_code: Optional custom short code

        Returns:
            The created link

        Raises:
            ValidationError: If the URL or custom code is missing or invalid
            ConflictError: If the custom code already exists
        """
        if not target_url:
            raise ValidationError("Target URL is required")

        is_valid, error = is_valid_url(target_url)
        if not is_valid:
            raise ValidationError(f"Invalid URL: {error}")

        if custom_code:
            is_valid, error = is_valid_short_code(custom_code)
            if not is_valid:
                raise ValidationError(f"Invalid short code: {error}")

            return await self.store.create_link(custom_code, target_url)

        return await self._create_with_generated_code(target_url)

    async def _create_with_generated_code(self, target_url: str) -> Link:
        """Insert with random codes until one does not collide."""
        for attempt in range(self.max_collision_retries):
            code = self.generator.generate_random()
            try:
                link = await self.store.create_link(code, target_url)
            except ConflictError:
                self.logger.debug(f"Generated code collided (attempt {attempt + 1}): {code}")
                continue
            return link

        # Last resort: UUID-based code
        code = self.generator.generate_from_uuid(length=8)
        try:
            return await self.store.create_link(code, target_url)
        except ConflictError as e:
            raise InternalError("Unable to generate unique short code after multiple attempts") from e

    async def get_link(self, short_code: str) -> Link:
        """Get a link or raise ``NotFoundError``."""
        link = await self.store.get_link(short_code)
        if link is None:
            raise NotFoundError(f"Link '{short_code}' not found")
        return link

    async def list_links(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> LinkPage:
        """List links, newest first, optionally filtered by a substring."""
        is_valid, error = is_valid_page(page, limit)
        if not is_valid:
            raise ValidationError(error)

        search = search.strip() if search else None
        return await self.store.list_links(page=page, limit=limit, search=search or None)

    async def resolve_redirect(self, short_code: str) -> Link:
        """Count a click and return the link to redirect to.

        Raises:
            NotFoundError: If the short code is unknown
        """
        link = await self.store.record_click(short_code, clicked_at=self.clock())
        if link is None:
            self.logger.warning(f"Short code not found: {short_code}")
            raise NotFoundError(f"Link '{short_code}' not found")
        return link

    async def get_link_stats(self, short_code: str, today: Optional[date] = None) -> LinkStats:
        """Link details, click history and the 7-day uptime report.

        Takes one fresh uptime sample before reading history, so the report
        always contains at least one check from the time of the request. The
        daily report is built from the full check history; only the returned
        check list is capped.

        Args:
            short_code: The short code to report on
            today: Last day of the report (defaults to the current UTC date)
        """
        link = await self.get_link(short_code)

        await self.recorder.check_and_record(link)

        # Re-read so counters reflect clicks that landed meanwhile
        link = await self.get_link(short_code)
        clicks = await self.store.list_clicks(link.id)
        checks = await self.store.list_uptime_checks(link.id)

        report_day = today or self.clock().date()
        daily_uptime = build_daily_report(checks, today=report_day)

        self.logger.debug(
            f"Stats for {short_code}: {len(clicks)} clicks, {len(checks)} uptime checks"
        )

        return LinkStats(
            link=link,
            clicks=clicks,
            uptime_checks=checks[:self.recent_checks_limit],
            daily_uptime=daily_uptime,
        )

    async def delete_link(self, short_code: str) -> None:
        """Delete a link with its clicks and uptime checks.

        Raises:
            NotFoundError: If the short code is unknown
        """
        deleted = await self.store.delete_link(short_code)
        if not deleted:
            raise NotFoundError("Link not found or already deleted")
        self.logger.info(f"Deleted link: {short_code}")

    async def health_check(self) -> Dict[str, Any]:
        """Database round-trip check.

        Returns:
            Dictionary with ``connected`` and ``response_time_ms``
        """
        start = time.monotonic()
        connected = await self.store.health_check()
        elapsed_ms = round((time.monotonic() - start) * 1000)

        return {
            "connected": connected,
            "response_time_ms": elapsed_ms if connected else 0,
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.recorder.prober.close()
        await self.store.close()
