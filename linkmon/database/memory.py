"""In-process link store.

Keeps everything in dictionaries owned by one event loop. Every write group
runs under a single ``asyncio.Lock`` so it is applied as one unit, which
mirrors the transactions of the PostgreSQL store.
"""

import asyncio
import logging
import uuid
from typing import Optional, List, Dict
from datetime import datetime

from .base import LinkStoreBase
from .models import Link, Click, UptimeCheck, LinkPage, CheckStatus, utc_now, ensure_utc
from ..errors import ConflictError, NotFoundError


class MemoryLinkStore(LinkStoreBase):
    """Dictionary-backed store, selected with ``memory://``."""

    def __init__(
        self,
        db_config: str = "memory://",
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(db_config)
        self.logger = logger or logging.getLogger(__name__)

        self._links: Dict[str, Link] = {}
        self._clicks: Dict[str, List[Click]] = {}
        self._checks: Dict[str, List[UptimeCheck]] = {}
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        self.logger.debug("Memory store needs no schema")

    async def create_link(
        self,
        short_code: str,
        target_url: str,
        created_at: Optional[datetime] = None,
    ) -> Link:
        async with self._lock:
            if short_code in self._links:
                self.logger.warning(f"Short code already exists: {short_code}")
                raise ConflictError(f"Short code '{short_code}' already exists")

            link = Link(
                id=str(uuid.uuid4()),
                short_code=short_code,
                target_url=target_url,
                created_at=ensure_utc(created_at) or utc_now(),
            )
            self._links[short_code] = link
            self._clicks[link.id] = []
            self._checks[link.id] = []

        self.logger.info(f"Created link: {short_code} -> {target_url}")
        return self._copy(link)

    async def get_link(self, short_code: str) -> Optional[Link]:
        link = self._links.get(short_code)
        return self._copy(link) if link else None

    async def list_links(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> LinkPage:
        links = list(self._links.values())
        if search:
            needle = search.lower()
            links = [
                link for link in links
                if needle in link.short_code.lower() or needle in link.target_url.lower()
            ]

        links.sort(key=lambda link: link.created_at, reverse=True)
        offset = (page - 1) * limit

        return LinkPage(
            items=[self._copy(link) for link in links[offset:offset + limit]],
            total=len(links),
            page=page,
            limit=limit,
        )

    async def list_all_links(self) -> List[Link]:
        return [self._copy(link) for link in self._links.values()]

    async def delete_link(self, short_code: str) -> bool:
        async with self._lock:
            link = self._links.get(short_code)
            if link is None:
                return False

            self._clicks.pop(link.id, None)
            self._checks.pop(link.id, None)
            del self._links[short_code]

        self.logger.info(f"Deleted link: {short_code}")
        return True

    async def record_click(
        self,
        short_code: str,
        clicked_at: Optional[datetime] = None,
    ) -> Optional[Link]:
        clicked_at = ensure_utc(clicked_at) or utc_now()

        async with self._lock:
            link = self._links.get(short_code)
            if link is None:
                return None

            link.total_clicks += 1
            link.last_clicked = clicked_at
            self._clicks[link.id].append(
                Click(id=str(uuid.uuid4()), link_id=link.id, created_at=clicked_at)
            )
            updated = self._copy(link)

        self.logger.debug(f"Recorded click for {short_code}: {updated.total_clicks}")
        return updated

    async def list_clicks(self, link_id: str) -> List[Click]:
        return sorted(self._clicks.get(link_id, []), key=lambda click: click.created_at)

    async def add_uptime_check(
        self,
        link_id: str,
        status: CheckStatus,
        created_at: Optional[datetime] = None,
    ) -> UptimeCheck:
        async with self._lock:
            if link_id not in self._checks:
                raise NotFoundError(f"Unknown link id: {link_id}")

            check = UptimeCheck(
                id=str(uuid.uuid4()),
                link_id=link_id,
                status=CheckStatus(status),
                created_at=ensure_utc(created_at) or utc_now(),
            )
            self._checks[link_id].append(check)

        return check

    async def list_uptime_checks(
        self,
        link_id: str,
        limit: Optional[int] = None,
    ) -> List[UptimeCheck]:
        checks = sorted(
            self._checks.get(link_id, []),
            key=lambda check: check.created_at,
            reverse=True,
        )
        return checks[:limit] if limit is not None else checks

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self.logger.debug("Memory store closed")

    @staticmethod
    def _copy(link: Link) -> Link:
        return Link(
            id=link.id,
            short_code=link.short_code,
            target_url=link.target_url,
            created_at=link.created_at,
            total_clicks=link.total_clicks,
            last_clicked=link.last_clicked,
        )
