"""Abstract base class for link store implementations."""

from abc import ABC, abstractmethod
from typing import Optional, List
from datetime import datetime

from .models import Link, Click, UptimeCheck, LinkPage, CheckStatus


class LinkStoreBase(ABC):
    """Abstract base class for link, click and uptime-check persistence."""

    def __init__(self, db_config: str):
        """Initialize store.

        Args:
            db_config: Database connection string
        """
        self.db_config = db_config

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables if the implementation needs them."""
        pass

    @abstractmethod
    async def create_link(
        self,
        short_code: str,
        target_url: str,
        created_at: Optional[datetime] = None,
    ) -> Link:
        """Create a new link.

        Args:
            short_code: The short code to use
            target_url: The URL to redirect to
            created_at: Optional creation timestamp (defaults to now)

        Returns:
            The created link

        Raises:
            ConflictError: If the short code is already taken
        """
        pass

    @abstractmethod
    async def get_link(self, short_code: str) -> Optional[Link]:
        """Get a link by its short code (case-sensitive).

        Returns:
            The link if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_links(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> LinkPage:
        """List links, newest first.

        Args:
            page: 1-indexed page number
            limit: Page size
            search: Optional case-insensitive substring matched against
                short code or target URL
        """
        pass

    @abstractmethod
    async def list_all_links(self) -> List[Link]:
        """Snapshot of every stored link."""
        pass

    @abstractmethod
    async def delete_link(self, short_code: str) -> bool:
        """Delete a link together with its clicks and uptime checks.

        All three deletions happen in one transaction.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    async def record_click(
        self,
        short_code: str,
        clicked_at: Optional[datetime] = None,
    ) -> Optional[Link]:
        """Count one redirect through a link.

        Atomically increments ``total_clicks``, sets ``last_clicked`` and
        appends a Click row.

        Returns:
            The updated link, or None if the short code is unknown
        """
        pass

    @abstractmethod
    async def list_clicks(self, link_id: str) -> List[Click]:
        """All clicks of a link, oldest first."""
        pass

    @abstractmethod
    async def add_uptime_check(
        self,
        link_id: str,
        status: CheckStatus,
        created_at: Optional[datetime] = None,
    ) -> UptimeCheck:
        """Append one uptime check result for a link."""
        pass

    @abstractmethod
    async def list_uptime_checks(
        self,
        link_id: str,
        limit: Optional[int] = None,
    ) -> List[UptimeCheck]:
        """Uptime checks of a link, newest first.

        Args:
            link_id: Owning link id
            limit: Optional maximum number of rows
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connections."""
        pass
