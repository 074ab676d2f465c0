"""Data models for links, clicks and uptime checks."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional


class CheckStatus(str, Enum):
    """Stored outcome of a single uptime check."""

    UP = "UP"
    DOWN = "DOWN"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Link:
    """A short code mapped to a target URL, with its click counters."""

    id: str
    short_code: str
    target_url: str
    created_at: datetime
    total_clicks: int = 0
    last_clicked: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "shortCode": self.short_code,
            "targetUrl": self.target_url,
            "totalClicks": self.total_clicks,
            "lastClicked": _iso(self.last_clicked),
            "createdAt": _iso(self.created_at),
        }

    @classmethod
    def from_record(cls, data) -> "Link":
        """Create from a database row or mapping."""
        return cls(
            id=data["id"],
            short_code=data["short_code"],
            target_url=data["target_url"],
            created_at=ensure_utc(data["created_at"]),
            total_clicks=data["total_clicks"] or 0,
            last_clicked=ensure_utc(data["last_clicked"]),
        )


@dataclass(frozen=True)
class Click:
    """One redirect through a link. Immutable."""

    id: str
    link_id: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "linkId": self.link_id,
            "createdAt": _iso(self.created_at),
        }

    @classmethod
    def from_record(cls, data) -> "Click":
        return cls(
            id=data["id"],
            link_id=data["link_id"],
            created_at=ensure_utc(data["created_at"]),
        )


@dataclass(frozen=True)
class UptimeCheck:
    """One recorded liveness verdict for a link. Immutable."""

    id: str
    link_id: str
    status: CheckStatus
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "linkId": self.link_id,
            "status": self.status.value,
            "createdAt": _iso(self.created_at),
        }

    @classmethod
    def from_record(cls, data) -> "UptimeCheck":
        return cls(
            id=data["id"],
            link_id=data["link_id"],
            status=CheckStatus(data["status"]),
            created_at=ensure_utc(data["created_at"]),
        )


@dataclass
class LinkPage:
    """One page of links plus the total number of matches."""

    items: List[Link]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def pagination(self) -> dict:
        """Pagination block for API responses."""
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


@dataclass
class LinkStats:
    """Everything a stats request returns for one link."""

    link: Link
    clicks: List[Click] = field(default_factory=list)
    uptime_checks: List[UptimeCheck] = field(default_factory=list)
    daily_uptime: list = field(default_factory=list)

    def to_dict(self) -> dict:
        data = self.link.to_dict()
        data["clicks"] = [click.to_dict() for click in self.clicks]
        data["uptimeChecks"] = [check.to_dict() for check in self.uptime_checks]
        data["dailyUptime"] = [bucket.to_dict() for bucket in self.daily_uptime]
        return data
