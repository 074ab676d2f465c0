"""Daily uptime aggregation.

Turns the raw uptime-check history of one link into one bucket per calendar
day for the trailing window ending today. Days are UTC calendar days. A day
without checks reports 0% (no signal), never 100%.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List

from .database.models import CheckStatus, UptimeCheck, ensure_utc


REPORT_DAYS = 7


@dataclass
class DailyUptimeBucket:
    """Check totals for one calendar day."""

    day: date
    total_checks: int = 0
    up_checks: int = 0

    @property
    def down_checks(self) -> int:
        return self.total_checks - self.up_checks

    @property
    def uptime_percentage(self) -> int:
        return uptime_percentage(self.up_checks, self.total_checks)

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "totalChecks": self.total_checks,
            "upChecks": self.up_checks,
            "downChecks": self.down_checks,
            "uptimePercentage": self.uptime_percentage,
        }


def uptime_percentage(up_checks: int, total_checks: int) -> int:
    """Percentage of UP checks, rounded half up to an integer.

    Returns 0 when there are no checks.
    """
    if total_checks <= 0:
        return 0
    # round(100 * up / total) with halves rounded up, in integer arithmetic
    return (200 * up_checks + total_checks) // (2 * total_checks)


def check_day(check: UptimeCheck) -> date:
    """UTC calendar day a check belongs to."""
    created_at: datetime = ensure_utc(check.created_at)
    return created_at.date()


def build_daily_report(
    checks: Iterable[UptimeCheck],
    today: date,
    days: int = REPORT_DAYS,
) -> List[DailyUptimeBucket]:
    """Bucket checks into the ``days`` calendar days ending at ``today``.

    Args:
        checks: Uptime checks of one link, in any order
        today: Last day of the window (inclusive)
        days: Window length

    Returns:
        Exactly ``days`` buckets in ascending date order. Checks outside the
        window are ignored.
    """
    buckets: Dict[date, DailyUptimeBucket] = {}
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        buckets[day] = DailyUptimeBucket(day=day)

    for check in checks:
        bucket = buckets.get(check_day(check))
        if bucket is None:
            continue
        bucket.total_checks += 1
        if check.status == CheckStatus.UP:
            bucket.up_checks += 1

    return list(buckets.values())
