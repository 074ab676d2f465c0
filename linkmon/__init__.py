"""Short links with redirect accounting and scheduled uptime monitoring."""

__version__ = "1.0.0"

from .shortcode import ShortCodeGenerator
from .service import LinkService
from .prober import UptimeProber, Verdict, ProbeResult, classify_status
from .recorder import UptimeRecorder
from .monitor import UptimeMonitor, MonitorState, SweepResult
from .stats import DailyUptimeBucket, build_daily_report

__all__ = [
    "ShortCodeGenerator",
    "LinkService",
    "UptimeProber",
    "Verdict",
    "ProbeResult",
    "classify_status",
    "UptimeRecorder",
    "UptimeMonitor",
    "MonitorState",
    "SweepResult",
    "DailyUptimeBucket",
    "build_daily_report",
]
