"""Redirect and process health routes."""

import platform
import resource
import sys
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

import linkmon
from linkmon.common.url_builder import format_uptime

router = APIRouter()


def memory_usage() -> dict:
    """Peak resident set size of this process."""
    max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports kilobytes, macOS bytes
    if sys.platform != "darwin":
        max_rss *= 1024
    return {"maxRss": f"{round(max_rss / 1024 / 1024)}MB"}


@router.get("/healthz", include_in_schema=False)
async def healthz(request: Request):
    """Process uptime, database round-trip and monitor state."""
    service = request.app.state.service
    config = request.app.state.config
    monitor = request.app.state.monitor
    started_at: datetime = request.app.state.started_at

    uptime_seconds = int((datetime.now(timezone.utc) - started_at).total_seconds())
    database = await service.health_check()

    monitor_info = None
    if monitor is not None:
        monitor_info = {
            "state": monitor.state.value,
            "running": monitor.running,
            "lastSweep": monitor.last_sweep.to_dict() if monitor.last_sweep else None,
        }

    return {
        "ok": True,
        "version": linkmon.__version__,
        "uptime": {
            "seconds": uptime_seconds,
            "formatted": format_uptime(uptime_seconds),
            "startTime": started_at.isoformat(),
        },
        "system": {
            "pythonVersion": platform.python_version(),
            "environment": getattr(config, "environment", "development"),
            "memoryUsage": memory_usage(),
        },
        "database": {
            "connected": database["connected"],
            "responseTime": f"{database['response_time_ms']}ms",
        },
        "monitor": monitor_info,
    }


@router.get("/{code}", include_in_schema=False)
async def redirect_to_target(request: Request, code: str):
    """Count the click and redirect to the target URL."""
    service = request.app.state.service

    link = await service.resolve_redirect(code)

    # 302 so browsers keep coming back through the counter
    return RedirectResponse(url=link.target_url, status_code=status.HTTP_302_FOUND)
