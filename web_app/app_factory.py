"""FastAPI application factory."""

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import linkmon
from .api import api_router
from .web import web_router
from .middleware.logging import LoggingMiddleware
from .middleware.errors import register_exception_handlers


def create_app(
    store_instance,
    service_instance,
    monitor_instance,
    config,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        store_instance: Link store instance
        service_instance: Link service instance
        monitor_instance: Uptime monitor instance (None when disabled)
        config: Configuration instance

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Link Monitor",
        description="Short links with redirect accounting and hourly uptime monitoring",
        version=linkmon.__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Store instances in app state for access in routes
    app.state.store = store_instance
    app.state.service = service_instance
    app.state.monitor = monitor_instance
    app.state.config = config
    app.state.started_at = datetime.now(timezone.utc)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix="/api", tags=["API"])
    # Catch-all /{code} lives here, so this router goes last
    app.include_router(web_router, tags=["Web"])

    return app
