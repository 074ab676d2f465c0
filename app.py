#!/usr/bin/env python3
"""
Main entry point for the link monitor service.

Serves the link API and redirects, and runs the uptime monitor in the
background: one sweep at start-up, then one at the top of every hour.

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL (memory:// for in-process)
    DATABASE_CREATE_TABLES - Set to 'true' to create tables on startup
    REDIS_URL - Redis URL for the cross-process sweep lock (optional)
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    MONITOR_ENABLED - Run the uptime monitor in this process
    PROBE_TIMEOUT_SECONDS - Probe and write timeout
    LOG_LEVEL - Logging level
"""

import logging
import signal
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from linkmon.coordination import SweepLock
from linkmon.database import LinkStoreBase, create_store
from linkmon.monitor import UptimeMonitor
from linkmon.prober import UptimeProber
from linkmon.recorder import UptimeRecorder
from linkmon.service import LinkService
from linkmon.shortcode import ShortCodeGenerator
from linkmon.common.logging_config import setup_logging
from web_app import create_app


@dataclass
class Components:
    """Everything the service needs, wired from one config."""

    store: LinkStoreBase
    service: LinkService
    monitor: UptimeMonitor
    sweep_lock: SweepLock

    async def close(self) -> None:
        await self.monitor.stop()
        await self.sweep_lock.close()
        await self.service.close()


def build_components(config: Config, logger: Optional[logging.Logger] = None) -> Components:
    """Wire store, prober, recorder, service and monitor from config."""
    store = create_store(
        config.database_url,
        create_tables=config.database_create_tables,
        timeout_seconds=config.probe_timeout_seconds,
        logger=logger,
    )
    prober = UptimeProber(timeout_seconds=config.probe_timeout_seconds, logger=logger)
    recorder = UptimeRecorder(
        store,
        prober,
        write_timeout_seconds=config.probe_timeout_seconds,
        logger=logger,
    )
    service = LinkService(
        store=store,
        recorder=recorder,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        logger=logger,
        max_collision_retries=config.max_collision_retries,
        recent_checks_limit=config.stats_recent_checks_limit,
    )
    sweep_lock = SweepLock(
        redis_url=config.redis_url,
        ttl_seconds=config.sweep_lock_ttl_seconds,
        logger=logger,
    )
    monitor = UptimeMonitor(
        store=store,
        recorder=recorder,
        sweep_lock=sweep_lock,
        concurrency=config.monitor_concurrency,
        interval_minutes=config.monitor_interval_minutes,
        logger=logger,
    )
    return Components(store=store, service=service, monitor=monitor, sweep_lock=sweep_lock)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting link monitor service...")

    components = build_components(config, logger)
    await components.store.initialize()
    await components.sweep_lock.connect()

    app.state.store = components.store
    app.state.service = components.service
    app.state.monitor = components.monitor

    if config.monitor_enabled:
        await components.monitor.start()
    else:
        logger.info("Uptime monitor disabled")

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down link monitor service...")
    await components.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Link Monitor Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'database_url', 'redis_url'})}")

    app = create_app(
        store_instance=None,  # Set in lifespan
        service_instance=None,
        monitor_instance=None,
        config=config,
    )
    app.state.logger = logger
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
