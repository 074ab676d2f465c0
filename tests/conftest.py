"""Pytest configuration and fixtures."""

import asyncio
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from linkmon.database.memory import MemoryLinkStore
from linkmon.monitor import UptimeMonitor
from linkmon.prober import ProbeResult, Verdict
from linkmon.recorder import UptimeRecorder
from linkmon.service import LinkService
from linkmon.shortcode import ShortCodeGenerator
from linkmon.common.logging_config import setup_logging
from web_app import create_app


class ScriptedProber:
    """Answers probes from a URL -> verdict map instead of the network."""

    def __init__(self, verdicts: Optional[Dict[str, Verdict]] = None, default: Verdict = Verdict.UP):
        self.verdicts = verdicts or {}
        self.default = default
        self.calls: List[str] = []
        self.fail_for: set = set()
        self.gate: Optional[asyncio.Event] = None
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def probe(self, url: str) -> ProbeResult:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
            if url in self.fail_for:
                raise RuntimeError(f"scripted failure for {url}")
        finally:
            self.in_flight -= 1

        verdict = self.verdicts.get(url, self.default)
        return ProbeResult(
            url=url,
            verdict=verdict,
            status_code=200 if verdict is Verdict.UP else 503,
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
async def store(logger) -> AsyncGenerator[MemoryLinkStore, None]:
    """In-process link store."""
    db = MemoryLinkStore(logger=logger)
    await db.initialize()

    yield db

    await db.close()


@pytest.fixture
def prober():
    """Prober that reports every target UP unless told otherwise."""
    return ScriptedProber()


@pytest.fixture
def recorder(store, prober, logger):
    return UptimeRecorder(store, prober, write_timeout_seconds=1.0, logger=logger)


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def service(store, recorder, short_code_generator, logger) -> LinkService:
    """Create service instance."""
    return LinkService(
        store=store,
        recorder=recorder,
        short_code_generator=short_code_generator,
        logger=logger,
    )


@pytest.fixture
def monitor(store, recorder, logger) -> UptimeMonitor:
    return UptimeMonitor(store=store, recorder=recorder, concurrency=4, logger=logger)


@pytest.fixture
def config():
    return Config(
        database_url="memory://",
        base_url="http://testserver",
        monitor_enabled=False,
    )


@pytest.fixture
def app(store, service, monitor, config):
    """Create test FastAPI app."""
    return create_app(
        store_instance=store,
        service_instance=service,
        monitor_instance=monitor,
        config=config,
    )


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
