"""Cross-process guard so only one worker sweeps at a time."""

import logging
import uuid
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError


# Deletes the key only if it still holds our token
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


class SweepLock:
    """Redis lock (``SET NX EX``) shared by every process of the service.

    Without a Redis URL the lock is process-local only and always granted;
    the monitor's own busy flag still prevents overlap inside one process.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key: str = "linkmon:sweep:lock",
        ttl_seconds: int = 3300,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize sweep lock.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379/0)
            key: Lock key
            ttl_seconds: Lock expiry, bounds how long a crashed holder blocks others
            logger: Optional logger instance
        """
        self.redis_url = redis_url
        self.key = key
        self.ttl_seconds = ttl_seconds
        self.logger = logger or logging.getLogger(__name__)
        self.enabled = redis_url is not None
        self.client: Optional[redis.Redis] = None
        self._token: Optional[str] = None

        if self.enabled:
            self.logger.info(f"Distributed sweep lock enabled (key={key}, ttl={ttl_seconds}s)")

    async def connect(self) -> None:
        """Connect to Redis."""
        if not self.enabled:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.client.ping()
            self.logger.info("Connected to Redis")
        except RedisError as e:
            self.logger.error(f"Failed to connect to Redis: {e}")
            self.client = None

    async def acquire(self) -> bool:
        """Try to take the lock without waiting.

        Returns:
            True if this process may sweep now
        """
        if not self.enabled:
            return True
        if self.client is None:
            await self.connect()
        if self.client is None:
            # Redis unreachable: sweep anyway, duplicate appends are harmless
            self.logger.warning("Sweep lock unavailable, sweeping without it")
            return True

        token = uuid.uuid4().hex
        try:
            acquired = await self.client.set(self.key, token, nx=True, ex=self.ttl_seconds)
        except RedisError as e:
            self.logger.error(f"Sweep lock acquire error: {e}")
            return True

        if acquired:
            self._token = token
            return True
        return False

    async def release(self) -> None:
        """Release the lock if this process holds it."""
        if not self.enabled or self.client is None or self._token is None:
            return

        try:
            await self.client.eval(RELEASE_SCRIPT, 1, self.key, self._token)
        except RedisError as e:
            self.logger.error(f"Sweep lock release error: {e}")
        finally:
            self._token = None

    async def close(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None
            self.logger.info("Redis connection closed")
