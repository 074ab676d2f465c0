"""Persistence layer for links, clicks and uptime checks."""

import logging
from typing import Optional

from .base import LinkStoreBase
from .memory import MemoryLinkStore
from .postgres import PostgresLinkStore
from .models import Link, Click, UptimeCheck, CheckStatus, LinkPage, LinkStats


def create_store(
    db_config: str,
    create_tables: bool = False,
    timeout_seconds: float = 5.0,
    logger: Optional[logging.Logger] = None,
) -> LinkStoreBase:
    """Build the store named by a connection string.

    ``memory://`` selects the in-process store, anything else is handed to
    PostgreSQL.
    """
    if db_config.startswith("memory://"):
        return MemoryLinkStore(db_config, logger=logger)
    return PostgresLinkStore(
        db_config,
        connection_timeout_seconds=timeout_seconds,
        create_tables=create_tables,
        logger=logger,
    )


__all__ = [
    "LinkStoreBase",
    "MemoryLinkStore",
    "PostgresLinkStore",
    "Link",
    "Click",
    "UptimeCheck",
    "CheckStatus",
    "LinkPage",
    "LinkStats",
    "create_store",
]
