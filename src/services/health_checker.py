# src/services/health_checker.py

"""Feed and cache health checks."""

import asyncio
import logging
import time
from dataclasses import dataclass

from src.config.settings import Settings
from src.feed.feed_client import FeedClient
from src.storage.catalog_cache import CatalogCache

logger = logging.getLogger("door_catalog.health")

_HEALTH_TIMEOUT = 20  # seconds for the feed probe


@dataclass
class HealthResult:
    """Result of a single health check."""

    source_id: str
    status: str  # "ok", "slow", "stale", "missing", "down"
    latency_ms: float
    message: str


def probe_feed(client: FeedClient) -> HealthResult:
    """Check that the feed URL answers with a non-empty document."""
    session = client.new_session()
    start = time.monotonic()
    try:
        resp = session.get(
            client.feed_url,
            headers=client.settings.DEFAULT_HEADERS,
            timeout=_HEALTH_TIMEOUT,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code != 200:
            return HealthResult(
                source_id="feed",
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )
        if not resp.content:
            return HealthResult(
                source_id="feed",
                status="down",
                latency_ms=elapsed_ms,
                message="Empty document",
            )
        if elapsed_ms > Settings.HEALTH_SLOW_MS:
            return HealthResult(
                source_id="feed",
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )
        return HealthResult(
            source_id="feed",
            status="ok",
            latency_ms=elapsed_ms,
            message=f"{len(resp.content):,} bytes",
        )
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            source_id="feed",
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )
    finally:
        session.close()


def probe_cache(cache: CatalogCache) -> HealthResult:
    """Check that the cache document loads and is fresh."""
    start = time.monotonic()
    catalog = cache.load()
    elapsed_ms = (time.monotonic() - start) * 1000

    if catalog is None:
        return HealthResult(
            source_id="cache",
            status="missing",
            latency_ms=elapsed_ms,
            message="No readable cache",
        )
    days = catalog.age() / 86400
    if catalog.is_stale(Settings.CACHE_MAX_AGE):
        return HealthResult(
            source_id="cache",
            status="stale",
            latency_ms=elapsed_ms,
            message=f"{len(catalog)} products, {days:.1f} days old",
        )
    return HealthResult(
        source_id="cache",
        status="ok",
        latency_ms=elapsed_ms,
        message=f"{len(catalog)} products, {days:.1f} days old",
    )


class HealthChecker:
    """Runs the feed and cache probes concurrently."""

    def __init__(
        self,
        client: FeedClient | None = None,
        cache: CatalogCache | None = None,
    ) -> None:
        self.client = client or FeedClient()
        self.cache = cache or CatalogCache()

    async def check_all(self) -> list[HealthResult]:
        """Probe the feed and the cache."""
        results: list[HealthResult] = list(
            await asyncio.gather(
                asyncio.to_thread(probe_feed, self.client),
                asyncio.to_thread(probe_cache, self.cache),
            )
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.source_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
