# src/services/refresh_scheduler.py

"""Recurring catalog refresh on the running event loop."""

import asyncio
import logging

from src.config.settings import Settings
from src.services.catalog_service import CatalogService

logger = logging.getLogger("door_catalog.scheduler")


class RefreshScheduler:
    """Re-import the feed every ``interval`` seconds (weekly by default).

    ``trigger`` runs an extra refresh on demand.  It does not wait for
    or cancel a scheduled one that is already in flight.
    """

    def __init__(
        self,
        service: CatalogService,
        interval: float | None = None,
    ) -> None:
        self.service = service
        self.interval = (
            interval if interval is not None
            else Settings.REFRESH_INTERVAL
        )
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """True while the background loop is alive."""
        return self._task is not None and not self._task.done()

    async def _loop(self) -> None:
        """Sleep, refresh, repeat until cancelled."""
        while True:
            await asyncio.sleep(self.interval)
            logger.info("Scheduled catalog refresh starting")
            try:
                ok = await self.service.refresh()
            except Exception as exc:
                logger.error(
                    "Scheduled refresh raised: %s", exc, exc_info=True
                )
                continue
            logger.info(
                "Scheduled catalog refresh %s",
                "succeeded" if ok else "failed",
            )

    def start(self) -> None:
        """Start the loop on the current event loop (idempotent)."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._loop(), name="catalog-refresh"
        )
        logger.info(
            "Refresh scheduler started (every %.0f s)", self.interval
        )

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Refresh scheduler stopped")

    async def trigger(self) -> bool:
        """Run a manual refresh now."""
        logger.info("Manual catalog refresh requested")
        return await self.service.refresh()
