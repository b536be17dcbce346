# src/services/catalog_service.py

"""Catalog facade: owns the current snapshot, refreshes and searches it."""

import asyncio
import logging
from datetime import datetime

from src.config.settings import Settings
from src.filters.product_scorer import ProductScorer
from src.filters.query_parser import QueryParser
from src.models.catalog import Catalog
from src.models.product import ProductRecord, ScoredProduct
from src.services.feed_ingestor import FeedIngestor
from src.storage.catalog_cache import CatalogCache

logger = logging.getLogger("door_catalog.catalog")


class CatalogService:
    """Single owner of the in-memory catalog snapshot.

    The snapshot is an immutable :class:`Catalog`.  ``refresh`` builds a
    new one off the event loop and replaces ``self._catalog`` in a
    single assignment, so a concurrent ``search`` sees either the old or
    the new snapshot.  Two overlapping refreshes are not serialised:
    whichever finishes last wins.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        cache: CatalogCache | None = None,
        ingestor: FeedIngestor | None = None,
        parser: QueryParser | None = None,
        scorer: ProductScorer | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.cache = cache or CatalogCache()
        self.ingestor = ingestor or FeedIngestor(cache=self.cache)
        self.parser = parser or QueryParser()
        self.scorer = scorer or ProductScorer()
        self._catalog: Catalog | None = None

    # ── Lifecycle ────────────────────────────────────────

    async def start(self) -> bool:
        """Load the cached snapshot, ingesting when absent or stale.

        A stale cache is kept in service when the refresh fails.
        Returns True when a catalog is available afterwards.
        """
        cached = self.cache.load()
        if cached is not None:
            self._catalog = cached
            if not cached.is_stale(self.settings.CACHE_MAX_AGE):
                return True
            logger.info(
                "Cached catalog is %.1f days old, refreshing",
                cached.age() / 86400,
            )
        await self.refresh()
        return self._catalog is not None

    async def refresh(self) -> bool:
        """Run one ingest cycle and swap in the result on success."""
        try:
            fresh = await asyncio.to_thread(self.ingestor.run)
        except Exception as exc:
            logger.error(
                "Catalog refresh crashed: %s", exc, exc_info=True
            )
            return False

        if fresh is None:
            logger.warning(
                "Catalog refresh failed, keeping %d existing products",
                self.product_count,
            )
            return False

        self._catalog = fresh
        logger.info("Catalog swapped in: %d products", len(fresh))
        return True

    # ── Read access ──────────────────────────────────────

    @property
    def catalog(self) -> Catalog | None:
        """The current snapshot, or None before the first load."""
        return self._catalog

    @property
    def product_count(self) -> int:
        """Number of products in the current snapshot."""
        catalog = self._catalog
        return len(catalog) if catalog is not None else 0

    @property
    def last_updated(self) -> datetime | None:
        """When the current snapshot was ingested."""
        catalog = self._catalog
        return catalog.last_updated if catalog is not None else None

    def is_stale(self) -> bool:
        """True when there is no snapshot or it is past CACHE_MAX_AGE."""
        catalog = self._catalog
        return catalog is None or catalog.is_stale(
            self.settings.CACHE_MAX_AGE
        )

    def get_product(self, product_id: str) -> ProductRecord | None:
        """Look up a product by its feed id."""
        catalog = self._catalog
        if catalog is None:
            return None
        return catalog.find(product_id)

    def categories(self) -> dict[str, int]:
        """Product counts per category of the current snapshot."""
        catalog = self._catalog
        return catalog.categories() if catalog is not None else {}

    # ── Search ───────────────────────────────────────────

    def search_scored(
        self, query: object, limit: int | None = None,
    ) -> list[ScoredProduct]:
        """Search the current snapshot, keeping relevance scores.

        Never raises: any internal failure yields an empty list.
        """
        catalog = self._catalog
        if catalog is None:
            return []
        try:
            max_items = (
                self.settings.SEARCH_DEFAULT_LIMIT
                if limit is None
                else int(limit)
            )
            query_filter = self.parser.parse(query)
            results = self.scorer.rank(
                catalog.products, query_filter, max_items
            )
        except Exception as exc:
            logger.error(
                "Search failed for %r: %s", query, exc, exc_info=True
            )
            return []

        logger.info(
            "Search %r → %d results", query, len(results)
        )
        return results

    def search(
        self, query: object, limit: int | None = None,
    ) -> list[ProductRecord]:
        """Search the current snapshot and return bare products."""
        return [s.product for s in self.search_scored(query, limit)]
