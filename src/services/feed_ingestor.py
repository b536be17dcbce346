# src/services/feed_ingestor.py

"""One full feed refresh cycle: fetch, decode, normalise, cache."""

import logging
from datetime import datetime, timezone

from src.feed.decoder import decode_workbook
from src.feed.feed_client import FeedClient
from src.feed.normalizer import SchemaNormalizer
from src.models.catalog import Catalog
from src.storage.catalog_cache import CatalogCache

logger = logging.getLogger("door_catalog.ingestor")


class FeedIngestor:
    """Build a fresh :class:`Catalog` from the remote feed.

    Blocking; the catalog service runs it in a worker thread.  Any
    failure returns ``None`` and leaves the cache file untouched.
    """

    def __init__(
        self,
        client: FeedClient | None = None,
        normalizer: SchemaNormalizer | None = None,
        cache: CatalogCache | None = None,
    ) -> None:
        self.client = client or FeedClient()
        self.normalizer = normalizer or SchemaNormalizer()
        self.cache = cache or CatalogCache()

    def run(self) -> Catalog | None:
        """Run one ingest cycle and return the new snapshot."""
        content = self.client.fetch()
        if content is None:
            logger.error("Feed refresh aborted: download failed")
            return None

        try:
            rows = decode_workbook(content)
        except Exception as exc:
            logger.error(
                "Feed refresh aborted: cannot decode payload: %s",
                exc,
                exc_info=True,
            )
            return None

        products = self.normalizer.normalize(rows)
        if not products:
            logger.error(
                "Feed refresh aborted: %d rows produced no products",
                len(rows),
            )
            return None

        catalog = Catalog(
            products=tuple(products),
            last_updated=datetime.now(timezone.utc),
        )

        try:
            self.cache.save(catalog)
        except OSError as exc:
            # The in-memory snapshot is still worth swapping in
            logger.error(
                "Catalog cache write failed: %s", exc, exc_info=True
            )

        logger.info(
            "Feed refresh complete: %d products from %d rows",
            len(catalog),
            len(rows),
        )
        return catalog
