# src/storage/catalog_cache.py

"""Durable JSON snapshot of the normalised catalog."""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from src.config.settings import Settings
from src.models.catalog import Catalog
from src.models.product import ProductRecord

logger = logging.getLogger("door_catalog.cache")


def _parse_timestamp(raw: object) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a JS-style trailing ``Z``."""
    if not isinstance(raw, str):
        msg = f"lastUpdated must be a string, got {type(raw).__name__}"
        raise ValueError(msg)
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class CatalogCache:
    """Read and write ``{products, lastUpdated}`` cache documents.

    A corrupt or unreadable document is reported as absent so that the
    caller falls through to a fresh ingest.  Writes go to a temporary
    sibling file that is then swapped in with :func:`os.replace`.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path or Settings.CACHE_PATH
        logger.debug("CatalogCache initialised, path=%s", self.path)

    def exists(self) -> bool:
        """Return True when a cache document is present on disk."""
        return self.path.is_file()

    def load(self) -> Catalog | None:
        """Return the last committed snapshot, or ``None``."""
        if not self.exists():
            logger.info("No catalog cache at %s", self.path)
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data: Any = json.load(f)
            if not isinstance(data, dict):
                msg = "Cache document is not an object"
                raise ValueError(msg)
            raw_products = data["products"]
            if not isinstance(raw_products, list):
                msg = "Cache products must be a list"
                raise ValueError(msg)
            products = tuple(
                ProductRecord.from_dict(item) for item in raw_products
            )
            last_updated = _parse_timestamp(data["lastUpdated"])
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning(
                "Ignoring unreadable catalog cache %s: %s",
                self.path,
                exc,
                exc_info=True,
            )
            return None

        logger.info(
            "Loaded %d products from cache (last updated %s)",
            len(products),
            last_updated.isoformat(),
        )
        return Catalog(products=products, last_updated=last_updated)

    def save(self, catalog: Catalog) -> Path:
        """Atomically replace the cache document with *catalog*."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "products": [p.to_dict() for p in catalog.products],
            "lastUpdated": catalog.last_updated.isoformat(),
        }

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(
            "Saved %d products to %s", len(catalog.products), self.path
        )
        return self.path
