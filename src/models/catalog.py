# src/models/catalog.py

"""Immutable catalog snapshot."""

from dataclasses import dataclass
from datetime import datetime, timezone

from src.models.product import ProductRecord


@dataclass(frozen=True)
class Catalog:
    """A complete, read-only snapshot of the normalised product feed.

    Snapshots are never modified in place.  A refresh builds a new
    ``Catalog`` and the owner swaps its reference in one assignment.
    """

    products: tuple[ProductRecord, ...]
    last_updated: datetime

    def __len__(self) -> int:
        return len(self.products)

    def find(self, product_id: str) -> ProductRecord | None:
        """Return the first product with the given id."""
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def categories(self) -> dict[str, int]:
        """Count products per category, in first-seen order."""
        counts: dict[str, int] = {}
        for product in self.products:
            if product.category:
                counts[product.category] = (
                    counts.get(product.category, 0) + 1
                )
        return counts

    def age(self, now: datetime | None = None) -> float:
        """Seconds elapsed since the snapshot was taken."""
        current = now or datetime.now(timezone.utc)
        return (current - self.last_updated).total_seconds()

    def is_stale(
        self, max_age: float, now: datetime | None = None,
    ) -> bool:
        """Return True when the snapshot is older than *max_age* seconds."""
        return self.age(now) > max_age
