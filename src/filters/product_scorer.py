# src/filters/product_scorer.py

"""Relevance scoring and ranking of catalog products."""

import json
import logging
from collections.abc import Sequence

from src.filters.query_parser import QueryFilter
from src.models.product import ProductRecord, ScoredProduct

logger = logging.getLogger("door_catalog.scorer")

TITLE_WEIGHT = 10.0
CATEGORY_WEIGHT = 5.0
PROPERTIES_WEIGHT = 3.0
BRAND_PROPERTIES_WEIGHT = 15.0


class ProductScorer:
    """Rank catalog products against a parsed query filter."""

    @staticmethod
    def filter_by_price(
        products: Sequence[ProductRecord],
        query_filter: QueryFilter,
    ) -> list[ProductRecord]:
        """Keep products whose numeric price is inside the bounds.

        Products without a numeric price are excluded.
        """
        kept: list[ProductRecord] = []
        for product in products:
            price = product.numeric_price
            if price is None:
                continue
            if query_filter.min_price <= price <= query_filter.max_price:
                kept.append(product)
        return kept

    @staticmethod
    def _properties_text(product: ProductRecord) -> str | None:
        """Serialised, lower-cased properties, or None if unserialisable."""
        try:
            return json.dumps(
                product.properties, ensure_ascii=False
            ).lower()
        except (TypeError, ValueError):
            logger.debug(
                "Skipping properties bonus for %s: not serialisable",
                product.id,
            )
            return None

    @staticmethod
    def score(
        product: ProductRecord, query_filter: QueryFilter,
    ) -> float:
        """Score one product against the cleaned query text."""
        text = query_filter.cleaned_text
        total = 0.0
        if text in product.title.lower():
            total += TITLE_WEIGHT
        if product.category and text in product.category.lower():
            total += CATEGORY_WEIGHT
        props = ProductScorer._properties_text(product)
        if props is not None and text in props:
            total += (
                BRAND_PROPERTIES_WEIGHT
                if query_filter.is_brand_search
                else PROPERTIES_WEIGHT
            )
        return total

    @staticmethod
    def rank(
        products: Sequence[ProductRecord],
        query_filter: QueryFilter,
        limit: int,
    ) -> list[ScoredProduct]:
        """Return at most *limit* products, best first.

        - Empty text with a price bound takes the price-only path:
          linked products sorted by ascending price, no text scoring.
        - Empty text otherwise (including a bare brand question)
          matches nothing.
        - Otherwise products are scored on title, category and
          properties; ties keep catalog order.
        """
        if limit <= 0:
            return []

        has_text = bool(query_filter.cleaned_text)
        if not has_text and (
            query_filter.is_brand_search
            or not query_filter.has_price_bound
        ):
            return []

        pool: Sequence[ProductRecord] = products
        if query_filter.has_price_bound:
            pool = ProductScorer.filter_by_price(products, query_filter)

        if not has_text:
            linked = [p for p in pool if p.url]
            linked.sort(key=lambda p: p.numeric_price or 0.0)
            return [
                ScoredProduct(product=p, score=0.0)
                for p in linked[:limit]
            ]

        scored = [
            ScoredProduct(product=p, score=ProductScorer.score(p, query_filter))
            for p in pool
        ]
        matches = [s for s in scored if s.score > 0]
        # list.sort is stable, so equal scores keep catalog order
        matches.sort(key=lambda s: s.score, reverse=True)

        logger.debug(
            "Scored %d candidates, %d matches for %r",
            len(pool),
            len(matches),
            query_filter.cleaned_text,
        )
        return matches[:limit]
