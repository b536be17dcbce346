# tests/test_catalog_service.py

"""Tests for the catalog facade."""

import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

from src.config.settings import Settings
from src.models.catalog import Catalog
from src.models.product import ProductRecord
from src.services.catalog_service import CatalogService
from src.storage.catalog_cache import CatalogCache


def _catalog(age: timedelta = timedelta(0), n: int = 3) -> Catalog:
    """A catalog of *n* linked doors priced 10000, 11000, ..."""
    return Catalog(
        products=tuple(
            ProductRecord(
                id=str(i),
                title=f"Дверь Нова {i}",
                price=str(10000 + i * 1000),
                url=f"/product/nova-{i}",
                category="Межкомнатные двери" if i % 2 else "Входные двери",
                properties={"Производитель": "Profildoors"},
            )
            for i in range(n)
        ),
        last_updated=datetime.now(timezone.utc) - age,
    )


class TestCatalogService(unittest.IsolatedAsyncioTestCase):
    """CatalogService lifecycle and search."""

    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.cache = CatalogCache(Path(tmp.name) / "catalog_cache.json")
        self.ingestor = MagicMock()
        self.ingestor.run.return_value = _catalog()
        self.service = CatalogService(
            cache=self.cache, ingestor=self.ingestor
        )

    # ── start ────────────────────────────────────────────

    async def test_start_without_cache_ingests(self) -> None:
        self.assertTrue(await self.service.start())
        self.ingestor.run.assert_called_once()
        self.assertEqual(self.service.product_count, 3)

    async def test_start_with_fresh_cache_skips_ingest(self) -> None:
        self.cache.save(_catalog(timedelta(days=1), n=5))
        self.assertTrue(await self.service.start())
        self.ingestor.run.assert_not_called()
        self.assertEqual(self.service.product_count, 5)
        self.assertFalse(self.service.is_stale())

    async def test_start_with_stale_cache_refreshes(self) -> None:
        self.cache.save(_catalog(timedelta(days=8), n=5))
        self.assertTrue(await self.service.start())
        self.ingestor.run.assert_called_once()
        self.assertEqual(self.service.product_count, 3)

    async def test_stale_cache_kept_when_ingest_fails(self) -> None:
        """Old data beats no data."""
        self.cache.save(_catalog(timedelta(days=8), n=5))
        self.ingestor.run.return_value = None
        self.assertTrue(await self.service.start())
        self.assertEqual(self.service.product_count, 5)
        self.assertTrue(self.service.is_stale())

    async def test_start_fails_without_any_data(self) -> None:
        self.ingestor.run.return_value = None
        self.assertFalse(await self.service.start())
        self.assertIsNone(self.service.catalog)
        self.assertIsNone(self.service.last_updated)
        self.assertEqual(self.service.search("нова"), [])

    # ── refresh ──────────────────────────────────────────

    async def test_failed_refresh_keeps_results(self) -> None:
        await self.service.start()
        before = self.service.search("нова")

        self.ingestor.run.return_value = None
        self.assertFalse(await self.service.refresh())
        self.assertEqual(self.service.search("нова"), before)

    async def test_crashing_refresh_is_contained(self) -> None:
        await self.service.start()
        self.ingestor.run.side_effect = RuntimeError("boom")
        self.assertFalse(await self.service.refresh())
        self.assertEqual(self.service.product_count, 3)

    async def test_refresh_swaps_snapshot(self) -> None:
        await self.service.start()
        old = self.service.catalog
        self.ingestor.run.return_value = _catalog(n=6)
        self.assertTrue(await self.service.refresh())
        self.assertIsNot(self.service.catalog, old)
        self.assertEqual(self.service.product_count, 6)

    # ── search ───────────────────────────────────────────

    async def test_search_text(self) -> None:
        await self.service.start()
        results = self.service.search("нова 2")
        self.assertEqual([p.id for p in results], ["2"])

    async def test_search_price_only(self) -> None:
        await self.service.start()
        results = self.service.search("двери 10500-12000")
        self.assertEqual([p.id for p in results], ["1", "2"])

    async def test_search_dot_grouped_price(self) -> None:
        """``до 10.000`` filters at ten thousand roubles."""
        self.ingestor.run.return_value = Catalog(
            products=(
                ProductRecord(id="1", title="Дверь А", price="8000", url="/a"),
                ProductRecord(id="2", title="Дверь Б", price="9500", url="/b"),
                ProductRecord(id="3", title="Дверь В", price="14000", url="/c"),
            ),
            last_updated=datetime.now(timezone.utc),
        )
        await self.service.start()
        self.assertEqual(
            [p.id for p in self.service.search("двери до 10.000")],
            ["1", "2"],
        )

    async def test_search_hyphenated_model_code(self) -> None:
        self.ingestor.run.return_value = Catalog(
            products=(
                ProductRecord(id="7", title="Дверь ПД-15 белая", price="12000"),
                ProductRecord(id="8", title="Дверь ПД-21", price="13000"),
            ),
            last_updated=datetime.now(timezone.utc),
        )
        await self.service.start()
        self.assertEqual(
            [p.id for p in self.service.search("пд-15")], ["7"]
        )

    async def test_search_default_limit(self) -> None:
        self.ingestor.run.return_value = _catalog(n=12)
        await self.service.start()
        self.assertEqual(
            len(self.service.search("нова")), Settings.SEARCH_DEFAULT_LIMIT
        )
        self.assertEqual(len(self.service.search("нова", limit=2)), 2)

    async def test_search_scored_exposes_scores(self) -> None:
        await self.service.start()
        scored = self.service.search_scored("profildoors")
        self.assertTrue(scored)
        self.assertTrue(all(s.score > 0 for s in scored))

    async def test_search_empty_and_junk_queries(self) -> None:
        await self.service.start()
        for query in ("", "   ", None, 123):
            with self.subTest(query=query):
                self.assertEqual(self.service.search(query), [])

    async def test_search_invalid_limit(self) -> None:
        await self.service.start()
        self.assertEqual(self.service.search("нова", limit="many"), [])  # type: ignore[arg-type]
        self.assertEqual(self.service.search("нова", limit=-3), [])

    async def test_search_never_raises(self) -> None:
        """A parser bug degrades to no results."""
        await self.service.start()
        self.service.parser = MagicMock()
        self.service.parser.parse.side_effect = RuntimeError("regex bug")
        self.assertEqual(self.service.search("нова"), [])

    def test_search_before_start(self) -> None:
        self.assertEqual(self.service.search("нова"), [])
        self.assertTrue(self.service.is_stale())

    # ── lookups ──────────────────────────────────────────

    async def test_get_product_and_categories(self) -> None:
        await self.service.start()
        product = self.service.get_product("1")
        assert product is not None
        self.assertEqual(product.title, "Дверь Нова 1")
        self.assertIsNone(self.service.get_product("nope"))
        self.assertEqual(
            self.service.categories(),
            {"Входные двери": 2, "Межкомнатные двери": 1},
        )

    def test_lookups_before_start(self) -> None:
        self.assertIsNone(self.service.get_product("1"))
        self.assertEqual(self.service.categories(), {})
        self.assertEqual(self.service.product_count, 0)


if __name__ == "__main__":
    unittest.main()
