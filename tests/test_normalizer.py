# tests/test_normalizer.py

"""Tests for the feed schema normaliser."""

import unittest
from typing import Any

from src.feed.normalizer import SchemaNormalizer


def _row(**overrides: Any) -> dict[str, Any]:
    """A typical InSales export row."""
    row: dict[str, Any] = {
        "ID товара": 101,
        "Название товара или услуги": "Дверь Стелла 7 эмаль белая",
        "Цена продажи": 12000.0,
        "URL": "/product/stella-7",
        "Описание": "<p>Межкомнатная дверь <b>эмаль</b></p>",
        "Категория": "Межкомнатные двери",
        "Параметр: Производитель": "Profildoors",
        "Параметр: Цвет": "белый",
        "Характеристика: Покрытие": "эмаль",
        "Остаток": 3,
    }
    row.update(overrides)
    return row


class TestSchemaNormalizer(unittest.TestCase):
    """SchemaNormalizer unit tests."""

    def setUp(self) -> None:
        self.normalizer = SchemaNormalizer()

    def test_full_row(self) -> None:
        """All canonical fields are resolved from their columns."""
        [product] = self.normalizer.normalize([_row()])
        self.assertEqual(product.id, "101")
        self.assertEqual(product.title, "Дверь Стелла 7 эмаль белая")
        self.assertEqual(product.price, "12000")
        self.assertEqual(product.url, "/product/stella-7")
        self.assertEqual(product.category, "Межкомнатные двери")

    def test_properties_prefixes_stripped(self) -> None:
        """Parameter and characteristic columns become properties."""
        [product] = self.normalizer.normalize([_row()])
        self.assertEqual(
            product.properties,
            {
                "Производитель": "Profildoors",
                "Цвет": "белый",
                "Покрытие": "эмаль",
            },
        )

    def test_description_markup_removed(self) -> None:
        [product] = self.normalizer.normalize([_row()])
        self.assertEqual(product.description, "Межкомнатная дверь эмаль")

    def test_rows_without_title_dropped(self) -> None:
        """A row with no resolvable title never reaches the output."""
        rows = [
            _row(**{"Название товара или услуги": None}),
            _row(**{"Название товара или услуги": "   "}),
            _row(**{"Название товара или услуги": float("nan")}),
            {"ID товара": 5, "Цена": 100},
        ]
        self.assertEqual(self.normalizer.normalize(rows), [])

    def test_title_alias_fallback(self) -> None:
        """Older feed revisions use a different title column."""
        row = {"Наименование": "Дверь Нова", "Цена": "9 500"}
        [product] = self.normalizer.normalize([row])
        self.assertEqual(product.title, "Дверь Нова")
        self.assertEqual(product.price, "9 500")

    def test_first_non_blank_alias_wins(self) -> None:
        """An empty higher-priority column falls through to the next."""
        [product] = self.normalizer.normalize(
            [_row(**{"Цена продажи": None, "Цена": 15500})]
        )
        self.assertEqual(product.price, "15500")

    def test_missing_price_uses_sentinel(self) -> None:
        [product] = self.normalizer.normalize(
            [{"Название товара": "Ручка"}]
        )
        self.assertEqual(product.price, "по запросу")

    def test_missing_optionals_are_empty_strings(self) -> None:
        [product] = self.normalizer.normalize([{"title": "Замок"}])
        self.assertEqual(product.url, "")
        self.assertEqual(product.description, "")
        self.assertEqual(product.category, "")
        self.assertEqual(product.properties, {})

    def test_missing_id_is_synthesised(self) -> None:
        [product] = self.normalizer.normalize([{"title": "Петля"}])
        self.assertRegex(product.id, r"^gen-[0-9a-f]{8}$")

    def test_blank_property_values_skipped(self) -> None:
        [product] = self.normalizer.normalize(
            [_row(**{"Параметр: Цвет": None})]
        )
        self.assertNotIn("Цвет", product.properties)

    def test_title_whitespace_collapsed(self) -> None:
        [product] = self.normalizer.normalize(
            [{"title": "  Дверь \n  Лайт  "}]
        )
        self.assertEqual(product.title, "Дверь Лайт")

    def test_non_mapping_rows_skipped(self) -> None:
        """Malformed rows never raise."""
        rows: list[Any] = [None, "garbage", 42, _row()]
        self.assertEqual(len(self.normalizer.normalize(rows)), 1)

    def test_idempotent_except_synthesised_ids(self) -> None:
        """Two runs over identical input differ only in generated ids."""
        rows = [_row(), {"title": "Без артикула", "Цена": 700}]
        first = self.normalizer.normalize(rows)
        second = self.normalizer.normalize(rows)
        self.assertEqual(first[0], second[0])
        first[1].id = second[1].id = ""
        self.assertEqual(first[1], second[1])

    def test_injected_aliases(self) -> None:
        """Custom alias tables override Settings."""
        normalizer = SchemaNormalizer(
            field_aliases={"title": ["Name"], "price": ["Cost"]},
            property_prefixes=["Attr/"],
            price_on_request="on request",
        )
        [product] = normalizer.normalize(
            [{"Name": "Door", "Attr/Color": "red"}]
        )
        self.assertEqual(product.title, "Door")
        self.assertEqual(product.price, "on request")
        self.assertEqual(product.properties, {"Color": "red"})


if __name__ == "__main__":
    unittest.main()
