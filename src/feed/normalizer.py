# src/feed/normalizer.py

"""Schema normalisation of raw feed rows into ProductRecords."""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from bs4 import BeautifulSoup

from src.config.settings import Settings
from src.models.product import ProductRecord, synthesize_id

logger = logging.getLogger("door_catalog.normalizer")

_WHITESPACE_RE = re.compile(r"\s+")


def _is_blank(value: object) -> bool:
    """Treat None, NaN and whitespace-only strings as missing."""
    if value is None:
        return True
    if isinstance(value, float) and value != value:
        return True
    return isinstance(value, str) and not value.strip()


def _stringify(value: object) -> str:
    """Render a cell value, dropping the ``.0`` Excel adds to integers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return _WHITESPACE_RE.sub(" ", str(value)).strip()


def _strip_markup(text: str) -> str:
    """Reduce HTML descriptions from the store export to plain text."""
    if "<" not in text:
        return text
    soup = BeautifulSoup(text, "lxml")
    return _WHITESPACE_RE.sub(" ", soup.get_text(" ", strip=True)).strip()


class SchemaNormalizer:
    """Map heterogeneous feed rows onto the canonical product shape.

    The same logical field appears under different column names across
    feed revisions.  Each field has an ordered alias list and the first
    alias holding a non-blank value wins.  Rows without a title are
    dropped; everything else degrades to a fallback.
    """

    def __init__(
        self,
        field_aliases: dict[str, list[str]] | None = None,
        property_prefixes: list[str] | None = None,
        price_on_request: str | None = None,
    ) -> None:
        self.field_aliases = (
            field_aliases or Settings.FEED_COLUMN_ALIASES
        )
        self.property_prefixes = (
            property_prefixes or Settings.PROPERTY_PREFIXES
        )
        self.price_on_request = (
            price_on_request or Settings.PRICE_ON_REQUEST
        )

    def _resolve(self, row: Mapping[str, Any], field_name: str) -> str:
        """Return the first non-blank aliased value, or an empty string."""
        for alias in self.field_aliases.get(field_name, []):
            value = row.get(alias)
            if not _is_blank(value):
                return _stringify(value)
        return ""

    def _extract_properties(
        self, row: Mapping[str, Any],
    ) -> dict[str, str]:
        """Collect ``Параметр: X`` style columns into a property map."""
        properties: dict[str, str] = {}
        for column, value in row.items():
            name = str(column)
            for prefix in self.property_prefixes:
                if name.startswith(prefix):
                    key = name[len(prefix):].strip()
                    if key and not _is_blank(value):
                        properties[key] = _stringify(value)
                    break
        return properties

    def normalize_row(
        self, row: Mapping[str, Any],
    ) -> ProductRecord | None:
        """Normalise one row, or return ``None`` if it has no title."""
        title = self._resolve(row, "title")
        if not title:
            return None

        product_id = (
            self._resolve(row, "id")
            or synthesize_id()
        )
        return ProductRecord(
            id=product_id,
            title=title,
            price=self._resolve(row, "price") or self.price_on_request,
            url=self._resolve(row, "url"),
            description=_strip_markup(
                self._resolve(row, "description")
            ),
            category=self._resolve(row, "category"),
            properties=self._extract_properties(row),
        )

    def normalize(
        self, rows: Iterable[Mapping[str, Any]],
    ) -> list[ProductRecord]:
        """Normalise a batch of raw rows, dropping untitled ones."""
        products: list[ProductRecord] = []
        dropped = 0
        for row in rows:
            if not isinstance(row, Mapping):
                dropped += 1
                continue
            record = self.normalize_row(row)
            if record is None:
                dropped += 1
                continue
            products.append(record)

        logger.info(
            "Normalised %d products (%d rows dropped)",
            len(products),
            dropped,
        )
        return products
