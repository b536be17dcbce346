# src/models/product.py

"""Product data models for the normalised door catalog."""

import re
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any

from src.config.settings import Settings

_PRICE_SPACES_RE = re.compile(r"\s")
# "12.500" and "12,500" are digit groups; a decimal part has 1-2 digits
_PRICE_NUMBER_RE = re.compile(
    r"\d{1,3}(?:[.,]\d{3})+(?!\d)|\d+(?:[.,]\d{1,2})?"
)
_GROUPED_NUMBER_RE = re.compile(r"\d{1,3}(?:[.,]\d{3})+")


def number_from_text(raw: str) -> float:
    """Convert ``'15 000'``, ``'10.000'`` or ``'1,5'`` to a float."""
    text = _PRICE_SPACES_RE.sub("", raw)
    if _GROUPED_NUMBER_RE.fullmatch(text):
        return float(re.sub(r"[.,]", "", text))
    return float(text.replace(",", "."))


def synthesize_id() -> str:
    """Placeholder id for a product the feed did not number."""
    return f"gen-{uuid.uuid4().hex[:8]}"


def parse_price(value: object) -> float | None:
    """Parse a feed price like ``'12 500 руб.'`` into a float.

    ``'12.500'`` and ``'12,500'`` read as twelve thousand five hundred;
    ``'9990,50'`` keeps its kopecks.  Returns ``None`` for anything
    without a number (e.g. the "price on request" sentinel) or for
    negative/boolean input.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        if number != number or number < 0:  # NaN
            return None
        return number
    text = _PRICE_SPACES_RE.sub("", str(value))
    match = _PRICE_NUMBER_RE.search(text)
    if not match:
        return None
    return number_from_text(match.group(0))


@dataclass
class ProductRecord:
    """A single normalised product from the store feed."""

    id: str
    title: str
    price: str
    url: str = ""
    description: str = ""
    category: str = ""
    properties: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )

    @property
    def numeric_price(self) -> float | None:
        """The price as a number, or ``None`` when it is not numeric."""
        return parse_price(self.price)

    def absolute_url(self, base_url: str) -> str:
        """Resolve a store-relative link against *base_url*."""
        if not self.url or self.url.startswith(("http://", "https://")):
            return self.url
        return f"{base_url.rstrip('/')}/{self.url.lstrip('/')}"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the cache document shape."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductRecord":
        """Rebuild a record from a cache document entry.

        Raises ``ValueError`` when the entry has no title.  A missing id
        or price gets the same fallback the feed normaliser applies.
        """
        title = str(data.get("title") or "").strip()
        if not title:
            msg = "Cached product has no title"
            raise ValueError(msg)
        raw_props = data.get("properties") or {}
        if not isinstance(raw_props, dict):
            msg = "Cached product properties must be an object"
            raise ValueError(msg)
        raw_id = data.get("id")
        raw_price = data.get("price")
        product_id = "" if raw_id is None else str(raw_id).strip()
        price = "" if raw_price is None else str(raw_price).strip()
        return cls(
            id=product_id or synthesize_id(),
            title=title,
            price=price or Settings.PRICE_ON_REQUEST,
            url=str(data.get("url") or ""),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            properties={
                str(k): str(v) for k, v in raw_props.items()
            },
        )


@dataclass
class ScoredProduct:
    """A product paired with its relevance score for one search."""

    product: ProductRecord
    score: float
