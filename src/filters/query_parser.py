# src/filters/query_parser.py

"""Free-text query understanding for catalog search.

Turns a shopper's message such as ``"входные пд до 30 тыс"`` into a
:class:`QueryFilter` through a fixed, order-sensitive pipeline:

1. Price extraction: a range (``10000-20000``), a lower bound
   (``от 10000``) or an upper bound (``до 15 тыс``).  A range wins over
   independent bounds.  Matched text is removed.
2. Alias substitution: colloquial terms become canonical phrases.
3. Brand-context detection: manufacturer marker words set a flag and
   are removed.
4. Cleanup: punctuation and filler words are dropped.

All vocabulary lives in :class:`QueryVocabulary`, built from
:class:`~src.config.settings.Settings` unless one is injected.
"""

import logging
import math
import re
from dataclasses import dataclass, field

from src.config.settings import Settings
from src.models.product import number_from_text

logger = logging.getLogger("door_catalog.query_parser")


# ── Data types ───────────────────────────────────────────


@dataclass
class QueryFilter:
    """Structured intent extracted from one free-text query."""

    min_price: float = 0.0
    max_price: float = math.inf
    cleaned_text: str = ""
    is_brand_search: bool = False

    @property
    def has_price_bound(self) -> bool:
        """True when either price bound differs from its default."""
        return self.min_price > 0 or self.max_price != math.inf


@dataclass(frozen=True)
class QueryVocabulary:
    """Static word lists and tables the parser is driven by."""

    aliases: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )
    brand_markers: frozenset[str] = frozenset()
    stop_words: frozenset[str] = frozenset()
    thousands_markers: frozenset[str] = frozenset()
    currency_markers: frozenset[str] = frozenset()
    measure_markers: frozenset[str] = frozenset()
    lower_bound_markers: tuple[str, ...] = ("от",)
    upper_bound_markers: tuple[str, ...] = (
        "не дороже",
        "дешевле",
        "до",
    )

    @classmethod
    def from_settings(cls) -> "QueryVocabulary":
        """Build the default vocabulary from Settings."""
        return cls(
            aliases={
                k.lower(): v.lower()
                for k, v in Settings.QUERY_ALIASES.items()
            },
            brand_markers=frozenset(
                w.lower() for w in Settings.BRAND_MARKERS
            ),
            stop_words=frozenset(
                w.lower() for w in Settings.QUERY_STOP_WORDS
            ),
            thousands_markers=frozenset(
                w.lower() for w in Settings.THOUSANDS_MARKERS
            ),
            currency_markers=frozenset(
                w.lower() for w in Settings.CURRENCY_MARKERS
            ),
            measure_markers=frozenset(
                w.lower() for w in Settings.MEASURE_MARKERS
            ),
        )


# ── Regex builders ───────────────────────────────────────

_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_RE = re.compile(r"\w[\w'’.\-]*")
_TOKEN_TRIM = ".-'’"


def _alternation(words: list[str] | tuple[str, ...] | frozenset[str]) -> str:
    """Regex alternation, longest first, spaces matching any whitespace."""
    ordered = sorted(words, key=len, reverse=True)
    return "|".join(
        re.escape(w).replace(r"\ ", r"\s+") for w in ordered
    )


def _number(name: str, measures: str = "") -> str:
    """A price number: ``15000``, ``15 000``, ``10.000`` or ``1,5``.

    A ``.``/``,`` before exactly three digits groups thousands; a
    decimal part has one or two digits.  A number followed by a size
    unit from *measures* (``800 мм``) does not match, and a digit-group
    run gives back its trailing groups until that holds.
    """
    pattern = (
        rf"(?P<{name}>\d{{1,3}}(?:[ \u00a0]\d{{3}})+(?:[.,]\d{{1,2}})?"
        rf"|\d{{1,3}}(?:[.,]\d{{3}})+"
        rf"|\d+(?:[.,]\d{{1,2}})?)"
        rf"(?!\d|[.,]\d)"
    )
    if measures:
        pattern += rf"(?!\s*(?:{measures})\.?(?!\w))"
    return pattern


def _unit(name: str, units: str) -> str:
    """An optional magnitude/currency token after a number."""
    return rf"(?:\s*(?P<{name}>{units})\.?(?!\w))?"


def _to_number(raw: str) -> float:
    """Parse a matched number, tolerating digit groups and a comma."""
    return number_from_text(raw)


# ── Parser ───────────────────────────────────────────────


class QueryParser:
    """Compile a free-text query into a :class:`QueryFilter`."""

    def __init__(self, vocabulary: QueryVocabulary | None = None) -> None:
        self.vocabulary = vocabulary or QueryVocabulary.from_settings()
        vocab = self.vocabulary

        units = _alternation(
            vocab.thousands_markers | vocab.currency_markers
        )
        measures = _alternation(vocab.measure_markers)
        self._range_re = re.compile(
            rf"(?<![\w.,]){_number('lo', measures)}"
            rf"{_unit('lo_unit', units)}"
            rf"\s*[-–—]\s*"
            rf"{_number('hi', measures)}{_unit('hi_unit', units)}"
        )
        self._lower_re = re.compile(
            rf"(?<!\w)(?:{_alternation(vocab.lower_bound_markers)})\s*"
            rf"{_number('num', measures)}{_unit('unit', units)}"
        )
        self._upper_re = re.compile(
            rf"(?<!\w)(?:{_alternation(vocab.upper_bound_markers)})\s*"
            rf"{_number('num', measures)}{_unit('unit', units)}"
        )
        # Hyphenated model codes such as "пд-15" are not aliased
        self._alias_re: re.Pattern[str] | None = None
        if vocab.aliases:
            self._alias_re = re.compile(
                rf"(?<![\w-])(?:{_alternation(tuple(vocab.aliases))})"
                rf"(?![\w-])"
            )

    # ── Step 1: price ────────────────────────────────────

    def _is_thousands(self, unit: str | None) -> bool:
        """Check whether a unit token is a thousands marker."""
        return (
            unit is not None
            and unit.lower().rstrip(".") in self.vocabulary.thousands_markers
        )

    def _scaled(self, raw: str, unit: str | None) -> float:
        """Apply the thousands multiplier when the unit calls for it."""
        value = _to_number(raw)
        return value * 1000 if self._is_thousands(unit) else value

    def _shared_units(
        self,
        lo_raw: str,
        lo_unit: str | None,
        hi_raw: str,
        hi_unit: str | None,
    ) -> tuple[str | None, str | None]:
        """Spread a thousands unit written on one end of a pair.

        ``10-20 тыс`` means 10 000..20 000 and ``от 5 тысяч до 10``
        means 5 000..10 000.  The bare number only inherits when the
        result stays in order, so ``от 5 тысяч до 8000`` is unchanged.
        """
        lo = _to_number(lo_raw)
        hi = _to_number(hi_raw)
        if lo_unit is None and self._is_thousands(hi_unit) and lo <= hi:
            return hi_unit, hi_unit
        if (
            hi_unit is None
            and self._is_thousands(lo_unit)
            and lo <= hi < lo * 1000
        ):
            return lo_unit, lo_unit
        return lo_unit, hi_unit

    def extract_price(
        self, text: str,
    ) -> tuple[float, float, str]:
        """Pull price bounds out of *text*.

        Returns ``(min_price, max_price, remaining_text)``.
        """
        min_price = 0.0
        max_price = math.inf

        range_match = self._range_re.search(text)
        if range_match:
            lo_unit, hi_unit = self._shared_units(
                range_match.group("lo"), range_match.group("lo_unit"),
                range_match.group("hi"), range_match.group("hi_unit"),
            )
            min_price = self._scaled(range_match.group("lo"), lo_unit)
            max_price = self._scaled(range_match.group("hi"), hi_unit)
            text = (
                text[:range_match.start()]
                + " "
                + text[range_match.end():]
            )
        else:
            upper_match = self._upper_re.search(text)
            lower_match = self._lower_re.search(text)
            if upper_match and lower_match:
                lo_unit, hi_unit = self._shared_units(
                    lower_match.group("num"), lower_match.group("unit"),
                    upper_match.group("num"), upper_match.group("unit"),
                )
                min_price = self._scaled(lower_match.group("num"), lo_unit)
                max_price = self._scaled(upper_match.group("num"), hi_unit)
            elif upper_match:
                max_price = self._scaled(
                    upper_match.group("num"), upper_match.group("unit")
                )
            elif lower_match:
                min_price = self._scaled(
                    lower_match.group("num"), lower_match.group("unit")
                )
            # Strip right-to-left so earlier spans stay valid
            spans = sorted(
                (m.span() for m in (upper_match, lower_match) if m),
                reverse=True,
            )
            for start, end in spans:
                text = text[:start] + " " + text[end:]

        if min_price > max_price:
            min_price, max_price = max_price, min_price

        return min_price, max_price, _WHITESPACE_RE.sub(" ", text).strip()

    # ── Step 2: aliases ──────────────────────────────────

    def apply_aliases(self, text: str) -> str:
        """Replace colloquial terms with their canonical phrases."""
        if self._alias_re is None:
            return text
        aliases = self.vocabulary.aliases
        return self._alias_re.sub(
            lambda m: aliases.get(m.group(0), m.group(0)), text
        )

    # ── Steps 3-4: brand context & cleanup ───────────────

    def strip_markers(self, text: str) -> tuple[str, bool]:
        """Drop brand markers and filler words.

        Returns ``(cleaned_text, is_brand_search)``.
        """
        vocab = self.vocabulary
        is_brand = False
        kept: list[str] = []
        for raw_token in _TOKEN_RE.findall(text):
            token = raw_token.strip(_TOKEN_TRIM)
            if not token:
                continue
            if token in vocab.brand_markers:
                is_brand = True
                continue
            if token in vocab.stop_words or token in vocab.currency_markers:
                continue
            kept.append(token)
        return " ".join(kept), is_brand

    # ── Public API ───────────────────────────────────────

    def parse(self, query: object) -> QueryFilter:
        """Parse a raw query; non-string input yields the default filter."""
        if not isinstance(query, str):
            return QueryFilter()
        text = _WHITESPACE_RE.sub(" ", query.lower()).strip()
        if not text:
            return QueryFilter()

        min_price, max_price, text = self.extract_price(text)
        text = self.apply_aliases(text)
        cleaned, is_brand = self.strip_markers(text)

        result = QueryFilter(
            min_price=min_price,
            max_price=max_price,
            cleaned_text=cleaned,
            is_brand_search=is_brand,
        )
        logger.debug("Parsed %r → %s", query, result)
        return result
