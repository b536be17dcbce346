# src/feed/feed_client.py

"""HTTP client that downloads the store's spreadsheet feed."""

import logging
import time
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from curl_cffi import requests as curl_requests

from src.config.settings import Settings


class FeedClient:
    """Download the raw feed document with retries and a fallback.

    curl_cffi (browser-impersonating TLS) is tried first, up to
    ``MAX_RETRIES`` times with a linear back-off.  When it is exhausted
    a single cloudscraper request is attempted, because the store sits
    behind a JS challenge from time to time.

    Each ``fetch`` opens its own session, so overlapping refreshes in
    different worker threads never share a curl handle.
    """

    def __init__(self, feed_url: str | None = None) -> None:
        self.logger = logging.getLogger("door_catalog.feed")
        self.settings = Settings()
        self.feed_url = feed_url or self.settings.FEED_URL
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def new_session(self) -> curl_requests.Session:
        """Open a browser-impersonating session for one caller."""
        return curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def _fetch_primary(self, session: curl_requests.Session) -> bytes | None:
        """GET the feed via curl_cffi with retries."""
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = session.get(
                    self.feed_url,
                    headers=self.settings.DEFAULT_HEADERS,
                    timeout=self._request_timeout,
                )
                if resp.status_code == 200 and resp.content:
                    return bytes(resp.content)
                self.logger.warning(
                    "[feed] HTTP %d (%d bytes) on attempt %d",
                    resp.status_code,
                    len(resp.content or b""),
                    attempt + 1,
                )
            except Exception as exc:
                self.logger.warning(
                    "[feed] Request error on attempt %d: %s",
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
            if attempt + 1 < self.settings.MAX_RETRIES:
                time.sleep(
                    self.settings.REQUEST_DELAY * (attempt + 1)
                )
        return None

    def _fetch_fallback(self) -> bytes | None:
        """Single cloudscraper attempt once curl_cffi gave up."""
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                self.feed_url,
                headers=self.settings.DEFAULT_HEADERS,
                timeout=self._request_timeout,
            )
            if resp.status_code == 200 and resp.content:
                return bytes(resp.content)
            self.logger.warning(
                "[feed] cloudscraper fallback got HTTP %d",
                resp.status_code,
            )
        except Exception as exc:
            self.logger.error(
                "[feed] cloudscraper fallback failed: %s",
                exc,
                exc_info=True,
            )
        return None

    def fetch(self) -> bytes | None:
        """Return the raw feed bytes, or ``None`` if every attempt failed."""
        self.logger.info("[feed] Fetching %s", self.feed_url)
        session = self.new_session()
        try:
            content = self._fetch_primary(session)
        finally:
            session.close()
        if content is None:
            self.logger.info(
                "[feed] curl_cffi exhausted, falling back to cloudscraper"
            )
            content = self._fetch_fallback()
        if content is not None:
            self.logger.info(
                "[feed] Downloaded %d bytes", len(content)
            )
        return content
