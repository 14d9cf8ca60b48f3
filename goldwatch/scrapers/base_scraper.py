# goldwatch/scrapers/base_scraper.py

"""Abstract base class for price-page scrapers."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from goldwatch.config.settings import Settings
from goldwatch.errors import ScrapeFailure
from goldwatch.models.price_record import PriceQuote


class BaseScraper(ABC):
    """Fetches one page per run and fails loudly.

    There is no retry loop: a failed fetch raises :class:`ScrapeFailure`
    and the next cron invocation tries again. The only second request
    is the cloudscraper fallback when the page turns out to be a
    Cloudflare or CAPTCHA challenge.
    """

    # Cloudflare challenge page markers (checked before keyword scan)
    _CF_CHALLENGE_MARKERS: list[str] = [
        "challenges.cloudflare.com",
        "cdn-cgi/challenge-platform",
        "just a moment",
        "cf-turnstile",
        "cf_chl_opt",
    ]

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"goldwatch.scraper.{source_name}"
        )
        self.settings = Settings()
        self.selectors: dict[str, str] = self._load_selectors()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _load_selectors(self) -> dict[str, str]:
        """Load CSS selectors for this source from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, str] = all_selectors.get(
            self.source_name, {}
        )
        return result

    def _is_challenge(self, text: str) -> bool:
        """Detect Cloudflare challenge pages and CAPTCHA interstitials."""
        lower = text.lower()
        for marker in self._CF_CHALLENGE_MARKERS:
            if marker in lower:
                self.logger.warning(
                    "[%s] Cloudflare challenge detected (marker: '%s')",
                    self.source_name,
                    marker,
                )
                return True

        # Real price pages are long; only scan short bodies for keywords
        has_body_content = "<body" in lower and len(text) > 5000
        if not has_body_content:
            for keyword in self.settings.CAPTCHA_KEYWORDS:
                if keyword in lower:
                    self.logger.warning(
                        "[%s] CAPTCHA keyword '%s' detected",
                        self.source_name,
                        keyword,
                    )
                    return True
        return False

    def _fallback_get(self, url: str, headers: dict[str, str]) -> str:
        """Fetch through cloudscraper's JS challenge solver."""
        self.logger.info(
            "[%s] Challenge page from curl_cffi, falling back to cloudscraper",
            self.source_name,
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            resp: Any = scraper.get(
                url, headers=headers, timeout=self._request_timeout,
            )
        except Exception as exc:
            raise ScrapeFailure(
                f"cloudscraper fallback failed: {exc}"
            ) from exc
        if resp.status_code != 200:
            raise ScrapeFailure(
                f"cloudscraper fallback returned HTTP {resp.status_code}"
            )
        text = str(resp.text)
        if self._is_challenge(text):
            raise ScrapeFailure("Challenge page persisted after fallback")
        return text

    def _get_page(self, url: str) -> BeautifulSoup:
        """GET *url* and parse it, raising ScrapeFailure on any error."""
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._get_homepage(),
        }
        try:
            resp = self.session.get(
                url, headers=headers, timeout=self._request_timeout,
            )
        except Exception as exc:
            self.logger.error(
                "[%s] Network error fetching %s: %s",
                self.source_name, url, exc,
            )
            raise ScrapeFailure(
                f"Network/timeout error fetching {url}: {exc}"
            ) from exc

        if resp.status_code != 200:
            raise ScrapeFailure(
                f"HTTP {resp.status_code} fetching {url}"
            )

        text = resp.text
        if self._is_challenge(text):
            text = self._fallback_get(url, headers)
        return BeautifulSoup(text, "lxml")

    @abstractmethod
    def _get_homepage(self) -> str:
        """Return the homepage URL for the Referer header."""
        ...

    @abstractmethod
    def fetch_price(self) -> PriceQuote:
        """Return the current buy/sell pair or raise ScrapeFailure."""
        ...
