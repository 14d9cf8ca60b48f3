# goldwatch/scrapers/gold_price_scraper.py

"""Scraper for the kimkhanhviethung.vn gold price table."""

from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from goldwatch.errors import ScrapeFailure
from goldwatch.models.price_record import PriceQuote
from goldwatch.scrapers.base_scraper import BaseScraper


class GoldPriceScraper(BaseScraper):
    """Reads the buy/sell cells of one labelled row of the price table."""

    def __init__(
        self, url: str | None = None, label: str | None = None,
    ) -> None:
        super().__init__("kimkhanh")
        self.url = url or self.settings.GOLD_PRICE_URL
        self.label = label or self.settings.PRODUCT_LABEL

    def _get_homepage(self) -> str:
        """Return the site root for the Referer header."""
        parsed = urlparse(self.url)
        return f"{parsed.scheme}://{parsed.netloc}/"

    def _cell_text(self, cells: list[Tag], key: str) -> str:
        index = int(self.selectors[key])
        if index >= len(cells):
            return ""
        return cells[index].get_text(strip=True)

    def parse_price(self, soup: BeautifulSoup) -> PriceQuote:
        """Find the labelled row and return its buy/sell strings.

        The last matching row wins, as on the live page the label is
        unique.
        """
        buy = sell = ""
        for row in soup.select(self.selectors["price_row"]):
            cells = row.find_all(self.selectors["cell"])
            if self.label in self._cell_text(cells, "label_index"):
                buy = self._cell_text(cells, "buy_index")
                sell = self._cell_text(cells, "sell_index")

        if not buy or not sell:
            raise ScrapeFailure(f"price row not found: {self.label}")
        return PriceQuote(buy=buy, sell=sell)

    def fetch_price(self) -> PriceQuote:
        """Fetch the page and extract the configured row."""
        self.logger.info("[%s] Fetching %s", self.source_name, self.url)
        soup = self._get_page(self.url)
        quote = self.parse_price(soup)
        self.logger.info(
            "[%s] %s buy=%s sell=%s",
            self.source_name, self.label, quote.buy, quote.sell,
        )
        return quote
