"""Page scraper for the CoinMarketCap all-coins table."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from .errors import FieldParseError
from .http_client import HTTPClient
from .logging_config import get_logger
from .models import CoinRecord, ScrapeStats
from .parser_utils import (
    parse_market_cap,
    parse_percentage,
    parse_price,
    parse_supply,
    to_float,
)

logger = get_logger("scraper")

DEFAULT_URL = "https://coinmarketcap.com/all/views/all/"

ROW_SELECTOR = "tbody tr"
NAME_SELECTOR = ".cmc-table__column-name"
RANK_SELECTOR = ".cmc-table__cell--sort-by__rank"
SYMBOL_SELECTOR = ".cmc-table__cell--sort-by__symbol"

FieldParser = Callable[..., float]

# CoinRecord field -> (cell selector, parser)
FIELD_ROUTES: Dict[str, Tuple[str, FieldParser]] = {
    "market_cap": (".cmc-table__cell--sort-by__market-cap", parse_market_cap),
    "price": (".cmc-table__cell--sort-by__price", parse_price),
    "circulating_supply": (".cmc-table__cell--sort-by__circulating-supply", parse_supply),
    "volume_24h": (".cmc-table__cell--sort-by__volume-24-h", parse_price),
    "change_1h": (".cmc-table__cell--sort-by__percent-change-1-h", parse_percentage),
    "change_24h": (".cmc-table__cell--sort-by__percent-change-24-h", parse_percentage),
    "change_7d": (".cmc-table__cell--sort-by__percent-change-7-d", parse_percentage),
}


class CoinMarketCapScraper:
    """Fetches the ranking page and turns its table rows into records."""

    def __init__(self, url: str = DEFAULT_URL, http_client: Optional[HTTPClient] = None) -> None:
        self.url = url
        self.http_client = http_client or HTTPClient()

    def scrape(self, stats: Optional[ScrapeStats] = None) -> List[CoinRecord]:
        """Fetch the page and parse every coin row on it.

        Raises:
            FetchError: if the page could not be retrieved
        """
        stats = stats if stats is not None else ScrapeStats()
        html = self.fetch()
        records = self.parse(html, stats)
        stats.mark_completed()
        logger.debug(
            "Scraped %s: %s records, %s rows skipped, %s parse failures, %.2fs",
            self.url,
            stats.records_parsed,
            stats.rows_skipped,
            stats.parse_failures,
            stats.duration_seconds or 0.0,
        )
        return records

    def fetch(self) -> str:
        return self.http_client.get_text(self.url)

    def parse(self, html: str, stats: Optional[ScrapeStats] = None) -> List[CoinRecord]:
        """Parse an HTML document into coin records.

        Rows without a coin name cell are header or spacer rows and are
        skipped. A page without any coin rows yields an empty list.
        """
        stats = stats if stats is not None else ScrapeStats()
        soup = BeautifulSoup(html, "lxml")

        records: List[CoinRecord] = []
        for row in soup.select(ROW_SELECTOR):
            stats.rows_seen += 1
            name = self._extract_text(row, NAME_SELECTOR)
            if not name:
                stats.rows_skipped += 1
                continue
            records.append(self._parse_row(row, name, stats))

        stats.records_parsed += len(records)
        return records

    def _parse_row(self, row: Any, name: str, stats: ScrapeStats) -> CoinRecord:
        symbol = self._extract_text(row, SYMBOL_SELECTOR)
        values = {
            field_name: parser(self._extract_text(row, selector), stats=stats)
            for field_name, (selector, parser) in FIELD_ROUTES.items()
        }
        return CoinRecord(
            symbol=symbol,
            name=name,
            rank=self._parse_rank(self._extract_text(row, RANK_SELECTOR), symbol, stats),
            **values,
        )

    def _parse_rank(self, text: str, symbol: str, stats: ScrapeStats) -> float:
        try:
            return to_float(text)
        except FieldParseError:
            logger.debug("Unparseable rank %r for %s", text, symbol)
            stats.parse_failures += 1
            return 0.0

    def _extract_text(self, element: Any, selector: str) -> str:
        """Return the joined, trimmed text of every match of ``selector``."""
        return "".join(match.get_text() for match in element.select(selector)).strip()
