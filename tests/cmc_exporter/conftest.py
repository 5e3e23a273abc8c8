"""Shared fixtures for exporter tests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List

import httpx
import pytest

from cmc_exporter.http_client import HTTPClient
from cmc_exporter.scraper import CoinMarketCapScraper

FIXTURES = Path(__file__).parent / "fixtures"
TEST_URL = "https://cmc.test/all/views/all/"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class FakeSite:
    """Serves a configurable page through ``httpx.MockTransport``."""

    def __init__(self, body: str = "", status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code
        self.error: Exception | None = None
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, text=self.body)

    def client(self, timeout_seconds: float = 5.0) -> HTTPClient:
        return HTTPClient(timeout_seconds, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def all_coins_html() -> str:
    return load_fixture("all_coins.html")


@pytest.fixture
def fake_site(all_coins_html: str) -> FakeSite:
    return FakeSite(all_coins_html)


@pytest.fixture
def make_scraper(fake_site: FakeSite) -> Callable[[], CoinMarketCapScraper]:
    def factory() -> CoinMarketCapScraper:
        return CoinMarketCapScraper(TEST_URL, fake_site.client())

    return factory


@pytest.fixture
def make_site() -> Callable[..., FakeSite]:
    return FakeSite


@pytest.fixture
def read_fixture() -> Callable[[str], str]:
    return load_fixture


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handler changes made by ``setup_logging`` so caplog keeps working."""
    yield
    logger = logging.getLogger("cmc_exporter")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
