"""Tests for the Prometheus coin stats collector."""

import threading

import httpx
from prometheus_client import CollectorRegistry, generate_latest

from cmc_exporter.collector import CoinStatsCollector
from cmc_exporter.errors import FetchError
from cmc_exporter.scraper import CoinMarketCapScraper


def sample_values(families):
    """Map (sample name, symbol) to value for every sample of a poll."""
    return {
        (sample.name, sample.labels.get("symbol")): sample.value
        for family in families
        for sample in family.samples
    }


def coin_samples(values):
    return {key: value for key, value in values.items() if key[1] is not None}


def test_collect_publishes_fixture_values(make_scraper):
    """Collect should publish the numeric values found on the page."""
    collector = CoinStatsCollector(make_scraper())
    values = sample_values(collector.collect())

    assert values[("cmc_coin_stats_price", "BTC")] == 45398.34
    assert values[("cmc_coin_stats_market_cap", "BTC")] == 852656824242
    assert values[("cmc_coin_stats_change_7d", "BTC")] == 17.76
    assert values[("cmc_coin_stats_circulating_supply", "ADA")] == 32112395093
    assert values[("cmc_coin_stats_change_24h", "ADA")] == 4.3
    assert values[("cmc_coin_stats_rank", "ADA")] == 3
    assert len(coin_samples(values)) == 16

    assert values[("cmc_coin_stats_up", None)] == 1
    assert values[("cmc_coin_stats_total_scrapes_total", None)] == 1
    assert values[("cmc_coin_stats_html_parse_failures_total", None)] == 0


def test_health_families_are_emitted_last(make_scraper):
    """Health metrics should close every poll."""
    families = list(CoinStatsCollector(make_scraper()).collect())

    assert [family.name for family in families[-3:]] == [
        "cmc_coin_stats_up",
        "cmc_coin_stats_total_scrapes",
        "cmc_coin_stats_html_parse_failures",
    ]


def test_fetch_timeout_sets_up_to_zero(make_site, caplog):
    """A timed out fetch should only emit health metrics with up=0."""
    site = make_site()
    site.error = httpx.ReadTimeout("timed out")
    collector = CoinStatsCollector(CoinMarketCapScraper("https://cmc.test/", site.client()))

    with caplog.at_level("WARNING", logger="cmc_exporter"):
        families = list(collector.collect())

    values = sample_values(families)
    assert len(families) == 3
    assert coin_samples(values) == {}
    assert values[("cmc_coin_stats_up", None)] == 0
    assert values[("cmc_coin_stats_total_scrapes_total", None)] == 1
    assert "Failed to fetch and decode coin stats" in caplog.text


def test_empty_page_is_a_successful_scrape(make_site, read_fixture):
    """A page without coin rows should still count as up."""
    site = make_site(read_fixture("empty_table.html"))
    collector = CoinStatsCollector(CoinMarketCapScraper("https://cmc.test/", site.client()))

    values = sample_values(collector.collect())

    assert coin_samples(values) == {}
    assert values[("cmc_coin_stats_up", None)] == 1


def test_recovery_after_failed_poll(make_scraper, fake_site):
    """A poll after a failure should be independent of it."""
    collector = CoinStatsCollector(make_scraper())

    fake_site.status_code = 500
    assert sample_values(collector.collect())[("cmc_coin_stats_up", None)] == 0

    fake_site.status_code = 200
    values = sample_values(collector.collect())
    assert values[("cmc_coin_stats_up", None)] == 1
    assert values[("cmc_coin_stats_total_scrapes_total", None)] == 2


def test_consecutive_polls_are_idempotent(make_scraper):
    """Polling an unchanged page twice should give the same coin values."""
    collector = CoinStatsCollector(make_scraper())

    first = sample_values(collector.collect())
    second = sample_values(collector.collect())

    assert coin_samples(first) == coin_samples(second)
    total = ("cmc_coin_stats_total_scrapes_total", None)
    assert second[total] - first[total] == 1


def test_parse_failures_accumulate(make_site, read_fixture):
    """Field parse failures should accumulate across polls."""
    site = make_site(read_fixture("malformed_row.html"))
    collector = CoinStatsCollector(CoinMarketCapScraper("https://cmc.test/", site.client()))

    collector.collect()
    values = sample_values(collector.collect())

    assert values[("cmc_coin_stats_html_parse_failures_total", None)] == 8
    assert values[("cmc_coin_stats_price", "ETH")] == -1


def test_unexpected_scraper_error_does_not_raise():
    """Unexpected scraper errors should mark the scrape as failed."""
    class BrokenScraper:
        def scrape(self, stats):
            raise RuntimeError("boom")

    collector = CoinStatsCollector(BrokenScraper())
    values = sample_values(collector.collect())

    assert values[("cmc_coin_stats_up", None)] == 0


def test_describe_does_not_scrape():
    """Describe should list every metric without fetching the page."""
    class RecordingScraper:
        calls = 0

        def scrape(self, stats):
            RecordingScraper.calls += 1
            raise FetchError("https://cmc.test/", "unreachable")

    collector = CoinStatsCollector(RecordingScraper())
    names = [family.name for family in collector.describe()]

    assert RecordingScraper.calls == 0
    assert len(names) == 11
    assert "cmc_coin_stats_rank" in names
    assert "cmc_coin_stats_html_parse_failures" in names


def test_registry_exposition(make_scraper):
    """The registry should render coin and health metrics as text."""
    registry = CollectorRegistry()
    registry.register(CoinStatsCollector(make_scraper()))

    output = generate_latest(registry).decode("utf-8")

    assert 'cmc_coin_stats_price{symbol="BTC"} 45398.34' in output
    assert "# TYPE cmc_coin_stats_up gauge" in output
    assert "cmc_coin_stats_total_scrapes_total 1.0" in output


def test_concurrent_polls_count_every_scrape(make_scraper):
    """Overlapping polls should each increment the scrape counter once."""
    collector = CoinStatsCollector(make_scraper())
    thread_count = 20
    barrier = threading.Barrier(thread_count)
    errors = []

    def poll():
        try:
            barrier.wait()
            collector.collect_metrics()
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=poll) for _ in range(thread_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    snapshot = collector.health.snapshot()
    assert snapshot.total_scrapes == thread_count
    assert snapshot.up == 1
