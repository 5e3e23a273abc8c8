"""Prometheus collector scraping coin stats on every poll."""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .errors import ExporterError
from .logging_config import get_logger
from .metrics import DEFAULT_NAMESPACE, SUBSYSTEM, CoinMetric, build_coin_metrics, build_fq_name
from .models import CoinRecord, HealthSnapshot, ScrapeHealth, ScrapeStats
from .scraper import CoinMarketCapScraper

logger = get_logger("collector")


class CoinStatsCollector:
    """Custom collector exposing per-coin gauges and scrape health.

    Each ``collect`` call performs one scrape of the source page. A failed
    scrape never raises: it sets ``up`` to 0 and only the health metrics are
    returned for that poll.
    """

    def __init__(
        self,
        scraper: CoinMarketCapScraper,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        metrics: Optional[Sequence[CoinMetric]] = None,
    ) -> None:
        self.scraper = scraper
        self.namespace = namespace
        self.metrics = tuple(metrics) if metrics is not None else build_coin_metrics(namespace)
        self.health = ScrapeHealth()

        self.up_name = build_fq_name(namespace, SUBSYSTEM, "up")
        self.total_scrapes_name = build_fq_name(namespace, SUBSYSTEM, "total_scrapes")
        self.parse_failures_name = build_fq_name(namespace, SUBSYSTEM, "html_parse_failures")

    def describe(self) -> Iterator[Metric]:
        for metric in self.metrics:
            yield self._coin_family(metric)
        yield from self._health_families(HealthSnapshot(0.0, 0.0, 0.0))

    def collect(self) -> Iterator[Metric]:
        return iter(self.collect_metrics())

    def collect_metrics(self) -> List[Metric]:
        """Run one scrape and return every metric family for this poll."""
        self.health.record_attempt()
        families: List[Metric] = []

        stats = ScrapeStats()
        try:
            records = self.scraper.scrape(stats)
        except ExporterError as exc:
            self.health.record_failure()
            logger.warning("Failed to fetch and decode coin stats: %s", exc)
        except Exception as exc:
            self.health.record_failure()
            logger.exception("Unexpected error while scraping coin stats: %s", exc)
        else:
            self.health.record_success(stats.parse_failures)
            families.extend(self._coin_families(records))

        families.extend(self._health_families(self.health.snapshot()))
        return families

    def _coin_families(self, records: List[CoinRecord]) -> List[Metric]:
        families = []
        for metric in self.metrics:
            family = self._coin_family(metric)
            for record in records:
                family.add_metric(metric.labels(record.symbol), metric.value(record))
            families.append(family)
        return families

    def _coin_family(self, metric: CoinMetric) -> GaugeMetricFamily:
        return GaugeMetricFamily(metric.name, metric.documentation, labels=list(metric.label_names))

    def _health_families(self, snapshot: HealthSnapshot) -> List[Metric]:
        return [
            GaugeMetricFamily(
                self.up_name,
                "Was the last scrape of the website successful.",
                value=snapshot.up,
            ),
            CounterMetricFamily(
                self.total_scrapes_name,
                "Current total website scrapes.",
                value=snapshot.total_scrapes,
            ),
            CounterMetricFamily(
                self.parse_failures_name,
                "Number of errors while parsing HTML.",
                value=snapshot.html_parse_failures,
            ),
        ]
