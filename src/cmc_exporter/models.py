"""Data models for the CMC exporter."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

SENTINEL = -1.0


@dataclass
class CoinRecord:
    """One row of the ranking table.

    Numeric fields hold ``SENTINEL`` when the corresponding cell could not
    be parsed. Records only live for the duration of a single scrape.
    """

    symbol: str
    rank: float = 0.0
    name: str = ""
    market_cap: float = SENTINEL
    price: float = SENTINEL
    circulating_supply: float = SENTINEL
    volume_24h: float = SENTINEL
    change_1h: float = SENTINEL
    change_24h: float = SENTINEL
    change_7d: float = SENTINEL


@dataclass
class ScrapeStats:
    """Bookkeeping for a single scrape of the source page."""

    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    rows_seen: int = 0
    rows_skipped: int = 0
    records_parsed: int = 0
    parse_failures: int = 0

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def mark_completed(self) -> None:
        self.completed_at = datetime.now(timezone.utc)


@dataclass(frozen=True)
class HealthSnapshot:
    """Point-in-time copy of the scrape health counters."""

    up: float
    total_scrapes: float
    html_parse_failures: float


class ScrapeHealth:
    """Process-wide scrape health counters.

    Updates are serialized with a lock so overlapping polls cannot lose
    increments of ``total_scrapes`` or interleave ``up`` writes.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._up = 0.0
        self._total_scrapes = 0.0
        self._html_parse_failures = 0.0

    def record_attempt(self) -> None:
        with self._lock:
            self._total_scrapes += 1

    def record_success(self, parse_failures: int = 0) -> None:
        if parse_failures < 0:
            raise ValueError("parse_failures must not be negative")
        with self._lock:
            self._up = 1.0
            self._html_parse_failures += parse_failures

    def record_failure(self) -> None:
        with self._lock:
            self._up = 0.0

    def snapshot(self) -> HealthSnapshot:
        with self._lock:
            return HealthSnapshot(
                up=self._up,
                total_scrapes=self._total_scrapes,
                html_parse_failures=self._html_parse_failures,
            )
