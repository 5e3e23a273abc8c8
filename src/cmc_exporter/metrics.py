"""Static catalog of the per-coin metrics published by the exporter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from .models import CoinRecord

DEFAULT_NAMESPACE = "cmc"
SUBSYSTEM = "coin_stats"
COIN_LABELS: Tuple[str, ...] = ("symbol",)


def default_label_values(symbol: str) -> List[str]:
    return [symbol]


def build_fq_name(*parts: str) -> str:
    """Join the non-empty name parts with underscores."""
    return "_".join(part for part in parts if part)


@dataclass(frozen=True)
class CoinMetric:
    """Descriptor for one gauge published per coin."""

    name: str
    documentation: str
    value: Callable[[CoinRecord], float]
    labels: Callable[[str], List[str]] = default_label_values
    label_names: Sequence[str] = COIN_LABELS


# (field, help text); the field doubles as the metric suffix
_COIN_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("market_cap", "The total market value of a cryptocurrency's circulating supply."),
    ("price", "Current price in USD."),
    (
        "circulating_supply",
        "The amount of coins that are circulating in the market and are in public hands.",
    ),
    ("volume_24h", "A measure of how much of a cryptocurrency was traded in the last 24 hours."),
    ("change_1h", "Percentage change in price over the last 1 hour."),
    ("change_24h", "Percentage change in price over the last 24 hours."),
    ("change_7d", "Percentage change in price over the last 7 days."),
    ("rank", "Current coin position by market cap"),
)


def _field_getter(field_name: str) -> Callable[[CoinRecord], float]:
    def getter(record: CoinRecord) -> float:
        return float(getattr(record, field_name))

    return getter


def build_coin_metrics(
    namespace: str = DEFAULT_NAMESPACE,
    subsystem: str = SUBSYSTEM,
) -> Tuple[CoinMetric, ...]:
    """Build the catalog of per-coin gauges."""
    return tuple(
        CoinMetric(
            name=build_fq_name(namespace, subsystem, field_name),
            documentation=documentation,
            value=_field_getter(field_name),
        )
        for field_name, documentation in _COIN_FIELDS
    )
