"""Parsing utilities turning scraped table cells into numbers.

Every public ``parse_*`` function is total: malformed input yields the
``-1`` sentinel instead of raising. When a ``ScrapeStats`` is supplied the
failure is also counted on it.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from .errors import FieldParseError
from .logging_config import get_logger
from .models import SENTINEL, ScrapeStats

logger = get_logger("parser_utils")

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_DOLLAR_SEGMENT_RE = re.compile(r"^\$.*\$")
_NON_DIGIT_RE = re.compile(r"[^0-9]+")
_NON_PERCENT_RE = re.compile(r"[^0-9.\-]")
_CURRENCY_CHARS = str.maketrans("", "", "$,")


def to_float(text: Optional[str]) -> float:
    """Strictly parse ``text`` as a finite float.

    Raises:
        FieldParseError: if the text is not a plain decimal number
    """
    if text is None or not _NUMBER_RE.fullmatch(text):
        raise FieldParseError(text)
    value = float(text)
    if not math.isfinite(value):
        raise FieldParseError(text)
    return value


def parse_number(text: Optional[str], *, stats: Optional[ScrapeStats] = None) -> float:
    """Parse ``text`` as a number, returning -1 on malformed input."""
    try:
        return to_float(text)
    except FieldParseError as exc:
        logger.debug(str(exc))
        if stats is not None:
            stats.parse_failures += 1
        return SENTINEL


def parse_price(text: Optional[str], *, stats: Optional[ScrapeStats] = None) -> float:
    """Parse a currency cell such as ``"$45,398.34"``."""
    return parse_number(_strip_currency(text), stats=stats)


def parse_market_cap(text: Optional[str], *, stats: Optional[ScrapeStats] = None) -> float:
    """Parse a market cap cell.

    The page renders an abbreviated figure before the full one, e.g.
    ``"$852.66B$852,656,824,242"``; everything from the leading ``$`` up to
    the last ``$`` is dropped before parsing.
    """
    if text is not None:
        text = _LEADING_DOLLAR_SEGMENT_RE.sub("", text)
    return parse_number(_strip_currency(text), stats=stats)


def parse_supply(text: Optional[str], *, stats: Optional[ScrapeStats] = None) -> float:
    """Parse a supply cell such as ``"18,781,675 BTC"`` by keeping digits only."""
    if text is not None:
        text = _NON_DIGIT_RE.sub("", text)
    return parse_number(text, stats=stats)


def parse_percentage(text: Optional[str], *, stats: Optional[ScrapeStats] = None) -> float:
    """Parse a percent change cell such as ``"-0.16%"``."""
    if text is not None:
        text = _NON_PERCENT_RE.sub("", text)
    return parse_number(text, stats=stats)


def _strip_currency(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return text.translate(_CURRENCY_CHARS)
