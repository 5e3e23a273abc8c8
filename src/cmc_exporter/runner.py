"""Command-line entry point for the CMC exporter."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from prometheus_client import CollectorRegistry, Info

from . import __version__
from .collector import CoinStatsCollector
from .config import ExporterConfig, parse_listen_address
from .errors import ConfigError
from .http_client import HTTPClient
from .logging_config import get_logger, setup_logging
from .scraper import CoinMarketCapScraper
from .server import create_app, serve

NAME = "cmc_exporter"

logger = get_logger("runner")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmc-exporter",
        description="Prometheus exporter for CoinMarketCap coin stats",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a YAML configuration file",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        help="Address to listen on for web interface and telemetry (default: :9599)",
    )
    parser.add_argument(
        "--web.telemetry-path",
        dest="telemetry_path",
        help="Path under which to expose metrics (default: /metrics)",
    )
    parser.add_argument(
        "--cmc.uri",
        dest="uri",
        help="URI on which to scrape CMC",
    )
    parser.add_argument(
        "--cmc.timeout",
        dest="timeout_seconds",
        type=float,
        help="Timeout in seconds for trying to get stats from CMC (default: 5)",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        choices=["debug", "info", "warning", "error"],
        help="Only log messages with the given severity or above (default: info)",
    )
    parser.add_argument(
        "--log-file",
        dest="log_file",
        help="Also write logs to this file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def load_config(args: argparse.Namespace) -> ExporterConfig:
    """Merge the config file, if any, with command-line overrides."""
    config = ExporterConfig.from_file(args.config) if args.config else ExporterConfig()
    config = config.with_overrides(
        uri=args.uri,
        timeout_seconds=args.timeout_seconds,
        listen_address=args.listen_address,
        telemetry_path=args.telemetry_path,
        log_level=args.log_level,
        log_file=args.log_file,
    )
    return config.validate()


def build_registry(config: ExporterConfig) -> CollectorRegistry:
    """Create a registry holding the build info and the coin stats collector."""
    registry = CollectorRegistry()

    build_info = Info(f"{NAME}_build", "A metric with a constant '1' value labeled by version.", registry=registry)
    build_info.info({"version": __version__})

    scraper = CoinMarketCapScraper(config.uri, HTTPClient(config.timeout_seconds))
    registry.register(CoinStatsCollector(scraper, namespace=config.namespace))
    return registry


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the exporter."""
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        config = load_config(args)
        setup_logging(level=config.log_level, log_file=Path(config.log_file) if config.log_file else None)
        host, port = parse_listen_address(config.listen_address)
    except (ConfigError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    logger.info("Starting %s version %s", NAME, __version__)
    logger.info("Scraping %s with a %.1fs timeout", config.uri, config.timeout_seconds)

    registry = build_registry(config)
    app = create_app(registry, config.telemetry_path)

    try:
        serve(app, host, port)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except OSError as exc:
        logger.error("Error starting HTTP server: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
