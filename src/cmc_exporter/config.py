"""Configuration loader for the CMC exporter."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

import yaml

from .errors import ConfigError
from .metrics import DEFAULT_NAMESPACE
from .scraper import DEFAULT_URL

_STRING_FIELDS = ("uri", "listen_address", "telemetry_path", "namespace", "log_level")


@dataclass
class ExporterConfig:
    """Settings consumed by the exporter.

    Values come from the defaults below, optionally overridden by a YAML
    file and then by command-line flags.
    """

    uri: str = DEFAULT_URL
    timeout_seconds: float = 5.0
    listen_address: str = ":9599"
    telemetry_path: str = "/metrics"
    namespace: str = DEFAULT_NAMESPACE
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExporterConfig":
        """Build configuration from a mapping, ignoring unknown keys."""
        section = data.get("exporter", data)
        if not isinstance(section, dict):
            raise ConfigError("Exporter configuration must be a mapping")
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in section.items() if key in known})

    @classmethod
    def from_file(cls, path: Path | str) -> "ExporterConfig":
        """Load configuration from a YAML file."""
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        return cls.from_dict(data)

    def with_overrides(self, **overrides: Any) -> "ExporterConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})

    def validate(self) -> "ExporterConfig":
        """Check the configuration, raising ``ConfigError`` on bad values."""
        for name in _STRING_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigError(f"{name} must be a string, got {value!r}")
        if self.log_file is not None and not isinstance(self.log_file, str):
            raise ConfigError(f"log_file must be a string, got {self.log_file!r}")

        parsed = urlparse(self.uri)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"Failed to parse cmc.uri: {self.uri!r}")

        try:
            self.timeout_seconds = float(self.timeout_seconds)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid timeout: {self.timeout_seconds!r}") from exc
        if self.timeout_seconds <= 0:
            raise ConfigError("Timeout must be positive")

        if not self.telemetry_path.startswith("/"):
            raise ConfigError(f"Telemetry path must start with '/': {self.telemetry_path!r}")

        parse_listen_address(self.listen_address)
        return self


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split ``host:port`` into its parts; an empty host binds every interface."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigError(f"Listen address must be host:port: {address!r}")
    try:
        port_number = int(port)
    except ValueError as exc:
        raise ConfigError(f"Invalid port in listen address: {address!r}") from exc
    if not 0 <= port_number <= 65535:
        raise ConfigError(f"Port out of range in listen address: {address!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port_number
