"""Configuration loader for proofline.toml."""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConfigError

API_URL_ENV = "PROOFLINE_API_URL"


@dataclass
class ServiceConfig:
    """Analysis service configuration."""
    api_url: str | None = None
    language: str = "auto"
    timeout_seconds: float | None = None  # None: wait as long as it takes


@dataclass
class SchedulerConfig:
    """Re-analysis debounce configuration."""
    debounce_ms: int = 1000


@dataclass
class DocumentConfig:
    """Tree position conventions."""
    position_base: int = 1


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class ProoflineConfig:
    """Complete proofline configuration."""
    service: ServiceConfig = field(default_factory=ServiceConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    document: DocumentConfig = field(default_factory=DocumentConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def require_api_url(self) -> str:
        if not self.service.api_url:
            raise ConfigError(
                f"No analysis service configured: set [service] api_url or {API_URL_ENV}"
            )
        return self.service.api_url


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{name}] must be a table")
    return value


def _number(section: dict[str, Any], section_name: str, key: str, default: Any, kind: type) -> Any:
    value = section.get(key, default)
    if value is None:
        return None
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"[{section_name}] {key} must be a number, got {value!r}") from e


def load_config(config_path: Path | None = None) -> ProoflineConfig:
    """
    Load configuration from proofline.toml.

    Search order:
    1. config_path (if provided; must exist)
    2. cwd/proofline.toml

    The PROOFLINE_API_URL environment variable overrides [service] api_url.
    """
    toml_data: dict[str, Any] = {}

    if config_path is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / "proofline.toml")

    for path in search_paths:
        if path.exists():
            try:
                with open(path, "rb") as f:
                    toml_data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid TOML in {path}: {e}") from e
            break

    service_data = _section(toml_data, "service")
    service = ServiceConfig(
        api_url=os.environ.get(API_URL_ENV) or service_data.get("api_url"),
        language=service_data.get("language", "auto"),
        timeout_seconds=_number(service_data, "service", "timeout_seconds", None, float),
    )

    scheduler_data = _section(toml_data, "scheduler")
    debounce_ms = _number(scheduler_data, "scheduler", "debounce_ms", 1000, int)
    if debounce_ms < 0:
        raise ConfigError("[scheduler] debounce_ms must not be negative")

    document_data = _section(toml_data, "document")
    logging_data = _section(toml_data, "logging")

    return ProoflineConfig(
        service=service,
        scheduler=SchedulerConfig(debounce_ms=debounce_ms),
        document=DocumentConfig(
            position_base=_number(document_data, "document", "position_base", 1, int)
        ),
        logging=LoggingConfig(level=str(logging_data.get("level", "WARNING")).upper()),
    )
