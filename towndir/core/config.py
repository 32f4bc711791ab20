"""Application configuration helpers."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"


class ConfigError(RuntimeError):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class Settings:
    overpass_url: str = DEFAULT_OVERPASS_URL
    state_name: str = "New Jersey"
    state_abbr: str = "NJ"
    state_admin_level: str = "4"
    town_admin_level: str = "8"
    data_dir: Path = Path("data/towns")
    content_dir: Path = Path("content/towns")
    towns_list_file: Path = Path("data/nj-towns-list.json")
    batch_size: int = 20
    rate_limit_seconds: float = 2.0
    batch_pause_seconds: float = 5.0
    discovery_timeout: float = 120.0
    town_timeout: float = 90.0
    postal_prefixes: Tuple[str, ...] = ("08", "07")
    log_level: str = "INFO"


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def parse_prefixes(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma separated postal prefix list, dropping blanks."""
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    state_abbr = (os.getenv("STATE_ABBR") or "NJ").strip().upper()
    data_dir = Path(os.getenv("DATA_DIR") or "data/towns")
    content_dir = Path(os.getenv("CONTENT_DIR") or "content/towns")
    towns_list_file = Path(os.getenv("TOWNS_LIST_FILE") or f"data/{state_abbr.lower()}-towns-list.json")

    batch_size = _get_int("BATCH_SIZE", 20)
    if batch_size <= 0:
        raise ConfigError("BATCH_SIZE must be positive")

    rate_limit_seconds = _get_float("RATE_LIMIT_SECONDS", 2.0)
    batch_pause_seconds = _get_float("BATCH_PAUSE_SECONDS", 5.0)
    if rate_limit_seconds < 0 or batch_pause_seconds < 0:
        raise ConfigError("RATE_LIMIT_SECONDS and BATCH_PAUSE_SECONDS cannot be negative")

    postal_prefixes = parse_prefixes(os.getenv("POSTAL_PREFIXES", "08,07"))
    if not postal_prefixes:
        logger.warning("POSTAL_PREFIXES is empty; records with a postcode will all be dropped.")

    return Settings(
        overpass_url=os.getenv("OVERPASS_URL") or DEFAULT_OVERPASS_URL,
        state_name=os.getenv("STATE_NAME") or "New Jersey",
        state_abbr=state_abbr,
        state_admin_level=os.getenv("STATE_ADMIN_LEVEL") or "4",
        town_admin_level=os.getenv("TOWN_ADMIN_LEVEL") or "8",
        data_dir=data_dir,
        content_dir=content_dir,
        towns_list_file=towns_list_file,
        batch_size=batch_size,
        rate_limit_seconds=rate_limit_seconds,
        batch_pause_seconds=batch_pause_seconds,
        discovery_timeout=_get_float("DISCOVERY_TIMEOUT", 120.0),
        town_timeout=_get_float("TOWN_TIMEOUT", 90.0),
        postal_prefixes=postal_prefixes,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def configure_logging(level: str = "INFO") -> None:
    """Send progress records to stdout and warnings/errors to stderr."""
    formatter = logging.Formatter(LOG_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(_BelowWarning())

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    stderr_handler.setLevel(logging.WARNING)

    root = logging.getLogger()
    root.handlers[:] = [stdout_handler, stderr_handler]
    root.setLevel(level)
