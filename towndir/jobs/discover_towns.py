"""CLI job to build the reference town list from OSM boundaries."""

import argparse
import logging
from typing import List, Optional

from towndir.core.config import LOG_FORMAT, ConfigError, Settings, configure_logging, get_settings
from towndir.core.models import Town
from towndir.core.storage import FileSystemError, load_town_list, save_town_list
from towndir.etl.transform import build_towns
from towndir.vendors import overpass

logger = logging.getLogger(__name__)


class EmptyResultError(RuntimeError):
    """Raised when discovery returns no usable town boundaries."""


def discover_towns(settings: Settings) -> List[Town]:
    """Fetch and normalize every town-level boundary in the configured state."""
    logger.info("Fetching list of all %s towns from OpenStreetMap...", settings.state_name)
    query = overpass.build_towns_query(
        settings.state_name,
        settings.state_admin_level,
        settings.town_admin_level,
        timeout=int(settings.discovery_timeout),
    )
    elements = overpass.fetch_elements(query, settings.overpass_url, settings.discovery_timeout)
    if not elements:
        raise EmptyResultError(f"No towns found in {settings.state_name}")

    towns = build_towns(elements, settings.state_abbr)
    if not towns:
        raise EmptyResultError(f"No named towns found in {settings.state_name}")
    return towns


def load_or_discover_towns(settings: Settings, *, force: bool = False) -> List[Town]:
    """Reuse the saved town list when present; otherwise discover and save it."""
    if not force:
        towns = load_town_list(settings.towns_list_file)
        if towns is not None:
            logger.info("Loaded existing %s towns list (%d towns)", settings.state_abbr, len(towns))
            return towns

    towns = discover_towns(settings)
    save_town_list(settings.towns_list_file, towns)
    logger.info("Found %d towns in %s", len(towns), settings.state_name)
    return towns


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Discover towns for the configured state")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Rediscover even if the town list file already exists",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ConfigError as exc:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    configure_logging(settings.log_level)

    try:
        towns = load_or_discover_towns(settings, force=args.force)
    except (overpass.OverpassError, EmptyResultError, FileSystemError) as exc:
        logger.error("Fatal error: %s", exc)
        raise SystemExit(1) from exc

    logger.info("Town list ready: %d towns at %s", len(towns), settings.towns_list_file)


if __name__ == "__main__":
    main()
