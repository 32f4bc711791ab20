"""CLI job that extracts businesses for every town in the reference list."""

import argparse
import logging
import time
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from towndir.core.config import LOG_FORMAT, ConfigError, Settings, configure_logging, get_settings
from towndir.core.models import Business, Town, TownDocument
from towndir.core.storage import (
    FileSystemError,
    ensure_directories,
    town_data_exists,
    write_content_stub,
    write_town_document,
)
from towndir.etl.transform import build_businesses
from towndir.jobs.discover_towns import EmptyResultError, load_or_discover_towns
from towndir.vendors import overpass

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    total_towns: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    businesses: int = 0

    def render(self, state_name: str) -> str:
        return "\n".join(
            [
                "",
                "========== SUMMARY ==========",
                f"Total towns in {state_name}: {self.total_towns}",
                f"Towns processed: {self.processed}",
                f"Towns skipped (already exist): {self.skipped}",
                f"Towns with errors: {self.errors}",
                f"Total businesses found: {self.businesses}",
                "==============================",
                "",
            ]
        )


def fetch_town_businesses(
    town: Town,
    settings: Settings,
    *,
    postal_prefixes: Optional[Sequence[str]] = None,
    missing: Optional[str] = "",
) -> List[Business]:
    """Query one town's area and normalize the result."""
    query = overpass.build_businesses_query(
        town.name,
        settings.state_name,
        settings.state_admin_level,
        settings.town_admin_level,
        timeout=int(settings.town_timeout),
    )
    elements = overpass.fetch_elements(query, settings.overpass_url, settings.town_timeout)
    logger.debug("Raw results for %s: %d elements", town.display_name, len(elements))
    return build_businesses(
        elements,
        town_name=town.display_name,
        state_abbr=settings.state_abbr,
        postal_prefixes=settings.postal_prefixes if postal_prefixes is None else postal_prefixes,
        missing=missing,
    )


def build_document(town: Town, settings: Settings, businesses: List[Business], county: Optional[str] = None) -> TownDocument:
    return TownDocument(
        name=town.display_name,
        state=settings.state_name,
        state_abbr=settings.state_abbr,
        slug=town.slug,
        population=town.population,
        county=county,
        businesses=businesses,
    )


def process_town(town: Town, settings: Settings, summary: BatchSummary) -> None:
    if town_data_exists(settings, town.slug):
        logger.info("Skipping %s (already exists)", town.display_name)
        summary.skipped += 1
        return

    try:
        businesses = fetch_town_businesses(town, settings)
        # The data file marks the town as done, so it is written last.
        write_content_stub(settings, town)
        write_town_document(settings, build_document(town, settings, businesses))
    except Exception as exc:  # noqa: BLE001
        logger.error("Error processing %s: %s", town.display_name, exc)
        summary.errors += 1
        return

    logger.info("Processing %s... %d businesses found", town.display_name, len(businesses))
    summary.processed += 1
    summary.businesses += len(businesses)


def run_batch(towns: List[Town], settings: Settings) -> BatchSummary:
    """Process towns sequentially in fixed-size batches with fixed delays."""
    summary = BatchSummary(total_towns=len(towns))
    batch_size = settings.batch_size
    total_batches = (len(towns) + batch_size - 1) // batch_size

    logger.info("Total towns to process: %d", len(towns))
    logger.info("Processing in batches of %d...", batch_size)

    for start in range(0, len(towns), batch_size):
        batch = towns[start : start + batch_size]
        logger.info("--- Batch %d/%d ---", start // batch_size + 1, total_batches)

        for town in batch:
            process_town(town, settings, summary)
            time.sleep(settings.rate_limit_seconds)

        if start + batch_size < len(towns):
            logger.info("Pausing between batches...")
            time.sleep(settings.batch_pause_seconds)

    return summary


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collect business directories for every town in the state")
    parser.add_argument(
        "--batch-size",
        dest="batch_size",
        type=int,
        default=settings.batch_size,
        help="Number of towns per batch",
    )
    parser.add_argument(
        "--delay",
        dest="rate_limit_seconds",
        type=float,
        default=settings.rate_limit_seconds,
        help="Seconds to wait after each town",
    )
    parser.add_argument(
        "--batch-pause",
        dest="batch_pause_seconds",
        type=float,
        default=settings.batch_pause_seconds,
        help="Seconds to wait between batches",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    try:
        settings = get_settings()
    except ConfigError as exc:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    configure_logging(settings.log_level)

    args = build_parser(settings).parse_args(argv)
    if args.batch_size <= 0:
        logger.error("Configuration error: --batch-size must be positive")
        raise SystemExit(2)
    if args.rate_limit_seconds < 0 or args.batch_pause_seconds < 0:
        logger.error("Configuration error: --delay and --batch-pause cannot be negative")
        raise SystemExit(2)
    settings = replace(
        settings,
        batch_size=args.batch_size,
        rate_limit_seconds=args.rate_limit_seconds,
        batch_pause_seconds=args.batch_pause_seconds,
    )

    try:
        ensure_directories(settings)
        towns = load_or_discover_towns(settings)
    except (overpass.OverpassError, EmptyResultError, FileSystemError) as exc:
        logger.error("Fatal error: %s", exc)
        raise SystemExit(1) from exc

    summary = run_batch(towns, settings)
    print(summary.render(settings.state_name))


if __name__ == "__main__":
    main()
