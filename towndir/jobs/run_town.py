"""CLI job to refresh the business directory of a single named town."""

import argparse
import logging
from typing import List, Optional

from towndir.core.config import LOG_FORMAT, ConfigError, Settings, configure_logging, get_settings, parse_prefixes
from towndir.core.models import Town
from towndir.core.storage import FileSystemError, write_town_document
from towndir.etl.transform import category_breakdown, clean_town_name, slugify
from towndir.jobs.run_batch import build_document, fetch_town_businesses
from towndir.vendors import overpass

logger = logging.getLogger(__name__)


def run_town(
    town_name: str,
    settings: Settings,
    *,
    postal_prefixes: Optional[List[str]] = None,
    county: Optional[str] = None,
    population: Optional[int] = None,
    slug: Optional[str] = None,
) -> int:
    """Fetch, normalize and write one town's directory; return the business count.

    Unlike the batch job this always overwrites the town's data file. Missing
    phone and website values are left out of the written records.
    """
    display_name = clean_town_name(town_name)
    town = Town(
        name=town_name,
        display_name=display_name,
        slug=slug or slugify(display_name, settings.state_abbr),
        population=population,
    )
    prefixes = tuple(postal_prefixes) if postal_prefixes else settings.postal_prefixes[:1]

    logger.info("Querying Overpass API for %s, %s businesses...", town.display_name, settings.state_abbr)
    businesses = fetch_town_businesses(town, settings, postal_prefixes=prefixes, missing=None)
    if not businesses:
        logger.warning("No businesses returned for %s", town.display_name)

    path = write_town_document(settings, build_document(town, settings, businesses, county=county), compact=True)
    logger.info("Successfully saved %d businesses to %s", len(businesses), path)

    print("\nBusinesses by category:")
    for category, count in category_breakdown(businesses):
        print(f"  {category}: {count}")
    return len(businesses)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collect the business directory for one town")
    parser.add_argument("town", help="Administrative name of the town, e.g. 'Trenton'")
    parser.add_argument("--county", help="County recorded in the town document")
    parser.add_argument("--population", type=int, help="Population recorded in the town document")
    parser.add_argument(
        "--postal-prefix",
        dest="postal_prefixes",
        action="append",
        help="Allowed postcode prefix (repeatable); defaults to the first configured prefix",
    )
    parser.add_argument("--slug", help="Override the derived slug")
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

    prefixes = [p for raw in args.postal_prefixes or [] for p in parse_prefixes(raw)]
    try:
        run_town(
            args.town,
            settings,
            postal_prefixes=prefixes,
            county=args.county,
            population=args.population,
            slug=args.slug,
        )
    except (overpass.OverpassError, FileSystemError) as exc:
        logger.error("Error: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
