"""Utilities for transforming Overpass elements into towns and businesses."""

import logging
import re
import unicodedata
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from towndir.core.models import Business, Town
from towndir.etl.categories import classify

logger = logging.getLogger(__name__)

_TOWN_SUFFIXES = (
    re.compile(r" Township$", re.IGNORECASE),
    re.compile(r" Borough$", re.IGNORECASE),
    re.compile(r" City$", re.IGNORECASE),
)
_SLUG_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")
_PHONE_DISALLOWED = re.compile(r"[^0-9+]")
_LEADING_DIGITS = re.compile(r"^\s*[+-]?[0-9]+")


def clean_town_name(name: str) -> str:
    """Drop a trailing Township/Borough/City word from an administrative name."""
    cleaned = name
    for pattern in _TOWN_SUFFIXES:
        cleaned = pattern.sub("", cleaned)
    return cleaned


def slugify(display_name: str, state_abbr: str) -> str:
    slug = _SLUG_DISALLOWED.sub("", display_name.lower())
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug).strip("-")
    return f"{slug}-{state_abbr.lower()}"


def format_phone(phone: Optional[str], missing: Optional[str] = "") -> Optional[str]:
    """Render 10-digit North American numbers as (AAA) BBB-CCCC.

    Anything that is not unambiguously such a number is returned unchanged;
    an empty value yields ``missing``.
    """
    if not phone:
        return missing
    cleaned = _PHONE_DISALLOWED.sub("", phone)
    if len(cleaned) == 11 and cleaned.startswith("1"):
        cleaned = cleaned[1:]
    elif len(cleaned) != 10:
        return phone
    return f"({cleaned[:3]}) {cleaned[3:6]}-{cleaned[6:]}"


def format_address(tags: Mapping[str, str], town_name: str, state_abbr: str) -> str:
    parts: List[str] = []
    house_number = tags.get("addr:housenumber")
    street = tags.get("addr:street")
    if house_number and street:
        parts.append(f"{house_number} {street}")
    elif street:
        parts.append(street)

    parts.append(town_name)
    parts.append(state_abbr)

    postcode = tags.get("addr:postcode")
    if postcode:
        parts[-1] = f"{parts[-1]} {postcode}"
    return ", ".join(parts)


def collation_key(value: str) -> Tuple[str, str]:
    """Sort key approximating locale collation: accents and case fold first."""
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    # Lowercase sorts before uppercase when the folded forms tie.
    return base.casefold(), value.swapcase()


def matches_postal_prefix(tags: Mapping[str, str], prefixes: Sequence[str]) -> bool:
    """Records without a postcode always pass."""
    postcode = tags.get("addr:postcode")
    if not postcode:
        return True
    return postcode.startswith(tuple(prefixes))


def parse_population(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    if isinstance(raw, int):
        return raw
    match = _LEADING_DIGITS.match(str(raw))
    if not match:
        return None
    return int(match.group(0))


def _tags_of(element: Dict[str, Any]) -> Dict[str, str]:
    tags = element.get("tags")
    return tags if isinstance(tags, dict) else {}


def to_business(
    tags: Mapping[str, str],
    *,
    town_name: str,
    state_abbr: str,
    missing: Optional[str] = "",
) -> Business:
    return Business(
        name=tags["name"],
        category=classify(tags),
        address=format_address(tags, town_name, state_abbr),
        phone=format_phone(tags.get("phone"), missing),
        email=tags.get("email") or tags.get("contact:email") or missing,
        website=tags.get("website") or tags.get("contact:website") or missing,
        hours=tags.get("opening_hours") or missing,
    )


def build_businesses(
    elements: Iterable[Dict[str, Any]],
    *,
    town_name: str,
    state_abbr: str,
    postal_prefixes: Sequence[str],
    missing: Optional[str] = "",
) -> List[Business]:
    """Filter, normalize, dedupe and sort raw elements for one town."""
    businesses: List[Business] = []
    seen = set()
    dropped_postcode = 0

    for element in elements:
        tags = _tags_of(element)
        if not tags.get("name"):
            continue
        if not matches_postal_prefix(tags, postal_prefixes):
            dropped_postcode += 1
            continue

        business = to_business(tags, town_name=town_name, state_abbr=state_abbr, missing=missing)
        key = (business.name, business.address)
        if key in seen:
            continue
        seen.add(key)
        businesses.append(business)

    if dropped_postcode:
        logger.debug("Dropped %d elements outside postal prefixes %s", dropped_postcode, list(postal_prefixes))

    businesses.sort(key=lambda b: (collation_key(b.category), collation_key(b.name)))
    return businesses


def to_town(element: Dict[str, Any], state_abbr: str) -> Optional[Town]:
    tags = _tags_of(element)
    name = tags.get("name")
    if not name:
        return None
    display_name = clean_town_name(name)
    return Town(
        name=name,
        display_name=display_name,
        slug=slugify(display_name, state_abbr),
        population=parse_population(tags.get("population")),
        osm_id=element.get("id"),
        osm_type=element.get("type"),
    )


def build_towns(elements: Iterable[Dict[str, Any]], state_abbr: str) -> List[Town]:
    """Map boundary elements to towns, keeping the first town per slug."""
    towns: List[Town] = []
    seen_slugs = set()
    for element in elements:
        town = to_town(element, state_abbr)
        if town is None:
            continue
        if town.slug in seen_slugs:
            logger.debug("Duplicate slug %s for %s; keeping first", town.slug, town.name)
            continue
        seen_slugs.add(town.slug)
        towns.append(town)

    towns.sort(key=lambda t: collation_key(t.display_name))
    return towns


def category_breakdown(businesses: Iterable[Business], limit: int = 15) -> List[Tuple[str, int]]:
    """Most common categories first."""
    counts: Dict[str, int] = {}
    for business in businesses:
        counts[business.category] = counts.get(business.category, 0) + 1
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]
