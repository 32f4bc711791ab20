"""Client utilities for the OpenStreetMap Overpass API."""

import logging
from typing import Any, Dict, List

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_SESSION.headers.update({"User-Agent": "towndir-collector/1.0 (+https://github.com/towndir/towndir-collector)"})

BUSINESS_AMENITIES = (
    "restaurant",
    "cafe",
    "bar",
    "pub",
    "fast_food",
    "bank",
    "pharmacy",
    "hospital",
    "clinic",
    "doctors",
    "dentist",
    "veterinary",
    "fuel",
    "car_wash",
    "car_repair",
    "theatre",
    "cinema",
    "nightclub",
    "gym",
)
BUSINESS_TOURISM = ("hotel", "motel", "guest_house", "hostel", "museum", "attraction")


class OverpassError(RuntimeError):
    """Base class for failures talking to the Overpass API."""


class TransportError(OverpassError):
    """Connection failure, timeout or non-success HTTP status."""


class ParseError(OverpassError):
    """The response body was not a JSON object."""


def quote(value: str) -> str:
    """Escape a value for use inside a double quoted Overpass QL string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _state_area(state_name: str, state_admin_level: str) -> str:
    return f'area["name"="{quote(state_name)}"]["admin_level"="{quote(state_admin_level)}"]'


def build_towns_query(state_name: str, state_admin_level: str, town_admin_level: str, timeout: int = 120) -> str:
    return f"""
[out:json][timeout:{timeout}];
{_state_area(state_name, state_admin_level)}->.state;
(
  relation["boundary"="administrative"]["admin_level"="{quote(town_admin_level)}"](area.state);
);
out tags;
"""


def build_businesses_query(
    town_name: str,
    state_name: str,
    state_admin_level: str,
    town_admin_level: str,
    timeout: int = 90,
) -> str:
    amenities = "|".join(BUSINESS_AMENITIES)
    tourism = "|".join(BUSINESS_TOURISM)
    selectors = [
        '["shop"]',
        f'["amenity"~"{amenities}"]',
        '["office"]',
        '["craft"]',
        f'["tourism"~"{tourism}"]',
        '["healthcare"]',
    ]
    lines = []
    for selector in selectors:
        lines.append(f"  node{selector}(area.searchArea);")
        lines.append(f"  way{selector}(area.searchArea);")
    body = "\n".join(lines)
    town_area = (
        f'area["name"="{quote(town_name)}"]["admin_level"="{quote(town_admin_level)}"]'
        '["boundary"="administrative"](area.state)->.searchArea;'
    )
    return f"""
[out:json][timeout:{timeout}];
{_state_area(state_name, state_admin_level)}->.state;
{town_area}
(
{body}
);
out center tags;
"""


def run_query(query: str, url: str, timeout: float) -> Dict[str, Any]:
    """POST a QL query and return the decoded JSON object."""
    try:
        response = _SESSION.post(url, data={"data": query}, timeout=timeout)
        response.raise_for_status()
    except requests.Timeout as exc:
        logger.error("Overpass request timed out after %ss", timeout)
        raise TransportError("Request timeout") from exc
    except requests.RequestException as exc:
        logger.error("Overpass request failed: %s", exc)
        raise TransportError(f"Request failed: {exc}") from exc

    try:
        payload = response.json()
    except ValueError as exc:
        raise ParseError(f"Failed to parse response: {exc}") from exc
    if not isinstance(payload, dict):
        raise ParseError(f"Failed to parse response: expected an object, got {type(payload).__name__}")
    return payload


def fetch_elements(query: str, url: str, timeout: float) -> List[Dict[str, Any]]:
    payload = run_query(query, url, timeout)
    remark = payload.get("remark")
    if remark:
        # Runtime errors such as query timeouts arrive as a remark next to a partial element list.
        logger.warning("Overpass returned a remark: %s", remark)
    elements = payload.get("elements")
    if not isinstance(elements, list):
        return []
    return elements
