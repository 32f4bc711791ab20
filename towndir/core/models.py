"""Core data models shared by the town directory pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class Town:
    """An administrative boundary from the reference town list."""

    name: str
    display_name: str
    slug: str
    population: Optional[int] = None
    osm_id: Optional[int] = None
    osm_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        # Key names match town lists written by earlier runs.
        return {
            "name": self.name,
            "displayName": self.display_name,
            "slug": self.slug,
            "population": self.population,
            "osmId": self.osm_id,
            "type": self.osm_type,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Town":
        return cls(
            name=data["name"],
            display_name=data.get("displayName") or data["name"],
            slug=data["slug"],
            population=data.get("population"),
            osm_id=data.get("osmId"),
            osm_type=data.get("type"),
        )


@dataclass(slots=True)
class Business:
    """Normalized business record built from one tagged OSM element."""

    name: str
    category: str
    address: str
    phone: Optional[str] = ""
    email: Optional[str] = ""
    website: Optional[str] = ""
    hours: Optional[str] = ""
    rating: Optional[float] = None
    review_count: Optional[int] = None
    claimed: bool = False
    featured: bool = False

    def to_dict(self, compact: bool = False) -> Dict[str, Any]:
        if not compact:
            return asdict(self)
        entry: Dict[str, Any] = {"name": self.name, "category": self.category, "address": self.address}
        if self.phone:
            entry["phone"] = self.phone
        if self.website:
            entry["website"] = self.website
        return entry


@dataclass(slots=True)
class TownDocument:
    """Per-town artifact: descriptive town fields plus its business list."""

    name: str
    state: str
    state_abbr: str
    slug: str
    population: Optional[int] = None
    county: Optional[str] = None
    businesses: List[Business] = field(default_factory=list)

    def to_dict(self, compact: bool = False) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state,
            "state_abbr": self.state_abbr,
            "county": self.county,
            "population": self.population,
            "slug": self.slug,
            "businesses": [business.to_dict(compact=compact) for business in self.businesses],
        }
