"""OSM tag value to human readable category labels."""

from types import MappingProxyType
from typing import Mapping

# Checked in this order; the first key carrying a descriptive value wins.
CATEGORY_TAG_KEYS = ("shop", "amenity", "office", "craft", "tourism", "healthcare")
FALLBACK_CATEGORY = "Business"

_AMENITY_LABELS = {
    "restaurant": "Restaurant",
    "cafe": "Cafe",
    "bar": "Bar",
    "pub": "Pub",
    "fast_food": "Fast Food",
    "bank": "Bank",
    "pharmacy": "Pharmacy",
    "hospital": "Hospital",
    "clinic": "Clinic",
    "doctors": "Doctor",
    "dentist": "Dentist",
    "veterinary": "Veterinary",
    "school": "School",
    "library": "Library",
    "post_office": "Post Office",
    "fuel": "Gas Station",
    "car_wash": "Car Wash",
    "car_repair": "Auto Repair",
    "parking": "Parking",
    "place_of_worship": "Place of Worship",
    "theatre": "Theatre",
    "cinema": "Cinema",
    "nightclub": "Nightclub",
    "gym": "Gym",
    "community_centre": "Community Center",
    "social_facility": "Social Services",
    "childcare": "Childcare",
}

_SHOP_LABELS = {
    "supermarket": "Supermarket",
    "convenience": "Convenience Store",
    "bakery": "Bakery",
    "butcher": "Butcher",
    "grocery": "Grocery Store",
    "deli": "Deli",
    "clothes": "Clothing Store",
    "shoes": "Shoe Store",
    "jewelry": "Jewelry Store",
    "electronics": "Electronics Store",
    "hardware": "Hardware Store",
    "furniture": "Furniture Store",
    "car": "Car Dealership",
    "car_repair": "Auto Repair",
    "car_parts": "Auto Parts",
    "bicycle": "Bicycle Shop",
    "beauty": "Beauty Salon",
    "hairdresser": "Hair Salon",
    "optician": "Optician",
    "florist": "Florist",
    "gift": "Gift Shop",
    "books": "Bookstore",
    "alcohol": "Liquor Store",
    "tobacco": "Tobacco Shop",
    "laundry": "Laundromat",
    "dry_cleaning": "Dry Cleaning",
    "mobile_phone": "Mobile Phone Store",
    "computer": "Computer Store",
    "department_store": "Department Store",
    "mall": "Shopping Mall",
    "variety_store": "Variety Store",
    "pet": "Pet Store",
    "toys": "Toy Store",
    "sports": "Sporting Goods",
    "outdoor": "Outdoor Store",
    "music": "Music Store",
    "photo": "Photo Store",
    "tattoo": "Tattoo Parlor",
    "pawnbroker": "Pawn Shop",
}

_OFFICE_LABELS = {
    "lawyer": "Law Office",
    "accountant": "Accountant",
    "insurance": "Insurance",
    "estate_agent": "Real Estate",
    "employment_agency": "Employment Agency",
    "travel_agent": "Travel Agency",
    "notary": "Notary",
    "tax_advisor": "Tax Advisor",
    "financial": "Financial Services",
}

_CRAFT_LABELS = {
    "plumber": "Plumber",
    "electrician": "Electrician",
    "hvac": "HVAC",
    "carpenter": "Carpenter",
    "painter": "Painter",
    "roofer": "Roofer",
    "locksmith": "Locksmith",
}

_TOURISM_LABELS = {
    "hotel": "Hotel",
    "motel": "Motel",
    "guest_house": "Guest House",
    "hostel": "Hostel",
    "museum": "Museum",
    "attraction": "Attraction",
}

_HEALTHCARE_LABELS = {
    "hospital": "Hospital",
    "clinic": "Clinic",
    "doctors": "Doctor",
    "dentist": "Dentist",
    "pharmacy": "Pharmacy",
}

# Lookup is by value only, so a value listed in several sections resolves to
# the section merged last.
CATEGORY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        **_AMENITY_LABELS,
        **_SHOP_LABELS,
        **_OFFICE_LABELS,
        **_CRAFT_LABELS,
        **_TOURISM_LABELS,
        **_HEALTHCARE_LABELS,
    }
)


def humanize(value: str) -> str:
    """Label an unmapped value: first letter upper-cased, underscores to spaces."""
    return value[:1].upper() + value[1:].replace("_", " ")


def classify(tags: Mapping[str, str]) -> str:
    """Return the category label for an element's tags."""
    for key in CATEGORY_TAG_KEYS:
        value = tags.get(key)
        if not value or value == "yes":
            continue
        label = CATEGORY_LABELS.get(value)
        if label:
            return label
        return humanize(value)
    return FALLBACK_CATEGORY
