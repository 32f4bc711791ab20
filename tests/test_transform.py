from towndir.core.models import Business
from towndir.etl import transform


def _element(**tags):
    return {"type": "node", "id": 1, "tags": tags}


def test_format_phone():
    assert transform.format_phone("609-555-1234") == "(609) 555-1234"
    assert transform.format_phone("16095551234") == "(609) 555-1234"
    assert transform.format_phone("+1 (609) 555-1234") == "+1 (609) 555-1234"
    assert transform.format_phone("555-1234") == "555-1234"
    assert transform.format_phone("") == ""
    assert transform.format_phone(None) == ""
    assert transform.format_phone(None, missing=None) is None


def test_clean_town_name_and_slugify():
    assert transform.clean_town_name("Cherry Hill Township") == "Cherry Hill"
    assert transform.clean_town_name("Wildwood City") == "Wildwood"
    assert transform.clean_town_name("Princeton borough") == "Princeton"
    assert transform.clean_town_name("Township") == "Township"

    assert transform.slugify("Cherry Hill", "NJ") == "cherry-hill-nj"
    assert transform.slugify("Wildwood", "NJ") == "wildwood-nj"
    assert transform.slugify("  Lake -- Como!  ", "NJ") == "lake-como-nj"
    assert transform.slugify("Port Republic", "de") == "port-republic-de"


def test_format_address_variants():
    tags = {"addr:housenumber": "12", "addr:street": "Main St", "addr:postcode": "08608"}
    assert transform.format_address(tags, "Trenton", "NJ") == "12 Main St, Trenton, NJ 08608"
    assert transform.format_address({"addr:street": "Main St"}, "Trenton", "NJ") == "Main St, Trenton, NJ"
    assert transform.format_address({"addr:housenumber": "12"}, "Trenton", "NJ") == "Trenton, NJ"
    assert transform.format_address({"addr:postcode": "08608"}, "Trenton", "PA") == "Trenton, PA 08608"


def test_parse_population():
    assert transform.parse_population("12345") == 12345
    assert transform.parse_population("12,345") == 12
    assert transform.parse_population(500) == 500
    assert transform.parse_population("about 10") is None
    assert transform.parse_population(None) is None


def test_build_businesses_end_to_end():
    elements = [
        _element(
            name="Joe's Deli",
            shop="deli",
            **{
                "addr:housenumber": "12",
                "addr:street": "Main St",
                "addr:postcode": "08608",
                "phone": "6095551234",
            },
        )
    ]

    businesses = transform.build_businesses(
        elements, town_name="Trenton", state_abbr="NJ", postal_prefixes=("08", "07")
    )

    assert businesses == [
        Business(
            name="Joe's Deli",
            category="Deli",
            address="12 Main St, Trenton, NJ 08608",
            phone="(609) 555-1234",
            email="",
            website="",
            hours="",
        )
    ]
    record = businesses[0].to_dict()
    assert record["rating"] is None
    assert record["review_count"] is None
    assert record["claimed"] is False
    assert record["featured"] is False


def test_build_businesses_filters_and_dedupes():
    elements = [
        {"type": "node", "id": 1},
        _element(shop="bakery"),
        _element(name="Far Away", shop="bakery", **{"addr:postcode": "19103"}),
        _element(name="No Postcode", shop="bakery"),
        _element(name="Twin", shop="bakery", **{"addr:street": "Elm St"}, phone="111"),
        _element(name="Twin", shop="bakery", **{"addr:street": "Elm St"}, phone="222"),
        _element(name="Twin", shop="bakery", **{"addr:street": "Oak St"}),
    ]

    businesses = transform.build_businesses(
        elements, town_name="Trenton", state_abbr="NJ", postal_prefixes=("08",)
    )

    names = [(b.name, b.address) for b in businesses]
    assert ("Far Away", "Trenton, NJ 19103") not in names
    assert names.count(("Twin", "Elm St, Trenton, NJ")) == 1
    assert ("Twin", "Oak St, Trenton, NJ") in names
    assert ("No Postcode", "Trenton, NJ") in names
    kept = next(b for b in businesses if b.address == "Elm St, Trenton, NJ")
    assert kept.phone == "111"


def test_build_businesses_sorts_by_category_then_name():
    elements = [
        _element(name="zeta", amenity="cafe"),
        _element(name="Alpha", amenity="cafe"),
        _element(name="Émile", amenity="cafe"),
        _element(name="Bread Co", shop="bakery"),
    ]

    businesses = transform.build_businesses(
        elements, town_name="Trenton", state_abbr="NJ", postal_prefixes=("08",)
    )

    assert [b.name for b in businesses] == ["Bread Co", "Alpha", "Émile", "zeta"]


def test_build_businesses_uses_missing_value_and_contact_fallbacks():
    elements = [
        _element(name="Shop A", shop="gift", **{"contact:website": "https://a.example", "contact:email": "a@x.io"}),
        _element(name="Shop B", shop="gift", opening_hours="Mo-Fr 09:00-17:00"),
    ]

    businesses = transform.build_businesses(
        elements, town_name="Trenton", state_abbr="NJ", postal_prefixes=("08",), missing=None
    )

    shop_a, shop_b = businesses
    assert shop_a.website == "https://a.example"
    assert shop_a.email == "a@x.io"
    assert shop_a.phone is None
    assert shop_b.hours == "Mo-Fr 09:00-17:00"
    assert shop_b.website is None


def test_build_towns_dedupes_by_slug_and_sorts():
    elements = [
        {"type": "relation", "id": 3, "tags": {"name": "Wildwood City", "population": "5325"}},
        {"type": "relation", "id": 1, "tags": {"name": "Cherry Hill Township"}},
        {"type": "relation", "id": 2, "tags": {"name": "Cherry Hill"}},
        {"type": "relation", "id": 4, "tags": {}},
    ]

    towns = transform.build_towns(elements, "NJ")

    assert [t.slug for t in towns] == ["cherry-hill-nj", "wildwood-nj"]
    assert towns[0].osm_id == 1
    assert towns[0].name == "Cherry Hill Township"
    assert towns[1].population == 5325
    assert towns[1].osm_type == "relation"


def test_category_breakdown():
    businesses = [
        Business(name="a", category="Cafe", address=""),
        Business(name="b", category="Bank", address=""),
        Business(name="c", category="Cafe", address=""),
    ]
    assert transform.category_breakdown(businesses) == [("Cafe", 2), ("Bank", 1)]
    assert transform.category_breakdown(businesses, limit=1) == [("Cafe", 2)]


def test_format_phone_ignores_non_ascii_digits():
    arabic_indic = "٦٠٩٥٥٥١٢٣٤"
    assert transform.format_phone(arabic_indic) == arabic_indic
    assert transform.parse_population("٥٠٠") is None


def test_collation_key_puts_lowercase_first_on_ties():
    assert sorted(["Apple", "apple", "Banana"], key=transform.collation_key) == ["apple", "Apple", "Banana"]
