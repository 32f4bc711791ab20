import json

import pytest

from towndir.core import storage
from towndir.core.config import Settings
from towndir.core.models import Business, Town, TownDocument


@pytest.fixture
def settings(tmp_path):
    return Settings(
        data_dir=tmp_path / "data" / "towns",
        content_dir=tmp_path / "content" / "towns",
        towns_list_file=tmp_path / "data" / "nj-towns-list.json",
    )


def _town():
    return Town(
        name="Cherry Hill Township",
        display_name="Cherry Hill",
        slug="cherry-hill-nj",
        population=74553,
        osm_id=123,
        osm_type="relation",
    )


def test_ensure_directories(settings):
    storage.ensure_directories(settings)
    assert settings.data_dir.is_dir()
    assert settings.content_dir.is_dir()


def test_ensure_directories_raises_filesystem_error(settings):
    settings.data_dir.parent.parent.mkdir(parents=True, exist_ok=True)
    settings.data_dir.parent.write_text("not a directory")
    with pytest.raises(storage.FileSystemError):
        storage.ensure_directories(settings)


def test_town_list_round_trip_uses_stable_keys(settings):
    assert storage.load_town_list(settings.towns_list_file) is None

    storage.save_town_list(settings.towns_list_file, [_town()])

    raw = json.loads(settings.towns_list_file.read_text(encoding="utf-8"))
    assert raw == [
        {
            "name": "Cherry Hill Township",
            "displayName": "Cherry Hill",
            "slug": "cherry-hill-nj",
            "population": 74553,
            "osmId": 123,
            "type": "relation",
        }
    ]
    assert storage.load_town_list(settings.towns_list_file) == [_town()]


def test_load_town_list_rejects_garbage(settings):
    settings.towns_list_file.parent.mkdir(parents=True)
    settings.towns_list_file.write_text("{not json", encoding="utf-8")
    with pytest.raises(storage.FileSystemError):
        storage.load_town_list(settings.towns_list_file)

    settings.towns_list_file.write_text('{"name": "x"}', encoding="utf-8")
    with pytest.raises(storage.FileSystemError):
        storage.load_town_list(settings.towns_list_file)


def test_write_town_document(settings):
    document = TownDocument(
        name="Café Town",
        state="New Jersey",
        state_abbr="NJ",
        slug="cafe-town-nj",
        businesses=[Business(name="Joe's", category="Deli", address="Café Town, NJ")],
    )

    path = storage.write_town_document(settings, document)

    assert path == settings.data_dir / "cafe-town-nj.json"
    text = path.read_text(encoding="utf-8")
    assert "Café Town" in text
    assert text.startswith('{\n  "name"')
    data = json.loads(text)
    assert data["county"] is None
    assert data["businesses"][0]["review_count"] is None
    assert storage.town_data_exists(settings, "cafe-town-nj")
    assert [p.name for p in settings.data_dir.iterdir()] == ["cafe-town-nj.json"]


def test_write_town_document_compact(settings):
    document = TownDocument(
        name="Trenton",
        state="New Jersey",
        state_abbr="NJ",
        slug="trenton-nj",
        county="Mercer",
        population=90871,
        businesses=[
            Business(name="A", category="Bank", address="Trenton, NJ", phone=None, website="https://a.example"),
        ],
    )

    path = storage.write_town_document(settings, document, compact=True)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["county"] == "Mercer"
    assert data["businesses"] == [
        {"name": "A", "category": "Bank", "address": "Trenton, NJ", "website": "https://a.example"}
    ]


def test_write_content_stub(settings):
    path = storage.write_content_stub(settings, _town())

    assert path == settings.content_dir / "cherry-hill-nj.md"
    assert path.read_text(encoding="utf-8") == (
        "---\n"
        'title: "Cherry Hill, NJ Business Directory"\n'
        'type: "towns"\n'
        'slug: "cherry-hill-nj"\n'
        'state: "nj"\n'
        'town_data: "cherry-hill-nj"\n'
        "---\n"
    )


def test_write_town_document_unencodable_text_cleans_up(settings):
    document = TownDocument(
        name="A",
        state="New Jersey",
        state_abbr="NJ",
        slug="a-nj",
        businesses=[Business(name="bad\ud800", category="Deli", address="A, NJ")],
    )

    with pytest.raises(storage.FileSystemError):
        storage.write_town_document(settings, document)

    assert list(settings.data_dir.iterdir()) == []
    assert not storage.town_data_exists(settings, "a-nj")
