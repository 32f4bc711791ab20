"""Filesystem helpers for the town list and per-town artifacts."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional

from towndir.core.config import Settings
from towndir.core.models import Town, TownDocument

logger = logging.getLogger(__name__)

_CONTENT_STUB = """---
title: "{display_name}, {state_abbr} Business Directory"
type: "towns"
slug: "{slug}"
state: "{state}"
town_data: "{slug}"
---
"""


class FileSystemError(RuntimeError):
    """Raised when a persisted artifact cannot be read or written."""


def ensure_directories(settings: Settings) -> None:
    """Create the data, content and town-list directories."""
    for directory in (settings.data_dir, settings.content_dir, settings.towns_list_file.parent):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileSystemError(f"Unable to create directory {directory}: {exc}") from exc


def town_data_path(settings: Settings, slug: str) -> Path:
    return settings.data_dir / f"{slug}.json"


def town_content_path(settings: Settings, slug: str) -> Path:
    return settings.content_dir / f"{slug}.md"


def town_data_exists(settings: Settings, slug: str) -> bool:
    return town_data_path(settings, slug).exists()


def _write_text(path: Path, text: str) -> None:
    """Write via a sibling temp file so readers never see a partial file."""
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as fh:
            tmp_name = fh.name
            fh.write(text)
        os.replace(tmp_name, path)
        tmp_name = None
    except (OSError, ValueError) as exc:
        # UnicodeEncodeError (lone surrogates from the API) is a ValueError.
        raise FileSystemError(f"Unable to write {path}: {exc}") from exc
    finally:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def _write_json(path: Path, data: Any) -> None:
    _write_text(path, json.dumps(data, ensure_ascii=False, indent=2))


def load_town_list(path: Path) -> Optional[List[Town]]:
    """Return the saved town list, or None when it has not been written yet."""
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except (OSError, ValueError) as exc:
        raise FileSystemError(f"Unable to read town list {path}: {exc}") from exc
    if not isinstance(raw, list):
        raise FileSystemError(f"Town list {path} must contain a JSON array")
    try:
        return [Town.from_dict(entry) for entry in raw]
    except (KeyError, TypeError, AttributeError) as exc:
        raise FileSystemError(f"Malformed town entry in {path}: {exc}") from exc


def save_town_list(path: Path, towns: List[Town]) -> Path:
    _write_json(path, [town.to_dict() for town in towns])
    logger.info("Saved %d towns to %s", len(towns), path)
    return path


def write_town_document(settings: Settings, document: TownDocument, *, compact: bool = False) -> Path:
    path = town_data_path(settings, document.slug)
    _write_json(path, document.to_dict(compact=compact))
    logger.debug("Wrote %s", path)
    return path


def write_content_stub(settings: Settings, town: Town) -> Path:
    path = town_content_path(settings, town.slug)
    _write_text(
        path,
        _CONTENT_STUB.format(
            display_name=town.display_name,
            state_abbr=settings.state_abbr,
            slug=town.slug,
            state=settings.state_abbr.lower(),
        ),
    )
    logger.debug("Wrote %s", path)
    return path
