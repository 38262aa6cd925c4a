from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

from alcov._meta import logger

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppMetadata:
    """The subset of ``app.json`` that ends up in reports."""

    id: str = ""
    name: str = ""
    publisher: str = ""
    version: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name, "publisher": self.publisher, "version": self.version}


def read_app_metadata(path: Path | None) -> AppMetadata | None:
    """Read ``app.json``; a missing or malformed file yields ``None``."""
    if path is None:
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except FileNotFoundError:
        logger.info("No app metadata at %s", path)
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable app metadata %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring app metadata %s: expected a JSON object", path)
        return None
    return AppMetadata(
        id=str(data.get("id", "")),
        name=str(data.get("name", "")),
        publisher=str(data.get("publisher", "")),
        version=str(data.get("version", "")),
    )


__all__ = ["AppMetadata", "read_app_metadata"]
