"""Central configuration and constants for ``alcov``."""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from functools import cache
from importlib import resources
from pathlib import Path
from typing import Any

from alcov._meta import logger

# Default logging format used by the CLI entry point.
LOG_FORMAT = "%(levelname)s: %(message)s"

# Extension of AL source files (compared case-insensitively).
SOURCE_EXTENSION = ".al"

# Globs used when a coverage dump input is a directory.
DUMP_PATTERNS: tuple[str, ...] = ("*.dat", "*.csv", "*.txt")

DEFAULT_OUTPUT = Path("cobertura.xml")

CONFIG_FILENAME = "alcov.toml"

_SCHEMA_FILES: dict[str, str] = {
    "stats": "stats.schema.json",
}


@cache
def get_schema(name: str = "stats") -> dict[str, object]:
    """Load and cache a bundled JSON schema."""
    try:
        filename = _SCHEMA_FILES[name]
    except KeyError as exc:
        choices = ", ".join(sorted(_SCHEMA_FILES))
        msg = f"Unsupported schema: {name!r}. Available schemas: {choices}"
        raise ValueError(msg) from exc
    return json.loads(resources.files("alcov.data").joinpath(filename).read_text(encoding="utf-8"))


@dataclass(frozen=True, slots=True)
class Settings:
    """Defaults read from ``alcov.toml`` or ``[tool.alcov]`` in ``pyproject.toml``."""

    source_root: Path | None = None
    source_paths: tuple[Path, ...] = ()
    app_json: Path | None = None
    output: Path | None = None
    exclude_test_objects: bool = False


@dataclass(frozen=True, slots=True)
class ConversionOptions:
    """Fully resolved inputs for one dump-to-Cobertura conversion."""

    dump_paths: tuple[Path, ...]
    source_root: Path
    output: Path = DEFAULT_OUTPUT
    source_paths: tuple[Path, ...] = ()
    app_json: Path | None = None
    exclude_test_objects: bool = False
    timestamp: int | None = None


def _read_toml(path: Path) -> dict[str, Any] | None:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to parse %s: %s", path, e)
        return None


def _settings_from_table(table: dict[str, Any], base: Path) -> Settings:
    def as_path(value: object) -> Path | None:
        if not isinstance(value, str) or not value.strip():
            return None
        p = Path(value)
        return p if p.is_absolute() else base / p

    raw_paths = table.get("source_paths") or ()
    if isinstance(raw_paths, str):
        raw_paths = (raw_paths,)
    paths = tuple(p for p in (as_path(v) for v in raw_paths) if p is not None)

    return Settings(
        source_root=as_path(table.get("source_root")),
        source_paths=paths,
        app_json=as_path(table.get("app_json")),
        output=as_path(table.get("output")),
        exclude_test_objects=bool(table.get("exclude_test_objects", False)),
    )


def load_settings(cwd: Path | None = None) -> Settings:
    """Look for alcov settings in configuration files under *cwd*."""
    base = (cwd or Path.cwd()).resolve()

    own = base / CONFIG_FILENAME
    if own.is_file():
        data = _read_toml(own)
        if data is not None:
            logger.debug("Using settings from %s", own)
            return _settings_from_table(data, base)

    pyproject = base / "pyproject.toml"
    if pyproject.is_file():
        data = _read_toml(pyproject)
        table = (data or {}).get("tool", {}).get("alcov")
        if isinstance(table, dict):
            logger.debug("Using settings from %s [tool.alcov]", pyproject)
            return _settings_from_table(table, base)

    return Settings()


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_OUTPUT",
    "DUMP_PATTERNS",
    "LOG_FORMAT",
    "SOURCE_EXTENSION",
    "ConversionOptions",
    "Settings",
    "get_schema",
    "load_settings",
]
