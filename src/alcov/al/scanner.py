"""Build the AL object catalogue from a source tree."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from alcov._meta import logger
from alcov.al.lines import classify_lines
from alcov.al.procedures import extract_procedures
from alcov.al.tokens import SUBTYPE_TEST_RE, unquote
from alcov.core.config import SOURCE_EXTENSION
from alcov.core.model.objects import ObjectType, SourceObject
from alcov.errors import SourceRootNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

# Object types that carry a numeric id; id-less kinds (interface, profile,
# controladdin) never contain executable code and are not catalogued.
_DECLARATION_RE = re.compile(
    r"^[ \t]*(?P<keyword>[A-Za-z]+)[ \t]+(?P<id>\d+)[ \t]+(?P<name>\"[^\"\r\n]+\"|[A-Za-z_][\w]*)",
    re.MULTILINE,
)

_ENCODINGS = ("utf-8-sig", "cp1252")


def read_source_text(path: Path) -> str | None:
    """Return the text of *path*, or ``None`` when it cannot be read."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        logger.warning("Skipping unreadable source file %s: %s", path, exc)
        return None
    for encoding in _ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    logger.warning("Skipping source file with unknown encoding: %s", path)
    return None


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def iter_source_files(root: Path, paths: Sequence[Path] = ()) -> Iterator[Path]:
    """Yield AL source files under *paths* (default: *root*), sorted and de-duplicated."""
    seen: set[Path] = set()
    for base in paths or (root,):
        start = base if base.is_absolute() else root / base
        if start.is_file():
            candidates: Iterable[Path] = (start,)
        elif start.is_dir():
            candidates = sorted(start.rglob("*"))
        else:
            logger.warning("Source path does not exist: %s", start)
            continue
        for candidate in candidates:
            if candidate.suffix.lower() != SOURCE_EXTENSION or not candidate.is_file():
                continue
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            yield resolved


def parse_source_object(path: Path, text: str, *, root: Path) -> SourceObject | None:
    """Recognise the first object declaration in *text* and analyse its lines."""
    match = _DECLARATION_RE.search(text)
    while match is not None and ObjectType.parse(match.group("keyword")) is ObjectType.UNKNOWN:
        if match.group("keyword").lower().endswith("extension"):
            break
        match = _DECLARATION_RE.search(text, match.end())
    if match is None:
        return None

    object_type = ObjectType.parse(match.group("keyword"))
    lines = text.splitlines()
    classification = classify_lines(text)
    return SourceObject(
        object_type=object_type,
        object_id=int(match.group("id")),
        object_name=unquote(match.group("name")),
        file_path=path,
        relative_path=_relative(path, root),
        procedures=tuple(extract_procedures(lines, source=str(path))),
        total_lines=classification.total_lines,
        executable_line_numbers=frozenset(classification.executable_line_numbers),
        is_test_object=object_type is ObjectType.CODEUNIT and SUBTYPE_TEST_RE.search(text) is not None,
    )


def scan_sources(root: Path, paths: Sequence[Path] = ()) -> dict[str, SourceObject]:
    """Scan *root* (or the narrower *paths*) and return objects keyed by ``Type.Id``.

    Files that cannot be read or declare no object are skipped.
    """
    root = root.resolve()
    if not root.is_dir():
        msg = f"AL source root not found: {root}"
        raise SourceRootNotFoundError(msg)

    catalogue: dict[str, SourceObject] = {}
    scanned = 0
    for path in iter_source_files(root, paths):
        scanned += 1
        text = read_source_text(path)
        if text is None:
            continue
        obj = parse_source_object(path, text, root=root)
        if obj is None:
            logger.debug("No object declaration in %s", path)
            continue
        existing = catalogue.get(obj.key)
        if existing is not None:
            logger.warning(
                "Duplicate object %s in %s (already declared in %s); ignoring",
                obj.key,
                obj.relative_path,
                existing.relative_path,
            )
            continue
        catalogue[obj.key] = obj

    logger.info("Scanned %d AL file(s), found %d object(s) under %s", scanned, len(catalogue), root)
    return catalogue


__all__ = ["iter_source_files", "parse_source_object", "read_source_text", "scan_sources"]
