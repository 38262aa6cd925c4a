"""Parse raw AL coverage dumps into :class:`CoverageEntry` records.

A dump is delimited text with one record per executed (or instrumented) line::

    ObjectType,ObjectId,LineNo,CoverageStatus,Hits
    0,50100,7,0,3

The status column is optional (4-field rows are ``Type,Id,Line,Hits``) and the
object type may be a numeric code or a name. Header and malformed rows are
skipped.
"""

from __future__ import annotations

import csv
from typing import TYPE_CHECKING

from more_itertools import map_reduce

from alcov._meta import logger
from alcov.core.model.coverage import CoverageEntry, ObjectCoverage
from alcov.core.model.objects import ObjectType
from alcov.errors import CoverageDumpNotFoundError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

_DELIMITERS = ",;\t"
_MIN_FIELDS = 4
_FIELDS_WITH_STATUS = 5


def _sniff_delimiter(sample: str) -> str:
    counts = {d: sample.count(d) for d in _DELIMITERS}
    best = max(counts, key=lambda d: counts[d])
    return best if counts[best] else ","


def _parse_row(row: Sequence[str]) -> CoverageEntry | None:
    fields = [f.strip().strip('"').strip() for f in row]
    if len(fields) < _MIN_FIELDS:
        return None
    hits_field = fields[4] if len(fields) >= _FIELDS_WITH_STATUS else fields[3]
    try:
        object_id = int(fields[1])
        line_no = int(fields[2])
        hits = int(float(hits_field))
    except ValueError:
        return None
    if object_id <= 0 or line_no <= 0:
        return None
    return CoverageEntry(
        object_type=ObjectType.parse(fields[0]),
        object_id=object_id,
        line_no=line_no,
        hits=max(hits, 0),
    )


def parse_dump_text(text: str, *, source: str = "<text>") -> list[CoverageEntry]:
    """Parse dump *text* into coverage entries, in file order."""
    lines = [ln for ln in text.lstrip("\ufeff").splitlines() if ln.strip()]
    if not lines:
        return []
    delimiter = _sniff_delimiter(lines[-1])
    entries: list[CoverageEntry] = []
    skipped = 0
    for row in csv.reader(lines, delimiter=delimiter):
        entry = _parse_row(row)
        if entry is None:
            skipped += 1
            logger.debug("%s: skipping row %r", source, row)
            continue
        entries.append(entry)
    if skipped:
        logger.debug("%s: skipped %d non-data row(s)", source, skipped)
    return entries


def parse_dump_file(path: Path) -> list[CoverageEntry]:
    """Read and parse a single dump file."""
    try:
        text = path.read_text(encoding="utf-8-sig", errors="replace")
    except FileNotFoundError as exc:
        msg = f"coverage dump not found: {path}"
        raise CoverageDumpNotFoundError(msg) from exc
    return parse_dump_text(text, source=str(path))


def parse_dump_files(paths: Sequence[Path]) -> list[CoverageEntry]:
    """Parse several dump files; unreadable files are skipped when more than one is given."""
    entries: list[CoverageEntry] = []
    for path in paths:
        try:
            found = parse_dump_file(path)
        except (OSError, CoverageDumpNotFoundError) as exc:
            if len(paths) == 1:
                raise
            logger.warning("Skipping coverage dump %s: %s", path, exc)
            continue
        logger.debug("%s: %d coverage entries", path, len(found))
        entries.extend(found)
    return entries


def _merge_lines(entries: Iterable[CoverageEntry]) -> tuple[CoverageEntry, ...]:
    by_line: dict[int, CoverageEntry] = {}
    for entry in entries:
        prev = by_line.get(entry.line_no)
        if prev is None or entry.hits > prev.hits:
            by_line[entry.line_no] = entry
    return tuple(by_line[n] for n in sorted(by_line))


def group_entries(entries: Iterable[CoverageEntry]) -> dict[str, ObjectCoverage]:
    """Partition entries by ``Type.Id``; duplicate lines keep the highest hit count."""
    grouped = map_reduce(entries, keyfunc=lambda e: e.key, reducefunc=_merge_lines)
    out: dict[str, ObjectCoverage] = {}
    for key, lines in grouped.items():
        first = lines[0]
        out[key] = ObjectCoverage(object_type=first.object_type, object_id=first.object_id, lines=lines)
    return out


__all__ = [
    "group_entries",
    "parse_dump_file",
    "parse_dump_files",
    "parse_dump_text",
]
