"""Source-side model: AL object kinds, objects and procedures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from pathlib import Path


class ObjectType(StrEnum):
    """Closed set of AL object kinds; anything unrecognised maps to ``UNKNOWN``."""

    CODEUNIT = "Codeunit"
    TABLE = "Table"
    PAGE = "Page"
    REPORT = "Report"
    QUERY = "Query"
    XMLPORT = "XMLport"
    ENUM = "Enum"
    INTERFACE = "Interface"
    PERMISSION_SET = "PermissionSet"
    TABLE_EXTENSION = "TableExtension"
    PAGE_EXTENSION = "PageExtension"
    REPORT_EXTENSION = "ReportExtension"
    ENUM_EXTENSION = "EnumExtension"
    PERMISSION_SET_EXTENSION = "PermissionSetExtension"
    PROFILE = "Profile"
    CONTROL_ADD_IN = "ControlAddIn"
    UNKNOWN = "Unknown"

    @classmethod
    def from_code(cls, code: int) -> ObjectType:
        """Map a numeric object-type code from a coverage dump."""
        if 0 <= code < len(_BY_CODE):
            return _BY_CODE[code]
        return cls.UNKNOWN

    @classmethod
    def parse(cls, text: str) -> ObjectType:
        """Map a source keyword, canonical name or numeric code to an object type."""
        value = text.strip().strip('"').strip()
        if value.lstrip("-").isdigit():
            return cls.from_code(int(value))
        return _BY_KEYWORD.get(value.lower(), cls.UNKNOWN)

    @property
    def code(self) -> int | None:
        try:
            return _BY_CODE.index(self)
        except ValueError:
            return None


_BY_CODE: tuple[ObjectType, ...] = tuple(t for t in ObjectType if t is not ObjectType.UNKNOWN)

_BY_KEYWORD: dict[str, ObjectType] = {t.value.lower(): t for t in _BY_CODE}


def object_key(object_type: ObjectType, object_id: int) -> str:
    """Return the ``"ObjectType.ObjectId"`` key used across the pipeline."""
    return f"{object_type.value}.{object_id}"


ProcedureKind = Literal["procedure", "trigger"]


@dataclass(frozen=True, slots=True)
class Procedure:
    """A procedure or trigger occupying the inclusive line range [start_line, end_line]."""

    name: str
    kind: ProcedureKind
    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        """Validate that the range boundaries are sane."""
        if self.start_line < 1 or self.end_line < self.start_line:
            msg = f"invalid procedure range {self.start_line}-{self.end_line} for {self.name!r}"
            raise ValueError(msg)

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line


@dataclass(frozen=True, slots=True)
class LineClassification:
    """Result of classifying one file's lines."""

    total_lines: int
    executable_line_numbers: tuple[int, ...] = ()

    @property
    def executable_lines(self) -> int:
        return len(self.executable_line_numbers)


@dataclass(frozen=True, slots=True)
class SourceObject:
    """One AL object recovered from a source file."""

    object_type: ObjectType
    object_id: int
    object_name: str
    file_path: Path
    relative_path: str
    procedures: tuple[Procedure, ...] = ()
    total_lines: int = 0
    executable_line_numbers: frozenset[int] = field(default_factory=frozenset)
    is_test_object: bool = False

    @property
    def key(self) -> str:
        return object_key(self.object_type, self.object_id)

    @property
    def executable_lines(self) -> int:
        return len(self.executable_line_numbers)


__all__ = [
    "LineClassification",
    "ObjectType",
    "Procedure",
    "ProcedureKind",
    "SourceObject",
    "object_key",
]
