"""Executable-line classification for AL source files.

Each physical line is assigned a :class:`LineKind`; only ``STATEMENT`` lines
count towards coverage denominators. Three independent pieces of state are
carried from line to line:

* comment state (inside a ``/* ... */`` block or not)
* continuation state (did the previous code line end with a continuation token)
* body state (signature / procedure body / block depth)

The checks run in a fixed priority order; the first that matches decides the
kind of the line.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from alcov.al.tokens import (
    ATTRIBUTE_RE,
    BLOCK_DECL_RE,
    CONTROL_START_RE,
    ELSE_RE,
    FIELD_DEF_RE,
    LEADING_CONT_RE,
    NAMESPACE_RE,
    OBJECT_DECL_RE,
    PROPERTY_RE,
    SECTION_RE,
    SIGNATURE_RE,
    STATEMENT_SHAPE_RE,
    STRUCTURAL_RE,
    TRAILING_CONT_RE,
    TYPED_VAR_RE,
    VAR_HEADER_RE,
    CommentTracker,
    count_blocks,
    mask_literals,
    paren_balance,
)
from alcov.core.model.objects import LineClassification

if TYPE_CHECKING:
    from collections.abc import Iterator


class LineKind(StrEnum):
    BLANK = "blank"
    COMMENT = "comment"
    DECLARATION = "declaration"
    PROPERTY = "property"
    SIGNATURE = "signature"
    VARIABLE = "variable"
    STRUCTURAL = "structural"
    ELSE = "else"
    CASE_LABEL = "case-label"
    CONTINUATION = "continuation"
    STATEMENT = "statement"
    OTHER = "other"


class ContinuationTracker:
    """Remember whether the last code line left a statement open."""

    __slots__ = ("pending",)

    def __init__(self) -> None:
        self.pending = False

    def observe(self, masked: str) -> bool:
        """Return True if *masked* continues the previous statement; update state."""
        continues = self.pending or LEADING_CONT_RE.match(masked) is not None
        self.pending = TRAILING_CONT_RE.search(masked) is not None
        return continues


@dataclass(slots=True)
class BodyTracker:
    """Track signatures, procedure bodies and ``begin``/``end`` depth."""

    in_body: bool = False
    paren_depth: int = 0
    depth: int = 0
    seen_begin: bool = False

    @property
    def in_signature(self) -> bool:
        return self.paren_depth > 0

    def open_signature(self, masked: str) -> None:
        self.paren_depth = paren_balance(masked)
        self.depth = 0
        self.seen_begin = False
        forward = not self.in_signature and masked.endswith(";")
        self.in_body = not forward

    def continue_signature(self, masked: str) -> None:
        self.paren_depth += paren_balance(masked)
        if not self.in_signature and masked.endswith(";"):
            self.in_body = False

    def apply_blocks(self, masked: str) -> None:
        opened, closed = count_blocks(masked)
        if opened:
            self.seen_begin = True
        self.depth += opened - closed
        if closed and self.depth <= 0:
            self.depth = 0
            if self.seen_begin:
                self.in_body = False
                self.seen_begin = False

    @property
    def executing(self) -> bool:
        return self.in_body or self.depth > 0


def _is_case_label(masked: str) -> bool:
    return masked.endswith(":") and not masked.endswith("::") and CONTROL_START_RE.match(masked) is None


def iter_line_kinds(text: str) -> Iterator[tuple[int, LineKind]]:
    """Yield ``(line_number, kind)`` for every physical line of *text*."""
    comments = CommentTracker()
    continuation = ContinuationTracker()
    body = BodyTracker()

    for number, raw in enumerate(text.splitlines(), start=1):
        if not raw.strip():
            yield number, LineKind.BLANK
            continue

        was_in_comment = comments.in_block
        code = comments.strip(raw)
        if was_in_comment or not code:
            yield number, LineKind.COMMENT
            continue

        masked = mask_literals(code)
        is_continuation = continuation.observe(masked)
        yield number, _classify(code, masked, body, is_continuation=is_continuation)


def _classify(code: str, masked: str, body: BodyTracker, *, is_continuation: bool) -> LineKind:
    if body.in_signature:
        body.continue_signature(masked)
        return LineKind.SIGNATURE

    if NAMESPACE_RE.match(masked) or OBJECT_DECL_RE.match(masked):
        return LineKind.DECLARATION
    if FIELD_DEF_RE.match(masked) or ATTRIBUTE_RE.match(masked):
        return LineKind.DECLARATION
    # bare calls such as `Modify(true)` are legal inside table triggers
    if not body.executing and BLOCK_DECL_RE.match(masked):
        return LineKind.DECLARATION
    if PROPERTY_RE.match(masked):
        return LineKind.PROPERTY

    if SIGNATURE_RE.match(code):
        body.open_signature(masked)
        return LineKind.SIGNATURE

    if VAR_HEADER_RE.match(masked) or TYPED_VAR_RE.match(masked):
        return LineKind.VARIABLE

    if STRUCTURAL_RE.match(masked) or SECTION_RE.match(masked):
        body.apply_blocks(masked)
        return LineKind.STRUCTURAL

    if ELSE_RE.match(masked):
        body.apply_blocks(masked)
        return LineKind.ELSE

    if _is_case_label(masked):
        return LineKind.CASE_LABEL

    executing = body.executing
    body.apply_blocks(masked)

    if is_continuation:
        return LineKind.CONTINUATION
    if executing or STATEMENT_SHAPE_RE.search(masked):
        return LineKind.STATEMENT
    return LineKind.OTHER


def classify_lines(text: str) -> LineClassification:
    """Classify every line of *text* and collect the executable line numbers."""
    total = 0
    executable: list[int] = []
    for number, kind in iter_line_kinds(text):
        total = number
        if kind is LineKind.STATEMENT:
            executable.append(number)
    return LineClassification(total_lines=total, executable_line_numbers=tuple(executable))


__all__ = ["BodyTracker", "ContinuationTracker", "LineKind", "classify_lines", "iter_line_kinds"]
