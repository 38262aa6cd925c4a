"""Recover procedure and trigger boundaries from AL source text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from alcov._meta import logger
from alcov.al.tokens import SIGNATURE_RE, CommentTracker, count_blocks, mask_literals, paren_balance, unquote
from alcov.core.model.objects import Procedure

if TYPE_CHECKING:
    from collections.abc import Sequence

    from alcov.core.model.objects import ProcedureKind


@dataclass(slots=True)
class _OpenProcedure:
    name: str
    kind: ProcedureKind
    start_line: int
    paren_depth: int = 0
    depth: int = 0
    seen_begin: bool = False

    @property
    def in_signature(self) -> bool:
        return self.paren_depth > 0

    def close(self, end_line: int) -> Procedure:
        return Procedure(name=self.name, kind=self.kind, start_line=self.start_line, end_line=end_line)


def extract_procedures(lines: Sequence[str], *, source: str = "<text>") -> list[Procedure]:
    """Return the procedures and triggers of one file, ordered by start line.

    A signature opens a procedure; ``begin``/``case ... of`` and ``end``
    move a nesting depth, and the procedure closes on the line where an
    ``end`` brings that depth back to zero. Signatures ending in ``;`` with
    no body (interface members) are skipped.
    """
    comments = CommentTracker()
    found: list[Procedure] = []
    current: _OpenProcedure | None = None

    for number, raw in enumerate(lines, start=1):
        code = comments.strip(raw)
        if not code:
            continue
        masked = mask_literals(code)

        match = SIGNATURE_RE.match(code)
        if match is not None and (current is None or not current.seen_begin):
            if current is not None:
                logger.debug("%s:%d: procedure %r has no body end", source, number, current.name)
                found.append(current.close(max(current.start_line, number - 1)))
            current = _OpenProcedure(
                name=unquote(match.group("name")),
                kind="trigger" if match.group("kind").lower() == "trigger" else "procedure",
                start_line=number,
                paren_depth=paren_balance(masked),
            )
            if not current.in_signature and masked.endswith(";"):
                current = None
            continue

        if current is None:
            continue

        if current.in_signature:
            current.paren_depth += paren_balance(masked)
            if not current.in_signature and masked.endswith(";") and not current.seen_begin:
                # multi-line forward declaration
                current = None
            continue

        opened, closed = count_blocks(masked)
        if opened:
            current.seen_begin = True
        current.depth += opened - closed
        if current.seen_begin and closed and current.depth <= 0:
            found.append(current.close(number))
            current = None

    if current is not None:
        last = max(current.start_line, len(lines))
        logger.warning("%s: procedure %r is not terminated; closing it at line %d", source, current.name, last)
        found.append(current.close(last))

    return found


__all__ = ["extract_procedures"]
