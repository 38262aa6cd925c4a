from __future__ import annotations

from typing import TYPE_CHECKING

from alcov.core.config import DUMP_PATTERNS
from alcov.errors import CoverageDumpNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def resolve_dump_paths(inputs: Sequence[Path], patterns: Sequence[str] = DUMP_PATTERNS) -> tuple[Path, ...]:
    """Resolve coverage dump inputs.

    Rules
    -----
    - Every input must exist.
    - A file is used as-is.
    - A directory contributes every file matching *patterns* below it, sorted.
    """
    if not inputs:
        msg = "no coverage dump provided"
        raise CoverageDumpNotFoundError(msg)

    missing = [p for p in inputs if not p.exists()]
    if missing:
        msg = f"coverage dump not found: {', '.join(str(p) for p in missing)}"
        raise CoverageDumpNotFoundError(msg)

    seen: set[Path] = set()
    out: list[Path] = []
    for p in inputs:
        if p.is_dir():
            found = sorted({f for pat in patterns for f in p.rglob(pat) if f.is_file()})
        else:
            found = [p]
        for f in found:
            resolved = f.resolve()
            if resolved not in seen:
                seen.add(resolved)
                out.append(resolved)
    return tuple(out)


__all__ = ["resolve_dump_paths"]
