from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

import click.utils as click_utils


def write_atomic(destination: Path, text: str) -> Path:
    """Write *text* as UTF-8 (no BOM) to *destination* via a temporary sibling file.

    The destination is only replaced once the content has been fully written,
    so a failure never leaves a truncated report behind.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(text)
        tmp.replace(destination)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    return destination


def color_allowed(output: Path | None) -> bool:
    """Return whether ANSI colour is appropriate for the given destination."""
    if output not in {None, Path("-")}:
        return False
    stdout = sys.stdout
    is_tty = bool(getattr(stdout, "isatty", lambda: False)())
    return is_tty and not click_utils.should_strip_ansi(stdout)


__all__ = ["color_allowed", "write_atomic"]
