from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path

import pytest
from click.testing import CliRunner

from alcov.core.model.objects import ObjectType, Procedure, SourceObject

DEMO_AL = """\
codeunit 50100 "Demo"
{
    var
        Counter: Integer;
    procedure DoWork()
    begin
        Counter := Counter +
            1;
    end;
}
"""

UNTESTED_AL = """\
codeunit 50200 Untested
{
    procedure Run()
    var
        Total: Decimal;
    begin
        Total := 1;
        Total += 2;
        if Total > 2 then
            Message('big');
    end;
}
"""


@pytest.fixture
def demo_al() -> str:
    """One procedure on lines 5-9 with a single executable statement on line 7."""
    return DEMO_AL


@pytest.fixture
def untested_al() -> str:
    """Four executable lines (7-10) that no test ever runs."""
    return UNTESTED_AL


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Click CLI runner for invoking the command-line interface."""
    return CliRunner()


@pytest.fixture
def al_project(tmp_path: Path) -> Callable[..., Path]:
    """Write an AL app (sources plus optional app.json) and return its root."""

    def build(
        files: Mapping[str, str],
        *,
        app: Mapping[str, str] | None = None,
        root_name: str = "app",
    ) -> Path:
        root = tmp_path / root_name
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        root.mkdir(parents=True, exist_ok=True)
        if app is not None:
            (root / "app.json").write_text(json.dumps(dict(app)), encoding="utf-8")
        return root

    return build


@pytest.fixture
def dump_file(tmp_path: Path) -> Callable[..., Path]:
    """Write a coverage dump from ``(type, id, line, hits)`` rows."""

    def write(
        rows: Iterable[tuple[int | str, int, int, int]],
        *,
        name: str = "coverage.dat",
        header: bool = True,
        delimiter: str = ",",
    ) -> Path:
        out = ["ObjectType,ObjectId,LineNo,CoverageStatus,Hits"] if header else []
        out.extend(delimiter.join(str(v) for v in (t, i, ln, 0 if hits else 1, hits)) for t, i, ln, hits in rows)
        path = tmp_path / "dumps" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(out) + "\n", encoding="utf-8")
        return path

    return write


@pytest.fixture
def make_source(tmp_path: Path) -> Callable[..., SourceObject]:
    """Build a :class:`SourceObject` without going through the scanner."""

    def build(
        object_type: ObjectType = ObjectType.CODEUNIT,
        object_id: int = 50100,
        *,
        relative_path: str = "src/Demo.al",
        executable: Iterable[int] = (),
        procedures: Iterable[Procedure] = (),
        is_test_object: bool = False,
    ) -> SourceObject:
        return SourceObject(
            object_type=object_type,
            object_id=object_id,
            object_name=f"Object{object_id}",
            file_path=tmp_path / relative_path,
            relative_path=relative_path,
            procedures=tuple(procedures),
            total_lines=max(executable, default=0) + 1,
            executable_line_numbers=frozenset(executable),
            is_test_object=is_test_object,
        )

    return build
