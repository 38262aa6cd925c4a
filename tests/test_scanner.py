from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from alcov.al.scanner import iter_source_files, read_source_text, scan_sources
from alcov.core.model.objects import ObjectType
from alcov.errors import SourceRootNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

TEST_CODEUNIT = """\
codeunit 50900 "Demo Tests"
{
    Subtype = Test;

    [Test]
    procedure TestDoWork()
    begin
        Assert.IsTrue(true, '');
    end;
}
"""


def test_scan_builds_catalogue(al_project: Callable[..., Path], demo_al: str, untested_al: str) -> None:
    root = al_project({"src/Demo.al": demo_al, "src/sub/Untested.al": untested_al})
    catalogue = scan_sources(root)

    assert sorted(catalogue) == ["Codeunit.50100", "Codeunit.50200"]
    demo = catalogue["Codeunit.50100"]
    assert demo.object_type is ObjectType.CODEUNIT
    assert demo.object_name == "Demo"
    assert demo.relative_path == "src/Demo.al"
    assert demo.executable_line_numbers == frozenset({7})
    assert demo.total_lines == 10
    assert [p.name for p in demo.procedures] == ["DoWork"]
    assert catalogue["Codeunit.50200"].relative_path == "src/sub/Untested.al"
    assert catalogue["Codeunit.50200"].executable_lines == 4


def test_missing_root_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(SourceRootNotFoundError, match="nope"):
        scan_sources(tmp_path / "nope")


def test_objects_without_id_are_not_catalogued(al_project: Callable[..., Path]) -> None:
    root = al_project({
        "IShape.al": "interface IShape\n{\n    procedure Area(): Decimal;\n}\n",
        "Profile.al": "profile Sales\n{\n    RoleCenter = 9022;\n}\n",
    })
    assert scan_sources(root) == {}


def test_extension_objects(al_project: Callable[..., Path]) -> None:
    root = al_project({
        "CustExt.al": (
            'tableextension 50110 "Cust Ext" extends Customer\n{\n    trigger OnAfterInsert()\n'
            "    begin\n        Validate(Name);\n    end;\n}\n"
        ),
    })
    obj = scan_sources(root)["TableExtension.50110"]
    assert obj.object_type is ObjectType.TABLE_EXTENSION
    assert obj.object_name == "Cust Ext"
    assert obj.executable_line_numbers == frozenset({5})


def test_duplicate_objects_keep_first(
    al_project: Callable[..., Path],
    demo_al: str,
    caplog: pytest.LogCaptureFixture,
) -> None:
    root = al_project({"a/Demo.al": demo_al, "b/DemoCopy.al": demo_al})
    with caplog.at_level(logging.WARNING, logger="alcov"):
        catalogue = scan_sources(root)
    assert catalogue["Codeunit.50100"].relative_path == "a/Demo.al"
    assert "Duplicate object Codeunit.50100" in caplog.text


def test_test_codeunits_are_flagged(al_project: Callable[..., Path], demo_al: str) -> None:
    root = al_project({"Demo.al": demo_al, "test/DemoTests.al": TEST_CODEUNIT})
    catalogue = scan_sources(root)
    assert catalogue["Codeunit.50900"].is_test_object
    assert not catalogue["Codeunit.50100"].is_test_object
    assert catalogue["Codeunit.50900"].executable_line_numbers == frozenset({8})


def test_source_paths_narrow_the_scan(al_project: Callable[..., Path], demo_al: str, untested_al: str) -> None:
    root = al_project({"src/Demo.al": demo_al, "other/Untested.al": untested_al})
    catalogue = scan_sources(root, [root / "src"])
    assert list(catalogue) == ["Codeunit.50100"]
    assert catalogue["Codeunit.50100"].relative_path == "src/Demo.al"


def test_only_al_files_are_scanned(al_project: Callable[..., Path], demo_al: str) -> None:
    root = al_project({"Demo.AL": demo_al, "notes.txt": demo_al, "app/Other.al.bak": demo_al})
    assert [p.name for p in iter_source_files(root)] == ["Demo.AL"]


def test_cp1252_fallback(tmp_path: Path) -> None:
    path = tmp_path / "Legacy.al"
    path.write_bytes('codeunit 50300 "Café"\n{\n}\n'.encode("cp1252"))
    text = read_source_text(path)
    assert text is not None
    assert "Café" in text


def test_utf8_bom_is_dropped(tmp_path: Path, demo_al: str) -> None:
    path = tmp_path / "Demo.al"
    path.write_bytes(b"\xef\xbb\xbf" + demo_al.encode("utf-8"))
    assert read_source_text(path) == demo_al
