from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from jsonschema import ValidationError

from alcov.core.model.coverage import ComposedCoverage, ExcludedObject, ObjectCoverage
from alcov.core.model.objects import ObjectType
from alcov.engine.stats import build_stats, read_stats, stats_path
from alcov.inputs.metadata import AppMetadata, read_app_metadata

if TYPE_CHECKING:
    from collections.abc import Callable

    from alcov.core.model.objects import SourceObject


def test_stats_path() -> None:
    assert stats_path(Path("out/cobertura.xml")) == Path("out/cobertura.stats.json")


def test_build_stats(make_source: Callable[..., SourceObject]) -> None:
    source = make_source(object_id=50100, executable={1, 2, 3})
    composed = ComposedCoverage(
        matched={source.key: ObjectCoverage(ObjectType.CODEUNIT, 50100, source=source)},
        excluded=[ExcludedObject(ObjectType.TABLE, 18, lines_executed=2, total_hits=7)],
    )
    stats = build_stats(
        composed,
        source_paths=["C:\\build\\app", "C:\\build\\app"],
        app=AppMetadata(id="x", name="App", publisher="P", version="1.0"),
    )
    assert stats == {
        "TotalLines": 3,
        "CoveredLines": 0,
        "NotCoveredLines": 3,
        "CoveragePercent": 0.0,
        "LineRate": 0.0,
        "ObjectCount": 1,
        "ExcludedObjectCount": 1,
        "ExcludedLinesExecuted": 2,
        "ExcludedTotalHits": 7,
        "ExcludedObjects": [{"ObjectType": "Table", "ObjectId": 18, "LinesExecuted": 2, "TotalHits": 7}],
        "AppSourcePaths": ["C:/build/app"],
        "App": {"id": "x", "name": "App", "publisher": "P", "version": "1.0"},
    }


def test_build_stats_without_app() -> None:
    stats = build_stats(ComposedCoverage())
    assert "App" not in stats
    assert stats["AppSourcePaths"] == []


def test_invalid_stats_are_rejected() -> None:
    composed = ComposedCoverage(excluded=[ExcludedObject(ObjectType.TABLE, 18, lines_executed=-1, total_hits=0)])
    with pytest.raises(ValidationError):
        build_stats(composed)


def test_read_stats_ignores_bad_sidecars(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    bad_json = tmp_path / "a.stats.json"
    bad_json.write_text("{", encoding="utf-8")
    bad_shape = tmp_path / "b.stats.json"
    bad_shape.write_text(json.dumps({"TotalLines": "many"}), encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="alcov"):
        assert read_stats(bad_json) is None
        assert read_stats(bad_shape) is None
    assert read_stats(tmp_path / "missing.stats.json") is None
    assert "a.stats.json" in caplog.text
    assert "b.stats.json" in caplog.text


def test_read_app_metadata(tmp_path: Path) -> None:
    app = tmp_path / "app.json"
    app.write_text(
        json.dumps({"id": "abc", "name": "Demo", "publisher": "Contoso", "version": "2.0.0.0", "idRanges": []}),
        encoding="utf-8",
    )
    assert read_app_metadata(app) == AppMetadata(id="abc", name="Demo", publisher="Contoso", version="2.0.0.0")
    assert read_app_metadata(None) is None
    assert read_app_metadata(tmp_path / "missing.json") is None

    app.write_text("[1, 2]", encoding="utf-8")
    assert read_app_metadata(app) is None
