from __future__ import annotations

from typing import TYPE_CHECKING

from alcov.core.model.coverage import CoverageTotals, ExcludedObject, line_rate
from alcov.core.model.objects import ObjectType
from alcov.engine.compose import compose
from alcov.inputs.dump import group_entries, parse_dump_text

if TYPE_CHECKING:
    from collections.abc import Callable

    from alcov.core.model.objects import SourceObject


def _covered(text: str):
    return group_entries(parse_dump_text(text))


def test_matched_excluded_and_untested(make_source: Callable[..., SourceObject]) -> None:
    demo = make_source(object_id=50100, relative_path="src/Demo.al", executable={7})
    untested = make_source(object_id=50200, relative_path="src/Untested.al", executable={7, 8, 9, 10})
    catalogue = {demo.key: demo, untested.key: untested}

    composed = compose(_covered("0,50100,7,0,3\n0,99000,3,0,1\n0,99000,4,1,0\n"), catalogue)

    assert list(composed.matched) == ["Codeunit.50100", "Codeunit.50200"]
    assert composed.matched["Codeunit.50100"].source is demo
    assert composed.matched["Codeunit.50200"].lines == ()
    assert composed.excluded == [ExcludedObject(ObjectType.CODEUNIT, 99000, lines_executed=1, total_hits=1)]


def test_no_object_is_reported_twice(make_source: Callable[..., SourceObject]) -> None:
    demo = make_source(object_id=50100, executable={7})
    composed = compose(_covered("0,50100,7,0,3\n0,50101,1,0,1\n"), {demo.key: demo})
    excluded_keys = {f"{e.object_type.value}.{e.object_id}" for e in composed.excluded}
    assert excluded_keys.isdisjoint(composed.matched)


def test_totals(make_source: Callable[..., SourceObject]) -> None:
    demo = make_source(object_id=50100, executable={7})
    untested = make_source(object_id=50200, relative_path="src/Untested.al", executable={7, 8, 9, 10})
    composed = compose(_covered("0,50100,7,0,3\n"), {demo.key: demo, untested.key: untested})

    totals = composed.totals
    assert totals == CoverageTotals(total_lines=5, covered_lines=1)
    assert totals.not_covered_lines == 4
    assert totals.percent == 20.0
    assert totals.line_rate == 0.2


def test_covered_lines_never_exceed_executable(make_source: Callable[..., SourceObject]) -> None:
    demo = make_source(object_id=50100, executable={7})
    composed = compose(_covered("0,50100,7,0,3\n0,50100,8,0,1\n0,50100,9,0,1\n"), {demo.key: demo})
    assert composed.matched[demo.key].line_counts() == (1, 1)


def test_totals_ignore_hits_outside_executable_lines(make_source: Callable[..., SourceObject]) -> None:
    demo = make_source(object_id=50100, executable={5, 7})
    composed = compose(_covered("0,50100,3,0,1\n0,50100,5,0,1\n"), {demo.key: demo})
    assert composed.totals == CoverageTotals(total_lines=2, covered_lines=1)
    assert composed.totals.percent == 50.0


def test_exclude_test_objects(make_source: Callable[..., SourceObject]) -> None:
    demo = make_source(object_id=50100, executable={7})
    tests = make_source(object_id=50900, relative_path="test/Tests.al", executable={8}, is_test_object=True)
    catalogue = {demo.key: demo, tests.key: tests}
    covered = _covered("0,50100,7,0,3\n0,50900,8,0,1\n")

    assert "Codeunit.50900" in compose(covered, catalogue).matched
    composed = compose(covered, catalogue, exclude_test_objects=True)
    assert list(composed.matched) == ["Codeunit.50100"]
    assert composed.excluded == []


def test_empty_totals() -> None:
    composed = compose({}, {})
    assert composed.totals.percent == 0.0
    assert composed.totals.line_rate == 0.0


def test_line_rate_bounds() -> None:
    assert line_rate(0, 0) == 0.0
    assert line_rate(0, 10) == 0.0
    assert line_rate(10, 10) == 1.0
    assert line_rate(2, 3) == 0.6667
    assert line_rate(1, 100000) == 0.0001
    assert line_rate(5, 3) == 1.0
