from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest
from defusedxml import ElementTree

from alcov.core.pipeline import DataError, NoInputError, format_results
from alcov.errors import TestResultsError
from alcov.inputs.results import TestOutcome, parse_results, read_results
from alcov.render.junit import ReportFormat, render_report

if TYPE_CHECKING:
    from pathlib import Path

RESULTS = [
    {
        "name": "Demo Tests",
        "codeUnit": 50900,
        "startTime": "2024-05-01T10:00:00Z",
        "finishTime": "2024-05-01T10:00:03Z",
        "result": 1,
        "testResults": [
            {
                "method": "TestDoWork",
                "startTime": "2024-05-01T10:00:00Z",
                "finishTime": "2024-05-01T10:00:01.5Z",
                "result": 2,
            },
            {
                "method": "TestFails",
                "startTime": "2024-05-01T10:00:01.5Z",
                "finishTime": "2024-05-01T10:00:02Z",
                "result": "Failure",
                "message": "Assert.AreEqual failed",
                "stackTrace": "Demo Tests(CodeUnit 50900).TestFails line 12",
            },
            {"method": "TestSkipped", "result": 3},
        ],
    }
]


@pytest.fixture
def results_file(tmp_path: Path) -> Path:
    path = tmp_path / "results.json"
    path.write_text(json.dumps(RESULTS), encoding="utf-8")
    return path


def test_parse_results() -> None:
    (codeunit,) = parse_results(RESULTS)
    assert codeunit.label == "50900 Demo Tests"
    assert codeunit.duration == 3.0
    assert [m.outcome for m in codeunit.methods] == [TestOutcome.PASS, TestOutcome.FAIL, TestOutcome.SKIP]
    assert codeunit.methods[0].duration == 1.5
    assert codeunit.methods[2].duration == 0.0


def test_single_codeunit_object_is_accepted() -> None:
    assert len(parse_results(RESULTS[0])) == 1


def test_bad_results_documents() -> None:
    with pytest.raises(TestResultsError):
        parse_results("nope")
    with pytest.raises(TestResultsError, match="testResults"):
        parse_results([{"codeUnit": 1, "testResults": {"method": "X"}}])


def test_read_results_errors(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    with pytest.raises(TestResultsError, match="invalid test results JSON"):
        read_results([bad])
    with pytest.raises(TestResultsError, match="not found"):
        read_results([tmp_path / "missing.json"])


def test_junit_report() -> None:
    root = ElementTree.fromstring(render_report(parse_results(RESULTS), ReportFormat.JUNIT, hostname="ci"))
    assert root.tag == "testsuites"
    assert (root.get("tests"), root.get("failures"), root.get("skipped"), root.get("errors")) == ("3", "1", "1", "0")

    (suite,) = root.findall("testsuite")
    assert suite.get("name") == "50900 Demo Tests"
    assert suite.get("hostname") == "ci"
    assert suite.get("time") == "3.000"
    assert suite.get("timestamp") == "2024-05-01T10:00:00"

    cases = {c.get("name"): c for c in suite.findall("testcase")}
    assert cases["TestDoWork"].get("classname") == "50900 Demo Tests"
    failure = cases["TestFails"].find("failure")
    assert failure.get("message") == "Assert.AreEqual failed"
    assert "line 12" in failure.text
    assert cases["TestSkipped"].find("skipped") is not None


def test_xunit_report() -> None:
    root = ElementTree.fromstring(render_report(parse_results(RESULTS), ReportFormat.XUNIT))
    assert root.tag == "assemblies"
    (assembly,) = root.findall("assembly")
    assert assembly.get("name") == "50900 Demo Tests"
    assert (assembly.get("total"), assembly.get("passed"), assembly.get("failed"), assembly.get("skipped")) == (
        "3",
        "1",
        "1",
        "1",
    )
    assert assembly.get("run-date") == "2024-05-01"
    assert assembly.get("run-time") == "10:00:00"
    tests = assembly.findall("./collection/test")
    assert [t.get("result") for t in tests] == ["Pass", "Fail", "Skip"]
    assert tests[1].find("./failure/message").text == "Assert.AreEqual failed"
    assert "line 12" in tests[1].find("./failure/stack-trace").text


def test_format_results_append(tmp_path: Path, results_file: Path) -> None:
    junit = tmp_path / "junit.xml"
    xunit = tmp_path / "xunit.xml"

    format_results([results_file], junit=junit, xunit=xunit)
    format_results([results_file], junit=junit, xunit=xunit, append=True)

    jroot = ElementTree.parse(junit).getroot()
    assert len(jroot.findall("testsuite")) == 2
    assert jroot.get("tests") == "6"
    assert jroot.get("failures") == "2"
    assert jroot.get("time") == "6.000"
    assert len(ElementTree.parse(xunit).getroot().findall("assembly")) == 2

    format_results([results_file], junit=junit)
    assert len(ElementTree.parse(junit).getroot().findall("testsuite")) == 1


def test_append_to_foreign_file_is_rejected(tmp_path: Path, results_file: Path) -> None:
    junit = tmp_path / "junit.xml"
    junit.write_text("<assemblies/>", encoding="utf-8")
    with pytest.raises(DataError, match="expected <testsuites>"):
        format_results([results_file], junit=junit, append=True)


def test_missing_results_file(tmp_path: Path) -> None:
    with pytest.raises(NoInputError, match="test results not found"):
        format_results([tmp_path / "missing.json"], junit=tmp_path / "junit.xml")


def test_append_to_file_with_entities_is_rejected(tmp_path: Path, results_file: Path) -> None:
    junit = tmp_path / "junit.xml"
    junit.write_text('<!DOCTYPE testsuites [<!ENTITY x "y">]>\n<testsuites>&x;</testsuites>', encoding="utf-8")
    with pytest.raises(DataError, match="cannot append"):
        format_results([results_file], junit=junit, append=True)
