"""JUnit and XUnit XML reports from AL test-runner results.

Both writers can append to an existing report: the new suites (JUnit) or
assemblies (XUnit) are added after the existing ones and the root totals are
recomputed from every child.
"""

from __future__ import annotations

import socket
import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from defusedxml import DefusedXmlException, ElementTree

from alcov._meta import logger
from alcov.errors import TestResultsError
from alcov.inputs.results import TestOutcome

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from alcov.inputs.results import CodeunitResult


class ReportFormat(StrEnum):
    JUNIT = "junit"
    XUNIT = "xunit"


def _seconds(value: float) -> str:
    return f"{value:.3f}"


def _stamp(value: datetime | None) -> str:
    return (value or datetime.now(tz=UTC)).strftime("%Y-%m-%dT%H:%M:%S")


def _int_attr(elem: ET.Element, name: str) -> int:
    try:
        return int(elem.get(name) or 0)
    except ValueError:
        return 0


def _float_attr(elem: ET.Element, name: str) -> float:
    try:
        return float(elem.get(name) or 0)
    except ValueError:
        return 0.0


def _load_existing(path: Path | None, root_tag: str) -> ET.Element | None:
    if path is None or not path.is_file():
        return None
    try:
        root = ElementTree.parse(path).getroot()
    except (ET.ParseError, DefusedXmlException) as exc:
        msg = f"cannot append to {path}: {exc}"
        raise TestResultsError(msg) from exc
    if root.tag != root_tag:
        msg = f"cannot append to {path}: expected <{root_tag}>, found <{root.tag}>"
        raise TestResultsError(msg)
    logger.debug("Appending to existing report %s", path)
    return root


# -----------------------------------------------------------------------------
# JUnit
# -----------------------------------------------------------------------------


def _junit_suite(parent: ET.Element, result: CodeunitResult, hostname: str) -> None:
    suite = ET.SubElement(
        parent,
        "testsuite",
        {
            "name": result.label,
            "tests": str(len(result.methods)),
            "failures": str(result.count(TestOutcome.FAIL)),
            "errors": "0",
            "skipped": str(result.count(TestOutcome.SKIP)),
            "time": _seconds(result.duration),
            "timestamp": _stamp(result.started),
            "hostname": hostname,
        },
    )
    for method in result.methods:
        case = ET.SubElement(
            suite,
            "testcase",
            {"classname": result.label, "name": method.method, "time": _seconds(method.duration)},
        )
        if method.outcome is TestOutcome.FAIL:
            failure = ET.SubElement(case, "failure", {"message": method.message or "Test failed"})
            failure.text = method.stack_trace or None
        elif method.outcome is TestOutcome.SKIP:
            ET.SubElement(case, "skipped")


def _junit_totals(root: ET.Element) -> None:
    suites = root.findall("testsuite")
    for attr in ("tests", "failures", "errors", "skipped"):
        root.set(attr, str(sum(_int_attr(s, attr) for s in suites)))
    root.set("time", _seconds(sum(_float_attr(s, "time") for s in suites)))


def build_junit(
    results: Sequence[CodeunitResult],
    *,
    existing: Path | None = None,
    hostname: str | None = None,
) -> ET.Element:
    root = _load_existing(existing, "testsuites")
    if root is None:
        root = ET.Element("testsuites")
    host = hostname or socket.gethostname()
    for result in results:
        _junit_suite(root, result, host)
    _junit_totals(root)
    return root


# -----------------------------------------------------------------------------
# XUnit
# -----------------------------------------------------------------------------


def _xunit_assembly(parent: ET.Element, result: CodeunitResult) -> None:
    started = result.started or datetime.now(tz=UTC)
    passed = result.count(TestOutcome.PASS)
    failed = result.count(TestOutcome.FAIL)
    skipped = result.count(TestOutcome.SKIP)
    common = {
        "total": str(len(result.methods)),
        "passed": str(passed),
        "failed": str(failed),
        "skipped": str(skipped),
        "time": _seconds(result.duration),
    }
    assembly = ET.SubElement(
        parent,
        "assembly",
        {
            "name": result.label,
            "test-framework": "PS Test Runner",
            "run-date": started.strftime("%Y-%m-%d"),
            "run-time": started.strftime("%H:%M:%S"),
            **common,
        },
    )
    collection = ET.SubElement(assembly, "collection", {"name": result.name or result.label, **common})
    for method in result.methods:
        test = ET.SubElement(
            collection,
            "test",
            {
                "name": f"{result.name}:{method.method}" if result.name else method.method,
                "method": method.method,
                "time": _seconds(method.duration),
                "result": method.outcome.value,
            },
        )
        if method.outcome is TestOutcome.FAIL:
            failure = ET.SubElement(test, "failure")
            ET.SubElement(failure, "message").text = method.message
            ET.SubElement(failure, "stack-trace").text = method.stack_trace


def build_xunit(results: Sequence[CodeunitResult], *, existing: Path | None = None) -> ET.Element:
    root = _load_existing(existing, "assemblies")
    if root is None:
        root = ET.Element("assemblies")
    for result in results:
        _xunit_assembly(root, result)
    return root


def render_report(
    results: Sequence[CodeunitResult],
    fmt: ReportFormat,
    *,
    existing: Path | None = None,
    hostname: str | None = None,
) -> str:
    """Render *results* as JUnit or XUnit; *existing* is extended when given."""
    if fmt is ReportFormat.JUNIT:
        root = build_junit(results, existing=existing, hostname=hostname)
    else:
        root = build_xunit(results, existing=existing)
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="unicode", xml_declaration=True) + "\n"


__all__ = ["ReportFormat", "build_junit", "build_xunit", "render_report"]
