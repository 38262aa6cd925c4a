"""Read test-run results produced by the AL test runner.

The runner reports one JSON document per run: a list of codeunit results,
each with the test methods it executed::

    [{"name": "Demo Tests", "codeUnit": 50100,
      "startTime": "2024-05-01T10:00:00Z", "finishTime": "2024-05-01T10:00:02Z",
      "result": 2,
      "testResults": [{"method": "TestDoWork", "startTime": "...", "finishTime": "...",
                       "result": 2, "message": "", "stackTrace": ""}]}]
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from alcov._meta import logger
from alcov.errors import TestResultsError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from pathlib import Path


class TestOutcome(StrEnum):
    __test__ = False

    PASS = "Pass"
    FAIL = "Fail"
    SKIP = "Skip"

    @classmethod
    def parse(cls, value: object) -> TestOutcome:
        text = str(value).strip().lower()
        return _OUTCOMES.get(text, cls.SKIP)


_OUTCOMES: dict[str, TestOutcome] = {
    "0": TestOutcome.SKIP,
    "1": TestOutcome.FAIL,
    "2": TestOutcome.PASS,
    "3": TestOutcome.SKIP,
    "success": TestOutcome.PASS,
    "pass": TestOutcome.PASS,
    "passed": TestOutcome.PASS,
    "failure": TestOutcome.FAIL,
    "fail": TestOutcome.FAIL,
    "failed": TestOutcome.FAIL,
    "skipped": TestOutcome.SKIP,
    "skip": TestOutcome.SKIP,
}


@dataclass(frozen=True, slots=True)
class TestMethodResult:
    __test__ = False

    method: str
    outcome: TestOutcome
    duration: float = 0.0
    message: str = ""
    stack_trace: str = ""


@dataclass(frozen=True, slots=True)
class CodeunitResult:
    codeunit_id: int
    name: str
    methods: tuple[TestMethodResult, ...] = ()
    started: datetime | None = None
    duration: float = 0.0

    @property
    def label(self) -> str:
        return f"{self.codeunit_id} {self.name}".strip()

    def count(self, outcome: TestOutcome) -> int:
        return sum(1 for m in self.methods if m.outcome is outcome)


def _parse_time(value: object) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("unparseable timestamp %r", value)
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _duration(start: datetime | None, finish: datetime | None) -> float:
    if start is None or finish is None:
        return 0.0
    return max(0.0, (finish - start).total_seconds())


def _method(raw: Mapping[str, Any]) -> TestMethodResult:
    return TestMethodResult(
        method=str(raw.get("method") or raw.get("name") or ""),
        outcome=TestOutcome.parse(raw.get("result", "")),
        duration=_duration(_parse_time(raw.get("startTime")), _parse_time(raw.get("finishTime"))),
        message=str(raw.get("message") or ""),
        stack_trace=str(raw.get("stackTrace") or ""),
    )


def _codeunit(raw: Mapping[str, Any]) -> CodeunitResult:
    try:
        codeunit_id = int(raw.get("codeUnit") or raw.get("codeunit") or 0)
    except (TypeError, ValueError):
        codeunit_id = 0
    methods = raw.get("testResults") or []
    if not isinstance(methods, list):
        msg = f"codeunit {codeunit_id}: 'testResults' must be a list"
        raise TestResultsError(msg)
    started = _parse_time(raw.get("startTime"))
    return CodeunitResult(
        codeunit_id=codeunit_id,
        name=str(raw.get("name") or ""),
        methods=tuple(_method(m) for m in methods if isinstance(m, dict)),
        started=started,
        duration=_duration(started, _parse_time(raw.get("finishTime"))),
    )


def parse_results(data: object) -> list[CodeunitResult]:
    """Convert one decoded results document into codeunit results."""
    items: Iterable[object]
    if isinstance(data, dict):
        items = data.get("codeunits") if isinstance(data.get("codeunits"), list) else [data]
    elif isinstance(data, list):
        items = data
    else:
        msg = f"unexpected test results document of type {type(data).__name__}"
        raise TestResultsError(msg)
    return [_codeunit(item) for item in items if isinstance(item, dict)]


def read_results(paths: Sequence[Path]) -> list[CodeunitResult]:
    """Read and concatenate results from several JSON files."""
    out: list[CodeunitResult] = []
    for path in paths:
        try:
            data = json.loads(path.read_text(encoding="utf-8-sig"))
        except FileNotFoundError as exc:
            msg = f"test results not found: {path}"
            raise TestResultsError(msg) from exc
        except ValueError as exc:
            msg = f"{path}: invalid test results JSON: {exc}"
            raise TestResultsError(msg) from exc
        out.extend(parse_results(data))
    return out


__all__ = [
    "CodeunitResult",
    "TestMethodResult",
    "TestOutcome",
    "parse_results",
    "read_results",
]
