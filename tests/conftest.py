"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from riskscan.errors import TransportError
from riskscan.scanner.models import Finding, RiskScore


def make_finding(
    vulnerability: str = "SQL Injection",
    filename: str = "a.py",
    lines: tuple[int, ...] = (10,),
    risk: RiskScore = RiskScore.HIGH,
    explanation: str = "User input reaches a raw query.",
) -> Finding:
    return Finding(
        vulnerability=vulnerability,
        risk_score=risk,
        filename=filename,
        lines_affected=lines,
        explanation=explanation,
        recommendation="Use parameterized queries.",
    )


class RecordingChannel:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self.shown = 0

    def append_line(self, text: str) -> None:
        self.lines.append(text)

    def show(self) -> None:
        self.shown += 1


class FakeHost:
    """Records everything the scanner reports."""

    def __init__(self, fail_open: bool = False) -> None:
        self.infos: list[str] = []
        self.errors: list[str] = []
        self.channels: dict[str, RecordingChannel] = {}
        self.opened: list[tuple[str, int]] = []
        self._fail_open = fail_open

    def notify_info(self, message: str) -> None:
        self.infos.append(message)

    def notify_error(self, message: str) -> None:
        self.errors.append(message)

    def output_channel(self, name: str) -> RecordingChannel:
        return self.channels.setdefault(name, RecordingChannel())

    def open_at_line(self, path: str, line: int) -> None:
        if self._fail_open:
            raise FileNotFoundError(path)
        self.opened.append((path, line))


class FakeAnalyzer:
    """Canned responses keyed by file path; exceptions are raised, not returned."""

    def __init__(
        self,
        dependency_response: str | Exception = '{"findings": []}',
        code_responses: dict[str, str | Exception] | None = None,
        default_code_response: str = '{"findings": []}',
    ) -> None:
        self.dependency_response = dependency_response
        self.code_responses = code_responses or {}
        self.default_code_response = default_code_response
        self.calls: list[tuple[str, object]] = []

    async def analyze_dependencies(self, specifiers: list[str]) -> str:
        self.calls.append(("dependencies", list(specifiers)))
        return self._answer(self.dependency_response)

    async def analyze_code(self, content: str, path: str) -> str:
        self.calls.append(("code", path))
        return self._answer(self.code_responses.get(path, self.default_code_response))

    @staticmethod
    def _answer(response: str | Exception) -> str:
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def run():
    """Run coroutines on one event loop for the whole test."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    yield loop.run_until_complete
    loop.close()
    asyncio.set_event_loop(None)


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def db(run, tmp_path: Path):
    from riskscan.storage.db import get_db

    conn = run(get_db(tmp_path / "state.db"))
    yield conn
    run(conn.close())


@pytest.fixture
def transport_error() -> TransportError:
    return TransportError("Request failed with status code 503", status_code=503)
