"""Legacy line-oriented extraction of editor diagnostics from analyzer text.

This path reads the same per-file response as the JSON parser but assumes a
loose ``Type: ... Description: ... Line: N`` text layout. It never touches the
finding store.
"""

from __future__ import annotations

import enum
import logging
import re
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)

ISSUE_PATTERN = re.compile(
    r"Type:\s*(.+?)\s*Description:\s*(.+?)\s*Line:\s*(\d+)",
    re.IGNORECASE,
)


class DiagnosticSeverity(enum.Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Diagnostic:
    """One editor diagnostic anchored at a 0-based line."""

    line: int
    message: str
    severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    source: str = "riskscan"


def extract_diagnostics(text: str) -> list[Diagnostic]:
    """Pull every ``Type/Description/Line`` triple out of ``text``."""
    diagnostics: list[Diagnostic] = []
    for match in ISSUE_PATTERN.finditer(text):
        issue_type, description, line_str = match.groups()
        diagnostics.append(
            Diagnostic(
                line=max(0, int(line_str) - 1),
                message=f"[{issue_type.strip()}] {description.strip()}",
            )
        )
    return diagnostics


class DiagnosticsPublisher:
    """Per-file diagnostics collection; each publish replaces a file's entry."""

    def __init__(self, name: str = "riskscan") -> None:
        self.name = name
        self._collection: dict[str, list[Diagnostic]] = {}
        self._lock = threading.Lock()

    def publish(self, path: str, text: str) -> list[Diagnostic]:
        diagnostics = extract_diagnostics(text)
        with self._lock:
            if diagnostics:
                self._collection[path] = diagnostics
            else:
                self._collection.pop(path, None)
        logger.debug("%d diagnostic(s) for %s", len(diagnostics), path)
        return diagnostics

    def get(self, path: str) -> list[Diagnostic]:
        with self._lock:
            return list(self._collection.get(path, []))

    def clear(self) -> None:
        with self._lock:
            self._collection.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._collection)
