"""Scanner data models — findings, scan state, and scan summaries."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Any


class RiskScore(enum.Enum):
    """Finding risk tier as reported by the analyzer."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Finding:
    """A single issue reported by the remote analyzer."""

    vulnerability: str
    risk_score: RiskScore
    filename: str
    lines_affected: tuple[int, ...] = ()
    explanation: str = ""
    recommendation: str = ""
    reference: str | None = None

    @property
    def key(self) -> str:
        """Identity key: same file, same lines, same vulnerability name."""
        lines = ",".join(str(n) for n in self.lines_affected)
        return f"{self.filename}|{lines}|{self.vulnerability}"

    @property
    def label(self) -> str:
        return f"{self.vulnerability} ({self.risk_score.value})"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "vulnerability": self.vulnerability,
            "risk_score": self.risk_score.value,
            "filename": self.filename,
            "lines_affected": list(self.lines_affected),
            "explanation": self.explanation,
            "recommendation": self.recommendation,
        }
        if self.reference is not None:
            data["reference"] = self.reference
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Finding:
        return cls(
            vulnerability=data["vulnerability"],
            risk_score=RiskScore(str(data["risk_score"]).lower()),
            filename=data["filename"],
            lines_affected=tuple(int(n) for n in data.get("lines_affected", ())),
            explanation=data.get("explanation", ""),
            recommendation=data.get("recommendation", ""),
            reference=data.get("reference"),
        )


@dataclass(frozen=True)
class ScanState:
    """Immutable snapshot of the scan lifecycle and its findings."""

    scanning: bool = False
    findings: tuple[Finding, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "scanning": self.scanning,
            "findings": [f.to_dict() for f in self.findings],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanState:
        return cls(
            scanning=bool(data.get("scanning", False)),
            findings=tuple(Finding.from_dict(f) for f in data.get("findings", [])),
        )


@dataclass
class ScanSummary:
    """Aggregate bookkeeping for one completed scan."""

    workspace: str
    dependencies: int = 0
    files_scanned: int = 0
    files_failed: int = 0
    findings: int = 0
    errors: list[tuple[str, str]] = field(default_factory=list)
    duration: float = 0.0
    timestamp: float = field(default_factory=time.time)
