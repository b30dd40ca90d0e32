"""Panel adapter — persistent mirror of the scan state.

Every mutation is written to the durable store under two keys: the combined
``{scanning, findings}`` snapshot used for hydration, and a findings-only list
kept for older readers. ``initialize()`` replays the last stored state so
results survive process restarts without re-scanning.
"""

from __future__ import annotations

import logging

from rich.table import Table

from riskscan.events import EventBus, FindingsChanged, ScanningEnded, ScanningStarted
from riskscan.scanner.models import RiskScore, ScanState
from riskscan.storage.repos import StateRepo

logger = logging.getLogger(__name__)

STATE_KEY = "riskscan.scanState"
FINDINGS_KEY = "riskscan.findings"

_RISK_COLORS = {
    RiskScore.HIGH: "red",
    RiskScore.MEDIUM: "yellow",
    RiskScore.LOW: "blue",
}


class PanelAdapter:
    """In-memory ScanState mirror that persists itself after every change."""

    def __init__(self, bus: EventBus, repo: StateRepo) -> None:
        self._repo = repo
        self._state = ScanState()
        self._initialized = False

        bus.subscribe(ScanningStarted, self._on_started)
        bus.subscribe(FindingsChanged, self._on_findings_changed)
        bus.subscribe(ScanningEnded, self._on_ended)

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> ScanState:
        """Hydrate from durable storage; must run before the first scan."""
        stored = await self._repo.get(STATE_KEY)
        state: ScanState | None = None

        if isinstance(stored, dict):
            state = _decode_state(stored)
        if state is None:
            legacy = await self._repo.get(FINDINGS_KEY)
            if isinstance(legacy, list):
                state = _decode_state({"scanning": False, "findings": legacy})

        if state is not None:
            logger.info("Restored %d finding(s) from storage", len(state.findings))
            self._state = state
        self._initialized = True
        return self._state

    def render(self) -> Table:
        """Findings table in discovery order."""
        title = "Scan Results"
        if self._state.scanning:
            title += " (scanning...)"

        table = Table(title=title, show_lines=False)
        table.add_column("#", justify="right")
        table.add_column("Risk", style="bold", width=8)
        table.add_column("Vulnerability")
        table.add_column("File", style="cyan")
        table.add_column("Lines", justify="right")
        table.add_column("Recommendation", max_width=50)

        for i, finding in enumerate(self._state.findings, 1):
            color = _RISK_COLORS[finding.risk_score]
            table.add_row(
                str(i),
                f"[{color}]{finding.risk_score.value}[/{color}]",
                finding.vulnerability,
                finding.filename,
                ",".join(str(n) for n in finding.lines_affected),
                finding.recommendation,
            )
        return table

    async def _on_started(self, event: ScanningStarted) -> None:
        await self._update(event.state)

    async def _on_findings_changed(self, event: FindingsChanged) -> None:
        # A reset only comes from a scan that has already started
        scanning = self._state.scanning or event.reset
        await self._update(ScanState(scanning=scanning, findings=event.findings))

    async def _on_ended(self, event: ScanningEnded) -> None:
        await self._update(event.state)

    async def _update(self, state: ScanState) -> None:
        self._state = state
        data = state.to_dict()
        await self._repo.set_many(
            {STATE_KEY: data, FINDINGS_KEY: data["findings"]}
        )


def _decode_state(data: dict) -> ScanState | None:
    try:
        return ScanState.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Ignoring unreadable stored scan state: %s", e)
        return None

