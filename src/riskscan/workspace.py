"""Wires one workspace: bus, store, diagnostics, adapters, and orchestrator."""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

from riskscan.analyzer.client import RemoteAnalyzer
from riskscan.config import RiskScanConfig
from riskscan.events import EventBus
from riskscan.host import Host
from riskscan.scanner.diagnostics import DiagnosticsPublisher
from riskscan.scanner.models import ScanSummary
from riskscan.scanner.orchestrator import Analyzer, ScanOrchestrator
from riskscan.scanner.store import FindingStore
from riskscan.storage.db import get_db
from riskscan.storage.repos import StateRepo
from riskscan.views.panel import PanelAdapter
from riskscan.views.tree import REVEAL_COMMAND, START_SCAN_COMMAND, TreeAdapter, TreeNode

logger = logging.getLogger(__name__)


class Workspace:
    """Composition root; the orchestrator's bus is shared with both adapters."""

    def __init__(
        self,
        root: str | Path,
        repo: StateRepo,
        host: Host,
        analyzer: Analyzer,
        **orchestrator_kwargs,
    ) -> None:
        self.root = Path(root).absolute()
        self.host = host
        self.bus = EventBus()
        self.store = FindingStore(self.bus)
        self.diagnostics = DiagnosticsPublisher()
        self.tree = TreeAdapter(self.bus, host, self.root)
        self.panel = PanelAdapter(self.bus, repo)
        self.orchestrator = ScanOrchestrator(
            self.root,
            analyzer,
            self.bus,
            self.store,
            self.diagnostics,
            host,
            **orchestrator_kwargs,
        )
        self._db: aiosqlite.Connection | None = None
        self._analyzer = analyzer

    @classmethod
    async def open(
        cls,
        root: str | Path,
        config: RiskScanConfig,
        host: Host,
        analyzer: Analyzer | None = None,
    ) -> Workspace:
        """Open the state database and hydrate the panel from it."""
        db = await get_db(config.db_path)
        workspace = cls(root, StateRepo(db), host, analyzer or RemoteAnalyzer(config))
        workspace._db = db
        await workspace.panel.initialize()
        return workspace

    async def start_scan(self) -> ScanSummary | None:
        if not self.panel.initialized:
            await self.panel.initialize()
        return await self.orchestrator.start_scan()

    async def execute(self, command: str, node: TreeNode | None = None) -> object:
        """Dispatch a tree node command."""
        if command == START_SCAN_COMMAND:
            return await self.start_scan()
        if command == REVEAL_COMMAND:
            if node is None or node.finding is None:
                raise ValueError("revealFinding requires a finding node")
            return self.tree.reveal(node.finding)
        raise ValueError(f"Unknown command: {command}")

    async def close(self) -> None:
        if isinstance(self._analyzer, RemoteAnalyzer):
            await self._analyzer.aclose()
        if self._db is not None:
            await self._db.close()
            self._db = None
