"""Scan orchestrator — dependency phase, then per-file code phase."""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from riskscan.errors import FileAccessError, RiskScanError
from riskscan.events import EventBus, ScanningEnded, ScanningStarted
from riskscan.host import Host
from riskscan.scanner.collectors import (
    Dependency,
    discover_manifests,
    discover_source_files,
    parse_manifest,
    read_text,
)
from riskscan.scanner.diagnostics import DiagnosticsPublisher
from riskscan.scanner.models import ScanState, ScanSummary
from riskscan.scanner.parser import parse_findings
from riskscan.scanner.store import FindingStore

logger = logging.getLogger(__name__)

DEPENDENCY_CHANNEL = "Dependency Analysis"


class ScanPhase(enum.Enum):
    """Single-flight state machine: IDLE → SCANNING → IDLE."""

    IDLE = "idle"
    SCANNING = "scanning"


class Analyzer(Protocol):
    """What the orchestrator needs from the remote analyzer."""

    async def analyze_dependencies(self, specifiers: list[str]) -> str: ...

    async def analyze_code(self, content: str, path: str) -> str: ...


class ScanOrchestrator:
    """Owns the scan state and drives store, diagnostics, and adapters.

    Everything runs in one asyncio flow: manifests are analyzed in a single
    call before any source file, and source files go one at a time. A
    failure in one unit (the manifest batch or a file) is reported and the
    scan moves on.
    """

    def __init__(
        self,
        workspace_root: str | Path,
        analyzer: Analyzer,
        bus: EventBus,
        store: FindingStore,
        diagnostics: DiagnosticsPublisher,
        host: Host,
        manifest_collector: Callable[[Path], list[Path]] = discover_manifests,
        manifest_parser: Callable[[Path], list[Dependency]] = parse_manifest,
        source_collector: Callable[[Path], list[Path]] = discover_source_files,
        reader: Callable[[Path], str] = read_text,
    ) -> None:
        self._root = Path(workspace_root).absolute()
        self._analyzer = analyzer
        self._bus = bus
        self._store = store
        self._diagnostics = diagnostics
        self._host = host
        self._collect_manifests = manifest_collector
        self._parse_manifest = manifest_parser
        self._collect_sources = source_collector
        self._read = reader
        self._phase = ScanPhase.IDLE

    @property
    def workspace_root(self) -> Path:
        return self._root

    @property
    def phase(self) -> ScanPhase:
        return self._phase

    @property
    def state(self) -> ScanState:
        return ScanState(
            scanning=self._phase is ScanPhase.SCANNING,
            findings=self._store.findings,
        )

    async def start_scan(self) -> ScanSummary | None:
        """Run one full scan; returns None if a scan is already running."""
        # No await between the check and the transition
        if self._phase is ScanPhase.SCANNING:
            logger.warning("Scan already in progress, request ignored")
            return None
        self._phase = ScanPhase.SCANNING

        start = time.time()
        summary = ScanSummary(workspace=str(self._root))
        logger.info("Scan started in %s", self._root)

        try:
            await self._store.clear()
            self._diagnostics.clear()
            await self._bus.publish(ScanningStarted(state=self.state))

            await self._scan_dependencies(summary)
            await self._scan_sources(summary)
        finally:
            self._phase = ScanPhase.IDLE
            summary.findings = len(self._store)
            summary.duration = time.time() - start
            await self._bus.publish(ScanningEnded(state=self.state))
            logger.info(
                "Scan ended: %d finding(s), %d file(s), %d failure(s)",
                summary.findings,
                summary.files_scanned,
                summary.files_failed,
            )

        self._host.notify_info("Codebase scan complete.")
        return summary

    async def _scan_dependencies(self, summary: ScanSummary) -> None:
        manifests = await asyncio.to_thread(self._collect_manifests, self._root)

        specifiers: list[str] = []
        for manifest in manifests:
            try:
                deps = await asyncio.to_thread(self._parse_manifest, manifest)
            except (FileAccessError, ValueError) as e:
                logger.warning("Skipping manifest %s: %s", manifest, e)
                summary.errors.append((str(manifest), str(e)))
                continue
            specifiers.extend(d.specifier for d in deps)

        summary.dependencies = len(specifiers)
        if not specifiers:
            logger.debug("No dependencies found, skipping dependency analysis")
            return

        try:
            logger.debug("Dependency prompt: %s", specifiers)
            text = await self._analyzer.analyze_dependencies(specifiers)
            logger.debug("Dependency response: %s", text)
        except RiskScanError as e:
            summary.errors.append(("dependencies", str(e)))
            self._host.notify_error(f"Dependency analysis failed: {e}")
            return

        findings = parse_findings(text, self._root)
        if findings:
            await self._store.add_all(findings)

        self._host.notify_info("Dependency analysis complete. See output for details.")
        channel = self._host.output_channel(DEPENDENCY_CHANNEL)
        channel.append_line(text)
        channel.show()

    async def _scan_sources(self, summary: ScanSummary) -> None:
        files = await asyncio.to_thread(self._collect_sources, self._root)
        logger.debug("%d source file(s) to analyze", len(files))

        for path in files:
            await self._scan_file(path, summary)

    async def _scan_file(self, path: Path, summary: ScanSummary) -> None:
        try:
            content = await asyncio.to_thread(self._read, path)
            logger.debug("Code prompt for %s (%d chars)", path, len(content))
            text = await self._analyzer.analyze_code(content, str(path))
            logger.debug("Code response for %s: %s", path, text)
        except RiskScanError as e:
            summary.files_failed += 1
            summary.errors.append((str(path), str(e)))
            self._host.notify_error(f"Code analysis failed for {path}: {e}")
            return

        summary.files_scanned += 1
        findings = parse_findings(text, self._root)
        if findings:
            await self._store.add_all(findings)
        self._diagnostics.publish(str(path), text)
