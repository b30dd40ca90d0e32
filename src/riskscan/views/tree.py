"""Tree adapter — ephemeral two-level view of the current findings."""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from rich.text import Text
from rich.tree import Tree

from riskscan.events import EventBus, FindingsChanged, ScanningEnded, ScanningStarted
from riskscan.host import Host
from riskscan.scanner.models import Finding, RiskScore

logger = logging.getLogger(__name__)

START_SCAN_COMMAND = "riskscan.startScan"
REVEAL_COMMAND = "riskscan.revealFinding"

SCANNING_LABEL = "Scanning for vulnerabilities..."

_RISK_ICONS = {
    RiskScore.HIGH: "error",
    RiskScore.MEDIUM: "warning",
    RiskScore.LOW: "info",
}

_ICON_STYLES = {
    "error": "red",
    "warning": "yellow",
    "info": "blue",
    "play-circle": "green",
    "sync": "cyan",
}


class NodeKind(enum.Enum):
    START_SCAN = "start_scan"
    SCANNING = "scanning"
    FINDING = "finding"
    LINES = "lines"
    EXPLANATION = "explanation"
    RECOMMENDATION = "recommendation"
    OPEN_FILE = "open_file"


@dataclass(frozen=True)
class TreeNode:
    """One row of the tree; finding nodes carry their Finding for expansion."""

    id: str
    label: str
    kind: NodeKind
    icon: str = ""
    description: str = ""
    tooltip: str = ""
    collapsible: bool = False
    command: str | None = None
    finding: Finding | None = None


class TreeAdapter:
    """Rebuilds its root nodes on every lifecycle signal.

    Finding node ids come from a counter that keeps growing across rebuilds
    and only resets when the finding store is cleared.
    """

    def __init__(
        self,
        bus: EventBus,
        host: Host,
        workspace_root: str | Path,
    ) -> None:
        self._host = host
        self._workspace_root = Path(workspace_root)
        self._scanning = False
        self._findings: tuple[Finding, ...] = ()
        self._counter = 0
        self._roots: list[TreeNode] = []

        bus.subscribe(ScanningStarted, self._on_started)
        bus.subscribe(FindingsChanged, self._on_findings_changed)
        bus.subscribe(ScanningEnded, self._on_ended)
        self._rebuild()

    @property
    def scanning(self) -> bool:
        return self._scanning

    @property
    def roots(self) -> list[TreeNode]:
        return list(self._roots)

    def get_children(self, node: TreeNode | None = None) -> list[TreeNode]:
        """Root nodes for ``None``; the four detail nodes for a finding node."""
        if self._scanning or node is None:
            return list(self._roots)
        if node.kind is not NodeKind.FINDING or node.finding is None:
            return []
        return _detail_nodes(node)

    def reveal(self, finding: Finding) -> bool:
        """Open the finding's file at its first affected line."""
        path = finding.filename
        if not os.path.isabs(path):
            path = str(self._workspace_root / path)
        line = max(0, finding.lines_affected[0] - 1) if finding.lines_affected else 0

        try:
            self._host.open_at_line(path, line)
        except OSError as e:
            logger.debug("Reveal failed for %s: %s", path, e)
            self._host.notify_error(f"Could not open file: {finding.filename}")
            return False
        return True

    def render(self) -> Tree:
        """Build a Rich tree of the roots with every finding expanded."""
        tree = Tree("[bold]Security Scan Results[/bold]", guide_style="dim")
        for node in self.get_children():
            branch = tree.add(_node_text(node))
            for child in self.get_children(node):
                branch.add(_node_text(child))
        return tree

    def _on_started(self, event: ScanningStarted) -> None:
        self._scanning = event.state.scanning
        self._findings = event.state.findings
        self._rebuild()

    def _on_findings_changed(self, event: FindingsChanged) -> None:
        if event.reset:
            self._counter = 0
        self._findings = event.findings
        self._rebuild()

    def _on_ended(self, event: ScanningEnded) -> None:
        self._scanning = event.state.scanning
        self._findings = event.state.findings
        self._rebuild()

    def _rebuild(self) -> None:
        if self._scanning:
            self._roots = [
                TreeNode(
                    id="scanning",
                    label=SCANNING_LABEL,
                    kind=NodeKind.SCANNING,
                    icon="sync",
                )
            ]
            return

        roots = [
            TreeNode(
                id="start-scan",
                label="Start Scan",
                kind=NodeKind.START_SCAN,
                icon="play-circle",
                command=START_SCAN_COMMAND,
            )
        ]
        for finding in self._findings:
            roots.append(
                TreeNode(
                    id=f"finding-{self._counter}",
                    label=finding.label,
                    kind=NodeKind.FINDING,
                    icon=_RISK_ICONS[finding.risk_score],
                    collapsible=True,
                    finding=finding,
                )
            )
            self._counter += 1
        self._roots = roots


def _detail_nodes(parent: TreeNode) -> list[TreeNode]:
    finding = parent.finding
    assert finding is not None
    lines = ", ".join(str(n) for n in finding.lines_affected)
    return [
        TreeNode(
            id=f"{parent.id}-lines",
            label=f"Lines: {lines}",
            kind=NodeKind.LINES,
            icon="list-selection",
            tooltip=f"Affected lines: {lines}",
            finding=finding,
        ),
        TreeNode(
            id=f"{parent.id}-explanation",
            label="Explanation",
            kind=NodeKind.EXPLANATION,
            icon="info",
            description=finding.explanation,
            tooltip=finding.explanation,
            finding=finding,
        ),
        TreeNode(
            id=f"{parent.id}-recommendation",
            label="Recommendation",
            kind=NodeKind.RECOMMENDATION,
            icon="lightbulb",
            description=finding.recommendation,
            tooltip=finding.recommendation,
            finding=finding,
        ),
        TreeNode(
            id=f"{parent.id}-open",
            label="Open File",
            kind=NodeKind.OPEN_FILE,
            icon="go-to-file",
            command=REVEAL_COMMAND,
            finding=finding,
        ),
    ]


def _node_text(node: TreeNode) -> Text:
    text = Text(node.label, style=_ICON_STYLES.get(node.icon, ""))
    if node.description:
        text.append(f"  {node.description}", style="dim")
    return text
