"""CLI commands: riskscan results / reveal — read the persisted panel state."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console

from riskscan.config import RiskScanConfig
from riskscan.events import EventBus
from riskscan.host import ConsoleHost
from riskscan.storage.db import get_db
from riskscan.storage.repos import StateRepo
from riskscan.views.panel import PanelAdapter
from riskscan.views.tree import REVEAL_COMMAND, NodeKind, TreeNode
from riskscan.workspace import Workspace

console = Console(stderr=True)


async def _load_panel(config: RiskScanConfig) -> PanelAdapter:
    db = await get_db(config.db_path)
    try:
        panel = PanelAdapter(EventBus(), StateRepo(db))
        await panel.initialize()
        return panel
    finally:
        await db.close()


@click.command()
def results() -> None:
    """Show the results of the last scan without re-scanning."""
    config = RiskScanConfig.load()
    panel = asyncio.run(_load_panel(config))
    state = panel.state

    if not state.findings:
        console.print("[green]No stored findings.[/green]")
        return

    console.print(panel.render())
    if state.scanning:
        console.print("[yellow]The last scan did not finish.[/yellow]")


@click.command()
@click.argument("index", type=int)
@click.pass_context
def reveal(ctx: click.Context, index: int) -> None:
    """Open finding INDEX (1-based, as listed by `results`) in $EDITOR."""
    config = RiskScanConfig.load()
    workspace_dir = ctx.obj.get("workspace", ".")
    if not asyncio.run(_reveal(workspace_dir, config, index)):
        ctx.exit(1)


async def _reveal(workspace_dir: str, config: RiskScanConfig, index: int) -> bool:
    workspace = await Workspace.open(workspace_dir, config, ConsoleHost(console))
    try:
        findings = workspace.panel.state.findings
        if not 1 <= index <= len(findings):
            raise click.BadParameter(
                f"expected 1..{len(findings)}", param_hint="INDEX"
            )
        finding = findings[index - 1]
        node = TreeNode(
            id=f"finding-{index - 1}",
            label=finding.label,
            kind=NodeKind.FINDING,
            command=REVEAL_COMMAND,
            finding=finding,
        )
        return await workspace.execute(REVEAL_COMMAND, node)
    finally:
        await workspace.close()
