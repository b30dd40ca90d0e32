"""CLI command: riskscan scan — run a full dependency + code scan."""

from __future__ import annotations

import asyncio
import sys

import click
from rich.console import Console

from riskscan.config import RiskScanConfig
from riskscan.host import ConsoleHost
from riskscan.scanner.models import RiskScore, ScanSummary
from riskscan.views.tree import START_SCAN_COMMAND
from riskscan.workspace import Workspace

console = Console(stderr=True)


@click.command()
@click.pass_context
def scan(ctx: click.Context) -> None:
    """Scan manifests and source files with the remote analyzer."""
    workspace_dir = ctx.obj.get("workspace", ".")
    config = RiskScanConfig.load()
    config.verbose = ctx.obj.get("verbose", False)

    console.print(
        f"[bold]riskscan[/bold] scanning [cyan]{workspace_dir}[/cyan] "
        f"with model [cyan]{config.model}[/cyan]\n"
    )

    summary, workspace = asyncio.run(_run(workspace_dir, config))
    if summary is None:
        console.print("[yellow]A scan is already running.[/yellow]")
        return

    console.print(workspace.tree.render())
    _print_summary(summary)

    high_count = sum(
        1 for f in workspace.panel.state.findings if f.risk_score is RiskScore.HIGH
    )
    if high_count > 0:
        console.print(f"\n[red]{high_count} high-risk finding(s)[/red]")
        sys.exit(1)


async def _run(
    workspace_dir: str, config: RiskScanConfig
) -> tuple[ScanSummary | None, Workspace]:
    workspace = await Workspace.open(workspace_dir, config, ConsoleHost(console))
    try:
        summary = await workspace.execute(START_SCAN_COMMAND)
    finally:
        await workspace.close()
    return summary, workspace


def _print_summary(summary: ScanSummary) -> None:
    console.print(
        f"\nAnalyzed {summary.dependencies} dependencies and "
        f"{summary.files_scanned} files "
        f"({summary.files_failed} failed) "
        f"in {summary.duration:.2f}s"
    )
    console.print(f"Total findings: {summary.findings}")
