"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from riskscan import __version__


@click.group()
@click.version_option(version=__version__, prog_name="riskscan")
@click.option(
    "--workspace",
    "-w",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    show_default=True,
    help="Workspace root to scan.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, workspace: str, verbose: bool) -> None:
    """riskscan — LLM-assisted dependency and source-code risk scanner."""
    ctx.ensure_object(dict)
    ctx.obj["workspace"] = workspace
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from riskscan.cli.results import results, reveal  # noqa: F811
    from riskscan.cli.scan import scan  # noqa: F811

    main.add_command(scan)
    main.add_command(results)
    main.add_command(reveal)


_register_commands()
