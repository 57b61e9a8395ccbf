"""``civicledger chain``: list the blocks on the chain."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from civicledger.cli.commands._service import open_service
from civicledger.monitor.renderer import ChainRenderer

console = Console()


def chain_cmd(
    limit: int = typer.Option(
        50, "--limit", "-n", help="Show at most this many of the latest blocks."
    ),
    chain_db: Path = typer.Option(None, "--chain-db", help="Chain snapshot database."),
    registry_db: Path = typer.Option(None, "--registry-db", help="Report registry database."),
) -> None:
    """Print the chain as a table, newest blocks last."""
    intake = open_service(chain_db, registry_db)
    blocks = intake.chain.blocks[-limit:] if limit > 0 else intake.chain.blocks
    console.print(
        ChainRenderer(console=console).render_blocks(blocks, valid=intake.chain.is_valid())
    )
    console.print(f"[dim]{intake.chain.length()} blocks total[/dim]")
