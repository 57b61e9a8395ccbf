"""``civicledger health``: chain integrity and metadata."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from civicledger.cli.commands._service import open_service
from civicledger.models.reports import ChainStatus
from civicledger.monitor.renderer import ChainRenderer

console = Console()


def health_cmd(
    chain_db: Path = typer.Option(None, "--chain-db", help="Chain snapshot database."),
    registry_db: Path = typer.Option(None, "--registry-db", help="Report registry database."),
) -> None:
    """Show chain health. Exits 1 if the chain is compromised."""
    intake = open_service(chain_db, registry_db)
    health = intake.health()
    console.print(ChainRenderer(console=console).render_health(health))
    if health.status is not ChainStatus.HEALTHY:
        raise typer.Exit(code=1)
