"""``civicledger verify REPORT_ID``: check a report is sealed on the chain."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from civicledger.cli.commands._service import open_service
from civicledger.models.reports import ChainStatus
from civicledger.monitor.renderer import ChainRenderer

console = Console()


def verify_cmd(
    report_id: str = typer.Argument(..., help="Report id or reference id."),
    chain_db: Path = typer.Option(None, "--chain-db", help="Chain snapshot database."),
    registry_db: Path = typer.Option(None, "--registry-db", help="Report registry database."),
) -> None:
    """Verify a report on the chain.

    Exits 1 if the report is not on the chain or the chain is compromised.
    """
    intake = open_service(chain_db, registry_db)
    verification = intake.verify_report(report_id)
    if verification is None:
        console.print(f"[bold red]Report not found on the chain:[/bold red] {report_id}")
        raise typer.Exit(code=1)

    console.print(ChainRenderer(console=console).render_verification(verification))
    if verification.chain_integrity is not ChainStatus.HEALTHY:
        raise typer.Exit(code=1)
