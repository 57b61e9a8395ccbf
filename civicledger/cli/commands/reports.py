"""``civicledger reports``: list reports from the registry."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from civicledger.cli.commands._service import open_service
from civicledger.models.block import ReportStatus, Urgency
from civicledger.monitor.renderer import ChainRenderer

console = Console()


def reports_cmd(
    status: str = typer.Option(
        None, "--status", "-s", help="PENDING, UNDER_REVIEW, RESOLVED or DISMISSED."
    ),
    urgency: str = typer.Option(
        None, "--urgency", "-u", help="Critical, High, Medium or Low."
    ),
    limit: int = typer.Option(50, "--limit", "-n", min=1, help="Maximum rows to show."),
    offset: int = typer.Option(0, "--offset", min=0, help="Rows to skip."),
    chain_db: Path = typer.Option(None, "--chain-db", help="Chain snapshot database."),
    registry_db: Path = typer.Option(None, "--registry-db", help="Report registry database."),
) -> None:
    """List reports, newest first."""
    try:
        status_filter = ReportStatus(status.upper()) if status else None
    except ValueError:
        console.print(f"[bold red]Invalid status:[/bold red] {status}")
        raise typer.Exit(code=2)
    try:
        urgency_filter = Urgency(urgency.capitalize()) if urgency else None
    except ValueError:
        console.print(f"[bold red]Invalid urgency:[/bold red] {urgency}")
        raise typer.Exit(code=2)

    intake = open_service(chain_db, registry_db)
    records = intake.list_reports(
        status=status_filter, urgency=urgency_filter, limit=limit, offset=offset
    )
    if not records:
        console.print("[dim]No reports found.[/dim]")
        return

    console.print(ChainRenderer(console=console).render_reports(records))
    console.print(f"[dim]{len(records)} report(s) shown[/dim]")
