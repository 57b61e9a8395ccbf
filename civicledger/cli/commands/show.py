"""``civicledger show REPORT_ID``: one report and its audit trail."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from civicledger.cli.commands._service import open_service
from civicledger.core.report_registry import ReportNotFoundError
from civicledger.monitor.renderer import ChainRenderer

console = Console()


def show_cmd(
    report_id: str = typer.Argument(..., help="Report id or reference id."),
    chain_db: Path = typer.Option(None, "--chain-db", help="Chain snapshot database."),
    registry_db: Path = typer.Option(None, "--registry-db", help="Report registry database."),
) -> None:
    """Show a report's registry record and audit trail."""
    intake = open_service(chain_db, registry_db)
    try:
        details = intake.get_report(report_id)
    except ReportNotFoundError:
        console.print(f"[bold red]Report not found:[/bold red] {report_id}")
        raise typer.Exit(code=1)

    console.print(ChainRenderer(console=console).render_report(details))
