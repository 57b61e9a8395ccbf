"""``civicledger status REPORT_ID STATUS``: update a report's status.

Status lives in the report registry. The sealed block is not touched.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from civicledger.cli.commands._service import open_service
from civicledger.core.report_registry import InvalidStatusTransition, ReportNotFoundError
from civicledger.models.block import ReportStatus

console = Console()


def status_cmd(
    report_id: str = typer.Argument(..., help="Report id or reference id."),
    status: str = typer.Argument(
        ..., help="PENDING, UNDER_REVIEW, RESOLVED or DISMISSED."
    ),
    actor: str = typer.Option("ADMIN", "--actor", help="Who made the change."),
    chain_db: Path = typer.Option(None, "--chain-db", help="Chain snapshot database."),
    registry_db: Path = typer.Option(None, "--registry-db", help="Report registry database."),
) -> None:
    """Move a report to a new status."""
    try:
        target = ReportStatus(status.upper())
    except ValueError:
        console.print(f"[bold red]Invalid status:[/bold red] {status}")
        raise typer.Exit(code=2)

    intake = open_service(chain_db, registry_db)
    try:
        record = intake.update_status(report_id, target, actor=actor)
    except ReportNotFoundError:
        console.print(f"[bold red]Report not found:[/bold red] {report_id}")
        raise typer.Exit(code=1)
    except InvalidStatusTransition as exc:
        console.print(f"[bold red]Rejected:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(
        f"Report [cyan]{record.reference_id}[/cyan] status updated to "
        f"[bold]{record.status.value}[/bold]"
    )
