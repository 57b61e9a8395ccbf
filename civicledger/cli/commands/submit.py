"""``civicledger submit``: submit a civic report and seal it on the chain.

The description is hashed before it reaches the chain; only the digest
is stored.
"""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from civicledger.cli.commands._service import open_service
from civicledger.core.snapshot_store import SnapshotSaveError
from civicledger.models.reports import ReportSubmission
from civicledger.monitor.renderer import ChainRenderer

console = Console()


def submit_cmd(
    category: str = typer.Option(..., "--category", "-c", help="Report category."),
    urgency: str = typer.Option(
        "Medium", "--urgency", "-u", help="Critical, High, Medium or Low."
    ),
    description: str = typer.Option(
        ..., "--description", "-d", help="What happened (hashed, never stored)."
    ),
    area: str = typer.Option(..., "--area", help="Area or locality."),
    address: str = typer.Option(..., "--address", help="Street address."),
    station: str = typer.Option(..., "--station", help="Nearest police station."),
    identity: str = typer.Option(
        "anonymous", "--identity", "-i", help="'named' or 'anonymous'."
    ),
    citizen_id: str = typer.Option(
        None, "--citizen-id", help="Citizen id (named reports only)."
    ),
    evidence: list[str] = typer.Option(
        None, "--evidence", "-e", help="Evidence reference; repeatable, hashed."
    ),
    authority: list[str] = typer.Option(
        None, "--authority", "-a", help="Authority to route to; repeatable."
    ),
    emergency: bool = typer.Option(False, "--emergency", help="Flag as emergency."),
    chain_db: Path = typer.Option(None, "--chain-db", help="Chain snapshot database."),
    registry_db: Path = typer.Option(None, "--registry-db", help="Report registry database."),
    difficulty: int = typer.Option(
        None, "--difficulty", min=1, max=8, help="Mining difficulty override (1-8)."
    ),
) -> None:
    """Submit a report, mine its block and print the receipt."""
    try:
        submission = ReportSubmission(
            category=category,
            urgency=urgency,
            description=description,
            identity=identity,
            citizen_id=citizen_id,
            location={"area": area, "address": address, "nearest_station": station},
            evidence=evidence or [],
            authorities=authority or [],
            is_emergency=emergency,
        )
    except ValidationError as exc:
        console.print("[bold red]Invalid report:[/bold red]")
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"])
            console.print(f"  [red]{field}[/red]: {error['msg']}")
        raise typer.Exit(code=2)

    intake = open_service(chain_db, registry_db, difficulty)
    try:
        receipt = intake.submit(submission)
    except SnapshotSaveError as exc:
        console.print(f"[bold red]Snapshot save failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print()
    console.print(ChainRenderer(console=console).render_receipt(receipt))
    console.print()

    # Print the report id plainly for scripting
    console.print(receipt.report_id)
