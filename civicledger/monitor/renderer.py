"""Rich terminal rendering for chain health, blocks and receipts.

Color scheme
------------
- green     : HEALTHY chain, PENDING/RESOLVED reports
- bold red  : COMPROMISED chain, Critical urgency
- yellow    : UNDER_REVIEW, High urgency
- dim       : genesis block, DISMISSED reports
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from civicledger.models.block import Block, ReportStatus, Urgency
from civicledger.models.reports import (
    ChainHealth,
    ChainStatus,
    ReportDetails,
    ReportRecord,
    ReportVerification,
    SubmissionReceipt,
)


# ---------------------------------------------------------------------------
# Value -> Rich style mapping
# ---------------------------------------------------------------------------

_URGENCY_STYLES: dict[Urgency, str] = {
    Urgency.CRITICAL: "bold red",
    Urgency.HIGH: "yellow",
    Urgency.MEDIUM: "cyan",
    Urgency.LOW: "green",
    Urgency.NONE: "dim",
}

_STATUS_ICONS: dict[ReportStatus, str] = {
    ReportStatus.PENDING: "[green]PENDING[/green]",
    ReportStatus.UNDER_REVIEW: "[yellow]UNDER REVIEW[/yellow]",
    ReportStatus.RESOLVED: "[bold green]RESOLVED[/bold green]",
    ReportStatus.DISMISSED: "[dim]DISMISSED[/dim]",
}


def _chain_status_markup(status: ChainStatus) -> str:
    if status is ChainStatus.HEALTHY:
        return "[green]HEALTHY[/green]"
    return "[bold red]COMPROMISED[/bold red]"


class ChainRenderer:
    """Renders chain state as Rich renderables.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_health(self, health: ChainHealth) -> Panel:
        """Render chain health as a Panel."""
        if health.status is ChainStatus.HEALTHY:
            message = "Chain is intact and all records are tamper-evident."
            border = "green"
        else:
            message = "CRITICAL: chain integrity check failed!"
            border = "red"

        lines = [
            f"[bold]Status:[/bold]       {_chain_status_markup(health.status)}",
            f"[bold]Blocks:[/bold]       {health.chain_length}",
            f"[bold]Latest index:[/bold] {health.latest_block_index}",
            f"[bold]Latest hash:[/bold]  {health.latest_block_hash}",
            f"[bold]Last updated:[/bold] "
            f"{health.last_updated.strftime('%Y-%m-%d %H:%M:%S UTC')}",
        ]
        if health.persisted_blocks is not None:
            lines.append(f"[bold]Persisted:[/bold]    {health.persisted_blocks}")
            # Genesis is rebuilt on startup, so only later blocks need a snapshot.
            if health.chain_length > 1 and health.persisted_blocks < health.chain_length:
                lines.append(
                    "[yellow]WARNING: "
                    f"{health.chain_length - health.persisted_blocks} block(s) "
                    "not yet durable.[/yellow]"
                )
        lines += ["", f"[dim]{message}[/dim]"]
        return Panel(
            "\n".join(lines),
            title="[bold]Civicledger Chain Health[/bold]",
            border_style=border,
            padding=(1, 2),
        )

    def render_blocks(self, blocks: Iterable[Block], *, valid: bool | None = None) -> Table:
        """Render blocks as a Table, one row per block."""
        caption = None
        if valid is not None:
            caption = "Chain: [green]valid[/green]" if valid else "Chain: [bold red]BROKEN[/bold red]"

        table = Table(
            show_header=True,
            header_style="bold cyan",
            expand=True,
            caption=caption,
        )
        table.add_column("#", style="dim", width=5, justify="right")
        table.add_column("Report", min_width=12)
        table.add_column("Category")
        table.add_column("Urgency", justify="center")
        table.add_column("Status", justify="center")
        table.add_column("Nonce", justify="right")
        table.add_column("Hash", min_width=18)

        for block in blocks:
            data = block.data
            style = _URGENCY_STYLES.get(data.urgency, "")
            table.add_row(
                str(block.index),
                data.report_id if block.index else f"[dim]{data.report_id}[/dim]",
                data.category,
                f"[{style}]{data.urgency.value}[/{style}]",
                _STATUS_ICONS.get(data.status, data.status.value),
                str(block.nonce),
                f"{block.hash[:16]}...",
            )
        return table

    def render_receipt(self, receipt: SubmissionReceipt) -> Panel:
        """Render a submission receipt as a Panel."""
        lines = [
            "[bold green]Report recorded on the chain.[/bold green]",
            "",
            f"[bold]Reference:[/bold]   {receipt.reference_id}",
            f"[bold]Report ID:[/bold]   {receipt.report_id}",
            f"[bold]Block:[/bold]       #{receipt.block_index}",
            f"[bold]Block hash:[/bold]  {receipt.block_hash}",
            f"[bold]Status:[/bold]      {_STATUS_ICONS[receipt.status]}",
            f"[bold]Chain length:[/bold] {receipt.chain_length}",
            f"[bold]Submitted:[/bold]   "
            f"{receipt.submitted_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
        ]
        return Panel(
            "\n".join(lines),
            title="[bold]Civicledger[/bold]",
            border_style="green",
            padding=(1, 2),
        )

    def render_verification(self, verification: ReportVerification) -> Panel:
        """Render a report verification as a Panel."""
        block = verification.block
        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Report", verification.report_id)
        table.add_row("Block", f"#{block.index}")
        table.add_row("Hash", block.hash)
        table.add_row("Previous hash", block.previous_hash)
        table.add_row("Nonce", str(block.nonce))
        table.add_row("Sealed at", block.timestamp.strftime("%Y-%m-%d %H:%M:%S UTC"))
        table.add_row("Data hash", block.data_hash)

        intact = verification.chain_integrity is ChainStatus.HEALTHY
        if intact:
            message = "Report verified on the chain. Chain integrity is intact."
        else:
            message = "WARNING: chain integrity check failed. Data may have been tampered with."

        return Panel(
            Group(table, Text(""), Text.from_markup(
                f"[bold]Chain:[/bold] {_chain_status_markup(verification.chain_integrity)}"
                f"  |  [dim]{message}[/dim]"
            )),
            title="[bold]Report Verification[/bold]",
            border_style="green" if intact else "red",
            padding=(1, 2),
        )

    def render_reports(self, records: Iterable[ReportRecord]) -> Table:
        """Render registry records as a Table, newest first."""
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Reference", min_width=12)
        table.add_column("Category")
        table.add_column("Urgency", justify="center")
        table.add_column("Status", justify="center")
        table.add_column("Created")

        for record in records:
            style = _URGENCY_STYLES.get(record.urgency, "")
            table.add_row(
                record.reference_id,
                record.category,
                f"[{style}]{record.urgency.value}[/{style}]",
                _STATUS_ICONS[record.status],
                record.created_at.strftime("%Y-%m-%d"),
            )
        return table

    def render_report(self, details: ReportDetails) -> Panel:
        """Render one report with its audit trail as a Panel."""
        record = details.record
        fields = Table(show_header=False, box=None, pad_edge=False)
        fields.add_column("Field", style="bold")
        fields.add_column("Value")
        fields.add_row("Reference", record.reference_id)
        fields.add_row("Report", record.report_id)
        fields.add_row("Category", record.category)
        fields.add_row("Urgency", record.urgency.value)
        fields.add_row("Status", _STATUS_ICONS[record.status])
        fields.add_row("Identity", record.identity.value)
        fields.add_row(
            "Location",
            f"{record.location_address}, {record.location_area} "
            f"({record.nearest_station})",
        )
        fields.add_row("Block", f"#{record.block_index}  {record.block_hash[:16]}...")
        if record.is_emergency:
            fields.add_row("Emergency", "[bold red]yes[/bold red]")

        trail = Table(show_header=True, header_style="bold", expand=True, title="Audit trail")
        trail.add_column("When")
        trail.add_column("Event")
        trail.add_column("Actor")
        trail.add_column("Details")
        for event in details.audit_trail:
            trail.add_row(
                event.created_at.strftime("%Y-%m-%d %H:%M"),
                event.event_type,
                event.actor,
                event.details,
            )

        return Panel(
            Group(fields, Text(""), trail),
            title="[bold]Report[/bold]",
            border_style="cyan",
            padding=(1, 2),
        )
