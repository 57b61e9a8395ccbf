"""Main Typer application: imports and registers all CLI commands.

Entry point: ``civicledger`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer

from civicledger.cli.commands.chain_cmd import chain_cmd
from civicledger.cli.commands.health import health_cmd
from civicledger.cli.commands.reports import reports_cmd
from civicledger.cli.commands.show import show_cmd
from civicledger.cli.commands.status import status_cmd
from civicledger.cli.commands.submit import submit_cmd
from civicledger.cli.commands.verify import verify_cmd
from civicledger.config import config

app = typer.Typer(
    name="civicledger",
    help="Civicledger: tamper-evident ledger for civic incident reports.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="submit", help="Submit a report and seal it on the chain.")(submit_cmd)
app.command(name="verify", help="Verify a report on the chain.")(verify_cmd)
app.command(name="health", help="Show chain integrity and metadata.")(health_cmd)
app.command(name="chain", help="List the blocks on the chain.")(chain_cmd)
app.command(name="status", help="Update a report's status.")(status_cmd)
app.command(name="reports", help="List reports from the registry.")(reports_cmd)
app.command(name="show", help="Show a report and its audit trail.")(show_cmd)


@app.callback()
def _configure(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (default from CIVICLEDGER_LOG_LEVEL)."
    ),
) -> None:
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
