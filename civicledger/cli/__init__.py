"""Civicledger CLI: Typer-based command-line interface.

Provides the ``civicledger`` command with subcommands for submitting
reports, verifying them on the chain, checking chain health, listing
blocks and updating report status.

All output uses Rich for formatted terminal display.
"""
