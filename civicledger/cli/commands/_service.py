"""Shared wiring for CLI commands: settings overrides -> ReportIntake."""

from __future__ import annotations

from pathlib import Path

from civicledger.config import LedgerConfig, config
from civicledger.core.bootstrap import open_intake
from civicledger.core.intake import ReportIntake


def open_service(
    chain_db: Path | None = None,
    registry_db: Path | None = None,
    difficulty: int | None = None,
) -> ReportIntake:
    """Open the intake service, overriding configured paths where given.

    Overrides go through settings validation, so an out-of-range
    ``difficulty`` raises ``ValidationError``.
    """
    overrides: dict[str, object] = {}
    if chain_db is not None:
        overrides["snapshot_path"] = Path(chain_db)
    if registry_db is not None:
        overrides["registry_path"] = Path(registry_db)
    if difficulty is not None:
        overrides["difficulty"] = difficulty
    settings = (
        LedgerConfig.model_validate({**config.model_dump(), **overrides})
        if overrides
        else config
    )
    return open_intake(settings)
