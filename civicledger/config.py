"""Runtime configuration, env-driven.

Reads from a .env file and CIVICLEDGER_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Ledger configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export CIVICLEDGER_DIFFICULTY=3
        export CIVICLEDGER_LOG_LEVEL=DEBUG
        export CIVICLEDGER_SNAPSHOT_PATH=/data/chain.db
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="CIVICLEDGER_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Proof-of-work cost; expected attempts per block are about 16 ** difficulty
    difficulty: int = Field(default=2, ge=1, le=8)

    # Storage paths
    snapshot_path: Path = Path(".civicledger/chain.db")
    registry_path: Path = Path(".civicledger/reports.db")


# Module-level singleton: import as `from civicledger.config import config`
config = LedgerConfig()
