"""Process startup: build the chain and restore it from its snapshot."""

from __future__ import annotations

import logging

from civicledger.config import LedgerConfig
from civicledger.core.chain import ReportChain
from civicledger.core.intake import ReportIntake
from civicledger.core.report_registry import ReportRegistry
from civicledger.core.snapshot_store import (
    SnapshotCorruptError,
    SnapshotStore,
    SqliteSnapshotStore,
)

logger = logging.getLogger(__name__)


def restore_chain(chain: ReportChain, store: SnapshotStore) -> bool:
    """Load the persisted snapshot into ``chain`` if it verifies.

    Returns True if a snapshot was adopted. A missing snapshot leaves the
    genesis-only chain in place; a corrupt or tampered one leaves the
    current chain in place and is logged as critical.
    """
    try:
        saved = store.load()
    except SnapshotCorruptError as exc:
        logger.error("CRITICAL: chain snapshot is unreadable, starting fresh: %s", exc)
        restored = False
    else:
        if saved is None:
            logger.info("No chain snapshot found; starting with the genesis block")
            restored = False
        else:
            restored = chain.load_and_validate(saved)
            if restored:
                logger.info("Chain restored: %d blocks", len(saved))
            else:
                logger.error(
                    "CRITICAL: stored chain failed verification; the durable "
                    "record disagrees with itself. Starting fresh."
                )

    if chain.is_valid():
        logger.info("Chain integrity verified (%d blocks)", chain.length())
    else:
        logger.error("CRITICAL: chain integrity check FAILED on startup")
    return restored


def open_intake(settings: LedgerConfig) -> ReportIntake:
    """Wire chain, snapshot store and registry from settings and restore state."""
    chain = ReportChain(difficulty=settings.difficulty)
    store = SqliteSnapshotStore(settings.snapshot_path)
    registry = ReportRegistry(settings.registry_path)
    restore_chain(chain, store)
    return ReportIntake(chain, store, registry)
