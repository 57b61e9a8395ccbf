"""Append-only, hash-chained, proof-of-work sealed report chain.

The chain is the historical record of report submissions. It proves that
a report with a given category, urgency, location and content digest was
submitted at a given time and has not been altered since.

Design:
- Append-only: ``append()`` is the only write; blocks are never modified.
- Hash-chained: each block stores the hash of its predecessor.
- Never empty: the genesis block is created at construction.
- Integrity is a result, not an exception: ``verify()`` / ``is_valid()``
  report tampering, ``load_and_validate()`` refuses unverified chains.
- Single writer: every public method holds the chain lock, so appends
  are serialized and readers never see a half-appended chain.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator

from civicledger.core.hasher import compute_block_hash
from civicledger.core.mining import mine
from civicledger.models.block import (
    ZERO_DIGEST,
    Block,
    BlockPayload,
    Identity,
    Location,
    ReportStatus,
    Urgency,
)
from civicledger.models.reports import ChainVerification

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = 2

# 2024-01-01T00:00:00Z in epoch milliseconds.
GENESIS_TIMESTAMP = 1_704_067_200_000
GENESIS_REPORT_ID = "GENESIS"


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ReportChain:
    """In-memory report chain owned by a single writer.

    Parameters
    ----------
    difficulty:
        Number of leading ``'0'`` characters a mined block hash must have.
    clock:
        Returns the current instant in epoch milliseconds. Defaults to
        the system clock.
    """

    def __init__(
        self,
        difficulty: int = DEFAULT_DIFFICULTY,
        clock: Callable[[], int] | None = None,
    ) -> None:
        if difficulty < 0:
            raise ValueError(f"difficulty must be >= 0, got {difficulty}")
        self._difficulty = difficulty
        self._clock = clock or _now_ms
        self._lock = threading.RLock()
        self._blocks: list[Block] = [self.genesis_block()]

    # ------------------------------------------------------------------
    # Genesis
    # ------------------------------------------------------------------

    @staticmethod
    def genesis_block() -> Block:
        """Build the fixed genesis block. Same inputs, same hash, every time."""
        data = BlockPayload(
            report_id=GENESIS_REPORT_ID,
            category="SYSTEM",
            urgency=Urgency.NONE,
            location=Location(area="India", address="Origin", nearest_station="N/A"),
            description_hash=ZERO_DIGEST,
            evidence_hashes=(),
            identity=Identity.ANONYMOUS,
            timestamp=GENESIS_TIMESTAMP,
            authority_routed=(),
            status=ReportStatus.RESOLVED,
        )
        return Block(
            index=0,
            timestamp=GENESIS_TIMESTAMP,
            data=data,
            previous_hash=ZERO_DIGEST,
            hash=compute_block_hash(0, GENESIS_TIMESTAMP, data, ZERO_DIGEST, 0),
            nonce=0,
        )

    # ------------------------------------------------------------------
    # Core: append-only write
    # ------------------------------------------------------------------

    @property
    def difficulty(self) -> int:
        return self._difficulty

    def now_ms(self) -> int:
        """Current instant from the chain clock, epoch milliseconds."""
        return self._clock()

    def append(self, payload: BlockPayload) -> Block:
        """Mine a block for ``payload`` and append it to the chain.

        Returns the sealed block. This is the ONLY write method.
        """
        with self._lock:
            previous = self._blocks[-1]
            index = previous.index + 1
            timestamp = self._clock()
            block_hash, nonce = mine(
                index, timestamp, payload, previous.hash, self._difficulty
            )
            block = Block(
                index=index,
                timestamp=timestamp,
                data=payload,
                previous_hash=previous.hash,
                hash=block_hash,
                nonce=nonce,
            )
            self._blocks.append(block)

        logger.info(
            "Appended block %d for report %s (nonce=%d, hash=%s)",
            block.index,
            payload.report_id,
            nonce,
            block_hash[:16],
        )
        return block

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def latest(self) -> Block:
        """Return the most recent block. Never fails: genesis always exists."""
        with self._lock:
            return self._blocks[-1]

    def length(self) -> int:
        """Number of blocks, genesis included."""
        with self._lock:
            return len(self._blocks)

    def __len__(self) -> int:
        return self.length()

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    @property
    def blocks(self) -> tuple[Block, ...]:
        """Read-only view of the whole chain."""
        with self._lock:
            return tuple(self._blocks)

    def find_by_report_id(self, report_id: str) -> Block | None:
        """Return the first block sealing ``report_id``, or None."""
        with self._lock:
            for block in self._blocks:
                if block.data.report_id == report_id:
                    return block
        return None

    def export_snapshot(self) -> tuple[Block, ...]:
        """Full chain, in order, for the persistence adapter."""
        return self.blocks

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify(self) -> ChainVerification:
        """Walk the chain, recompute every hash and check every link.

        Fails fast on the first bad block.
        """
        with self._lock:
            return self._verify_blocks(self._blocks, require_genesis=False)

    def is_valid(self) -> bool:
        return self.verify().valid

    def load_and_validate(self, candidate: Iterable[Block]) -> bool:
        """Adopt ``candidate`` as the active chain only if it verifies.

        On failure the chain active before the call is kept unchanged.
        """
        candidate_blocks = list(candidate)
        with self._lock:
            result = self._verify_blocks(candidate_blocks, require_genesis=True)
            if not result.valid:
                logger.error(
                    "Refusing to load chain of %d blocks: %s at block %s. "
                    "Keeping current chain of %d blocks.",
                    len(candidate_blocks),
                    result.reason,
                    result.failed_index,
                    len(self._blocks),
                )
                return False
            self._blocks = candidate_blocks

        logger.info("Loaded chain of %d blocks", len(candidate_blocks))
        return True

    @classmethod
    def _verify_blocks(
        cls, blocks: list[Block], *, require_genesis: bool
    ) -> ChainVerification:
        if not blocks:
            logger.error("Chain is empty; a valid chain always holds genesis")
            return ChainVerification(
                valid=False, checked_blocks=0, failed_index=0, reason="empty"
            )

        # A chain built in memory always starts from genesis; a loaded one must prove it.
        if require_genesis and blocks[0] != cls.genesis_block():
            logger.error("Block 0 is not the genesis block. TAMPERING DETECTED.")
            return ChainVerification(
                valid=False, checked_blocks=1, failed_index=0, reason="genesis_mismatch"
            )

        if blocks[0].index != 0:
            logger.error("Block 0 carries index %d. TAMPERING DETECTED.", blocks[0].index)
            return ChainVerification(
                valid=False, checked_blocks=1, failed_index=0, reason="index_mismatch"
            )

        for i in range(1, len(blocks)):
            current = blocks[i]
            previous = blocks[i - 1]

            # Indices run 0..N-1 with no gaps or repeats.
            if current.index != i:
                logger.error(
                    "Block at position %d carries index %d. TAMPERING DETECTED.",
                    i,
                    current.index,
                )
                return ChainVerification(
                    valid=False, checked_blocks=i + 1, failed_index=i, reason="index_mismatch"
                )

            recomputed = compute_block_hash(
                current.index,
                current.timestamp,
                current.data,
                current.previous_hash,
                current.nonce,
            )
            if current.hash != recomputed:
                logger.error("Block %d hash mismatch. TAMPERING DETECTED.", i)
                return ChainVerification(
                    valid=False, checked_blocks=i + 1, failed_index=i, reason="hash_mismatch"
                )

            if current.previous_hash != previous.hash:
                logger.error("Block %d chain link broken. TAMPERING DETECTED.", i)
                return ChainVerification(
                    valid=False, checked_blocks=i + 1, failed_index=i, reason="link_broken"
                )

        return ChainVerification(valid=True, checked_blocks=len(blocks))
