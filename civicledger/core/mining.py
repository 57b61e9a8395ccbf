"""Proof-of-work for new blocks.

The difficulty is a small tunable cost, not a security boundary: the
chain has a single writer. Expected work is about ``16 ** difficulty``
hash computations per block.
"""

from __future__ import annotations

import logging

from civicledger.core.hasher import compute_block_hash
from civicledger.models.block import BlockPayload

logger = logging.getLogger(__name__)


def difficulty_prefix(difficulty: int) -> str:
    return "0" * difficulty


def meets_difficulty(block_hash: str, difficulty: int) -> bool:
    """True if the hash starts with ``difficulty`` zero characters."""
    return block_hash.startswith(difficulty_prefix(difficulty))


def mine(
    index: int,
    timestamp: int,
    payload: BlockPayload,
    previous_hash: str,
    difficulty: int,
) -> tuple[str, int]:
    """Search nonce = 0, 1, 2, ... until the block hash meets the difficulty.

    Returns ``(hash, nonce)``.
    """
    if difficulty < 0:
        raise ValueError(f"difficulty must be >= 0, got {difficulty}")

    prefix = difficulty_prefix(difficulty)
    nonce = 0
    block_hash = compute_block_hash(index, timestamp, payload, previous_hash, nonce)
    while not block_hash.startswith(prefix):
        nonce += 1
        block_hash = compute_block_hash(index, timestamp, payload, previous_hash, nonce)

    logger.debug(
        "Mined block %d at difficulty %d after %d attempts",
        index,
        difficulty,
        nonce + 1,
    )
    return block_hash, nonce
