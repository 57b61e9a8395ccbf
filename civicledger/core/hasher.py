"""Canonical hashing helpers for block sealing and privacy hashing.

Block hashes are SHA-256 over canonical JSON bytes. The canonical form
is fixed here and nowhere else, so the sealing path (mining) and the
verifying path (chain validation) always produce identical bytes.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

from civicledger.models.block import BlockPayload

# Bump when the canonical block encoding changes; it is part of every hash.
CANONICAL_ENCODING = "civicledger/v1"


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes: deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def digest(text: str) -> str:
    """SHA-256 of a single opaque string (description, evidence reference).

    This is the privacy hash: callers store the result, never the text.
    """
    return sha256_hex(text.encode("utf-8"))


def canonical_payload(payload: BlockPayload) -> dict[str, Any]:
    """JSON-mode dump of a payload with unset optional fields omitted."""
    return payload.model_dump(mode="json", exclude_none=True)


def compute_payload_hash(payload: BlockPayload) -> str:
    """SHA-256 of the canonical payload alone."""
    return sha256_hex(canonical_json_bytes(canonical_payload(payload)))


def compute_block_hash(
    index: int,
    timestamp: int,
    data: BlockPayload,
    previous_hash: str,
    nonce: int,
) -> str:
    """SHA-256 of canonical(index, timestamp, data, previous_hash, nonce)."""
    content = {
        "encoding": CANONICAL_ENCODING,
        "index": index,
        "timestamp": timestamp,
        "data": canonical_payload(data),
        "previous_hash": previous_hash,
        "nonce": nonce,
    }
    return sha256_hex(canonical_json_bytes(content))
