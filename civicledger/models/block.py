"""Block and payload models for the civic report chain.

A block seals one report submission. Blocks are frozen once built:
later status changes live in the report registry, never in the chain.

Privacy rules are carried by the types:
- ``description_hash`` and ``evidence_hashes`` are ``Digest`` values, so
  raw citizen text cannot be placed where a digest is expected.
- An anonymous payload cannot carry a ``citizen_id``.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

# Lowercase hex SHA-256 digest, as produced by core.hasher.digest().
Digest = Annotated[str, StringConstraints(pattern=r"^[0-9a-f]{64}$")]

ZERO_DIGEST = "0" * 64


class Urgency(str, Enum):
    """Urgency level recorded with a report."""

    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    NONE = "NONE"  # genesis only


class Identity(str, Enum):
    """Whether the citizen chose to be named on the report."""

    NAMED = "named"
    ANONYMOUS = "anonymous"


class ReportStatus(str, Enum):
    """Report status as recorded at sealing time."""

    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


class Location(BaseModel):
    """Routing/display location. Plain text, not hashed."""

    model_config = ConfigDict(frozen=True)

    area: str
    address: str
    nearest_station: str


class BlockPayload(BaseModel):
    """The report data sealed inside a block."""

    model_config = ConfigDict(frozen=True)

    report_id: str
    category: str
    urgency: Urgency
    location: Location
    description_hash: Digest
    evidence_hashes: tuple[Digest, ...] = ()
    identity: Identity
    citizen_id: str | None = None  # named reports only
    timestamp: int  # epoch milliseconds
    authority_routed: tuple[str, ...] = ()
    status: ReportStatus = ReportStatus.PENDING

    @model_validator(mode="after")
    def _anonymous_has_no_citizen(self) -> BlockPayload:
        if self.identity is Identity.ANONYMOUS and self.citizen_id is not None:
            raise ValueError("anonymous reports must not carry a citizen_id")
        return self


class Block(BaseModel):
    """One sealed, hash-linked unit of the chain."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    timestamp: int  # epoch milliseconds
    data: BlockPayload
    previous_hash: Digest
    hash: Digest
    nonce: int = Field(default=0, ge=0)
