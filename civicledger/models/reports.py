"""Report intake, registry and verification result models."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from civicledger.models.block import Identity, ReportStatus, Urgency


class ChainStatus(str, Enum):
    """Health label reported for the whole chain."""

    HEALTHY = "HEALTHY"
    COMPROMISED = "COMPROMISED"


class SubmissionLocation(BaseModel):
    """Location as entered by the citizen; every field is required."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    area: str = Field(min_length=1)
    address: str = Field(min_length=1)
    nearest_station: str = Field(min_length=1)


class ReportSubmission(BaseModel):
    """Untrusted report input, validated before anything is hashed or sealed.

    ``description`` and ``evidence`` hold raw content. They are hashed by
    the intake service and never reach the chain in the clear.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    category: str = Field(min_length=1)
    urgency: Urgency
    description: str = Field(min_length=10)
    identity: Identity
    citizen_id: str | None = None
    location: SubmissionLocation
    evidence: list[str] = []  # content references, hashed on intake
    authorities: list[str] = []
    ai_summary: str | None = None
    is_emergency: bool = False

    @field_validator("urgency")
    @classmethod
    def _no_sentinel_urgency(cls, value: Urgency) -> Urgency:
        if value is Urgency.NONE:
            raise ValueError("urgency must be one of Critical, High, Medium, Low")
        return value


class SubmissionReceipt(BaseModel):
    """What the citizen gets back after a successful submission."""

    model_config = ConfigDict(frozen=True)

    report_id: str
    reference_id: str
    block_index: int
    block_hash: str
    status: ReportStatus
    chain_length: int
    submitted_at: datetime


class ReportRecord(BaseModel):
    """Queryable report metadata held outside the chain."""

    model_config = ConfigDict(frozen=True)

    report_id: str
    reference_id: str
    block_index: int
    block_hash: str
    category: str
    urgency: Urgency
    description_hash: str
    identity: Identity
    citizen_id: str | None = None
    status: ReportStatus = ReportStatus.PENDING
    location_area: str
    location_address: str
    nearest_station: str
    is_emergency: bool = False
    ai_summary: str | None = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class AuditEvent(BaseModel):
    """One row of the report audit trail."""

    model_config = ConfigDict(frozen=True)

    event_type: str  # REPORT_SUBMITTED, STATUS_UPDATED, SNAPSHOT_FAILED
    report_id: str | None = None
    actor: str
    details: str = ""
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class ChainVerification(BaseModel):
    """Outcome of a full chain scan.

    ``failed_index`` and ``reason`` are set only when ``valid`` is False.
    Reasons: ``hash_mismatch``, ``link_broken``, ``index_mismatch``,
    ``genesis_mismatch``, ``empty``.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool
    checked_blocks: int
    failed_index: int | None = None
    reason: str | None = None


class ChainHealth(BaseModel):
    """Chain metadata for health/integrity queries."""

    model_config = ConfigDict(frozen=True)

    status: ChainStatus
    chain_length: int
    latest_block_index: int
    latest_block_hash: str
    last_updated: datetime
    persisted_blocks: int | None = None  # blocks in the stored snapshot


class BlockDetails(BaseModel):
    """The sealed identity of a single block."""

    model_config = ConfigDict(frozen=True)

    index: int
    hash: str
    previous_hash: str
    timestamp: datetime
    nonce: int
    data_hash: str  # digest of the canonical payload


class ReportVerification(BaseModel):
    """Answer to "is this report on the ledger, and is the ledger intact"."""

    model_config = ConfigDict(frozen=True)

    report_id: str
    chain_integrity: ChainStatus
    block: BlockDetails


class ReportDetails(BaseModel):
    """A registry record together with its audit trail."""

    model_config = ConfigDict(frozen=True)

    record: ReportRecord
    audit_trail: tuple[AuditEvent, ...] = ()
