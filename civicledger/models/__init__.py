"""Civicledger data models: all Pydantic v2, all frozen (immutable)."""

from civicledger.models.block import (
    ZERO_DIGEST,
    Block,
    BlockPayload,
    Digest,
    Identity,
    Location,
    ReportStatus,
    Urgency,
)
from civicledger.models.reports import (
    AuditEvent,
    BlockDetails,
    ChainHealth,
    ChainStatus,
    ChainVerification,
    ReportDetails,
    ReportRecord,
    ReportSubmission,
    ReportVerification,
    SubmissionLocation,
    SubmissionReceipt,
)

__all__ = [
    # block
    "Digest",
    "ZERO_DIGEST",
    "Urgency",
    "Identity",
    "ReportStatus",
    "Location",
    "BlockPayload",
    "Block",
    # reports
    "ChainStatus",
    "SubmissionLocation",
    "ReportSubmission",
    "SubmissionReceipt",
    "ReportRecord",
    "AuditEvent",
    "ChainVerification",
    "ChainHealth",
    "BlockDetails",
    "ReportVerification",
    "ReportDetails",
]
