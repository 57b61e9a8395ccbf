"""Report intake: validate, privacy-hash, seal, persist.

Flow for one submission:
1. ``ReportSubmission`` has already validated the untrusted input.
2. Description and evidence are replaced by their digests.
3. The payload is mined and appended to the chain.
4. The chain snapshot is saved.
5. Queryable metadata and an audit event go to the registry.

The raw description never leaves this module.
"""

from __future__ import annotations

import logging
import secrets
import threading
import uuid
from datetime import datetime, timezone

from civicledger.core.chain import ReportChain
from civicledger.core.hasher import compute_payload_hash, digest
from civicledger.core.report_registry import ReportNotFoundError, ReportRegistry
from civicledger.core.snapshot_store import SnapshotSaveError, SnapshotStore
from civicledger.models.block import (
    Block,
    BlockPayload,
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
    ReportDetails,
    ReportRecord,
    ReportSubmission,
    ReportVerification,
    SubmissionReceipt,
)

logger = logging.getLogger(__name__)


def new_reference_id() -> str:
    """Citizen-facing reference, e.g. ``#IND-48213-X``."""
    return f"#IND-{10000 + secrets.randbelow(90000)}-X"


def _ms_to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


class ReportIntake:
    """Accepts report submissions and answers verification queries.

    Parameters
    ----------
    chain:
        The report chain this service appends to. The service is its
        single writer.
    store:
        Snapshot persistence for the chain.
    registry:
        Report metadata and audit trail.
    """

    def __init__(
        self,
        chain: ReportChain,
        store: SnapshotStore,
        registry: ReportRegistry,
    ) -> None:
        self._chain = chain
        self._store = store
        self._registry = registry
        # Serializes append + snapshot so snapshots are saved in chain order.
        self._write_lock = threading.Lock()

    @property
    def chain(self) -> ReportChain:
        return self._chain

    @property
    def registry(self) -> ReportRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def build_payload(self, report_id: str, submission: ReportSubmission) -> BlockPayload:
        """Turn a validated submission into a chain payload.

        Raw text is hashed here. An anonymous submission's ``citizen_id``
        is dropped rather than rejected.
        """
        citizen_id = submission.citizen_id
        if submission.identity is Identity.ANONYMOUS and citizen_id is not None:
            logger.info(
                "Dropping citizen_id from anonymous report %s before sealing",
                report_id,
            )
            citizen_id = None

        return BlockPayload(
            report_id=report_id,
            category=submission.category,
            urgency=submission.urgency,
            location=Location(
                area=submission.location.area,
                address=submission.location.address,
                nearest_station=submission.location.nearest_station,
            ),
            description_hash=digest(submission.description),
            evidence_hashes=tuple(digest(ref) for ref in submission.evidence),
            identity=submission.identity,
            citizen_id=citizen_id,
            timestamp=self._chain.now_ms(),
            authority_routed=tuple(submission.authorities),
            status=ReportStatus.PENDING,
        )

    def submit(self, submission: ReportSubmission) -> SubmissionReceipt:
        """Seal a submission on the chain and record its metadata.

        If saving the snapshot fails, the block stays appended in memory,
        a ``SNAPSHOT_FAILED`` audit event is written and
        ``SnapshotSaveError`` is raised.
        """
        report_id = str(uuid.uuid4())
        reference_id = new_reference_id()
        payload = self.build_payload(report_id, submission)

        with self._write_lock:
            block = self._chain.append(payload)
            try:
                self._store.save(self._chain.export_snapshot())
            except Exception as exc:
                logger.error(
                    "Snapshot save failed after appending block %d: %s",
                    block.index,
                    exc,
                )
                self._registry.log_audit(AuditEvent(
                    event_type="SNAPSHOT_FAILED",
                    report_id=report_id,
                    actor="SYSTEM",
                    details=f"Block {block.index} not yet durable: {exc}",
                ))
                raise SnapshotSaveError(
                    f"Block {block.index} sealed in memory but not durable: {exc}"
                ) from exc

        self._registry.insert_report(ReportRecord(
            report_id=report_id,
            reference_id=reference_id,
            block_index=block.index,
            block_hash=block.hash,
            category=payload.category,
            urgency=payload.urgency,
            description_hash=payload.description_hash,
            identity=payload.identity,
            citizen_id=payload.citizen_id,
            status=payload.status,
            location_area=payload.location.area,
            location_address=payload.location.address,
            nearest_station=payload.location.nearest_station,
            is_emergency=submission.is_emergency,
            ai_summary=submission.ai_summary,
        ))
        if payload.identity is Identity.ANONYMOUS:
            actor = "ANONYMOUS"
        else:
            actor = payload.citizen_id or "CITIZEN"
        self._registry.log_audit(AuditEvent(
            event_type="REPORT_SUBMITTED",
            report_id=report_id,
            actor=actor,
            details=f"New {payload.urgency.value} urgency report in category: {payload.category}",
        ))

        return SubmissionReceipt(
            report_id=report_id,
            reference_id=reference_id,
            block_index=block.index,
            block_hash=block.hash,
            status=payload.status,
            chain_length=self._chain.length(),
            submitted_at=_ms_to_datetime(block.timestamp),
        )

    # ------------------------------------------------------------------
    # Status (registry only; sealed blocks are never rewritten)
    # ------------------------------------------------------------------

    def update_status(
        self, report_id: str, status: ReportStatus, *, actor: str = "ADMIN"
    ) -> ReportRecord:
        previous = self._registry.get_report(report_id)
        if previous is None:
            raise ReportNotFoundError(f"Report not found: {report_id}")
        updated = self._registry.update_status(previous.report_id, status)
        self._registry.log_audit(AuditEvent(
            event_type="STATUS_UPDATED",
            report_id=updated.report_id,
            actor=actor,
            details=f"Status changed from {previous.status.value} to {updated.status.value}",
        ))
        return updated

    # ------------------------------------------------------------------
    # Registry queries
    # ------------------------------------------------------------------

    def list_reports(
        self,
        *,
        status: ReportStatus | None = None,
        urgency: Urgency | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ReportRecord]:
        """Registry records, newest first, optionally filtered."""
        return self._registry.list_reports(
            status=status, urgency=urgency, limit=limit, offset=offset
        )

    def get_report(self, report_id: str) -> ReportDetails:
        """Record and audit trail for a report id or reference id.

        Raises ``ReportNotFoundError`` if the registry has no such report.
        """
        record = self._registry.get_report(report_id)
        if record is None:
            raise ReportNotFoundError(f"Report not found: {report_id}")
        return ReportDetails(
            record=record,
            audit_trail=tuple(self._registry.get_audit_log(record.report_id)),
        )

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify_report(self, report_id: str) -> ReportVerification | None:
        """Look a report up on the chain; None if it is not there.

        Accepts a chain report id or a registry reference id.
        """
        block = self._chain.find_by_report_id(report_id)
        if block is None:
            record = self._registry.get_report(report_id)
            if record is not None:
                block = self._chain.find_by_report_id(record.report_id)
        if block is None:
            logger.warning("Report %s not found on chain", report_id)
            return None

        return ReportVerification(
            report_id=block.data.report_id,
            chain_integrity=self._chain_status(),
            block=self.block_details(block),
        )

    def health(self) -> ChainHealth:
        latest = self._chain.latest()
        return ChainHealth(
            status=self._chain_status(),
            chain_length=self._chain.length(),
            latest_block_index=latest.index,
            latest_block_hash=latest.hash,
            last_updated=_ms_to_datetime(latest.timestamp),
            persisted_blocks=self._store.block_count(),
        )

    @staticmethod
    def block_details(block: Block) -> BlockDetails:
        return BlockDetails(
            index=block.index,
            hash=block.hash,
            previous_hash=block.previous_hash,
            timestamp=_ms_to_datetime(block.timestamp),
            nonce=block.nonce,
            data_hash=compute_payload_hash(block.data),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _chain_status(self) -> ChainStatus:
        return ChainStatus.HEALTHY if self._chain.is_valid() else ChainStatus.COMPROMISED
