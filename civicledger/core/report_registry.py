"""Queryable report metadata and audit trail, backed by SQLite.

The chain records each submission once and is never rewritten. Everything
that changes after submission (status, reviewer actions) lives here.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from civicledger.models.block import ReportStatus, Urgency
from civicledger.models.reports import AuditEvent, ReportRecord


# Report status lifecycle. Terminal states have no outgoing transitions.
VALID_STATUS_TRANSITIONS: dict[ReportStatus, set[ReportStatus]] = {
    ReportStatus.PENDING: {ReportStatus.UNDER_REVIEW},
    ReportStatus.UNDER_REVIEW: {ReportStatus.RESOLVED, ReportStatus.DISMISSED},
    ReportStatus.RESOLVED: set(),
    ReportStatus.DISMISSED: set(),
}


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_REPORTS = """
CREATE TABLE IF NOT EXISTS reports (
    report_id        TEXT PRIMARY KEY,
    reference_id     TEXT NOT NULL UNIQUE,
    block_index      INTEGER NOT NULL,
    block_hash       TEXT NOT NULL,
    category         TEXT NOT NULL,
    urgency          TEXT NOT NULL,
    description_hash TEXT NOT NULL,
    identity         TEXT NOT NULL,
    citizen_id       TEXT,
    status           TEXT NOT NULL,
    location_area    TEXT NOT NULL,
    location_address TEXT NOT NULL,
    nearest_station  TEXT NOT NULL,
    is_emergency     INTEGER NOT NULL DEFAULT 0,
    ai_summary       TEXT,
    created_at       TEXT NOT NULL,
    updated_at       TEXT NOT NULL
);
"""

_CREATE_AUDIT = """
CREATE TABLE IF NOT EXISTS audit_log (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    event_type  TEXT NOT NULL,
    report_id   TEXT,
    actor       TEXT NOT NULL,
    details     TEXT NOT NULL DEFAULT '',
    created_at  TEXT NOT NULL
);
"""

_CREATE_IDX_STATUS = """
CREATE INDEX IF NOT EXISTS idx_reports_status ON reports(status, urgency);
"""

_REPORT_COLUMNS = (
    "report_id, reference_id, block_index, block_hash, category, urgency, "
    "description_hash, identity, citizen_id, status, location_area, "
    "location_address, nearest_station, is_emergency, ai_summary, "
    "created_at, updated_at"
)


class ReportNotFoundError(LookupError):
    """Raised when a registry operation names an unknown report."""


class InvalidStatusTransition(RuntimeError):
    """Raised when a requested status change is not allowed."""


class ReportRegistry:
    """SQLite store for report metadata and the audit log.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_REPORTS)
            conn.execute(_CREATE_AUDIT)
            conn.execute(_CREATE_IDX_STATUS)
            conn.commit()

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def insert_report(self, record: ReportRecord) -> None:
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO reports ({_REPORT_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.report_id,
                    record.reference_id,
                    record.block_index,
                    record.block_hash,
                    record.category,
                    record.urgency.value,
                    record.description_hash,
                    record.identity.value,
                    record.citizen_id,
                    record.status.value,
                    record.location_area,
                    record.location_address,
                    record.nearest_station,
                    int(record.is_emergency),
                    record.ai_summary,
                    record.created_at.isoformat(),
                    record.updated_at.isoformat(),
                ),
            )
            conn.commit()

    def get_report(self, report_id: str) -> ReportRecord | None:
        """Return a report by id or by reference id, or None."""
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_REPORT_COLUMNS} FROM reports "
                "WHERE report_id = ? OR reference_id = ?",
                (report_id, report_id),
            ).fetchone()
        return self._row_to_record(row) if row else None

    def list_reports(
        self,
        *,
        status: ReportStatus | None = None,
        urgency: Urgency | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ReportRecord]:
        """Newest first, optionally filtered by status and urgency."""
        clauses: list[str] = []
        params: list[object] = []
        if status is not None:
            clauses.append("status = ?")
            params.append(ReportStatus(status).value)
        if urgency is not None:
            clauses.append("urgency = ?")
            params.append(Urgency(urgency).value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.extend([limit, offset])
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_REPORT_COLUMNS} FROM reports {where} "
                "ORDER BY created_at DESC, block_index DESC LIMIT ? OFFSET ?",
                params,
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def update_status(self, report_id: str, status: ReportStatus) -> ReportRecord:
        """Move a report to ``status``, enforcing the status lifecycle.

        Returns the updated record.
        """
        current = self.get_report(report_id)
        if current is None:
            raise ReportNotFoundError(f"Report not found: {report_id}")

        target = ReportStatus(status)
        if target not in VALID_STATUS_TRANSITIONS[current.status]:
            raise InvalidStatusTransition(
                f"Cannot move report {current.report_id} from "
                f"{current.status.value} to {target.value}"
            )

        updated_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                "UPDATE reports SET status = ?, updated_at = ? WHERE report_id = ?",
                (target.value, updated_at.isoformat(), current.report_id),
            )
            conn.commit()
        return current.model_copy(update={"status": target, "updated_at": updated_at})

    # ------------------------------------------------------------------
    # Audit trail
    # ------------------------------------------------------------------

    def log_audit(self, event: AuditEvent) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO audit_log (event_type, report_id, actor, details, created_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    event.event_type,
                    event.report_id,
                    event.actor,
                    event.details,
                    event.created_at.isoformat(),
                ),
            )
            conn.commit()

    def get_audit_log(self, report_id: str | None = None) -> list[AuditEvent]:
        """Audit events in insertion order, optionally for one report."""
        query = "SELECT event_type, report_id, actor, details, created_at FROM audit_log"
        params: tuple[str, ...] = ()
        if report_id is not None:
            query += " WHERE report_id = ?"
            params = (report_id,)
        with self._connect() as conn:
            rows = conn.execute(query + " ORDER BY id ASC", params).fetchall()
        return [
            AuditEvent(
                event_type=event_type,
                report_id=rid,
                actor=actor,
                details=details,
                created_at=created_at,
            )
            for event_type, rid, actor, details, created_at in rows
        ]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_record(row: tuple) -> ReportRecord:
        (
            report_id,
            reference_id,
            block_index,
            block_hash,
            category,
            urgency,
            description_hash,
            identity,
            citizen_id,
            status,
            location_area,
            location_address,
            nearest_station,
            is_emergency,
            ai_summary,
            created_at,
            updated_at,
        ) = row
        return ReportRecord(
            report_id=report_id,
            reference_id=reference_id,
            block_index=block_index,
            block_hash=block_hash,
            category=category,
            urgency=urgency,
            description_hash=description_hash,
            identity=identity,
            citizen_id=citizen_id,
            status=status,
            location_area=location_area,
            location_address=location_address,
            nearest_station=nearest_station,
            is_emergency=bool(is_emergency),
            ai_summary=ai_summary,
            created_at=created_at,
            updated_at=updated_at,
        )
