"""Shared test fixtures for Civicledger."""

from __future__ import annotations

from collections.abc import Callable
from itertools import count
from pathlib import Path
from typing import Any

import pytest

from civicledger.core.chain import ReportChain
from civicledger.core.hasher import digest
from civicledger.core.intake import ReportIntake
from civicledger.core.report_registry import ReportRegistry
from civicledger.core.snapshot_store import SqliteSnapshotStore
from civicledger.models.block import BlockPayload, Identity, Location, Urgency
from civicledger.models.reports import ReportSubmission

# Low difficulty keeps mining fast; the predicate is the same at any level.
TEST_DIFFICULTY = 2


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test databases."""
    return tmp_path


@pytest.fixture
def clock() -> Callable[[], int]:
    """Deterministic clock: one second later on every call."""
    ticks = count(start=1_720_000_000_000, step=1_000)
    return lambda: next(ticks)


@pytest.fixture
def chain(clock: Callable[[], int]) -> ReportChain:
    """Provide a fresh, genesis-only ReportChain."""
    return ReportChain(difficulty=TEST_DIFFICULTY, clock=clock)


@pytest.fixture
def snapshot_store(tmp_dir: Path) -> SqliteSnapshotStore:
    """Provide a SqliteSnapshotStore backed by a temp database."""
    return SqliteSnapshotStore(tmp_dir / "chain.db")


@pytest.fixture
def registry(tmp_dir: Path) -> ReportRegistry:
    """Provide a ReportRegistry backed by a temp database."""
    return ReportRegistry(tmp_dir / "reports.db")


@pytest.fixture
def intake(
    chain: ReportChain,
    snapshot_store: SqliteSnapshotStore,
    registry: ReportRegistry,
) -> ReportIntake:
    """Provide a ReportIntake wired to the test chain, store and registry."""
    return ReportIntake(chain, snapshot_store, registry)


# ---------------------------------------------------------------------------
# Factories: shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_payload() -> Callable[..., BlockPayload]:
    """Factory fixture: build a BlockPayload with sensible defaults."""

    def _factory(report_id: str = "R1", **overrides: Any) -> BlockPayload:
        defaults: dict[str, Any] = {
            "report_id": report_id,
            "category": "Infrastructure",
            "urgency": Urgency.MEDIUM,
            "location": Location(
                area="Andheri East",
                address="MIDC Road, near Gate 3",
                nearest_station="MIDC Police Station",
            ),
            "description_hash": digest("broken streetlight"),
            "evidence_hashes": [],
            "identity": Identity.ANONYMOUS,
            "timestamp": 1_720_000_000_000,
            "authority_routed": ["Municipal Corporation"],
        }
        defaults.update(overrides)
        return BlockPayload(**defaults)

    return _factory


@pytest.fixture
def make_submission() -> Callable[..., ReportSubmission]:
    """Factory fixture: build a ReportSubmission with sensible defaults."""

    def _factory(**overrides: Any) -> ReportSubmission:
        defaults: dict[str, Any] = {
            "category": "Infrastructure",
            "urgency": "Medium",
            "description": "pothole near the park, about a metre wide",
            "identity": "anonymous",
            "location": {
                "area": "Koramangala",
                "address": "80 Feet Road",
                "nearest_station": "Koramangala Police Station",
            },
            "evidence": ["evidence://photo-1.jpg"],
            "authorities": ["BBMP Roads"],
        }
        defaults.update(overrides)
        return ReportSubmission(**defaults)

    return _factory


@pytest.fixture
def seeded_chain(
    chain: ReportChain, make_payload: Callable[..., BlockPayload]
) -> ReportChain:
    """A chain holding genesis plus four report blocks."""
    for i in range(1, 5):
        chain.append(make_payload(report_id=f"R{i}", category=f"Category {i}"))
    return chain
