"""Tests for ReportChain: genesis, append, lookup, verify, load."""

from __future__ import annotations

import threading

import pytest

from civicledger.core.chain import GENESIS_TIMESTAMP, ReportChain
from civicledger.core.hasher import compute_block_hash, digest
from civicledger.models.block import Identity, ReportStatus, Urgency, ZERO_DIGEST


class TestGenesis:
    def test_fresh_chain_has_only_genesis(self, chain: ReportChain):
        assert chain.length() == 1
        assert chain.latest().index == 0

    def test_genesis_is_deterministic(self):
        assert ReportChain().latest().hash == ReportChain().latest().hash
        assert ReportChain.genesis_block() == ReportChain.genesis_block()

    def test_genesis_independent_of_difficulty_and_clock(self):
        a = ReportChain(difficulty=1, clock=lambda: 1)
        b = ReportChain(difficulty=3, clock=lambda: 2)
        assert a.latest() == b.latest()

    def test_genesis_fields(self):
        genesis = ReportChain.genesis_block()
        assert genesis.index == 0
        assert genesis.nonce == 0
        assert genesis.timestamp == GENESIS_TIMESTAMP
        assert genesis.previous_hash == ZERO_DIGEST
        assert genesis.data.report_id == "GENESIS"
        assert genesis.data.category == "SYSTEM"
        assert genesis.data.urgency is Urgency.NONE
        assert genesis.data.identity is Identity.ANONYMOUS
        assert genesis.data.status is ReportStatus.RESOLVED
        assert genesis.data.evidence_hashes == ()

    def test_genesis_hash_follows_hashing_rule(self):
        genesis = ReportChain.genesis_block()
        assert genesis.hash == compute_block_hash(
            0, genesis.timestamp, genesis.data, genesis.previous_hash, 0
        )

    def test_negative_difficulty_rejected(self):
        with pytest.raises(ValueError):
            ReportChain(difficulty=-1)


class TestAppend:
    def test_append_returns_linked_block(self, chain: ReportChain, make_payload):
        genesis = chain.latest()
        block = chain.append(make_payload())
        assert block.index == 1
        assert block.previous_hash == genesis.hash
        assert chain.latest() == block

    def test_indices_are_contiguous(self, chain: ReportChain, make_payload):
        for i in range(1, 8):
            chain.append(make_payload(report_id=f"R{i}"))
        assert [b.index for b in chain.blocks] == list(range(8))
        assert chain.length() == 8
        assert len(chain) == 8

    def test_every_link_holds(self, seeded_chain: ReportChain):
        blocks = seeded_chain.blocks
        for previous, current in zip(blocks, blocks[1:]):
            assert current.previous_hash == previous.hash

    def test_proof_of_work_on_every_non_genesis_block(self, seeded_chain: ReportChain):
        for block in seeded_chain.blocks[1:]:
            assert block.hash.startswith("0" * seeded_chain.difficulty)

    def test_timestamp_from_clock(self, make_payload):
        chain = ReportChain(difficulty=1, clock=lambda: 1_750_000_000_123)
        assert chain.append(make_payload()).timestamp == 1_750_000_000_123

    def test_existing_blocks_untouched(self, chain: ReportChain, make_payload):
        first = chain.append(make_payload(report_id="R1"))
        before = chain.blocks
        chain.append(make_payload(report_id="R2"))
        assert chain.blocks[: len(before)] == before
        assert chain.blocks[1] is first

    def test_concurrent_appends_stay_linked(self, chain: ReportChain, make_payload):
        payloads = [make_payload(report_id=f"T{i}") for i in range(12)]
        threads = [threading.Thread(target=chain.append, args=(p,)) for p in payloads]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert chain.length() == 13
        assert [b.index for b in chain.blocks] == list(range(13))
        assert chain.is_valid()


class TestLookup:
    def test_find_by_report_id(self, seeded_chain: ReportChain):
        block = seeded_chain.find_by_report_id("R3")
        assert block is not None
        assert block.index == 3

    def test_find_unknown_returns_none(self, seeded_chain: ReportChain):
        assert seeded_chain.find_by_report_id("does-not-exist") is None

    def test_find_genesis(self, chain: ReportChain):
        assert chain.find_by_report_id("GENESIS") == chain.latest()

    def test_find_returns_first_match(self, chain: ReportChain, make_payload):
        first = chain.append(make_payload(report_id="DUP"))
        chain.append(make_payload(report_id="DUP", category="Other"))
        assert chain.find_by_report_id("DUP") == first

    def test_blocks_is_read_only_view(self, seeded_chain: ReportChain):
        view = seeded_chain.blocks
        assert isinstance(view, tuple)
        assert seeded_chain.export_snapshot() == view
        assert list(seeded_chain) == list(view)

    def test_snapshot_blocks_cannot_be_changed_in_place(self, seeded_chain: ReportChain):
        block = seeded_chain.export_snapshot()[1]
        assert isinstance(block.data.evidence_hashes, tuple)
        assert isinstance(block.data.authority_routed, tuple)
        with pytest.raises(AttributeError):
            block.data.evidence_hashes.append(digest("evidence://planted.jpg"))
        with pytest.raises(AttributeError):
            block.data.authority_routed.append("Someone Else")
        assert seeded_chain.is_valid()

    def test_loaded_blocks_stay_sealed(self, seeded_chain: ReportChain):
        candidate = list(seeded_chain.export_snapshot())
        fresh = ReportChain(difficulty=seeded_chain.difficulty)
        assert fresh.load_and_validate(candidate)
        candidate.pop()
        with pytest.raises(AttributeError):
            candidate[1].data.evidence_hashes.append(digest("x"))
        assert fresh.length() == 5
        assert fresh.is_valid()


class TestVerify:
    def test_fresh_chain_valid(self, chain: ReportChain):
        assert chain.is_valid()
        result = chain.verify()
        assert result.valid
        assert result.checked_blocks == 1
        assert result.failed_index is None

    def test_seeded_chain_valid(self, seeded_chain: ReportChain):
        result = seeded_chain.verify()
        assert result.valid
        assert result.checked_blocks == 5

    def test_reports_first_bad_block(self, seeded_chain: ReportChain):
        tampered = seeded_chain._blocks[2].model_copy(update={"nonce": 999_999})
        seeded_chain._blocks[2] = tampered
        result = seeded_chain.verify()
        assert not result.valid
        assert result.failed_index == 2
        assert result.reason == "hash_mismatch"


class TestLoadAndValidate:
    def test_round_trip(self, seeded_chain: ReportChain):
        snapshot = seeded_chain.export_snapshot()
        assert seeded_chain.load_and_validate(snapshot) is True
        assert seeded_chain.export_snapshot() == snapshot

    def test_load_into_fresh_chain(self, seeded_chain: ReportChain):
        fresh = ReportChain(difficulty=seeded_chain.difficulty)
        assert fresh.load_and_validate(seeded_chain.export_snapshot())
        assert fresh.length() == 5
        assert fresh.latest() == seeded_chain.latest()

    def test_appends_continue_after_load(self, seeded_chain: ReportChain, make_payload):
        fresh = ReportChain(difficulty=1)
        fresh.load_and_validate(seeded_chain.export_snapshot())
        block = fresh.append(make_payload(report_id="R5"))
        assert block.index == 5
        assert block.previous_hash == seeded_chain.latest().hash
        assert fresh.is_valid()

    def test_empty_candidate_rejected(self, seeded_chain: ReportChain):
        before = seeded_chain.blocks
        assert seeded_chain.load_and_validate([]) is False
        assert seeded_chain.blocks == before

    def test_foreign_genesis_rejected(self, chain: ReportChain, make_payload):
        other = ReportChain.genesis_block().model_copy(update={"timestamp": 0})
        assert chain.load_and_validate([other]) is False
        assert chain.latest() == ReportChain.genesis_block()
