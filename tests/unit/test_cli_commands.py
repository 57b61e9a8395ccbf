"""Unit tests for the CLI: Typer command registration and behavior."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError
from typer.testing import CliRunner

from civicledger.cli.app import app
from civicledger.cli.commands._service import open_service
from civicledger.core.snapshot_store import SqliteSnapshotStore

runner = CliRunner()


@pytest.fixture
def db_args(tmp_dir: Path) -> list[str]:
    return [
        "--chain-db", str(tmp_dir / "chain.db"),
        "--registry-db", str(tmp_dir / "reports.db"),
    ]


def _submit(db_args: list[str], *extra: str):
    return runner.invoke(app, [
        "submit",
        "--category", "Infrastructure",
        "--urgency", "High",
        "--description", "broken streetlight on the main road",
        "--area", "Andheri East",
        "--address", "MIDC Road",
        "--station", "MIDC Police Station",
        "--difficulty", "1",
        *extra,
        *db_args,
    ])


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for name in ("submit", "verify", "health", "chain", "status", "reports", "show"):
            assert name in result.output

    @pytest.mark.parametrize(
        "name", ["submit", "verify", "health", "chain", "status", "reports", "show"]
    )
    def test_command_help(self, name):
        assert runner.invoke(app, [name, "--help"]).exit_code == 0


# ---------------------------------------------------------------------------
# Test: command behavior
# ---------------------------------------------------------------------------


class TestCommands:
    def test_submit_then_verify(self, db_args):
        result = _submit(db_args)
        assert result.exit_code == 0, result.output
        report_id = result.output.strip().splitlines()[-1]

        verified = runner.invoke(app, ["verify", report_id, *db_args])
        assert verified.exit_code == 0, verified.output
        assert "HEALTHY" in verified.output

    def test_submit_invalid_urgency(self, db_args):
        result = _submit(db_args, "--urgency", "Whenever")
        assert result.exit_code == 2
        assert "Invalid report" in result.output

    def test_verify_unknown(self, db_args):
        result = runner.invoke(app, ["verify", "no-such-report", *db_args])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_health_fresh(self, db_args):
        result = runner.invoke(app, ["health", *db_args])
        assert result.exit_code == 0
        assert "HEALTHY" in result.output

    def test_chain_lists_blocks(self, db_args):
        _submit(db_args)
        result = runner.invoke(app, ["chain", *db_args])
        assert result.exit_code == 0
        assert "GENESIS" in result.output
        assert "2 blocks total" in result.output

    def test_status_update(self, db_args):
        report_id = _submit(db_args).output.strip().splitlines()[-1]
        result = runner.invoke(app, ["status", report_id, "under_review", *db_args])
        assert result.exit_code == 0, result.output
        assert "UNDER_REVIEW" in result.output

    def test_status_rejected_transition(self, db_args):
        report_id = _submit(db_args).output.strip().splitlines()[-1]
        result = runner.invoke(app, ["status", report_id, "RESOLVED", *db_args])
        assert result.exit_code == 1
        assert "Rejected" in result.output

    def test_status_invalid_value(self, db_args):
        result = runner.invoke(app, ["status", "x", "ESCALATED", *db_args])
        assert result.exit_code == 2

    def test_submit_difficulty_out_of_range(self, db_args):
        result = _submit(db_args, "--difficulty", "20")
        assert result.exit_code == 2
        result = _submit(db_args, "--difficulty", "0")
        assert result.exit_code == 2

    def test_open_service_validates_overrides(self, tmp_dir: Path):
        with pytest.raises(ValidationError):
            open_service(tmp_dir / "chain.db", tmp_dir / "reports.db", difficulty=-1)

    def test_submit_snapshot_failure(self, db_args, monkeypatch):
        def _fail(self, blocks):
            raise OSError("disk full")

        monkeypatch.setattr(SqliteSnapshotStore, "save", _fail)
        result = _submit(db_args)
        assert result.exit_code == 1
        assert "not durable" in result.output
        assert "Traceback" not in result.output

    def test_reports_lists_and_filters(self, db_args):
        _submit(db_args)
        _submit(db_args, "--urgency", "Low", "--category", "Sanitation")

        result = runner.invoke(app, ["reports", *db_args])
        assert result.exit_code == 0, result.output
        assert "Infrastructure" in result.output
        assert "Sanitation" in result.output
        assert "2 report(s) shown" in result.output

        low = runner.invoke(app, ["reports", "--urgency", "low", *db_args])
        assert low.exit_code == 0, low.output
        assert "Sanitation" in low.output
        assert "Infrastructure" not in low.output

    def test_reports_empty_and_invalid_filter(self, db_args):
        empty = runner.invoke(app, ["reports", "--status", "resolved", *db_args])
        assert empty.exit_code == 0
        assert "No reports found" in empty.output
        bad = runner.invoke(app, ["reports", "--urgency", "Whenever", *db_args])
        assert bad.exit_code == 2

    def test_show_report(self, db_args):
        report_id = _submit(db_args).output.strip().splitlines()[-1]
        runner.invoke(app, ["status", report_id, "UNDER_REVIEW", *db_args])
        result = runner.invoke(app, ["show", report_id, *db_args])
        assert result.exit_code == 0, result.output
        assert "REPORT_SUBMITTED" in result.output
        assert "STATUS_UPDATED" in result.output

    def test_show_unknown(self, db_args):
        result = runner.invoke(app, ["show", "no-such-report", *db_args])
        assert result.exit_code == 1
        assert "not found" in result.output
