"""End-to-end ingestion runs against a SQLite database."""

import os

from sqlalchemy import func, select

from policyhub.core.constants import PipelineStatus, StepStatus
from policyhub.db.models import IngestionRun, Policy
from policyhub.pipeline import BatchFailure, IngestionReport, PipelineContext, PipelineEngine
from policyhub.pipeline.errors import ParseError
from policyhub.pipeline.ingest import run_ingestion
from policyhub.pipeline.step import PipelineStep

from conftest import POLICY_HEADERS, write_csv, write_xlsx


async def _policy_count(session_factory) -> int:
    async with session_factory() as session:
        return int((await session.execute(select(func.count()).select_from(Policy))).scalar_one())


class TestIngestionReport:
    async def test_batch_with_repeated_policy_number(self, session_factory, policy_csv):
        outcome = await run_ingestion(str(policy_csv), "csv", session_factory=session_factory)

        assert isinstance(outcome, IngestionReport)
        assert outcome.total_records == 3
        assert outcome.successful_inserts == 3
        assert outcome.errors == []
        assert outcome.summary == {
            "agents": 1,
            "users": 2,
            "user_accounts": 2,
            "policy_categories": 1,
            "policy_carriers": 1,
            "policies": 2,
        }
        assert not os.path.exists(policy_csv)
        assert await _policy_count(session_factory) == 2

    async def test_reingesting_creates_nothing_new(self, tmp_path, session_factory, policy_rows):
        first = write_csv(tmp_path / "first.csv", POLICY_HEADERS, policy_rows)
        await run_ingestion(str(first), "csv", session_factory=session_factory)

        again = write_csv(tmp_path / "again.csv", POLICY_HEADERS, policy_rows)
        outcome = await run_ingestion(str(again), "csv", session_factory=session_factory)

        assert outcome.successful_inserts == 3
        assert outcome.summary["policies"] == 0
        assert outcome.summary["users"] == 2
        assert await _policy_count(session_factory) == 2

    async def test_row_without_carrier_fails_alone(self, tmp_path, session_factory, policy_rows):
        policy_rows[0][5] = ""
        path = write_csv(tmp_path / "partial.csv", POLICY_HEADERS, policy_rows)

        outcome = await run_ingestion(str(path), "csv", session_factory=session_factory)

        assert outcome.total_records == 3
        assert outcome.successful_inserts == 2
        assert [e.row for e in outcome.errors] == [1]
        assert "carrier" in outcome.errors[0].error
        assert outcome.errors[0].data["Policy Number"] == "POL-001"
        # row 3 reuses POL-001, which row 1 never created
        assert outcome.summary["policies"] == 2

    async def test_invalid_policy_dates_are_row_errors(self, tmp_path, session_factory, policy_rows):
        policy_rows[1][7], policy_rows[1][8] = "2025-02-01", "2024-02-01"
        path = write_csv(tmp_path / "dates.csv", POLICY_HEADERS, policy_rows)

        outcome = await run_ingestion(str(path), "csv", session_factory=session_factory)

        assert outcome.successful_inserts == 2
        assert [e.row for e in outcome.errors] == [2]

    async def test_xlsx_input(self, tmp_path, session_factory, policy_rows):
        path = write_xlsx(tmp_path / "upload-1", POLICY_HEADERS, policy_rows)

        outcome = await run_ingestion(str(path), "xlsx", session_factory=session_factory)

        assert isinstance(outcome, IngestionReport)
        assert outcome.summary["policies"] == 2
        assert not os.path.exists(path)

    async def test_header_only_file(self, tmp_path, session_factory):
        path = write_csv(tmp_path / "empty.csv", POLICY_HEADERS, [])

        outcome = await run_ingestion(str(path), "csv", session_factory=session_factory)

        assert outcome.total_records == 0
        assert outcome.summary["policies"] == 0


class TestBatchFailure:
    async def test_unsupported_type_rejects_batch_and_removes_file(self, tmp_path, session_factory):
        path = tmp_path / "notes.pdf"
        path.write_bytes(b"%PDF-1.4")

        outcome = await run_ingestion(str(path), "pdf", session_factory=session_factory)

        assert isinstance(outcome, BatchFailure)
        assert outcome.error_type == "UnsupportedFileTypeError"
        assert not path.exists()

    async def test_malformed_file_rejects_batch_before_any_row(self, tmp_path, session_factory):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a workbook")

        outcome = await run_ingestion(str(path), "xlsx", session_factory=session_factory)

        assert isinstance(outcome, BatchFailure)
        assert outcome.error_type == "ParseError"
        assert not path.exists()
        assert await _policy_count(session_factory) == 0

    async def test_missing_file(self, tmp_path, session_factory):
        outcome = await run_ingestion(
            str(tmp_path / "gone.csv"), "csv", session_factory=session_factory
        )
        assert isinstance(outcome, BatchFailure)
        assert "not found" in outcome.error


class TestAuditRow:
    async def test_each_run_is_recorded(self, tmp_path, session_factory, policy_csv):
        await run_ingestion(str(policy_csv), "csv", session_factory=session_factory)
        bad = tmp_path / "bad.txt"
        bad.write_text("x")
        await run_ingestion(str(bad), None, session_factory=session_factory)

        async with session_factory() as session:
            runs = (await session.execute(select(IngestionRun).order_by(IngestionRun.id))).scalars().all()

        assert [r.status for r in runs] == [PipelineStatus.COMPLETED, PipelineStatus.FAILED]
        assert runs[0].filename == "policies.csv"
        assert runs[0].successful_inserts == 3
        assert runs[0].summary["summary"]["policies"] == 2
        assert runs[1].file_type == "unknown"
        assert runs[1].error_message


class _Recorder(PipelineStep):
    def __init__(self, name, calls, fail=False, error=None):
        self.name = name
        self.description = name
        self.calls = calls
        self.fail = fail
        self.error = error or RuntimeError("boom")

    async def execute(self, ctx):
        started_at = self._now()
        self.calls.append(f"run:{self.name}")
        if self.fail:
            raise self.error
        return self._success(started_at)

    async def rollback(self, ctx):
        self.calls.append(f"rollback:{self.name}")


class TestEngine:
    async def test_rollback_runs_failing_step_then_completed_in_reverse(self):
        calls: list[str] = []
        steps = [
            _Recorder("a", calls),
            _Recorder("b", calls),
            _Recorder("c", calls, fail=True),
            _Recorder("d", calls),
        ]
        ctx = PipelineContext(file_path="/nonexistent/input.csv", file_type="csv")

        result = await PipelineEngine().run_steps(ctx, steps)

        assert result.status == PipelineStatus.FAILED
        assert result.steps_completed == 2
        assert result.error_type == "RuntimeError"
        assert result.step_results[-1]["status"] == StepStatus.FAILED
        assert calls == [
            "run:a", "run:b", "run:c",
            "rollback:c", "rollback:b", "rollback:a",
        ]
        assert isinstance(result.outcome(), BatchFailure)

    async def test_pipeline_error_fails_once_with_its_details(self):
        calls: list[str] = []
        error = ParseError("Malformed CSV file", details={"filepath": "/tmp/x.csv"})
        steps = [_Recorder("extract", calls, fail=True, error=error), _Recorder("after", calls)]
        ctx = PipelineContext(file_path="/tmp/x.csv", file_type="csv")

        result = await PipelineEngine().run_steps(ctx, steps)

        assert calls == ["run:extract", "rollback:extract"]
        assert result.error == "Malformed CSV file"
        assert result.error_type == "ParseError"
        assert result.step_results[-1]["metadata"] == {"filepath": "/tmp/x.csv"}
        assert error.step_name == "extract"
        assert error.execution_id == ctx.execution_id
        assert result.outcome() == BatchFailure(error="Malformed CSV file", error_type="ParseError")
