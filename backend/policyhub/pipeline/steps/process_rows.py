"""
ProcessRowsStep — normalizes and persists every extracted row.

Rows are processed strictly in order.  Each row runs:

    normalize → agent → category → carrier → user → account → policy

Any exception is caught at the row boundary and recorded as a RowFailure;
the remaining rows still run.  A duplicate policy number is a no-op, not an
error.  Summary counts are distinct entity ids across the whole batch.
"""

from __future__ import annotations

import json
from typing import Any

from policyhub.core.logging import get_logger
from policyhub.pipeline.context import PipelineContext, StepResult
from policyhub.pipeline.errors import RowError
from policyhub.pipeline.report import RowFailure, SummaryTracker
from policyhub.pipeline.resolver import EntityResolver
from policyhub.pipeline.step import PipelineStep
from policyhub.processing.normalizer import normalize_record

logger = get_logger(__name__)


def _json_safe(raw: dict[str, Any]) -> dict[str, Any]:
    """Row data as JSON-serializable values (dates/decimals become strings)."""
    return json.loads(json.dumps(raw, default=str))


class ProcessRowsStep(PipelineStep):
    """Resolve references and create one policy per unique policy number."""

    name = "process_rows"
    description = "Resolve entities and create policies"

    def __init__(self, resolver: EntityResolver) -> None:
        self.resolver = resolver

    async def execute(self, ctx: PipelineContext) -> StepResult:
        started_at = self._now()
        tracker = SummaryTracker()
        report = ctx.report

        for index, raw in enumerate(ctx.raw_rows):
            row_number = index + 1
            try:
                await self._process_row(raw, row_number, tracker)
            except Exception as exc:
                message = str(exc)
                logger.warning(
                    "Row failed",
                    execution_id=ctx.execution_id,
                    row=row_number,
                    error=message,
                    error_type=type(exc).__name__,
                )
                report.errors.append(
                    RowFailure(row=row_number, error=message, data=_json_safe(raw))
                )
                continue

            report.successful_inserts += 1

        report.summary = tracker.counts()

        logger.info(
            "Rows processed",
            execution_id=ctx.execution_id,
            total=report.total_records,
            successful=report.successful_inserts,
            failed=len(report.errors),
            summary=report.summary,
        )
        return self._success(started_at, metadata={
            "successful_inserts": report.successful_inserts,
            "row_errors": len(report.errors),
            "summary": report.summary,
        })

    async def _process_row(
        self,
        raw: dict[str, Any],
        row_number: int,
        tracker: SummaryTracker,
    ) -> None:
        record = normalize_record(raw, row_number)
        resolver = self.resolver

        agent = await resolver.resolve_agent(record.agent_name)
        tracker.record("agents", agent.id if agent else None)

        category = await resolver.resolve_category(record.category_name)
        tracker.record("policy_categories", category.id if category else None)

        carrier = await resolver.resolve_carrier(record.carrier_name)
        tracker.record("policy_carriers", carrier.id if carrier else None)

        user = await resolver.resolve_user(record.user, row_number)
        tracker.record("users", user.id)

        account = await resolver.resolve_account(record.account_name, user)
        tracker.record("user_accounts", account.id if account else None)

        if category is None:
            raise RowError("Policy category is missing or could not be resolved", row=row_number)
        if carrier is None:
            raise RowError("Policy carrier is missing or could not be resolved", row=row_number)

        resolution = await resolver.ensure_policy(
            record.policy,
            user_id=user.id,
            category_id=category.id,
            carrier_id=carrier.id,
            agent_id=agent.id if agent else None,
        )
        if resolution.created:
            tracker.record("policies", resolution.entity.id)
