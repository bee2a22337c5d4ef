"""
Ingestion result types.

A run ends in exactly one of two shapes:
    - IngestionReport  — the batch was decoded; per-row failures are listed
    - BatchFailure     — the batch was rejected before any row was processed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

SUMMARY_KEYS = (
    "agents",
    "users",
    "user_accounts",
    "policy_categories",
    "policy_carriers",
    "policies",
)


@dataclass
class RowFailure:
    """One row that could not be processed (row is 1-based)."""

    row: int
    error: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "error": self.error, "data": self.data}


@dataclass
class IngestionReport:
    total_records: int = 0
    successful_inserts: int = 0
    errors: list[RowFailure] = field(default_factory=list)
    summary: dict[str, int] = field(
        default_factory=lambda: {key: 0 for key in SUMMARY_KEYS}
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_records": self.total_records,
            "successful_inserts": self.successful_inserts,
            "errors": [failure.to_dict() for failure in self.errors],
            "summary": dict(self.summary),
        }


@dataclass
class BatchFailure:
    error: str
    error_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "error_type": self.error_type}


class SummaryTracker:
    """Per-kind sets of distinct entity ids touched during a batch."""

    def __init__(self) -> None:
        self._ids: dict[str, set[int]] = {key: set() for key in SUMMARY_KEYS}

    def record(self, key: str, entity_id: int | None) -> None:
        if entity_id is not None:
            self._ids[key].add(entity_id)

    def counts(self) -> dict[str, int]:
        return {key: len(ids) for key, ids in self._ids.items()}
