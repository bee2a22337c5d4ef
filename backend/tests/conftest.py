"""Pytest configuration and shared fixtures."""

import csv
from collections.abc import Iterable, Sequence
from pathlib import Path

import pytest
from openpyxl import Workbook

from policyhub.db.models import Base
from policyhub.db.session import make_engine, make_session_factory


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine with every table created."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'policyhub.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


# ─── Input file builders ──────────────────────

def write_csv(path: Path, headers: Sequence[str], rows: Iterable[Sequence]) -> Path:
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(headers)
        writer.writerows(rows)
    return path


def write_xlsx(path: Path, headers: Sequence[str], rows: Iterable[Sequence]) -> Path:
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(list(headers))
    for row in rows:
        sheet.append(list(row))
    workbook.save(path)
    return path


POLICY_HEADERS = [
    "Agent Name",
    "User First Name",
    "Email",
    "Account Name",
    "Policy Category Name",
    "Carrier Company Name",
    "Policy Number",
    "Policy Start Date",
    "Policy End Date",
    "Premium Amount",
]


@pytest.fixture
def policy_rows() -> list[list]:
    """Valid row, row missing its premium, row reusing the first policy number."""
    return [
        ["Jane Agent", "Alice", "alice@example.com", "Alice Main", "Auto", "Acme Insurance",
         "POL-001", "01/01/2024", "01/01/2025", "$1,200.50"],
        ["Jane Agent", "Bob", "bob@example.com", "Bob Main", "Auto", "Acme Insurance",
         "POL-002", "2024-02-01", "2025-02-01", ""],
        ["Jane Agent", "Alice", "alice@example.com", "Alice Main", "Auto", "Acme Insurance",
         "POL-001", "01/01/2024", "01/01/2025", "900"],
    ]


@pytest.fixture
def policy_csv(tmp_path, policy_rows) -> Path:
    return write_csv(tmp_path / "policies.csv", POLICY_HEADERS, policy_rows)
