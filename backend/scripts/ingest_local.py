#!/usr/bin/env python3
"""
Run the ingestion pipeline against a local file without Docker/Celery.

The pipeline deletes its input, so the file is copied to a temp location
first unless --consume is given.

Usage:
    cd backend
    python -m scripts.ingest_local samples/policies.xlsx
    python -m scripts.ingest_local data.csv --database-url sqlite+aiosqlite:///./dev.db --create-tables
"""

import argparse
import asyncio
import json
import os
import shutil
import sys
import tempfile

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest a policy spreadsheet or CSV locally")
    parser.add_argument("path", help="Input .xlsx / .xls / .csv file")
    parser.add_argument("--type", dest="file_type", help="Declared type (default: from extension)")
    parser.add_argument("--database-url", help="Async database URL (default: settings.DATABASE_URL)")
    parser.add_argument("--create-tables", action="store_true", help="Create tables before ingesting")
    parser.add_argument("--consume", action="store_true", help="Ingest (and delete) the file in place")
    return parser.parse_args()


def _print_outcome(outcome) -> None:
    from policyhub.pipeline.report import BatchFailure

    print("\n" + "=" * 70)
    if isinstance(outcome, BatchFailure):
        print(f"  ✗ Batch rejected ({outcome.error_type})")
        print(f"    {outcome.error}")
        print("=" * 70 + "\n")
        return

    print(f"  ✓ {outcome.successful_inserts}/{outcome.total_records} rows ingested")
    print("=" * 70)
    for key, count in outcome.summary.items():
        print(f"    {key:<18}: {count}")
    if outcome.errors:
        print(f"\n  ⚠  {len(outcome.errors)} row error(s):")
        for failure in outcome.errors:
            print(f"    row {failure.row}: {failure.error}")
            print(f"      {json.dumps(failure.data, default=str)}")
    print()


async def main() -> None:
    from policyhub.core.logging import setup_logging
    from policyhub.db.models import Base
    from policyhub.db.session import make_engine, make_session_factory
    from policyhub.pipeline.ingest import run_ingestion

    args = _parse_args()
    setup_logging("WARNING")     # quiet logs, show formatted output only

    path = args.path
    if not args.consume:
        suffix = os.path.splitext(path)[1]
        fd, copy_path = tempfile.mkstemp(suffix=suffix)
        os.close(fd)
        shutil.copyfile(path, copy_path)
        path = copy_path

    engine = make_engine(args.database_url)
    try:
        if args.create_tables:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        outcome = await run_ingestion(
            path,
            args.file_type,
            session_factory=make_session_factory(engine),
        )
    finally:
        await engine.dispose()

    _print_outcome(outcome)


if __name__ == "__main__":
    asyncio.run(main())
