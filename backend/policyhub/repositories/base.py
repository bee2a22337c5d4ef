"""
Shared repository helpers.

`UniquenessConflict` lets callers tell "a row with this natural key
already exists" apart from every other storage failure.
"""

from __future__ import annotations

from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.db.models import Base

ModelT = TypeVar("ModelT", bound=Base)

# SQLSTATE for unique_violation (PostgreSQL)
UNIQUE_VIOLATION = "23505"


class UniquenessConflict(Exception):
    """An insert collided with an existing row on a unique key."""

    def __init__(self, message: str, *, table: str | None = None) -> None:
        self.table = table
        super().__init__(message)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when an IntegrityError was caused by a unique constraint."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == UNIQUE_VIOLATION:
        return True
    return "unique" in str(orig).lower()


async def insert(db: AsyncSession, obj: ModelT) -> ModelT:
    """Add and flush one row, raising UniquenessConflict on duplicate keys."""
    db.add(obj)
    try:
        await db.flush()
    except IntegrityError as exc:
        if is_unique_violation(exc):
            raise UniquenessConflict(
                f"Duplicate {obj.__tablename__} row",
                table=obj.__tablename__,
            ) from exc
        raise
    return obj
