"""
Policy repository — policies plus their category and carrier lookups.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.db.models.policy import Policy
from policyhub.db.models.policy_carrier import PolicyCarrier
from policyhub.db.models.policy_category import PolicyCategory
from policyhub.repositories.base import insert
from policyhub.schemas.entities import CarrierCreate, CategoryCreate, PolicyCreate


# ─── Categories ───────────────────────────────
async def get_category_by_name(db: AsyncSession, category_name: str) -> PolicyCategory | None:
    stmt = select(PolicyCategory).where(PolicyCategory.category_name == category_name.strip())
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_category(db: AsyncSession, data: CategoryCreate) -> PolicyCategory:
    return await insert(db, PolicyCategory(**data.model_dump()))


# ─── Carriers ─────────────────────────────────
async def get_carrier_by_name(db: AsyncSession, company_name: str) -> PolicyCarrier | None:
    stmt = select(PolicyCarrier).where(PolicyCarrier.company_name == company_name.strip())
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_carrier(db: AsyncSession, data: CarrierCreate) -> PolicyCarrier:
    return await insert(db, PolicyCarrier(**data.model_dump()))


# ─── Policies ─────────────────────────────────
async def get_policy_by_number(db: AsyncSession, policy_number: str) -> Policy | None:
    """Fetch a policy by its unique policy number."""
    stmt = select(Policy).where(Policy.policy_number == policy_number.strip())
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_policy(db: AsyncSession, data: PolicyCreate) -> Policy:
    """Insert a new policy.  Referenced rows must already exist."""
    return await insert(db, Policy(**data.model_dump()))
