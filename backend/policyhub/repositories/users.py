"""
User repository — users and the accounts they own.

Repository rules:
- Pure data-access logic only
- Every function receives AsyncSession explicitly
- Functions flush, but never commit
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.db.models.user import User
from policyhub.db.models.user_account import UserAccount
from policyhub.repositories.base import insert
from policyhub.schemas.entities import AccountCreate, UserCreate


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email address (case-insensitive)."""
    stmt = select(User).where(User.email == email.lower().strip())
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    """Insert a new user."""
    return await insert(db, User(**data.model_dump()))


async def get_account(
    db: AsyncSession,
    account_name: str,
    user_id: int,
) -> UserAccount | None:
    """Fetch an account by its (name, owning user) pair."""
    stmt = select(UserAccount).where(
        UserAccount.account_name == account_name.strip(),
        UserAccount.user_id == user_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_account(db: AsyncSession, data: AccountCreate) -> UserAccount:
    """Insert a new user account."""
    return await insert(db, UserAccount(**data.model_dump()))
