"""
EntityResolver — idempotent find-or-create by natural key.

Every resolution runs in its own short transaction, so an entity created
by one batch is visible to concurrent batches as soon as it is resolved.

Race handling:
    1. Look up by natural key.  Found → returned unchanged (first write wins).
    2. Otherwise insert.  A UniquenessConflict means another writer won the
       race; the row is re-fetched in a fresh session and returned with
       created=False.  If the re-fetch finds nothing, the conflict propagates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from policyhub.core.constants import EntityKind, Gender, UserType
from policyhub.core.logging import get_logger
from policyhub.db.models import Agent, PolicyCarrier, PolicyCategory, User, UserAccount
from policyhub.processing.normalizer import (
    DEFAULT_DATE_OF_BIRTH,
    DEFAULT_PHONE,
    DEFAULT_STATE,
    DEFAULT_ZIP,
    PolicyFields,
    UserFields,
    placeholder_email,
    placeholder_first_name,
)
from policyhub.repositories import agents as agents_repo
from policyhub.repositories import policies as policies_repo
from policyhub.repositories import users as users_repo
from policyhub.repositories.base import UniquenessConflict
from policyhub.schemas.entities import (
    AccountCreate,
    AgentCreate,
    CarrierCreate,
    CategoryCreate,
    PolicyCreate,
    UserCreate,
)

logger = get_logger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Lookup = Callable[[AsyncSession, Any], Awaitable[Any]]
Create = Callable[[AsyncSession, Any], Awaitable[Any]]


@dataclass
class Resolution:
    entity: Any
    created: bool


@dataclass(frozen=True)
class _KindSpec:
    lookup: Lookup
    create: Create
    schema: type[BaseModel]


async def _get_account(db: AsyncSession, key: tuple[str, int]) -> UserAccount | None:
    account_name, user_id = key
    return await users_repo.get_account(db, account_name, user_id)


KIND_SPECS: dict[EntityKind, _KindSpec] = {
    EntityKind.AGENT: _KindSpec(
        agents_repo.get_agent_by_name, agents_repo.create_agent, AgentCreate,
    ),
    EntityKind.USER: _KindSpec(
        users_repo.get_user_by_email, users_repo.create_user, UserCreate,
    ),
    EntityKind.ACCOUNT: _KindSpec(
        _get_account, users_repo.create_account, AccountCreate,
    ),
    EntityKind.CATEGORY: _KindSpec(
        policies_repo.get_category_by_name, policies_repo.create_category, CategoryCreate,
    ),
    EntityKind.CARRIER: _KindSpec(
        policies_repo.get_carrier_by_name, policies_repo.create_carrier, CarrierCreate,
    ),
    EntityKind.POLICY: _KindSpec(
        policies_repo.get_policy_by_number, policies_repo.create_policy, PolicyCreate,
    ),
}


class EntityResolver:
    """Race-tolerant find-or-create for every entity kind touched by ingestion."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    # ─── Generic resolution ───────────────────────────

    async def _lookup(self, spec: _KindSpec, natural_key: Any) -> Any:
        async with self.session_factory() as session:
            return await spec.lookup(session, natural_key)

    async def resolve(
        self,
        kind: EntityKind,
        natural_key: Any,
        attributes: dict[str, Any],
    ) -> Resolution:
        """Return the entity for `natural_key`, creating it from `attributes` if absent."""
        spec = KIND_SPECS[kind]

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    existing = await spec.lookup(session, natural_key)
                    if existing is not None:
                        return Resolution(existing, created=False)
                    entity = await spec.create(session, spec.schema(**attributes))
            return Resolution(entity, created=True)

        except UniquenessConflict:
            existing = await self._lookup(spec, natural_key)
            if existing is None:
                raise
            logger.debug("Lost creation race, using existing row", kind=kind, key=str(natural_key))
            return Resolution(existing, created=False)

    # ─── Optional references: never raise ─────────────

    async def _resolve_optional(
        self,
        kind: EntityKind,
        name: str | None,
        attributes: dict[str, Any],
    ) -> Agent | PolicyCategory | PolicyCarrier | None:
        if not name or not name.strip():
            return None
        try:
            return (await self.resolve(kind, name.strip(), attributes)).entity
        except Exception as exc:
            logger.warning(
                "Reference resolution failed",
                kind=kind,
                name=name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None

    async def resolve_agent(self, name: str | None) -> Agent | None:
        return await self._resolve_optional(
            EntityKind.AGENT, name, {"agent_name": (name or "").strip()},
        )

    async def resolve_category(self, name: str | None) -> PolicyCategory | None:
        return await self._resolve_optional(
            EntityKind.CATEGORY,
            name,
            {
                "category_name": (name or "").strip(),
                "description": f"Auto-created category: {(name or '').strip()}",
            },
        )

    async def resolve_carrier(self, name: str | None) -> PolicyCarrier | None:
        return await self._resolve_optional(
            EntityKind.CARRIER, name, {"company_name": (name or "").strip()},
        )

    # ─── Users: one degraded retry ────────────────────

    async def resolve_user(self, fields: UserFields, row_number: int) -> User:
        """
        Resolve the row's user by email.

        Any creation failure is retried once with a minimal record built
        from defaults.  Only a failure of that retry propagates.
        """
        try:
            return (await self.resolve(EntityKind.USER, fields.email, fields.to_dict())).entity
        except Exception as exc:
            logger.warning(
                "User creation failed, retrying with minimal record",
                row=row_number,
                email=fields.email,
                error=str(exc),
            )

        minimal = minimal_user_attributes(fields.email, row_number)
        resolution = await self.resolve(EntityKind.USER, minimal["email"], minimal)
        return resolution.entity

    async def resolve_account(self, name: str | None, user: User) -> UserAccount | None:
        """Resolve by (name, user).  Failures propagate to the row."""
        if not name or not name.strip():
            return None
        name = name.strip()
        resolution = await self.resolve(
            EntityKind.ACCOUNT,
            (name, user.id),
            {"account_name": name, "user_id": user.id},
        )
        return resolution.entity

    # ─── Policies ─────────────────────────────────────

    async def ensure_policy(
        self,
        fields: PolicyFields,
        *,
        user_id: int,
        category_id: int,
        carrier_id: int,
        agent_id: int | None = None,
    ) -> Resolution:
        """Create the policy unless its number already exists (existing rows are never touched)."""
        attributes = {
            **fields.to_dict(),
            "user_id": user_id,
            "category_id": category_id,
            "carrier_id": carrier_id,
            "agent_id": agent_id,
        }
        resolution = await self.resolve(EntityKind.POLICY, fields.policy_number, attributes)
        if not resolution.created:
            logger.info("Policy already exists, skipping", policy_number=fields.policy_number)
        return resolution


def minimal_user_attributes(email: str | None, row_number: int) -> dict[str, Any]:
    """Defaults-only user record; keeps the email when it is well formed."""
    email = (email or "").strip().lower()
    if not EMAIL_RE.match(email):
        email = placeholder_email(row_number)
    return {
        "first_name": placeholder_first_name(row_number),
        "last_name": None,
        "date_of_birth": DEFAULT_DATE_OF_BIRTH,
        "state": DEFAULT_STATE,
        "zip_code": DEFAULT_ZIP,
        "phone_number": DEFAULT_PHONE,
        "email": email,
        "gender": Gender.OTHER,
        "user_type": UserType.INDIVIDUAL,
    }
