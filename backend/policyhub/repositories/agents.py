"""Agent repository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from policyhub.db.models.agent import Agent
from policyhub.repositories.base import insert
from policyhub.schemas.entities import AgentCreate


async def get_agent_by_name(db: AsyncSession, agent_name: str) -> Agent | None:
    """Fetch an agent by exact (stripped) name."""
    stmt = select(Agent).where(Agent.agent_name == agent_name.strip())
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def create_agent(db: AsyncSession, data: AgentCreate) -> Agent:
    """Insert a new agent."""
    return await insert(db, Agent(**data.model_dump()))
