"""
Agent model — sales agent optionally attached to a policy.

Agents are created lazily by name during ingestion, so `agent_name`
carries a unique constraint: concurrent imports of the same name
collapse onto one row.
"""

from typing import Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from policyhub.db.models.base import Base, TimestampMixin


class Agent(TimestampMixin, Base):
    __tablename__ = "agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    agent_name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    agent_code: Mapped[Optional[str]] = mapped_column(
        String(50), unique=True, nullable=True
    )
    email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Agent id={self.id} {self.agent_name!r}>"
