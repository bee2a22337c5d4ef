"""
Policy model — one row per unique policy number.

Every policy references a user, a category and a carrier (required) and
optionally an agent.  The ingestion pipeline resolves all of them before
the policy row is written.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from policyhub.core.constants import PaymentFrequency, PolicyStatus
from policyhub.db.models.base import Base, TimestampMixin


class Policy(TimestampMixin, Base):
    __tablename__ = "policies"
    __table_args__ = (
        CheckConstraint("policy_end_date > policy_start_date", name="ck_policies_dates"),
        CheckConstraint("premium_amount >= 0", name="ck_policies_premium"),
        CheckConstraint("coverage_amount >= 0", name="ck_policies_coverage"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    policy_number: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    policy_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    policy_end_date: Mapped[date] = mapped_column(Date, nullable=False)

    # ── References ───────────────────────────
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("policy_categories.id"), nullable=False, index=True
    )
    carrier_id: Mapped[int] = mapped_column(
        ForeignKey("policy_carriers.id"), nullable=False, index=True
    )
    agent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("agents.id"), nullable=True, index=True
    )

    collection_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    company_collection_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # ── Money ────────────────────────────────
    premium_amount: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    coverage_amount: Mapped[Decimal] = mapped_column(
        Numeric(16, 2), nullable=False, default=Decimal("0")
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PolicyStatus.ACTIVE.value, index=True
    )  # Active | Expired | Cancelled | Pending
    payment_frequency: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentFrequency.MONTHLY.value
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Policy id={self.id} {self.policy_number} status={self.status}>"
