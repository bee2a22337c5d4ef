"""PolicyCategory model — line of business (Auto, Health, Life, ...)."""

from typing import Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from policyhub.db.models.base import Base, TimestampMixin


class PolicyCategory(TimestampMixin, Base):
    __tablename__ = "policy_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True
    )
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    category_code: Mapped[Optional[str]] = mapped_column(
        String(50), unique=True, nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<PolicyCategory id={self.id} {self.category_name!r}>"
