"""
User model — the policy holder.

Resolved by email during ingestion (stored lower-cased, unique).
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from policyhub.core.constants import Gender, UserType
from policyhub.db.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)

    # Address
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    zip_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(100), default="USA", nullable=False)

    phone_number: Mapped[str] = mapped_column(String(50), nullable=False)
    gender: Mapped[str] = mapped_column(
        String(20), nullable=False, default=Gender.OTHER.value
    )  # Male | Female | Other
    user_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserType.INDIVIDUAL.value
    )  # Individual | Business | Family | Corporate
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} {self.email} type={self.user_type}>"
