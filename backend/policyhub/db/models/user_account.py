"""
UserAccount model — named account owned by a user.

Natural key is the (account_name, user_id) pair.
"""

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from policyhub.core.constants import AccountType
from policyhub.db.models.base import Base, TimestampMixin


class UserAccount(TimestampMixin, Base):
    __tablename__ = "user_accounts"
    __table_args__ = (
        UniqueConstraint("account_name", "user_id", name="uq_user_accounts_name_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    account_number: Mapped[Optional[str]] = mapped_column(
        String(50), unique=True, nullable=True
    )
    account_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AccountType.PRIMARY.value
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<UserAccount id={self.id} {self.account_name!r} user={self.user_id}>"
