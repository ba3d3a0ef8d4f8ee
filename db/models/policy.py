"""
db/models/policy.py

Policy model. policy_number is globally unique; every policy references the
user, account, category, carrier and agent resolved from the same CSV row.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, Float, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from db.models.account import Account
    from db.models.agent import Agent
    from db.models.carrier import Carrier
    from db.models.category import Category
    from db.models.user import User


class Policy(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "policies"

    policy_number: Mapped[str] = mapped_column(Text, nullable=False)
    policy_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    policy_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    premium_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    premium_amount_written: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    policy_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    policy_mode: Mapped[int | None] = mapped_column(Integer, nullable=True)
    producer: Mapped[str | None] = mapped_column(Text, nullable=True)
    csr: Mapped[str | None] = mapped_column(Text, nullable=True)
    primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applicant_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="hasActive column of the source file",
    )

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    account_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False)
    carrier_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("carriers.id", ondelete="RESTRICT"), nullable=False)
    agent_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("agents.id", ondelete="RESTRICT"), nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="policies")
    account: Mapped["Account"] = relationship("Account", back_populates="policies")
    category: Mapped["Category"] = relationship("Category", back_populates="policies")
    carrier: Mapped["Carrier"] = relationship("Carrier", back_populates="policies")
    agent: Mapped["Agent"] = relationship("Agent", back_populates="policies")

    __table_args__ = (
        UniqueConstraint("policy_number", name="uq_policies_policy_number"),
        Index("ix_policies_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Policy id={self.id} policy_number={self.policy_number!r}>"
