"""
db/models/account.py

Account owned by a user; identified during ingestion by (name, user_id).
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from db.models.policy import Policy
    from db.models.user import User


class Account(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "accounts"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    user: Mapped["User"] = relationship("User", back_populates="accounts")
    policies: Mapped[list["Policy"]] = relationship("Policy", back_populates="account")

    __table_args__ = (
        Index("ix_accounts_name_user_id", "name", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} name={self.name!r} user_id={self.user_id}>"
