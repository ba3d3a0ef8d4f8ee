"""
db/models/user.py

Policy holder. There is no unique index on users; ingestion treats
(firstname, email) as the identity key and an index backs that lookup.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import Date, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from db.models.account import Account
    from db.models.policy import Policy


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "users"

    firstname: Mapped[str] = mapped_column(Text, nullable=False)
    dob: Mapped[date | None] = mapped_column(Date, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(Text, nullable=True)
    state: Mapped[str | None] = mapped_column(Text, nullable=True)
    zip: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    gender: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_type: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="userType column of the source file",
    )
    city: Mapped[str | None] = mapped_column(Text, nullable=True)

    accounts: Mapped[list["Account"]] = relationship("Account", back_populates="user")
    policies: Mapped[list["Policy"]] = relationship("Policy", back_populates="user")

    __table_args__ = (
        Index("ix_users_firstname_email", "firstname", "email"),
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} firstname={self.firstname!r} email={self.email!r}>"
