"""
db/models/carrier.py

Insurance carrier (the `company_name` column). Names are globally unique.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from db.models.policy import Policy


class Carrier(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "carriers"

    name: Mapped[str] = mapped_column(Text, nullable=False)

    policies: Mapped[list["Policy"]] = relationship("Policy", back_populates="carrier")

    __table_args__ = (
        UniqueConstraint("name", name="uq_carriers_name"),
    )

    def __repr__(self) -> str:
        return f"<Carrier id={self.id} name={self.name!r}>"
