"""
db/models/agent.py

Agent model: the producing agent named on a policy row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from db.models.policy import Policy


class Agent(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "agents"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    agency_id: Mapped[str | None] = mapped_column(Text, nullable=True)

    policies: Mapped[list["Policy"]] = relationship("Policy", back_populates="agent")

    __table_args__ = (
        Index("ix_agents_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Agent id={self.id} name={self.name!r}>"
