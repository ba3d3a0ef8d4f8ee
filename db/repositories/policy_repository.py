"""
Read-side queries over ingested users and policies.
"""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload, selectinload

from db.models.policy import Policy
from db.models.user import User


class PolicyRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_user_by_firstname(self, text: str) -> User | None:
        """
        First user whose firstname contains `text`, ignoring case.
        """

        stmt = (
            select(User)
            .where(func.lower(User.firstname).contains(text.lower(), autoescape=True))
            .order_by(User.created_at.asc(), User.firstname.asc())
            .limit(1)
        )
        return self._session.execute(stmt).scalars().first()

    def list_policies_for_user(self, user_id: uuid.UUID) -> list[Policy]:
        stmt = (
            select(Policy)
            .where(Policy.user_id == user_id)
            .options(
                joinedload(Policy.category),
                joinedload(Policy.carrier),
                joinedload(Policy.account),
            )
            .order_by(Policy.policy_number.asc())
        )
        return list(self._session.execute(stmt).scalars().unique().all())

    def list_users_with_policies(self) -> list[User]:
        stmt = (
            select(User)
            .options(selectinload(User.policies))
            .order_by(User.firstname.asc(), User.created_at.asc())
        )
        return list(self._session.execute(stmt).scalars().all())
