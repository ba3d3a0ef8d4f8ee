"""
app/services/policy_query_service.py

Read-side policy lookups: search by user first name and per-user totals.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache

from sqlalchemy.orm import Session

from db.models.policy import Policy
from db.models.user import User
from db.repositories.policy_repository import PolicyRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserPolicies:
    user: User
    policies: list[Policy] = field(default_factory=list)


@dataclass(frozen=True)
class UserPolicySummary:
    user: User
    policy_count: int
    total_premium: float
    policies: list[Policy] = field(default_factory=list)


class PolicyQueryService:
    def search_by_username(self, *, db: Session, username: str) -> UserPolicies | None:
        """
        Return the first user whose firstname contains `username` (case-insensitive)
        with their policies, or None when nobody matches.
        """

        needle = username.strip()
        if not needle:
            raise ValueError("username must not be blank.")

        repository = PolicyRepository(db)
        user = repository.find_user_by_firstname(needle)
        if user is None:
            logger.info("Policy search found no user for %r", needle)
            return None

        return UserPolicies(user=user, policies=repository.list_policies_for_user(user.id))

    def aggregate_by_user(self, *, db: Session) -> list[UserPolicySummary]:
        summaries: list[UserPolicySummary] = []
        for user in PolicyRepository(db).list_users_with_policies():
            policies = sorted(user.policies, key=lambda policy: policy.policy_number)
            summaries.append(
                UserPolicySummary(
                    user=user,
                    policy_count=len(policies),
                    total_premium=float(sum(policy.premium_amount or 0.0 for policy in policies)),
                    policies=policies,
                )
            )
        return summaries


@lru_cache(maxsize=1)
def get_policy_query_service() -> PolicyQueryService:
    return PolicyQueryService()
