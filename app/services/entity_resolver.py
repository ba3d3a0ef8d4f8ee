"""
app/services/entity_resolver.py

Find-or-create resolution of the six entity kinds referenced by one row.

Resolution is table-driven: RESOLUTION_STEPS lists each kind in dependency
order with how to build its lookup key and its creation fields from the row
and the entities resolved earlier in the same row. Account needs the User,
Policy needs all five others.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from app.domain.ingestion import IngestionStats
from app.domain.policy_row import NormalizedRow
from db.base import Base
from db.models.account import Account
from db.models.agent import Agent
from db.models.carrier import Carrier
from db.models.category import Category
from db.models.policy import Policy
from db.models.user import User
from db.repositories.entity_store import EntityStore
from db.repositories.errors import ConstraintViolation, PersistenceError

logger = logging.getLogger(__name__)

ResolvedRefs = Mapping[str, Base]
FieldBuilder = Callable[[NormalizedRow, ResolvedRefs], dict[str, Any]]


@dataclass(frozen=True)
class ResolutionStep:
    """
    How one entity kind is looked up and created.

    `stops_row_when_found` marks the kind whose existing record means the
    row was already ingested.
    """

    kind: str
    model: type[Base]
    counter: str
    lookup_key: FieldBuilder
    creation_fields: FieldBuilder
    stops_row_when_found: bool = False


@dataclass
class RowResolution:
    entities: dict[str, Base] = field(default_factory=dict)
    already_ingested: bool = False

    @property
    def policy(self) -> Policy | None:
        policy = self.entities.get("policy")
        return policy if isinstance(policy, Policy) else None


def _agent_fields(row: NormalizedRow, refs: ResolvedRefs) -> dict[str, Any]:
    return {"name": row.agent, "agency_id": row.agency_id}


def _user_key(row: NormalizedRow, refs: ResolvedRefs) -> dict[str, Any]:
    return {"firstname": row.firstname, "email": row.email}


def _user_fields(row: NormalizedRow, refs: ResolvedRefs) -> dict[str, Any]:
    return {
        "firstname": row.firstname,
        "dob": row.dob,
        "address": row.address,
        "phone": row.phone,
        "state": row.state,
        "zip": row.zip,
        "email": row.email,
        "gender": row.gender,
        "user_type": row.user_type,
        "city": row.city,
    }


def _account_key(row: NormalizedRow, refs: ResolvedRefs) -> dict[str, Any]:
    return {"name": row.account_name, "user_id": refs["user"].id}


def _account_fields(row: NormalizedRow, refs: ResolvedRefs) -> dict[str, Any]:
    return {"name": row.account_name, "type": row.account_type, "user_id": refs["user"].id}


def _policy_fields(row: NormalizedRow, refs: ResolvedRefs) -> dict[str, Any]:
    return {
        "policy_number": row.policy_number,
        "policy_start_date": row.policy_start_date,
        "policy_end_date": row.policy_end_date,
        "premium_amount": row.premium_amount,
        "premium_amount_written": row.premium_amount_written,
        "policy_type": row.policy_type,
        "policy_mode": row.policy_mode,
        "producer": row.producer,
        "csr": row.csr,
        "primary": row.primary,
        "applicant_id": row.applicant_id,
        "has_active": row.has_active,
        "user_id": refs["user"].id,
        "account_id": refs["account"].id,
        "category_id": refs["category"].id,
        "carrier_id": refs["carrier"].id,
        "agent_id": refs["agent"].id,
    }


RESOLUTION_STEPS: tuple[ResolutionStep, ...] = (
    ResolutionStep(
        kind="agent",
        model=Agent,
        counter="agents",
        lookup_key=lambda row, refs: {"name": row.agent},
        creation_fields=_agent_fields,
    ),
    ResolutionStep(
        kind="user",
        model=User,
        counter="users",
        lookup_key=_user_key,
        creation_fields=_user_fields,
    ),
    ResolutionStep(
        kind="account",
        model=Account,
        counter="accounts",
        lookup_key=_account_key,
        creation_fields=_account_fields,
    ),
    ResolutionStep(
        kind="category",
        model=Category,
        counter="categories",
        lookup_key=lambda row, refs: {"name": row.category_name},
        creation_fields=lambda row, refs: {"name": row.category_name},
    ),
    ResolutionStep(
        kind="carrier",
        model=Carrier,
        counter="carriers",
        lookup_key=lambda row, refs: {"name": row.company_name},
        creation_fields=lambda row, refs: {"name": row.company_name},
    ),
    ResolutionStep(
        kind="policy",
        model=Policy,
        counter="policies",
        lookup_key=lambda row, refs: {"policy_number": row.policy_number},
        creation_fields=_policy_fields,
        stops_row_when_found=True,
    ),
)


class EntityResolver:
    """
    Resolves or creates every entity a row references, in dependency order.
    """

    def __init__(
        self,
        store: EntityStore,
        steps: tuple[ResolutionStep, ...] = RESOLUTION_STEPS,
    ) -> None:
        self._store = store
        self._steps = steps

    def resolve_row(self, row: NormalizedRow, stats: IngestionStats) -> RowResolution:
        """
        Resolve every step for one row, counting new records into `stats`.

        An existing policy ends the row: nothing else is written for it and
        no error is raised.
        """

        resolution = RowResolution()
        for step in self._steps:
            entity, created = self.resolve(step, row, resolution.entities, stats)
            resolution.entities[step.kind] = entity
            if step.stops_row_when_found and not created:
                resolution.already_ingested = True
                break
        return resolution

    def resolve(
        self,
        step: ResolutionStep,
        row: NormalizedRow,
        refs: ResolvedRefs,
        stats: IngestionStats,
    ) -> tuple[Base, bool]:
        """
        Return (entity, created) for one step.

        A uniqueness violation means a concurrent writer committed the same
        key first; the committed record is re-read and used instead.
        """

        key = step.lookup_key(row, refs)
        existing = self._store.find_one(step.model, key)
        if existing is not None:
            return existing, False

        try:
            created = self._store.create(step.model, step.creation_fields(row, refs))
        except ConstraintViolation as exc:
            logger.warning("Concurrent create detected kind=%s key=%r; re-reading", step.kind, key)
            existing = self._store.find_one(step.model, key)
            if existing is None:
                raise PersistenceError(
                    f"{step.model.__name__} was rejected as a duplicate but no existing record was found."
                ) from exc
            return existing, False

        stats.increment(step.counter)
        return created, True
