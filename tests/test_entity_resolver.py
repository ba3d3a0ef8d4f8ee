"""
tests/test_entity_resolver.py

Find-or-create resolution of one row across the six entity kinds.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.domain.ingestion import IngestionStats
from app.normalizers.row_normalizer import RowNormalizer
from app.services.entity_resolver import RESOLUTION_STEPS, EntityResolver
from db.base import Base
from db.models import Account, Agent, Carrier, Category, Policy, User
from db.repositories.entity_store import EntityStore
from db.repositories.errors import ConstraintViolation, PersistenceError


class RacingEntityStore(EntityStore):
    """
    Hides existing records of one model from the first lookup, as if another
    writer committed them between the find and the create.
    """

    def __init__(self, session: Session, hidden_model: type[Base]) -> None:
        super().__init__(session)
        self._hidden_model: type[Base] | None = hidden_model

    def find_one(self, model: type[Any], key: Mapping[str, Any]) -> Any:
        if model is self._hidden_model:
            self._hidden_model = None
            return None
        return super().find_one(model, key)


class LostRecordStore(EntityStore):
    def find_one(self, model: type[Any], key: Mapping[str, Any]) -> Any:
        return None

    def create(self, model: type[Any], fields: Mapping[str, Any]) -> Any:
        raise ConstraintViolation(model.__name__)


def _count(session: Session, model: type[Base]) -> int:
    return session.scalar(select(func.count()).select_from(model)) or 0


class TestResolveRow:
    def test_creates_every_kind_for_a_new_row(self, db_session: Session, make_row) -> None:
        stats = IngestionStats()
        row = RowNormalizer().normalize(make_row())

        resolution = EntityResolver(EntityStore(db_session)).resolve_row(row, stats)

        assert stats.to_dict() == {
            "agents": 1,
            "users": 1,
            "accounts": 1,
            "categories": 1,
            "carriers": 1,
            "policies": 1,
        }
        assert not resolution.already_ingested
        policy = resolution.policy
        assert policy is not None
        assert policy.user_id == resolution.entities["user"].id
        assert policy.account_id == resolution.entities["account"].id
        assert policy.agent_id == resolution.entities["agent"].id

    def test_account_references_the_user_resolved_in_the_same_row(
        self, db_session: Session, make_row
    ) -> None:
        row = RowNormalizer().normalize(make_row())

        resolution = EntityResolver(EntityStore(db_session)).resolve_row(row, IngestionStats())

        account = resolution.entities["account"]
        assert isinstance(account, Account)
        assert account.user_id == resolution.entities["user"].id

    def test_existing_policy_stops_the_row_without_error(self, db_session: Session, make_row) -> None:
        resolver = EntityResolver(EntityStore(db_session))
        resolver.resolve_row(RowNormalizer().normalize(make_row()), IngestionStats())

        stats = IngestionStats()
        resolution = resolver.resolve_row(
            RowNormalizer().normalize(make_row(account_name="A different account")),
            stats,
        )

        assert resolution.already_ingested
        assert stats.policies == 0
        assert stats.accounts == 1
        assert _count(db_session, Policy) == 1

    def test_users_are_keyed_by_firstname_and_email(self, db_session: Session, make_row) -> None:
        resolver = EntityResolver(EntityStore(db_session))
        stats = IngestionStats()

        resolver.resolve_row(RowNormalizer().normalize(make_row(policy_number="PN-1")), stats)
        resolver.resolve_row(
            RowNormalizer().normalize(make_row(policy_number="PN-2", email="second@example.com")),
            stats,
        )
        resolver.resolve_row(RowNormalizer().normalize(make_row(policy_number="PN-3")), stats)

        assert stats.users == 2
        assert _count(db_session, User) == 2


class TestConstraintViolationRecovery:
    def test_concurrent_category_create_resolves_to_existing_record(
        self, db_session: Session, make_row
    ) -> None:
        existing = EntityStore(db_session).create(Category, {"name": "Commercial Auto"})
        db_session.commit()

        stats = IngestionStats()
        category_step = next(step for step in RESOLUTION_STEPS if step.model is Category)
        resolver = EntityResolver(RacingEntityStore(db_session, Category))

        entity, created = resolver.resolve(
            category_step,
            RowNormalizer().normalize(make_row()),
            {},
            stats,
        )

        assert not created
        assert entity.id == existing.id
        assert stats.categories == 0
        assert _count(db_session, Category) == 1

    def test_concurrent_policy_create_counts_as_already_ingested(
        self, db_session: Session, make_row
    ) -> None:
        EntityResolver(EntityStore(db_session)).resolve_row(
            RowNormalizer().normalize(make_row()), IngestionStats()
        )
        db_session.commit()

        stats = IngestionStats()
        resolution = EntityResolver(RacingEntityStore(db_session, Policy)).resolve_row(
            RowNormalizer().normalize(make_row()), stats
        )

        assert resolution.already_ingested
        assert stats.policies == 0
        assert _count(db_session, Policy) == 1

    def test_violation_without_a_committed_record_is_a_persistence_error(
        self, db_session: Session, make_row
    ) -> None:
        carrier_step = next(step for step in RESOLUTION_STEPS if step.model is Carrier)

        with pytest.raises(PersistenceError):
            EntityResolver(LostRecordStore(db_session)).resolve(
                carrier_step,
                RowNormalizer().normalize(make_row()),
                {},
                IngestionStats(),
            )


def test_missing_agent_name_is_rejected(db_session: Session, make_row) -> None:
    row = RowNormalizer().normalize(make_row(agent=""))

    with pytest.raises(PersistenceError):
        EntityResolver(EntityStore(db_session)).resolve_row(row, IngestionStats())

    assert _count(db_session, Agent) == 0
