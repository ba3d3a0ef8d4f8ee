"""
tests/test_policy_query_service.py

Policy search by first name and per-user aggregation.
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session, sessionmaker

from app.services.batch_runner import BatchRunner
from app.services.policy_query_service import PolicyQueryService


@pytest.fixture()
def seeded(session_factory: sessionmaker[Session], write_csv, make_row) -> None:
    rows = [
        make_row(policy_number="PN-1", firstname="Lura Lucca", premium_amount="100.50", category_name="Auto"),
        make_row(policy_number="PN-2", firstname="Lura Lucca", premium_amount="200", company_name="Travelers"),
        make_row(policy_number="PN-3", firstname="Owen_Dodson", email="owen@example.com", premium_amount=""),
    ]
    outcome = BatchRunner(session_factory=session_factory).run(write_csv(rows))
    assert outcome.ok


@pytest.mark.usefixtures("seeded")
class TestSearchByUsername:
    def test_match_is_case_insensitive_substring(self, db_session: Session) -> None:
        result = PolicyQueryService().search_by_username(db=db_session, username="LUCCA")

        assert result is not None
        assert result.user.firstname == "Lura Lucca"
        assert [policy.policy_number for policy in result.policies] == ["PN-1", "PN-2"]
        assert result.policies[0].category.name == "Auto"
        assert result.policies[1].carrier.name == "Travelers"
        assert result.policies[0].account.name == "Lura Lucca & Owen Dodson"

    def test_unknown_name_returns_none(self, db_session: Session) -> None:
        assert PolicyQueryService().search_by_username(db=db_session, username="Nobody") is None

    def test_wildcard_characters_are_literal(self, db_session: Session) -> None:
        service = PolicyQueryService()

        assert service.search_by_username(db=db_session, username="%") is None
        result = service.search_by_username(db=db_session, username="n_d")
        assert result is not None
        assert result.user.firstname == "Owen_Dodson"

    def test_blank_username_is_rejected(self, db_session: Session) -> None:
        with pytest.raises(ValueError):
            PolicyQueryService().search_by_username(db=db_session, username="  ")


@pytest.mark.usefixtures("seeded")
def test_aggregate_sums_premiums_per_user(db_session: Session) -> None:
    summaries = {summary.user.firstname: summary for summary in PolicyQueryService().aggregate_by_user(db=db_session)}

    assert summaries["Lura Lucca"].policy_count == 2
    assert summaries["Lura Lucca"].total_premium == pytest.approx(300.5)
    assert summaries["Owen_Dodson"].policy_count == 1
    assert summaries["Owen_Dodson"].total_premium == 0
