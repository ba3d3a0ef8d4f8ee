"""
app/api/routers/policies.py

Policy search and aggregation endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.schemas.policies import (
    PolicyAggregateResponse,
    PolicyDetailResponse,
    PolicySearchResponse,
    PolicySummaryResponse,
    UserPolicyAggregateResponse,
    UserResponse,
)
from app.services.policy_query_service import PolicyQueryService, get_policy_query_service
from db.models.policy import Policy
from db.session import get_db

router = APIRouter(prefix="/api/policies", tags=["policies"])


@router.get("/search", response_model=PolicySearchResponse)
def search_policies(
    username: str | None = Query(default=None, description="Text contained in the user's first name"),
    db: Session = Depends(get_db),
    query_service: PolicyQueryService = Depends(get_policy_query_service),
) -> PolicySearchResponse:
    if username is None or not username.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query parameter 'username' is required.",
        )

    result = query_service.search_by_username(db=db, username=username)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No user found matching '{username.strip()}'.",
        )

    return PolicySearchResponse(
        user=UserResponse.model_validate(result.user),
        policies=[_to_policy_detail(policy) for policy in result.policies],
    )


@router.get("/aggregate", response_model=PolicyAggregateResponse)
def aggregate_policies(
    db: Session = Depends(get_db),
    query_service: PolicyQueryService = Depends(get_policy_query_service),
) -> PolicyAggregateResponse:
    summaries = query_service.aggregate_by_user(db=db)
    return PolicyAggregateResponse(
        users=[
            UserPolicyAggregateResponse(
                user_id=summary.user.id,
                firstname=summary.user.firstname,
                email=summary.user.email,
                policy_count=summary.policy_count,
                total_premium=summary.total_premium,
                policies=[PolicySummaryResponse.model_validate(policy) for policy in summary.policies],
            )
            for summary in summaries
        ]
    )


def _to_policy_detail(policy: Policy) -> PolicyDetailResponse:
    return PolicyDetailResponse(
        id=policy.id,
        policy_number=policy.policy_number,
        policy_start_date=policy.policy_start_date,
        policy_end_date=policy.policy_end_date,
        premium_amount=policy.premium_amount,
        premium_amount_written=policy.premium_amount_written,
        policy_type=policy.policy_type,
        policy_mode=policy.policy_mode,
        producer=policy.producer,
        csr=policy.csr,
        primary=policy.primary,
        applicant_id=policy.applicant_id,
        has_active=policy.has_active,
        category_name=policy.category.name if policy.category is not None else None,
        carrier_name=policy.carrier.name if policy.carrier is not None else None,
        account_name=policy.account.name if policy.account is not None else None,
        account_type=policy.account.type if policy.account is not None else None,
    )
