"""
app/schemas/policies.py

Response schemas for policy search and aggregation.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    firstname: str
    dob: date | None = None
    address: str | None = None
    phone: str | None = None
    state: str | None = None
    zip: str | None = None
    email: str | None = None
    gender: str | None = None
    user_type: str | None = None
    city: str | None = None


class PolicyDetailResponse(BaseModel):
    """
    One policy with the names of the entities it references.
    """

    id: UUID
    policy_number: str
    policy_start_date: date | None = None
    policy_end_date: date | None = None
    premium_amount: float
    premium_amount_written: float
    policy_type: str | None = None
    policy_mode: int | None = None
    producer: str | None = None
    csr: str | None = None
    primary: bool
    applicant_id: str | None = None
    has_active: bool
    category_name: str | None = None
    carrier_name: str | None = None
    account_name: str | None = None
    account_type: str | None = None


class PolicySearchResponse(BaseModel):
    user: UserResponse
    policies: list[PolicyDetailResponse] = Field(default_factory=list)


class PolicySummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    policy_number: str
    policy_type: str | None = None
    premium_amount: float
    policy_start_date: date | None = None
    policy_end_date: date | None = None


class UserPolicyAggregateResponse(BaseModel):
    user_id: UUID
    firstname: str
    email: str | None = None
    policy_count: int = Field(..., ge=0)
    total_premium: float
    policies: list[PolicySummaryResponse] = Field(default_factory=list)


class PolicyAggregateResponse(BaseModel):
    users: list[UserPolicyAggregateResponse] = Field(default_factory=list)
