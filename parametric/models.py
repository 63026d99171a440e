"""
SQLModel database models for the parametric insurance engine.

Each table is one keyed store. Time fields ending in ``_index`` are values
of the monotonic ledger time index, not wall-clock timestamps.
"""

from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, timezone
from enum import Enum


class PolicyStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELED = "canceled"
    CLAIMED = "claimed"


class ClaimStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class ComparisonOperator(str, Enum):
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    EQUAL_TO = "equal_to"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"


class Oracle(SQLModel, table=True):
    """Registered external weather data provider."""
    id: str = Field(primary_key=True)
    operator: str = Field(index=True)
    name: str
    category: str
    is_active: bool = True
    registered_index: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class OracleObservation(SQLModel, table=True):
    """Observation reported by an oracle at one time index."""
    oracle_id: str = Field(primary_key=True, foreign_key="oracle.id")
    time_index: int = Field(primary_key=True)
    weather_category: str
    location: str
    value: int
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RiskProfile(SQLModel, table=True):
    """Premium-rate template for a class of risk."""
    id: str = Field(primary_key=True)
    name: str
    base_rate_bps: int
    coverage_multiplier: int = 1
    risk_factor_bps: int
    min_coverage: int
    max_coverage: int
    description: str = ""


class Policy(SQLModel, table=True):
    """Issued coverage agreement."""
    id: int = Field(primary_key=True)
    holder: str = Field(index=True)
    risk_profile_id: str = Field(foreign_key="riskprofile.id")
    coverage_amount: int
    premium_amount: int
    start_index: int
    end_index: int
    status: PolicyStatus = PolicyStatus.ACTIVE
    renewal_count: int = 0
    auto_renew: bool = False
    location: str
    created_index: int
    updated_index: int


class ClaimCondition(SQLModel, table=True):
    """Trigger rule attached to a policy."""
    policy_id: int = Field(primary_key=True, foreign_key="policy.id")
    condition_index: int = Field(primary_key=True)
    weather_type: str
    operator: ComparisonOperator
    threshold: int
    payout_bps: int
    oracle_id: str = Field(foreign_key="oracle.id")


class Claim(SQLModel, table=True):
    """Request to collect payout under a policy."""
    id: int = Field(primary_key=True)
    policy_id: int = Field(foreign_key="policy.id", index=True)
    claimant: str = Field(index=True)
    status: ClaimStatus = ClaimStatus.PENDING
    amount: int
    weather_type: str
    trigger_value: int
    condition_index: int
    oracle_id: str
    oracle_data_index: int
    submitted_index: int
    processed_index: Optional[int] = None
    paid_index: Optional[int] = None
    rejection_reason: Optional[str] = None


class Treasury(SQLModel, table=True):
    """Aggregate premium and payout counters (single row)."""
    id: int = Field(default=1, primary_key=True)
    premiums_collected: int = 0
    claims_paid: int = 0
    capital_contributed: int = 0
    balance: int = 0


class Counter(SQLModel, table=True):
    """Monotonic identifier counter."""
    name: str = Field(primary_key=True)
    next_value: int = 1


class HolderPolicy(SQLModel, table=True):
    """Ordered index of policies owned by a holder."""
    holder: str = Field(primary_key=True)
    position: int = Field(primary_key=True)
    policy_id: int = Field(foreign_key="policy.id")


class ClaimantClaim(SQLModel, table=True):
    """Ordered index of claims filed by a claimant."""
    claimant: str = Field(primary_key=True)
    position: int = Field(primary_key=True)
    claim_id: int = Field(foreign_key="claim.id")
