"""
Pydantic schemas for request/response validation.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

from parametric.models import ClaimStatus, ComparisonOperator, PolicyStatus

# Request schemas
class OracleRegistrationRequest(BaseModel):
    """Oracle registration request."""
    oracle_id: str = Field(min_length=1, description="Unique oracle identifier")
    operator: str = Field(min_length=1, description="Identity allowed to submit observations")
    name: str
    category: str = Field(description="Weather category the oracle reports")

class ObservationRequest(BaseModel):
    """Oracle observation submission."""
    time_index: int = Field(description="Time index the observation belongs to")
    weather_category: str
    location: str
    value: int = Field(description="Observed value in integer units")

class RiskProfileRequest(BaseModel):
    """Risk profile definition."""
    name: str
    base_rate_bps: int = Field(ge=0, description="Base premium rate in basis points")
    risk_factor_bps: int = Field(ge=0, description="Risk loading in basis points")
    min_coverage: int = Field(ge=0)
    max_coverage: int = Field(ge=0)
    coverage_multiplier: int = Field(1, ge=0)
    description: str = ""

class ConditionRequest(BaseModel):
    """Trigger condition attached to a policy."""
    condition_index: Optional[int] = Field(None, ge=0, description="Defaults to the next free index")
    weather_type: str
    operator: ComparisonOperator
    threshold: int
    payout_bps: int = Field(ge=0, le=10000, description="Share of coverage paid, in basis points")
    oracle_id: str

class PolicyRequest(BaseModel):
    """Policy issuance request."""
    risk_profile_id: str
    coverage_amount: int = Field(gt=0)
    location: str
    duration: int = Field(ge=0, description="Number of time indices the policy runs for")
    auto_renew: bool = False
    payment: int = Field(ge=0, description="Amount tendered for the premium")
    conditions: List[ConditionRequest] = Field(default_factory=list)

class RenewalRequest(BaseModel):
    """Policy renewal request."""
    payment: int = Field(ge=0, description="Amount tendered for the renewal premium")

class FundingRequest(BaseModel):
    """Treasury capital contribution."""
    amount: int = Field(gt=0)

# Response schemas
class OracleResponse(BaseModel):
    oracle_id: str
    operator: str
    name: str
    category: str
    is_active: bool
    registered_index: int

class ObservationResponse(BaseModel):
    oracle_id: str
    time_index: int
    weather_category: str
    location: str
    value: int
    submitted_at: str

class RiskProfileResponse(BaseModel):
    risk_profile_id: str
    name: str
    base_rate_bps: int
    risk_factor_bps: int
    coverage_multiplier: int
    min_coverage: int
    max_coverage: int
    description: str

class PremiumResponse(BaseModel):
    risk_profile_id: str
    coverage_amount: int
    premium: int
    coverage_valid: bool

class ConditionResponse(BaseModel):
    policy_id: int
    condition_index: int
    weather_type: str
    operator: ComparisonOperator
    threshold: int
    payout_bps: int
    oracle_id: str

class PolicyResponse(BaseModel):
    """Policy details response."""
    policy_id: int
    holder: str
    risk_profile_id: str
    coverage_amount: int
    premium_amount: int
    start_index: int
    end_index: int
    status: PolicyStatus
    effective_status: PolicyStatus = Field(description="Stored status with lapse applied")
    renewal_count: int
    auto_renew: bool
    location: str
    created_index: int
    updated_index: int
    conditions: List[ConditionResponse] = Field(default_factory=list)

class PolicyCheckResponse(BaseModel):
    policy_id: int
    time_index: int
    result: bool

class ClaimResponse(BaseModel):
    """Claim details response."""
    claim_id: int
    policy_id: int
    claimant: str
    status: ClaimStatus
    amount: int
    weather_type: str
    trigger_value: int
    condition_index: int
    oracle_id: str
    oracle_data_index: int
    submitted_index: int
    processed_index: Optional[int]
    paid_index: Optional[int]
    rejection_reason: Optional[str]

class TreasuryResponse(BaseModel):
    premiums_collected: int
    claims_paid: int
    capital_contributed: int
    balance: int

class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
