"""
Risk profiles router for the premium-rate catalog.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from parametric.schemas import RiskProfileRequest, RiskProfileResponse, PremiumResponse
from parametric.deps import get_caller
from parametric.db import get_session
from parametric.models import RiskProfile
from parametric.services import risk

router = APIRouter()

def _profile_response(profile: RiskProfile) -> RiskProfileResponse:
    return RiskProfileResponse(
        risk_profile_id=profile.id,
        name=profile.name,
        base_rate_bps=profile.base_rate_bps,
        risk_factor_bps=profile.risk_factor_bps,
        coverage_multiplier=profile.coverage_multiplier,
        min_coverage=profile.min_coverage,
        max_coverage=profile.max_coverage,
        description=profile.description
    )

@router.put("/risk-profiles/{profile_id}", response_model=RiskProfileResponse)
async def define_risk_profile(
    profile_id: str,
    request: RiskProfileRequest,
    caller: str = Depends(get_caller),
    session: Session = Depends(get_session)
):
    """Create or re-rate a risk profile (administrator only)."""
    profile = risk.define_risk_profile(
        session,
        caller,
        profile_id,
        name=request.name,
        base_rate_bps=request.base_rate_bps,
        risk_factor_bps=request.risk_factor_bps,
        min_coverage=request.min_coverage,
        max_coverage=request.max_coverage,
        coverage_multiplier=request.coverage_multiplier,
        description=request.description
    )
    return _profile_response(profile)

@router.get("/risk-profiles/{profile_id}", response_model=RiskProfileResponse)
async def get_risk_profile(profile_id: str, session: Session = Depends(get_session)):
    profile = risk.get_risk_profile(session, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Risk profile not found")
    return _profile_response(profile)

@router.get("/risk-profiles/{profile_id}/premium", response_model=PremiumResponse)
async def quote_premium(
    profile_id: str,
    coverage_amount: int = Query(gt=0),
    session: Session = Depends(get_session)
):
    """
    Price coverage under a risk profile.

    Returns the premium together with whether the coverage amount is
    within the profile's bounds.
    """
    premium = risk.calculate_premium(session, profile_id, coverage_amount)
    profile = risk.get_risk_profile(session, profile_id)
    return PremiumResponse(
        risk_profile_id=profile_id,
        coverage_amount=coverage_amount,
        premium=premium,
        coverage_valid=risk.validate_coverage(profile, coverage_amount)
    )
