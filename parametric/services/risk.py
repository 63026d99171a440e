"""
Risk profile catalog and premium calculation.
"""

from typing import Optional
from sqlmodel import Session
import logging

from parametric.db import transaction
from parametric.errors import InvalidParameters, InvalidRiskProfile
from parametric.models import RiskProfile
from parametric.services.access import Capability, require
from parametric.settings import BASIS_POINTS

logger = logging.getLogger("parametric_insurance")

def premium_for(profile: RiskProfile, coverage_amount: int) -> int:
    """
    Premium for a coverage amount under a risk profile.

    Formula: premium = floor(coverage_amount * (base_rate_bps + risk_factor_bps) / 10000)

    Integer floor division, never rounded up.
    """
    return coverage_amount * (profile.base_rate_bps + profile.risk_factor_bps) // BASIS_POINTS

def calculate_premium(session: Session, profile_id: str, coverage_amount: int) -> int:
    """
    Calculate the premium for a coverage amount.

    Args:
        session: Database session
        profile_id: Risk profile ID
        coverage_amount: Requested coverage in integer units

    Returns:
        Premium in integer units
    """
    profile = session.get(RiskProfile, profile_id)
    if profile is None:
        raise InvalidRiskProfile(
            f"Risk profile {profile_id} not found",
            details={"risk_profile_id": profile_id}
        )
    return premium_for(profile, coverage_amount)

def validate_coverage(profile: RiskProfile, coverage_amount: int) -> bool:
    return profile.min_coverage <= coverage_amount <= profile.max_coverage

def get_risk_profile(session: Session, profile_id: str) -> Optional[RiskProfile]:
    return session.get(RiskProfile, profile_id)

def define_risk_profile(
    session: Session,
    caller: str,
    profile_id: str,
    name: str,
    base_rate_bps: int,
    risk_factor_bps: int,
    min_coverage: int,
    max_coverage: int,
    coverage_multiplier: int = 1,
    description: str = ""
) -> RiskProfile:
    """
    Create or re-rate a risk profile.

    Re-rating an existing profile does not touch issued policies; their
    premium is only recomputed on renewal.

    Args:
        session: Database session
        caller: Caller identity (must be the administrator)
        profile_id: Risk profile ID
        name: Display name
        base_rate_bps: Base premium rate in basis points
        risk_factor_bps: Risk loading in basis points
        min_coverage: Smallest coverage amount accepted
        max_coverage: Largest coverage amount accepted
        coverage_multiplier: Informational coverage multiplier
        description: Free text description

    Returns:
        The stored risk profile
    """
    with transaction(session):
        require(Capability.ADMINISTRATOR, caller)
        if not profile_id:
            raise InvalidParameters("Risk profile ID is required")
        if min(base_rate_bps, risk_factor_bps, min_coverage, coverage_multiplier) < 0:
            raise InvalidParameters(
                "Rates, bounds and multiplier must be non-negative",
                details={"risk_profile_id": profile_id}
            )
        if min_coverage > max_coverage:
            raise InvalidParameters(
                f"min_coverage {min_coverage} exceeds max_coverage {max_coverage}",
                details={"risk_profile_id": profile_id}
            )

        profile = session.get(RiskProfile, profile_id)
        if profile is None:
            profile = RiskProfile(id=profile_id, name=name, base_rate_bps=base_rate_bps,
                                  risk_factor_bps=risk_factor_bps, min_coverage=min_coverage,
                                  max_coverage=max_coverage,
                                  coverage_multiplier=coverage_multiplier,
                                  description=description)
        else:
            profile.name = name
            profile.base_rate_bps = base_rate_bps
            profile.risk_factor_bps = risk_factor_bps
            profile.min_coverage = min_coverage
            profile.max_coverage = max_coverage
            profile.coverage_multiplier = coverage_multiplier
            profile.description = description
        session.add(profile)

    logger.info(
        f"Risk profile defined | risk_profile_id={profile_id} | "
        f"rate_bps={base_rate_bps + risk_factor_bps} | "
        f"coverage=[{min_coverage}, {max_coverage}]"
    )
    return profile
