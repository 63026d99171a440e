"""
Policy ledger: issuance, cancellation, renewal and derived activity.

Expiry is never written back. A policy whose window has lapsed keeps its
stored ``active`` status and is reported inactive by ``is_active``.
"""

from typing import List, Optional
from sqlmodel import Session, select
import logging

from parametric.db import next_id, transaction
from parametric.errors import (
    InsufficientPayment, InvalidCoverageAmount, InvalidParameters, InvalidRiskProfile,
    PolicyNotActive, PolicyNotExpired, PolicyNotFound
)
from parametric.models import HolderPolicy, Policy, PolicyStatus, RiskProfile
from parametric.services.access import Capability, require
from parametric.services.risk import premium_for, validate_coverage
from parametric.services.treasury import credit_premium

logger = logging.getLogger("parametric_insurance")

def _load_policy(session: Session, policy_id: int) -> Policy:
    policy = session.get(Policy, policy_id)
    if policy is None:
        raise PolicyNotFound(f"Policy {policy_id} not found", details={"policy_id": policy_id})
    return policy

def _priced_profile(session: Session, profile_id: str, coverage_amount: int) -> RiskProfile:
    profile = session.get(RiskProfile, profile_id)
    if profile is None:
        raise InvalidRiskProfile(
            f"Risk profile {profile_id} not found",
            details={"risk_profile_id": profile_id}
        )
    if not validate_coverage(profile, coverage_amount):
        raise InvalidCoverageAmount(
            f"Coverage {coverage_amount} outside [{profile.min_coverage}, {profile.max_coverage}]",
            details={"risk_profile_id": profile_id, "coverage_amount": coverage_amount}
        )
    return profile

def issue_policy(
    session: Session,
    caller: str,
    profile_id: str,
    coverage_amount: int,
    location: str,
    duration: int,
    auto_renew: bool,
    payment: int,
    now: int
) -> Policy:
    """
    Issue a policy to the caller.

    This:
    1. Validates the risk profile and coverage bounds
    2. Prices the premium and checks the tendered payment
    3. Creates the policy with window [now, now + duration]
    4. Credits the premium to the treasury
    5. Appends the policy to the holder's index

    Args:
        session: Database session
        caller: Caller identity, becomes the holder
        profile_id: Risk profile ID
        coverage_amount: Coverage in integer units
        location: Location label of the insured risk
        duration: Number of time indices the policy runs for
        auto_renew: Whether the holder may renew on expiry
        payment: Amount tendered for the premium
        now: Current time index

    Returns:
        The issued policy
    """
    with transaction(session):
        if not caller:
            raise InvalidParameters("Holder identity is required")
        profile = _priced_profile(session, profile_id, coverage_amount)
        premium = premium_for(profile, coverage_amount)
        if payment < premium:
            raise InsufficientPayment(
                f"Payment {payment} below premium {premium}",
                details={"premium": premium, "payment": payment}
            )
        if duration < 0:
            raise InvalidParameters("Duration must be non-negative", details={"duration": duration})

        policy = Policy(
            id=next_id(session, "policy"),
            holder=caller,
            risk_profile_id=profile_id,
            coverage_amount=coverage_amount,
            premium_amount=premium,
            start_index=now,
            end_index=now + duration,
            status=PolicyStatus.ACTIVE,
            renewal_count=0,
            auto_renew=auto_renew,
            location=location,
            created_index=now,
            updated_index=now
        )
        session.add(policy)

        position = len(session.exec(select(HolderPolicy).where(HolderPolicy.holder == caller)).all())
        session.add(HolderPolicy(holder=caller, position=position, policy_id=policy.id))

        credit_premium(session, premium, policy.id)

    logger.info(
        f"Policy issued | policy_id={policy.id} | holder={caller} | profile={profile_id} | "
        f"coverage={coverage_amount} | premium={premium} | window=[{policy.start_index}, {policy.end_index}]"
    )
    return policy

def cancel_policy(session: Session, caller: str, policy_id: int, now: int) -> Policy:
    """Cancel an active policy (holder only). No premium is refunded."""
    with transaction(session):
        policy = _load_policy(session, policy_id)
        require(Capability.POLICY_HOLDER, caller, policy.holder)
        if policy.status != PolicyStatus.ACTIVE:
            raise PolicyNotActive(
                f"Policy {policy_id} is {policy.status.value}",
                details={"policy_id": policy_id}
            )
        policy.status = PolicyStatus.CANCELED
        policy.updated_index = now
        session.add(policy)

    logger.info(f"Policy canceled | policy_id={policy_id} | holder={caller}")
    return policy

def renew_policy(session: Session, caller: str, policy_id: int, payment: int, now: int) -> Policy:
    """
    Renew an auto-renewing policy that has reached its end index.

    The premium is recomputed at the profile's current rates and the
    window restarts at ``now`` with the original duration.

    Args:
        session: Database session
        caller: Caller identity (must be the holder)
        policy_id: Policy to renew
        payment: Amount tendered for the renewal premium
        now: Current time index

    Returns:
        The renewed policy
    """
    with transaction(session):
        policy = _load_policy(session, policy_id)
        require(Capability.POLICY_HOLDER, caller, policy.holder)
        if not policy.auto_renew:
            raise InvalidParameters(
                f"Policy {policy_id} is not set to auto-renew",
                details={"policy_id": policy_id}
            )
        if policy.status != PolicyStatus.ACTIVE:
            raise PolicyNotActive(
                f"Policy {policy_id} is {policy.status.value}",
                details={"policy_id": policy_id}
            )
        if now < policy.end_index:
            raise PolicyNotExpired(
                f"Policy {policy_id} runs until {policy.end_index}",
                details={"policy_id": policy_id, "now": now}
            )
        profile = _priced_profile(session, policy.risk_profile_id, policy.coverage_amount)
        premium = premium_for(profile, policy.coverage_amount)
        if payment < premium:
            raise InsufficientPayment(
                f"Payment {payment} below premium {premium}",
                details={"premium": premium, "payment": payment}
            )

        duration = policy.end_index - policy.start_index
        policy.premium_amount = premium
        policy.start_index = now
        policy.end_index = now + duration
        policy.renewal_count += 1
        policy.updated_index = now
        session.add(policy)

        credit_premium(session, premium, policy.id)

    logger.info(
        f"Policy renewed | policy_id={policy_id} | renewal_count={policy.renewal_count} | "
        f"premium={premium} | window=[{policy.start_index}, {policy.end_index}]"
    )
    return policy

def get_policy(session: Session, policy_id: int) -> Optional[Policy]:
    return session.get(Policy, policy_id)

def is_active(session: Session, policy_id: int, now: int) -> bool:
    """
    Whether a policy is in force at a time index.

    True iff the stored status is active and start_index <= now <= end_index.
    """
    policy = session.get(Policy, policy_id)
    if policy is None:
        return False
    return policy.status == PolicyStatus.ACTIVE and policy.start_index <= now <= policy.end_index

def effective_status(policy: Policy, now: int) -> PolicyStatus:
    """Stored status with lapse applied, for display only."""
    if policy.status == PolicyStatus.ACTIVE and now > policy.end_index:
        return PolicyStatus.EXPIRED
    return policy.status

def list_holder_policies(session: Session, holder: str) -> List[Policy]:
    """Policies owned by a holder, in issuance order."""
    statement = (
        select(Policy)
        .join(HolderPolicy, HolderPolicy.policy_id == Policy.id)
        .where(HolderPolicy.holder == holder)
        .order_by(HolderPolicy.position)
    )
    return list(session.exec(statement).all())
