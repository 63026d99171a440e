"""
Claim processor.

Claim lifecycle: pending -> approved -> paid, or pending -> rejected.
Paid and rejected are terminal. Paying a claim is the only transition
that moves a policy to ``claimed``.
"""

from typing import List, Optional
from sqlmodel import Session, select
import logging

from parametric.db import next_id, transaction
from parametric.errors import (
    AlreadyClaimed, ClaimConditionNotMet, ClaimNotFound, ErrorKind, InvalidParameters,
    NotAuthorized, NotClaimableYet, PolicyNotActive, PolicyNotFound
)
from parametric.models import (
    Claim, ClaimantClaim, ClaimCondition, ClaimStatus, Policy, PolicyStatus
)
from parametric.services import policies
from parametric.services.access import Capability, is_authorized, require
from parametric.services.conditions import find_triggered_condition, matches, observation_for
from parametric.services.treasury import debit_claim
from parametric.settings import BASIS_POINTS

logger = logging.getLogger("parametric_insurance")

OPEN_STATUSES = (ClaimStatus.PENDING, ClaimStatus.APPROVED)

def claim_amount(coverage_amount: int, payout_bps: int) -> int:
    """
    Payout for a matched condition.

    Formula: floor(coverage_amount * payout_bps / 10000), capped at coverage_amount
    """
    return min(coverage_amount * payout_bps // BASIS_POINTS, coverage_amount)

def _load_claim(session: Session, claim_id: int) -> Claim:
    claim = session.get(Claim, claim_id)
    if claim is None:
        raise ClaimNotFound(f"Claim {claim_id} not found", details={"claim_id": claim_id})
    return claim

def _recorded_match_holds(session: Session, claim: Claim) -> bool:
    """Whether the condition recorded on a claim still matches its observation."""
    condition = session.get(ClaimCondition, (claim.policy_id, claim.condition_index))
    observation = observation_for(session, claim.oracle_id, claim.oracle_data_index)
    if condition is None or observation is None:
        return False
    return matches(condition, observation.value, observation.weather_category)

def list_policy_claims(session: Session, policy_id: int) -> List[Claim]:
    statement = select(Claim).where(Claim.policy_id == policy_id).order_by(Claim.id)
    return list(session.exec(statement).all())

def get_claim(session: Session, claim_id: int) -> Optional[Claim]:
    return session.get(Claim, claim_id)

def submit_claim(session: Session, caller: str, policy_id: int, now: int) -> Claim:
    """
    Submit a claim against a policy.

    This:
    1. Checks the caller holds the policy and it has not paid out
    2. Checks the policy is in force at ``now``
    3. Evaluates every condition against its oracle's observation at ``now``
    4. Records a pending claim for the lowest-index matching condition

    No claim is recorded when no condition matches.

    Args:
        session: Database session
        caller: Caller identity (must be the policy holder)
        policy_id: Policy being claimed against
        now: Current time index

    Returns:
        The pending claim
    """
    with transaction(session):
        policy = session.get(Policy, policy_id)
        if policy is None:
            raise PolicyNotFound(f"Policy {policy_id} not found", details={"policy_id": policy_id})
        require(Capability.POLICY_HOLDER, caller, policy.holder)

        existing = list_policy_claims(session, policy_id)
        if policy.status == PolicyStatus.CLAIMED or any(c.status == ClaimStatus.PAID for c in existing):
            raise AlreadyClaimed(
                f"Policy {policy_id} has already paid out",
                details={"policy_id": policy_id}
            )
        if not policies.is_active(session, policy_id, now):
            raise PolicyNotActive(
                f"Policy {policy_id} is not in force at index {now}",
                details={"policy_id": policy_id, "now": now}
            )
        open_claims = [c.id for c in existing if c.status in OPEN_STATUSES]
        if open_claims:
            raise NotClaimableYet(
                f"Policy {policy_id} has open claim {open_claims[0]}",
                details={"policy_id": policy_id, "claim_id": open_claims[0]}
            )

        match = find_triggered_condition(session, policy_id, now)
        if match is None:
            raise ClaimConditionNotMet(
                f"No condition of policy {policy_id} is met at index {now}",
                details={"policy_id": policy_id, "now": now}
            )
        condition, observation = match

        claim = Claim(
            id=next_id(session, "claim"),
            policy_id=policy_id,
            claimant=caller,
            status=ClaimStatus.PENDING,
            amount=claim_amount(policy.coverage_amount, condition.payout_bps),
            weather_type=condition.weather_type,
            trigger_value=observation.value,
            condition_index=condition.condition_index,
            oracle_id=observation.oracle_id,
            oracle_data_index=observation.time_index,
            submitted_index=now
        )
        session.add(claim)

        position = len(session.exec(select(ClaimantClaim).where(ClaimantClaim.claimant == caller)).all())
        session.add(ClaimantClaim(claimant=caller, position=position, claim_id=claim.id))

    logger.info(
        f"Claim submitted | claim_id={claim.id} | policy_id={policy_id} | "
        f"condition_index={claim.condition_index} | trigger_value={claim.trigger_value} | "
        f"amount={claim.amount}"
    )
    return claim

def process_claim(session: Session, caller: str, claim_id: int, now: int) -> Claim:
    """
    Approve or reject a pending claim.

    The condition recorded on the claim is evaluated again against the
    observation stored for the claim's oracle and oracle-data index, so an
    observation overwritten since submission is taken into account. A claim
    whose policy was canceled or whose recorded condition no longer holds
    is rejected.

    Args:
        session: Database session
        caller: Caller identity (must be the administrator)
        claim_id: Claim to process
        now: Current time index

    Returns:
        The approved or rejected claim
    """
    with transaction(session):
        claim = _load_claim(session, claim_id)
        require(Capability.ADMINISTRATOR, caller)
        if claim.status != ClaimStatus.PENDING:
            raise InvalidParameters(
                f"Claim {claim_id} is {claim.status.value}, not pending",
                details={"claim_id": claim_id}
            )

        policy = session.get(Policy, claim.policy_id)
        if policy.status != PolicyStatus.ACTIVE:
            claim.status = ClaimStatus.REJECTED
            claim.rejection_reason = ErrorKind.POLICY_NOT_ACTIVE.value
        elif not _recorded_match_holds(session, claim):
            claim.status = ClaimStatus.REJECTED
            claim.rejection_reason = ErrorKind.CLAIM_CONDITION_NOT_MET.value
        else:
            claim.status = ClaimStatus.APPROVED
        claim.processed_index = now
        session.add(claim)

    if claim.status == ClaimStatus.REJECTED:
        logger.warning(f"Claim rejected | claim_id={claim_id} | reason={claim.rejection_reason}")
    else:
        logger.info(f"Claim approved | claim_id={claim_id} | amount={claim.amount}")
    return claim

def pay_claim(session: Session, caller: str, claim_id: int, now: int) -> Claim:
    """
    Pay an approved claim.

    Debits the treasury, marks the claim paid and the policy claimed. The
    policy must still be active in storage. The transfer to the claimant is executed outside the engine.

    Args:
        session: Database session
        caller: Caller identity (administrator or the claimant)
        claim_id: Claim to pay
        now: Current time index

    Returns:
        The paid claim
    """
    with transaction(session):
        claim = _load_claim(session, claim_id)
        if not (is_authorized(Capability.ADMINISTRATOR, caller)
                or is_authorized(Capability.CLAIMANT, caller, claim.claimant)):
            raise NotAuthorized(
                f"Caller {caller!r} may not pay claim {claim_id}",
                details={"claim_id": claim_id, "caller": caller}
            )
        if claim.status == ClaimStatus.PAID:
            raise AlreadyClaimed(f"Claim {claim_id} is already paid", details={"claim_id": claim_id})
        if claim.status != ClaimStatus.APPROVED:
            raise NotClaimableYet(
                f"Claim {claim_id} is {claim.status.value}, not approved",
                details={"claim_id": claim_id}
            )
        policy = session.get(Policy, claim.policy_id)
        if policy.status == PolicyStatus.CLAIMED:
            raise AlreadyClaimed(
                f"Policy {policy.id} has already paid out",
                details={"policy_id": policy.id}
            )
        if policy.status != PolicyStatus.ACTIVE:
            raise PolicyNotActive(
                f"Policy {policy.id} is {policy.status.value}",
                details={"policy_id": policy.id, "claim_id": claim_id}
            )

        debit_claim(session, claim.amount, claim.id)

        claim.status = ClaimStatus.PAID
        claim.paid_index = now
        session.add(claim)
        policy.status = PolicyStatus.CLAIMED
        policy.updated_index = now
        session.add(policy)

    logger.info(
        f"Claim paid | claim_id={claim_id} | policy_id={claim.policy_id} | "
        f"claimant={claim.claimant} | amount={claim.amount}"
    )
    return claim

def is_claimable(session: Session, policy_id: int, now: int) -> bool:
    """
    Whether a claim submitted at ``now`` would be accepted.

    False while the policy has an open or paid claim.

    Read-only; ``submit_claim`` re-checks everything itself.
    """
    if not policies.is_active(session, policy_id, now):
        return False
    if any(c.status in OPEN_STATUSES or c.status == ClaimStatus.PAID
           for c in list_policy_claims(session, policy_id)):
        return False
    return find_triggered_condition(session, policy_id, now) is not None
