"""
Policies router for issuance, lifecycle and trigger conditions.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from typing import List

from parametric.schemas import (
    PolicyRequest, PolicyResponse, RenewalRequest, ConditionRequest, ConditionResponse,
    PolicyCheckResponse
)
from parametric.deps import get_caller, get_time_index
from parametric.db import get_session, transaction
from parametric.models import ClaimCondition, Policy
from parametric.services import claims, conditions, policies

router = APIRouter()

def _condition_response(condition: ClaimCondition) -> ConditionResponse:
    return ConditionResponse(
        policy_id=condition.policy_id,
        condition_index=condition.condition_index,
        weather_type=condition.weather_type,
        operator=condition.operator,
        threshold=condition.threshold,
        payout_bps=condition.payout_bps,
        oracle_id=condition.oracle_id
    )

def _policy_response(policy: Policy, session: Session, now: int) -> PolicyResponse:
    return PolicyResponse(
        policy_id=policy.id,
        holder=policy.holder,
        risk_profile_id=policy.risk_profile_id,
        coverage_amount=policy.coverage_amount,
        premium_amount=policy.premium_amount,
        start_index=policy.start_index,
        end_index=policy.end_index,
        status=policy.status,
        effective_status=policies.effective_status(policy, now),
        renewal_count=policy.renewal_count,
        auto_renew=policy.auto_renew,
        location=policy.location,
        created_index=policy.created_index,
        updated_index=policy.updated_index,
        conditions=[_condition_response(c) for c in conditions.list_conditions(session, policy.id)]
    )

@router.post("/policies", response_model=PolicyResponse)
async def issue_policy(
    request: PolicyRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    """
    Issue a policy to the caller.

    This endpoint:
    1. Prices and issues the policy
    2. Attaches any inline trigger conditions
    3. Commits both in one transaction, or neither
    """
    with transaction(session):
        policy = policies.issue_policy(
            session,
            caller,
            request.risk_profile_id,
            request.coverage_amount,
            request.location,
            request.duration,
            request.auto_renew,
            request.payment,
            now
        )
        for position, condition in enumerate(request.conditions):
            conditions.add_condition(
                session,
                caller,
                policy.id,
                position if condition.condition_index is None else condition.condition_index,
                condition.weather_type,
                condition.operator,
                condition.threshold,
                condition.payout_bps,
                condition.oracle_id,
                now
            )

    return _policy_response(policy, session, now)

@router.get("/policies/{policy_id}", response_model=PolicyResponse)
async def get_policy(
    policy_id: int,
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    policy = policies.get_policy(session, policy_id)
    if not policy:
        raise HTTPException(status_code=404, detail="Policy not found")
    return _policy_response(policy, session, now)

@router.post("/policies/{policy_id}/cancel", response_model=PolicyResponse)
async def cancel_policy(
    policy_id: int,
    caller: str = Depends(get_caller),
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    policy = policies.cancel_policy(session, caller, policy_id, now)
    return _policy_response(policy, session, now)

@router.post("/policies/{policy_id}/renew", response_model=PolicyResponse)
async def renew_policy(
    policy_id: int,
    request: RenewalRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    policy = policies.renew_policy(session, caller, policy_id, request.payment, now)
    return _policy_response(policy, session, now)

@router.get("/policies/{policy_id}/active", response_model=PolicyCheckResponse)
async def is_policy_active(
    policy_id: int,
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    return PolicyCheckResponse(
        policy_id=policy_id,
        time_index=now,
        result=policies.is_active(session, policy_id, now)
    )

@router.get("/policies/{policy_id}/claimable", response_model=PolicyCheckResponse)
async def is_policy_claimable(
    policy_id: int,
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    return PolicyCheckResponse(
        policy_id=policy_id,
        time_index=now,
        result=claims.is_claimable(session, policy_id, now)
    )

@router.post("/policies/{policy_id}/conditions", response_model=ConditionResponse)
async def add_condition(
    policy_id: int,
    request: ConditionRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    """Attach a trigger condition (holder only, at the issuance index)."""
    condition_index = request.condition_index
    if condition_index is None:
        condition_index = len(conditions.list_conditions(session, policy_id))
    condition = conditions.add_condition(
        session,
        caller,
        policy_id,
        condition_index,
        request.weather_type,
        request.operator,
        request.threshold,
        request.payout_bps,
        request.oracle_id,
        now
    )
    return _condition_response(condition)

@router.get("/policies/{policy_id}/conditions", response_model=List[ConditionResponse])
async def list_conditions(policy_id: int, session: Session = Depends(get_session)):
    return [_condition_response(c) for c in conditions.list_conditions(session, policy_id)]

@router.get("/holders/{holder}/policies", response_model=List[PolicyResponse])
async def list_holder_policies(
    holder: str,
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    return [_policy_response(p, session, now) for p in policies.list_holder_policies(session, holder)]
