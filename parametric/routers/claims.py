"""
Claims router for submission, processing and payment.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from typing import List
import logging

from parametric.schemas import ClaimResponse
from parametric.deps import get_caller, get_time_index
from parametric.db import get_session
from parametric.models import Claim
from parametric.services import claims
from parametric import settings

logger = logging.getLogger("parametric_insurance")

router = APIRouter()

def _claim_response(claim: Claim) -> ClaimResponse:
    return ClaimResponse(
        claim_id=claim.id,
        policy_id=claim.policy_id,
        claimant=claim.claimant,
        status=claim.status,
        amount=claim.amount,
        weather_type=claim.weather_type,
        trigger_value=claim.trigger_value,
        condition_index=claim.condition_index,
        oracle_id=claim.oracle_id,
        oracle_data_index=claim.oracle_data_index,
        submitted_index=claim.submitted_index,
        processed_index=claim.processed_index,
        paid_index=claim.paid_index,
        rejection_reason=claim.rejection_reason
    )

@router.post("/policies/{policy_id}/claims", response_model=ClaimResponse)
async def submit_claim(
    policy_id: int,
    caller: str = Depends(get_caller),
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    """
    Submit a claim against a policy.

    This endpoint:
    1. Evaluates the policy's conditions against current oracle data
    2. Records a pending claim on a match
    3. Processes it straight away when AUTO_PROCESS_CLAIMS is set
    """
    claim = claims.submit_claim(session, caller, policy_id, now)
    if settings.AUTO_PROCESS_CLAIMS:
        logger.info(f"Auto-processing claim | claim_id={claim.id}")
        claim = claims.process_claim(session, settings.ADMIN_IDENTITY, claim.id, now)
    return _claim_response(claim)

@router.get("/policies/{policy_id}/claims", response_model=List[ClaimResponse])
async def list_policy_claims(policy_id: int, session: Session = Depends(get_session)):
    return [_claim_response(c) for c in claims.list_policy_claims(session, policy_id)]

@router.get("/claims/{claim_id}", response_model=ClaimResponse)
async def get_claim(claim_id: int, session: Session = Depends(get_session)):
    claim = claims.get_claim(session, claim_id)
    if not claim:
        raise HTTPException(status_code=404, detail="Claim not found")
    return _claim_response(claim)

@router.post("/claims/{claim_id}/process", response_model=ClaimResponse)
async def process_claim(
    claim_id: int,
    caller: str = Depends(get_caller),
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    """Approve or reject a pending claim (administrator only)."""
    return _claim_response(claims.process_claim(session, caller, claim_id, now))

@router.post("/claims/{claim_id}/pay", response_model=ClaimResponse)
async def pay_claim(
    claim_id: int,
    caller: str = Depends(get_caller),
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    """Pay an approved claim (administrator or claimant)."""
    return _claim_response(claims.pay_claim(session, caller, claim_id, now))
