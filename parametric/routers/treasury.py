"""
Treasury router for aggregate counters and capital contributions.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from parametric.schemas import FundingRequest, TreasuryResponse
from parametric.deps import get_caller
from parametric.db import get_session
from parametric.services.treasury import fund_treasury, get_treasury_totals

router = APIRouter()

@router.get("/treasury", response_model=TreasuryResponse)
async def get_treasury(session: Session = Depends(get_session)):
    return TreasuryResponse(**get_treasury_totals(session))

@router.post("/treasury/fund", response_model=TreasuryResponse)
async def fund(
    request: FundingRequest,
    caller: str = Depends(get_caller),
    session: Session = Depends(get_session)
):
    """Contribute capital to the treasury (administrator only)."""
    fund_treasury(session, caller, request.amount)
    return TreasuryResponse(**get_treasury_totals(session))
