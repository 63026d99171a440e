"""
Treasury counters for collected premiums and paid claims.

Value movement itself happens outside the engine; these counters record
what the engine has credited and debited.
"""

from typing import Dict, Any
from sqlmodel import Session
import logging

from parametric.db import transaction
from parametric.errors import InvalidParameters, PaymentFailed
from parametric.models import Treasury
from parametric.services.access import Capability, require

logger = logging.getLogger("parametric_insurance")

def _treasury(session: Session) -> Treasury:
    treasury = session.get(Treasury, 1)
    if treasury is None:
        treasury = Treasury(id=1)
        session.add(treasury)
    return treasury

def credit_premium(session: Session, premium: int, policy_id: int) -> Treasury:
    """
    Credit a collected premium.

    Args:
        session: Database session
        premium: Premium amount in integer units
        policy_id: Policy the premium was written for

    Returns:
        Updated treasury
    """
    with transaction(session):
        treasury = _treasury(session)
        treasury.premiums_collected += premium
        treasury.balance += premium
        session.add(treasury)

    logger.info(f"Premium credited | policy_id={policy_id} | premium={premium}")
    return treasury

def debit_claim(session: Session, amount: int, claim_id: int) -> Treasury:
    """
    Debit a claim payout.

    Raises PaymentFailed when the balance cannot cover the amount; the
    balance never goes negative.
    """
    with transaction(session):
        treasury = _treasury(session)
        if treasury.balance < amount:
            raise PaymentFailed(
                f"Treasury balance {treasury.balance} cannot cover {amount}",
                details={"claim_id": claim_id, "balance": treasury.balance, "amount": amount}
            )
        treasury.claims_paid += amount
        treasury.balance -= amount
        session.add(treasury)

    logger.info(f"Claim debited | claim_id={claim_id} | amount={amount}")
    return treasury

def fund_treasury(session: Session, caller: str, amount: int) -> Treasury:
    """Contribute capital to the treasury (administrator only)."""
    with transaction(session):
        require(Capability.ADMINISTRATOR, caller)
        if amount <= 0:
            raise InvalidParameters("Funding amount must be positive", details={"amount": amount})
        treasury = _treasury(session)
        treasury.capital_contributed += amount
        treasury.balance += amount
        session.add(treasury)

    logger.info(f"Treasury funded | amount={amount} | balance={treasury.balance}")
    return treasury

def get_treasury_totals(session: Session) -> Dict[str, Any]:
    """
    Get treasury totals.

    Returns:
        Treasury totals summary
    """
    treasury = session.get(Treasury, 1) or Treasury(id=1)
    return {
        "premiums_collected": treasury.premiums_collected,
        "claims_paid": treasury.claims_paid,
        "capital_contributed": treasury.capital_contributed,
        "balance": treasury.balance
    }
