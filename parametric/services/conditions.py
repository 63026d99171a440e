"""
Per-policy trigger conditions and their evaluation.

Conditions are OR-triggered: the first satisfied condition, in ascending
condition index, decides the payout share.
"""

from typing import List, Optional, Tuple
from sqlmodel import Session, select
import logging

from parametric.db import transaction
from parametric.errors import (
    InvalidParameters, PolicyExpired, PolicyNotActive, PolicyNotFound
)
from parametric.models import (
    ClaimCondition, ComparisonOperator, Oracle, OracleObservation, Policy, PolicyStatus
)
from parametric.services.access import Capability, require
from parametric.settings import BASIS_POINTS

logger = logging.getLogger("parametric_insurance")

def compare(value: int, operator: ComparisonOperator, threshold: int) -> bool:
    """
    Apply a comparison operator to (observed value, threshold).

    Args:
        value: Observed value
        operator: Comparison operator
        threshold: Condition threshold

    Returns:
        True if the comparison holds
    """
    if operator == ComparisonOperator.GREATER_THAN:
        return value > threshold
    elif operator == ComparisonOperator.LESS_THAN:
        return value < threshold
    elif operator == ComparisonOperator.EQUAL_TO:
        return value == threshold
    elif operator == ComparisonOperator.GREATER_OR_EQUAL:
        return value >= threshold
    elif operator == ComparisonOperator.LESS_OR_EQUAL:
        return value <= threshold
    else:
        raise ValueError(f"Unknown comparison operator: {operator}")

def list_conditions(session: Session, policy_id: int) -> List[ClaimCondition]:
    """Conditions of a policy in ascending condition index."""
    statement = (
        select(ClaimCondition)
        .where(ClaimCondition.policy_id == policy_id)
        .order_by(ClaimCondition.condition_index)
    )
    return list(session.exec(statement).all())

def add_condition(
    session: Session,
    caller: str,
    policy_id: int,
    condition_index: int,
    weather_type: str,
    operator: ComparisonOperator,
    threshold: int,
    payout_bps: int,
    oracle_id: str,
    now: int
) -> ClaimCondition:
    """
    Attach a trigger condition to a policy.

    Only the holder may add conditions, and only at the index the policy
    was issued or last renewed at. Indices are contiguous from 0.

    Args:
        session: Database session
        caller: Caller identity (must be the policy holder)
        policy_id: Policy to attach to
        condition_index: Next free condition index
        weather_type: Weather category the condition watches
        operator: Comparison operator
        threshold: Threshold value
        payout_bps: Share of coverage paid on match, in basis points
        oracle_id: Oracle whose observations are evaluated
        now: Current time index

    Returns:
        The stored condition
    """
    with transaction(session):
        policy = session.get(Policy, policy_id)
        if policy is None:
            raise PolicyNotFound(f"Policy {policy_id} not found", details={"policy_id": policy_id})
        require(Capability.POLICY_HOLDER, caller, policy.holder)
        if policy.status != PolicyStatus.ACTIVE:
            raise PolicyNotActive(
                f"Policy {policy_id} is {policy.status.value}",
                details={"policy_id": policy_id}
            )
        if now > policy.end_index:
            raise PolicyExpired(f"Policy {policy_id} expired at {policy.end_index}",
                                details={"policy_id": policy_id})
        if now != policy.start_index:
            raise InvalidParameters(
                f"Conditions can only be attached at issuance index {policy.start_index}",
                details={"policy_id": policy_id, "now": now}
            )
        if not 0 <= payout_bps <= BASIS_POINTS:
            raise InvalidParameters(
                f"Payout share {payout_bps} bps outside [0, {BASIS_POINTS}]",
                details={"policy_id": policy_id}
            )
        oracle = session.get(Oracle, oracle_id)
        if oracle is None or not oracle.is_active:
            raise InvalidParameters(
                f"Oracle {oracle_id} is not registered",
                details={"oracle_id": oracle_id}
            )
        expected_index = len(list_conditions(session, policy_id))
        if condition_index != expected_index:
            raise InvalidParameters(
                f"Condition index must be {expected_index}, got {condition_index}",
                details={"policy_id": policy_id}
            )

        condition = ClaimCondition(
            policy_id=policy_id,
            condition_index=condition_index,
            weather_type=weather_type,
            operator=ComparisonOperator(operator),
            threshold=threshold,
            payout_bps=payout_bps,
            oracle_id=oracle_id
        )
        session.add(condition)

    logger.info(
        f"Condition added | policy_id={policy_id} | index={condition_index} | "
        f"rule={weather_type} {condition.operator.value} {threshold} | payout_bps={payout_bps}"
    )
    return condition

def matches(condition: ClaimCondition, observation_value: int, weather_type: str) -> bool:
    """Whether one condition is satisfied by a value of a weather type."""
    if condition.weather_type != weather_type:
        return False
    return compare(observation_value, condition.operator, condition.threshold)

def evaluate(
    session: Session,
    policy_id: int,
    observation_value: int,
    weather_type: str,
    oracle_id: Optional[str] = None
) -> Optional[ClaimCondition]:
    """
    First condition of matching weather type satisfied by a value.

    Args:
        session: Database session
        policy_id: Policy whose conditions are evaluated
        observation_value: Observed value
        weather_type: Weather category of the observation
        oracle_id: Only consider conditions reading this oracle

    Returns:
        Lowest-index matching condition, or None
    """
    for condition in list_conditions(session, policy_id):
        if oracle_id is not None and condition.oracle_id != oracle_id:
            continue
        if matches(condition, observation_value, weather_type):
            return condition
    return None

def observation_for(
    session: Session,
    oracle_id: str,
    time_index: int
) -> Optional[OracleObservation]:
    """Observation of an active oracle at a time index, or None."""
    oracle = session.get(Oracle, oracle_id)
    if oracle is None or not oracle.is_active:
        return None
    return session.get(OracleObservation, (oracle_id, time_index))

def find_triggered_condition(
    session: Session,
    policy_id: int,
    time_index: int
) -> Optional[Tuple[ClaimCondition, OracleObservation]]:
    """
    Evaluate every condition against its oracle's observation at a time index.

    Each oracle referenced by the policy is evaluated once; oracles that are
    inactive or silent at the index are skipped.

    Returns:
        (condition, observation) for the lowest-index match, or None
    """
    best = None
    oracle_ids = []
    for condition in list_conditions(session, policy_id):
        if condition.oracle_id not in oracle_ids:
            oracle_ids.append(condition.oracle_id)

    for oracle_id in oracle_ids:
        observation = observation_for(session, oracle_id, time_index)
        if observation is None:
            continue
        condition = evaluate(session, policy_id, observation.value,
                             observation.weather_category, oracle_id=oracle_id)
        if condition is not None and (best is None or condition.condition_index < best[0].condition_index):
            best = (condition, observation)
    return best
