"""
Oracle registry and observation store.
"""

from typing import Optional
from sqlmodel import Session
import logging

from parametric.db import transaction
from parametric.errors import InvalidParameters, InvalidOracleData, OracleNotRegistered
from parametric.models import Oracle, OracleObservation
from parametric.services.access import Capability, require

logger = logging.getLogger("parametric_insurance")

def register_oracle(
    session: Session,
    caller: str,
    oracle_id: str,
    operator: str,
    name: str,
    category: str,
    now: int
) -> Oracle:
    """
    Register a trusted weather data provider.

    Args:
        session: Database session
        caller: Caller identity (must be the administrator)
        oracle_id: Unique oracle ID
        operator: Identity allowed to submit observations for this oracle
        name: Display name
        category: Weather category the oracle reports
        now: Current time index

    Returns:
        The registered oracle
    """
    with transaction(session):
        require(Capability.ADMINISTRATOR, caller)
        if not oracle_id or not operator:
            raise InvalidParameters("Oracle ID and operator are required")
        if session.get(Oracle, oracle_id) is not None:
            raise InvalidParameters(
                f"Oracle {oracle_id} already registered",
                details={"oracle_id": oracle_id}
            )

        oracle = Oracle(
            id=oracle_id,
            operator=operator,
            name=name,
            category=category,
            is_active=True,
            registered_index=now
        )
        session.add(oracle)

    logger.info(f"Oracle registered | oracle_id={oracle_id} | operator={operator} | category={category}")
    return oracle

def deactivate_oracle(session: Session, caller: str, oracle_id: str) -> Oracle:
    """Deactivate an oracle. Its history is kept."""
    with transaction(session):
        require(Capability.ADMINISTRATOR, caller)
        oracle = session.get(Oracle, oracle_id)
        if oracle is None:
            raise OracleNotRegistered(f"Oracle {oracle_id} not registered")
        oracle.is_active = False
        session.add(oracle)

    logger.info(f"Oracle deactivated | oracle_id={oracle_id}")
    return oracle

def get_oracle(session: Session, oracle_id: str) -> Optional[Oracle]:
    return session.get(Oracle, oracle_id)

def is_active(session: Session, oracle_id: str) -> bool:
    oracle = session.get(Oracle, oracle_id)
    return oracle is not None and oracle.is_active

def submit_observation(
    session: Session,
    caller: str,
    oracle_id: str,
    time_index: int,
    weather_category: str,
    location: str,
    value: int
) -> OracleObservation:
    """
    Record an observation for (oracle, time index).

    A second submission for the same key overwrites the first.

    Args:
        session: Database session
        caller: Caller identity (must be the oracle's operator)
        oracle_id: Reporting oracle
        time_index: Time index the observation belongs to
        weather_category: Weather category (e.g. rainfall)
        location: Location label
        value: Observed value in integer units

    Returns:
        The stored observation
    """
    with transaction(session):
        oracle = session.get(Oracle, oracle_id)
        if oracle is None or not oracle.is_active:
            raise OracleNotRegistered(
                f"Oracle {oracle_id} is not registered or inactive",
                details={"oracle_id": oracle_id}
            )
        require(Capability.ORACLE_OPERATOR, caller, oracle.operator)
        if time_index < 0 or not weather_category:
            raise InvalidOracleData(
                "Observation needs a non-negative time index and a weather category",
                details={"time_index": time_index, "weather_category": weather_category}
            )

        observation = session.get(OracleObservation, (oracle_id, time_index))
        if observation is None:
            observation = OracleObservation(oracle_id=oracle_id, time_index=time_index,
                                            weather_category=weather_category,
                                            location=location, value=value)
        else:
            observation.weather_category = weather_category
            observation.location = location
            observation.value = value
        session.add(observation)

    logger.info(
        f"Observation recorded | oracle_id={oracle_id} | time_index={time_index} | "
        f"category={weather_category} | value={value}"
    )
    return observation

def get_observation(session: Session, oracle_id: str, time_index: int) -> Optional[OracleObservation]:
    return session.get(OracleObservation, (oracle_id, time_index))

def get_latest_observation(session: Session, oracle_id: str, now: int) -> Optional[OracleObservation]:
    """Observation at the current time index, if the oracle reported one."""
    return get_observation(session, oracle_id, now)
