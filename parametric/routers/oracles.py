"""
Oracles router for registration and observation submission.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from parametric.schemas import (
    OracleRegistrationRequest, OracleResponse, ObservationRequest, ObservationResponse
)
from parametric.deps import get_caller, get_time_index
from parametric.db import get_session
from parametric.errors import NoOracleData
from parametric.models import Oracle, OracleObservation
from parametric.services import oracles

router = APIRouter()

def _oracle_response(oracle: Oracle) -> OracleResponse:
    return OracleResponse(
        oracle_id=oracle.id,
        operator=oracle.operator,
        name=oracle.name,
        category=oracle.category,
        is_active=oracle.is_active,
        registered_index=oracle.registered_index
    )

def _observation_response(observation: OracleObservation) -> ObservationResponse:
    return ObservationResponse(
        oracle_id=observation.oracle_id,
        time_index=observation.time_index,
        weather_category=observation.weather_category,
        location=observation.location,
        value=observation.value,
        submitted_at=observation.submitted_at.isoformat()
    )

@router.post("/oracles", response_model=OracleResponse)
async def register_oracle(
    request: OracleRegistrationRequest,
    caller: str = Depends(get_caller),
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    """Register a trusted weather data provider (administrator only)."""
    oracle = oracles.register_oracle(
        session,
        caller,
        request.oracle_id,
        operator=request.operator,
        name=request.name,
        category=request.category,
        now=now
    )
    return _oracle_response(oracle)

@router.post("/oracles/{oracle_id}/deactivate", response_model=OracleResponse)
async def deactivate_oracle(
    oracle_id: str,
    caller: str = Depends(get_caller),
    session: Session = Depends(get_session)
):
    """Deactivate an oracle (administrator only)."""
    return _oracle_response(oracles.deactivate_oracle(session, caller, oracle_id))

@router.get("/oracles/{oracle_id}", response_model=OracleResponse)
async def get_oracle(oracle_id: str, session: Session = Depends(get_session)):
    oracle = oracles.get_oracle(session, oracle_id)
    if not oracle:
        raise HTTPException(status_code=404, detail="Oracle not found")
    return _oracle_response(oracle)

@router.post("/oracles/{oracle_id}/observations", response_model=ObservationResponse)
async def submit_observation(
    oracle_id: str,
    request: ObservationRequest,
    caller: str = Depends(get_caller),
    session: Session = Depends(get_session)
):
    """Submit an observation (oracle operator only)."""
    observation = oracles.submit_observation(
        session,
        caller,
        oracle_id,
        request.time_index,
        request.weather_category,
        request.location,
        request.value
    )
    return _observation_response(observation)

@router.get("/oracles/{oracle_id}/observations/latest", response_model=ObservationResponse)
async def get_latest_observation(
    oracle_id: str,
    now: int = Depends(get_time_index),
    session: Session = Depends(get_session)
):
    """Observation reported for the current time index."""
    observation = oracles.get_latest_observation(session, oracle_id, now)
    if not observation:
        raise NoOracleData(
            f"Oracle {oracle_id} has no observation at index {now}",
            details={"oracle_id": oracle_id, "time_index": now}
        )
    return _observation_response(observation)

@router.get("/oracles/{oracle_id}/observations/{time_index}", response_model=ObservationResponse)
async def get_observation(
    oracle_id: str,
    time_index: int,
    session: Session = Depends(get_session)
):
    observation = oracles.get_observation(session, oracle_id, time_index)
    if not observation:
        raise NoOracleData(
            f"Oracle {oracle_id} has no observation at index {time_index}",
            details={"oracle_id": oracle_id, "time_index": time_index}
        )
    return _observation_response(observation)
