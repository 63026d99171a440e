"""
Shared fixtures: in-memory database, controllable clock and a seeded world.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine, select

from parametric.db import create_db_and_tables, get_session, load_seed_data
from parametric.deps import get_time_index
from parametric.main import app
from parametric.models import (
    Oracle, OracleObservation, RiskProfile, Policy, ClaimCondition, Claim,
    Treasury, Counter, HolderPolicy, ClaimantClaim, ComparisonOperator
)
from parametric.services.conditions import add_condition
from parametric.services.oracles import register_oracle, submit_observation
from parametric.services.policies import issue_policy
from parametric.services.risk import define_risk_profile
from parametric.services.treasury import fund_treasury

ADMIN = "admin"
HOLDER = "alice"
OPERATOR = "station-operator"
ORACLE_ID = "O1"
PROFILE_ID = "rainfall-basic"
OPENING_CAPITAL = 1_000_000

ALL_TABLES = [
    Oracle, OracleObservation, RiskProfile, Policy, ClaimCondition, Claim,
    Treasury, Counter, HolderPolicy, ClaimantClaim
]


class Clock:
    """Mutable time index handed to the API through a dependency override."""

    def __init__(self, index: int = 0):
        self.index = index


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def base_world(session):
    """Risk profile (50 + 25 bps, coverage 10000..1000000) and one rainfall oracle."""
    define_risk_profile(
        session,
        ADMIN,
        PROFILE_ID,
        name="Rainfall basic",
        base_rate_bps=50,
        risk_factor_bps=25,
        min_coverage=10000,
        max_coverage=1000000
    )
    register_oracle(session, ADMIN, ORACLE_ID, operator=OPERATOR, name="Station 1",
                    category="rainfall", now=0)
    return session


@pytest.fixture
def world(base_world):
    """Base world with treasury capital to pay full-coverage claims."""
    fund_treasury(base_world, ADMIN, OPENING_CAPITAL)
    return base_world


@pytest.fixture
def observe(session):
    """Submit a rainfall observation as the oracle operator."""
    def _observe(time_index, value, category="rainfall", oracle_id=ORACLE_ID):
        return submit_observation(session, OPERATOR, oracle_id, time_index, category, "Nairobi", value)
    return _observe


@pytest.fixture
def issue(session):
    """
    Issue a policy to HOLDER and attach conditions at the issuance index.

    Conditions are (weather_type, operator, threshold, payout_bps) tuples
    against ORACLE_ID.
    """
    def _issue(now=10, coverage=100000, duration=50, auto_renew=False,
               conditions=(("rainfall", ComparisonOperator.GREATER_THAN, 150, 10000),)):
        policy = issue_policy(session, HOLDER, PROFILE_ID, coverage, "Nairobi", duration,
                              auto_renew, payment=10 ** 9, now=now)
        for index, (weather_type, operator, threshold, payout_bps) in enumerate(conditions):
            add_condition(session, HOLDER, policy.id, index, weather_type, operator,
                          threshold, payout_bps, ORACLE_ID, now)
        return policy
    return _issue


@pytest.fixture
def snapshot(session):
    """Dump every row of every store, for failure-atomicity checks."""
    def _snapshot():
        dump = {}
        for model in ALL_TABLES:
            columns = [c.name for c in model.__table__.columns]
            rows = session.exec(select(model)).all()
            dump[model.__name__] = sorted(
                (tuple(getattr(row, name) for name in columns) for row in rows),
                key=repr
            )
        return dump
    return _snapshot


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def client(engine, clock):
    """API client on the in-memory database, seeded from the catalog."""
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_time_index] = lambda: clock.index

    with Session(engine) as seed_session:
        load_seed_data(seed_session)

    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(identity):
    return {"Authorization": f"Bearer {identity}"}
