"""
Database configuration, session management and transaction boundaries.
"""

from sqlmodel import SQLModel, create_engine, Session
from typing import Generator, Iterator
from contextlib import contextmanager
from threading import RLock
import logging

# Import all models to ensure they are registered with SQLModel
from parametric.models import (
    Oracle, OracleObservation, RiskProfile, Policy, ClaimCondition, Claim,
    Treasury, Counter, HolderPolicy, ClaimantClaim
)
from parametric.settings import DATABASE_URL

logger = logging.getLogger("parametric_insurance")

# Create engine
engine = create_engine(DATABASE_URL, echo=False)

# Serializes every write entry point across sessions and threads
_write_lock = RLock()

def create_db_and_tables(bind=None):
    """Create database tables."""
    SQLModel.metadata.create_all(bind or engine)

def get_session() -> Generator[Session, None, None]:
    """Get database session."""
    with Session(engine) as session:
        yield session

@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """
    Run a block as one all-or-nothing transaction.

    Commits once when the outermost block exits cleanly. Any exception rolls
    the session back to its state before the block and is re-raised. Nested
    blocks on the same session join the outer transaction.
    """
    depth = session.info.get("transaction_depth", 0)
    with _write_lock:
        session.info["transaction_depth"] = depth + 1
        try:
            yield session
            if depth == 0:
                session.commit()
        except Exception as e:
            if depth == 0:
                session.rollback()
                logger.warning(f"Transaction rolled back | error={e}")
            raise
        finally:
            session.info["transaction_depth"] = depth

def next_id(session: Session, name: str) -> int:
    """
    Take the next value of a named monotonic counter.

    Must be called inside ``transaction`` so the increment is rolled back
    together with the record that consumed it.
    """
    counter = session.get(Counter, name)
    if counter is None:
        counter = Counter(name=name, next_value=1)
    value = counter.next_value
    counter.next_value = value + 1
    session.add(counter)
    return value

def load_seed_data(session: Session, now: int = 0):
    """Load the YAML catalog into an empty database."""
    from parametric.cache import config_cache
    from parametric.services.oracles import register_oracle
    from parametric.services.risk import define_risk_profile
    from parametric.services.treasury import fund_treasury
    from parametric.settings import ADMIN_IDENTITY

    catalog = config_cache.get_catalog()

    with transaction(session):
        for profile in config_cache.get_risk_profiles():
            if session.get(RiskProfile, profile["id"]) is None:
                define_risk_profile(
                    session,
                    ADMIN_IDENTITY,
                    profile["id"],
                    name=profile["name"],
                    base_rate_bps=profile["base_rate_bps"],
                    risk_factor_bps=profile["risk_factor_bps"],
                    min_coverage=profile["min_coverage"],
                    max_coverage=profile["max_coverage"],
                    coverage_multiplier=profile.get("coverage_multiplier", 1),
                    description=profile.get("description", "")
                )

        for oracle in config_cache.get_oracles():
            if session.get(Oracle, oracle["id"]) is None:
                register_oracle(
                    session,
                    ADMIN_IDENTITY,
                    oracle["id"],
                    operator=oracle["operator"],
                    name=oracle["name"],
                    category=oracle["category"],
                    now=now
                )

        opening_capital = catalog.get("treasury", {}).get("opening_capital", 0)
        if opening_capital and session.get(Treasury, 1) is None:
            fund_treasury(session, ADMIN_IDENTITY, opening_capital)

    logger.info("Seed data loaded successfully")

def initialize_database(now: int = 0):
    """Initialize database with tables and seed data."""
    logger.info("Creating database tables...")
    create_db_and_tables()
    logger.info("Loading seed data...")
    with Session(engine) as session:
        load_seed_data(session, now)
    logger.info("Database initialization complete")
