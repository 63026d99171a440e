"""
Request dependencies: caller identity and the ledger time index.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from datetime import datetime, timezone
from typing import Optional

from parametric import settings

security = HTTPBearer()

async def get_caller(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> str:
    """
    Extract the caller identity from the Authorization header.

    The bearer token is the opaque identity itself; authenticating it is
    the job of the gateway in front of this service.
    """
    caller = credentials.credentials.strip()
    if not caller:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity"
        )
    return caller

def current_time_index(now: Optional[datetime] = None) -> int:
    """
    Map wall-clock time to the ledger time index.

    Formula: floor((now - INDEX_EPOCH) / INDEX_INTERVAL_SECONDS), never negative
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elapsed = (now - settings.INDEX_EPOCH).total_seconds()
    return max(0, int(elapsed // settings.INDEX_INTERVAL_SECONDS))

def get_time_index() -> int:
    """Current time index for this request."""
    return current_time_index()
