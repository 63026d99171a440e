"""
Authorization checks over opaque caller identities.
"""

from enum import Enum
from typing import Optional

from parametric.errors import NotAuthorized
from parametric import settings

class Capability(str, Enum):
    ADMINISTRATOR = "administrator"
    POLICY_HOLDER = "policy_holder"
    CLAIMANT = "claimant"
    ORACLE_OPERATOR = "oracle_operator"

def is_authorized(capability: Capability, caller: str, owner: Optional[str] = None) -> bool:
    """
    Decide whether a caller holds a capability.

    Args:
        capability: Capability the operation requires
        caller: Opaque caller identity
        owner: Identity owning the record (holder or oracle operator)

    Returns:
        True if the caller may act
    """
    if not caller:
        return False
    if capability == Capability.ADMINISTRATOR:
        return caller == settings.ADMIN_IDENTITY
    return owner is not None and caller == owner

def require(capability: Capability, caller: str, owner: Optional[str] = None) -> None:
    """Raise NotAuthorized unless ``is_authorized`` holds."""
    if not is_authorized(capability, caller, owner):
        raise NotAuthorized(
            f"Caller {caller!r} lacks {capability.value} capability",
            details={"capability": capability.value, "caller": caller}
        )
