"""
Error taxonomy for the claim-evaluation engine.

One exception class per failure kind. Every entry point validates its
preconditions before touching a store, so raising any of these leaves
persisted state unchanged.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    NOT_AUTHORIZED = "NotAuthorized"
    POLICY_NOT_FOUND = "PolicyNotFound"
    POLICY_EXPIRED = "PolicyExpired"
    POLICY_NOT_ACTIVE = "PolicyNotActive"
    INSUFFICIENT_PAYMENT = "InsufficientPayment"
    INVALID_RISK_PROFILE = "InvalidRiskProfile"
    INVALID_COVERAGE_AMOUNT = "InvalidCoverageAmount"
    ALREADY_CLAIMED = "AlreadyClaimed"
    CLAIM_NOT_FOUND = "ClaimNotFound"
    INVALID_ORACLE_DATA = "InvalidOracleData"
    CLAIM_CONDITION_NOT_MET = "ClaimConditionNotMet"
    ORACLE_NOT_REGISTERED = "OracleNotRegistered"
    NO_ORACLE_DATA = "NoOracleData"
    INVALID_PARAMETERS = "InvalidParameters"
    NOT_CLAIMABLE_YET = "NotClaimableYet"
    PAYMENT_FAILED = "PaymentFailed"
    POLICY_NOT_EXPIRED = "PolicyNotExpired"


@dataclass
class InsuranceError(Exception):
    """
    Base exception for all engine failures.

    Attributes:
        message: Human-readable error description
        kind: Machine-readable failure kind
        details: Additional context about the failure
    """
    message: str
    kind: ErrorKind = ErrorKind.INVALID_PARAMETERS
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for logging and API responses."""
        result: Dict[str, Any] = {
            "error": self.kind.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class NotAuthorized(InsuranceError):
    kind: ErrorKind = ErrorKind.NOT_AUTHORIZED


@dataclass
class PolicyNotFound(InsuranceError):
    kind: ErrorKind = ErrorKind.POLICY_NOT_FOUND


@dataclass
class PolicyExpired(InsuranceError):
    kind: ErrorKind = ErrorKind.POLICY_EXPIRED


@dataclass
class PolicyNotActive(InsuranceError):
    kind: ErrorKind = ErrorKind.POLICY_NOT_ACTIVE


@dataclass
class InsufficientPayment(InsuranceError):
    kind: ErrorKind = ErrorKind.INSUFFICIENT_PAYMENT


@dataclass
class InvalidRiskProfile(InsuranceError):
    kind: ErrorKind = ErrorKind.INVALID_RISK_PROFILE


@dataclass
class InvalidCoverageAmount(InsuranceError):
    kind: ErrorKind = ErrorKind.INVALID_COVERAGE_AMOUNT


@dataclass
class AlreadyClaimed(InsuranceError):
    kind: ErrorKind = ErrorKind.ALREADY_CLAIMED


@dataclass
class ClaimNotFound(InsuranceError):
    kind: ErrorKind = ErrorKind.CLAIM_NOT_FOUND


@dataclass
class InvalidOracleData(InsuranceError):
    kind: ErrorKind = ErrorKind.INVALID_ORACLE_DATA


@dataclass
class ClaimConditionNotMet(InsuranceError):
    kind: ErrorKind = ErrorKind.CLAIM_CONDITION_NOT_MET


@dataclass
class OracleNotRegistered(InsuranceError):
    kind: ErrorKind = ErrorKind.ORACLE_NOT_REGISTERED


@dataclass
class NoOracleData(InsuranceError):
    kind: ErrorKind = ErrorKind.NO_ORACLE_DATA


@dataclass
class InvalidParameters(InsuranceError):
    kind: ErrorKind = ErrorKind.INVALID_PARAMETERS


@dataclass
class NotClaimableYet(InsuranceError):
    kind: ErrorKind = ErrorKind.NOT_CLAIMABLE_YET


@dataclass
class PaymentFailed(InsuranceError):
    kind: ErrorKind = ErrorKind.PAYMENT_FAILED


@dataclass
class PolicyNotExpired(InsuranceError):
    kind: ErrorKind = ErrorKind.POLICY_NOT_EXPIRED


# HTTP status per failure kind, used by the API exception handler
HTTP_STATUS_BY_KIND = {
    ErrorKind.NOT_AUTHORIZED: 403,
    ErrorKind.POLICY_NOT_FOUND: 404,
    ErrorKind.CLAIM_NOT_FOUND: 404,
    ErrorKind.ORACLE_NOT_REGISTERED: 404,
    ErrorKind.INVALID_RISK_PROFILE: 404,
    ErrorKind.NO_ORACLE_DATA: 404,
    ErrorKind.INSUFFICIENT_PAYMENT: 402,
    ErrorKind.PAYMENT_FAILED: 402,
    ErrorKind.POLICY_EXPIRED: 409,
    ErrorKind.POLICY_NOT_ACTIVE: 409,
    ErrorKind.ALREADY_CLAIMED: 409,
    ErrorKind.CLAIM_CONDITION_NOT_MET: 409,
    ErrorKind.NOT_CLAIMABLE_YET: 409,
    ErrorKind.POLICY_NOT_EXPIRED: 409,
    ErrorKind.INVALID_COVERAGE_AMOUNT: 400,
    ErrorKind.INVALID_ORACLE_DATA: 400,
    ErrorKind.INVALID_PARAMETERS: 400,
}
