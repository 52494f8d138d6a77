"""
Domain errors raised by the ordering core

Every error carries a machine-readable kind plus the diagnostic fields the
caller needs to explain the rejection. The API layer maps each kind to an
HTTP status in wholesale.main.
"""

from decimal import Decimal
from typing import Any, Dict


class WholesaleError(Exception):
    """Base class for ordering errors"""

    kind = "error"
    status_code = 400
    retryable = False

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"kind": self.kind, "message": self.message}
        for key, value in self.details.items():
            # Money goes out as a string so no precision is lost
            body[key] = str(value) if isinstance(value, Decimal) else value
        return body


class ValidationError(WholesaleError):
    """Malformed or empty request"""

    kind = "validation_error"
    status_code = 400


class NotFoundError(WholesaleError):
    """Unknown product, order or account"""

    kind = "not_found"
    status_code = 404


class PolicyViolation(WholesaleError):
    """Business rule rejection: below_moq, credit_exceeded, invalid_transition, invalid_amount"""

    kind = "policy_violation"
    status_code = 422

    def __init__(self, reason: str, message: str = None, **details: Any):
        super().__init__(message or reason.replace("_", " "), **details)
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["reason"] = self.reason
        return body


class PersistenceError(WholesaleError):
    """Storage or transaction failure; nothing was written"""

    kind = "persistence_error"
    status_code = 503
    retryable = True
