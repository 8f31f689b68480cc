# schooldesk/core/exceptions.py - Domain error taxonomy
"""
Errors raised by the service layer.

Each error carries the HTTP status it maps to; ``schooldesk.main`` turns
them into ``{"detail": message}`` responses. None of them is fatal to the
process: every failure is scoped to the request that raised it.
"""
from typing import Any, Dict, Optional


class SchoolDeskError(Exception):
    """Base class for all domain errors"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.message}
        if self.details:
            payload["context"] = self.details
        return payload


class ValidationError(SchoolDeskError):
    """Bad input: out-of-range amount, missing field, malformed coupon code"""

    status_code = 400


class NotFoundError(SchoolDeskError):
    status_code = 404

    def __init__(self, entity: str, identifier: Any):
        super().__init__(f"{entity} not found", {"id": str(identifier)})
        self.entity = entity


class ConflictError(SchoolDeskError):
    """The request clashes with existing state (duplicates, locked records)"""

    status_code = 409


class ConcurrencyError(ConflictError):
    """Another writer changed the record between our read and our write"""


class StoreWriteError(SchoolDeskError):
    """The store rejected a write; the user has to resubmit"""

    status_code = 500


class PaymentGatewayError(SchoolDeskError):
    status_code = 502


class SignatureError(SchoolDeskError):
    """A webhook whose signature does not match the shared secret"""

    status_code = 401


__all__ = [
    "SchoolDeskError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ConcurrencyError",
    "StoreWriteError",
    "PaymentGatewayError",
    "SignatureError",
]
