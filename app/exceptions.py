# app/exceptions.py
"""
Business error taxonomy shared by every service.
Services raise these; app.main renders them as {"error": kind, "detail": message}.
"""

from typing import Optional


class ServiceError(Exception):
    kind = "internal"
    status_code = 500

    def __init__(self, message: str, payload: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message, **self.payload}


class BadRequestError(ServiceError):
    """Missing or malformed caller input. Always raised before any I/O."""
    kind = "bad_request"
    status_code = 400


class UnauthorizedError(ServiceError):
    kind = "unauthorized"
    status_code = 401


class ForbiddenError(ServiceError):
    kind = "forbidden"
    status_code = 403


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = 404


class ConflictError(ServiceError):
    """Uniqueness violation, e.g. a phone number already registered."""
    kind = "conflict"
    status_code = 409


class InvalidStateError(ServiceError):
    """A lifecycle transition was attempted from the wrong source state."""
    kind = "invalid_state"
    status_code = 400


class TransactionError(ServiceError):
    """The store could not complete a transaction (retries exhausted or timeout)."""
    kind = "internal"
    status_code = 500
