"""
Domain exceptions raised by the service layer

Services never import FastAPI. They raise these errors and main.py maps them
to HTTP responses with a single exception handler.
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for expected, user-facing errors"""

    status_code = 500

    def __init__(self, message: str, payload: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_response(self) -> dict:
        content: Dict[str, Any] = {"detail": self.message}
        if self.payload:
            content.update(self.payload)
        return content


class ValidationError(AppError):
    """Request is well-formed but violates a business rule"""
    status_code = 400


class ForbiddenError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Uniqueness violation (duplicate color, size, category name...)"""
    status_code = 409


class PaymentProviderError(AppError):
    """The payment provider rejected or failed a call"""
    status_code = 502


class IdentityProviderError(AppError):
    """The identity provider rejected or failed a call"""
    status_code = 502


class StorageError(AppError):
    status_code = 502
