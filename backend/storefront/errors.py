# backend/storefront/errors.py
"""
Error kinds shared by repositories, workflows and routes.

Every rejection carries a kind, an HTTP status and a human-readable message.
Routes never build error responses by hand: the handlers registered in
create_app() turn any ServiceError into the standard response envelope.
"""
from __future__ import annotations


class ServiceError(Exception):
    kind = "internal"
    status = 500

    def __init__(self, message: str, details: list | dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ServiceError):
    """400-level input problem."""
    kind = "validation"
    status = 400


class AuthenticationError(ServiceError):
    kind = "unauthenticated"
    status = 401


class PermissionDeniedError(ServiceError):
    kind = "forbidden"
    status = 403


class NotFoundError(ServiceError):
    kind = "not_found"
    status = 404


class ConflictError(ServiceError):
    """409-level business rule conflict (e.g., duplicate email, category in use)."""
    kind = "conflict"
    status = 409


class RateLimitedError(ServiceError):
    kind = "rate_limited"
    status = 429

    def __init__(self, message: str, retry_after_seconds: int | None = None):
        super().__init__(message, details={"retry_after_seconds": retry_after_seconds})
        self.retry_after_seconds = retry_after_seconds


class OrderWriteError(ServiceError):
    """
    A multi-statement order write failed part-way.

    `details` reports which step failed and what happened to the rows that
    were already written. When the compensating delete itself fails, the
    exception raised by it is kept on `compensation_error` and the original
    one is chained as __cause__.
    """
    kind = "internal"
    status = 500

    def __init__(self, message: str, details: dict, compensation_error: Exception | None = None):
        super().__init__(message, details=details)
        self.compensation_error = compensation_error
