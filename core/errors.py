"""Typed failures raised by services and translated to the JSON envelope.

Every error carries the HTTP status it maps to, a human readable message and
optional ``errors`` detail (a field -> messages mapping, or the text of an
underlying exception).
"""
from typing import Any


class AppError(Exception):
    status_code = 500
    message = "An unexpected error occurred."

    def __init__(self, message: str | None = None, errors: Any = None):
        self.message = message or self.message
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 422
    message = "Validation failed."


class InvalidOperationError(ValidationError):
    status_code = 400
    message = "Invalid operation"


class InvalidCodeError(AppError):
    status_code = 400
    message = "Invalid OTP"


class ExpiredError(AppError):
    status_code = 400
    message = "OTP has expired"


class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


class ConflictError(AppError):
    status_code = 409
    message = "Resource already exists"


class AuthError(AppError):
    status_code = 401
    message = "Not authenticated"


class ForbiddenError(AuthError):
    status_code = 403
    message = "Forbidden"


class RateLimitError(AppError):
    status_code = 429
    message = "Too many requests. Please try again later."


class UnexpectedError(AppError):
    status_code = 500


class MailDeliveryError(UnexpectedError):
    message = "An error occurred. Please try again."


class PhoneVerificationError(UnexpectedError):
    message = "Failed to verify phone number."
