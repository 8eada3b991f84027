# luckyspin/errors.py
from __future__ import annotations


class SpinError(Exception):
    """Base for errors the HTTP layer knows how to render."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(SpinError):
    status_code = 400
    code = "invalid_request"
    message = "Invalid request."


class NotFound(SpinError):
    status_code = 404
    code = "not_found"
    message = "Not found."


class RestaurantNotFound(NotFound):
    message = "Restaurant not found."


class SpinNotFound(NotFound):
    message = "Spin not found."


class ClaimNotFound(NotFound):
    message = "Invalid claim token."


class TransientConflict(SpinError):
    """Serialization retries exhausted; nothing was committed by the last attempt."""

    status_code = 503
    code = "retry_later"
    message = "The wheel is busy right now. Please try again in a moment."


class MalformedRequest(ValidationError):
    """Body failed schema validation (bad JSON, missing or oversized fields)."""

    status_code = 422
    message = "Malformed request body."
