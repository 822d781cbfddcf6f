"""
Domain-level exceptions raised by the service layer.

They carry no HTTP or FastAPI types. ``famcare.core.errors`` maps each of
them onto the JSON error envelope.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base class for all service-level errors."""

    status_code: int = 400
    code: str = "bad_request"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def errors(self) -> dict[str, list[str]] | None:
        return None

    @property
    def details(self) -> dict[str, Any] | None:
        return None


class ValidationFailed(ServiceError):
    status_code = 422
    code = "validation_error"

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self._errors = errors or {}

    @property
    def errors(self) -> dict[str, list[str]] | None:
        return self._errors or None


class NotFoundError(ServiceError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, key: Any = None, message: str | None = None) -> None:
        super().__init__(message or f"{entity} not found")
        self.entity = entity
        self.key = key


class ConflictError(ServiceError):
    status_code = 409
    code = "conflict"


class ForbiddenError(ServiceError):
    status_code = 403
    code = "forbidden"

    def __init__(self, message: str = "You are not allowed to perform this action") -> None:
        super().__init__(message)


class InvalidCredentialsError(ServiceError):
    """Wrong password and unknown email are deliberately indistinguishable."""

    status_code = 401
    code = "invalid_credentials"

    def __init__(self, attempts_remaining: int) -> None:
        super().__init__("Invalid email or password")
        self.attempts_remaining = attempts_remaining

    @property
    def details(self) -> dict[str, Any] | None:
        return {"attempts_remaining": self.attempts_remaining}


class InvalidRefreshTokenError(ServiceError):
    status_code = 401
    code = "invalid_refresh_token"

    def __init__(self) -> None:
        super().__init__("Refresh token is invalid or expired")


class RateLimitedError(ServiceError):
    status_code = 429
    code = "rate_limited"

    def __init__(self, retry_after: int) -> None:
        super().__init__("Too many failed login attempts. Try again later.")
        self.retry_after = max(int(retry_after), 1)

    @property
    def details(self) -> dict[str, Any] | None:
        return {"retry_after": self.retry_after}


class InviteCodeExhaustedError(ServiceError):
    """Repeated invite code collisions point at a broken alphabet or length."""

    status_code = 500
    code = "invite_code_exhausted"

    def __init__(self) -> None:
        super().__init__("Unable to generate a unique invite code")
