"""Error taxonomy shared by the services and translated at the HTTP boundary."""

from __future__ import annotations


class MicroMiroError(Exception):
    """Base class for expected, client-reportable failures."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MicroMiroError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request"


class AuthError(MicroMiroError):
    """Missing, invalid or expired token, or a credential mismatch."""

    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(MicroMiroError):
    """Authenticated, but lacking the required right on the resource."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundError(MicroMiroError):
    """Entity absent, or for board reads, absent or not visible."""

    status_code = 404
    default_message = "Not found"


class ConflictError(MicroMiroError):
    """A unique field is already taken. Reported like any other failed write."""

    status_code = 500
    default_message = "Failed to create user"


class InternalError(MicroMiroError):
    """Storage or connectivity failure. The message never carries details."""


class StorageUnavailableError(InternalError):
    """No warehouse connection could be checked out before the deadline."""

    default_message = "Storage temporarily unavailable"
