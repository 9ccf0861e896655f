"""Error taxonomy shared by services and the HTTP boundary.

Services raise these exceptions; the application maps them to a status code
and a ``{"error": message}`` body in a single exception handler.
"""

from __future__ import annotations


class GatechaError(Exception):
    """Base error for all gateway exceptions."""

    message: str = "internal error"
    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.__class__.message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        """Return the JSON body sent to clients."""
        return {"error": self.message}


class UnauthorizedError(GatechaError):
    """Missing or invalid API key or admin session (401)."""

    message = "unauthorized"
    status_code = 401


class ForbiddenError(GatechaError):
    """Disabled key or origin outside the key's domain (403)."""

    message = "forbidden"
    status_code = 403


class ValidationError(GatechaError):
    """Malformed request body or parameters (400)."""

    message = "invalid request"
    status_code = 400


class NotFoundError(GatechaError):
    """Unknown API key id (404)."""

    message = "not found"
    status_code = 404


class InternalError(GatechaError):
    """Store or randomness failure (500). The message never carries internal detail."""
