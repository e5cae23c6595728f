"""
Error taxonomy for the SmokeCloud client.

Transport failures (DNS, connection) are left as ``httpx.TransportError``.
Everything the client itself decides is a failure derives from
``SmokeCloudError`` and carries enough structure for callers to branch on
the class, the HTTP ``status`` or the service's ``code``.
"""
from __future__ import annotations

from typing import Any


class SmokeCloudError(Exception):
    pass


class ConfigurationError(SmokeCloudError):
    """Invalid client-side configuration, e.g. malformed key material."""


class AuthorizationError(SmokeCloudError):
    """A credential exchange was rejected or cannot proceed."""


class InvalidArgument(SmokeCloudError, ValueError):
    """A call argument the service would reject, caught before any request."""


class ApiError(SmokeCloudError):
    """A non-2xx response from the service."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        status_text: str = "",
        errors: list[dict[str, Any]] | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.status_text = status_text
        self.errors = errors or []
        self.body = body

    @property
    def code(self) -> str | None:
        """Machine-readable code of the first error object, if any."""
        for err in self.errors:
            if isinstance(err, dict) and err.get("code"):
                return str(err["code"])
        return None


class BadRequest(ApiError):
    pass


class Unauthorized(ApiError):
    pass


class NotFound(ApiError):
    pass


class Conflict(ApiError):
    """409. On submission: an idempotency replay or a model that is already open."""


class MalformedResponse(ApiError):
    """A successful response whose body does not match the expected envelope."""


STATUS_ERRORS: dict[int, type[ApiError]] = {
    400: BadRequest,
    401: Unauthorized,
    403: Unauthorized,
    404: NotFound,
    409: Conflict,
}
