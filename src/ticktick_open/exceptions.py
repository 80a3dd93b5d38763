"""
TickTick Open API Exceptions.

Hierarchy:
    TickTickError
    ├── TickTickConfigurationError
    ├── TickTickAPIError
    │   ├── TickTickConnectionError
    │   ├── TickTickAuthenticationError
    │   ├── TickTickForbiddenError
    │   ├── TickTickNotFoundError
    │   └── TickTickServerError
    ├── TickTickResponseParseError
    └── TickTickAuthorizationError
        ├── TickTickCSRFMismatchError
        └── TickTickAuthorizationTimeoutError
"""

from __future__ import annotations

import httpx


class TickTickError(Exception):
    """Base exception for all TickTick errors."""

    pass


class TickTickConfigurationError(TickTickError):
    """Raised when the client or the authorization flow cannot be constructed."""

    pass


# =============================================================================
# Transport / Status Errors
# =============================================================================


class TickTickAPIError(TickTickError):
    """Raised when a request fails at the transport level or returns non-2xx."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str | None = None,
        url: str | None = None,
        body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.body = body
        super().__init__(message)


class TickTickConnectionError(TickTickAPIError):
    """Raised when no response was received."""

    pass


class TickTickAuthenticationError(TickTickAPIError):
    """Raised on 401 responses (missing, expired or revoked token)."""

    pass


class TickTickForbiddenError(TickTickAPIError):
    """Raised on 403 responses."""

    pass


class TickTickNotFoundError(TickTickAPIError):
    """Raised on 404 responses."""

    pass


class TickTickServerError(TickTickAPIError):
    """Raised on 5xx responses."""

    pass


_STATUS_ERRORS: dict[int, type[TickTickAPIError]] = {
    401: TickTickAuthenticationError,
    403: TickTickForbiddenError,
    404: TickTickNotFoundError,
}


def error_for_response(response: httpx.Response) -> TickTickAPIError:
    """Build the exception matching a non-2xx response."""
    status = response.status_code
    if status >= 500:
        error_class: type[TickTickAPIError] = TickTickServerError
    else:
        error_class = _STATUS_ERRORS.get(status, TickTickAPIError)

    request = response.request
    return error_class(
        f"{request.method} {request.url.path} failed with HTTP {status}",
        status_code=status,
        method=request.method,
        url=str(request.url),
        body=response.text,
    )


# =============================================================================
# Deserialization Errors
# =============================================================================


class TickTickResponseParseError(TickTickError):
    """Raised when a response body does not match the expected schema."""

    def __init__(self, message: str, *, body: str | None = None) -> None:
        self.body = body
        super().__init__(message)


# =============================================================================
# Authorization Errors
# =============================================================================


class TickTickAuthorizationError(TickTickError):
    """Raised when the OAuth2 authorization flow fails."""

    pass


class TickTickCSRFMismatchError(TickTickAuthorizationError):
    """Raised when the state returned by the provider is not the one we sent."""

    def __init__(self, expected: str, received: str) -> None:
        self.expected = expected
        self.received = received
        super().__init__("CSRF state returned by the authorization server does not match")


class TickTickAuthorizationTimeoutError(TickTickAuthorizationError):
    """Raised when the authorization redirect does not arrive in time."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"No authorization redirect received within {timeout:g} seconds")
