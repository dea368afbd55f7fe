"""Error taxonomy for the Code::Stats client.

Every failure surfaces as a CodeStatsError subclass so callers can branch on
category without matching message strings:

- Validation (raised before any request): EmptyUsernameError,
  PulseTimestampTooOldError, UnauthorizedError without an endpoint.
- HTTP outcomes: UserNotFoundError (404), UnauthorizedError (401),
  RateLimitedError (429), APIError for any other unexpected status.
- Transport: NetworkError wrapping the underlying httpx exception.
- Decoding: InvalidResponseError chained from the decode failure.

The is_* predicates accept any exception (or None) and walk the
__cause__ chain, and __context__ where it was not suppressed.
"""

from __future__ import annotations

import errno
import socket
import ssl
from collections.abc import Iterator
from http import HTTPStatus

import httpx

# Substrings of transport error messages that usually clear up on retry.
TEMPORARY_NETWORK_MARKERS: tuple[str, ...] = (
    "timeout",
    "connection refused",
    "no such host",
    "network is unreachable",
    "connection reset",
)

# Socket errors behind an httpx connection failure that usually clear up on retry.
TEMPORARY_ERRNOS: frozenset[int] = frozenset(
    {errno.ECONNREFUSED, errno.ECONNRESET, errno.ENETUNREACH}
)


class CodeStatsError(Exception):
    """Base class for all errors raised by this library."""


class APIError(CodeStatsError):
    """The API answered with an unexpected HTTP status."""

    def __init__(self, status_code: int, message: str, endpoint: str = "") -> None:
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(status_code, message, endpoint)

    def __str__(self) -> str:
        if self.endpoint:
            return f"API error {self.status_code} at {self.endpoint}: {self.message}"
        return f"API error {self.status_code}: {self.message}"

    def is_temporary(self) -> bool:
        """True for 5xx and 429 responses."""
        return self.status_code >= 500 or self.status_code == HTTPStatus.TOO_MANY_REQUESTS


class _WellKnownStatusError(APIError):
    """APIError pinned to one status code with a fixed message."""

    status: HTTPStatus
    description: str

    def __init__(self, endpoint: str = "") -> None:
        super().__init__(int(self.status), self.description, endpoint)

    def __str__(self) -> str:
        return self.description


class UserNotFoundError(_WellKnownStatusError):
    """The user does not exist or their profile is private."""

    status = HTTPStatus.NOT_FOUND
    description = "user not found or profile is private"


class UnauthorizedError(_WellKnownStatusError):
    """The API token is missing or was rejected."""

    status = HTTPStatus.UNAUTHORIZED
    description = "unauthorized: API token is missing or invalid"


class RateLimitedError(_WellKnownStatusError):
    status = HTTPStatus.TOO_MANY_REQUESTS
    description = "API rate limit exceeded"


class EmptyUsernameError(CodeStatsError, ValueError):
    def __init__(self) -> None:
        super().__init__("username cannot be empty")


class PulseTimestampTooOldError(CodeStatsError, ValueError):
    def __init__(self) -> None:
        super().__init__("pulse timestamp is older than a week and will be rejected")


class InvalidResponseError(CodeStatsError):
    """The API response body could not be decoded."""

    def __init__(self, detail: str = "") -> None:
        message = "invalid response from API"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NetworkError(CodeStatsError):
    """A request never produced an HTTP response.

    A bare NetworkError() (no operation, url or cause) stands for a generic
    connectivity failure.
    """

    def __init__(
        self,
        operation: str = "",
        url: str = "",
        cause: BaseException | None = None,
    ) -> None:
        self.operation = operation
        self.url = url
        self.cause = cause
        super().__init__(operation, url, cause)

    def __str__(self) -> str:
        if not self.operation and self.cause is None:
            return "network error"
        if self.url:
            return f"network error during {self.operation} to {self.url}: {self.cause}"
        return f"network error during {self.operation}: {self.cause}"

    def is_temporary(self) -> bool:
        """Guess whether retrying could succeed.

        TLS failures never are. httpx timeouts and connection failures caused
        by a refused, reset or unreachable socket or a DNS lookup are.
        Anything else is matched against TEMPORARY_NETWORK_MARKERS.
        """
        if self.cause is None:
            return False
        underlying = list(_chain(self.cause))
        if any(isinstance(exc, ssl.SSLError) for exc in underlying):
            return False
        if isinstance(self.cause, httpx.TimeoutException):
            return True
        if isinstance(self.cause, httpx.NetworkError) and any(
            isinstance(exc, socket.gaierror)
            or (isinstance(exc, OSError) and exc.errno in TEMPORARY_ERRNOS)
            for exc in underlying
        ):
            return True
        text = str(self.cause)
        return any(marker in text for marker in TEMPORARY_NETWORK_MARKERS)


def _chain(err: BaseException | None) -> Iterator[BaseException]:
    """Yield err and the exceptions behind it, without cycles.

    Follows __cause__, or __context__ when the context was not suppressed.
    """
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        if err.__cause__ is not None:
            err = err.__cause__
        elif not err.__suppress_context__:
            err = err.__context__
        else:
            err = None


def _has_status(err: BaseException | None, kind: type[APIError], status: int) -> bool:
    for exc in _chain(err):
        if isinstance(exc, kind):
            return True
        if isinstance(exc, APIError) and exc.status_code == status:
            return True
    return False


def is_user_not_found(err: BaseException | None) -> bool:
    return _has_status(err, UserNotFoundError, HTTPStatus.NOT_FOUND)


def is_unauthorized(err: BaseException | None) -> bool:
    return _has_status(err, UnauthorizedError, HTTPStatus.UNAUTHORIZED)


def is_rate_limited(err: BaseException | None) -> bool:
    return _has_status(err, RateLimitedError, HTTPStatus.TOO_MANY_REQUESTS)


def is_network_error(err: BaseException | None) -> bool:
    """True for any NetworkError, whether or not it looks temporary."""
    return any(isinstance(exc, NetworkError) for exc in _chain(err))


def is_temporary(err: BaseException | None) -> bool:
    """True if the first APIError/NetworkError in the chain reports itself temporary."""
    for exc in _chain(err):
        if isinstance(exc, (APIError, NetworkError)):
            return exc.is_temporary()
    return False
