"""HTTP client for the Code::Stats API.

One concrete Client covers both anonymous (read-only) and token-holding
use. Profile lookups never send the token; pulse submission requires it.
Errors are mapped onto codestats.errors; nothing is retried here.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from http import HTTPStatus
from urllib.parse import quote

import httpx

from codestats.errors import (
    APIError,
    EmptyUsernameError,
    InvalidResponseError,
    NetworkError,
    PulseTimestampTooOldError,
    RateLimitedError,
    UnauthorizedError,
    UserNotFoundError,
)
from codestats.models import Pulse, UserProfile

logger = logging.getLogger(__name__)

__version__ = "1.0.0"

DEFAULT_BASE_URL = "https://codestats.net"
API_PREFIX = "/api"
AUTH_HEADER = "X-API-Token"
# Characters left unescaped in the username path segment.
PATH_SAFE_CHARS = "@:&=+$,"
USER_AGENT = f"codestats-client/{__version__}"
DEFAULT_TIMEOUT = 30.0

# The API rejects pulses coded more than a week ago.
MAX_PULSE_AGE = timedelta(days=7)


def _error_message(response: httpx.Response) -> str:
    """Return the body's "error" field if it is JSON carrying one, else the raw body."""
    body = response.text
    try:
        payload = json.loads(body)
    except ValueError:
        return body
    if isinstance(payload, dict) and isinstance(payload.get("error"), str) and payload["error"]:
        return payload["error"]
    return body


class Client:
    """Code::Stats API client.

    api_token may be empty, in which case the client can only read public
    profiles. Configuration is fixed at construction.
    """

    def __init__(
        self,
        api_token: str = "",
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")
        self._http = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )

    @classmethod
    def anonymous(cls, **kwargs) -> Client:
        """Read-only client against the public service."""
        return cls("", DEFAULT_BASE_URL, **kwargs)

    @classmethod
    def with_base_url(cls, api_token: str, base_url: str, **kwargs) -> Client:
        """Client for a self-hosted instance or a local test server."""
        return cls(api_token, base_url, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def is_anonymous(self) -> bool:
        return not self._api_token

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        mode = "anonymous" if self.is_anonymous else "authenticated"
        return f"Client(base_url={self._base_url!r}, {mode})"

    def _send(self, operation: str, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        logger.debug("%s %s", request.method, url)
        try:
            response = self._http.send(request)
        except httpx.TransportError as exc:
            logger.warning("%s to %s failed: %s", operation, url, exc)
            raise NetworkError(operation, url, exc) from exc
        logger.debug("%s %s -> %d", request.method, url, response.status_code)
        return response

    def get_user_profile(self, username: str) -> UserProfile:
        """Fetch the public profile of username.

        Raises EmptyUsernameError, UserNotFoundError (missing or private
        profile), UnauthorizedError, RateLimitedError, APIError,
        NetworkError or InvalidResponseError.
        """
        if not username:
            raise EmptyUsernameError()

        endpoint = f"{self._base_url}{API_PREFIX}/users/{quote(username, safe=PATH_SAFE_CHARS)}"
        request = self._http.build_request("GET", endpoint)
        response = self._send("GET request", request)

        status = response.status_code
        if status == HTTPStatus.NOT_FOUND:
            raise UserNotFoundError(endpoint)
        if status == HTTPStatus.UNAUTHORIZED:
            raise UnauthorizedError(endpoint)
        if status == HTTPStatus.TOO_MANY_REQUESTS:
            raise RateLimitedError(endpoint)
        if status != HTTPStatus.OK:
            raise APIError(status, _error_message(response), endpoint)

        try:
            return UserProfile.from_dict(response.json())
        except (ValueError, TypeError) as exc:
            raise InvalidResponseError(str(exc)) from exc

    def send_pulse(self, pulse: Pulse) -> None:
        """Submit a pulse for the token's machine.

        Raises UnauthorizedError (no token or token rejected),
        PulseTimestampTooOldError, RateLimitedError, APIError or NetworkError.
        """
        if not self._api_token:
            raise UnauthorizedError()

        coded_at = pulse.aware_coded_at
        if coded_at < datetime.now(tz=coded_at.tzinfo) - MAX_PULSE_AGE:
            raise PulseTimestampTooOldError()

        endpoint = f"{self._base_url}{API_PREFIX}/my/pulses"
        request = self._http.build_request(
            "POST",
            endpoint,
            json=pulse.to_dict(),
            headers={AUTH_HEADER: self._api_token},
        )
        response = self._send("POST request", request)

        status = response.status_code
        if status == HTTPStatus.CREATED:
            logger.debug("Pulse with %d language entries accepted", len(pulse.xps))
            return
        if status == HTTPStatus.UNAUTHORIZED:
            raise UnauthorizedError(endpoint)
        if status == HTTPStatus.TOO_MANY_REQUESTS:
            raise RateLimitedError(endpoint)
        raise APIError(status, _error_message(response), endpoint)
