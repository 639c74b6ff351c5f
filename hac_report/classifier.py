"""Map raw fetch results onto the FetchOutcome taxonomy.

This is a pure decision table: no network access and no HTML parsing happen
here. The fetcher records what it saw in a ``RawFetch`` and hands it over.
"""
import asyncio
from dataclasses import dataclass
from typing import Any

import aiohttp

from .const import AUTH_FAILURE_STATUSES, ENDPOINT_ERROR, MSG_SESSION_EXPIRED
from .exceptions import HACConnectionError
from .models import FetchOutcome, ParseError, SessionInvalid, Success, UpstreamError


@dataclass(frozen=True)
class UpstreamResponse:
    """What the portal answered, reduced to the parts classification needs."""

    status: int
    location: str | None = None
    login_page: bool = False


@dataclass(frozen=True)
class RawFetch:
    """Everything the fetcher observed for one request."""

    response: UpstreamResponse | None = None
    error: BaseException | None = None
    value: Any = None
    parse_error: str | None = None


def is_auth_failure(response: UpstreamResponse) -> bool:
    """Return True if the response means the portal rejected the session."""
    if response.status in AUTH_FAILURE_STATUSES:
        return True
    if 300 <= response.status < 400:
        # A redirect to the portal's error page is a portal failure, not a logout
        return not (response.location and ENDPOINT_ERROR in response.location)
    return 200 <= response.status < 300 and response.login_page


def classify_transport_error(err: BaseException) -> UpstreamError:
    """Describe a transport failure as an UpstreamError."""
    if isinstance(err, asyncio.TimeoutError) or (
        isinstance(err, HACConnectionError) and err.timed_out
    ):
        return UpstreamError("Timed out waiting for HAC")
    if isinstance(err, aiohttp.ClientError):
        return UpstreamError(f"Could not reach HAC: {err}")
    return UpstreamError(str(err) or type(err).__name__)


def classify(raw: RawFetch) -> FetchOutcome:
    """Classify a raw fetch result.

    Auth state takes priority over content: a rejected session is reported as
    SessionInvalid even when the body looks like a normal page.
    """
    if raw.error is not None:
        return classify_transport_error(raw.error)

    response = raw.response
    if response is None:
        return UpstreamError("No response from HAC")

    if is_auth_failure(response):
        return SessionInvalid(MSG_SESSION_EXPIRED)

    if not 200 <= response.status < 300:
        if 300 <= response.status < 400:
            return UpstreamError(f"HAC redirected to its error page: {response.location}")
        return UpstreamError(f"HAC returned HTTP {response.status}")

    if raw.parse_error is not None:
        return ParseError(raw.parse_error)

    if raw.value is None:
        return ParseError("HAC page produced no data")

    return Success(raw.value)
