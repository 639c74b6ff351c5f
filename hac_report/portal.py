"""Low level requests against a HAC portal."""
import logging

import aiohttp

from .classifier import UpstreamResponse
from .config import HACConfig
from .parser import is_login_page

_LOGGER = logging.getLogger(__name__)


class HACPortal:
    """Issue requests to one HAC portal on behalf of a session token.

    The session token is sent as the ``Cookie`` header of each request and is
    never stored on the instance. Redirects are not followed: HAC answers a
    dead session with a redirect to its log on page, which must stay visible.
    """

    def __init__(self, session: aiohttp.ClientSession, config: HACConfig) -> None:
        """Initialize the portal."""
        self.session = session
        self.config = config

    def _headers(self, token: str) -> dict[str, str]:
        if self.config.session_cookie:
            cookie = f"{self.config.session_cookie}={token}"
        else:
            cookie = token
        return {
            "Cookie": cookie,
            "User-Agent": self.config.user_agent,
        }

    async def get(
        self,
        token: str,
        path: str,
        *,
        timeout: float,
        params: dict[str, str] | None = None,
    ) -> tuple[UpstreamResponse, str]:
        """GET a portal page, returning the response summary and body.

        Transport failures (``aiohttp.ClientError``, ``asyncio.TimeoutError``)
        propagate to the caller.
        """
        url = self.config.url(path)
        _LOGGER.debug("Requesting %s", url)

        async with self.session.get(
            url,
            params=params,
            headers=self._headers(token),
            allow_redirects=False,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            # Undecodable bytes become U+FFFD and fail parsing like any other bad page
            body = await response.text(errors="replace")
            status = response.status
            location = response.headers.get("Location")

        _LOGGER.debug("HAC answered %s with status %s (%d characters)", path, status, len(body))

        return (
            UpstreamResponse(
                status=status,
                location=location,
                login_page=200 <= status < 300 and is_login_page(body),
            ),
            body,
        )
