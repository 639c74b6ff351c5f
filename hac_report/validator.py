"""Session liveness check against the HAC portal."""
import asyncio
import logging

import aiohttp

from .classifier import is_auth_failure
from .exceptions import HACConnectionError
from .portal import HACPortal

_LOGGER = logging.getLogger(__name__)


class SessionValidator:
    """Check whether a session token still grants access to the portal.

    An invalid session is a normal ``False`` result. ``HACConnectionError`` is
    raised only when the portal cannot answer the question.
    """

    def __init__(self, portal: HACPortal) -> None:
        """Initialize the validator."""
        self.portal = portal

    async def validate(self, token: str) -> bool:
        """Return True if the portal accepts the session."""
        config = self.portal.config
        try:
            response, _ = await self.portal.get(
                token,
                config.session_check_path,
                timeout=config.validate_timeout,
            )
        except asyncio.TimeoutError as err:
            raise HACConnectionError(
                f"Session check timed out after {config.validate_timeout}s",
                timed_out=True,
            ) from err
        except aiohttp.ClientError as err:
            raise HACConnectionError(f"Session check failed: {err}") from err

        if is_auth_failure(response):
            _LOGGER.debug("HAC rejected session (status %s)", response.status)
            return False

        if 200 <= response.status < 300:
            return True

        raise HACConnectionError(f"Session check returned HTTP {response.status}")
