"""Fetch and parse HAC pages for a session."""
import asyncio
from collections.abc import Callable
import logging
from typing import Any

import aiohttp

from .classifier import RawFetch, classify
from .const import (
    ENDPOINT_ASSIGNMENTS,
    ENDPOINT_REPORT_CARDS,
    PARAM_REPORT_CARD_RUN,
    PARAM_REPORT_PERIOD,
)
from .exceptions import HACParseError
from .models import FetchOutcome, ParseError, SessionInvalid, UpstreamError
from .parser import parse_grades, parse_report_card
from .portal import HACPortal

_LOGGER = logging.getLogger(__name__)


class ReportFetcher:
    """Retrieve a portal page and turn it into a classified outcome.

    Each fetch issues exactly one request. The session may have expired since
    it was validated, so a rejected session is still reported as
    SessionInvalid here.
    """

    def __init__(self, portal: HACPortal) -> None:
        """Initialize the fetcher."""
        self.portal = portal

    async def fetch_report_card(self, token: str, run: str | None = None) -> FetchOutcome:
        """Fetch the report card, optionally for a specific run."""
        params = {PARAM_REPORT_CARD_RUN: run} if run else None
        return await self._fetch(token, ENDPOINT_REPORT_CARDS, parse_report_card, params)

    async def fetch_grades(self, token: str, run: str | None = None) -> FetchOutcome:
        """Fetch current grades with the per-assignment breakdown."""
        params = {PARAM_REPORT_PERIOD: run} if run else None
        return await self._fetch(token, ENDPOINT_ASSIGNMENTS, parse_grades, params)

    async def _fetch(
        self,
        token: str,
        path: str,
        parse: Callable[[str], Any],
        params: dict[str, str] | None,
    ) -> FetchOutcome:
        raw = await self._retrieve(token, path, parse, params)
        outcome = classify(raw)

        if isinstance(outcome, SessionInvalid):
            _LOGGER.warning("HAC rejected the session while fetching %s", path)
        elif isinstance(outcome, (UpstreamError, ParseError)):
            _LOGGER.warning("Fetching %s failed: %s", path, outcome.detail)
        else:
            _LOGGER.info("Fetched %s", path)

        return outcome

    async def _retrieve(
        self,
        token: str,
        path: str,
        parse: Callable[[str], Any],
        params: dict[str, str] | None,
    ) -> RawFetch:
        """Run the request and parser, capturing failures for classification."""
        try:
            response, body = await self.portal.get(
                token,
                path,
                timeout=self.portal.config.fetch_timeout,
                params=params,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            return RawFetch(error=err)

        # Only parse pages the portal served to an authenticated session
        if not 200 <= response.status < 300 or response.login_page:
            return RawFetch(response=response)

        try:
            value = parse(body)
        except HACParseError as err:
            return RawFetch(response=response, parse_error=str(err))
        except Exception as err:  # pylint: disable=broad-except
            _LOGGER.exception("Unexpected error parsing %s", path)
            return RawFetch(response=response, parse_error=f"Unexpected page structure: {err}")

        return RawFetch(response=response, value=value)
