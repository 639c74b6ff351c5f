"""HAC (Home Access Center) client for fetching report card data."""
from collections.abc import Awaitable, Callable, Iterable
import logging
import re
from types import TracebackType

import aiohttp

from .classifier import classify_transport_error
from .config import HACConfig
from .const import MSG_SESSION_EXPIRED, MSG_SESSION_REQUIRED
from .exceptions import HACConnectionError
from .fetcher import ReportFetcher
from .gpa import cumulative_gpa
from .models import FetchOutcome, SessionInvalid, Success
from .portal import HACPortal
from .validator import SessionValidator

_LOGGER = logging.getLogger(__name__)

FetchCall = Callable[[ReportFetcher, str], Awaitable[FetchOutcome]]

# Control characters cannot be sent in a Cookie header
_UNSENDABLE_RE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


def session_token(session_id: str | None) -> str | None:
    """Return the token to send for a session id, or None if it is unusable."""
    token = (session_id or "").strip()
    if not token:
        return None
    if _UNSENDABLE_RE.search(token):
        _LOGGER.warning("Session id contains control characters, treating it as missing")
        return None
    return token


class HACClient:
    """Client to interact with Home Access Center on behalf of a session.

    Every call validates the session before fetching, so a dead session is
    reported as SessionInvalid instead of an ambiguous fetch failure. The
    client keeps no per-session state; the session token is only used for
    the duration of a call.
    """

    def __init__(
        self,
        config: HACConfig | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the HAC client.

        An injected ``session`` stays owned by the caller. It should use
        ``aiohttp.DummyCookieJar`` so cookies of one student never leak into
        another student's requests.
        """
        self.config = config or HACConfig()
        self._session = session
        self._owns_session = session is None
        self._portal: HACPortal | None = None

    def _ensure_portal(self) -> HACPortal:
        """Create the HTTP session and portal if needed."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar())
            self._owns_session = True
            self._portal = None

        if self._portal is None:
            self._portal = HACPortal(self._session, self.config)
        return self._portal

    @property
    def validator(self) -> SessionValidator:
        """Session validator bound to this client's portal."""
        return SessionValidator(self._ensure_portal())

    @property
    def fetcher(self) -> ReportFetcher:
        """Report fetcher bound to this client's portal."""
        return ReportFetcher(self._ensure_portal())

    async def _gated(self, session_id: str | None, fetch: FetchCall) -> FetchOutcome:
        """Validate the session, then run the fetch."""
        token = session_token(session_id)
        if token is None:
            return SessionInvalid(MSG_SESSION_REQUIRED)

        if self.config.validate_session:
            try:
                valid = await self.validator.validate(token)
            except HACConnectionError as err:
                _LOGGER.warning("Could not validate HAC session: %s", err)
                return classify_transport_error(err)

            if not valid:
                _LOGGER.info("HAC session is no longer valid")
                return SessionInvalid(MSG_SESSION_EXPIRED)
        else:
            _LOGGER.debug("Session validation disabled, fetching directly")

        return await fetch(self.fetcher, token)

    async def validate_session(self, session_id: str | None) -> bool:
        """Return True if the portal accepts the session.

        Portal failures are logged and reported as not valid.
        """
        token = session_token(session_id)
        if token is None:
            return False

        try:
            return await self.validator.validate(token)
        except HACConnectionError as err:
            _LOGGER.warning("Could not validate HAC session: %s", err)
            return False

    async def get_report_card(self, session_id: str | None, run: str | None = None) -> FetchOutcome:
        """Fetch the report card for a session."""
        return await self._gated(
            session_id, lambda fetcher, token: fetcher.fetch_report_card(token, run)
        )

    async def get_grades(self, session_id: str | None, run: str | None = None) -> FetchOutcome:
        """Fetch current grades, including each course's assignments."""
        return await self._gated(
            session_id, lambda fetcher, token: fetcher.fetch_grades(token, run)
        )

    async def get_assignments(self, session_id: str | None, course_index: int) -> FetchOutcome:
        """Fetch the assignments of one course, by its position on the grades page."""
        outcome = await self.get_grades(session_id)
        if not isinstance(outcome, Success):
            return outcome

        courses = outcome.value.courses
        if not 0 <= course_index < len(courses):
            _LOGGER.debug("No course at index %d (%d courses)", course_index, len(courses))
            return Success(())
        return Success(courses[course_index].assignments)

    async def get_cumulative_gpa(
        self,
        session_id: str | None,
        selected_course_ids: Iterable[str],
        excluded_course_names: Iterable[str] = (),
    ) -> FetchOutcome:
        """Calculate cumulative GPA from current grades and past cycles."""
        selected = list(selected_course_ids)
        excluded = list(excluded_course_names)

        async def fetch(fetcher: ReportFetcher, token: str) -> FetchOutcome:
            grades = await fetcher.fetch_grades(token)
            if not isinstance(grades, Success):
                return grades

            report_card = await fetcher.fetch_report_card(token)
            if isinstance(report_card, SessionInvalid):
                return report_card
            if not isinstance(report_card, Success):
                # Past cycles are optional, current courses still count
                _LOGGER.warning("Calculating GPA without report card: %s", report_card)
                past = None
            else:
                past = report_card.value

            return Success(cumulative_gpa(grades.value, past, selected, excluded))

        return await self._gated(session_id, fetch)

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        self._portal = None

    async def __aenter__(self) -> "HACClient":
        """Enter the client context."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the client on exit."""
        await self.close()
