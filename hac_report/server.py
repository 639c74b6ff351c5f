"""HTTP endpoints exposing the HAC client to the browser application."""
from collections.abc import Callable
from dataclasses import asdict
import logging
from typing import Any

from aiohttp import web

from .config import HACConfig
from .const import MSG_FETCH_FAILED
from .hac_client import HACClient
from .models import FetchOutcome, ParseError, SessionInvalid, Success, UpstreamError

_LOGGER = logging.getLogger(__name__)

HAC_CLIENT = web.AppKey("hac_client", HACClient)
HAC_CONFIG = web.AppKey("hac_config", HACConfig)

routes = web.RouteTableDef()


def _session_id(request: web.Request) -> str | None:
    return request.headers.get(request.app[HAC_CONFIG].session_header)


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def outcome_response(outcome: FetchOutcome, serialize: Callable[[Any], Any]) -> web.Response:
    """Turn a FetchOutcome into a JSON response.

    A rejected session gets 401 so the browser asks the user to log in again.
    Every other failure is a generic 502; the detail is only logged.
    """
    if isinstance(outcome, Success):
        return web.json_response(serialize(outcome.value))

    if isinstance(outcome, SessionInvalid):
        return web.json_response({"error": outcome.message}, status=401)

    if isinstance(outcome, (UpstreamError, ParseError)):
        _LOGGER.error("HAC request failed (%s): %s", type(outcome).__name__, outcome.detail)
    else:
        _LOGGER.error("Unexpected outcome from HAC client: %s", outcome)
    return web.json_response({"error": MSG_FETCH_FAILED}, status=502)


@routes.get("/api/hac/report-card")
async def report_card(request: web.Request) -> web.Response:
    """Return the report card for the session."""
    client = request.app[HAC_CLIENT]
    outcome = await client.get_report_card(_session_id(request), request.query.get("run"))
    return outcome_response(outcome, lambda card: card.as_dict())


@routes.get("/api/hac/grades")
async def grades(request: web.Request) -> web.Response:
    """Return current grades with assignments."""
    client = request.app[HAC_CLIENT]
    outcome = await client.get_grades(_session_id(request), request.query.get("run"))
    return outcome_response(outcome, lambda card: card.as_dict())


@routes.get(r"/api/hac/assignments/{course_index:\d+}")
async def assignments(request: web.Request) -> web.Response:
    """Return the assignments of one course."""
    client = request.app[HAC_CLIENT]
    course_index = int(request.match_info["course_index"])
    outcome = await client.get_assignments(_session_id(request), course_index)
    return outcome_response(
        outcome, lambda items: {"assignments": [asdict(item) for item in items]}
    )


@routes.get("/api/hac/gpa")
async def gpa(request: web.Request) -> web.Response:
    """Return the cumulative GPA for the selected courses."""
    client = request.app[HAC_CLIENT]
    outcome = await client.get_cumulative_gpa(
        _session_id(request),
        _split(request.query.get("courses")),
        _split(request.query.get("exclude")),
    )
    return outcome_response(outcome, lambda calculation: calculation.as_dict())


@routes.get("/api/hac/session/validate")
async def validate(request: web.Request) -> web.Response:
    """Report whether the session is still valid."""
    client = request.app[HAC_CLIENT]
    return web.json_response({"valid": await client.validate_session(_session_id(request))})


async def _close_client(app: web.Application) -> None:
    await app[HAC_CLIENT].close()


def create_app(config: HACConfig, client: HACClient | None = None) -> web.Application:
    """Build the web application."""
    app = web.Application()
    app[HAC_CONFIG] = config
    app[HAC_CLIENT] = client or HACClient(config)
    app.add_routes(routes)
    app.on_cleanup.append(_close_client)
    return app


def run(config: HACConfig) -> None:
    """Serve the HAC endpoints until interrupted."""
    _LOGGER.info("Serving HAC endpoints on %s:%s", config.host, config.port)
    # Aborted browser requests cancel the upstream fetch they started
    web.run_app(
        create_app(config),
        host=config.host,
        port=config.port,
        handler_cancellation=True,
        print=None,
    )
