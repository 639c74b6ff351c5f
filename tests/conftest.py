"""Shared fixtures: a fake HAC portal served by aiohttp."""
import asyncio
from collections import Counter
from pathlib import Path

from aiohttp import web
import pytest

from hac_report.config import HACConfig
from hac_report.const import (
    ENDPOINT_ASSIGNMENTS,
    ENDPOINT_CLASSWORK,
    ENDPOINT_LOGIN,
    ENDPOINT_REPORT_CARDS,
)
from hac_report.hac_client import HACClient

FIXTURES = Path(__file__).parent / "fixtures"

SESSION_COOKIE = "ASP.NET_SessionId"
LIVE_TOKEN = f"{SESSION_COOKIE}=live"
DEAD_TOKEN = f"{SESSION_COOKIE}=expired"


def load_fixture(name: str) -> str:
    """Read an HTML fixture."""
    return (FIXTURES / name).read_text(encoding="utf-8")


class FakePortal:
    """Minimal stand-in for a HAC portal.

    Sessions listed in ``live`` are accepted; anything else is redirected to
    the log on page. ``overrides`` replaces the response of a path and
    ``delays`` makes a path slow.
    """

    def __init__(self) -> None:
        self.live = {"live", "second"}
        self.calls: Counter[str] = Counter()
        self.queries: list[dict[str, str]] = []
        self.cookies_seen: list[str | None] = []
        self.overrides: dict[str, tuple[int, str | bytes, dict[str, str]]] = {}
        self.delays: dict[str, float] = {}
        self.pages = {
            ENDPOINT_CLASSWORK: load_fixture("classwork.html"),
            ENDPOINT_REPORT_CARDS: load_fixture("report_card.html"),
            ENDPOINT_ASSIGNMENTS: load_fixture("grades.html"),
        }

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def handle(self, request: web.Request) -> web.Response:
        path = request.path
        self.calls[path] += 1
        self.queries.append(dict(request.query))
        self.cookies_seen.append(request.cookies.get(SESSION_COOKIE))

        if path in self.delays:
            await asyncio.sleep(self.delays[path])

        if path in self.overrides:
            status, body, headers = self.overrides[path]
            if isinstance(body, bytes):
                return web.Response(
                    status=status, body=body, headers=headers, content_type="text/html", charset="utf-8"
                )
            return web.Response(status=status, text=body, headers=headers, content_type="text/html")

        if request.cookies.get(SESSION_COOKIE) not in self.live:
            return web.Response(status=302, headers={"Location": ENDPOINT_LOGIN})

        return web.Response(text=self.pages[path], content_type="text/html")

    def app(self) -> web.Application:
        app = web.Application()
        for path in self.pages:
            app.router.add_get(path, self.handle)
        return app


@pytest.fixture
def portal() -> FakePortal:
    return FakePortal()


@pytest.fixture
async def portal_server(aiohttp_server, portal):
    return await aiohttp_server(portal.app())


@pytest.fixture
def config(portal_server) -> HACConfig:
    return HACConfig.from_dict(
        {
            "base_url": str(portal_server.make_url("/")),
            "validate_timeout": 2,
            "fetch_timeout": 2,
        }
    )


@pytest.fixture
async def client(config):
    hac_client = HACClient(config)
    yield hac_client
    await hac_client.close()
