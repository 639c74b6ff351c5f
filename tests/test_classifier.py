"""Tests for the fetch result decision table."""
import asyncio

import aiohttp
import pytest

from hac_report.classifier import RawFetch, UpstreamResponse, classify, classify_transport_error
from hac_report.exceptions import HACConnectionError
from hac_report.models import ParseError, SessionInvalid, Success, UpstreamError


def _response(status: int, **kwargs) -> UpstreamResponse:
    return UpstreamResponse(status=status, **kwargs)


@pytest.mark.parametrize("status", [401, 403])
def test_auth_status_wins_over_parsed_body(status):
    raw = RawFetch(response=_response(status), value=object())
    assert isinstance(classify(raw), SessionInvalid)


@pytest.mark.parametrize("status", [401, 403])
def test_auth_status_wins_over_parse_error(status):
    raw = RawFetch(response=_response(status), parse_error="table missing")
    assert isinstance(classify(raw), SessionInvalid)


def test_redirect_to_login_is_session_invalid():
    raw = RawFetch(response=_response(302, location="/HomeAccess/Account/LogOn?ReturnUrl=%2f"))
    assert isinstance(classify(raw), SessionInvalid)


def test_redirect_to_error_page_is_upstream_error():
    raw = RawFetch(response=_response(302, location="/HomeAccess/Error"))
    outcome = classify(raw)
    assert isinstance(outcome, UpstreamError)
    assert "error page" in outcome.detail


def test_login_page_body_is_session_invalid():
    raw = RawFetch(response=_response(200, login_page=True))
    assert isinstance(classify(raw), SessionInvalid)


@pytest.mark.parametrize("status", [500, 502, 503, 429, 404])
def test_other_statuses_are_upstream_errors(status):
    outcome = classify(RawFetch(response=_response(status)))
    assert outcome == UpstreamError(f"HAC returned HTTP {status}")


def test_parse_failure_is_parse_error():
    outcome = classify(RawFetch(response=_response(200), parse_error="Report card table not found"))
    assert outcome == ParseError("Report card table not found")


def test_missing_value_is_parse_error():
    assert isinstance(classify(RawFetch(response=_response(200))), ParseError)


def test_parsed_value_is_success():
    value = object()
    outcome = classify(RawFetch(response=_response(200), value=value))
    assert outcome == Success(value)
    assert outcome.ok


def test_missing_response_is_upstream_error():
    assert isinstance(classify(RawFetch()), UpstreamError)


def test_timeout_is_upstream_error():
    outcome = classify(RawFetch(error=asyncio.TimeoutError()))
    assert outcome == UpstreamError("Timed out waiting for HAC")


def test_client_error_is_upstream_error():
    outcome = classify(RawFetch(error=aiohttp.ClientConnectionError("refused")))
    assert isinstance(outcome, UpstreamError)
    assert "refused" in outcome.detail


def test_transport_error_takes_priority():
    raw = RawFetch(response=_response(401), error=aiohttp.ClientPayloadError("truncated"))
    assert isinstance(classify(raw), UpstreamError)


def test_connection_error_from_validator():
    assert classify_transport_error(HACConnectionError("x", timed_out=True)) == UpstreamError(
        "Timed out waiting for HAC"
    )
    assert classify_transport_error(HACConnectionError("Session check returned HTTP 500")) == UpstreamError(
        "Session check returned HTTP 500"
    )
