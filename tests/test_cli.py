"""Tests for the command line."""
import json

from aiohttp.test_utils import unused_port
import pytest
import yaml

from hac_report.cli import EXIT_FAILED, EXIT_SESSION_INVALID, build_parser, format_summary, main, render
from hac_report.parser import parse_report_card

from .conftest import load_fixture


@pytest.fixture
def card():
    return parse_report_card(load_fixture("report_card.html"))


def test_render_json(card):
    data = json.loads(render(card, "json"))
    assert len(data["courses"]) == 6
    assert data["overall_average"] == 89.0


def test_render_yaml(card):
    data = yaml.safe_load(render(card, "yaml"))
    assert data["courses"][1]["name"] == "Algebra II"
    assert data["courses"][3]["grade"] is None


def test_summary(card):
    summary = format_summary(card)
    assert "Cycle 1, Cycle 2, Cycle 3, Exam 1, Semester 1" in summary
    assert "No Grade Yet" in summary
    assert "Courses: 6  Average: 89.0" in summary


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_report_card_options():
    args = build_parser().parse_args(["report-card", "--run", "2", "--format", "yaml"])
    assert args.command == "report-card"
    assert args.run == "2"
    assert args.format == "yaml"


def test_validate_without_session(monkeypatch, capsys):
    monkeypatch.delenv("HAC_SESSION", raising=False)
    assert main(["validate"]) == EXIT_SESSION_INVALID
    assert json.loads(capsys.readouterr().out) == {"valid": False}


def test_report_card_without_session(monkeypatch):
    monkeypatch.delenv("HAC_SESSION", raising=False)
    assert main(["report-card"]) == EXIT_SESSION_INVALID


def test_invalid_config(monkeypatch):
    monkeypatch.setenv("HAC_FETCH_TIMEOUT", "-1")
    assert main(["report-card"]) == EXIT_FAILED


def test_validate_unreachable_portal(monkeypatch, capsys):
    monkeypatch.setenv("HAC_BASE_URL", f"http://127.0.0.1:{unused_port()}")
    monkeypatch.setenv("HAC_VALIDATE_TIMEOUT", "2")
    assert main(["validate", "--session", "ASP.NET_SessionId=live"]) == EXIT_FAILED
    assert capsys.readouterr().out == ""
