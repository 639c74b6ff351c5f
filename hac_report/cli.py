"""
Command line access to the HAC report client.

Usage:
    python -m hac_report report-card [--run RUN] [--format json|yaml|summary]
    python -m hac_report grades [--run RUN] [--format json|yaml|summary]
    python -m hac_report validate
    python -m hac_report serve

The session token is read from --session or the HAC_SESSION environment
variable; prefer the variable so the token stays out of shell history.
"""

import argparse
import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from . import server
from .config import HACConfig, load_config
from .exceptions import ConfigError, HACConnectionError
from .hac_client import HACClient, session_token
from .models import FetchOutcome, ReportCard, SessionInvalid, Success

_LOGGER = logging.getLogger(__name__)

SESSION_ENV = "HAC_SESSION"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_SESSION_INVALID = 2


def format_summary(card: ReportCard) -> str:
    """Render a report card as a short text table."""
    lines = ["=" * 60]
    periods = ", ".join(period.name for period in card.grading_periods) or "none"
    lines.append(f"Grading periods: {periods}")
    if card.run:
        lines.append(f"Run: {card.run}")
    lines.append("=" * 60)

    for course in card.courses:
        grade = course.grade.text if course.has_grade else "No Grade Yet"
        lines.append(f"{course.course_id:<14} {course.name[:34]:<34} {grade:>8}")

    lines.append("=" * 60)
    average = card.overall_average
    lines.append(f"Courses: {len(card.courses)}  Average: {average if average is not None else 'n/a'}")
    return "\n".join(lines)


def render(card: ReportCard, output_format: str) -> str:
    """Render a report card in the requested format."""
    if output_format == "summary":
        return format_summary(card)

    data: dict[str, Any] = card.as_dict()
    if output_format == "yaml":
        return yaml.dump(
            data,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
            width=1000,
        )
    return json.dumps(data, indent=2)


def _exit_code(outcome: FetchOutcome) -> int:
    if isinstance(outcome, Success):
        return EXIT_OK
    if isinstance(outcome, SessionInvalid):
        _LOGGER.error("%s", outcome.message)
        return EXIT_SESSION_INVALID
    _LOGGER.error("HAC request failed: %s", outcome)
    return EXIT_FAILED


async def _run_fetch(args: argparse.Namespace, config: HACConfig, session_id: str | None) -> int:
    async with HACClient(config) as client:
        if args.command == "validate":
            token = session_token(session_id)
            if token is None:
                valid = False
            else:
                try:
                    valid = await client.validator.validate(token)
                except HACConnectionError as err:
                    _LOGGER.error("Could not validate HAC session: %s", err)
                    return EXIT_FAILED
            print(json.dumps({"valid": valid}))
            return EXIT_OK if valid else EXIT_SESSION_INVALID

        if args.command == "grades":
            outcome = await client.get_grades(session_id, args.run)
        else:
            outcome = await client.get_report_card(session_id, args.run)

    code = _exit_code(outcome)
    if code != EXIT_OK:
        return code

    text = render(outcome.value, args.format)
    if args.output:
        _LOGGER.info("Writing %s to %s", args.command, args.output)
        try:
            with open(args.output, "w") as f:
                f.write(text)
        except OSError as err:
            _LOGGER.error("Failed to write output: %s", err)
            return EXIT_FAILED
    else:
        print(text)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hac-report",
        description="Fetch report cards from Home Access Center",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML config file (HAC_* environment variables override it)",
        default=None,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (default: INFO)",
        default="INFO",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("report-card", "Fetch the report card"),
        ("grades", "Fetch current grades with assignments"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--session", type=str, default=None, help=f"Session token (default: ${SESSION_ENV})")
        sub.add_argument("--run", type=str, default=None, help="Grading run to fetch")
        sub.add_argument(
            "--format",
            choices=["json", "yaml", "summary"],
            default="json",
            help="Output format (default: json)",
        )
        sub.add_argument("--output", type=Path, default=None, help="Write output to a file")

    validate = subparsers.add_parser("validate", help="Check whether a session is still valid")
    validate.add_argument("--session", type=str, default=None, help=f"Session token (default: ${SESSION_ENV})")

    subparsers.add_parser("serve", help="Serve the HAC HTTP endpoints")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    try:
        config = load_config(args.config)
    except ConfigError as err:
        _LOGGER.error("%s", err)
        return EXIT_FAILED

    if args.command == "serve":
        server.run(config)
        return EXIT_OK

    session_id = args.session or os.environ.get(SESSION_ENV)
    return asyncio.run(_run_fetch(args, config, session_id))
