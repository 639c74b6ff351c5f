"""HTML parsing for Home Access Center pages.

Everything that depends on the portal's markup lives in this module, so a
change on the HAC side only needs to be handled here. Parse functions raise
``HACParseError`` when a page does not have the expected structure; they
never return partial data silently.
"""
import logging
import re
from typing import Any

from bs4 import BeautifulSoup, Tag

from .const import (
    CATEGORY_WEIGHTS,
    GRADING_PERIOD_PREFIXES,
    STATUS_EXEMPT,
    STATUS_NHI,
    STATUS_NYG,
    STATUS_SBF,
    STATUS_SCORED,
    STATUS_TLTC,
)
from .exceptions import HACParseError
from .models import Assignment, CourseGrade, Grade, GradingPeriod, ReportCard

_LOGGER = logging.getLogger(__name__)

REPORT_CARD_TABLE_ID = "plnMain_dgReportCard"
REPORT_CARD_RUNS_ID = "plnMain_ddlRCRuns"
ASSIGNMENT_RUNS_ID = "plnMain_ddlReportCardRuns"
FULL_PAGE_PANEL_ID = "plnMain_pnlFullPage"

_GRADING_PERIOD_RE = re.compile(
    r"^(%s)(\d+)$" % "|".join(GRADING_PERIOD_PREFIXES)
)
_NUMERIC_GRADE_RE = re.compile(r"^\d+(?:\.\d+)?%?$")
_COURSE_CODE_RE = re.compile(r"^([A-Z0-9]+(?:-\s*\d+)?)")
_LAST_UPDATED_RE = re.compile(r"(\d{1,2}/\d{1,2}/\d{4})")
_EMPTY_GRADES = {"", "N/A", "-"}

# Report card columns copied onto CourseGrade fields
_NAMED_COLUMNS = {"period", "teacher", "room"}


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def is_login_page(html: str) -> bool:
    """Return True if the HTML is the HAC log on page."""
    soup = _soup(html)
    title = soup.title.get_text(strip=True).lower() if soup.title else ""
    if "log on" in title:
        return True
    if soup.find("input", {"name": "LogOnDetails.UserName"}):
        return True
    return soup.find(id="LogOnDetails_UserName") is not None


def parse_grade(text: str) -> Grade | None:
    """Parse a displayed mark, returning None when nothing is posted."""
    text = text.strip()
    if text.upper() in _EMPTY_GRADES:
        return None
    if _NUMERIC_GRADE_RE.match(text):
        return Grade(text=text, numeric=float(text.rstrip("%")))
    return Grade(text=text)


def _grading_period(header: str) -> GradingPeriod | None:
    match = _GRADING_PERIOD_RE.match(header)
    if not match:
        return None
    prefix, number = match.groups()
    return GradingPeriod(key=header, name=f"{GRADING_PERIOD_PREFIXES[prefix]} {number}")


def _selected_option(soup: BeautifulSoup, select_id: str) -> str | None:
    """Return the value of the selected option of a dropdown."""
    dropdown = soup.find("select", {"id": select_id})
    if not dropdown:
        return None

    selected_option = dropdown.find("option", {"selected": True})
    if selected_option and selected_option.get("value"):
        return selected_option.get("value")
    return None


def parse_report_card(html: str) -> ReportCard:
    """Parse the ReportCards.aspx page into a ReportCard.

    Every course row of the report card table becomes a CourseGrade, whether
    or not a grade has been posted for it.
    """
    soup = _soup(html)

    table = soup.find("table", {"id": REPORT_CARD_TABLE_ID})
    if not table:
        raise HACParseError("Report card table not found on page")

    header_row = table.find("tr", class_="sg-asp-table-header-row") or table.find("tr")
    if not header_row:
        raise HACParseError("Report card table has no header row")

    headers = [cell.get_text(strip=True) for cell in header_row.find_all(["th", "td"])]
    _LOGGER.debug("Report card headers: %s", headers)

    period_columns: list[tuple[int, GradingPeriod]] = []
    named_columns: dict[str, int] = {}
    for idx, header in enumerate(headers):
        period = _grading_period(header)
        if period:
            period_columns.append((idx, period))
        elif header:
            named_columns[header.lower()] = idx

    if not period_columns:
        raise HACParseError(f"No grading period columns in report card header: {headers}")

    course_col = named_columns.get("course", 0)
    name_col = named_columns.get("description", 1)

    rows = table.find_all("tr", class_="sg-asp-table-data-row")
    if not rows:
        rows = [row for row in table.find_all("tr") if row is not header_row]

    courses = []
    for row in rows:
        cells = row.find_all("td")
        if len(cells) <= max(course_col, name_col):
            _LOGGER.debug("Skipping report card row with %d cells", len(cells))
            continue

        course_id = cells[course_col].get_text(strip=True)
        name_cell = cells[name_col]
        link = name_cell.find("a")
        name = (link or name_cell).get_text(strip=True)
        if not course_id and not name:
            continue

        period_grades: dict[str, Grade | None] = {}
        for idx, period in period_columns:
            text = cells[idx].get_text(strip=True) if idx < len(cells) else ""
            period_grades[period.key] = parse_grade(text)

        # The latest posted mark in column order is the course grade
        posted = [grade for grade in period_grades.values() if grade is not None]

        named: dict[str, str | None] = {}
        extra: dict[str, str] = {}
        for header, idx in named_columns.items():
            if idx in (course_col, name_col) or idx >= len(cells):
                continue
            value = cells[idx].get_text(strip=True)
            if header in _NAMED_COLUMNS:
                named[header] = value or None
            else:
                extra[headers[idx]] = value

        courses.append(
            CourseGrade(
                course_id=course_id,
                name=name,
                grade=posted[-1] if posted else None,
                period_grades=period_grades,
                period=named.get("period"),
                teacher=named.get("teacher"),
                room=named.get("room"),
                extra=extra,
            )
        )

    _LOGGER.debug("Parsed %d courses from report card", len(courses))

    return ReportCard(
        courses=tuple(courses),
        grading_periods=tuple(period for _, period in period_columns),
        run=_selected_option(soup, REPORT_CARD_RUNS_ID),
    )


def parse_grades(html: str) -> ReportCard:
    """Parse the Assignments.aspx page into a single-period ReportCard.

    This gets ALL courses including those without assignments yet. Each
    course is in an AssignmentClass div, even if it has no assignments.
    """
    soup = _soup(html)

    course_divs = soup.find_all("div", {"class": "AssignmentClass"})
    if not course_divs and not soup.find(id=FULL_PAGE_PANEL_ID):
        raise HACParseError("Assignments page content not found")

    run = _selected_option(soup, ASSIGNMENT_RUNS_ID)
    period = _current_period(run)

    courses = []
    for idx, course_div in enumerate(course_divs):
        course = _parse_course(course_div, idx, period)
        if course:
            courses.append(course)

    _LOGGER.debug("Found %d courses on assignments page", len(courses))

    return ReportCard(courses=tuple(courses), grading_periods=(period,), run=run)


def _current_period(run: str | None) -> GradingPeriod:
    """Build the grading period for the run shown on the assignments page."""
    if not run:
        return GradingPeriod(key="current", name="Current")
    # The value format is like "1-2026" for the first cycle
    number = run.split("-")[0]
    return GradingPeriod(key=f"C{number}", name=f"Cycle {number}")


def _parse_course(course_div: Tag, course_index: int, period: GradingPeriod) -> CourseGrade | None:
    """Parse a single course from its AssignmentClass div."""
    course_link = course_div.find("a", {"class": "sg-header-heading"})
    if not course_link:
        return None

    course_name = course_link.get_text(strip=True)
    if not course_name:
        return None

    match = _COURSE_CODE_RE.match(course_name)
    course_id = match.group(1).strip() if match else str(course_index)

    grade = _course_average(course_div)

    assignments = []
    table = _find_by_id_part(course_div, "table", "dgCourseAssignments") or course_div.find(
        "table", {"class": "sg-asp-table"}
    )
    if table:
        for row in table.find_all("tr", class_="sg-asp-table-data-row"):
            cells = row.find_all("td")
            if len(cells) >= 6:
                assignment = _parse_assignment(cells)
                if assignment:
                    assignments.append(assignment)

    category_stats = _calculate_category_stats(assignments)

    return CourseGrade(
        course_id=course_id,
        name=course_name,
        grade=grade,
        period_grades={period.key: grade},
        assignments=tuple(assignments),
        points_earned=_span_text(course_div, "lblStuPoints"),
        points_possible=_span_text(course_div, "lblMaxPoints"),
        last_updated=_last_updated(course_div),
        calculated_percentage=_calculate_weighted_percentage(category_stats),
        category_breakdown=category_stats,
    )


def _find_by_id_part(parent: Tag, name: str, id_part: str) -> Tag | None:
    return parent.find(name, {"id": lambda value: value and id_part in value})


def _span_text(parent: Tag, id_part: str) -> str | None:
    span = _find_by_id_part(parent, "span", id_part)
    if span:
        return span.get_text(strip=True) or None
    return None


def _course_average(course_div: Tag) -> Grade | None:
    """Get the average HAC shows in the course header."""
    average = course_div.select_one("span.sg-header-heading.sg-right")
    if average:
        text = average.get_text(strip=True).replace("Cycle Average", "").strip()
        return parse_grade(text)

    text = _span_text(course_div, "lblOverallAverage")
    return parse_grade(text) if text else None


def _last_updated(course_div: Tag) -> str | None:
    """Get the last updated date for a course as YYYY-MM-DD."""
    text = _span_text(course_div, "lblLastUpdDate")
    if not text or "Last Updated:" not in text:
        return None

    # Extract date from "Last Updated: MM/DD/YYYY" (may have trailing parenthesis)
    date_match = _LAST_UPDATED_RE.search(text.split("Last Updated:")[1])
    if not date_match:
        return None
    month, day, year = date_match.group(1).split("/")
    return f"{year}-{int(month):02d}-{int(day):02d}"


def _parse_assignment(cells: list[Tag]) -> Assignment | None:
    """Parse a single assignment row."""
    due_date = cells[0].get_text(strip=True)
    assigned_date = cells[1].get_text(strip=True)

    title_link = cells[2].find("a")
    title = (title_link or cells[2]).get_text(strip=True)
    if not title:
        return None

    category = cells[3].get_text(strip=True)
    raw_score = cells[4].get_text(strip=True)
    total_points_str = cells[5].get_text(strip=True)

    upper_score = raw_score.upper()
    if "NHI" in upper_score:
        score, status = 0.0, STATUS_NHI
    elif "TLTC" in upper_score:
        score, status = 0.0, STATUS_TLTC
    elif "SBF" in upper_score:
        # SBF carries the actual score in a later column
        score = _to_float(cells[7].get_text(strip=True)) if len(cells) > 7 else 0.0
        status = STATUS_SBF
    elif "NYG" in upper_score or raw_score == "":
        score, status = None, STATUS_NYG
    elif upper_score == "X" or upper_score == "EX":
        score, status = None, STATUS_EXEMPT
    else:
        score = _to_float(raw_score)
        status = STATUS_SCORED if score is not None else STATUS_NYG

    total_points = None
    if total_points_str and total_points_str.upper() != "N/A":
        total_points = _to_float(total_points_str)

    percentage = None
    if score is not None and total_points:
        percentage = round((score / total_points) * 100, 2)

    return Assignment(
        title=title,
        category=category,
        due_date=due_date,
        assigned_date=assigned_date,
        raw_score=raw_score,
        score=score,
        total_points=total_points,
        status=status,
        percentage=percentage,
    )


def _to_float(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        _LOGGER.debug("Could not parse number: %s", text)
        return None


def _calculate_category_stats(assignments: list[Assignment]) -> dict[str, dict[str, Any]]:
    """Calculate statistics for each weighted category."""
    category_stats: dict[str, dict[str, Any]] = {
        category: {"earned": 0.0, "possible": 0.0} for category in CATEGORY_WEIGHTS
    }

    for assignment in assignments:
        stats = category_stats.get(assignment.category.upper())
        if stats is None:
            continue
        if assignment.status in (STATUS_SCORED, STATUS_NHI, STATUS_SBF, STATUS_TLTC):
            if assignment.score is not None:
                stats["earned"] += assignment.score
            if assignment.total_points:
                stats["possible"] += assignment.total_points

    for stats in category_stats.values():
        if stats["possible"] > 0:
            stats["percentage"] = round((stats["earned"] / stats["possible"]) * 100, 2)
        else:
            stats["percentage"] = None

    return category_stats


def _calculate_weighted_percentage(category_stats: dict[str, dict[str, Any]]) -> float | None:
    """Calculate overall percentage using weighted categories."""
    overall_percentage = 0.0
    total_weight = 0.0

    for category, stats in category_stats.items():
        if stats["possible"] > 0:
            overall_percentage += stats["earned"] / stats["possible"] * CATEGORY_WEIGHTS[category]
            total_weight += CATEGORY_WEIGHTS[category]

    if total_weight > 0:
        return round((overall_percentage / total_weight) * 100, 2)
    return None
