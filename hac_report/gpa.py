"""GPA calculations over parsed grades."""
from collections.abc import Iterable
import math
import re

from .const import (
    COURSE_LEVEL_ADVANCED,
    COURSE_LEVEL_AP,
    COURSE_LEVEL_REGULAR,
    GPA_SCALE,
)
from .models import GPACalculation, PeriodGPA, ReportCard

_ADVANCED_RE = re.compile(r"PRE-AP|\bADV|ADVANCED|HONORS")
_AP_RE = re.compile(r"\bAP\b|\bA\.P\.")
_CYCLE_KEY_RE = re.compile(r"^C\d+$")


def course_level(course_name: str) -> str:
    """Get the course level from its name."""
    upper_name = course_name.upper()
    # Pre-AP is weighted as an advanced course, so check it before AP
    if _ADVANCED_RE.search(upper_name):
        return COURSE_LEVEL_ADVANCED
    if _AP_RE.search(upper_name):
        return COURSE_LEVEL_AP
    return COURSE_LEVEL_REGULAR


def gpa_for_grade(grade_percent: float, course_name: str) -> float:
    """Calculate the GPA for a grade based on the course level.

    The base GPA drops by 0.1 for each point below 100, clamped between zero
    and the base.
    """
    base_gpa = GPA_SCALE[course_level(course_name)]
    # Grades are rounded half up, the way report cards display them
    points_below_100 = 100 - math.floor(grade_percent + 0.5)
    gpa = base_gpa - points_below_100 * 0.1
    return round(max(0.0, min(gpa, base_gpa)), 2)


def _average(values: list[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


def period_averages(
    report_card: ReportCard,
    excluded_course_names: Iterable[str] = (),
) -> tuple[PeriodGPA, ...]:
    """Average GPA of every graded cycle on a report card.

    Exam and semester columns are skipped since they summarise cycles that
    are already counted.
    """
    excluded = set(excluded_course_names)
    periods = []

    for period in report_card.grading_periods:
        if not _CYCLE_KEY_RE.match(period.key):
            continue

        courses = []
        for course in report_card.courses:
            if course.name in excluded:
                continue
            grade = course.period_grades.get(period.key)
            if grade is None or grade.numeric is None:
                continue
            courses.append({
                "course_name": course.name,
                "grade": grade.numeric,
                "gpa": gpa_for_grade(grade.numeric, course.name),
            })

        if courses:
            periods.append(
                PeriodGPA(
                    name=period.name,
                    courses=tuple(courses),
                    average_gpa=_average([c["gpa"] for c in courses]),
                )
            )

    return tuple(periods)


def cumulative_gpa(
    current: ReportCard,
    report_card: ReportCard | None,
    selected_course_ids: Iterable[str],
    excluded_course_names: Iterable[str] = (),
) -> GPACalculation:
    """Combine selected current courses with past cycle averages."""
    selected = set(selected_course_ids)

    current_gpas = [
        gpa_for_grade(course.grade.numeric, course.name)
        for course in current.courses
        if course.course_id in selected
        and course.grade is not None
        and course.grade.numeric is not None
    ]

    past_periods = period_averages(report_card, excluded_course_names) if report_card else ()

    all_gpas = current_gpas + [period.average_gpa for period in past_periods]

    return GPACalculation(
        cumulative_gpa=_average(all_gpas),
        current_courses_count=len(current_gpas),
        past_periods_count=len(past_periods),
        past_periods=past_periods,
    )
