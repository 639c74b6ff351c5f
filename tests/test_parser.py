"""Tests for the HAC page parsers."""
import pytest

from hac_report.const import STATUS_NHI, STATUS_NYG, STATUS_SCORED
from hac_report.exceptions import HACParseError
from hac_report.models import Grade, GradingPeriod
from hac_report.parser import is_login_page, parse_grade, parse_grades, parse_report_card

from .conftest import load_fixture


@pytest.fixture
def report_card():
    return parse_report_card(load_fixture("report_card.html"))


@pytest.fixture
def grades():
    return parse_grades(load_fixture("grades.html"))


def test_login_page_detection():
    assert is_login_page(load_fixture("login.html"))
    assert not is_login_page(load_fixture("classwork.html"))
    assert not is_login_page(load_fixture("report_card.html"))


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("95", Grade("95", 95.0)),
        (" 87.50 ", Grade("87.50", 87.5)),
        ("93%", Grade("93%", 93.0)),
        ("P", Grade("P")),
        ("", None),
        ("N/A", None),
    ],
)
def test_parse_grade(text, expected):
    assert parse_grade(text) == expected


def test_report_card_keeps_every_course(report_card):
    assert [course.course_id for course in report_card.courses] == [
        "1210ADV - 1",
        "2310 - 2",
        "3410AP - 1",
        "4510 - 1",
        "5610 - 1",
        "6710 - 1",
    ]
    ungraded = [course.name for course in report_card.courses if course.grade is None]
    assert ungraded == ["Art I", "Spanish III"]


def test_ungraded_course_has_explicit_empty_periods(report_card):
    art = report_card.courses[3]
    assert art.grade is None
    assert not art.has_grade
    assert art.period_grades == {"C1": None, "C2": None, "C3": None, "Exam1": None, "Sem1": None}


def test_report_card_grading_periods(report_card):
    assert report_card.grading_periods == (
        GradingPeriod("C1", "Cycle 1"),
        GradingPeriod("C2", "Cycle 2"),
        GradingPeriod("C3", "Cycle 3"),
        GradingPeriod("Exam1", "Exam 1"),
        GradingPeriod("Sem1", "Semester 1"),
    )
    assert report_card.run == "2-2025"


def test_course_grade_is_latest_posted(report_card):
    english, algebra, chemistry, _, athletics, _ = report_card.courses
    assert english.grade == Grade("95", 95.0)
    assert english.period_grades["C1"] == Grade("92", 92.0)
    assert algebra.grade == Grade("87", 87.0)
    assert chemistry.grade == Grade("85", 85.0)
    assert athletics.grade == Grade("P")


def test_report_card_named_and_extra_columns(report_card):
    english = report_card.courses[0]
    assert english.name == "English II ADV"
    assert english.period == "1"
    assert english.teacher == "Smith, Jane"
    assert english.room == "101"
    assert english.extra == {"Att. Credit": "1.000"}
    assert english.assignments == ()


def test_report_card_overall_average(report_card):
    assert report_card.overall_average == 89.0


def test_report_card_without_table_is_parse_error():
    with pytest.raises(HACParseError):
        parse_report_card(load_fixture("maintenance.html"))


def test_report_card_without_period_columns_is_parse_error():
    html = """
    <table id="plnMain_dgReportCard">
      <tr><td>Course</td><td>Description</td><td>Average</td></tr>
      <tr><td>1210</td><td>English</td><td>95</td></tr>
    </table>
    """
    with pytest.raises(HACParseError, match="grading period"):
        parse_report_card(html)


def test_report_card_with_no_rows_is_empty():
    html = """
    <table id="plnMain_dgReportCard">
      <tr class="sg-asp-table-header-row"><td>Course</td><td>Description</td><td>C1</td></tr>
    </table>
    """
    card = parse_report_card(html)
    assert card.courses == ()
    assert card.grading_periods == (GradingPeriod("C1", "Cycle 1"),)


def test_grades_page_courses(grades):
    assert [course.course_id for course in grades.courses] == ["1210ADV", "2310", "3410AP"]
    assert grades.grading_periods == (GradingPeriod("C2", "Cycle 2"),)
    assert grades.run == "2-2026"


def test_grades_page_averages(grades):
    english, algebra, chemistry = grades.courses
    assert english.grade == Grade("93.50", 93.5)
    assert english.period_grades == {"C2": Grade("93.50", 93.5)}
    assert algebra.grade == Grade("88.00", 88.0)
    assert chemistry.grade is None
    assert chemistry.period_grades == {"C2": None}
    assert chemistry.assignments == ()


def test_grades_page_assignments(grades):
    essay, quiz, reading_log = grades.courses[0].assignments
    assert essay.title == "Essay 1"
    assert essay.status == STATUS_SCORED
    assert essay.score == 95.0
    assert essay.percentage == 95.0
    assert quiz.status == STATUS_NHI
    assert quiz.score == 0.0
    assert reading_log.status == STATUS_NYG
    assert reading_log.score is None
    assert reading_log.total_points == 10.0


def test_grades_page_course_details(grades):
    english = grades.courses[0]
    assert english.points_earned == "95.00"
    assert english.points_possible == "130.00"
    assert english.last_updated == "2025-09-16"
    assert english.category_breakdown["PRODUCT"]["percentage"] == 95.0
    assert english.category_breakdown["PRACTICE"]["percentage"] == 0.0
    assert english.category_breakdown["PROCESS"]["percentage"] is None
    assert english.calculated_percentage == 67.86


def test_grades_page_unexpected_markup_is_parse_error():
    with pytest.raises(HACParseError):
        parse_grades(load_fixture("maintenance.html"))


def test_parsing_is_deterministic():
    html = load_fixture("report_card.html")
    assert parse_report_card(html) == parse_report_card(html)


def test_parsed_report_card_is_hashable():
    html = load_fixture("report_card.html")
    assert hash(parse_report_card(html)) == hash(parse_report_card(html))
