"""Data structures returned by the HAC report client."""
from dataclasses import asdict, dataclass, field
from typing import Any


def _plain(value: Any) -> Any:
    """Convert tuples to lists so the result serialises to JSON and YAML alike."""
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class Grade:
    """A grade as posted by the portal.

    ``text`` is the mark exactly as displayed ("95", "A", "P"). ``numeric`` is
    only set when the mark is a number.
    """

    text: str
    numeric: float | None = None


@dataclass(frozen=True)
class Assignment:
    """A single row of a course's assignment breakdown."""

    title: str
    category: str
    due_date: str
    assigned_date: str
    raw_score: str
    score: float | None
    total_points: float | None
    status: str
    percentage: float | None


@dataclass(frozen=True)
class GradingPeriod:
    """A grading period (cycle, exam or semester) covered by a report card."""

    key: str
    name: str


@dataclass(frozen=True)
class CourseGrade:
    """One course of a report card.

    ``grade`` is ``None`` when nothing has been posted yet. ``period_grades``
    holds one entry per grading period of the report card, ungraded periods
    included.

    Instances are shallow-frozen: the mapping fields are plain dicts, left
    out of the hash, and must not be mutated once parsed.
    """

    course_id: str
    name: str
    grade: Grade | None = None
    period_grades: dict[str, Grade | None] = field(default_factory=dict, hash=False)
    assignments: tuple[Assignment, ...] = ()
    period: str | None = None
    teacher: str | None = None
    room: str | None = None
    points_earned: str | None = None
    points_possible: str | None = None
    last_updated: str | None = None
    calculated_percentage: float | None = None
    category_breakdown: dict[str, dict[str, float | None]] = field(default_factory=dict, hash=False)
    extra: dict[str, str] = field(default_factory=dict, hash=False)

    @property
    def has_grade(self) -> bool:
        """Return True if the course has a posted grade."""
        return self.grade is not None


@dataclass(frozen=True)
class ReportCard:
    """Structured report card parsed from a single portal page."""

    courses: tuple[CourseGrade, ...]
    grading_periods: tuple[GradingPeriod, ...]
    run: str | None = None

    @property
    def overall_average(self) -> float | None:
        """Average of all numeric course grades, or None when none are posted."""
        numeric = [
            course.grade.numeric
            for course in self.courses
            if course.has_grade and course.grade.numeric is not None
        ]
        if not numeric:
            return None
        return round(sum(numeric) / len(numeric), 2)

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON serialisable representation."""
        data = _plain(asdict(self))
        data["overall_average"] = self.overall_average
        return data


@dataclass(frozen=True)
class PeriodGPA:
    """GPA detail for one past grading period."""

    name: str
    courses: tuple[dict[str, Any], ...]
    average_gpa: float


@dataclass(frozen=True)
class GPACalculation:
    """Cumulative GPA over current courses and past grading periods."""

    cumulative_gpa: float
    current_courses_count: int
    past_periods_count: int
    past_periods: tuple[PeriodGPA, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON serialisable representation."""
        return _plain(asdict(self))


@dataclass(frozen=True)
class FetchOutcome:
    """Result of a client call. Exactly one subclass is returned per call."""

    @property
    def ok(self) -> bool:
        """Return True for a successful outcome."""
        return False


@dataclass(frozen=True)
class Success(FetchOutcome):
    """The resource was fetched and parsed."""

    value: Any

    @property
    def ok(self) -> bool:
        """Return True for a successful outcome."""
        return True


@dataclass(frozen=True)
class SessionInvalid(FetchOutcome):
    """The portal no longer accepts the session; the user must log in again."""

    message: str


@dataclass(frozen=True)
class UpstreamError(FetchOutcome):
    """The portal was unreachable, timed out or failed."""

    detail: str


@dataclass(frozen=True)
class ParseError(FetchOutcome):
    """The portal answered but the page could not be parsed."""

    detail: str
