"""Session-authenticated client for Home Access Center report cards."""
from .config import HACConfig, load_config
from .hac_client import HACClient
from .models import (
    Assignment,
    CourseGrade,
    FetchOutcome,
    GPACalculation,
    Grade,
    GradingPeriod,
    ParseError,
    ReportCard,
    SessionInvalid,
    Success,
    UpstreamError,
)

__all__ = [
    "Assignment",
    "CourseGrade",
    "FetchOutcome",
    "GPACalculation",
    "Grade",
    "GradingPeriod",
    "HACClient",
    "HACConfig",
    "ParseError",
    "ReportCard",
    "SessionInvalid",
    "Success",
    "UpstreamError",
    "load_config",
]
