"""Constants for the HAC report client."""

# Configuration
CONF_BASE_URL = "base_url"
CONF_VALIDATE_TIMEOUT = "validate_timeout"
CONF_FETCH_TIMEOUT = "fetch_timeout"
CONF_SESSION_CHECK_PATH = "session_check_path"
CONF_SESSION_COOKIE = "session_cookie"
CONF_SESSION_HEADER = "session_header"
CONF_USER_AGENT = "user_agent"
CONF_VALIDATE_SESSION = "validate_session"
CONF_HOST = "host"
CONF_PORT = "port"

# Environment variables override the config file
ENV_PREFIX = "HAC_"

# Defaults
DEFAULT_BASE_URL = "https://lis-hac.eschoolplus.powerschool.com"
DEFAULT_VALIDATE_TIMEOUT = 10.0
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_SESSION_HEADER = "X-HAC-Session"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080

# HAC endpoints
ENDPOINT_LOGIN = "/HomeAccess/Account/LogOn"
ENDPOINT_ERROR = "/HomeAccess/Error"
ENDPOINT_CLASSWORK = "/HomeAccess/Classes/Classwork"
ENDPOINT_ASSIGNMENTS = "/HomeAccess/Content/Student/Assignments.aspx"
ENDPOINT_REPORT_CARDS = "/HomeAccess/Content/Student/ReportCards.aspx"

DEFAULT_SESSION_CHECK_PATH = ENDPOINT_CLASSWORK

# Query parameters used to pick a grading run
PARAM_REPORT_CARD_RUN = "RCRun"
PARAM_REPORT_PERIOD = "ReportPeriod"

# Status codes the portal uses to reject a session
AUTH_FAILURE_STATUSES = frozenset({401, 403})

# Assignment status types
STATUS_SCORED = "Scored"
STATUS_NHI = "NHI"  # Not Handed In
STATUS_NYG = "NYG"  # Not Yet Graded
STATUS_TLTC = "TLTC"  # Too Late To Count
STATUS_SBF = "SBF"  # Score Below Fifty
STATUS_EXEMPT = "EXEMPT"

# Category weights (standard HAC weighting)
CATEGORY_WEIGHTS = {
    "PRACTICE": 0.20,
    "PROCESS": 0.30,
    "PRODUCT": 0.50
}

# Report card grading period columns, e.g. C1, Exam1, Sem1
GRADING_PERIOD_PREFIXES = {
    "C": "Cycle",
    "Exam": "Exam",
    "Sem": "Semester",
}

# GPA scale by course level
COURSE_LEVEL_REGULAR = "regular"
COURSE_LEVEL_ADVANCED = "advanced"
COURSE_LEVEL_AP = "ap"

GPA_SCALE = {
    COURSE_LEVEL_REGULAR: 5.0,
    COURSE_LEVEL_ADVANCED: 5.5,
    COURSE_LEVEL_AP: 6.0,
}

# User facing messages
MSG_SESSION_REQUIRED = "HAC session required. Please log in first."
MSG_SESSION_EXPIRED = "Session expired or invalid. Please log in again."
MSG_FETCH_FAILED = "Failed to fetch data from HAC. Please try again."
