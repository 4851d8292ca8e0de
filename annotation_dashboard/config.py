"""
Configuration: column alias table, sheet keywords, endpoints, constants.

KEY_ALIASES maps each canonical (normalised) column name to the normalised
header spellings accepted for it across annotation and attendance sheets.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# File paths (adjust these if the project list moves)
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent

PROJECTS_FILE = DATA_DIR / "projects.json"

# ---------------------------------------------------------------------------
# Remote spreadsheet endpoints
# ---------------------------------------------------------------------------
SPREADSHEET_EDIT_URL = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/edit"
SHEET_CSV_URL = (
    "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/gviz/tq"
    "?tqx=out:csv&sheet={sheet_name}"
)
REQUEST_TIMEOUT = 30  # seconds

# ---------------------------------------------------------------------------
# Organisation identity
# ---------------------------------------------------------------------------
DASHBOARD_NAME = "DesiCrew"
ORG_EMAIL_DOMAIN = "rprocess.in"

# ---------------------------------------------------------------------------
# Project categories and sheet discovery keywords
# ---------------------------------------------------------------------------
PRODUCTION = "production"
HOURLY = "hourly"

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    PRODUCTION: ("production", "qc"),
    HOURLY: ("login", "attendance"),
}

# Provenance is carried outside the row mapping; headers using this prefix
# are not accepted as data columns.
RESERVED_PREFIX = "__"

# ---------------------------------------------------------------------------
# Column alias table
# ---------------------------------------------------------------------------
# Keys and values are normalised (lower-case, no whitespace/hyphen/underscore).
KEY_ALIASES: dict[str, list[str]] = {
    "username": ["username", "user", "userid"],
    "annotatorname": ["annotatorname", "annotator", "name", "worker"],
    "frameid": ["frameid", "frame", "id", "imageid"],
    "numberofobjectannotated": [
        "numberofobjectannotated",
        "objects",
        "objectcount",
        "totalobjects",
        "annotatedobjects",
    ],
    "date": ["date", "timestamp", "createdat"],
    "logintime": ["logintime", "login", "timein", "clockin", "starttime"],
    "internalqcname": [
        "internalqcname",
        "internalqc",
        "qcname",
        "qcby",
        "verifiedby",
        "qaname",
        "qa",
    ],
    "internalpolygonerrorcount": [
        "internalpolygonerrorcount",
        "errorcount",
        "errors",
        "polygonerrors",
        "totalerrors",
        "internalerrors",
    ],
    "employeecode": ["employeecode", "empcode", "empid", "employeeid"],
}

# Display names used when resolving the semantic production columns
ANNOTATOR_COLUMN = "Annotator Name"
USERNAME_COLUMN = "UserName"
FRAME_COLUMN = "Frame ID"
OBJECTS_COLUMN = "Number of Object Annotated"
QC_NAME_COLUMN = "Internal QC Name"
ERRORS_COLUMN = "Internal Polygon Error Count"
EMPLOYEE_CODE_COLUMN = "Employee Code"

# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------
# Hourly sheets carry no stable header naming; these are column positions.
ATTENDANCE_SNO_POSITION = 0
ATTENDANCE_NAME_POSITION = 1
ATTENDANCE_EMP_CODE_POSITION = 2
ATTENDANCE_HOURS_POSITION = 3
ATTENDANCE_LOGIN_POSITION = 5

HALF_DAY_HOURS = 5.0

STATUS_PRESENT = "Present"
STATUS_ABSENT = "Absent"
STATUS_HALF_DAY = "P(1/2)"
STATUS_MISSING = "NIL"

# Letter codes used in exported tables
STATUS_CODES: dict[str, str] = {
    STATUS_PRESENT: "P",
    STATUS_ABSENT: "L",
    STATUS_HALF_DAY: "HD",
}

# Sheet names like "15th OCT Login" are dated against this year
SHEET_REFERENCE_YEAR = 2025

# ---------------------------------------------------------------------------
# Sentinels
# ---------------------------------------------------------------------------
DATE_SENTINELS = {"", "nil", "-", "undefined"}
IDENTITY_SENTINELS = {"", "nil", "undefined"}

# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------
COLORS: dict[str, str] = {
    "primary": "#8B5CF6",
    "secondary": "#EC4899",
    "accent": "#06B6D4",
    "success": "#10B981",
    "warning": "#F59E0B",
    "danger": "#EF4444",
}

PROJECT_COLORS = [COLORS["primary"], COLORS["secondary"], COLORS["accent"]]

# Team birthdays shown as a banner on the day (MM-DD)
BIRTHDAYS: list[dict[str, str]] = [
    {"name": "Ramu M", "date": "03-06", "role": "Senior Crewmate"},
    {"name": "Santhiya P", "date": "06-27", "role": "Junior Crewmate"},
    {"name": "Arun Kumar S", "date": "01-02", "role": "Annotator"},
    {"name": "Ishwarya R", "date": "02-04", "role": "Annotator"},
    {"name": "Surandhar D", "date": "11-18", "role": "Annotator"},
    {"name": "Mariyam Nisha R", "date": "01-08", "role": "Annotator"},
    {"name": "Sunparsuhail K", "date": "04-07", "role": "Annotator"},
    {"name": "Eswari A", "date": "05-20", "role": "Annotator"},
    {"name": "Amaravathi M", "date": "03-11", "role": "Annotator"},
    {"name": "Gayathri S", "date": "09-13", "role": "Annotator"},
    {"name": "Pavithra R", "date": "03-08", "role": "Annotator"},
    {"name": "Boomika S", "date": "08-20", "role": "Annotator"},
    {"name": "Roja V", "date": "10-27", "role": "Annotator"},
    {"name": "Priyadharshini S", "date": "05-04", "role": "Annotator"},
    {"name": "Ananthi K", "date": "04-03", "role": "Annotator"},
    {"name": "Purushothaman S", "date": "06-17", "role": "Annotator"},
    {"name": "Pavithra P", "date": "07-13", "role": "Annotator"},
    {"name": "Divya S", "date": "12-04", "role": "Annotator"},
    {"name": "Kiruthika P", "date": "10-15", "role": "Annotator"},
    {"name": "Monisha N", "date": "04-22", "role": "Annotator"},
    {"name": "Jamuna V", "date": "05-15", "role": "Annotator"},
]

# Static login gate
VALID_USERS: dict[str, str] = {
    "admin": "admin123",
    "desicrew": "desicrew@2025",
    "viewer": "view_only",
}
