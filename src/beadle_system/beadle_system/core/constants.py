"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ROLE = "student"
BEADLE_ROLE = "beadle"

DEFAULT_SESSION_DAYS = 7
MIN_PASSWORD_LENGTH = 6

SINGLE_SESSION_MINUTES = 35
DOUBLE_SESSION_MINUTES = 70

DEFAULT_LIST_LIMIT = 500
MAX_TOKEN_LENGTH = 64

SIXTH_FORM_LEVELS = ("6A", "6B")
FORM_LEVELS = ("1st Form", "2nd Form", "3rd Form", "4th Form", "5th Form", "6B", "6A")

# Form level -> supervisor sub-role that receives its reports.
SUPERVISOR_ROLE_BY_FORM = {
    "1st Form": "supervisor_1",
    "2nd Form": "supervisor_2",
    "3rd Form": "supervisor_3",
    "4th Form": "supervisor_4",
    "5th Form": "supervisor_5",
    "6B": "supervisor_6",
    "6A": "supervisor_6a",
}
