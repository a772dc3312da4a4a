"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Koski only wants to hear about absence periods longer than this
KOSKI_MAX_SHORT_ABSENCE_DAYS = 7

MAX_ABSENCE_UPSERT_DAYS = 366

# Absences created by scheduled jobs are attributed to this employee id
SYSTEM_USER_ID = 0

MONDAY_TO_FRIDAY = frozenset({1, 2, 3, 4, 5})
ALL_WEEKDAYS = frozenset({1, 2, 3, 4, 5, 6, 7})

DEFAULT_DECISION_LOOKBACK_YEARS = 5
