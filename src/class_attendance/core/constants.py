"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_REPORT_DAYS = 30
DEFAULT_REPORT_MAX_WORKERS = 8
