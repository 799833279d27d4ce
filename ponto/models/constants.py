"""Constants for ponto.

This module centralizes all magic numbers and default values used throughout the application.
"""

# Punch capture
INITIAL_EVENT_VERSION = 1

# Sequence validation
DUPLICATE_WINDOW_SECONDS = 60

# Correction workflow
MIN_JUSTIFICATION_LENGTH = 10

# Workday defaults
DEFAULT_DAILY_HOURS = 8.0
DEFAULT_WEEK_DAYS = 5
DEFAULT_SHIFT_START = "08:00"
DEFAULT_SHIFT_END = "17:00"
DEFAULT_ENTRY_TOLERANCE_MINUTES = 10

# Capture checks
MAX_CLOCK_SKEW_MINUTES = 5
EARTH_RADIUS_METERS = 6371000

# Hours are rounded for presentation only
HOURS_PRECISION = 4
