"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EXPIRY_WARNING_DAYS = 7
TRIAL_DAYS = 3

ALLOWED_DURATIONS_MONTHS = (1, 3, 6, 9, 12)
RECEIPT_PREFIX = "NSF"
RECEIPT_ATTEMPTS = 3

DEFAULT_TIMEZONE = "Asia/Kolkata"
DEFAULT_FACILITY_LATITUDE = 27.544129
DEFAULT_FACILITY_LONGITUDE = 76.593373
DEFAULT_GEOFENCE_RADIUS_METERS = 50.0

EARTH_RADIUS_METERS = 6_371_000.0

AUTO_ABSENT_NOTE = "Auto-marked absent (no check-in)"
