import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_test_db"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

FACILITY_TIMEZONE = "Asia/Kolkata"
FACILITY_LATITUDE = 27.544129
FACILITY_LONGITUDE = 76.593373
GEOFENCE_RADIUS_METERS = 50.0

TRIAL_DAYS = 3
EXPIRY_WARNING_DAYS = 7

ESCALATION_CONTACT_NAME = "Front desk"
ESCALATION_CONTACT_PHONE = "+91-90000-00000"
