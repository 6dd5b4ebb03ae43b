import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

FACILITY_TIMEZONE = os.getenv("FACILITY_TIMEZONE", "Asia/Kolkata")
FACILITY_LATITUDE = float(os.getenv("FACILITY_LATITUDE", "27.544129"))
FACILITY_LONGITUDE = float(os.getenv("FACILITY_LONGITUDE", "76.593373"))
GEOFENCE_RADIUS_METERS = float(os.getenv("GEOFENCE_RADIUS_METERS", "50"))

TRIAL_DAYS = int(os.getenv("TRIAL_DAYS", "3"))
EXPIRY_WARNING_DAYS = int(os.getenv("EXPIRY_WARNING_DAYS", "7"))

# Shown to members who check in late
ESCALATION_CONTACT_NAME = os.getenv("ESCALATION_CONTACT_NAME", "Front desk")
ESCALATION_CONTACT_PHONE = os.getenv("ESCALATION_CONTACT_PHONE", "")
