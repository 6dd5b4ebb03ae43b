from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..common.geo import GeoPoint
from . import constants


@dataclass(frozen=True)
class FacilitySettings:
    """Facility-specific configuration consumed by the engine."""

    timezone: str = constants.DEFAULT_TIMEZONE
    location: GeoPoint = GeoPoint(constants.DEFAULT_FACILITY_LATITUDE, constants.DEFAULT_FACILITY_LONGITUDE)
    geofence_radius_meters: float = constants.DEFAULT_GEOFENCE_RADIUS_METERS
    trial_days: int = constants.TRIAL_DAYS
    expiry_warning_days: int = constants.EXPIRY_WARNING_DAYS
    escalation_contact_name: str = ""
    escalation_contact_phone: str = ""

    @classmethod
    def from_module(cls, settings: Any) -> "FacilitySettings":
        """Build from a ``config.<env>`` settings module (missing names fall back to defaults)."""
        return cls(
            timezone=getattr(settings, "FACILITY_TIMEZONE", constants.DEFAULT_TIMEZONE),
            location=GeoPoint(
                float(getattr(settings, "FACILITY_LATITUDE", constants.DEFAULT_FACILITY_LATITUDE)),
                float(getattr(settings, "FACILITY_LONGITUDE", constants.DEFAULT_FACILITY_LONGITUDE)),
            ),
            geofence_radius_meters=float(
                getattr(settings, "GEOFENCE_RADIUS_METERS", constants.DEFAULT_GEOFENCE_RADIUS_METERS)
            ),
            trial_days=int(getattr(settings, "TRIAL_DAYS", constants.TRIAL_DAYS)),
            expiry_warning_days=int(getattr(settings, "EXPIRY_WARNING_DAYS", constants.EXPIRY_WARNING_DAYS)),
            escalation_contact_name=str(getattr(settings, "ESCALATION_CONTACT_NAME", "")),
            escalation_contact_phone=str(getattr(settings, "ESCALATION_CONTACT_PHONE", "")),
        )
