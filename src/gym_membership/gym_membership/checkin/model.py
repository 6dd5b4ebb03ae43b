from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AttendanceStatus, MembershipStatus


@dataclass(frozen=True)
class CheckInRequest:
    phone: str
    email: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class TrialWarning:
    total_trial_days: int
    days_passed: int
    days_remaining: int

    @property
    def message(self) -> str:
        return (
            f"You're on a {self.total_trial_days}-day free trial (day {self.days_passed}). "
            f"{self.days_remaining} day(s) remaining - please complete your payment to continue."
        )


@dataclass(frozen=True)
class LateWarning:
    batch_name: str
    batch_time: str
    contact_name: str
    contact_phone: str

    @property
    def message(self) -> str:
        return "Be on time! Continuous violations can lead to membership termination or trimming of your batch timing."


@dataclass(frozen=True)
class BirthdayMessage:
    member_name: str

    @property
    def title(self) -> str:
        return f"Happy Birthday, {self.member_name}!"

    @property
    def message(self) -> str:
        return "Wishing you a strong and healthy year ahead."


@dataclass(frozen=True)
class ExpiryWarning:
    days_left: int
    expiry_date: date

    @property
    def message(self) -> str:
        if self.days_left == 0:
            return "Your membership expires today. Please renew to keep access."
        return f"Your membership expires in {self.days_left} day(s). Please renew to keep access."


@dataclass(frozen=True)
class CheckInResult:
    """Outcome of a successful self check-in (data only, no wire format)."""

    attendance_id: int
    member_id: int
    member_name: str
    status: AttendanceStatus
    membership_status: MembershipStatus
    coverage_end: Optional[date]
    batch_name: str
    batch_time: str
    distance_meters: float
    check_in_time: datetime
    trial_warning: Optional[TrialWarning] = None
    late_warning: Optional[LateWarning] = None
    birthday_message: Optional[BirthdayMessage] = None
    expiry_warning: Optional[ExpiryWarning] = None

    @property
    def check_in_display(self) -> str:
        return self.check_in_time.strftime("%I:%M %p")

    @property
    def message(self) -> str:
        if self.status == AttendanceStatus.LATE:
            return f"Attendance marked as LATE for {self.member_name}"
        return f"Attendance marked successfully for {self.member_name}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "attendanceId": self.attendance_id,
            "memberId": self.member_id,
            "memberName": self.member_name,
            "status": self.status.value,
            "membershipStatus": self.membership_status.value,
            "endDate": self.coverage_end.isoformat() if self.coverage_end else None,
            "batchName": self.batch_name,
            "batchTime": self.batch_time,
            "distance": round(self.distance_meters),
            "checkInTime": self.check_in_display,
            "trialWarning": None,
            "lateWarning": None,
            "birthdayMessage": None,
            "expiryWarning": None,
        }
        if self.trial_warning:
            data["trialWarning"] = {
                "totalTrialDays": self.trial_warning.total_trial_days,
                "daysPassed": self.trial_warning.days_passed,
                "daysRemaining": self.trial_warning.days_remaining,
                "message": self.trial_warning.message,
            }
        if self.late_warning:
            data["lateWarning"] = {
                "message": self.late_warning.message,
                "batchName": self.late_warning.batch_name,
                "batchTime": self.late_warning.batch_time,
                "contactName": self.late_warning.contact_name,
                "contactPhone": self.late_warning.contact_phone,
            }
        if self.birthday_message:
            data["birthdayMessage"] = {"title": self.birthday_message.title, "message": self.birthday_message.message}
        if self.expiry_warning:
            data["expiryWarning"] = {
                "daysLeft": self.expiry_warning.days_left,
                "expiryDate": self.expiry_warning.expiry_date.isoformat(),
                "message": self.expiry_warning.message,
            }
        return data
