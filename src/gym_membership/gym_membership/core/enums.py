from __future__ import annotations

from enum import Enum


class MembershipStatus(str, Enum):
    """Membership lifecycle status stored on the member row."""

    PENDING = "pending"
    ACTIVE = "active"
    EXPIRING_SOON = "expiring_soon"
    EXPIRED = "expired"
    FROZEN = "frozen"

    @property
    def is_sticky(self) -> bool:
        """Sticky statuses are never overwritten by automatic classification."""
        return self in (MembershipStatus.FROZEN, MembershipStatus.PENDING)

    @property
    def is_current(self) -> bool:
        return self in (MembershipStatus.ACTIVE, MembershipStatus.EXPIRING_SOON)


class PaymentState(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    CASH = "cash"
    UPI = "upi"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class AttendanceStatus(str, Enum):
    """Attendance status of one member on one calendar day."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    EXCUSED = "excused"


class LifecycleEventKind(str, Enum):
    FREEZE = "freeze"
    UNFREEZE = "unfreeze"
    RENEWAL = "renewal"
    RETRACTION = "retraction"
