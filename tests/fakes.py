from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Iterator, Optional, Sequence

from gym_membership.attendance.model import AttendanceRecord
from gym_membership.batches.model import Batch
from gym_membership.common.geo import GeoPoint
from gym_membership.core.enums import (
    AttendanceStatus,
    LifecycleEventKind,
    MembershipStatus,
    PaymentMethod,
    PaymentState,
)
from gym_membership.core.exceptions import ConflictError, DuplicateAttendanceError, DuplicateReceiptError
from gym_membership.members.model import LifecycleEvent, Member
from gym_membership.payments.model import BillingPeriod, PaymentOverview

TODAY = date(2025, 3, 10)
FACILITY = GeoPoint(27.544129, 76.593373)

MORNING = Batch(batch_id=1, name="Morning", start_time=time(6, 0), end_time=time(8, 0))
EVENING = Batch(batch_id=2, name="Evening", start_time=time(18, 0), end_time=time(20, 0))


def make_member(member_id: int = 1, **overrides) -> Member:
    fields = dict(
        member_id=member_id,
        name=f"Member {member_id}",
        phone=f"98765{member_id:05d}",
        email=f"member{member_id}@example.com",
        batch_id=MORNING.batch_id,
        registered_on=TODAY - timedelta(days=60),
        status=MembershipStatus.ACTIVE,
        payment_state=PaymentState.PAID,
        coverage_end=TODAY + timedelta(days=30),
    )
    fields.update(overrides)
    return Member(**fields)


class InMemoryMembers:
    _STATE = ("_members", "_history", "_next_id")

    def __init__(self):
        self._members: dict[int, Member] = {}
        self._history: dict[int, list[LifecycleEvent]] = {}
        self._next_id = 0
        self.fail_on_save: Optional[Exception] = None
        self.saves = 0
        # Shared with other fakes to record the order of locking reads.
        self.lock_log: Optional[list] = None
        # Runs once when a member row is locked; stands in for a writer that committed first.
        self.on_lock: Optional[Callable[[], None]] = None

    def add(self, member: Member) -> Member:
        self._members[member.member_id] = member
        self._next_id = max(self._next_id, member.member_id)
        return member

    def get_by_id(self, member_id: int) -> Optional[Member]:
        return self._members.get(member_id)

    def get_for_update(self, member_id: int) -> Optional[Member]:
        if self.lock_log is not None:
            self.lock_log.append(("member", member_id))
        if self.on_lock is not None:
            hook, self.on_lock = self.on_lock, None
            hook()
        return self._members.get(member_id)

    def get_by_phone(self, phone: str) -> Optional[Member]:
        return next((m for m in self._members.values() if m.phone == phone), None)

    def find_for_check_in(self, *, phone: str, email: str) -> Optional[Member]:
        for m in self._members.values():
            if m.is_active and m.phone == phone and (m.email or "").lower() == email.lower():
                return m
        return None

    def create(self, *, name, phone, email, date_of_birth, batch_id, registered_on) -> int:
        if self.get_by_phone(phone):
            raise ConflictError("A member with this phone number already exists")
        self._next_id += 1
        self._members[self._next_id] = Member(
            member_id=self._next_id,
            name=name,
            phone=phone,
            email=email,
            batch_id=batch_id,
            registered_on=registered_on,
            date_of_birth=date_of_birth,
        )
        return self._next_id

    def save_derived(self, member: Member) -> bool:
        if self.fail_on_save is not None:
            raise self.fail_on_save
        self.saves += 1
        self._members[member.member_id] = member
        return True

    def set_batch(self, member_id: int, batch_id: Optional[int]) -> bool:
        self._members[member_id] = replace(self._members[member_id], batch_id=batch_id)
        return True

    def list_by_batch(self, batch_id: int) -> Sequence[Member]:
        found = [m for m in self._members.values() if m.is_active and m.batch_id == batch_id]
        return sorted(found, key=lambda m: m.name)

    def count_current_in_batch(self, batch_id: int) -> int:
        return sum(1 for m in self._members.values() if m.is_active and m.batch_id == batch_id and m.status.is_current)

    def list_by_status(self, statuses: Iterable[MembershipStatus], *, with_batch_only: bool = False) -> Sequence[Member]:
        wanted = set(statuses)
        return [
            m
            for m in self._members.values()
            if m.is_active and m.status in wanted and (m.batch_id is not None or not with_batch_only)
        ]

    def count_by_status(self) -> dict[MembershipStatus, int]:
        counts: dict[MembershipStatus, int] = {}
        for m in self._members.values():
            if m.is_active:
                counts[m.status] = counts.get(m.status, 0) + 1
        return counts

    def append_history(self, member_id: int, event: LifecycleEvent) -> None:
        self._history.setdefault(member_id, []).append(event)

    def list_history(self, member_id: int) -> Sequence[LifecycleEvent]:
        return list(self._history.get(member_id, []))

    def latest_history(self, member_id: int, kind: LifecycleEventKind) -> Optional[LifecycleEvent]:
        matching = [e for e in self._history.get(member_id, []) if e.kind == kind]
        return matching[-1] if matching else None


class InMemoryBatches:
    _STATE = ("_batches",)

    def __init__(self, batches: Iterable[Batch] = ()):
        self._batches = {b.batch_id: b for b in batches}

    def get_by_id(self, batch_id: int) -> Optional[Batch]:
        return self._batches.get(batch_id)

    def list_active(self) -> Sequence[Batch]:
        return sorted((b for b in self._batches.values() if b.is_active), key=lambda b: b.start_time)

    def _check_name(self, name: str, batch_id: Optional[int] = None) -> None:
        if any(b.name == name and b.batch_id != batch_id for b in self._batches.values()):
            raise ConflictError("Batch name already exists")

    def create(self, *, name: str, start_time: time, end_time: time, capacity: int = 30) -> int:
        self._check_name(name)
        batch_id = max(self._batches, default=0) + 1
        self._batches[batch_id] = Batch(batch_id, name, start_time, end_time, capacity)
        return batch_id

    def update(self, batch: Batch) -> bool:
        self._check_name(batch.name, batch.batch_id)
        self._batches[batch.batch_id] = batch
        return True

    def deactivate(self, batch_id: int) -> bool:
        batch = self._batches.get(batch_id)
        if not batch or not batch.is_active:
            return False
        self._batches[batch_id] = replace(batch, is_active=False)
        return True


class InMemoryPayments:
    _STATE = ("_periods", "_next_id")

    def __init__(self):
        self._periods: dict[int, BillingPeriod] = {}
        self._next_id = 0
        self.taken_receipts: set[str] = set()
        self.lock_log: Optional[list] = None

    def create(
        self,
        *,
        member_id: int,
        amount: Decimal,
        duration_months: int,
        method: PaymentMethod,
        period_start: date,
        period_end: date,
        receipt_number: str,
        recorded_at: datetime,
    ) -> int:
        if receipt_number in self.taken_receipts or any(
            p.receipt_number == receipt_number for p in self._periods.values()
        ):
            raise DuplicateReceiptError("Receipt number already exists")
        self._next_id += 1
        self._periods[self._next_id] = BillingPeriod(
            payment_id=self._next_id,
            member_id=member_id,
            amount=amount,
            duration_months=duration_months,
            method=method,
            period_start=period_start,
            period_end=period_end,
            receipt_number=receipt_number,
            recorded_at=recorded_at,
        )
        return self._next_id

    def get_by_id(self, payment_id: int, *, for_update: bool = False) -> Optional[BillingPeriod]:
        if for_update and self.lock_log is not None:
            self.lock_log.append(("payment", payment_id))
        return self._periods.get(payment_id)

    def deactivate(self, payment_id: int) -> bool:
        period = self._periods.get(payment_id)
        if not period or not period.is_active:
            return False
        self._periods[payment_id] = replace(period, is_active=False)
        return True

    def list_active_for_member(self, member_id: int, *, for_update: bool = False) -> Sequence[BillingPeriod]:
        if for_update and self.lock_log is not None:
            self.lock_log.append(("periods", member_id))
        active = [p for p in self._periods.values() if p.member_id == member_id and p.is_active]
        return sorted(active, key=lambda p: (p.period_start, p.payment_id))

    def overview(self, *, start: Optional[date] = None, end: Optional[date] = None) -> PaymentOverview:
        active = [
            p
            for p in self._periods.values()
            if p.is_active
            and (start is None or p.recorded_at.date() >= start)
            and (end is None or p.recorded_at.date() <= end)
        ]
        return PaymentOverview(total_payments=len(active), total_amount=sum((p.amount for p in active), Decimal("0")))


class InMemoryAttendance:
    """Enforces (member_id, attendance_date) uniqueness like the real table."""

    _STATE = ("_by_member_date", "_next_id")

    def __init__(self):
        self._by_member_date: dict[tuple[int, date], AttendanceRecord] = {}
        self._next_id = 0
        # Runs just before an insert; lets a test slip in a concurrent write.
        self.before_create: Optional[Callable[[], None]] = None

    def records(self) -> list[AttendanceRecord]:
        return list(self._by_member_date.values())

    def get_for_member_and_date(self, member_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        return self._by_member_date.get((member_id, attendance_date))

    def _insert(self, **fields) -> int:
        key = (fields["member_id"], fields["attendance_date"])
        if key in self._by_member_date:
            raise DuplicateAttendanceError("Attendance already marked for today")
        self._next_id += 1
        self._by_member_date[key] = AttendanceRecord(attendance_id=self._next_id, **fields)
        return self._next_id

    def create(
        self,
        *,
        member_id: int,
        batch_id: int,
        attendance_date: date,
        status: AttendanceStatus,
        check_in_time: Optional[datetime] = None,
        marked_by: Optional[int] = None,
        note: Optional[str] = None,
    ) -> int:
        if self.before_create is not None:
            hook, self.before_create = self.before_create, None
            hook()
        return self._insert(
            member_id=member_id,
            batch_id=batch_id,
            attendance_date=attendance_date,
            status=status,
            check_in_time=check_in_time,
            marked_by=marked_by,
            note=note,
        )

    def update_mark(self, *, attendance_id: int, status, check_in_time, marked_by, note=None) -> bool:
        for key, rec in self._by_member_date.items():
            if rec.attendance_id == attendance_id:
                self._by_member_date[key] = replace(
                    rec, status=status, check_in_time=check_in_time, marked_by=marked_by, note=note
                )
                return True
        return False

    def bulk_create_absent(self, *, attendance_date: date, member_batches, note=None) -> list[int]:
        inserted: list[int] = []
        for member_id, batch_id in member_batches:
            if (member_id, attendance_date) in self._by_member_date:
                continue
            self._insert(
                member_id=member_id,
                batch_id=batch_id,
                attendance_date=attendance_date,
                status=AttendanceStatus.ABSENT,
                note=note,
            )
            inserted.append(member_id)
        return inserted

    def member_ids_for_date(self, attendance_date: date) -> set[int]:
        return {m for (m, d) in self._by_member_date if d == attendance_date}

    def count_by_status(self, *, start_date: date, end_date: date) -> dict[AttendanceStatus, int]:
        counts: dict[AttendanceStatus, int] = {}
        for rec in self._by_member_date.values():
            if start_date <= rec.attendance_date <= end_date:
                counts[rec.status] = counts.get(rec.status, 0) + 1
        return counts

    def get_recent_for_member(self, member_id: int, limit: int) -> Sequence[AttendanceRecord]:
        items = [r for r in self._by_member_date.values() if r.member_id == member_id]
        items.sort(key=lambda r: r.attendance_date, reverse=True)
        return items[:limit]


class InMemoryUnitOfWork:
    """Snapshot-and-restore transaction over the in-memory stores."""

    def __init__(self, *stores):
        self._stores = stores
        self._depth = 0
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            yield
            return

        snapshots = [{name: copy.deepcopy(getattr(s, name)) for name in s._STATE} for s in self._stores]
        self._depth += 1
        try:
            yield
            self.commits += 1
        except Exception:
            for store, snap in zip(self._stores, snapshots):
                for name, value in snap.items():
                    setattr(store, name, value)
            self.rollbacks += 1
            raise
        finally:
            self._depth -= 1
