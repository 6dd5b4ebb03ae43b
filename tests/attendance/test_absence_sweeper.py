from __future__ import annotations

from datetime import timedelta

from gym_membership.core.constants import AUTO_ABSENT_NOTE
from gym_membership.core.enums import AttendanceStatus, MembershipStatus

from tests.fakes import TODAY, make_member


def _seed(members, attendance):
    for member_id in range(1, 11):
        members.add(make_member(member_id))
    for member_id in (1, 2, 3):
        attendance.create(member_id=member_id, batch_id=1, attendance_date=TODAY, status=AttendanceStatus.PRESENT)
    members.add(make_member(11, batch_id=None))


def test_marks_only_unmarked_members_with_a_batch(container, members, attendance):
    _seed(members, attendance)

    result = container.absence_sweeper.run()

    assert result.success
    assert result.marked_absent == 7
    absent = [r for r in attendance.records() if r.status == AttendanceStatus.ABSENT]
    assert sorted(r.member_id for r in absent) == list(range(4, 11))
    assert all(r.marked_by is None and r.note == AUTO_ABSENT_NOTE for r in absent)
    assert result.message == "Auto-marked 7 members as absent"


def test_second_run_is_a_no_op(container, members, attendance):
    _seed(members, attendance)
    container.absence_sweeper.run()

    result = container.absence_sweeper.run()

    assert result.success
    assert result.marked_absent == 0
    assert result.message == "All members already marked"
    assert len(attendance.records()) == 10


def test_skips_memberships_that_are_not_current(container, members, attendance):
    members.add(make_member(1, status=MembershipStatus.PENDING))
    members.add(make_member(2, status=MembershipStatus.FROZEN))
    members.add(make_member(3, status=MembershipStatus.EXPIRED))
    # Stored as active but lapsed since the last refresh.
    members.add(make_member(4, coverage_end=TODAY - timedelta(days=2)))
    members.add(make_member(5, status=MembershipStatus.EXPIRING_SOON, coverage_end=TODAY + timedelta(days=2)))

    result = container.absence_sweeper.run()

    assert result.marked_absent == 1
    assert [r.member_id for r in attendance.records()] == [5]


def test_explicit_date(container, members, attendance):
    members.add(make_member(1))
    yesterday = TODAY - timedelta(days=1)

    result = container.absence_sweeper.run(yesterday)

    assert result.attendance_date == yesterday
    assert attendance.get_for_member_and_date(1, yesterday).status == AttendanceStatus.ABSENT


def test_store_failure_is_reported_not_raised(container, members, attendance):
    members.add(make_member(1))

    def broken(**kwargs):
        raise RuntimeError("lock wait timeout")

    attendance.bulk_create_absent = broken

    result = container.absence_sweeper.run()

    assert not result.success
    assert result.marked_absent == 0
    assert "lock wait timeout" in result.error


def test_member_checking_in_during_the_sweep_is_not_reported(container, members, attendance):
    members.add(make_member(1, name="Asha"))
    members.add(make_member(2, name="Ravi"))
    bulk_create_absent = attendance.bulk_create_absent

    def check_in_first(**kwargs):
        attendance.create(member_id=1, batch_id=1, attendance_date=TODAY, status=AttendanceStatus.PRESENT)
        return bulk_create_absent(**kwargs)

    attendance.bulk_create_absent = check_in_first

    result = container.absence_sweeper.run()

    assert result.marked_absent == 1
    assert result.member_names == ["Ravi"]
    assert attendance.get_for_member_and_date(1, TODAY).status == AttendanceStatus.PRESENT
