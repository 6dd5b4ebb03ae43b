from __future__ import annotations

from dataclasses import replace
from datetime import time

import pytest

from gym_membership.core.enums import MembershipStatus, PaymentState
from gym_membership.core.exceptions import BadRequestError, ConflictError, NotFoundError

from tests.fakes import EVENING, MORNING, make_member


def test_create_batch(container, batches):
    batch = container.batch_service.create(name="Noon", start_time=time(12, 0), end_time=time(13, 0), capacity=10)

    assert batch.batch_id == 3
    assert batch.capacity == 10
    assert [b.name for b in container.batch_service.list_active()] == ["Morning", "Noon", "Evening"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": " ", "start_time": time(12, 0), "end_time": time(13, 0)},
        {"name": "Noon", "start_time": time(12, 0), "end_time": time(12, 0)},
        {"name": "Noon", "start_time": time(12, 0), "end_time": time(13, 0), "capacity": 0},
        {"name": "Noon", "start_time": time(12, 0), "end_time": time(13, 0), "capacity": "many"},
    ],
)
def test_create_batch_rejects_bad_input(container, kwargs):
    with pytest.raises(BadRequestError):
        container.batch_service.create(**kwargs)


def test_batch_names_are_unique(container):
    with pytest.raises(ConflictError):
        container.batch_service.create(name="Morning", start_time=time(5, 0), end_time=time(6, 0))


def test_update_batch_changes_only_given_fields(container):
    updated = container.batch_service.update(MORNING.batch_id, end_time=time(8, 30), capacity=40)

    assert updated.name == "Morning"
    assert updated.start_time == time(6, 0)
    assert updated.end_time == time(8, 30)
    assert updated.capacity == 40

    with pytest.raises(ConflictError):
        container.batch_service.update(MORNING.batch_id, name="Evening")


def test_batch_with_current_members_cannot_be_deleted(container, members, batches):
    members.add(make_member(1, batch_id=EVENING.batch_id))

    with pytest.raises(BadRequestError, match="Cannot delete batch with active members"):
        container.batch_service.deactivate(EVENING.batch_id)

    members.add(replace(members.get_by_id(1), status=MembershipStatus.EXPIRED, payment_state=PaymentState.OVERDUE))
    container.batch_service.deactivate(EVENING.batch_id)

    assert batches.get_by_id(EVENING.batch_id).is_active is False
    with pytest.raises(NotFoundError):
        container.batch_service.get(EVENING.batch_id)


def test_batch_members_lists_non_deleted_members_by_name(container, members):
    members.add(make_member(1, name="Zoya"))
    members.add(make_member(2, name="Arjun"))
    members.add(make_member(3, name="Gone", is_active=False))
    members.add(make_member(4, batch_id=EVENING.batch_id))

    assert [m.name for m in container.batch_service.members(MORNING.batch_id)] == ["Arjun", "Zoya"]


def test_assign_batch_respects_capacity(container, members, batches):
    batches.update(replace(EVENING, capacity=1))
    members.add(make_member(1, batch_id=EVENING.batch_id))
    members.add(make_member(2))

    with pytest.raises(BadRequestError, match="full capacity"):
        container.member_service.assign_batch(2, EVENING.batch_id)

    # Re-assigning a member to the batch they already hold is not a new place.
    assert container.member_service.assign_batch(1, EVENING.batch_id).batch_id == EVENING.batch_id


def test_frozen_members_do_not_take_a_place(container, members, batches):
    batches.update(replace(EVENING, capacity=1))
    members.add(make_member(1, batch_id=EVENING.batch_id, status=MembershipStatus.FROZEN))
    members.add(make_member(2))

    assert container.member_service.assign_batch(2, EVENING.batch_id).batch_id == EVENING.batch_id
