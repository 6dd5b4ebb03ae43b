from __future__ import annotations

import random
from datetime import datetime, time

import pytest

from gym_membership.common.clock import FixedClock
from gym_membership.container import assemble
from gym_membership.core.settings import FacilitySettings

from tests.fakes import (
    EVENING,
    FACILITY,
    MORNING,
    TODAY,
    InMemoryAttendance,
    InMemoryBatches,
    InMemoryMembers,
    InMemoryPayments,
    InMemoryUnitOfWork,
)


@pytest.fixture
def clock():
    return FixedClock(datetime.combine(TODAY, time(7, 15)))


@pytest.fixture
def settings():
    return FacilitySettings(
        location=FACILITY,
        geofence_radius_meters=50.0,
        escalation_contact_name="Front desk",
        escalation_contact_phone="+91-90000-00000",
    )


@pytest.fixture
def members():
    return InMemoryMembers()


@pytest.fixture
def batches():
    return InMemoryBatches([MORNING, EVENING])


@pytest.fixture
def payments():
    return InMemoryPayments()


@pytest.fixture
def attendance():
    return InMemoryAttendance()


@pytest.fixture
def uow(members, payments, attendance):
    return InMemoryUnitOfWork(members, payments, attendance)


@pytest.fixture
def container(members, batches, payments, attendance, uow, clock, settings):
    return assemble(
        members_repo=members,
        batches_repo=batches,
        payments_repo=payments,
        attendance_repo=attendance,
        uow=uow,
        clock=clock,
        settings=settings,
        rng=random.Random(7),
    )
