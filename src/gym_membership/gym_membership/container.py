from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .attendance.sweeper import AbsenceSweeper
from .batches.mysql_batch_repository import MySQLBatchRepository
from .batches.repository import BatchRepository
from .batches.service import BatchService
from .checkin.gates import default_gates
from .checkin.service import SelfCheckInService
from .common.clock import Clock, FacilityClock
from .core.settings import FacilitySettings
from .database.connection import DBConfig, DatabaseConnection
from .database.unit_of_work import UnitOfWork
from .freeze.service import FreezeController
from .members.mysql_member_repository import MySQLMemberRepository
from .members.repository import MemberRepository
from .members.service import MemberService
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentLedger
from .status.engine import StatusEngine


@dataclass(frozen=True)
class Container:
    clock: Clock
    settings: FacilitySettings

    members_repo: MemberRepository
    batches_repo: BatchRepository
    payments_repo: PaymentRepository
    attendance_repo: AttendanceRepository

    status_engine: StatusEngine
    member_service: MemberService
    batch_service: BatchService
    payment_ledger: PaymentLedger
    freeze_controller: FreezeController
    checkin_service: SelfCheckInService
    attendance_service: AttendanceService
    absence_sweeper: AbsenceSweeper


def assemble(
    *,
    members_repo: MemberRepository,
    batches_repo: BatchRepository,
    payments_repo: PaymentRepository,
    attendance_repo: AttendanceRepository,
    uow: UnitOfWork,
    clock: Clock,
    settings: FacilitySettings,
    rng: Optional[random.Random] = None,
) -> Container:
    """Wire services over the given stores. Shared by the MySQL app and tests."""
    engine = StatusEngine(warning_days=settings.expiry_warning_days)

    gates = default_gates(
        members=members_repo,
        batches=batches_repo,
        attendance=attendance_repo,
        engine=engine,
        settings=settings,
    )

    return Container(
        clock=clock,
        settings=settings,
        members_repo=members_repo,
        batches_repo=batches_repo,
        payments_repo=payments_repo,
        attendance_repo=attendance_repo,
        status_engine=engine,
        member_service=MemberService(members_repo, batches_repo, clock, status_engine=engine),
        batch_service=BatchService(batches_repo, members_repo),
        payment_ledger=PaymentLedger(members_repo, payments_repo, uow, clock, status_engine=engine, rng=rng),
        freeze_controller=FreezeController(members_repo, uow, clock, status_engine=engine),
        checkin_service=SelfCheckInService(
            gates,
            attendance_repo,
            clock,
            settings,
            strategy_factory=AttendanceStrategyFactory(),
        ),
        attendance_service=AttendanceService(attendance_repo, members_repo, batches_repo, status_engine=engine),
        absence_sweeper=AbsenceSweeper(members_repo, attendance_repo, clock, status_engine=engine),
    )


def build_container(*, db_config: dict, settings: FacilitySettings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        members_repo=MySQLMemberRepository(conn),
        batches_repo=MySQLBatchRepository(conn),
        payments_repo=MySQLPaymentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        uow=conn,
        clock=FacilityClock(settings.timezone),
        settings=settings,
    )
