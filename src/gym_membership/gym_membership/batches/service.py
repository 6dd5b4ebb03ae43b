from __future__ import annotations

from dataclasses import replace
from datetime import time
from typing import Optional, Sequence

from loguru import logger

from ..common.validators import require_non_empty
from ..core.exceptions import BadRequestError, NotFoundError
from ..members.model import Member
from ..members.repository import MemberRepository
from .model import Batch
from .repository import BatchRepository


class BatchService:
    """Use cases: maintain the daily batch timetable."""

    def __init__(self, batches: BatchRepository, members: MemberRepository):
        self._batches = batches
        self._members = members

    @staticmethod
    def _check_capacity(capacity) -> int:
        try:
            value = int(capacity)
        except (TypeError, ValueError):
            value = 0
        if value < 1:
            raise BadRequestError("Capacity must be a positive integer")
        return value

    def list_active(self) -> Sequence[Batch]:
        return self._batches.list_active()

    def get(self, batch_id: int) -> Batch:
        batch = self._batches.get_by_id(batch_id)
        if not batch or not batch.is_active:
            raise NotFoundError("Batch not found")
        return batch

    def member_count(self, batch_id: int) -> int:
        return self._members.count_current_in_batch(batch_id)

    def create(self, *, name: str, start_time: time, end_time: time, capacity=30) -> Batch:
        name = require_non_empty(name, "Batch name")
        if start_time == end_time:
            raise BadRequestError("Batch start and end time must differ")

        batch_id = self._batches.create(
            name=name,
            start_time=start_time,
            end_time=end_time,
            capacity=self._check_capacity(capacity),
        )
        logger.info(f"batch {batch_id} ({name}) created")
        return self._batches.get_by_id(batch_id)

    def update(
        self,
        batch_id: int,
        *,
        name: Optional[str] = None,
        start_time: Optional[time] = None,
        end_time: Optional[time] = None,
        capacity=None,
    ) -> Batch:
        batch = self.get(batch_id)
        changes = {}
        if name is not None:
            changes["name"] = require_non_empty(name, "Batch name")
        if start_time is not None:
            changes["start_time"] = start_time
        if end_time is not None:
            changes["end_time"] = end_time
        if capacity is not None:
            changes["capacity"] = self._check_capacity(capacity)

        updated = replace(batch, **changes)
        if updated.start_time == updated.end_time:
            raise BadRequestError("Batch start and end time must differ")

        self._batches.update(updated)
        logger.info(f"batch {batch_id} updated: {sorted(changes)}")
        return self._batches.get_by_id(batch_id)

    def deactivate(self, batch_id: int) -> None:
        batch = self.get(batch_id)
        if self._members.count_current_in_batch(batch.batch_id) > 0:
            raise BadRequestError("Cannot delete batch with active members")
        self._batches.deactivate(batch.batch_id)
        logger.info(f"batch {batch_id} ({batch.name}) deactivated")

    def members(self, batch_id: int) -> Sequence[Member]:
        self.get(batch_id)
        return self._members.list_by_batch(batch_id)
