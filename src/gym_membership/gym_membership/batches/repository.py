from __future__ import annotations

from datetime import time
from typing import Optional, Protocol, Sequence

from .model import Batch


class BatchRepository(Protocol):
    def get_by_id(self, batch_id: int) -> Optional[Batch]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Batch]:
        """Active batches ordered by start time."""

        raise NotImplementedError

    def create(self, *, name: str, start_time: time, end_time: time, capacity: int = 30) -> int:
        raise NotImplementedError

    def update(self, batch: Batch) -> bool:
        raise NotImplementedError

    def deactivate(self, batch_id: int) -> bool:
        """Soft delete: the row stays for attendance history."""

        raise NotImplementedError
