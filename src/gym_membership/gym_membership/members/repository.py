from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import LifecycleEventKind, MembershipStatus
from .model import LifecycleEvent, Member


class MemberRepository(Protocol):
    """Repository contract for members and their lifecycle history.

    Services depend on this interface, never on a concrete store.
    """

    def get_by_id(self, member_id: int) -> Optional[Member]:
        raise NotImplementedError

    def get_for_update(self, member_id: int) -> Optional[Member]:
        """Like ``get_by_id`` but locks the row for the enclosing transaction."""

        raise NotImplementedError

    def get_by_phone(self, phone: str) -> Optional[Member]:
        raise NotImplementedError

    def find_for_check_in(self, *, phone: str, email: str) -> Optional[Member]:
        """Exact (phone, email) match among active (not deleted) members."""

        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        phone: str,
        email: Optional[str],
        date_of_birth: Optional[date],
        batch_id: Optional[int],
        registered_on: date,
    ) -> int:
        raise NotImplementedError

    def save_derived(self, member: Member) -> bool:
        """Persist coverage, status, payment and freeze fields in one update."""

        raise NotImplementedError

    def set_batch(self, member_id: int, batch_id: Optional[int]) -> bool:
        raise NotImplementedError

    def list_by_batch(self, batch_id: int) -> Sequence[Member]:
        """Active (not deleted) members of a batch ordered by name."""

        raise NotImplementedError

    def count_current_in_batch(self, batch_id: int) -> int:
        """Members of a batch holding a place: not deleted, status active or expiring soon."""

        raise NotImplementedError

    def list_by_status(self, statuses: Iterable[MembershipStatus], *, with_batch_only: bool = False) -> Sequence[Member]:
        raise NotImplementedError

    def count_by_status(self) -> dict[MembershipStatus, int]:
        raise NotImplementedError

    def append_history(self, member_id: int, event: LifecycleEvent) -> None:
        raise NotImplementedError

    def list_history(self, member_id: int) -> Sequence[LifecycleEvent]:
        raise NotImplementedError

    def latest_history(self, member_id: int, kind: LifecycleEventKind) -> Optional[LifecycleEvent]:
        raise NotImplementedError
