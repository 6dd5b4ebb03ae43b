from __future__ import annotations

from typing import ContextManager, Protocol


class UnitOfWork(Protocol):
    """Scope in which every repository write commits or rolls back together."""

    def transaction(self) -> ContextManager[None]:
        raise NotImplementedError
