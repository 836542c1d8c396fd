from __future__ import annotations

from typing import List, Protocol, Sequence

from domain.watchlist import WatchItem


class WatchlistStorePort(Protocol):
    """Durable per-user watchlist; the single source of truth."""

    async def read(self, *, user_id: str) -> List[WatchItem]:
        """Return the persisted list. Raises NotFoundError for unknown users."""
        ...

    async def replace_all(self, *, user_id: str, items: Sequence[WatchItem]) -> List[WatchItem]:
        """De-duplicate ``items``, persist them as the whole list and return the canonical list.

        Raises NotFoundError for unknown users, InvalidInputError for malformed input.
        """
        ...

    async def close(self) -> None:
        ...
