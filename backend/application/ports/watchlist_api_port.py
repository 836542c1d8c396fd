from __future__ import annotations

from typing import List, Protocol, Sequence

from domain.watchlist import WatchItem


class WatchlistApiPort(Protocol):
    """Client-side view of the backend watchlist store (over HTTP in production).

    Implementations raise ``domain.errors.RewatchError`` subclasses on failure.
    """

    async def fetch_watchlist(self, user_id: str) -> List[WatchItem]:
        ...

    async def save_watchlist(self, user_id: str, items: Sequence[WatchItem]) -> List[WatchItem]:
        ...
