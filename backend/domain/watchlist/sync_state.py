from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from domain.errors import RewatchError
from domain.watchlist.watch_item import WatchItem, normalize_id


class SyncPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SAVING = "saving"


@dataclass(frozen=True)
class SyncState:
    """Snapshot of the client's cached watchlist for one user session."""

    user_id: Optional[str] = None
    items: tuple[WatchItem, ...] = ()
    phase: SyncPhase = SyncPhase.IDLE
    error: Optional[str] = None
    # The last load failed: ``items`` is not the backend's list and must not be
    # the base of a replace-all write.
    stale: bool = False

    @property
    def saving(self) -> bool:
        return self.phase is SyncPhase.SAVING

    @property
    def loading(self) -> bool:
        return self.phase is SyncPhase.LOADING

    def contains(self, item_id: Any) -> bool:
        key = normalize_id(item_id)
        if key is None:
            return False
        return any(i.key == key for i in self.items)

    def evolve(self, **changes: Any) -> "SyncState":
        if "items" in changes:
            changes["items"] = tuple(changes["items"] or ())
        return replace(self, **changes)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a synchronizer operation; failures carry the error instead of raising."""

    success: bool
    watchlist: tuple[WatchItem, ...] = ()
    error: Optional[RewatchError] = field(default=None, compare=False)

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error is not None else None
