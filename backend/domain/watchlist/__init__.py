from domain.watchlist.dedup import dedupe_watch_items
from domain.watchlist.progress import WatchStatus, watch_status
from domain.watchlist.sync_state import SyncPhase, SyncResult, SyncState
from domain.watchlist.watch_item import (
    WatchItem,
    items_from_payload,
    items_to_payload,
    normalize_id,
)

__all__ = [
    "SyncPhase",
    "SyncResult",
    "SyncState",
    "WatchItem",
    "WatchStatus",
    "dedupe_watch_items",
    "items_from_payload",
    "items_to_payload",
    "normalize_id",
    "watch_status",
]
