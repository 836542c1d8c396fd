from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

NOT_STARTED = "Not Started"
WATCHING = "Watching"
COMPLETE = "Complete"


@dataclass(frozen=True)
class WatchStatus:
    status: str
    watched_count: int = 0
    total_episodes: Optional[int] = None


def watch_status(watched: Iterable[int], total_episodes: Optional[int] = None) -> WatchStatus:
    """Derive the per-anime badge from watched episode numbers.

    ``Complete`` needs a known positive episode total; without one the best
    we can say is ``Watching``.
    """
    count = len({int(e) for e in watched})
    total = int(total_episodes) if total_episodes and int(total_episodes) > 0 else None
    if count == 0:
        return WatchStatus(status=NOT_STARTED, watched_count=0, total_episodes=total)
    if total is not None and count >= total:
        return WatchStatus(status=COMPLETE, watched_count=count, total_episodes=total)
    return WatchStatus(status=WATCHING, watched_count=count, total_episodes=total)
