from __future__ import annotations

from typing import Iterable

from domain.watchlist.watch_item import WatchItem


def dedupe_watch_items(items: Iterable[WatchItem]) -> list[WatchItem]:
    """Drop repeated ids, keeping the first occurrence and the input order.

    Items without a usable id are kept unconditionally; they never collide
    with each other or with identified items.
    """
    seen: set[str] = set()
    out: list[WatchItem] = []
    for item in items:
        key = item.key
        if key is None:
            out.append(item)
            continue
        if key in seen:
            continue
        seen.add(key)
        out.append(item)
    return out
