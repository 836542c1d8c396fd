from __future__ import annotations

import logging
from typing import Any, List

from application.ports.watchlist_store_port import WatchlistStorePort
from domain.errors import InvalidInputError, NotFoundError
from domain.watchlist import WatchItem, dedupe_watch_items, items_from_payload, items_to_payload
from infrastructure.persistence.postgres.base import (
    USERS_TABLE,
    PostgresStoreBase,
    _jsonb_dumps,
    _jsonb_loads,
)
from infrastructure.persistence.postgres.user_store import InMemoryUserStore

logger = logging.getLogger(__name__)


def _canonical_items(items: Any) -> List[WatchItem]:
    """Validate a submitted list and collapse duplicate ids (first occurrence wins)."""
    if isinstance(items, tuple):
        items = list(items)
    try:
        parsed = items_from_payload(items)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from exc
    return dedupe_watch_items(parsed)


class InMemoryWatchlistStore(WatchlistStorePort):
    """Watchlists held on the in-memory user records (dev/tests)."""

    def __init__(self, *, users: InMemoryUserStore) -> None:
        self._users = users

    async def read(self, *, user_id: str) -> List[WatchItem]:
        items = self._users.get_watchlist(user_id)
        if items is None:
            raise NotFoundError()
        return list(items)

    async def replace_all(self, *, user_id: str, items: Any) -> List[WatchItem]:
        canonical = _canonical_items(items)
        if not self._users.set_watchlist(user_id, canonical):
            raise NotFoundError()
        return canonical

    async def close(self) -> None:
        return None


class PostgresWatchlistStore(PostgresStoreBase, WatchlistStorePort):
    """Watchlist column of ``rewatch_users`` (asyncpg).

    The list is one JSONB value, so a replace is a single-row UPDATE and two
    concurrent writers resolve as last-writer-wins without partial merges.
    """

    async def read(self, *, user_id: str) -> List[WatchItem]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT watchlist FROM {USERS_TABLE} WHERE id = $1;",
                str(user_id),
            )
        if row is None:
            raise NotFoundError()
        raw = _jsonb_loads(row["watchlist"], [])
        try:
            return items_from_payload(raw)
        except ValueError:
            logger.warning("Stored watchlist for user=%s is malformed; returning empty list", user_id)
            return []

    async def replace_all(self, *, user_id: str, items: Any) -> List[WatchItem]:
        canonical = _canonical_items(items)
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE {USERS_TABLE}
                SET watchlist = $2::jsonb
                WHERE id = $1
                RETURNING id;
                """,
                str(user_id),
                _jsonb_dumps(items_to_payload(canonical)),
            )
        if row is None:
            raise NotFoundError()
        return canonical
