from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from application.ports.user_store_port import UserStorePort
from domain.errors import ConflictError
from domain.users import UserRecord, normalize_email
from domain.watchlist import WatchItem, items_from_payload
from infrastructure.persistence.postgres.base import USERS_TABLE, PostgresStoreBase, _jsonb_loads

logger = logging.getLogger(__name__)


def _stats_for(records: List[UserRecord]) -> Dict[str, Any]:
    return {
        "totalUsers": len(records),
        "usersWithWatchlist": sum(1 for r in records if r.watchlist),
        "totalWatchlistItems": sum(len(r.watchlist) for r in records),
    }


class InMemoryUserStore(UserStorePort):
    """In-memory user records for dev/tests when Postgres is not configured.

    Each record also carries the user's watchlist; ``InMemoryWatchlistStore``
    reads and writes it through ``get_watchlist`` / ``set_watchlist``.
    """

    def __init__(self) -> None:
        self._records: dict[str, UserRecord] = {}
        self._by_email: dict[str, str] = {}

    async def create_user(self, *, email: str, password_hash: str) -> UserRecord:
        norm = normalize_email(email)
        if norm in self._by_email:
            raise ConflictError()
        record = UserRecord(
            id=uuid4().hex,
            email=norm,
            password_hash=password_hash,
            created_at=datetime.now(timezone.utc),
        )
        self._records[record.id] = record
        self._by_email[norm] = record.id
        return record

    async def get_by_email(self, *, email: str) -> Optional[UserRecord]:
        uid = self._by_email.get(normalize_email(email))
        return self._records.get(uid) if uid else None

    async def get_by_id(self, *, user_id: str) -> Optional[UserRecord]:
        return self._records.get(str(user_id))

    async def list_users(self) -> List[UserRecord]:
        return sorted(
            self._records.values(),
            key=lambda r: r.created_at or datetime.min.replace(tzinfo=timezone.utc),
        )

    async def stats(self) -> Dict[str, Any]:
        return _stats_for(list(self._records.values()))

    def get_watchlist(self, user_id: str) -> Optional[tuple[WatchItem, ...]]:
        record = self._records.get(str(user_id))
        return record.watchlist if record is not None else None

    def set_watchlist(self, user_id: str, items: List[WatchItem]) -> bool:
        record = self._records.get(str(user_id))
        if record is None:
            return False
        self._records[record.id] = replace(record, watchlist=tuple(items))
        return True

    async def close(self) -> None:
        return None


def _row_to_record(row: dict) -> UserRecord:
    raw_items = _jsonb_loads(row.get("watchlist"), [])
    try:
        items: tuple[WatchItem, ...] = tuple(items_from_payload(raw_items))
    except ValueError:
        logger.warning("Discarding malformed stored watchlist for user=%s", row.get("id"))
        items = ()
    return UserRecord(
        id=str(row["id"]),
        email=str(row.get("email") or ""),
        password_hash=str(row.get("password_hash") or ""),
        created_at=row.get("created_at"),
        watchlist=items,
    )


class PostgresUserStore(PostgresStoreBase, UserStorePort):
    """Postgres-backed user records (asyncpg)."""

    async def create_user(self, *, email: str, password_hash: str) -> UserRecord:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO {USERS_TABLE} (id, email, password_hash)
                VALUES ($1, $2, $3)
                ON CONFLICT (email) DO NOTHING
                RETURNING id, email, password_hash, created_at, watchlist;
                """,
                uuid4().hex,
                normalize_email(email),
                password_hash,
            )
        if row is None:
            raise ConflictError()
        return _row_to_record(dict(row))

    async def get_by_email(self, *, email: str) -> Optional[UserRecord]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT id, email, password_hash, created_at, watchlist FROM {USERS_TABLE} WHERE email = $1;",
                normalize_email(email),
            )
        return _row_to_record(dict(row)) if row else None

    async def get_by_id(self, *, user_id: str) -> Optional[UserRecord]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT id, email, password_hash, created_at, watchlist FROM {USERS_TABLE} WHERE id = $1;",
                str(user_id),
            )
        return _row_to_record(dict(row)) if row else None

    async def list_users(self) -> List[UserRecord]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT id, email, password_hash, created_at, watchlist FROM {USERS_TABLE} ORDER BY created_at ASC, id ASC;"
            )
        return [_row_to_record(dict(r)) for r in rows]

    async def stats(self) -> Dict[str, Any]:
        pool = await self._get_pool()
        async with pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT
                    COUNT(1) AS total_users,
                    COUNT(1) FILTER (WHERE jsonb_array_length(watchlist) > 0) AS users_with_watchlist,
                    COALESCE(SUM(jsonb_array_length(watchlist)), 0) AS total_items
                FROM {USERS_TABLE};
                """
            )
        if row is None:
            return _stats_for([])
        return {
            "totalUsers": int(row["total_users"] or 0),
            "usersWithWatchlist": int(row["users_with_watchlist"] or 0),
            "totalWatchlistItems": int(row["total_items"] or 0),
        }
