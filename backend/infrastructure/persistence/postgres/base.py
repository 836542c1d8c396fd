from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

USERS_TABLE = "rewatch_users"


def _jsonb_dumps(value: Any) -> str:
    # Keep encoding consistent across stores writing JSONB.
    return json.dumps(value, ensure_ascii=False)


def _jsonb_loads(value: Any, default: Any) -> Any:
    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        try:
            return json.loads(value)
        except Exception:
            logger.warning("Failed to decode JSONB payload; using default")
            return default
    return value


class PostgresStoreBase:
    """Lazy asyncpg pool plus idempotent schema bootstrap shared by the stores."""

    def __init__(
        self,
        *,
        dsn: str,
        min_size: int = 1,
        max_size: int = 5,
    ) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._pool = None
        self._pool_lock = asyncio.Lock()

    async def _get_pool(self):
        if self._pool is not None:
            return self._pool
        async with self._pool_lock:
            if self._pool is not None:
                return self._pool
            import asyncpg  # type: ignore

            self._pool = await asyncpg.create_pool(
                self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
            )
            await self._ensure_schema()
            logger.info("PostgreSQL pool initialized for %s", type(self).__name__)
            return self._pool

    async def _ensure_schema(self) -> None:
        pool = self._pool
        if pool is None:
            return
        async with pool.acquire() as conn:
            await conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
                    id text PRIMARY KEY,
                    email text NOT NULL UNIQUE,
                    password_hash text NOT NULL,
                    created_at timestamptz NOT NULL DEFAULT NOW(),
                    watchlist jsonb NOT NULL DEFAULT '[]'::jsonb
                );
                """
            )
            await conn.execute(
                f"CREATE INDEX IF NOT EXISTS {USERS_TABLE}_created_at_idx ON {USERS_TABLE}(created_at);"
            )

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
        self._pool = None
