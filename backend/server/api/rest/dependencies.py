from __future__ import annotations

import logging
from functools import lru_cache

from application.auth.auth_service import AuthService
from application.ports.password_hasher_port import PasswordHasherPort
from application.ports.user_store_port import UserStorePort
from application.ports.watchlist_store_port import WatchlistStorePort
from config.settings import AUTH_BCRYPT_ROUNDS, AUTH_PASSWORD_MIN_LENGTH, STORE_BACKEND

logger = logging.getLogger(__name__)


def _use_memory_backend() -> bool:
    return STORE_BACKEND == "memory"


@lru_cache(maxsize=1)
def _build_user_store() -> UserStorePort:
    if _use_memory_backend():
        from infrastructure.persistence.postgres.user_store import InMemoryUserStore

        logger.warning("STORE_BACKEND=memory: users and watchlists are lost on restart")
        return InMemoryUserStore()

    from config.database import get_postgres_dsn
    from infrastructure.persistence.postgres.user_store import PostgresUserStore

    return PostgresUserStore(dsn=get_postgres_dsn())


@lru_cache(maxsize=1)
def _build_watchlist_store() -> WatchlistStorePort:
    if _use_memory_backend():
        from infrastructure.persistence.postgres.watchlist_store import InMemoryWatchlistStore

        # Shares records with the user store so signups are visible here.
        return InMemoryWatchlistStore(users=_build_user_store())

    from config.database import get_postgres_dsn
    from infrastructure.persistence.postgres.watchlist_store import PostgresWatchlistStore

    return PostgresWatchlistStore(dsn=get_postgres_dsn())


@lru_cache(maxsize=1)
def _build_password_hasher() -> PasswordHasherPort:
    from infrastructure.security import BcryptPasswordHasher

    return BcryptPasswordHasher(rounds=AUTH_BCRYPT_ROUNDS)


@lru_cache(maxsize=1)
def _build_auth_service() -> AuthService:
    return AuthService(
        store=_build_user_store(),
        hasher=_build_password_hasher(),
        password_min_length=AUTH_PASSWORD_MIN_LENGTH,
    )


def get_user_store() -> UserStorePort:
    return _build_user_store()


def get_watchlist_store() -> WatchlistStorePort:
    return _build_watchlist_store()


def get_auth_service() -> AuthService:
    return _build_auth_service()


async def shutdown_dependencies() -> None:
    """Best-effort shutdown hooks for long-lived adapters (connection pools)."""
    for build in (_build_watchlist_store, _build_user_store):
        if build.cache_info().currsize == 0:
            continue
        close = getattr(build(), "close", None)
        if callable(close):
            await close()
