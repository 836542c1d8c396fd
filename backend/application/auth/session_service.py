from __future__ import annotations

import logging
from typing import Optional

from application.ports.auth_api_port import AuthApiPort
from application.ports.session_cache_port import SessionCachePort
from application.watchlist.synchronizer import WatchlistSynchronizer
from domain.errors import RewatchError
from domain.users import UserRef

logger = logging.getLogger(__name__)


class SessionService:
    """Client session: current user persistence plus watchlist session lifecycle.

    The last successful login/signup is cached locally and treated as the
    current user until ``logout()``. Each change of user (re)starts the
    synchronizer so its cached list always belongs to the current user.
    """

    def __init__(
        self,
        *,
        auth_api: AuthApiPort,
        cache: SessionCachePort,
        synchronizer: Optional[WatchlistSynchronizer] = None,
    ) -> None:
        self._auth_api = auth_api
        self._cache = cache
        self._synchronizer = synchronizer
        self._current: Optional[UserRef] = None

    @property
    def current_user(self) -> Optional[UserRef]:
        return self._current

    @property
    def synchronizer(self) -> Optional[WatchlistSynchronizer]:
        return self._synchronizer

    async def restore(self) -> Optional[UserRef]:
        """Rehydrate the cached user (process start) and load its watchlist."""
        try:
            self._current = self._cache.load_user()
        except Exception:
            logger.exception("failed to read cached session; starting logged out")
            self._current = None
        await self._start_watchlist()
        return self._current

    async def signup(self, email: str, password: str) -> UserRef:
        user = await self._auth_api.signup(email, password)
        await self._adopt(user)
        return user

    async def login(self, email: str, password: str) -> UserRef:
        user = await self._auth_api.login(email, password)
        await self._adopt(user)
        return user

    def logout(self) -> None:
        self._cache.clear_user()
        self._current = None
        if self._synchronizer is not None:
            self._synchronizer.end_session()

    async def _adopt(self, user: UserRef) -> None:
        self._cache.save_user(user)
        self._current = user
        await self._start_watchlist()

    async def _start_watchlist(self) -> None:
        if self._synchronizer is None:
            return
        if self._current is None:
            self._synchronizer.end_session()
            return
        result = await self._synchronizer.start_session(self._current.id)
        if not result.success and isinstance(result.error, RewatchError):
            logger.warning("initial watchlist load failed: %s", result.error.message)
