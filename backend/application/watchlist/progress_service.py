from __future__ import annotations

from typing import Any, Callable, Optional

from application.ports.session_cache_port import SessionCachePort
from domain.errors import InvalidInputError, UnauthenticatedError
from domain.users import UserRef
from domain.watchlist import WatchStatus, normalize_id, watch_status


class WatchProgressService:
    """Per-user episode tracking kept in the local session cache."""

    def __init__(self, *, cache: SessionCachePort, current_user: Callable[[], Optional[UserRef]]) -> None:
        self._cache = cache
        self._current_user = current_user

    def _keys(self, anime_id: Any) -> tuple[str, str]:
        user = self._current_user()
        if user is None:
            raise UnauthenticatedError()
        key = normalize_id(anime_id)
        if key is None:
            raise InvalidInputError("anime id is required")
        return user.id, key

    def watched(self, anime_id: Any) -> list[int]:
        user_id, key = self._keys(anime_id)
        return sorted(self._cache.watched_episodes(user_id=user_id, anime_id=key))

    def toggle_episode(self, anime_id: Any, episode: int) -> bool:
        """Flip one episode; returns True when it is now marked watched."""
        if int(episode) <= 0:
            raise InvalidInputError("episode numbers start at 1")
        user_id, key = self._keys(anime_id)
        episodes = set(self._cache.watched_episodes(user_id=user_id, anime_id=key))
        now_watched = int(episode) not in episodes
        if now_watched:
            episodes.add(int(episode))
        else:
            episodes.discard(int(episode))
        self._cache.set_watched_episodes(user_id=user_id, anime_id=key, episodes=sorted(episodes))
        return now_watched

    def remember_total(self, anime_id: Any, total: Optional[int]) -> None:
        if not total or int(total) <= 0:
            return
        user_id, key = self._keys(anime_id)
        self._cache.set_total_episodes(user_id=user_id, anime_id=key, total=int(total))

    def status(self, anime_id: Any) -> WatchStatus:
        user_id, key = self._keys(anime_id)
        return watch_status(
            self._cache.watched_episodes(user_id=user_id, anime_id=key),
            self._cache.total_episodes(user_id=user_id, anime_id=key),
        )
