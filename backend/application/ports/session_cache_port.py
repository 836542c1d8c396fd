from __future__ import annotations

from typing import Optional, Protocol

from domain.users import UserRef


class SessionCachePort(Protocol):
    """Client-local persistence that survives process restarts."""

    def load_user(self) -> Optional[UserRef]:
        ...

    def save_user(self, user: UserRef) -> None:
        ...

    def clear_user(self) -> None:
        ...

    def watched_episodes(self, *, user_id: str, anime_id: str) -> list[int]:
        ...

    def set_watched_episodes(self, *, user_id: str, anime_id: str, episodes: list[int]) -> None:
        ...

    def total_episodes(self, *, user_id: str, anime_id: str) -> Optional[int]:
        ...

    def set_total_episodes(self, *, user_id: str, anime_id: str, total: int) -> None:
        ...
