from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from domain.users import UserRecord


class UserStorePort(Protocol):
    async def create_user(self, *, email: str, password_hash: str) -> UserRecord:
        """Insert a user. Raises ConflictError if the (normalized) email exists."""
        ...

    async def get_by_email(self, *, email: str) -> Optional[UserRecord]:
        ...

    async def get_by_id(self, *, user_id: str) -> Optional[UserRecord]:
        ...

    async def list_users(self) -> List[UserRecord]:
        ...

    async def stats(self) -> Dict[str, Any]:
        """Return totalUsers / usersWithWatchlist / totalWatchlistItems counters."""
        ...

    async def close(self) -> None:
        ...
