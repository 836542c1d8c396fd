from typing import Any, List, Optional

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    """注册/登录请求模型

    Both fields are optional at the schema level so a missing field yields the
    service's own "Email and password are required" message.
    """
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    id: str
    email: str


class AuthResponse(BaseModel):
    success: bool = True
    user: UserOut


class WatchlistUpdateRequest(BaseModel):
    """Replace-all body. ``watchlist`` is validated by the store, not here."""
    watchlist: Any = None


class AdminUserSummary(BaseModel):
    id: str
    email: str
    createdAt: Optional[str] = None
    watchlistCount: int = 0


class AdminUsersResponse(BaseModel):
    count: int
    users: List[AdminUserSummary]


class AdminStatsResponse(BaseModel):
    totalUsers: int = 0
    usersWithWatchlist: int = 0
    totalWatchlistItems: int = 0
