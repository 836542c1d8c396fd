from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from domain.watchlist.watch_item import WatchItem

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(_EMAIL_RE.match(email or ""))


@dataclass(frozen=True)
class UserRef:
    """Public user reference: the only user shape that leaves the server."""

    id: str
    email: str

    def to_payload(self) -> dict[str, str]:
        return {"id": self.id, "email": self.email}

    @classmethod
    def from_payload(cls, raw: Any) -> Optional["UserRef"]:
        if not isinstance(raw, Mapping):
            return None
        uid = raw.get("id")
        email = raw.get("email")
        if not uid or not email:
            return None
        return cls(id=str(uid), email=str(email))


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    password_hash: str
    created_at: Optional[datetime] = None
    watchlist: tuple[WatchItem, ...] = field(default_factory=tuple)

    def ref(self) -> UserRef:
        return UserRef(id=self.id, email=self.email)
