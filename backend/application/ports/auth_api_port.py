from __future__ import annotations

from typing import Protocol

from domain.users import UserRef


class AuthApiPort(Protocol):
    """Client-side signup/login transport. Raises RewatchError subclasses on failure."""

    async def signup(self, email: str, password: str) -> UserRef:
        ...

    async def login(self, email: str, password: str) -> UserRef:
        ...
