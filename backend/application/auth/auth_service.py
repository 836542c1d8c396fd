"""Signup / login for the Re:Watch backend.

Plain hash-and-compare: no tokens, no server-side sessions. The caller gets a
``UserRef`` back and is trusted with it from then on.
"""

from __future__ import annotations

import asyncio
import logging

from application.ports.password_hasher_port import PasswordHasherPort
from application.ports.user_store_port import UserStorePort
from domain.errors import InvalidCredentialsError, InvalidInputError
from domain.users import UserRef, is_valid_email, normalize_email

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        *,
        store: UserStorePort,
        hasher: PasswordHasherPort,
        password_min_length: int = 6,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._password_min_length = max(1, int(password_min_length))

    async def signup(self, *, email: str, password: str) -> UserRef:
        if not email or not password:
            raise InvalidInputError("Email and password are required")
        if len(password) < self._password_min_length:
            raise InvalidInputError(f"Password must be at least {self._password_min_length} characters")
        if not is_valid_email(email):
            raise InvalidInputError("Invalid email format")

        # The store enforces uniqueness; ConflictError propagates from there.
        record = await self._store.create_user(
            email=normalize_email(email),
            password_hash=await asyncio.to_thread(self._hasher.hash, password),
        )
        logger.info("user signed up: id=%s", record.id)
        return record.ref()

    async def login(self, *, email: str, password: str) -> UserRef:
        if not email or not password:
            raise InvalidInputError("Email and password are required")

        record = await self._store.get_by_email(email=normalize_email(email))
        if record is None:
            raise InvalidCredentialsError()
        # bcrypt is CPU-bound; keep it off the event loop.
        if not await asyncio.to_thread(self._hasher.verify, password, record.password_hash):
            raise InvalidCredentialsError()
        return record.ref()
