from __future__ import annotations

import logging

import bcrypt

from application.ports.password_hasher_port import PasswordHasherPort

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; newer releases reject longer input.
_MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_PASSWORD_BYTES]


class BcryptPasswordHasher(PasswordHasherPort):
    """Salted bcrypt hashes; the cost factor is baked into each stored hash."""

    def __init__(self, *, rounds: int = 10) -> None:
        # bcrypt accepts cost factors 4..31.
        self._rounds = min(31, max(4, int(rounds)))

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password hash is not a valid bcrypt hash")
            return False
