from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Sequence
from urllib.parse import quote

import aiohttp

from application.ports.auth_api_port import AuthApiPort
from application.ports.watchlist_api_port import WatchlistApiPort
from domain.errors import InternalError, NetworkError, error_for_status
from domain.users import UserRef
from domain.watchlist import WatchItem, items_from_payload, items_to_payload
from infrastructure.config.settings import REWATCH_API_BASE_URL, REWATCH_HTTP_TIMEOUT_S

logger = logging.getLogger(__name__)


class RewatchHttpClient(WatchlistApiPort, AuthApiPort):
    """HTTP client for the Re:Watch backend (signup/login + watchlist).

    Transport failures surface as ``NetworkError``; non-2xx responses are
    mapped onto the error taxonomy by status, keeping the server's
    ``{"error": ...}`` message when there is one.
    """

    def __init__(
        self,
        *,
        base_url: str = REWATCH_API_BASE_URL,
        timeout_s: float = REWATCH_HTTP_TIMEOUT_S,
    ) -> None:
        self._base_url = (base_url or "").strip().rstrip("/")
        self._timeout_s = float(timeout_s or 10.0)
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._session.closed:
            return self._session

        async with self._lock:
            if self._session is not None and not self._session.closed:
                return self._session

            timeout = aiohttp.ClientTimeout(total=self._timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            return self._session

    async def _request(self, method: str, path: str, *, payload: Any = None) -> dict[str, Any]:
        session = await self._get_session()
        url = f"{self._base_url}{path}"
        try:
            async with session.request(
                method,
                url,
                json=payload,
                headers={"content-type": "application/json"},
            ) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError:
                    data = None
                if not isinstance(data, dict):
                    data = {}
                if resp.status >= 400:
                    message = data.get("error")
                    logger.warning("%s %s failed (%s): %s", method, path, resp.status, message)
                    raise error_for_status(resp.status, str(message) if message else None)
                return data
        except asyncio.TimeoutError as exc:
            logger.warning("%s %s timed out after %ss", method, path, self._timeout_s)
            raise NetworkError("Request timed out") from exc
        except aiohttp.ClientError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise NetworkError("Network error. Please try again.") from exc

    @staticmethod
    def _parse_watchlist(data: dict[str, Any]) -> List[WatchItem]:
        try:
            return items_from_payload(data.get("watchlist"))
        except ValueError as exc:
            raise InternalError(f"Malformed watchlist response: {exc}") from exc

    @staticmethod
    def _parse_user(data: dict[str, Any]) -> UserRef:
        user = UserRef.from_payload(data.get("user"))
        if not data.get("success") or user is None:
            raise InternalError(str(data.get("error") or "Malformed auth response"))
        return user

    # ----- watchlist -----

    async def fetch_watchlist(self, user_id: str) -> List[WatchItem]:
        data = await self._request("GET", f"/watchlist/{quote(str(user_id), safe='')}")
        return self._parse_watchlist(data)

    async def save_watchlist(self, user_id: str, items: Sequence[WatchItem]) -> List[WatchItem]:
        data = await self._request(
            "POST",
            f"/watchlist/{quote(str(user_id), safe='')}",
            payload={"watchlist": items_to_payload(items)},
        )
        return self._parse_watchlist(data)

    # ----- auth -----

    async def signup(self, email: str, password: str) -> UserRef:
        data = await self._request("POST", "/signup", payload={"email": email, "password": password})
        return self._parse_user(data)

    async def login(self, email: str, password: str) -> UserRef:
        data = await self._request("POST", "/login", payload={"email": email, "password": password})
        return self._parse_user(data)

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
