"""
Jikan (unofficial MyAnimeList) API client.

Read-only anime metadata for search, the browse shelves and the detail view.
Jikan throttles at roughly 3 requests per second, so every request made
through one client is spaced at least ``min_interval_s`` after the previous
one; callers never fan out in parallel.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Optional

import aiohttp

from domain.errors import NetworkError, NotFoundError
from domain.watchlist import WatchItem
from infrastructure.config.settings import (
    JIKAN_BASE_URL,
    JIKAN_MIN_INTERVAL_S,
    JIKAN_PLACEHOLDER_POSTER,
    JIKAN_TIMEOUT_S,
)

logger = logging.getLogger(__name__)

_EPISODE_TITLE_RE = re.compile(r"Episode\s+(\d+)", re.IGNORECASE)


@dataclass(frozen=True)
class AnimeDetail:
    item: WatchItem
    synopsis: str = "No synopsis available."
    episodes: Optional[int] = None
    status: Optional[str] = None
    score: Optional[float] = None
    rank: Optional[int] = None
    genres: tuple[str, ...] = field(default_factory=tuple)
    studios: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Episode:
    number: int
    title: str
    mal_id: Optional[int] = None
    aired: Optional[str] = None
    filler: bool = False
    recap: bool = False


def _get(obj: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def map_jikan_item(raw: dict[str, Any], *, placeholder_poster: str = JIKAN_PLACEHOLDER_POSTER) -> Optional[WatchItem]:
    """Map one Jikan anime object onto a WatchItem; None when it carries no mal_id."""
    if not isinstance(raw, dict):
        return None
    mal_id = raw.get("mal_id")
    if mal_id is None or isinstance(mal_id, bool):
        return None
    title = raw.get("title") or raw.get("title_english") or raw.get("title_japanese") or "Untitled"
    year = raw.get("year") or _get(raw, "aired", "prop", "from", "year") or None
    poster = _get(raw, "images", "jpg", "image_url") or placeholder_poster
    return WatchItem(id=mal_id, title=str(title), year=year, poster=str(poster))


def _names(entries: Any) -> tuple[str, ...]:
    if not isinstance(entries, list):
        return ()
    return tuple(str(e["name"]) for e in entries if isinstance(e, dict) and e.get("name"))


def _positive_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def _map_episode(raw: dict[str, Any], index: int) -> Episode:
    number = raw.get("mal_id")
    if isinstance(number, bool) or not isinstance(number, int):
        m = _EPISODE_TITLE_RE.search(str(raw.get("title") or ""))
        number = int(m.group(1)) if m else index + 1
    return Episode(
        number=number,
        title=str(raw.get("title") or f"Episode {number}"),
        mal_id=raw.get("mal_id") if isinstance(raw.get("mal_id"), int) else None,
        aired=raw.get("aired") or None,
        filler=bool(raw.get("filler")),
        recap=bool(raw.get("recap")),
    )


def synthetic_episodes(count: int) -> list[Episode]:
    return [Episode(number=i, title=f"Episode {i}") for i in range(1, int(count) + 1)]


class JikanClient:
    """Async HTTP client for the Jikan v4 API.

    Sessions are created lazily (double-checked under ``_lock``) and must be
    released with ``close()``.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_s: float | None = None,
        min_interval_s: float | None = None,
    ) -> None:
        self._base_url = (base_url or JIKAN_BASE_URL or "").rstrip("/")
        self._timeout_s = float(timeout_s or JIKAN_TIMEOUT_S or 10.0)
        self._min_interval_s = max(
            0.0, float(JIKAN_MIN_INTERVAL_S if min_interval_s is None else min_interval_s) or 0.0
        )
        self._session: aiohttp.ClientSession | None = None
        self._lock = asyncio.Lock()
        self._throttle_lock = asyncio.Lock()
        self._last_request_at: float | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._session.closed:
            return self._session

        async with self._lock:
            if self._session is not None and not self._session.closed:
                return self._session

            timeout = aiohttp.ClientTimeout(total=self._timeout_s)
            self._session = aiohttp.ClientSession(timeout=timeout)
            return self._session

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        session = await self._get_session()
        url = f"{self._base_url}{path}"
        async with self._throttle_lock:
            if self._last_request_at is not None:
                wait = self._min_interval_s - (time.monotonic() - self._last_request_at)
                if wait > 0:
                    await asyncio.sleep(wait)
            try:
                logger.debug("Jikan GET url=%s params=%s", url, params)
                async with session.get(url, params=params, headers={"accept": "application/json"}) as resp:
                    if resp.status == 404:
                        raise NotFoundError("Anime not found")
                    if resp.status >= 400:
                        body = await resp.text()
                        logger.warning("Jikan request failed (%s) url=%s: %s", resp.status, url, body[:200])
                        raise NetworkError(f"Jikan request failed: HTTP {resp.status}")
                    data = await resp.json(content_type=None)
            except asyncio.TimeoutError as exc:
                logger.warning("Jikan request timeout after %ss url=%s", self._timeout_s, url)
                raise NetworkError("Jikan request timed out") from exc
            except aiohttp.ClientError as exc:
                logger.warning("Jikan request failed url=%s: %s", url, exc)
                raise NetworkError("Failed to reach Jikan") from exc
            finally:
                self._last_request_at = time.monotonic()
        return data if isinstance(data, dict) else {}

    async def _list(self, path: str, params: dict[str, Any] | None = None) -> list[WatchItem]:
        data = await self._get_json(path, params)
        rows = data.get("data") or []
        if not isinstance(rows, list):
            return []
        items = [map_jikan_item(r) for r in rows]
        return [i for i in items if i is not None]

    async def search(self, query: str) -> list[WatchItem]:
        q = (query or "").strip()
        if not q:
            return []
        return await self._list("/anime", {"q": q})

    async def top(self) -> list[WatchItem]:
        return await self._list("/top/anime")

    async def season_now(self) -> list[WatchItem]:
        return await self._list("/seasons/now")

    async def season_upcoming(self) -> list[WatchItem]:
        return await self._list("/seasons/upcoming")

    async def anime_detail(self, anime_id: Any) -> AnimeDetail:
        data = await self._get_json(f"/anime/{anime_id}")
        raw = data.get("data")
        item = map_jikan_item(raw) if isinstance(raw, dict) else None
        if item is None:
            raise NotFoundError("Anime not found")
        score = raw.get("score")
        return AnimeDetail(
            item=item,
            synopsis=str(raw.get("synopsis") or "No synopsis available."),
            episodes=_positive_int(raw.get("episodes")),
            status=raw.get("status") or None,
            score=float(score) if isinstance(score, (int, float)) and not isinstance(score, bool) else None,
            rank=_positive_int(raw.get("rank")),
            genres=_names(raw.get("genres")),
            studios=_names(raw.get("studios")),
        )

    async def episodes(self, anime_id: Any, *, episode_count: Optional[int] = None) -> list[Episode]:
        """First page of episodes; falls back to ``1..episode_count`` when Jikan has none."""
        try:
            data = await self._get_json(f"/anime/{anime_id}/episodes")
        except (NetworkError, NotFoundError) as exc:
            if episode_count:
                logger.info("episode list unavailable for anime=%s (%s); using count", anime_id, exc.message)
                return synthetic_episodes(episode_count)
            raise
        rows = [r for r in (data.get("data") or []) if isinstance(r, dict)]
        if _get(data, "pagination", "has_next_page"):
            logger.debug("episodes for anime=%s are paginated; using first page", anime_id)
        if rows:
            return [_map_episode(r, idx) for idx, r in enumerate(rows)]
        if episode_count:
            return synthetic_episodes(episode_count)
        return []

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
