"""Client-side watchlist synchronization.

The synchronizer owns the cached watchlist for one user session and keeps it
consistent with the backend:

- mutations are published locally first (optimistic), then written with a
  full replace-all call;
- on success the cache adopts the backend's canonical list (the backend
  de-duplicates, the client never does);
- on failure the optimistic candidate is discarded and the list is reloaded
  from the backend, with the failure recorded as ``state.error``.

Only one operation may be in flight; an add/remove issued while a write or a
load is pending fails fast with ``BusyError`` instead of building on a stale
base list. When the last load failed the cache is marked ``stale`` and the
next add/remove reloads it first, refusing to write if that reload fails
too. Everything runs on a
single event loop, so the in-flight check and the transition to ``SAVING``
are atomic as long as no ``await`` sits between them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence

from application.ports.watchlist_api_port import WatchlistApiPort
from domain.errors import (
    BusyError,
    InternalError,
    RewatchError,
    UnauthenticatedError,
)
from domain.watchlist import SyncPhase, SyncResult, SyncState, WatchItem, normalize_id

logger = logging.getLogger(__name__)

Listener = Callable[[SyncState], None]


class _SessionToken:
    """Identity token for one user session; results from older tokens are dropped."""

    __slots__ = ("user_id",)

    def __init__(self, user_id: Optional[str]) -> None:
        self.user_id = user_id


class WatchlistSynchronizer:
    def __init__(self, *, api: WatchlistApiPort) -> None:
        self._api = api
        self._state = SyncState()
        self._token = _SessionToken(None)
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def watchlist(self) -> tuple[WatchItem, ...]:
        return self._state.items

    def is_in_watchlist(self, item_id: Any) -> bool:
        return self._state.contains(item_id)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, state: SyncState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("watchlist listener failed")

    # ----- session lifecycle -----

    async def start_session(self, user_id: Optional[str]) -> SyncResult:
        """Bind to ``user_id`` (login / restored session) and load its list."""
        self._token = _SessionToken(user_id)
        if not user_id:
            self._publish(SyncState())
            return SyncResult(success=False, error=UnauthenticatedError())
        self._publish(SyncState(user_id=str(user_id), phase=SyncPhase.LOADING))
        return await self._load(self._token)

    def end_session(self) -> None:
        """Drop cached state (logout). In-flight results for the old session are discarded."""
        self._token = _SessionToken(None)
        self._publish(SyncState())

    async def refresh(self) -> SyncResult:
        state = self._state
        if not state.user_id:
            return SyncResult(success=False, error=UnauthenticatedError())
        if state.phase is not SyncPhase.IDLE:
            return SyncResult(success=False, watchlist=state.items, error=BusyError())
        self._publish(state.evolve(phase=SyncPhase.LOADING))
        return await self._load(self._token)

    async def _load(self, token: _SessionToken) -> SyncResult:
        items, err = await self._fetch(token.user_id)
        if token is not self._token or self._state.phase is not SyncPhase.LOADING:
            return SyncResult(success=err is None, watchlist=tuple(items), error=err)
        self._publish(
            self._state.evolve(
                items=items,
                phase=SyncPhase.IDLE,
                error=err.message if err is not None else None,
                stale=err is not None,
            )
        )
        return SyncResult(success=err is None, watchlist=self._state.items, error=err)

    async def _fetch(self, user_id: Optional[str]) -> tuple[List[WatchItem], Optional[RewatchError]]:
        try:
            return list(await self._api.fetch_watchlist(str(user_id))), None
        except RewatchError as exc:
            logger.warning("watchlist load failed for user=%s: %s", user_id, exc.message)
            return [], exc
        except Exception:
            logger.exception("watchlist load failed for user=%s", user_id)
            return [], InternalError("Failed to load watchlist.")

    # ----- mutations -----

    def _guard(self) -> Optional[SyncResult]:
        state = self._state
        if not state.user_id:
            return SyncResult(success=False, error=UnauthenticatedError())
        if state.phase is not SyncPhase.IDLE:
            return SyncResult(success=False, watchlist=state.items, error=BusyError())
        return None

    async def _prepare_write(self) -> Optional[SyncResult]:
        """Guard a mutation; a stale cache is reloaded before it becomes the write base."""
        rejected = self._guard()
        if rejected is not None or not self._state.stale:
            return rejected
        logger.info("reloading stale watchlist before write (user=%s)", self._state.user_id)
        reloaded = await self.refresh()
        if not reloaded.success:
            return reloaded
        return self._guard()

    async def add(self, item: WatchItem) -> SyncResult:
        rejected = await self._prepare_write()
        if rejected is not None:
            return rejected
        state = self._state
        if state.contains(item.id):
            return SyncResult(success=True, watchlist=state.items)
        return await self._write(state.items + (item,))

    async def remove(self, item_id: Any) -> SyncResult:
        rejected = await self._prepare_write()
        if rejected is not None:
            return rejected
        key = normalize_id(item_id)
        # Items without a usable id cannot be addressed, so a None key removes nothing.
        candidate = tuple(i for i in self._state.items if key is None or i.key != key)
        return await self._write(candidate)

    async def _write(self, candidate: Sequence[WatchItem]) -> SyncResult:
        token = self._token
        user_id = str(self._state.user_id)
        self._publish(self._state.evolve(items=candidate, phase=SyncPhase.SAVING, error=None))

        try:
            canonical = await self._api.save_watchlist(user_id, list(candidate))
        except RewatchError as exc:
            return await self._rollback(token, exc)
        except Exception:
            logger.exception("watchlist save failed for user=%s", user_id)
            return await self._rollback(token, InternalError("Failed to update watchlist."))

        if token is not self._token:
            logger.info("discarding watchlist save result for a closed session (user=%s)", user_id)
            return SyncResult(success=True, watchlist=tuple(canonical))
        self._publish(self._state.evolve(items=canonical, phase=SyncPhase.IDLE, error=None, stale=False))
        return SyncResult(success=True, watchlist=self._state.items)

    async def _rollback(self, token: _SessionToken, exc: RewatchError) -> SyncResult:
        logger.warning(
            "watchlist save failed for user=%s (%s): %s; reloading",
            token.user_id,
            exc.kind.value,
            exc.message,
        )
        items, reload_err = await self._fetch(token.user_id)
        if token is not self._token:
            return SyncResult(success=False, watchlist=tuple(items), error=exc)
        self._publish(
            self._state.evolve(
                items=items,
                phase=SyncPhase.IDLE,
                error=exc.message,
                stale=reload_err is not None,
            )
        )
        return SyncResult(success=False, watchlist=self._state.items, error=exc)
