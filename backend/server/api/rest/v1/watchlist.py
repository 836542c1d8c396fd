from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from application.ports.watchlist_store_port import WatchlistStorePort
from domain.watchlist import items_to_payload
from server.api.rest.dependencies import get_watchlist_store
from server.models.schemas import WatchlistUpdateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/watchlist", tags=["watchlist-v1"])


@router.get("/{user_id}")
async def get_watchlist(
    user_id: str,
    store: WatchlistStorePort = Depends(get_watchlist_store),
) -> Dict[str, Any]:
    items = await store.read(user_id=user_id)
    return {"watchlist": items_to_payload(items)}


@router.post("/{user_id}")
async def replace_watchlist(
    user_id: str,
    req: Optional[WatchlistUpdateRequest] = None,
    store: WatchlistStorePort = Depends(get_watchlist_store),
) -> Dict[str, Any]:
    """Replace the whole list; the response carries the de-duplicated result."""
    submitted = req.watchlist if req is not None else None
    items = await store.replace_all(user_id=user_id, items=submitted)
    logger.info("watchlist replaced user=%s items=%d", user_id, len(items))
    return {"watchlist": items_to_payload(items)}
