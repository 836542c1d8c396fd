from __future__ import annotations

from fastapi import APIRouter

import server.api.rest.v1.admin as admin_v1
import server.api.rest.v1.auth as auth_v1
import server.api.rest.v1.root as root_v1
import server.api.rest.v1.watchlist as watchlist_v1

# Canonical API router aggregator. Paths are unprefixed so existing web
# clients (`/signup`, `/watchlist/{id}`) keep working.
api_router = APIRouter()
api_router.include_router(root_v1.router)
api_router.include_router(auth_v1.router)
api_router.include_router(watchlist_v1.router)
api_router.include_router(admin_v1.router)

__all__ = ["api_router"]
