"""Development-only inspection routes.

They expose every user's email and watchlist without authentication, so they
answer 404 unless ``ADMIN_ROUTES_ENABLE`` is set.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from application.ports.user_store_port import UserStorePort
from config.settings import ADMIN_ROUTES_ENABLE
from domain.errors import NotFoundError
from domain.users import UserRecord
from domain.watchlist import items_to_payload
from server.api.rest.dependencies import get_user_store
from server.models.schemas import AdminStatsResponse, AdminUsersResponse, AdminUserSummary


def require_admin_enabled() -> None:
    if not ADMIN_ROUTES_ENABLE:
        raise HTTPException(status_code=404, detail="Not Found")


router = APIRouter(prefix="/admin", tags=["admin-v1"], dependencies=[Depends(require_admin_enabled)])


def _summary(record: UserRecord) -> AdminUserSummary:
    return AdminUserSummary(
        id=record.id,
        email=record.email,
        createdAt=record.created_at.isoformat() if record.created_at else None,
        watchlistCount=len(record.watchlist),
    )


@router.get("/users", response_model=AdminUsersResponse)
async def list_users(store: UserStorePort = Depends(get_user_store)) -> AdminUsersResponse:
    records = await store.list_users()
    return AdminUsersResponse(count=len(records), users=[_summary(r) for r in records])


@router.get("/users/{user_id}")
async def get_user(user_id: str, store: UserStorePort = Depends(get_user_store)) -> Dict[str, Any]:
    record = await store.get_by_id(user_id=user_id)
    if record is None:
        raise NotFoundError()
    return {**_summary(record).model_dump(), "watchlist": items_to_payload(record.watchlist)}


@router.get("/stats", response_model=AdminStatsResponse)
async def stats(store: UserStorePort = Depends(get_user_store)) -> AdminStatsResponse:
    return AdminStatsResponse(**(await store.stats()))
