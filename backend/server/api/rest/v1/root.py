from __future__ import annotations

from typing import Dict

from fastapi import APIRouter

router = APIRouter(tags=["root-v1"])


@router.get("/")
async def root() -> Dict[str, str]:
    return {"message": "Welcome to the Rewatch Backend!"}
