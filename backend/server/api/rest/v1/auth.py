from __future__ import annotations

from fastapi import APIRouter, Depends

from application.auth.auth_service import AuthService
from server.api.rest.dependencies import get_auth_service
from server.models.schemas import AuthResponse, CredentialsRequest, UserOut

router = APIRouter(tags=["auth-v1"])


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    req: CredentialsRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    user = await service.signup(email=req.email or "", password=req.password or "")
    return AuthResponse(success=True, user=UserOut(id=user.id, email=user.email))


@router.post("/login", response_model=AuthResponse)
async def login(
    req: CredentialsRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    user = await service.login(email=req.email or "", password=req.password or "")
    return AuthResponse(success=True, user=UserOut(id=user.id, email=user.email))
