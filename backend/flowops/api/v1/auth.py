"""
Login and session-check endpoints.
"""

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel
from typing import Optional

from ...auth.dependencies import check_credentials, is_authenticated
from ...api.dependencies import get_settings
from ...config import Settings
from ...errors import AuthError

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool
    token: str


class MeResponse(BaseModel):
    authenticated: bool


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, settings: Settings = Depends(get_settings)):
    """
    Exchange the configured credential pair for the bearer token.
    """
    token = check_credentials(settings, request.username, request.password)
    return LoginResponse(success=True, token=token)


@router.get("/me", response_model=MeResponse)
async def me(
    authorization: Optional[str] = Header(None, description="Bearer token"),
    settings: Settings = Depends(get_settings),
):
    """
    Report whether the Authorization header carries a valid token.
    """
    if not is_authenticated(settings, authorization):
        raise AuthError("Not authenticated")
    return MeResponse(authenticated=True)
