"""Auth routes: signup, login, logout, session."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from servicefinder.core.auth import (
    SESSION_TOKEN_HEADER,
    get_current_user,
    get_session,
    login_user,
    logout_user,
    register_user,
)
from servicefinder.dependencies import get_db
from servicefinder.models.user import User
from servicefinder.schemas.user import LoginRequest, LoginResponse, SignupPayload, UserRead
from servicefinder.services import profile_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=UserRead, status_code=201)
async def signup(
    body: Annotated[SignupPayload, Body(discriminator="role")],
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    ip = request.client.host if request.client else None
    user = await register_user(db, body, ip_address=ip)
    return user


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    ip = request.client.host if request.client else None
    user, session = await login_user(db, email=body.email, password=body.password, ip_address=ip)
    found = await profile_service.get_profile(db, user.id)
    role = found[0].role.value if found else ""
    return LoginResponse(token=session.token, user_id=user.id, role=role)


@router.post("/logout", status_code=204)
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    token = request.headers.get(SESSION_TOKEN_HEADER)
    ip = request.client.host if request.client else None
    await logout_user(db, token=token, ip_address=ip)


@router.get("/session")
async def current_session(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    session = await get_session(db, request.headers.get(SESSION_TOKEN_HEADER))
    return {"session": session.model_dump(mode="json") if session else None}
