"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import Depends, status

from core.db import Database, get_db
from core.routing import Route, build_router
from users.schemas import UserProfileResponse

from . import dependencies, schemas, service
from .security import Identity


async def register(
    payload: schemas.RegisterRequest,
    db: Database = Depends(get_db),
) -> schemas.AuthResponse:
    return await service.register(db, payload)


async def login(
    payload: schemas.LoginRequest,
    db: Database = Depends(get_db),
) -> schemas.TokenResponse:
    return await service.login(db, payload)


async def me(
    identity: Identity = Depends(dependencies.get_current_identity),
    db: Database = Depends(get_db),
) -> UserProfileResponse:
    return await service.me(db, identity)


ROUTES = (
    Route("POST", "/auth/register", register, status.HTTP_201_CREATED, response_model=schemas.AuthResponse),
    Route("POST", "/auth/login", login, response_model=schemas.TokenResponse),
    Route("GET", "/auth/me", me, response_model=UserProfileResponse),
)

router = build_router(ROUTES, tags=("auth",))
