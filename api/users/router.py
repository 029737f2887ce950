"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import Depends

from auth import dependencies as auth_dependencies
from auth.security import Identity
from core.db import Database, get_db
from core.routing import Route, build_router

from . import schemas, service


async def get_user_profile(
    user_id: int,
    db: Database = Depends(get_db),
) -> schemas.UserProfileResponse:
    return await service.get_user_profile(db, user_id)


async def get_user_likes(
    user_id: int,
    identity: Identity | None = Depends(auth_dependencies.get_optional_identity),
    db: Database = Depends(get_db),
) -> list[schemas.UserPostResponse]:
    return await service.get_user_likes(db, identity=identity, user_id=user_id)


ROUTES = (
    Route("GET", "/users/{user_id}/profile", get_user_profile, response_model=schemas.UserProfileResponse),
    Route("GET", "/users/{user_id}/likes", get_user_likes, response_model=list[schemas.UserPostResponse]),
)

router = build_router(ROUTES, tags=("users",))
