"""
Auth business logic.
"""

from __future__ import annotations

import logging

import asyncpg

from core.db import Database
from core.entities import User
from core.errors import ConflictError, NotFoundError, UnauthorizedError
from users import repository as user_repository
from users.schemas import UserProfileResponse
from users.service import to_profile_response

from . import repository, schemas, security

logger = logging.getLogger(__name__)


def _issue_token(user: User) -> str:
    return security.build_access_token(user_id=user.id, username=user.username)


async def register(db: Database, payload: schemas.RegisterRequest) -> schemas.AuthResponse:
    if await repository.get_user_by_username(db, payload.username) is not None:
        raise ConflictError("Username is already taken.")
    if await repository.get_user_by_email(db, payload.email) is not None:
        raise ConflictError("Email is already registered.")

    password_hash = security.hash_password(payload.password)
    try:
        user = await repository.create_user(
            db,
            username=payload.username,
            email=payload.email,
            password_hash=password_hash,
            bio=payload.bio,
            avatar_url=payload.avatar_url,
        )
    except asyncpg.UniqueViolationError as exc:
        # Lost a race with a concurrent registration.
        raise ConflictError("Username or email is already registered.") from exc

    logger.info("Registered user %s (id=%s)", user.username, user.id)
    return schemas.AuthResponse(user=to_profile_response(user), access_token=_issue_token(user))


async def login(db: Database, payload: schemas.LoginRequest) -> schemas.TokenResponse:
    user = await repository.get_user_by_username(db, payload.username)
    if user is None or not security.verify_password(payload.password, user.password_hash):
        raise UnauthorizedError("Invalid username or password.")
    return schemas.TokenResponse(access_token=_issue_token(user))


async def me(db: Database, identity: security.Identity) -> UserProfileResponse:
    user = await user_repository.get_user_by_id(db, identity.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return to_profile_response(user)
