"""
User profile business logic.

`get_user_likes` returns the posts the target user *authored*, each flagged
with whether the caller liked it, not the posts the target user liked.
"""

from __future__ import annotations

from auth.security import Identity
from core.db import Database
from core.entities import User
from core.errors import NotFoundError
from interactions import repository as interaction_repository
from posts import repository as post_repository
from posts.service import to_post_response

from . import repository, schemas


def to_profile_response(user: User) -> schemas.UserProfileResponse:
    return schemas.UserProfileResponse(
        id=user.id,
        username=user.username,
        bio=user.bio,
        avatar_url=user.avatar_url,
        created_at=user.created_at,
    )


async def get_user_profile(db: Database, user_id: int) -> schemas.UserProfileResponse:
    user = await repository.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return to_profile_response(user)


async def get_user_likes(
    db: Database,
    *,
    identity: Identity | None,
    user_id: int,
) -> list[schemas.UserPostResponse]:
    user = await repository.get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    posts = await post_repository.list_posts_by_author(db, user_id)
    if not posts:
        raise NotFoundError("No liked posts found for this user.")

    liked: set[int] = set()
    if identity is not None:
        liked = await interaction_repository.liked_post_ids(
            db,
            user_id=identity.user_id,
            post_ids=[p.id for p in posts],
        )

    return [
        schemas.UserPostResponse(
            **to_post_response(post).model_dump(),
            has_liked=post.id in liked,
        )
        for post in posts
    ]
