"""
Like/comment business logic.
"""

from __future__ import annotations

import logging

from auth.security import Identity
from core.db import Database
from core.entities import Author, Comment, User
from core.errors import NotFoundError
from posts import repository as post_repository
from users import repository as user_repository

from . import repository, schemas

logger = logging.getLogger(__name__)


def to_comment_response(comment: Comment, *, author: User | Author | None = None) -> schemas.CommentResponse:
    author = author or comment.author
    return schemas.CommentResponse(
        id=comment.id,
        text=comment.content or "",
        user_id=comment.user_id,
        post_id=comment.post_id,
        username=(author.username if author is not None else None) or "unknown",
        avatar_url=author.avatar_url if author is not None else None,
        created_at=comment.created_at,
    )


async def _require_post(db: Database, post_id: int) -> None:
    if not await post_repository.post_exists(db, post_id):
        raise NotFoundError("Post not found.")


async def _require_caller(db: Database, identity: Identity) -> User:
    user = await user_repository.get_user_by_id(db, identity.user_id)
    if user is None:
        # A valid token for a deleted account; left for the generic 500 handler.
        raise RuntimeError("User not found")
    return user


async def like_post(db: Database, *, identity: Identity, post_id: int) -> dict:
    await _require_post(db, post_id)
    user = await _require_caller(db, identity)

    like = await repository.insert_like(db, user_id=user.id, post_id=post_id)
    logger.debug("User %s liked post %s (like %s)", user.id, post_id, like.id)
    return {"message": "Post liked successfully"}


async def unlike_post(db: Database, *, identity: Identity, post_id: int) -> dict:
    removed = await repository.delete_likes(db, user_id=identity.user_id, post_id=post_id)
    logger.debug("User %s unliked post %s (%s rows)", identity.user_id, post_id, removed)
    return {"message": "Post unliked successfully"}


async def create_comment(
    db: Database,
    *,
    identity: Identity,
    post_id: int,
    text: str,
) -> schemas.CommentResponse:
    await _require_post(db, post_id)
    user = await _require_caller(db, identity)

    comment = await repository.insert_comment(db, user_id=user.id, post_id=post_id, content=text)
    return to_comment_response(comment, author=user)


async def get_comments(
    db: Database,
    post_id: int,
    *,
    limit: int = 10,
    offset: int = 0,
) -> list[schemas.CommentResponse]:
    await _require_post(db, post_id)

    comments = await repository.list_comments(db, post_id, limit=limit, offset=offset)
    return [
        to_comment_response(c)
        for c in comments
        if c.author is not None and c.content is not None
    ]
