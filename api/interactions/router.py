"""
Like/comment API endpoints.
"""

from __future__ import annotations

from fastapi import Depends, Query, status

from auth import dependencies as auth_dependencies
from auth.security import Identity
from core.db import Database, get_db
from core.routing import Route, build_router
from core.schemas import MessageResponse

from . import schemas, service


async def like_post(
    post_id: int,
    identity: Identity = Depends(auth_dependencies.get_current_identity),
    db: Database = Depends(get_db),
) -> dict:
    return await service.like_post(db, identity=identity, post_id=post_id)


async def unlike_post(
    post_id: int,
    identity: Identity = Depends(auth_dependencies.get_current_identity),
    db: Database = Depends(get_db),
) -> dict:
    return await service.unlike_post(db, identity=identity, post_id=post_id)


async def create_comment(
    post_id: int,
    payload: schemas.CreateCommentRequest,
    identity: Identity = Depends(auth_dependencies.get_current_identity),
    db: Database = Depends(get_db),
) -> schemas.CommentResponse:
    return await service.create_comment(db, identity=identity, post_id=post_id, text=payload.text)


async def get_comments(
    post_id: int,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_db),
) -> list[schemas.CommentResponse]:
    return await service.get_comments(db, post_id, limit=limit, offset=offset)


ROUTES = (
    Route("POST", "/music-posts/{post_id}/like", like_post, status.HTTP_201_CREATED, response_model=MessageResponse),
    Route("DELETE", "/music-posts/{post_id}/unlike", unlike_post, response_model=MessageResponse),
    Route(
        "POST",
        "/music-posts/{post_id}/comments",
        create_comment,
        status.HTTP_201_CREATED,
        response_model=schemas.CommentResponse,
    ),
    Route("GET", "/music-posts/{post_id}/comments", get_comments, response_model=list[schemas.CommentResponse]),
)

router = build_router(ROUTES, tags=("interactions",))
