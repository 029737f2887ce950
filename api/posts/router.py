"""
Music post API endpoints.
"""

from __future__ import annotations

from fastapi import Depends, Query

from auth import dependencies as auth_dependencies
from auth.security import Identity
from core.db import Database, get_db
from core.routing import Route, build_router
from core.storage import ObjectStorage, get_storage

from . import schemas, service

MAX_PAGE_SIZE = 100


async def create_post(
    payload: schemas.CreatePostRequest,
    identity: Identity = Depends(auth_dependencies.get_current_identity),
    db: Database = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
) -> schemas.PostResponse:
    return await service.create_post(db, storage, identity=identity, payload=payload)


async def get_feed_posts(
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_db),
) -> list[schemas.PostResponse]:
    return await service.get_feed_posts(db, limit=limit, offset=offset)


async def search_posts(
    query: str = Query(..., max_length=500),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_db),
) -> list[schemas.PostResponse]:
    return await service.search_posts(db, query, limit=limit, offset=offset)


async def get_post_by_id(
    post_id: int,
    db: Database = Depends(get_db),
) -> schemas.PostResponse:
    return await service.get_post_by_id(db, post_id)


# "/music-posts/search" must stay ahead of "/music-posts/{post_id}".
ROUTES = (
    Route("POST", "/music-posts", create_post, response_model=schemas.PostResponse),
    Route("GET", "/music-posts", get_feed_posts, response_model=list[schemas.PostResponse]),
    Route("GET", "/music-posts/search", search_posts, response_model=list[schemas.PostResponse]),
    Route("GET", "/music-posts/{post_id}", get_post_by_id, response_model=schemas.PostResponse),
)

router = build_router(ROUTES, tags=("music-posts",))
