"""
Music post SQL (raw).

Reads always LEFT JOIN the author so a post whose user row is gone still
comes back (with `author_id` NULL).
"""

from __future__ import annotations

from core.db import Database, is_int4
from core.entities import MusicPost

_POST_SELECT = """
SELECT
  p.id,
  p.cover_image_url,
  p.audio_url,
  p.caption,
  p.created_at,
  p.user_id,
  u.id AS author_id,
  u.username AS author_username,
  u.avatar_url AS author_avatar_url
FROM music_posts p
LEFT JOIN users u ON u.id = p.user_id
"""


async def insert_post(
    db: Database,
    *,
    user_id: int,
    cover_image_url: str,
    audio_url: str,
    caption: str | None,
) -> MusicPost:
    row = await db.fetch_one(
        """
        WITH inserted AS (
          INSERT INTO music_posts (user_id, cover_image_url, audio_url, caption)
          VALUES ($1, $2, $3, $4)
          RETURNING id, cover_image_url, audio_url, caption, created_at, user_id
        )
        SELECT
          i.id,
          i.cover_image_url,
          i.audio_url,
          i.caption,
          i.created_at,
          i.user_id,
          u.id AS author_id,
          u.username AS author_username,
          u.avatar_url AS author_avatar_url
        FROM inserted i
        LEFT JOIN users u ON u.id = i.user_id
        """,
        user_id,
        cover_image_url,
        audio_url,
        caption,
    )
    if row is None:
        raise RuntimeError("Failed to insert music post.")
    return MusicPost.from_row(row)


async def get_post(db: Database, post_id: int) -> MusicPost | None:
    if not is_int4(post_id):
        return None
    row = await db.fetch_one(
        _POST_SELECT + "WHERE p.id = $1",
        post_id,
    )
    return MusicPost.from_row(row) if row is not None else None


async def post_exists(db: Database, post_id: int) -> bool:
    if not is_int4(post_id):
        return False
    row = await db.fetch_one(
        """
        SELECT 1 AS ok
        FROM music_posts
        WHERE id = $1
        LIMIT 1
        """,
        post_id,
    )
    return row is not None


async def list_feed(db: Database, *, limit: int = 10, offset: int = 0) -> list[MusicPost]:
    rows = await db.fetch_all(
        _POST_SELECT
        + """
        ORDER BY p.created_at DESC, p.id DESC
        LIMIT $1
        OFFSET $2
        """,
        limit,
        offset,
    )
    return [MusicPost.from_row(r) for r in rows]


async def search_posts(
    db: Database,
    search_term: str,
    *,
    limit: int = 10,
    offset: int = 0,
) -> list[MusicPost]:
    """
    Full-text match on the caption. `plainto_tsquery` ANDs every word of
    `search_term`; the expression matches the GIN index from `core.schema`.
    """
    rows = await db.fetch_all(
        _POST_SELECT
        + """
        WHERE to_tsvector('english', p.caption) @@ plainto_tsquery('english', $1)
        ORDER BY p.created_at DESC, p.id DESC
        LIMIT $2
        OFFSET $3
        """,
        search_term,
        limit,
        offset,
    )
    return [MusicPost.from_row(r) for r in rows]


async def list_posts_by_author(db: Database, user_id: int) -> list[MusicPost]:
    if not is_int4(user_id):
        return []
    rows = await db.fetch_all(
        _POST_SELECT
        + """
        WHERE p.user_id = $1
        ORDER BY p.created_at DESC, p.id DESC
        """,
        user_id,
    )
    return [MusicPost.from_row(r) for r in rows]
