"""
Like/comment persistence (raw SQL).
"""

from __future__ import annotations

from core.db import Database, is_int4
from core.entities import Comment, Like


async def insert_like(db: Database, *, user_id: int, post_id: int) -> Like:
    # No existence check: repeated likes each get their own row.
    row = await db.fetch_one(
        """
        INSERT INTO likes (user_id, post_id)
        VALUES ($1, $2)
        RETURNING id, created_at, user_id, post_id
        """,
        user_id,
        post_id,
    )
    if row is None:
        raise RuntimeError("Failed to insert like.")
    return Like.from_row(row)


async def delete_likes(db: Database, *, user_id: int, post_id: int) -> int:
    """
    Delete every like by `user_id` on `post_id`. Returns the number removed.
    """
    if not is_int4(user_id, post_id):
        return 0
    status = await db.execute(
        """
        DELETE FROM likes
        WHERE post_id = $1
          AND user_id = $2
        """,
        post_id,
        user_id,
    )
    # asyncpg returns the command tag, e.g. "DELETE 2".
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (AttributeError, ValueError):
        return 0


async def liked_post_ids(db: Database, *, user_id: int, post_ids: list[int]) -> set[int]:
    if not post_ids or not is_int4(user_id):
        return set()
    rows = await db.fetch_all(
        """
        SELECT DISTINCT post_id
        FROM likes
        WHERE user_id = $1
          AND post_id = ANY($2::int[])
        """,
        user_id,
        post_ids,
    )
    return {int(r["post_id"]) for r in rows}


async def insert_comment(db: Database, *, user_id: int, post_id: int, content: str) -> Comment:
    row = await db.fetch_one(
        """
        INSERT INTO comments (user_id, post_id, content)
        VALUES ($1, $2, $3)
        RETURNING id, content, created_at, user_id, post_id
        """,
        user_id,
        post_id,
        content,
    )
    if row is None:
        raise RuntimeError("Failed to insert comment.")
    return Comment.from_row(row)


async def list_comments(
    db: Database,
    post_id: int,
    *,
    limit: int = 10,
    offset: int = 0,
) -> list[Comment]:
    if not is_int4(post_id):
        return []
    rows = await db.fetch_all(
        """
        SELECT
          c.id,
          c.content,
          c.created_at,
          c.user_id,
          c.post_id,
          u.id AS author_id,
          u.username AS author_username,
          u.avatar_url AS author_avatar_url
        FROM comments c
        LEFT JOIN users u ON u.id = c.user_id
        WHERE c.post_id = $1
        ORDER BY c.created_at DESC, c.id DESC
        LIMIT $2
        OFFSET $3
        """,
        post_id,
        limit,
        offset,
    )
    return [Comment.from_row(r) for r in rows]
