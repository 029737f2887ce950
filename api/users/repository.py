"""
User lookups (raw SQL).
"""

from __future__ import annotations

from core.db import Database, is_int4
from core.entities import User


async def get_user_by_id(db: Database, user_id: int) -> User | None:
    if not is_int4(user_id):
        return None
    row = await db.fetch_one(
        """
        SELECT id, username, email, password_hash, bio, avatar_url, created_at
        FROM users
        WHERE id = $1
        """,
        user_id,
    )
    return User.from_row(row) if row is not None else None
