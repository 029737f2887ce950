"""
User account persistence (raw SQL).
"""

from __future__ import annotations

from core.db import Database
from core.entities import User

_USER_COLUMNS = "id, username, email, password_hash, bio, avatar_url, created_at"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(
    db: Database,
    *,
    username: str,
    email: str,
    password_hash: str,
    bio: str | None = None,
    avatar_url: str | None = None,
) -> User:
    row = await db.fetch_one(
        f"""
        INSERT INTO users (username, email, password_hash, bio, avatar_url)
        VALUES ($1, $2, $3, $4, $5)
        RETURNING {_USER_COLUMNS}
        """,
        username.strip(),
        normalize_email(email),
        password_hash,
        bio,
        avatar_url,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return User.from_row(row)


async def get_user_by_username(db: Database, username: str) -> User | None:
    row = await db.fetch_one(
        f"""
        SELECT {_USER_COLUMNS}
        FROM users
        WHERE username = $1
        """,
        (username or "").strip(),
    )
    return User.from_row(row) if row is not None else None


async def get_user_by_email(db: Database, email: str) -> User | None:
    row = await db.fetch_one(
        f"""
        SELECT {_USER_COLUMNS}
        FROM users
        WHERE lower(email) = lower($1)
        """,
        normalize_email(email),
    )
    return User.from_row(row) if row is not None else None
