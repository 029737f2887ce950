"""
Persisted records as plain data.

These carry no persistence behavior; repositories build them from rows
returned by `core.db.Database`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class User:
    id: int
    username: str
    email: str
    password_hash: str
    bio: str | None
    avatar_url: str | None
    created_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "User":
        return cls(
            id=int(row["id"]),
            username=str(row["username"]),
            email=str(row["email"]),
            password_hash=str(row.get("password_hash") or ""),
            bio=row.get("bio"),
            avatar_url=row.get("avatar_url"),
            created_at=row["created_at"],
        )


@dataclass(frozen=True)
class Author:
    """
    Author columns joined onto a post or comment row.
    """

    id: int
    username: str
    avatar_url: str | None

    @classmethod
    def from_joined_row(cls, row: dict[str, Any]) -> "Author | None":
        if row.get("author_id") is None:
            return None
        return cls(
            id=int(row["author_id"]),
            username=str(row["author_username"]),
            avatar_url=row.get("author_avatar_url"),
        )


@dataclass(frozen=True)
class MusicPost:
    id: int
    cover_image_url: str
    audio_url: str
    caption: str | None
    created_at: datetime
    user_id: int
    # None when the author row is missing.
    author: Author | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "MusicPost":
        return cls(
            id=int(row["id"]),
            cover_image_url=str(row["cover_image_url"]),
            audio_url=str(row["audio_url"]),
            caption=row.get("caption"),
            created_at=row["created_at"],
            user_id=int(row["user_id"]),
            author=Author.from_joined_row(row),
        )


@dataclass(frozen=True)
class Comment:
    id: int
    content: str | None
    created_at: datetime
    user_id: int
    post_id: int
    author: Author | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Comment":
        return cls(
            id=int(row["id"]),
            content=row.get("content"),
            created_at=row["created_at"],
            user_id=int(row["user_id"]),
            post_id=int(row["post_id"]),
            author=Author.from_joined_row(row),
        )


@dataclass(frozen=True)
class Like:
    id: int
    created_at: datetime
    user_id: int
    post_id: int

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Like":
        return cls(
            id=int(row["id"]),
            created_at=row["created_at"],
            user_id=int(row["user_id"]),
            post_id=int(row["post_id"]),
        )


@dataclass(frozen=True)
class Follow:
    id: int
    follower_id: int
    followed_id: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Follow":
        return cls(
            id=int(row["id"]),
            follower_id=int(row["follower_id"]),
            followed_id=int(row["followed_id"]),
            created_at=row["created_at"],
        )
