"""
User API schemas.
"""

from __future__ import annotations

from datetime import datetime

from core.schemas import ApiModel
from posts.schemas import PostResponse


class UserProfileResponse(ApiModel):
    id: int
    username: str
    bio: str | None
    avatar_url: str | None
    created_at: datetime


class UserPostResponse(PostResponse):
    has_liked: bool
