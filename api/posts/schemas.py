"""
Music post API schemas.
"""

from __future__ import annotations

from datetime import datetime

from core.schemas import ApiModel


class CreatePostRequest(ApiModel):
    # All optional at the shape level; the service answers 400 with a
    # specific message for each missing or mistyped piece.
    image_base64: str | None = None
    image_file_type: str | None = None
    music_base64: str | None = None
    music_file_type: str | None = None
    caption: str | None = None


class PostResponse(ApiModel):
    id: int
    cover_image_url: str
    music_url: str
    caption: str | None
    created_at: datetime
    user_id: int
    username: str
    avatar_url: str | None
