"""
Like/comment API schemas.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from core.schemas import ApiModel


class CreateCommentRequest(ApiModel):
    text: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(ApiModel):
    id: int
    text: str
    user_id: int
    post_id: int
    username: str
    avatar_url: str | None
    created_at: datetime
