"""
Base model for API payloads.

JSON uses camelCase keys (`coverImageUrl`), Python code uses snake_case.
Unknown request fields are rejected.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class MessageResponse(ApiModel):
    message: str
