"""
Music post business logic.

Post creation is three fallible steps: upload the cover image, upload the
audio, insert the row. They are not atomic, so when a later step fails the
objects uploaded for the request are deleted again before the 500 goes out.
"""

from __future__ import annotations

import logging

from auth.security import Identity
from core import settings
from core.db import Database
from core.entities import MusicPost
from core.errors import NotFoundError, UnexpectedError, ValidationError
from core.storage import ObjectStorage, StoredObject, decode_base64_payload

from . import repository, schemas

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB
UNKNOWN_USERNAME = "unknown"

logger = logging.getLogger(__name__)


def max_upload_bytes() -> int:
    value = settings.env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    return value if value > 0 else DEFAULT_MAX_UPLOAD_BYTES


def to_post_response(post: MusicPost) -> schemas.PostResponse:
    author = post.author
    return schemas.PostResponse(
        id=post.id,
        cover_image_url=post.cover_image_url,
        music_url=post.audio_url,
        caption=post.caption,
        created_at=post.created_at,
        user_id=post.user_id,
        username=(author.username if author is not None else None) or UNKNOWN_USERNAME,
        avatar_url=author.avatar_url if author is not None else None,
    )


def build_search_term(query: str) -> str:
    """
    "  jazz   piano " -> "jazz & piano"
    """
    return " & ".join(query.split())


def _decode(payload: str, *, field: str) -> bytes:
    try:
        data = decode_base64_payload(payload)
    except ValueError as exc:
        raise ValidationError(f"{field} must be valid base64.") from exc

    limit = max_upload_bytes()
    if len(data) > limit:
        raise ValidationError(f"{field} is too large. Max is {limit} bytes.")
    return data


def _validate_create_request(payload: schemas.CreatePostRequest) -> tuple[bytes, str, bytes, str]:
    """
    Return (image bytes, image type, music bytes, music type) or raise 400.
    """
    image_b64 = (payload.image_base64 or "").strip()
    image_type = (payload.image_file_type or "").strip()
    if not image_b64 or not image_type.startswith("image/"):
        raise ValidationError("imageBase64 and a valid imageFileType are required.")

    music_b64 = (payload.music_base64 or "").strip()
    music_type = (payload.music_file_type or "").strip()
    if music_b64 and music_type and not music_type.startswith("audio/"):
        raise ValidationError("musicFileType must be a valid audio type.")
    if not music_b64 or not music_type:
        raise ValidationError("musicBase64 and musicFileType are both required.")

    image = _decode(image_b64, field="imageBase64")
    music = _decode(music_b64, field="musicBase64")
    return image, image_type, music, music_type


async def _discard_uploads(storage: ObjectStorage, uploaded: list[StoredObject]) -> None:
    for stored in uploaded:
        try:
            await storage.delete(stored.key)
        except Exception:
            # Leave the orphan behind; the original failure is what the client sees.
            logger.exception("Failed to delete orphaned object %s", stored.key)
        else:
            logger.info("Deleted orphaned object %s", stored.key)


async def create_post(
    db: Database,
    storage: ObjectStorage,
    *,
    identity: Identity,
    payload: schemas.CreatePostRequest,
) -> schemas.PostResponse:
    image, image_type, music, music_type = _validate_create_request(payload)

    uploaded: list[StoredObject] = []
    try:
        cover = await storage.upload(image, image_type)
        uploaded.append(cover)
        audio = await storage.upload(music, music_type)
        uploaded.append(audio)

        post = await repository.insert_post(
            db,
            user_id=identity.user_id,
            cover_image_url=cover.url,
            audio_url=audio.url,
            caption=payload.caption or None,
        )
    except Exception as exc:
        logger.exception("Post creation failed for user %s", identity.user_id)
        await _discard_uploads(storage, uploaded)
        raise UnexpectedError(str(exc) or "Failed to create post.") from exc

    logger.info("User %s created music post %s", identity.user_id, post.id)
    return to_post_response(post)


async def get_feed_posts(db: Database, *, limit: int = 10, offset: int = 0) -> list[schemas.PostResponse]:
    posts = await repository.list_feed(db, limit=limit, offset=offset)
    return [to_post_response(p) for p in posts]


async def search_posts(
    db: Database,
    query: str,
    *,
    limit: int = 10,
    offset: int = 0,
) -> list[schemas.PostResponse]:
    if not (query or "").strip():
        raise ValidationError("Search query cannot be empty")

    posts = await repository.search_posts(db, build_search_term(query), limit=limit, offset=offset)
    return [to_post_response(p) for p in posts if p.author is not None and p.caption is not None]


async def get_post_by_id(db: Database, post_id: int) -> schemas.PostResponse:
    post = await repository.get_post(db, post_id)
    if post is None:
        raise NotFoundError("Post not found")
    return to_post_response(post)
