"""
Create the database schema and seed development data.

Usage (from `api/`):

    python init_db.py                       # schema + admin/guest users
    python init_db.py --seed-dir ./seed     # ...plus posts from seed/data.json

Seed directory layout: `data.json` is a JSON list of captions; entry `i`
uses cover image `i.jpg|i.jpeg|i.png` and audio `i.mp3`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from auth import repository as auth_repository
from auth import security
from core import settings
from core.db import Database
from core.entities import User
from core.logging import setup_logging
from core.schema import create_schema
from core.storage import ObjectStorage
from posts import repository as post_repository

IMAGE_EXTENSIONS = {".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png"}

logger = logging.getLogger("init_db")


async def ensure_user(db: Database, *, username: str, email: str, password: str) -> User:
    existing = await auth_repository.get_user_by_username(db, username)
    if existing is not None:
        logger.info("User %s already exists (id=%s)", username, existing.id)
        return existing
    user = await auth_repository.create_user(
        db,
        username=username,
        email=email,
        password_hash=security.hash_password(password),
    )
    logger.info("Created user %s (id=%s)", username, user.id)
    return user


def _find_image(seed_dir: Path, index: int) -> tuple[Path, str] | None:
    for ext, content_type in IMAGE_EXTENSIONS.items():
        path = seed_dir / f"{index}{ext}"
        if path.exists():
            return path, content_type
    return None


async def seed_posts(db: Database, storage: ObjectStorage, *, seed_dir: Path, owner: User) -> int:
    captions = json.loads((seed_dir / "data.json").read_text(encoding="utf-8"))
    if not isinstance(captions, list):
        raise ValueError("data.json must contain a JSON list of captions.")

    created = 0
    for index, caption in enumerate(captions):
        image = _find_image(seed_dir, index)
        if image is None:
            logger.warning("No image found for music post %s, skipping", index + 1)
            continue
        audio_path = seed_dir / f"{index}.mp3"
        if not audio_path.exists():
            logger.warning("No audio found for music post %s, skipping", index + 1)
            continue

        image_path, image_type = image
        cover = await storage.upload(image_path.read_bytes(), image_type)
        audio = await storage.upload(audio_path.read_bytes(), "audio/mpeg")
        await post_repository.insert_post(
            db,
            user_id=owner.id,
            cover_image_url=cover.url,
            audio_url=audio.url,
            caption=str(caption or "") or None,
        )
        created += 1
        logger.info("Music post %s initialized: %s", index + 1, caption)
    return created


async def initialize_database(*, seed_dir: Path | None = None) -> None:
    db = Database.from_env()
    await db.open()
    try:
        logger.info("Creating schema %s", db.schema)
        await create_schema(db, db.schema)

        admin = await ensure_user(
            db,
            username=settings.env_str("ADMIN_USERNAME", "admin"),
            email="admin@admin.org",
            password=settings.env_str("ADMIN_PASSWORD", "admin123"),
        )
        await ensure_user(
            db,
            username=settings.env_str("GUEST_USERNAME", "guest"),
            email="guest@guest.org",
            password=settings.env_str("GUEST_PASSWORD", "guest123"),
        )

        if seed_dir is not None:
            count = await seed_posts(db, ObjectStorage.from_env(), seed_dir=seed_dir, owner=admin)
            logger.info("Seeded %s music posts", count)
    finally:
        await db.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the schema and seed development data.")
    parser.add_argument("--seed-dir", type=Path, default=None, help="directory with data.json, images and mp3s")
    args = parser.parse_args(argv)

    setup_logging()
    try:
        asyncio.run(initialize_database(seed_dir=args.seed_dir))
    except Exception:
        logger.exception("Error initializing database")
        return 1
    logger.info("Database initialized successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
