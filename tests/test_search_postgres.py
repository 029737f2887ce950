"""
Caption search against a real Postgres.

Opt-in: set TEST_DATABASE_URL to a database where the tests may create and
drop a throwaway schema.
"""

import os
import uuid

import pytest

from auth import repository as auth_repository
from core.db import Database
from core.schema import create_schema
from posts import repository as post_repository
from posts.service import build_search_term

DSN = os.getenv("TEST_DATABASE_URL", "")

pytestmark = pytest.mark.skipif(not DSN, reason="TEST_DATABASE_URL is not set")


@pytest.mark.asyncio
async def test_search_ands_words_and_stems_them():
    schema = f"musicfeed_test_{uuid.uuid4().hex[:8]}"
    db = Database(DSN, schema=schema, min_size=1, max_size=2)
    await db.open()
    try:
        await create_schema(db, schema)
        user = await auth_repository.create_user(
            db, username="mira", email="mira@example.org", password_hash="x"
        )
        for caption in ("late night jazz piano", "jazz guitar loop", "piano ballad", None):
            await post_repository.insert_post(
                db,
                user_id=user.id,
                cover_image_url="https://cdn.test/c.png",
                audio_url="https://cdn.test/a.mp3",
                caption=caption,
            )

        both = await post_repository.search_posts(db, build_search_term("  Jazz   PIANO "))
        stemmed = await post_repository.search_posts(db, build_search_term("pianos"))
        missing = await post_repository.search_posts(db, build_search_term("jazz violin"))

        assert [p.caption for p in both] == ["late night jazz piano"]
        assert [p.caption for p in stemmed] == ["piano ballad", "late night jazz piano"]
        assert missing == []
        assert both[0].author.username == "mira"
    finally:
        async with db.transaction() as conn:
            await conn.execute(f"DROP SCHEMA IF EXISTS {schema} CASCADE")
        await db.close()
