"""
Shared fixtures.

Repositories are swapped for `MemoryStore`, an in-memory stand-in that keeps
the same call signatures (the `db` argument is accepted and ignored), and the
object store for `FakeStorage`. Services and routers run unchanged on top.
"""

from __future__ import annotations

import itertools
import re
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from auth import repository as auth_repository
from auth import security
from core.entities import Author, Comment, Like, MusicPost, User
from core.storage import StorageError, StoredObject, object_key
from interactions import repository as interaction_repository
from main import create_app
from posts import repository as post_repository
from users import repository as user_repository

BASE_TIME = datetime(2024, 5, 1, 12, 0, 0)


class MemoryStore:
    def __init__(self) -> None:
        self.users: dict[int, User] = {}
        self.posts: dict[int, dict] = {}
        self.comments: dict[int, dict] = {}
        self.likes: list[Like] = []
        self._ids = itertools.count(1)
        self._tick = itertools.count(1)
        self.fail_insert_post: Exception | None = None

    def _now(self) -> datetime:
        return BASE_TIME + timedelta(minutes=next(self._tick))

    # -- test helpers --------------------------------------------------

    def add_user(self, username: str, *, password_hash: str = "", avatar_url: str | None = None) -> User:
        user = User(
            id=next(self._ids),
            username=username,
            email=f"{username}@example.org",
            password_hash=password_hash,
            bio=None,
            avatar_url=avatar_url,
            created_at=self._now(),
        )
        self.users[user.id] = user
        return user

    def add_post(self, user_id: int, caption: str | None = "untitled") -> MusicPost:
        post_id = next(self._ids)
        self.posts[post_id] = {
            "id": post_id,
            "cover_image_url": f"https://cdn.test/cover-{post_id}.png",
            "audio_url": f"https://cdn.test/audio-{post_id}.mp3",
            "caption": caption,
            "created_at": self._now(),
            "user_id": user_id,
        }
        return self._post(self.posts[post_id])

    def add_comment(self, user_id: int, post_id: int, content: str | None) -> int:
        comment_id = next(self._ids)
        self.comments[comment_id] = {
            "id": comment_id,
            "content": content,
            "created_at": self._now(),
            "user_id": user_id,
            "post_id": post_id,
        }
        return comment_id

    def _author(self, user_id: int) -> Author | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        return Author(id=user.id, username=user.username, avatar_url=user.avatar_url)

    def _post(self, row: dict) -> MusicPost:
        return MusicPost(author=self._author(row["user_id"]), **row)

    def _comment(self, row: dict) -> Comment:
        return Comment(author=self._author(row["user_id"]), **row)

    @staticmethod
    def _newest_first(rows: list[dict]) -> list[dict]:
        return sorted(rows, key=lambda r: (r["created_at"], r["id"]), reverse=True)

    # -- users ---------------------------------------------------------

    async def get_user_by_id(self, db, user_id: int) -> User | None:
        return self.users.get(user_id)

    async def get_user_by_username(self, db, username: str) -> User | None:
        return next((u for u in self.users.values() if u.username == username.strip()), None)

    async def get_user_by_email(self, db, email: str) -> User | None:
        wanted = auth_repository.normalize_email(email)
        return next((u for u in self.users.values() if u.email.lower() == wanted), None)

    async def create_user(self, db, *, username, email, password_hash, bio=None, avatar_url=None) -> User:
        user = User(
            id=next(self._ids),
            username=username.strip(),
            email=auth_repository.normalize_email(email),
            password_hash=password_hash,
            bio=bio,
            avatar_url=avatar_url,
            created_at=self._now(),
        )
        self.users[user.id] = user
        return user

    # -- posts ---------------------------------------------------------

    async def insert_post(self, db, *, user_id, cover_image_url, audio_url, caption) -> MusicPost:
        if self.fail_insert_post is not None:
            raise self.fail_insert_post
        post_id = next(self._ids)
        self.posts[post_id] = {
            "id": post_id,
            "cover_image_url": cover_image_url,
            "audio_url": audio_url,
            "caption": caption,
            "created_at": self._now(),
            "user_id": user_id,
        }
        return self._post(self.posts[post_id])

    async def get_post(self, db, post_id: int) -> MusicPost | None:
        row = self.posts.get(post_id)
        return self._post(row) if row is not None else None

    async def post_exists(self, db, post_id: int) -> bool:
        return post_id in self.posts

    async def list_feed(self, db, *, limit=10, offset=0) -> list[MusicPost]:
        rows = self._newest_first(list(self.posts.values()))
        return [self._post(r) for r in rows[offset:offset + limit]]

    async def search_posts(self, db, search_term: str, *, limit=10, offset=0) -> list[MusicPost]:
        # Stands in for plainto_tsquery (every word must appear in the caption),
        # minus stemming. test_search_postgres.py runs the real query.
        words = re.findall(r"\w+", search_term.lower())
        matched = [
            r for r in self.posts.values()
            if r["caption"] is not None
            and all(w in re.findall(r"\w+", r["caption"].lower()) for w in words)
        ]
        rows = self._newest_first(matched)
        return [self._post(r) for r in rows[offset:offset + limit]]

    async def list_posts_by_author(self, db, user_id: int) -> list[MusicPost]:
        rows = self._newest_first([r for r in self.posts.values() if r["user_id"] == user_id])
        return [self._post(r) for r in rows]

    # -- likes / comments ----------------------------------------------

    async def insert_like(self, db, *, user_id, post_id) -> Like:
        like = Like(id=next(self._ids), created_at=self._now(), user_id=user_id, post_id=post_id)
        self.likes.append(like)
        return like

    async def delete_likes(self, db, *, user_id, post_id) -> int:
        before = len(self.likes)
        self.likes = [l for l in self.likes if not (l.user_id == user_id and l.post_id == post_id)]
        return before - len(self.likes)

    async def liked_post_ids(self, db, *, user_id, post_ids) -> set[int]:
        return {l.post_id for l in self.likes if l.user_id == user_id and l.post_id in post_ids}

    async def insert_comment(self, db, *, user_id, post_id, content) -> Comment:
        comment_id = self.add_comment(user_id, post_id, content)
        return Comment(**self.comments[comment_id])

    async def list_comments(self, db, post_id, *, limit=10, offset=0) -> list[Comment]:
        rows = self._newest_first([r for r in self.comments.values() if r["post_id"] == post_id])
        return [self._comment(r) for r in rows[offset:offset + limit]]


class FakeStorage:
    def __init__(self) -> None:
        self.uploads: list[tuple[StoredObject, bytes, str]] = []
        self.deleted: list[str] = []
        self.fail_on_upload: int | None = None

    async def upload(self, data: bytes, content_type: str) -> StoredObject:
        if self.fail_on_upload is not None and len(self.uploads) + 1 == self.fail_on_upload:
            raise StorageError("Object storage upload failed: 503 unavailable")
        key = object_key(content_type)
        stored = StoredObject(key=key, url=f"https://cdn.test/{key}")
        self.uploads.append((stored, data, content_type))
        return stored

    async def delete(self, key: str) -> None:
        self.deleted.append(key)


PATCHED = {
    auth_repository: ("create_user", "get_user_by_username", "get_user_by_email"),
    user_repository: ("get_user_by_id",),
    post_repository: (
        "insert_post",
        "get_post",
        "post_exists",
        "list_feed",
        "search_posts",
        "list_posts_by_author",
    ),
    interaction_repository: (
        "insert_like",
        "delete_likes",
        "liked_post_ids",
        "insert_comment",
        "list_comments",
    ),
}


@pytest.fixture
def store(monkeypatch) -> MemoryStore:
    memory = MemoryStore()
    for module, names in PATCHED.items():
        for name in names:
            monkeypatch.setattr(module, name, getattr(memory, name))
    return memory


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def db() -> object:
    # Repositories are patched, so the handle is only passed through.
    return object()


@pytest.fixture
def client(store, storage, db):
    @asynccontextmanager
    async def lifespan(app):
        app.state.db = db
        app.state.storage = storage
        yield

    app = create_app(lifespan_handler=lifespan)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


def token_headers(user_id: int, username: str) -> dict[str, str]:
    token = security.build_access_token(user_id=user_id, username=username)
    return {"Authorization": f"Bearer {token}"}


def bearer(user: User) -> dict[str, str]:
    return token_headers(user.id, user.username)
