"""
Database schema (DDL).

Tables live in a dedicated Postgres schema (`DB_SCHEMA`). All statements are
idempotent so `init_db.py` can be re-run safely.
"""

from __future__ import annotations

import re

from .db import Database

_SCHEMA_NAME = re.compile(r"^[a-z_][a-z0-9_]*$")

TABLES_SQL = """
CREATE TABLE IF NOT EXISTS users (
  id serial PRIMARY KEY,
  username varchar(50) NOT NULL UNIQUE,
  email varchar(255) NOT NULL UNIQUE,
  password_hash varchar NOT NULL,
  bio text,
  avatar_url text,
  created_at timestamp NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS music_posts (
  id serial PRIMARY KEY,
  cover_image_url text NOT NULL,
  audio_url text NOT NULL,
  caption text,
  created_at timestamp NOT NULL DEFAULT CURRENT_TIMESTAMP,
  user_id integer NOT NULL REFERENCES users (id)
);

CREATE TABLE IF NOT EXISTS comments (
  id serial PRIMARY KEY,
  content text NOT NULL,
  created_at timestamp NOT NULL DEFAULT CURRENT_TIMESTAMP,
  user_id integer NOT NULL REFERENCES users (id),
  post_id integer NOT NULL REFERENCES music_posts (id)
);

-- No unique (user_id, post_id): the same user may like a post more than once.
CREATE TABLE IF NOT EXISTS likes (
  id serial PRIMARY KEY,
  created_at timestamp NOT NULL DEFAULT CURRENT_TIMESTAMP,
  user_id integer NOT NULL REFERENCES users (id),
  post_id integer NOT NULL REFERENCES music_posts (id)
);

CREATE TABLE IF NOT EXISTS follows (
  id serial PRIMARY KEY,
  follower_id integer NOT NULL REFERENCES users (id),
  followed_id integer NOT NULL REFERENCES users (id),
  created_at timestamp NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS likes_post_user_idx ON likes (post_id, user_id);
CREATE INDEX IF NOT EXISTS comments_post_created_idx ON comments (post_id, created_at DESC);
CREATE INDEX IF NOT EXISTS music_posts_user_idx ON music_posts (user_id);
"""


def validate_schema_name(schema: str) -> str:
    # Identifiers can't be bound as parameters, so only plain names are allowed.
    name = (schema or "").strip()
    if not _SCHEMA_NAME.match(name):
        raise ValueError(f"Invalid schema name: {schema!r}")
    return name


def search_index_sql(schema: str) -> str:
    name = validate_schema_name(schema)
    return (
        f"CREATE INDEX IF NOT EXISTS {name}_posts_search_vector_idx "
        f"ON {name}.music_posts USING gin (to_tsvector('english', caption))"
    )


async def create_schema(db: Database, schema: str) -> None:
    name = validate_schema_name(schema)
    async with db.transaction() as conn:
        await conn.execute(f"CREATE SCHEMA IF NOT EXISTS {name}")
        await conn.execute(f"SET LOCAL search_path TO {name}")
        await conn.execute(TABLES_SQL)
        await conn.execute(search_index_sql(name))
