"""
Async database access (raw SQL) using asyncpg.

`Database` owns one connection pool. It is constructed and opened in the
FastAPI lifespan (see `api/main.py`), kept on `app.state.db`, and handed to
routes through the `get_db` dependency. Nothing in this module is global.

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Every connection runs with `search_path` set to the app schema, so SQL in
the repositories uses unqualified table names.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg
from fastapi import Request

from . import settings

# Row ids are `serial` (int4). asyncpg refuses to encode wider ints, so
# repositories treat out-of-range ids as "no such row" without querying.
INT4_MIN = -(2**31)
INT4_MAX = 2**31 - 1


def is_int4(*values: int) -> bool:
    return all(INT4_MIN <= v <= INT4_MAX for v in values)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def database_url() -> str:
    url = settings.env_str("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class Database:
    def __init__(
        self,
        dsn: str,
        *,
        schema: str = settings.DEFAULT_DB_SCHEMA,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float = 30,
    ) -> None:
        self.dsn = dsn
        self.schema = schema
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    @classmethod
    def from_env(cls) -> "Database":
        return cls(
            database_url(),
            schema=settings.db_schema(),
            min_size=settings.env_int("DB_POOL_MIN_SIZE", 1),
            max_size=settings.env_int("DB_POOL_MAX_SIZE", 5),
        )

    async def open(self) -> None:
        if self._pool is not None:
            return None
        self._pool = await asyncpg.create_pool(
            dsn=self.dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            command_timeout=self.command_timeout,
            server_settings={"search_path": self.schema},
        )

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None

    @property
    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not open. Call Database.open() on startup.")
        return self._pool

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        row = await self.pool.fetchrow(sql, *args)
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        rows = await self.pool.fetch(sql, *args)
        return [_record_to_dict(r) for r in rows]

    async def execute(self, sql: str, *args: Any) -> str:
        """
        Run a statement (INSERT/UPDATE/DELETE/DDL). Returns the status tag,
        e.g. "DELETE 2".
        """
        return await self.pool.execute(sql, *args)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        async with self.pool.acquire() as conn:  # type: asyncpg.Connection
            async with conn.transaction():
                yield conn


def get_db(request: Request) -> Database:
    return request.app.state.db
