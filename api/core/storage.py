"""
Object storage HTTP client.

Objects are written with a plain `PUT <base>/<bucket>/<key>` and removed with
`DELETE`, which S3-compatible stores (MinIO with a public bucket policy, or a
presigning proxy) accept. Clients receive `<public base>/<key>`.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import re
import uuid
from dataclasses import dataclass

import httpx
from fastapi import Request

from . import settings

DEFAULT_STORAGE_URL = "http://minio:9000"
DEFAULT_BUCKET = "music-posts"

_DATA_URI_PREFIX = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,")


# Storage failures are explicit and separable from other runtime errors.
class StorageError(RuntimeError):
    pass


@dataclass(frozen=True)
class StoredObject:
    key: str
    url: str


def strip_data_uri(payload: str) -> str:
    """
    Drop a leading `data:<mime>;base64,` prefix if present.
    """
    match = _DATA_URI_PREFIX.match(payload)
    if match is None:
        return payload
    return payload[match.end():]


def decode_base64_payload(payload: str) -> bytes:
    """
    Decode a base64 payload (with or without a data-URI prefix).

    Raises ValueError for anything that is not valid base64.
    """
    raw = "".join(strip_data_uri(payload.strip()).split())
    if not raw:
        raise ValueError("Payload is empty.")
    try:
        return base64.b64decode(raw, validate=True)
    except binascii.Error as exc:
        raise ValueError("Payload is not valid base64.") from exc


def object_key(content_type: str) -> str:
    ext = mimetypes.guess_extension(content_type.split(";", 1)[0].strip()) or ""
    return f"{uuid.uuid4().hex}{ext}"


class ObjectStorage:
    def __init__(
        self,
        *,
        base_url: str,
        bucket: str,
        public_url: str | None = None,
        token: str = "",
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base_url = (base_url or "").strip().rstrip("/")
        if not base_url:
            raise StorageError("OBJECT_STORAGE_URL is empty.")
        self.base_url = base_url
        self.bucket = bucket.strip("/")
        self.public_url = (public_url or f"{base_url}/{self.bucket}").rstrip("/")
        self.token = token
        self.timeout_s = timeout_s
        self.transport = transport

    @classmethod
    def from_env(cls) -> "ObjectStorage":
        return cls(
            base_url=settings.env_str("OBJECT_STORAGE_URL", DEFAULT_STORAGE_URL),
            bucket=settings.env_str("OBJECT_STORAGE_BUCKET", DEFAULT_BUCKET),
            public_url=settings.env_str("OBJECT_STORAGE_PUBLIC_URL") or None,
            token=settings.env_str("OBJECT_STORAGE_TOKEN"),
        )

    def _headers(self, content_type: str | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if content_type:
            headers["Content-Type"] = content_type
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout_s, transport=self.transport)

    def url_for(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    async def upload(self, data: bytes, content_type: str) -> StoredObject:
        key = object_key(content_type)
        try:
            async with self._client() as client:
                resp = await client.put(
                    f"/{self.bucket}/{key}",
                    content=data,
                    headers=self._headers(content_type),
                )
        except httpx.HTTPError as exc:
            raise StorageError(f"Object storage upload failed: {exc}") from exc

        if resp.status_code not in (200, 201, 204):
            # Avoid dumping huge bodies; include a small snippet.
            raise StorageError(f"Object storage upload failed: {resp.status_code} {resp.text[:300]}")

        return StoredObject(key=key, url=self.url_for(key))

    async def delete(self, key: str) -> None:
        try:
            async with self._client() as client:
                resp = await client.delete(f"/{self.bucket}/{key}", headers=self._headers())
        except httpx.HTTPError as exc:
            raise StorageError(f"Object storage delete failed: {exc}") from exc

        if resp.status_code not in (200, 202, 204, 404):
            raise StorageError(f"Object storage delete failed: {resp.status_code} {resp.text[:300]}")


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage
