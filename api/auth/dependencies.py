"""
Auth dependencies for FastAPI routes.

- `get_current_identity`: the `jwt` scheme; rejects the request with 401.
- `get_optional_identity`: the `jwt` scheme with the `optional` scope; a
  missing or invalid credential yields None instead of an error.
"""

from __future__ import annotations

from fastapi import Depends, Header

from core.errors import UnauthorizedError

from . import security


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise UnauthorizedError("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise UnauthorizedError("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise UnauthorizedError("Authorization must be: Bearer <token>.")
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_current_identity(access_token: str = Depends(get_bearer_token)) -> security.Identity:
    try:
        return security.identity_from_token(access_token)
    except security.AuthSecurityError as exc:
        raise UnauthorizedError(str(exc)) from exc


async def get_optional_identity(
    authorization: str | None = Header(default=None),
) -> security.Identity | None:
    if not (authorization or "").strip():
        return None
    try:
        token = _extract_bearer_token(authorization)
        return security.identity_from_token(token)
    except (UnauthorizedError, security.AuthSecurityError):
        return None
