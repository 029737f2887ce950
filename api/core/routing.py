"""
Route tables.

Feature packages declare their endpoints as a `ROUTES` tuple of `Route`
records instead of decorating handlers; `build_router` turns a table into an
`APIRouter`. Parameter/body validation still happens before the handler runs,
driven by the handler's signature (FastAPI `Query`/`Path`/`Depends` and
pydantic body models).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from fastapi import APIRouter


@dataclass(frozen=True)
class Route:
    method: str
    path: str
    endpoint: Callable[..., Any]
    status_code: int = 200
    response_model: Any = None


def build_router(routes: Iterable[Route], *, prefix: str = "", tags: tuple[str, ...] = ()) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=list(tags))
    for route in routes:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method.upper()],
            status_code=route.status_code,
            response_model=route.response_model,
            name=route.endpoint.__name__,
        )
    return router
