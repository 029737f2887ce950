from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from auth import router as auth_router
from core import settings
from core.db import Database
from core.logging import setup_logging
from core.storage import ObjectStorage
from interactions import router as interactions_router
from posts import router as posts_router
from users import router as users_router

API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pool and one storage client per process.
    db = Database.from_env()
    await db.open()
    app.state.db = db
    app.state.storage = ObjectStorage.from_env()
    logger.info("Database pool open (schema=%s)", db.schema)
    try:
        yield
    finally:
        await db.close()
        logger.info("Database pool closed")


async def http_error_handler(_: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Validation failed", "details": details})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


def create_app(*, lifespan_handler=lifespan) -> FastAPI:
    setup_logging()
    app = FastAPI(title="Music Feed API", lifespan=lifespan_handler)

    # Allow local frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router.router, prefix=API_PREFIX)
    app.include_router(posts_router.router, prefix=API_PREFIX)
    app.include_router(interactions_router.router, prefix=API_PREFIX)
    app.include_router(users_router.router, prefix=API_PREFIX)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "music feed api"}

    return app


app = create_app()
