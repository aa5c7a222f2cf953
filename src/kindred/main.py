# src/kindred/main.py
"""Main entry point for the Kindred application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from kindred.api.v1 import (
    comments_router,
    posts_router,
    reactions_router,
    stories_router,
    users_router,
)
from kindred.core.errors import KindredError
from kindred.core.settings import settings
from kindred.db.session import SessionLocal
from kindred.models import PostStatus
from kindred.services.events import ChangeEvent, get_change_feed
from kindred.services.moderation import get_moderation_classifier

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Social network API with AI moderation of every new post",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(reactions_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(stories_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.exception_handler(KindredError)
async def kindred_error_handler(request: Request, exc: KindredError) -> JSONResponse:
    """Render every domain error as ``{"error": message}`` with its status."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _log_rejection(change: ChangeEvent) -> None:
    logger.info(
        "Post %s by %s stored as rejected",
        change.row.get("id"),
        change.row.get("author_id"),
    )


def _is_rejected_insert(change: ChangeEvent) -> bool:
    return change.action == "insert" and change.row.get("status") == PostStatus.REJECTED.value


@app.on_event("startup")
async def on_startup() -> None:
    feed = get_change_feed()
    feed.attach(SessionLocal)
    app.state.unsubscribe_rejections = feed.on_change("posts", _is_rejected_insert, _log_rejection)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    unsubscribe = getattr(app.state, "unsubscribe_rejections", None)
    if unsubscribe:
        unsubscribe()
    get_change_feed().detach(SessionLocal)
    await get_moderation_classifier().close()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("kindred.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
