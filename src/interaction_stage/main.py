# src/interaction_stage/main.py
"""Main entry point for the Interaction Stage application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from interaction_stage.api.v1 import interactions_router, posts_router
from interaction_stage.core.logging import configure_logging
from interaction_stage.core.settings import settings
from interaction_stage.repositories import StoreError
from interaction_stage.services import AuthenticationError

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Interaction Stage API",
    description="Per-user votes and reports on shared posts",
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

# Include API routers
app.include_router(interactions_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(request: Request, exc: AuthenticationError) -> PlainTextResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return PlainTextResponse("Unauthorized", status_code=401)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=500)


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    logger.info(
        "%s %s started (write mode: %s)",
        settings.app_name,
        settings.app_version,
        settings.interaction_write_mode,
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Interaction Stage API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("interaction_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
