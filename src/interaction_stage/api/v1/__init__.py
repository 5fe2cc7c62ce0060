"""Version 1 API endpoints."""

from .endpoints import interactions_router, posts_router

__all__ = [
    "interactions_router",
    "posts_router",
]
