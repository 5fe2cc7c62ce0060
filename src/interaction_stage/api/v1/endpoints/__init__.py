# src/interaction_stage/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .interactions import router as interactions_router
from .posts import router as posts_router

__all__ = [
    "interactions_router",
    "posts_router",
]
