# src/interaction_stage/models/__init__.py
"""SQLAlchemy models for the Interaction Stage application."""

from .interaction import PostInteraction, VoteValue
from .post import Post
from .user import User

__all__ = [
    "Post",
    "PostInteraction",
    "User",
    "VoteValue",
]
