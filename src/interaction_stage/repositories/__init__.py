"""Record store access for interactions and posts."""

from .base import (
    DuplicateInteractionError,
    Found,
    InteractionSnapshot,
    LookupResult,
    NotFound,
    StoreConflictError,
    StoreError,
)
from .interaction_repo import UNCHECKED, InteractionRepository
from .post_repo import PostRepository

__all__ = [
    "DuplicateInteractionError",
    "Found",
    "InteractionRepository",
    "InteractionSnapshot",
    "LookupResult",
    "NotFound",
    "PostRepository",
    "StoreConflictError",
    "StoreError",
    "UNCHECKED",
]
