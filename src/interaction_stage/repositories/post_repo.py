"""Data access helpers for working with posts."""
from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from interaction_stage.models.post import Post

from .base import StoreError, store_call

__all__ = ["PostRepository"]


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: int) -> Post | None:
        """Return a post by identifier."""
        with store_call(self.session, "get_post"):
            result = self.session.execute(
                select(Post).where(Post.id == post_id).execution_options(populate_existing=True)
            )
            return result.scalars().first()

    def list_ids(self) -> list[int]:
        """Return every post identifier in ascending order."""
        with store_call(self.session, "list_post_ids"):
            result = self.session.execute(select(Post.id).order_by(Post.id))
            return list(result.scalars())

    def set_vote_counters(self, post_id: int, *, upvotes: int, downvotes: int) -> None:
        """Overwrite the vote counters of a post in a single update.

        Raises:
            StoreError: If the write fails or no post has ``post_id``.
        """
        stmt = (
            update(Post)
            .where(Post.id == post_id)
            .values(upvotes=upvotes, downvotes=downvotes)
            .execution_options(synchronize_session=False)
        )
        with store_call(self.session, "set_vote_counters"):
            result = self.session.execute(stmt)
            self.session.commit()
        if not result.rowcount:
            raise StoreError(f"Post {post_id} not found")
