"""Data access helpers for post interaction records."""
from __future__ import annotations

import uuid
from datetime import datetime
import logging
from typing import Any, Final

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm import Session

from interaction_stage.models import PostInteraction, VoteValue

from .base import (
    DuplicateInteractionError,
    Found,
    InteractionSnapshot,
    LookupResult,
    NotFound,
    store_call,
)

logger = logging.getLogger(__name__)

__all__ = ["InteractionRepository", "UNCHECKED"]


class _Unchecked:
    def __repr__(self) -> str:
        return "UNCHECKED"


# Sentinel for "do not condition the update on the current vote".
UNCHECKED: Final = _Unchecked()


class InteractionRepository:
    """Point lookups, single-row writes and counts over ``post_interaction``.

    Every write commits immediately; callers get no transaction spanning a
    read and a later write.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def find(self, post_id: int, user_id: uuid.UUID) -> LookupResult:
        """Return the interaction for ``(post_id, user_id)`` or :class:`NotFound`."""
        stmt = select(PostInteraction).where(
            PostInteraction.post_id == post_id,
            PostInteraction.user_id == user_id,
        ).execution_options(populate_existing=True)
        with store_call(self.session, "find_interaction"):
            try:
                row = self.session.execute(stmt).scalar_one()
            except NoResultFound:
                return NotFound()
            return Found(InteractionSnapshot.from_row(row))

    def insert(
        self,
        *,
        post_id: int,
        user_id: uuid.UUID,
        vote: VoteValue | None,
        is_reported: bool,
        at: datetime,
    ) -> InteractionSnapshot:
        """Insert a new interaction and return its snapshot.

        Raises:
            DuplicateInteractionError: If a row for the pair already exists,
                typically inserted by a concurrent request.
            StoreError: For any other failure, such as an unknown post.
        """
        row = PostInteraction(
            post_id=post_id,
            user_id=user_id,
            vote=vote,
            is_reported=is_reported,
            created_at=at,
            updated_at=at,
        )
        with store_call(self.session, "insert_interaction"):
            try:
                self.session.add(row)
                self.session.commit()
            except IntegrityError as exc:
                self.session.rollback()
                if self.count_for_pair(post_id, user_id):
                    logger.warning(
                        "Insert for post %s user %s hit an existing row", post_id, user_id
                    )
                    raise DuplicateInteractionError(
                        f"Interaction for post {post_id} already exists"
                    ) from exc
                raise
            return InteractionSnapshot.from_row(row)

    def update(
        self,
        interaction_id: int,
        values: dict[str, Any],
        *,
        expected_vote: VoteValue | None | _Unchecked = UNCHECKED,
    ) -> bool:
        """Update one interaction in place.

        With ``expected_vote`` given, the row is only written if its vote still
        equals that value. Returns False when no row matched.
        """
        stmt = update(PostInteraction).where(PostInteraction.id == interaction_id)
        if not isinstance(expected_vote, _Unchecked):
            if expected_vote is None:
                stmt = stmt.where(PostInteraction.vote.is_(None))
            else:
                stmt = stmt.where(PostInteraction.vote == expected_vote)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        with store_call(self.session, "update_interaction"):
            result = self.session.execute(stmt)
            self.session.commit()
            return bool(result.rowcount)

    def count_votes(self, post_id: int, vote: VoteValue) -> int:
        """Count interactions on a post currently holding ``vote``."""
        stmt = select(func.count(PostInteraction.id)).where(
            PostInteraction.post_id == post_id,
            PostInteraction.vote == vote,
        )
        with store_call(self.session, "count_votes"):
            return int(self.session.execute(stmt).scalar_one())

    def count_for_pair(self, post_id: int, user_id: uuid.UUID) -> int:
        """Count interactions stored for a ``(post_id, user_id)`` pair."""
        stmt = select(func.count(PostInteraction.id)).where(
            PostInteraction.post_id == post_id,
            PostInteraction.user_id == user_id,
        )
        with store_call(self.session, "count_for_pair"):
            return int(self.session.execute(stmt).scalar_one())
