"""Report and vote flows composed from reconciliation and recompute."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.orm import Session

from interaction_stage.models import VoteValue
from interaction_stage.repositories import (
    InteractionRepository,
    InteractionSnapshot,
    PostRepository,
    StoreError,
)

from .aggregates import AggregateRecomputer
from .reconciler import InteractionReconciler, ReportMutation, VoteMutation

logger = logging.getLogger(__name__)


class InteractionService:
    """Entry point for the report and vote operations.

    Reconciliation failures propagate to the caller. Recompute failures are
    logged and swallowed because the user's own interaction is already stored.
    """

    def __init__(
        self,
        reconciler: InteractionReconciler,
        recomputer: AggregateRecomputer,
    ) -> None:
        self.reconciler = reconciler
        self.recomputer = recomputer

    @classmethod
    def for_session(cls, session: Session) -> InteractionService:
        """Build a service whose repositories share ``session``."""
        interactions = InteractionRepository(session)
        return cls(
            InteractionReconciler(interactions),
            AggregateRecomputer(interactions, PostRepository(session)),
        )

    def report(self, post_id: int, user_id: uuid.UUID) -> InteractionSnapshot:
        """Mark ``post_id`` as reported by ``user_id``.

        Report counters are derived by the database trigger, so nothing is
        recomputed here.
        """
        return self.reconciler.reconcile(post_id, user_id, ReportMutation())

    def toggle_vote(
        self,
        post_id: int,
        user_id: uuid.UUID,
        vote: VoteValue,
    ) -> InteractionSnapshot:
        """Toggle ``user_id``'s vote on ``post_id`` and refresh the post counters."""
        record = self.reconciler.reconcile(post_id, user_id, VoteMutation(vote))
        try:
            self.recomputer.recompute_vote_counters(post_id)
        except StoreError as exc:
            logger.error("Error updating post counts for post %s: %s", post_id, exc.message)
        return record
