"""Find-or-create reconciliation of a user's reaction to a post.

A (post, user) pair maps to at most one ``post_interaction`` row. Reports set
``is_reported`` unconditionally; votes toggle: repeating the current vote
clears it, any other vote replaces it in one write.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from interaction_stage.core.settings import WriteMode, settings
from interaction_stage.db.time import utcnow
from interaction_stage.models import VoteValue
from interaction_stage.repositories import (
    UNCHECKED,
    DuplicateInteractionError,
    Found,
    InteractionRepository,
    InteractionSnapshot,
    LookupResult,
    StoreConflictError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportMutation:
    """Flag the post as reported by the user."""


@dataclass(frozen=True)
class VoteMutation:
    """Vote on the post, retracting the vote if it is already ``value``."""

    value: VoteValue


Mutation = ReportMutation | VoteMutation


def next_vote(current: VoteValue | None, requested: VoteValue) -> VoteValue | None:
    """Apply toggle semantics to a vote value."""
    return None if current == requested else requested


def mutation_values(current: InteractionSnapshot | None, mutation: Mutation) -> dict[str, Any]:
    """Return the interaction fields a mutation writes, given the current row."""
    if isinstance(mutation, ReportMutation):
        return {"is_reported": True}
    if current is None:
        return {"vote": mutation.value}
    return {"vote": next_vote(current.vote, mutation.value)}


class InteractionReconciler:
    """Read-modify-write of the single interaction row for a (post, user) pair.

    In ``last_write_wins`` mode two concurrent votes from the same user can both
    read the same row and the later write wins. ``compare_and_swap`` conditions
    the vote write on the value that was read and retries on conflict.
    """

    def __init__(
        self,
        repository: InteractionRepository,
        *,
        write_mode: WriteMode | None = None,
        max_retries: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.write_mode = write_mode if write_mode is not None else settings.interaction_write_mode
        self.max_retries = (
            max_retries if max_retries is not None else settings.interaction_cas_max_retries
        )
        self.clock = clock

    def reconcile(
        self,
        post_id: int,
        user_id: uuid.UUID,
        mutation: Mutation,
    ) -> InteractionSnapshot:
        """Apply ``mutation`` to the user's interaction with ``post_id``.

        In ``compare_and_swap`` mode a conflicting write (the vote changed since
        it was read, or another request inserted the row first) re-reads and
        retries up to ``max_retries`` times.

        Raises:
            StoreError: If any lookup or write fails; nothing else is attempted.
            StoreConflictError: If compare-and-swap retries are exhausted.
        """
        attempts = 1 + self.max_retries if self.write_mode == "compare_and_swap" else 1
        for attempt in range(1, attempts + 1):
            lookup = self.repository.find(post_id, user_id)
            written = self._write(post_id, user_id, lookup, mutation)
            if written is not None:
                logger.debug(
                    "Reconciled %s for post %s user %s -> vote=%s reported=%s",
                    type(mutation).__name__,
                    post_id,
                    user_id,
                    written.vote,
                    written.is_reported,
                )
                return written
            logger.warning(
                "Interaction for post %s user %s changed concurrently (attempt %d/%d)",
                post_id,
                user_id,
                attempt,
                attempts,
            )
        raise StoreConflictError(
            f"Interaction for post {post_id} changed concurrently; gave up after {attempts} attempts"
        )

    def _conditional(self, mutation: Mutation) -> bool:
        return self.write_mode == "compare_and_swap" and isinstance(mutation, VoteMutation)

    def _write(
        self,
        post_id: int,
        user_id: uuid.UUID,
        lookup: LookupResult,
        mutation: Mutation,
    ) -> InteractionSnapshot | None:
        now = self.clock()
        current = lookup.record if isinstance(lookup, Found) else None
        values = mutation_values(current, mutation)

        if current is None:
            try:
                return self.repository.insert(
                    post_id=post_id,
                    user_id=user_id,
                    vote=values.get("vote"),
                    is_reported=values.get("is_reported", False),
                    at=now,
                )
            except DuplicateInteractionError:
                if self.write_mode != "compare_and_swap":
                    raise
                return None

        values["updated_at"] = now
        expected = current.vote if self._conditional(mutation) else UNCHECKED
        if not self.repository.update(current.id, values, expected_vote=expected):
            return None
        return replace(current, **values)

