"""Recount of a post's vote counters from its interaction rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from interaction_stage.models import VoteValue
from interaction_stage.repositories import InteractionRepository, PostRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VoteCounters:
    upvotes: int
    downvotes: int


class AggregateRecomputer:
    """Overwrite ``post.upvotes``/``post.downvotes`` with a full recount.

    Counting rather than applying +1/-1 deltas means any earlier drift is
    corrected by the next successful recompute on the same post.
    """

    def __init__(self, interactions: InteractionRepository, posts: PostRepository) -> None:
        self.interactions = interactions
        self.posts = posts

    def recompute_vote_counters(self, post_id: int) -> VoteCounters:
        """Recount votes for ``post_id`` and write both counters in one update.

        Raises:
            StoreError: If either count or the post update fails.
        """
        counters = VoteCounters(
            upvotes=self.interactions.count_votes(post_id, VoteValue.UP),
            downvotes=self.interactions.count_votes(post_id, VoteValue.DOWN),
        )
        self.posts.set_vote_counters(
            post_id,
            upvotes=counters.upvotes,
            downvotes=counters.downvotes,
        )
        logger.debug(
            "Post %s counters set to up=%d down=%d",
            post_id,
            counters.upvotes,
            counters.downvotes,
        )
        return counters
