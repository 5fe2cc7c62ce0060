# src/interaction_stage/scripts/recount.py
"""Recompute post vote counters from interaction rows.

Run after an outage or a failed recompute to bring ``post.upvotes`` and
``post.downvotes`` back in line with ``post_interaction``:

    python -m interaction_stage.scripts.recount            # every post
    python -m interaction_stage.scripts.recount --post-id 7 --post-id 9
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from sqlalchemy.orm import Session

from interaction_stage.core.logging import configure_logging
from interaction_stage.db.session import SessionLocal
from interaction_stage.repositories import InteractionRepository, PostRepository, StoreError
from interaction_stage.services.aggregates import AggregateRecomputer

logger = logging.getLogger(__name__)


def recount_posts(db: Session, post_ids: Sequence[int] | None = None) -> list[int]:
    """Recompute counters for ``post_ids`` (all posts when None).

    Returns:
        Identifiers of posts whose recompute failed.
    """
    posts = PostRepository(db)
    recomputer = AggregateRecomputer(InteractionRepository(db), posts)
    targets = list(post_ids) if post_ids else posts.list_ids()

    failed: list[int] = []
    for post_id in targets:
        try:
            counters = recomputer.recompute_vote_counters(post_id)
        except StoreError as exc:
            logger.error("Recount failed for post %s: %s", post_id, exc.message)
            failed.append(post_id)
            continue
        print(f"post {post_id}: up={counters.upvotes} down={counters.downvotes}")
    return failed


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute post vote counters.")
    parser.add_argument(
        "--post-id",
        dest="post_ids",
        type=int,
        action="append",
        help="Post to recount; repeat for several. Defaults to every post.",
    )
    args = parser.parse_args(argv)

    configure_logging()
    db = SessionLocal()
    try:
        failed = recount_posts(db, args.post_ids)
    finally:
        db.close()
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
