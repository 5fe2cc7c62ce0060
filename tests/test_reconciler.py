# mypy: ignore-errors
# tests/test_reconciler.py
"""Tests for find-or-create reconciliation and toggle semantics."""

from dataclasses import replace
from unittest.mock import patch

import pytest

from interaction_stage.models import VoteValue
from interaction_stage.repositories import (
    DuplicateInteractionError,
    Found,
    NotFound,
    StoreConflictError,
    StoreError,
)
from interaction_stage.services.reconciler import (
    InteractionReconciler,
    ReportMutation,
    VoteMutation,
    next_vote,
)


@pytest.fixture()
def reconciler(interactions, ticking_clock):
    return InteractionReconciler(
        interactions, write_mode="last_write_wins", clock=ticking_clock
    )


@pytest.fixture()
def cas_reconciler(interactions, ticking_clock):
    return InteractionReconciler(
        interactions, write_mode="compare_and_swap", max_retries=3, clock=ticking_clock
    )


@pytest.mark.parametrize(
    ("current", "requested", "expected"),
    [
        (None, VoteValue.UP, VoteValue.UP),
        (VoteValue.UP, VoteValue.UP, None),
        (VoteValue.UP, VoteValue.DOWN, VoteValue.DOWN),
        (VoteValue.DOWN, VoteValue.UP, VoteValue.UP),
        (VoteValue.DOWN, VoteValue.DOWN, None),
    ],
)
def test_next_vote_toggles(current, requested, expected) -> None:
    assert next_vote(current, requested) is expected


def test_first_vote_creates_record(reconciler, test_post, test_user) -> None:
    record = reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    assert record.vote is VoteValue.UP
    assert record.is_reported is False


def test_repeat_vote_retracts(reconciler, test_post, test_user) -> None:
    first = reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))
    second = reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    assert first.vote is VoteValue.UP
    assert second.vote is None
    assert second.id == first.id


def test_opposite_vote_switches_in_one_write(reconciler, interactions, test_post, test_user) -> None:
    reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    with patch.object(interactions, "update", wraps=interactions.update) as update:
        record = reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.DOWN))

    assert record.vote is VoteValue.DOWN
    update.assert_called_once()
    assert update.call_args.args[1]["vote"] is VoteValue.DOWN


def test_first_report_creates_record_without_vote(reconciler, test_post, test_user) -> None:
    record = reconciler.reconcile(test_post.id, test_user.id, ReportMutation())

    assert record.is_reported is True
    assert record.vote is None


def test_report_twice_stays_reported_and_refreshes_timestamp(
    reconciler, interactions, test_post, test_user
) -> None:
    reconciler.reconcile(test_post.id, test_user.id, ReportMutation())
    first = interactions.find(test_post.id, test_user.id).record

    reconciler.reconcile(test_post.id, test_user.id, ReportMutation())
    second = interactions.find(test_post.id, test_user.id).record

    assert first.is_reported is True
    assert second.is_reported is True
    assert second.updated_at > first.updated_at


def test_report_keeps_existing_vote(reconciler, test_post, test_user) -> None:
    reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.DOWN))
    record = reconciler.reconcile(test_post.id, test_user.id, ReportMutation())

    assert record.vote is VoteValue.DOWN
    assert record.is_reported is True


def test_vote_keeps_report_flag(reconciler, test_post, test_user) -> None:
    reconciler.reconcile(test_post.id, test_user.id, ReportMutation())
    record = reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    assert record.is_reported is True
    assert record.vote is VoteValue.UP


def test_any_sequence_keeps_one_record_per_pair(
    reconciler, interactions, test_post, test_user
) -> None:
    for mutation in (
        ReportMutation(),
        VoteMutation(VoteValue.UP),
        VoteMutation(VoteValue.DOWN),
        ReportMutation(),
        VoteMutation(VoteValue.DOWN),
        VoteMutation(VoteValue.UP),
    ):
        reconciler.reconcile(test_post.id, test_user.id, mutation)

    assert interactions.count_for_pair(test_post.id, test_user.id) == 1
    stored = interactions.find(test_post.id, test_user.id).record
    assert stored.vote is VoteValue.UP
    assert stored.is_reported is True


def test_lookup_failure_aborts_before_any_write(reconciler, interactions, test_post, test_user) -> None:
    with (
        patch.object(interactions, "find", side_effect=StoreError("connection reset")),
        patch.object(interactions, "insert") as insert,
        patch.object(interactions, "update") as update,
    ):
        with pytest.raises(StoreError, match="connection reset"):
            reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    insert.assert_not_called()
    update.assert_not_called()


def test_update_failure_propagates(reconciler, interactions, test_post, test_user) -> None:
    reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    with patch.object(interactions, "update", side_effect=StoreError("write failed")):
        with pytest.raises(StoreError, match="write failed"):
            reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.DOWN))


def _stale_find(interactions, stale):
    """Make the next lookup return ``stale``, as a concurrent reader would have seen it."""
    real_find = interactions.find
    calls = {"n": 0}

    def _find(post_id, user_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return stale
        return real_find(post_id, user_id)

    return _find


def test_known_race_last_write_wins_loses_a_toggle(
    reconciler, interactions, test_post, test_user
) -> None:
    """Two concurrent "up" clicks both read the unset row; the second toggle is lost."""
    reconciler.reconcile(test_post.id, test_user.id, ReportMutation())
    stale = interactions.find(test_post.id, test_user.id)
    reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    with patch.object(interactions, "find", side_effect=_stale_find(interactions, stale)):
        reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    assert interactions.find(test_post.id, test_user.id).record.vote is VoteValue.UP


def test_compare_and_swap_rereads_after_concurrent_change(
    cas_reconciler, interactions, test_post, test_user
) -> None:
    cas_reconciler.reconcile(test_post.id, test_user.id, ReportMutation())
    stale = interactions.find(test_post.id, test_user.id)
    cas_reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    with patch.object(interactions, "find", side_effect=_stale_find(interactions, stale)):
        record = cas_reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    assert record.vote is None
    assert interactions.find(test_post.id, test_user.id).record.vote is None


def test_compare_and_swap_gives_up_after_retries(
    cas_reconciler, interactions, test_post, test_user
) -> None:
    cas_reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))
    record = interactions.find(test_post.id, test_user.id).record
    stale = Found(replace(record, vote=None))

    with patch.object(interactions, "find", return_value=stale) as find:
        with pytest.raises(StoreConflictError):
            cas_reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.DOWN))

    assert find.call_count == 4
    assert interactions.find(test_post.id, test_user.id).record.vote is VoteValue.UP


def test_compare_and_swap_single_retry_succeeds_after_one_reread(
    interactions, ticking_clock, test_post, test_user
) -> None:
    reconciler = InteractionReconciler(
        interactions, write_mode="compare_and_swap", max_retries=1, clock=ticking_clock
    )
    reconciler.reconcile(test_post.id, test_user.id, ReportMutation())
    stale = interactions.find(test_post.id, test_user.id)
    reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    with patch.object(
        interactions, "find", side_effect=_stale_find(interactions, stale)
    ) as find:
        record = reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    assert find.call_count == 2
    assert record.vote is None


def test_compare_and_swap_with_zero_retries_tries_once(
    interactions, ticking_clock, test_post, test_user
) -> None:
    reconciler = InteractionReconciler(
        interactions, write_mode="compare_and_swap", max_retries=0, clock=ticking_clock
    )
    reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))
    record = interactions.find(test_post.id, test_user.id).record
    stale = Found(replace(record, vote=None))

    with patch.object(interactions, "find", return_value=stale) as find:
        with pytest.raises(StoreConflictError, match="after 1 attempts"):
            reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.DOWN))

    assert reconciler.max_retries == 0
    assert find.call_count == 1


def test_compare_and_swap_retries_concurrent_first_insert(
    cas_reconciler, interactions, test_post, test_user
) -> None:
    """Another request created the row between our lookup and our insert."""
    cas_reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    with patch.object(
        interactions, "find", side_effect=_stale_find(interactions, NotFound())
    ) as find:
        record = cas_reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    assert find.call_count == 2
    assert record.vote is None
    assert interactions.count_for_pair(test_post.id, test_user.id) == 1


def test_compare_and_swap_retries_concurrent_first_report(
    cas_reconciler, interactions, test_post, test_user
) -> None:
    cas_reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.DOWN))

    with patch.object(interactions, "find", side_effect=_stale_find(interactions, NotFound())):
        record = cas_reconciler.reconcile(test_post.id, test_user.id, ReportMutation())

    assert record.is_reported is True
    assert record.vote is VoteValue.DOWN


def test_last_write_wins_concurrent_first_insert_is_store_error(
    reconciler, interactions, test_post, test_user
) -> None:
    reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    with patch.object(interactions, "find", side_effect=_stale_find(interactions, NotFound())):
        with pytest.raises(DuplicateInteractionError):
            reconciler.reconcile(test_post.id, test_user.id, VoteMutation(VoteValue.UP))

    assert interactions.find(test_post.id, test_user.id).record.vote is VoteValue.UP
