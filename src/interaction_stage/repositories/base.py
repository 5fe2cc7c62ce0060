"""Shared store primitives: error types, lookup results and row snapshots."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interaction_stage.models import PostInteraction, VoteValue

logger = logging.getLogger(__name__)

__all__ = [
    "DuplicateInteractionError",
    "Found",
    "InteractionSnapshot",
    "LookupResult",
    "NotFound",
    "StoreConflictError",
    "StoreError",
    "store_call",
]


class StoreError(RuntimeError):
    """Raised when the record store fails to execute a query or write."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StoreConflictError(StoreError):
    """Raised when a conditional write kept losing to concurrent writers."""


class DuplicateInteractionError(StoreError):
    """Raised when an insert collides with an existing row for the same pair."""


@dataclass(frozen=True)
class InteractionSnapshot:
    """Immutable copy of a ``post_interaction`` row."""

    id: int
    post_id: int
    user_id: uuid.UUID
    vote: VoteValue | None
    is_reported: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: PostInteraction) -> InteractionSnapshot:
        return cls(
            id=row.id,
            post_id=row.post_id,
            user_id=row.user_id,
            vote=row.vote,
            is_reported=row.is_reported,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@dataclass(frozen=True)
class Found:
    """Lookup outcome carrying the matching record."""

    record: InteractionSnapshot


@dataclass(frozen=True)
class NotFound:
    """Lookup outcome meaning no record matched; not an error."""


LookupResult = Found | NotFound


def _describe(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    if orig is not None:
        return str(orig)
    return str(exc)


@contextmanager
def store_call(session: Session, operation: str) -> Iterator[None]:
    """Translate SQLAlchemy failures into :class:`StoreError`.

    The session is rolled back so it stays usable for whatever the caller
    does next.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        message = _describe(exc)
        logger.warning("Store call %s failed: %s", operation, message)
        raise StoreError(message) from exc
