"""Models capturing per-user reactions to posts."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from interaction_stage.db.session import Base
from interaction_stage.db.time import utcnow


class VoteValue(str, enum.Enum):
    """Direction of a vote; an unset vote is stored as NULL."""

    UP = "up"
    DOWN = "down"


class PostInteraction(Base):
    """One user's standing reaction to one post.

    Created lazily on the first report or vote and updated in place afterwards.
    """

    __tablename__ = "post_interaction"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_interaction_post_user"),
        Index("ix_post_interaction_post_vote", "post_id", "vote"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_user.id", ondelete="CASCADE"),
        nullable=False,
    )

    vote: Mapped[VoteValue | None] = mapped_column(
        Enum(
            VoteValue,
            name="interaction_vote",
            native_enum=False,
            length=8,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=True,
    )
    # Only ever set to true here; clearing reports is out of scope.
    is_reported: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
