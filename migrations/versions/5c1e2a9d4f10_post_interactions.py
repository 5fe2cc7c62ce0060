"""post interactions

Revision ID: 5c1e2a9d4f10
Revises:
Create Date: 2026-10-17 09:12:41.218305

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e2a9d4f10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Reports needed before a post is deactivated by handle_post_report.
REPORT_DEACTIVATE_THRESHOLD = 5

# Derives post.report_count and post.is_active whenever an interaction's
# is_reported flag goes from false (or absent) to true. Application code
# never writes these two columns.
HANDLE_POST_REPORT = f"""
CREATE OR REPLACE FUNCTION handle_post_report() RETURNS trigger AS $$
BEGIN
    IF NEW.is_reported AND (TG_OP = 'INSERT' OR NOT OLD.is_reported) THEN
        UPDATE post
           SET report_count = report_count + 1,
               is_active = CASE
                   WHEN report_count + 1 >= {REPORT_DEACTIVATE_THRESHOLD} THEN FALSE
                   ELSE is_active
               END
         WHERE id = NEW.post_id;
    END IF;
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
"""

CREATE_TRIGGER = """
CREATE TRIGGER on_post_interaction_reported
AFTER INSERT OR UPDATE OF is_reported ON post_interaction
FOR EACH ROW EXECUTE FUNCTION handle_post_report();
"""


def upgrade() -> None:
    """Create users, posts and per-user interactions."""
    op.create_table(
        "app_user",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("author_id", sa.Uuid(), nullable=True),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("report_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["author_id"], ["app_user.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "post_interaction",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "vote",
            sa.Enum("up", "down", name="interaction_vote", native_enum=False, length=8),
            nullable=True,
        ),
        sa.Column("is_reported", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("post_id", "user_id", name="uq_post_interaction_post_user"),
    )
    op.create_index(
        "ix_post_interaction_post_vote",
        "post_interaction",
        ["post_id", "vote"],
    )

    if op.get_bind().dialect.name == "postgresql":
        op.execute(HANDLE_POST_REPORT)
        op.execute(CREATE_TRIGGER)


def downgrade() -> None:
    """Drop interaction tables and the report trigger."""
    if op.get_bind().dialect.name == "postgresql":
        op.execute("DROP TRIGGER IF EXISTS on_post_interaction_reported ON post_interaction")
        op.execute("DROP FUNCTION IF EXISTS handle_post_report()")
    op.drop_index("ix_post_interaction_post_vote", table_name="post_interaction")
    op.drop_table("post_interaction")
    op.drop_table("post")
    op.drop_table("app_user")
