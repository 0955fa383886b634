"""Initial schema - publishing accounts and scheduled posts

Revision ID: 001
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "publishing_accounts",
        sa.Column("id", sa.String(255), primary_key=True),
        sa.Column("owner_user_id", sa.String(255), nullable=False, index=True),
        sa.Column("provider", sa.String(50), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=True),
        sa.Column("access_secret", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "scheduled_posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_user_id", sa.String(255), nullable=False),
        sa.Column(
            "publishing_account_id",
            sa.String(255),
            sa.ForeignKey("publishing_accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("media_refs", sa.JSON(), nullable=False),
        sa.Column("queue_job_id", sa.String(255), nullable=True),
        sa.Column("external_post_id", sa.String(255), nullable=True, index=True),
        sa.Column("scheduled_at_unix", sa.BigInteger(), nullable=False),
        sa.Column("is_scheduled", sa.Boolean(), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "NOT (is_scheduled AND is_published)",
            name="ck_scheduled_posts_single_state",
        ),
        sa.CheckConstraint(
            "(queue_job_id IS NOT NULL) = (is_scheduled AND NOT is_published)",
            name="ck_scheduled_posts_job_when_pending",
        ),
        sa.CheckConstraint(
            "(external_post_id IS NOT NULL) = is_published",
            name="ck_scheduled_posts_external_id_when_published",
        ),
    )

    # Published history per owner, newest first by publish time
    op.create_index(
        "ix_scheduled_posts_owner_published_updated",
        "scheduled_posts",
        ["owner_user_id", "is_published", "updated_at"],
    )

    # Pending posts by fire time
    op.create_index(
        "ix_scheduled_posts_scheduled_time",
        "scheduled_posts",
        ["is_scheduled", "scheduled_at_unix"],
    )


def downgrade() -> None:
    op.drop_index("ix_scheduled_posts_scheduled_time", table_name="scheduled_posts")
    op.drop_index("ix_scheduled_posts_owner_published_updated", table_name="scheduled_posts")
    op.drop_table("scheduled_posts")
    op.drop_table("publishing_accounts")
