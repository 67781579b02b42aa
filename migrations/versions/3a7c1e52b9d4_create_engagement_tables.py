"""create engagement tables

Revision ID: 3a7c1e52b9d4
Revises:
Create Date: 2026-10-19 10:12:44.305118

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3a7c1e52b9d4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("username", sa.String(50), nullable=True),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "videos",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("title", sa.String(200), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration", sa.Float(), nullable=False, server_default="0"),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dislike_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("star_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_videos_user_id", "videos", ["user_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("video_id", sa.String(36), sa.ForeignKey("videos.id"), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "parent_comment_id",
            sa.String(36),
            sa.ForeignKey("comments.id"),
            nullable=True,
        ),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_edited", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("visible", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dislike_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_comments_video_id", "comments", ["video_id"])
    op.create_index("ix_comments_user_id", "comments", ["user_id"])
    op.create_index("ix_comments_parent_comment_id", "comments", ["parent_comment_id"])

    op.create_table(
        "video_reactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("video_id", sa.String(36), sa.ForeignKey("videos.id"), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reaction_type", sa.String(20), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "video_id", "user_id", "reaction_type", name="unique_video_reaction"
        ),
    )
    op.create_index("ix_video_reactions_id", "video_reactions", ["id"])
    op.create_index("ix_video_reactions_video_id", "video_reactions", ["video_id"])
    op.create_index("ix_video_reactions_user_id", "video_reactions", ["user_id"])

    op.create_table(
        "comment_reactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "comment_id", sa.String(36), sa.ForeignKey("comments.id"), nullable=False
        ),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reaction_type", sa.String(20), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "comment_id", "user_id", "reaction_type", name="unique_comment_reaction"
        ),
    )
    op.create_index("ix_comment_reactions_id", "comment_reactions", ["id"])
    op.create_index(
        "ix_comment_reactions_comment_id", "comment_reactions", ["comment_id"]
    )
    op.create_index("ix_comment_reactions_user_id", "comment_reactions", ["user_id"])

    op.create_table(
        "engagement_rate_limits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("target_type", sa.String(20), nullable=False),
        sa.Column("target_id", sa.String(36), nullable=False),
        sa.Column("action_type", sa.String(20), nullable=False),
        sa.Column("last_action_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "user_id",
            "target_type",
            "target_id",
            "action_type",
            name="unique_engagement_rate_limit",
        ),
    )
    op.create_index("ix_engagement_rate_limits_id", "engagement_rate_limits", ["id"])
    op.create_index(
        "ix_engagement_rate_limits_user_id", "engagement_rate_limits", ["user_id"]
    )
    op.create_index(
        "ix_engagement_rate_limits_last_action_at",
        "engagement_rate_limits",
        ["last_action_at"],
    )

    op.create_table(
        "view_rate_limits",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ip_address", sa.String(64), nullable=False),
        sa.Column("video_id", sa.String(36), sa.ForeignKey("videos.id"), nullable=False),
        sa.Column("last_view_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("ip_address", "video_id", name="unique_view_rate_limit"),
    )
    op.create_index("ix_view_rate_limits_id", "view_rate_limits", ["id"])
    op.create_index("ix_view_rate_limits_video_id", "view_rate_limits", ["video_id"])
    op.create_index(
        "ix_view_rate_limits_last_view_at", "view_rate_limits", ["last_view_at"]
    )


def downgrade() -> None:
    op.drop_table("view_rate_limits")
    op.drop_table("engagement_rate_limits")
    op.drop_table("comment_reactions")
    op.drop_table("video_reactions")
    op.drop_table("comments")
    op.drop_table("videos")
    op.drop_table("users")
