"""initial schema

Revision ID: 5c2e9a41d7b3
Revises:
Create Date: 2026-10-19 09:12:44.318205

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c2e9a41d7b3"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create profiles, weapons, builds and the vote/bookmark ledgers."""
    op.create_table(
        "profile",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=30), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("is_moderator", sa.Boolean(), nullable=False),
        sa.Column("is_streamer", sa.Boolean(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False),
        sa.Column("is_supporter", sa.Boolean(), nullable=False),
        sa.Column("can_post_as_streamer", sa.Boolean(), nullable=False),
        sa.Column("last_username_change", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
    )
    op.create_table(
        "weapon",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("category", sa.String(length=60), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_weapon_category", "weapon", ["category"])
    op.create_table(
        "build",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("weapon_id", sa.Integer(), nullable=False),
        sa.Column("weapon_name", sa.String(length=120), nullable=False),
        sa.Column("weapon_image", sa.Text(), nullable=True),
        sa.Column("title", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("build_code", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("v_recoil_control", sa.Integer(), nullable=False),
        sa.Column("h_recoil_control", sa.Integer(), nullable=False),
        sa.Column("ergonomics", sa.Integer(), nullable=False),
        sa.Column("weapon_stability", sa.Integer(), nullable=False),
        sa.Column("accuracy", sa.Integer(), nullable=False),
        sa.Column("hipfire_stability", sa.Integer(), nullable=False),
        sa.Column("effective_range", sa.Integer(), nullable=False),
        sa.Column("muzzle_velocity", sa.Integer(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False),
        sa.Column("downvotes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'verified', 'rejected')",
            name="ck_build_status",
        ),
        sa.CheckConstraint("price >= 0", name="ck_build_price"),
        sa.ForeignKeyConstraint(["user_id"], ["profile.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["weapon_id"], ["weapon.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_build_status_created_at", "build", ["status", "created_at"])
    op.create_index("ix_build_user_id", "build", ["user_id"])
    op.create_index("ix_build_weapon_id", "build", ["weapon_id"])
    op.create_table(
        "build_vote",
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("build_id", sa.Integer(), nullable=False),
        sa.Column("vote_type", sa.String(length=4), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("vote_type IN ('up', 'down')", name="ck_build_vote_type"),
        sa.ForeignKeyConstraint(["build_id"], ["build.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profile.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "build_id"),
    )
    op.create_index("ix_build_vote_build_id", "build_vote", ["build_id"])
    op.create_table(
        "bookmark",
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("build_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["build_id"], ["build.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["profile.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("user_id", "build_id"),
    )
    op.create_index("ix_bookmark_build_id", "bookmark", ["build_id"])


def downgrade() -> None:
    """Drop every table created by :func:`upgrade`."""
    op.drop_index("ix_bookmark_build_id", table_name="bookmark")
    op.drop_table("bookmark")
    op.drop_index("ix_build_vote_build_id", table_name="build_vote")
    op.drop_table("build_vote")
    op.drop_index("ix_build_weapon_id", table_name="build")
    op.drop_index("ix_build_user_id", table_name="build")
    op.drop_index("ix_build_status_created_at", table_name="build")
    op.drop_table("build")
    op.drop_index("ix_weapon_category", table_name="weapon")
    op.drop_table("weapon")
    op.drop_table("profile")
