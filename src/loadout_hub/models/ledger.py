"""Per-user vote and bookmark ledgers for builds."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from loadout_hub.db.session import Base
from loadout_hub.db.time import utcnow

VOTE_UP = "up"
VOTE_DOWN = "down"
VOTE_TYPES = (VOTE_UP, VOTE_DOWN)


class BuildVote(Base):
    """A user's single active vote on a build.

    The composite primary key keeps at most one row per (user, build); these
    rows are the source of truth for the cached counters on ``build``.
    """

    __tablename__ = "build_vote"
    __table_args__ = (
        CheckConstraint("vote_type IN ('up', 'down')", name="ck_build_vote_type"),
        Index("ix_build_vote_build_id", "build_id"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        primary_key=True,
    )
    build_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("build.id", ondelete="CASCADE"),
        primary_key=True,
    )
    vote_type: Mapped[str] = mapped_column(String(4), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Bookmark(Base):
    """Existence toggle marking a build as saved by a user."""

    __tablename__ = "bookmark"
    __table_args__ = (Index("ix_bookmark_build_id", "build_id"),)

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        primary_key=True,
    )
    build_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("build.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
