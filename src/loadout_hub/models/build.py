"""SQLAlchemy model for user-submitted weapon builds."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from loadout_hub.db.session import Base
from loadout_hub.db.time import utcnow


class BuildStatus(str, enum.Enum):
    """Moderation lifecycle of a build."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


BUILD_STATUSES = tuple(status.value for status in BuildStatus)


class Build(Base):
    """Weapon configuration shared by a user.

    ``upvotes``/``downvotes`` cache the ledger counts in ``build_vote`` and are
    rewritten from a full count after every vote mutation.
    """

    __tablename__ = "build"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'verified', 'rejected')",
            name="ck_build_status",
        ),
        CheckConstraint("price >= 0", name="ck_build_price"),
        Index("ix_build_status_created_at", "status", "created_at"),
        Index("ix_build_user_id", "user_id"),
        Index("ix_build_weapon_id", "weapon_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profile.id", ondelete="CASCADE"),
        nullable=False,
    )
    weapon_id: Mapped[int] = mapped_column(Integer, ForeignKey("weapon.id"), nullable=False)

    # Denormalized at write time so listings do not need the weapon join.
    weapon_name: Mapped[str] = mapped_column(String(120), nullable=False)
    weapon_image: Mapped[str | None] = mapped_column(Text, nullable=True)

    title: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    build_code: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    v_recoil_control: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    h_recoil_control: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ergonomics: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weapon_stability: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    accuracy: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hipfire_stability: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    effective_range: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    muzzle_velocity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Stored tags only; derived tags such as "Streamer Build" are never written.
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=BuildStatus.PENDING.value,
    )
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    downvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
