"""SQLAlchemy model for user profiles and their role flags."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from loadout_hub.db.session import Base
from loadout_hub.db.time import utcnow


class Profile(Base):
    """Public profile attached to an identity issued by the auth provider.

    Role flags are admin-managed; the profile owner can only change the
    username, display name, avatar and bio.
    """

    __tablename__ = "profile"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    username: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_moderator: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_streamer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_supporter: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Allows uploading builds on behalf of streamer profiles.
    can_post_as_streamer: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    last_username_change: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
