"""Profile-related Pydantic schemas."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,30}$")


class ProfileStats(BaseModel):
    """Aggregate counters shown on a profile page."""

    total_builds: int = 0
    total_upvotes: int = 0
    total_bookmarks: int = 0


class ProfileView(BaseModel):
    """Public profile information."""

    id: str
    username: str
    display_name: str | None
    avatar_url: str | None
    bio: str | None
    is_admin: bool
    is_moderator: bool
    is_streamer: bool
    is_verified: bool
    is_supporter: bool
    created_at: datetime
    last_username_change: datetime | None = None
    stats: ProfileStats = Field(default_factory=ProfileStats)

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Compact profile used by search results and streamer lists."""

    id: str
    username: str
    display_name: str | None = None
    avatar_url: str | None = None
    is_verified: bool = False
    is_streamer: bool = False

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Self-service profile fields."""

    username: str = Field(..., min_length=3, max_length=30)
    display_name: str | None = Field(None, max_length=30)
    avatar_url: str | None = None
    bio: str | None = Field(None, max_length=500)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Usernames are letters, digits and underscores only."""
        v = v.strip()
        if not USERNAME_PATTERN.match(v):
            raise ValueError("Username may only contain letters, numbers and underscores")
        return v


class RoleUpdate(BaseModel):
    """Admin-managed role flags; omitted fields are left unchanged."""

    is_admin: bool | None = None
    is_moderator: bool | None = None
    is_streamer: bool | None = None
    is_verified: bool | None = None
    is_supporter: bool | None = None
    can_post_as_streamer: bool | None = None


class StreamerLinkRequest(BaseModel):
    """Move a placeholder streamer profile onto a real account."""

    placeholder_username: str = Field(..., min_length=1)
    real_user_id: str = Field(..., min_length=1)
