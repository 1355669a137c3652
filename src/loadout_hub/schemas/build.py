"""Build-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

STREAMER_BUILD_TAG = "Streamer Build"


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Strip, drop blanks and derived tags, and de-duplicate keeping first occurrence."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in tags or []:
        tag = raw.strip()
        if not tag or tag == STREAMER_BUILD_TAG or tag in seen:
            continue
        seen.add(tag)
        result.append(tag)
    return result


class BuildStats(BaseModel):
    """The eight stat columns of a build, grouped."""

    v_recoil_control: int = Field(..., ge=0, le=100)
    h_recoil_control: int = Field(..., ge=0, le=100)
    ergonomics: int = Field(..., ge=0, le=100)
    weapon_stability: int = Field(..., ge=0, le=100)
    accuracy: int = Field(..., ge=0, le=100)
    hipfire_stability: int = Field(..., ge=0, le=100)
    effective_range: int = Field(..., ge=0)
    muzzle_velocity: int = Field(..., ge=0)


STAT_FIELDS: tuple[str, ...] = tuple(BuildStats.model_fields)


class BuildCreate(BaseModel):
    """Schema for submitting a new build for moderation."""

    title: str = Field(..., min_length=1, max_length=120)
    weapon_id: int | None = Field(None, description="Weapon reference")
    weapon_name: str | None = Field(None, description="Weapon name, used when no id is sent")
    build_code: str = Field(..., min_length=1, description="Opaque in-game build code")
    price: int = Field(..., ge=0, description="Estimated price of the build")
    stats: BuildStats
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = Field(None, description="Public URL of the uploaded screenshot")
    tags: list[str] = Field(default_factory=list)
    author_id: str | None = Field(
        None,
        description="Streamer profile to attribute the build to (admins only)",
    )

    @field_validator("title", "build_code")
    @classmethod
    def _require_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[str]) -> list[str]:
        return normalize_tags(value)

    @model_validator(mode="after")
    def _require_weapon(self) -> BuildCreate:
        if self.weapon_id is None and not (self.weapon_name and self.weapon_name.strip()):
            raise ValueError("weapon_id or weapon_name is required")
        return self


class BuildUpdate(BaseModel):
    """Partial content edit applied by moderators during review."""

    title: str | None = Field(None, min_length=1, max_length=120)
    description: str | None = Field(None, max_length=5000)
    build_code: str | None = Field(None, min_length=1)
    image_url: str | None = None
    price: int | None = Field(None, ge=0)
    tags: list[str] | None = None

    v_recoil_control: int | None = Field(None, ge=0, le=100)
    h_recoil_control: int | None = Field(None, ge=0, le=100)
    ergonomics: int | None = Field(None, ge=0, le=100)
    weapon_stability: int | None = Field(None, ge=0, le=100)
    accuracy: int | None = Field(None, ge=0, le=100)
    hipfire_stability: int | None = Field(None, ge=0, le=100)
    effective_range: int | None = Field(None, ge=0)
    muzzle_velocity: int | None = Field(None, ge=0)

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return normalize_tags(value)


class StatusChange(BaseModel):
    """Moderator decision on a pending build, optionally with review edits."""

    status: Literal["verified", "rejected"]
    changes: BuildUpdate | None = None


class BuildCreated(BaseModel):
    """Identifier of a freshly submitted build."""

    id: int
    status: str


class ProjectedBuild(BaseModel):
    """Viewer-annotated build returned by every listing path."""

    id: int
    title: str
    weapon_id: int
    weapon_name: str
    weapon_image: str | None
    image_url: str | None
    description: str | None
    price: int
    build_code: str
    stats: BuildStats
    tags: list[str]
    upvotes: int
    downvotes: int
    author: str
    author_id: str
    status: str
    created_at: datetime
    user_vote: Literal["up", "down"] | None = None
    is_bookmarked: bool = False
    can_delete: bool = False
    can_edit: bool = False

    model_config = ConfigDict(from_attributes=True)


class BuildPage(BaseModel):
    """One page of projected builds plus the unpaginated total."""

    builds: list[ProjectedBuild]
    total_count: int
    page: int
    page_size: int
    total_pages: int
