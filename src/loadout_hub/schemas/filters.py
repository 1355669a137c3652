"""Request-scoped filter set for build listings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

SortKey = Literal["most-voted", "recent", "price-low", "price-high"]


class BuildFilters(BaseModel):
    """Filters reconstructed from request parameters; never persisted."""

    query: str = Field("", description="Free-text search over title, weapon and author")
    category: str = Field("all", description="Category slug or 'all'")
    weapons: list[str] = Field(default_factory=list, description="Weapon slugs")
    streamer: str = Field("all", description="Streamer username, 'all' or 'all-streamers'")
    tag: str = Field("all", description="Tag slug or 'all'")
    sort_by: SortKey | None = Field(None, description="Sort key")
    min_price: int | None = Field(None, ge=0)
    max_price: int | None = Field(None, ge=0)

    @field_validator("query", "category", "streamer", "tag", mode="before")
    @classmethod
    def _strip(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("weapons", mode="before")
    @classmethod
    def _split_weapons(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list):
            slugs: list[str] = []
            for item in value:
                slugs.extend(part.strip().lower() for part in str(item).split(",") if part.strip())
            return slugs
        return value

    @field_validator("sort_by", mode="before")
    @classmethod
    def _unknown_sort_is_default(cls, value: object) -> object:
        if value in ("most-voted", "recent", "price-low", "price-high"):
            return value
        return None
