"""Vote and bookmark Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field


class VoteRequest(BaseModel):
    """Schema for toggling a vote on a build."""

    direction: Literal["up", "down"] = Field(..., description="'up' or 'down'")


class VoteState(BaseModel):
    """Ledger state for the caller after a vote toggle."""

    build_id: int
    user_vote: Literal["up", "down"] | None
    upvotes: int
    downvotes: int


class BookmarkState(BaseModel):
    """Ledger state for the caller after a bookmark toggle."""

    build_id: int
    is_bookmarked: bool
