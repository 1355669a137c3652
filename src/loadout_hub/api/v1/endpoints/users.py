"""Profile pages, self-service edits and user lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.orm import Session

from loadout_hub.api.v1.dependencies import FiltersDep, SessionDep, ViewerDep, raise_for_result
from loadout_hub.models import Profile
from loadout_hub.schemas.build import BuildPage
from loadout_hub.schemas.profile import ProfileUpdate, ProfileView, UserSummary
from loadout_hub.services import builds as build_service
from loadout_hub.services import profiles

router = APIRouter(prefix="/users", tags=["users"])


def _get_profile_or_404(db: Session, username: str) -> Profile:
    profile = profiles.find_profile_by_username(db, username)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return profile


@router.get("/search", response_model=list[UserSummary])
async def search_users(db: SessionDep, q: str = Query("")) -> list[UserSummary]:
    """Autocomplete usernames; queries shorter than two characters return nothing."""
    return raise_for_result(profiles.search_users(db, q))


@router.get("/streamers", response_model=list[UserSummary])
async def list_streamers(db: SessionDep, randomize: bool = Query(False)) -> list[UserSummary]:
    """List streamer profiles for the feed sidebar."""
    return raise_for_result(profiles.list_streamers(db, randomize=randomize))


@router.patch("/me", response_model=ProfileView)
async def update_me(payload: ProfileUpdate, db: SessionDep, viewer: ViewerDep) -> ProfileView:
    """Update the caller's username, display name, avatar and bio."""
    return raise_for_result(profiles.update_profile(db, viewer, payload))


@router.get("/{username}", response_model=ProfileView)
async def get_profile(username: str, db: SessionDep, viewer: ViewerDep) -> ProfileView:
    """Get a public profile with build, upvote and bookmark totals."""
    return raise_for_result(profiles.get_profile(db, username, viewer))


@router.get("/{username}/builds", response_model=BuildPage)
async def list_user_builds(
    username: str,
    db: SessionDep,
    viewer: ViewerDep,
    filters: FiltersDep,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
) -> BuildPage:
    """List a user's uploads; unpublished ones only for the owner and staff."""
    profile = _get_profile_or_404(db, username)
    return raise_for_result(
        build_service.list_user_builds(db, profile.id, filters, page, page_size, viewer)
    )


@router.get("/{username}/bookmarks", response_model=BuildPage)
async def list_user_bookmarks(
    username: str,
    db: SessionDep,
    viewer: ViewerDep,
    filters: FiltersDep,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
) -> BuildPage:
    """List the builds a user has saved."""
    profile = _get_profile_or_404(db, username)
    return raise_for_result(
        build_service.list_user_bookmarks(db, profile.id, filters, page, page_size, viewer)
    )
