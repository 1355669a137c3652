# src/loadout_hub/api/v1/endpoints/builds.py
"""Build feed, submission, deletion and ledger endpoints."""

from fastapi import APIRouter, Query, Response, status

from loadout_hub.api.v1.dependencies import FiltersDep, SessionDep, ViewerDep, raise_for_result
from loadout_hub.schemas.build import BuildCreate, BuildCreated, BuildPage, ProjectedBuild
from loadout_hub.schemas.vote import BookmarkState, VoteRequest, VoteState
from loadout_hub.services import builds as build_service
from loadout_hub.services import ledger

router = APIRouter(prefix="/builds", tags=["builds"])


@router.get("/", response_model=BuildPage)
async def list_builds(
    db: SessionDep,
    viewer: ViewerDep,
    filters: FiltersDep,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
) -> BuildPage:
    """List verified builds matching the feed filters."""
    return raise_for_result(build_service.list_builds(db, filters, page, page_size, viewer))


@router.post("/", response_model=BuildCreated, status_code=status.HTTP_201_CREATED)
async def create_build(payload: BuildCreate, db: SessionDep, viewer: ViewerDep) -> BuildCreated:
    """Submit a build for moderation."""
    return raise_for_result(build_service.create_build(db, payload, viewer))


@router.get("/{build_id}", response_model=ProjectedBuild)
async def get_build(build_id: int, db: SessionDep, viewer: ViewerDep) -> ProjectedBuild:
    """Get a single build by ID."""
    return raise_for_result(build_service.get_build(db, build_id, viewer))


@router.delete("/{build_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_build(build_id: int, db: SessionDep, viewer: ViewerDep) -> Response:
    """Delete a build the caller owns, or any build for staff."""
    raise_for_result(build_service.delete_build(db, build_id, viewer))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{build_id}/vote", response_model=VoteState)
async def toggle_vote(
    build_id: int,
    vote: VoteRequest,
    db: SessionDep,
    viewer: ViewerDep,
) -> VoteState:
    """Toggle the caller's up or down vote on a build."""
    return raise_for_result(ledger.toggle_vote(db, build_id, vote.direction, viewer))


@router.post("/{build_id}/bookmark", response_model=BookmarkState)
async def toggle_bookmark(build_id: int, db: SessionDep, viewer: ViewerDep) -> BookmarkState:
    """Save or unsave a build for the caller."""
    return raise_for_result(ledger.toggle_bookmark(db, build_id, viewer))
