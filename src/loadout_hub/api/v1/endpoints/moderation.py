"""Moderation queue, review decisions and admin role management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from loadout_hub.api.v1.dependencies import SessionDep, ViewerDep, raise_for_result
from loadout_hub.schemas.build import BuildPage, BuildUpdate, ProjectedBuild, StatusChange
from loadout_hub.schemas.profile import ProfileView, RoleUpdate, StreamerLinkRequest, UserSummary
from loadout_hub.services import builds as build_service
from loadout_hub.services import profiles

router = APIRouter(prefix="/moderation", tags=["moderation"])


@router.get("/queue", response_model=BuildPage)
async def get_moderation_queue(
    db: SessionDep,
    viewer: ViewerDep,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
) -> BuildPage:
    """Get builds awaiting review, newest first."""
    return raise_for_result(build_service.list_pending_builds(db, viewer, page, page_size))


@router.patch("/builds/{build_id}", response_model=ProjectedBuild)
async def edit_build(
    build_id: int,
    changes: BuildUpdate,
    db: SessionDep,
    viewer: ViewerDep,
) -> ProjectedBuild:
    """Edit a build's content during review."""
    return raise_for_result(build_service.update_build(db, build_id, changes, viewer))


@router.post("/builds/{build_id}/status", response_model=ProjectedBuild)
async def decide_build(
    build_id: int,
    decision: StatusChange,
    db: SessionDep,
    viewer: ViewerDep,
) -> ProjectedBuild:
    """Verify or reject a pending build, applying any review edits first."""
    return raise_for_result(
        build_service.set_build_status(
            db, build_id, decision.status, viewer, changes=decision.changes
        )
    )


@router.post("/users/{user_id}/roles", response_model=ProfileView)
async def set_roles(
    user_id: str,
    roles: RoleUpdate,
    db: SessionDep,
    viewer: ViewerDep,
) -> ProfileView:
    """Change a user's role flags (admins only)."""
    return raise_for_result(profiles.set_roles(db, viewer, user_id, roles))


@router.post("/streamers/link", response_model=UserSummary)
async def link_streamer(
    request: StreamerLinkRequest,
    db: SessionDep,
    viewer: ViewerDep,
) -> UserSummary:
    """Transfer a placeholder streamer profile to a real account (admins only)."""
    return raise_for_result(
        profiles.link_streamer_account(db, viewer, request.placeholder_username, request.real_user_id)
    )
