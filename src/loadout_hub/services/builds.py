"""Build listings, submission, moderation decisions and deletion."""

from __future__ import annotations

import logging
import math
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from loadout_hub.core.settings import settings
from loadout_hub.models import Bookmark, Build, BuildStatus, BuildVote, Profile, Weapon
from loadout_hub.schemas.build import (
    STAT_FIELDS,
    BuildCreate,
    BuildCreated,
    BuildPage,
    BuildUpdate,
    ProjectedBuild,
)
from loadout_hub.schemas.filters import BuildFilters
from loadout_hub.services.errors import (
    NotFound,
    Unauthorized,
    ValidationError,
    service_action,
)
from loadout_hub.services.filters import FilterScope, compile_filters
from loadout_hub.services.permissions import Viewer, require_staff, require_user
from loadout_hub.services.projection import project_page

logger = logging.getLogger(__name__)

DECISION_STATUSES = (BuildStatus.VERIFIED.value, BuildStatus.REJECTED.value)


def _as_filters(filters: BuildFilters | dict[str, Any] | None) -> BuildFilters:
    if filters is None:
        return BuildFilters()
    if isinstance(filters, BuildFilters):
        return filters
    return BuildFilters.model_validate(filters)


def _run_listing(
    db: Session,
    filters: BuildFilters,
    scope: FilterScope,
    page: int,
    page_size: int | None,
    viewer: Viewer,
) -> BuildPage:
    page = max(page or 1, 1)
    size = settings.clamp_page_size(page_size)

    compiled = compile_filters(db, filters, scope)
    if compiled.empty:
        return BuildPage(builds=[], total_count=0, page=page, page_size=size, total_pages=0)

    total = db.scalar(compiled.count_statement) or 0
    rows = db.execute(compiled.page(page, size)).all()
    builds = project_page(db, list(rows), viewer)

    return BuildPage(
        builds=builds,
        total_count=total,
        page=page,
        page_size=size,
        total_pages=math.ceil(total / size),
    )


@service_action("list builds")
def list_builds(
    db: Session,
    filters: BuildFilters | dict[str, Any] | None = None,
    page: int = 1,
    page_size: int | None = None,
    viewer: Viewer | None = None,
) -> BuildPage:
    """Return verified builds matching ``filters`` for the public feed."""
    return _run_listing(
        db, _as_filters(filters), FilterScope.public(), page, page_size, viewer or Viewer.anonymous()
    )


@service_action("list user builds")
def list_user_builds(
    db: Session,
    user_id: str,
    filters: BuildFilters | dict[str, Any] | None = None,
    page: int = 1,
    page_size: int | None = None,
    viewer: Viewer | None = None,
) -> BuildPage:
    """Return builds uploaded by ``user_id``.

    Pending and rejected uploads are included only for the author and staff.
    """
    viewer = viewer or Viewer.anonymous()
    scope = FilterScope.author(user_id, include_unpublished=viewer.can_view_unpublished(user_id))
    return _run_listing(db, _as_filters(filters), scope, page, page_size, viewer)


@service_action("list user bookmarks")
def list_user_bookmarks(
    db: Session,
    user_id: str,
    filters: BuildFilters | dict[str, Any] | None = None,
    page: int = 1,
    page_size: int | None = None,
    viewer: Viewer | None = None,
) -> BuildPage:
    """Return builds saved by ``user_id``, most recently saved first by default."""
    viewer = viewer or Viewer.anonymous()
    scope = FilterScope.bookmarks(user_id, include_unpublished=viewer.can_view_unpublished(user_id))
    return _run_listing(db, _as_filters(filters), scope, page, page_size, viewer)


@service_action("list pending builds")
def list_pending_builds(
    db: Session,
    viewer: Viewer,
    page: int = 1,
    page_size: int | None = None,
) -> BuildPage:
    """Return the moderation queue, newest submissions first."""
    require_staff(viewer)
    return _run_listing(db, BuildFilters(), FilterScope.moderation(), page, page_size, viewer)


def _fetch_projected(db: Session, build_id: int, viewer: Viewer) -> ProjectedBuild:
    statement = (
        select(Build, Profile, Weapon)
        .outerjoin(Profile, Profile.id == Build.user_id)
        .outerjoin(Weapon, Weapon.id == Build.weapon_id)
        .where(Build.id == build_id)
    )
    row = db.execute(statement).first()
    if row is None:
        raise NotFound("Build not found")
    build = row[0]
    if build.status != BuildStatus.VERIFIED.value and not viewer.can_view_unpublished(build.user_id):
        raise NotFound("Build not found")
    return project_page(db, [row], viewer)[0]


@service_action("get build")
def get_build(db: Session, build_id: int, viewer: Viewer | None = None) -> ProjectedBuild:
    """Return one build; unpublished builds look missing to outsiders."""
    return _fetch_projected(db, build_id, viewer or Viewer.anonymous())


def _resolve_weapon(db: Session, payload: BuildCreate) -> Weapon:
    weapon: Weapon | None = None
    if payload.weapon_id is not None:
        weapon = db.get(Weapon, payload.weapon_id)
    elif payload.weapon_name:
        weapon = (
            db.query(Weapon)
            .filter(func.lower(Weapon.name) == payload.weapon_name.strip().lower())
            .first()
        )
    if weapon is None:
        raise NotFound("Weapon not found")
    return weapon


def _resolve_author(db: Session, payload: BuildCreate, viewer: Viewer, user_id: str) -> str:
    if not payload.author_id or payload.author_id == user_id:
        return user_id
    if not (viewer.is_admin or viewer.can_post_as_streamer):
        raise Unauthorized("You are not allowed to post on behalf of another user.")
    author = db.get(Profile, payload.author_id)
    if author is None or not author.is_streamer:
        raise NotFound("Streamer profile not found")
    return author.id


@service_action("create build")
def create_build(
    db: Session,
    payload: BuildCreate | dict[str, Any],
    viewer: Viewer,
) -> BuildCreated:
    """Submit a new build; it enters the moderation queue as ``pending``."""
    user_id = require_user(viewer)
    if not isinstance(payload, BuildCreate):
        payload = BuildCreate.model_validate(payload)

    weapon = _resolve_weapon(db, payload)
    author_id = _resolve_author(db, payload, viewer, user_id)

    build = Build(
        user_id=author_id,
        weapon_id=weapon.id,
        weapon_name=weapon.name,
        weapon_image=weapon.image_url,
        title=payload.title,
        description=payload.description,
        build_code=payload.build_code,
        image_url=payload.image_url,
        price=payload.price,
        tags=list(payload.tags),
        status=BuildStatus.PENDING.value,
        upvotes=0,
        downvotes=0,
        **payload.stats.model_dump(),
    )
    db.add(build)
    db.commit()
    db.refresh(build)

    logger.info("Build %s submitted by %s for %s", build.id, user_id, author_id)
    return BuildCreated(id=build.id, status=build.status)


def _apply_changes(build: Build, changes: BuildUpdate) -> None:
    data = changes.model_dump(exclude_unset=True)
    for field_name in ("title", "build_code"):
        if field_name in data and (data[field_name] is None or not data[field_name].strip()):
            raise ValidationError(f"{field_name}: must not be blank")
    for field_name, value in data.items():
        if value is None and (field_name in STAT_FIELDS or field_name in ("price", "tags")):
            continue
        setattr(build, field_name, value)


def _get_build_or_404(db: Session, build_id: int) -> Build:
    build = db.query(Build).filter(Build.id == build_id).first()
    if build is None:
        raise NotFound("Build not found")
    return build


@service_action("update build")
def update_build(
    db: Session,
    build_id: int,
    changes: BuildUpdate | dict[str, Any],
    viewer: Viewer,
) -> ProjectedBuild:
    """Edit build content during review; staff only."""
    require_staff(viewer)
    if not isinstance(changes, BuildUpdate):
        changes = BuildUpdate.model_validate(changes)

    build = _get_build_or_404(db, build_id)
    _apply_changes(build, changes)
    db.commit()

    return _fetch_projected(db, build_id, viewer)


@service_action("set build status")
def set_build_status(
    db: Session,
    build_id: int,
    status: str,
    viewer: Viewer,
    changes: BuildUpdate | dict[str, Any] | None = None,
) -> ProjectedBuild:
    """Verify or reject a pending build, optionally applying review edits first."""
    moderator_id = require_staff(viewer)
    if status not in DECISION_STATUSES:
        raise ValidationError("Status must be 'verified' or 'rejected'.")
    if changes is not None and not isinstance(changes, BuildUpdate):
        changes = BuildUpdate.model_validate(changes)

    build = _get_build_or_404(db, build_id)
    if build.status == status:
        # Same decision again: keep the review edits that came with it.
        if changes is not None:
            _apply_changes(build, changes)
            db.commit()
        return _fetch_projected(db, build_id, viewer)
    if build.status != BuildStatus.PENDING.value:
        raise ValidationError(f"Build is already {build.status}.")

    if changes is not None:
        _apply_changes(build, changes)
    build.status = status
    db.commit()

    logger.info("Build %s marked %s by %s", build_id, status, moderator_id)
    return _fetch_projected(db, build_id, viewer)


@service_action("delete build")
def delete_build(db: Session, build_id: int, viewer: Viewer) -> None:
    """Delete a build together with its votes and bookmarks."""
    user_id = require_user(viewer)
    build = _get_build_or_404(db, build_id)
    if build.status != BuildStatus.VERIFIED.value and not viewer.can_view_unpublished(build.user_id):
        raise NotFound("Build not found")
    if not viewer.can_delete(build.user_id):
        raise Unauthorized("You can only delete your own builds.")

    db.query(BuildVote).filter(BuildVote.build_id == build_id).delete(synchronize_session=False)
    db.query(Bookmark).filter(Bookmark.build_id == build_id).delete(synchronize_session=False)
    db.delete(build)
    db.commit()

    logger.info("Build %s deleted by %s", build_id, user_id)
