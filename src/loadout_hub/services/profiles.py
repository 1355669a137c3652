"""Profile lookup, self-service edits and admin role management."""

from __future__ import annotations

import logging
import random
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from loadout_hub.core.settings import settings
from loadout_hub.db.time import utcnow
from loadout_hub.models import Bookmark, Build, BuildStatus, BuildVote, Profile
from loadout_hub.schemas.profile import (
    ProfileStats,
    ProfileUpdate,
    ProfileView,
    RoleUpdate,
    UserSummary,
)
from loadout_hub.services.errors import NotFound, ValidationError, service_action
from loadout_hub.services.ledger import count_bookmarks, recompute_vote_counts
from loadout_hub.services.permissions import Viewer, require_admin, require_user

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 5


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def find_profile_by_username(db: Session, username: str) -> Profile | None:
    """Case-insensitive username lookup."""
    return (
        db.query(Profile)
        .filter(func.lower(Profile.username) == username.strip().lower())
        .first()
    )


def profile_stats(db: Session, profile: Profile, viewer: Viewer) -> ProfileStats:
    """Aggregate build, upvote and bookmark totals for a profile page."""
    query = db.query(func.count(Build.id), func.coalesce(func.sum(Build.upvotes), 0)).filter(
        Build.user_id == profile.id
    )
    if not viewer.can_view_unpublished(profile.id):
        query = query.filter(Build.status == BuildStatus.VERIFIED.value)
    total_builds, total_upvotes = query.one()
    return ProfileStats(
        total_builds=total_builds or 0,
        total_upvotes=int(total_upvotes or 0),
        total_bookmarks=count_bookmarks(db, profile.id),
    )


def _to_view(db: Session, profile: Profile, viewer: Viewer) -> ProfileView:
    view = ProfileView.model_validate(profile)
    view.stats = profile_stats(db, profile, viewer)
    return view


@service_action("get profile")
def get_profile(db: Session, username: str, viewer: Viewer | None = None) -> ProfileView:
    """Return the public profile for ``username`` with its stats."""
    profile = find_profile_by_username(db, username)
    if profile is None:
        raise NotFound("User not found")
    return _to_view(db, profile, viewer or Viewer.anonymous())


@service_action("update profile")
def update_profile(
    db: Session,
    viewer: Viewer,
    payload: ProfileUpdate | dict[str, Any],
) -> ProfileView:
    """Apply self-service profile changes for the viewer.

    The display name may only differ from the username in capitalisation.
    Username changes are rate limited and must stay unique ignoring case.
    """
    user_id = require_user(viewer)
    if not isinstance(payload, ProfileUpdate):
        payload = ProfileUpdate.model_validate(payload)

    profile = db.get(Profile, user_id)
    if profile is None:
        raise NotFound("User not found")

    display_name = payload.display_name if payload.display_name is not None else payload.username
    if display_name.lower() != payload.username.lower():
        raise ValidationError(
            "Display Name must match your Username (only capitalization changes allowed)."
        )

    username_changed = payload.username != profile.username
    if username_changed:
        if profile.last_username_change is not None:
            days_passed = (utcnow() - _as_utc(profile.last_username_change)).days
            cooldown = settings.username_change_cooldown_days
            if days_passed < cooldown:
                raise ValidationError(
                    f"You can change your username again in {cooldown - days_passed} days."
                )
        existing = find_profile_by_username(db, payload.username)
        if existing is not None and existing.id != profile.id:
            raise ValidationError("Username is already taken.")
        profile.username = payload.username
        profile.last_username_change = utcnow()

    profile.display_name = display_name
    for field_name in ("avatar_url", "bio"):
        if field_name in payload.model_fields_set:
            setattr(profile, field_name, getattr(payload, field_name))
    db.commit()
    db.refresh(profile)

    if username_changed:
        logger.info("Profile %s renamed to %s", profile.id, profile.username)
    return _to_view(db, profile, viewer)


@service_action("search users")
def search_users(db: Session, query: str, limit: int = SEARCH_LIMIT) -> list[UserSummary]:
    """Substring username search; streamers are listed first."""
    term = (query or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        return []
    profiles = (
        db.query(Profile)
        .filter(Profile.username.icontains(term, autoescape=True))
        .order_by(Profile.is_streamer.desc(), Profile.username.asc())
        .limit(limit)
        .all()
    )
    return [UserSummary.model_validate(profile) for profile in profiles]


@service_action("list streamers")
def list_streamers(db: Session, randomize: bool = False) -> list[UserSummary]:
    """Return streamer profiles ordered by username, or shuffled."""
    profiles = (
        db.query(Profile)
        .filter(Profile.is_streamer.is_(True))
        .order_by(Profile.username.asc())
        .all()
    )
    streamers = [UserSummary.model_validate(profile) for profile in profiles]
    if randomize:
        random.shuffle(streamers)
    return streamers


@service_action("set roles")
def set_roles(
    db: Session,
    viewer: Viewer,
    user_id: str,
    roles: RoleUpdate | dict[str, Any],
) -> ProfileView:
    """Update role flags on a profile; admin only."""
    admin_id = require_admin(viewer)
    if not isinstance(roles, RoleUpdate):
        roles = RoleUpdate.model_validate(roles)

    profile = db.get(Profile, user_id)
    if profile is None:
        raise NotFound("User not found")

    changes = roles.model_dump(exclude_none=True)
    for field_name, value in changes.items():
        setattr(profile, field_name, value)
    db.commit()
    db.refresh(profile)

    logger.info("Roles of %s changed by %s: %s", user_id, admin_id, changes)
    return _to_view(db, profile, viewer)


@service_action("link streamer account")
def link_streamer_account(
    db: Session,
    viewer: Viewer,
    placeholder_username: str,
    real_user_id: str,
) -> UserSummary:
    """Hand a placeholder streamer profile over to a real account.

    The real profile takes the placeholder's username, avatar and streamer
    flag, and inherits its builds. The placeholder's own votes and bookmarks
    are dropped with it.
    """
    admin_id = require_admin(viewer)

    placeholder = find_profile_by_username(db, placeholder_username)
    if placeholder is None or not placeholder.is_streamer:
        raise NotFound(f"Placeholder streamer '{placeholder_username}' not found.")
    real = db.get(Profile, real_user_id)
    if real is None:
        raise NotFound("User not found")
    if real.id == placeholder.id:
        raise ValidationError("Cannot link a profile to itself.")

    username = placeholder.username
    # Release the username before the real profile claims it.
    placeholder.username = f"old_{uuid.uuid4().hex[:20]}"
    db.flush()

    real.username = username
    real.is_streamer = True
    real.avatar_url = placeholder.avatar_url
    db.query(Build).filter(Build.user_id == placeholder.id).update(
        {Build.user_id: real.id},
        synchronize_session=False,
    )

    voted_builds = [
        build_id
        for (build_id,) in db.query(BuildVote.build_id).filter(BuildVote.user_id == placeholder.id)
    ]
    db.query(BuildVote).filter(BuildVote.user_id == placeholder.id).delete(synchronize_session=False)
    db.query(Bookmark).filter(Bookmark.user_id == placeholder.id).delete(synchronize_session=False)
    for build_id in voted_builds:
        recompute_vote_counts(db, build_id)

    db.delete(placeholder)
    db.commit()
    db.refresh(real)

    logger.info("Streamer %s linked to account %s by %s", username, real.id, admin_id)
    return UserSummary.model_validate(real)

