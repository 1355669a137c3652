"""Compile listing filters into a build query.

Compilation runs in two phases. The first phase performs every auxiliary
lookup (usernames matching the text query, weapons in a category or in the
requested weapon list, the streamer's id, the set of streamer authors) because
their results decide which ids gate the main predicate. The second phase
assembles a single ``SELECT`` over ``build`` and a count over the same
unpaginated predicate.

A filter that resolves to no ids never falls back to "no filter": it pins the
query to :data:`SENTINEL_ID`, which no build can have.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import ColumnElement, Select, String, and_, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loadout_hub.models import Bookmark, Build, BuildStatus, Profile, Weapon
from loadout_hub.schemas.filters import BuildFilters
from loadout_hub.services.weapons import weapon_slug

logger = logging.getLogger(__name__)

SENTINEL_ID = -1

CATEGORY_LABELS: dict[str, str] = {
    "assault-rifle": "Assault Rifle",
    "smg": "SMG",
    "carbine": "Carbine",
    "marksman-rifle": "Marksman Rifle",
    "bolt-action-rifle": "Bolt-Action Rifle",
    "shotgun": "Shotgun",
    "lmg": "LMG",
    "pistol": "Pistol",
}

TAG_LABELS: dict[str, str] = {
    "meta": "META",
    "budget": "Budget",
    "zero-recoil": "Zero Recoil",
    "hip-fire": "Hip Fire Build",
    "troll": "Troll Build",
}

# Resolved from author flags rather than the stored tag list.
STREAMER_TAG_SLUG = "streamer"

NO_RESTRICTION = frozenset({"", "all"})
NO_STREAMER_RESTRICTION = frozenset({"", "all", "all-streamers"})


@dataclass(frozen=True)
class FilterScope:
    """Which builds a listing may draw from before user filters apply."""

    kind: str
    user_id: str | None = None
    include_unpublished: bool = False
    status: str | None = None

    @classmethod
    def public(cls) -> FilterScope:
        """Verified builds from everyone."""
        return cls(kind="public")

    @classmethod
    def author(cls, user_id: str, include_unpublished: bool = False) -> FilterScope:
        """Builds uploaded by one user."""
        return cls(kind="author", user_id=user_id, include_unpublished=include_unpublished)

    @classmethod
    def bookmarks(cls, user_id: str, include_unpublished: bool = False) -> FilterScope:
        """Builds bookmarked by one user."""
        return cls(kind="bookmarks", user_id=user_id, include_unpublished=include_unpublished)

    @classmethod
    def moderation(cls, status: str = BuildStatus.PENDING.value) -> FilterScope:
        """Builds in a given lifecycle state, for the review queue."""
        return cls(kind="moderation", status=status)


@dataclass
class ResolvedFilters:
    """Outcome of the auxiliary lookup phase.

    ``None`` means the filter was not requested; an empty set means it was
    requested and matched nothing.
    """

    search_term: str = ""
    search_author_ids: set[str] = field(default_factory=set)
    category_weapon_ids: set[int] | None = None
    listed_weapon_ids: set[int] | None = None
    streamer_ids: set[str] | None = None
    tag_author_ids: set[str] | None = None
    tag_label: str | None = None


@dataclass(frozen=True)
class CompiledQuery:
    """Executable listing query and its matching count."""

    statement: Select[Any]
    count_statement: Select[Any]
    empty: bool = False

    def page(self, page: int, page_size: int) -> Select[Any]:
        """Return the statement windowed to a 1-based page."""
        offset = (max(page, 1) - 1) * page_size
        return self.statement.offset(offset).limit(page_size)


def _sort_columns(sort_by: str | None) -> list[ColumnElement[Any]]:
    if sort_by == "most-voted":
        return [Build.upvotes.desc(), Build.created_at.desc()]
    if sort_by == "recent":
        return [Build.created_at.desc()]
    if sort_by == "price-low":
        return [Build.price.asc(), Build.upvotes.desc()]
    if sort_by == "price-high":
        return [Build.price.desc(), Build.upvotes.desc()]
    return [Build.created_at.desc()]


def tag_contains(label: str) -> ColumnElement[bool]:
    """Portable "JSON array contains this string" predicate on ``build.tags``."""
    return cast(Build.tags, String).contains(json.dumps(label), autoescape=True)


class FilterCompiler:
    """Turns a :class:`BuildFilters` set into a :class:`CompiledQuery`."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def compile(self, filters: BuildFilters, scope: FilterScope) -> CompiledQuery:
        """Resolve auxiliary ids, then build the main query and count."""
        resolved = self.resolve(filters)
        conditions, empty = self._conditions(filters, resolved, scope)

        statement = (
            select(Build, Profile, Weapon)
            .outerjoin(Profile, Profile.id == Build.user_id)
            .outerjoin(Weapon, Weapon.id == Build.weapon_id)
        )
        count_statement = select(func.count(Build.id)).select_from(Build)

        order_by = _sort_columns(filters.sort_by)
        if scope.kind == "bookmarks":
            bookmark_join = and_(Bookmark.build_id == Build.id, Bookmark.user_id == scope.user_id)
            statement = statement.join(Bookmark, bookmark_join)
            count_statement = count_statement.join(Bookmark, bookmark_join)
            if filters.sort_by is None:
                # Saved tab defaults to most recently saved first.
                order_by = [Bookmark.created_at.desc()]

        statement = statement.where(*conditions).order_by(*order_by, Build.id.desc())
        count_statement = count_statement.where(*conditions)
        return CompiledQuery(statement=statement, count_statement=count_statement, empty=empty)

    # Phase 1: auxiliary lookups

    def resolve(self, filters: BuildFilters) -> ResolvedFilters:
        """Run every lookup the main predicate depends on."""
        resolved = ResolvedFilters(search_term=filters.query)

        if filters.query:
            resolved.search_author_ids = self._lookup(
                "username search",
                lambda: self._usernames_matching(filters.query),
            )

        if filters.category.lower() not in NO_RESTRICTION:
            resolved.category_weapon_ids = self._lookup(
                "category weapons",
                lambda: self._weapons_in_category(filters.category),
            )

        if filters.weapons:
            resolved.listed_weapon_ids = self._lookup(
                "weapon list",
                lambda: self._weapons_by_slug(filters.weapons),
            )

        if filters.streamer.lower() not in NO_STREAMER_RESTRICTION:
            resolved.streamer_ids = self._lookup(
                "streamer",
                lambda: self._profile_by_username(filters.streamer),
            )

        tag = filters.tag.lower()
        if tag == STREAMER_TAG_SLUG:
            resolved.tag_author_ids = self._lookup("streamer authors", self._streamer_ids)
        elif tag not in NO_RESTRICTION:
            resolved.tag_label = TAG_LABELS.get(tag, filters.tag)

        return resolved

    def _lookup(self, name: str, fetch: Callable[[], Iterable[Any]]) -> set[Any]:
        # A failed lookup narrows the listing to nothing instead of failing it.
        try:
            return set(fetch())
        except SQLAlchemyError as exc:
            logger.warning("Filter lookup '%s' failed, treating as no match: %s", name, exc)
            return set()

    def _usernames_matching(self, term: str) -> list[str]:
        return list(
            self.db.scalars(
                select(Profile.id).where(Profile.username.icontains(term, autoescape=True))
            )
        )

    def _weapons_in_category(self, slug: str) -> list[int]:
        label = CATEGORY_LABELS.get(slug.lower(), slug)
        return list(
            self.db.scalars(
                select(Weapon.id).where(or_(Weapon.category == slug, Weapon.category == label))
            )
        )

    def _weapons_by_slug(self, slugs: list[str]) -> list[int]:
        wanted = set(slugs)
        rows = self.db.execute(select(Weapon.id, Weapon.name)).all()
        return [weapon_id for weapon_id, name in rows if weapon_slug(name) in wanted]

    def _profile_by_username(self, username: str) -> list[str]:
        profile_id = self.db.scalars(
            select(Profile.id).where(func.lower(Profile.username) == username.lower())
        ).first()
        return [profile_id] if profile_id is not None else []

    def _streamer_ids(self) -> list[str]:
        return list(self.db.scalars(select(Profile.id).where(Profile.is_streamer.is_(True))))

    # Phase 2: predicate assembly

    def _conditions(
        self,
        filters: BuildFilters,
        resolved: ResolvedFilters,
        scope: FilterScope,
    ) -> tuple[list[ColumnElement[bool]], bool]:
        conditions = self._scope_conditions(scope)
        empty = False

        def restrict(column: Any, ids: set[Any] | None) -> None:
            nonlocal empty
            if ids is None:
                return
            if ids:
                conditions.append(column.in_(sorted(ids)))
            else:
                conditions.append(Build.id == SENTINEL_ID)
                empty = True

        if resolved.search_term:
            term = resolved.search_term
            clauses: list[ColumnElement[bool]] = [
                Build.title.icontains(term, autoescape=True),
                Build.weapon_name.icontains(term, autoescape=True),
            ]
            if resolved.search_author_ids:
                clauses.append(Build.user_id.in_(sorted(resolved.search_author_ids)))
            conditions.append(or_(*clauses))

        restrict(Build.weapon_id, resolved.category_weapon_ids)
        restrict(Build.weapon_id, resolved.listed_weapon_ids)
        restrict(Build.user_id, resolved.streamer_ids)
        restrict(Build.user_id, resolved.tag_author_ids)

        if resolved.tag_label is not None:
            conditions.append(tag_contains(resolved.tag_label))

        if filters.min_price is not None:
            conditions.append(Build.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Build.price <= filters.max_price)

        return conditions, empty

    @staticmethod
    def _scope_conditions(scope: FilterScope) -> list[ColumnElement[bool]]:
        verified = Build.status == BuildStatus.VERIFIED.value
        if scope.kind == "public":
            return [verified]
        if scope.kind == "author":
            conditions = [Build.user_id == scope.user_id]
            if not scope.include_unpublished:
                conditions.append(verified)
            return conditions
        if scope.kind == "bookmarks":
            return [] if scope.include_unpublished else [verified]
        if scope.kind == "moderation":
            return [Build.status == scope.status]
        raise ValueError(f"Unknown filter scope: {scope.kind}")


def compile_filters(db: Session, filters: BuildFilters, scope: FilterScope) -> CompiledQuery:
    """Convenience wrapper around :class:`FilterCompiler`."""
    return FilterCompiler(db).compile(filters, scope)
