# mypy: ignore-errors
"""Tests for listing filter compilation."""

import pytest
from sqlalchemy.exc import OperationalError

from loadout_hub.schemas.filters import BuildFilters
from loadout_hub.services import builds as build_service
from loadout_hub.services.filters import (
    SENTINEL_ID,
    FilterCompiler,
    FilterScope,
    compile_filters,
)
from loadout_hub.services.permissions import Viewer


def _titles(result):
    assert result.success, result.error
    return [build.title for build in result.data.builds]


@pytest.fixture()
def feed(make_build, test_user, other_user, streamer):
    """A small verified feed across categories, authors and tags."""
    return {
        "m4": make_build(test_user, "M4A1", title="M4 laser", price=200_000, tags=["META"]),
        "ak": make_build(other_user, "AK 74N", title="AK budget", price=50_000, tags=["Budget"]),
        "mp7": make_build(streamer, "MP7", title="MP7 rush", price=120_000, tags=["META"]),
        "svd": make_build(test_user, "SVD", title="SVD long", price=300_000, tags=["Zero Recoil"]),
    }


@pytest.mark.parametrize(
    "filters",
    [
        {"category": "shotgun"},
        {"weapons": "no-such-gun"},
        {"streamer": "nobody_here"},
        {"weapons": "m4a1", "category": "shotgun"},
    ],
)
def test_unresolvable_filter_returns_nothing(db_session, feed, filters) -> None:
    """A filter that resolves to no ids never falls back to the full feed."""
    result = build_service.list_builds(db_session, filters)

    assert result.success
    assert result.data.builds == []
    assert result.data.total_count == 0


def test_streamer_tag_without_streamers_is_empty(db_session, make_build, test_user) -> None:
    """The derived streamer tag with no streamer profiles matches nothing."""
    make_build(test_user)

    result = build_service.list_builds(db_session, {"tag": "streamer"})

    assert result.data.total_count == 0


def test_category_without_weapons_and_tag(db_session, make_build, test_user, weapons) -> None:
    """smg + budget against a catalogue with no SMG entries yields zero."""
    for name in ("MP7", "Vector"):
        db_session.delete(weapons[name])
    db_session.commit()
    make_build(test_user, "M4A1", tags=["Budget"])

    result = build_service.list_builds(db_session, {"category": "smg", "tag": "budget"})

    assert result.data.total_count == 0
    assert result.data.builds == []


def test_empty_compile_skips_main_query(db_session, feed) -> None:
    """Empty resolution is flagged so the listing never executes the query."""
    compiled = compile_filters(db_session, BuildFilters(category="shotgun"), FilterScope.public())

    assert compiled.empty is True
    assert str(SENTINEL_ID) in str(compiled.statement.compile(compile_kwargs={"literal_binds": True}))


def test_category_matches_label_and_slug(db_session, feed) -> None:
    """Weapons stored with either the label or the slug count for a category."""
    titles = _titles(build_service.list_builds(db_session, {"category": "assault-rifle"}))

    assert sorted(titles) == ["AK budget", "M4 laser"]


def test_weapon_list_filter(db_session, feed) -> None:
    """Comma-separated weapon slugs restrict to those weapons."""
    titles = _titles(build_service.list_builds(db_session, {"weapons": "ak-74n,MP7"}))

    assert sorted(titles) == ["AK budget", "MP7 rush"]


def test_streamer_filter_is_case_insensitive(db_session, feed) -> None:
    titles = _titles(build_service.list_builds(db_session, {"streamer": "streamerone"}))

    assert titles == ["MP7 rush"]


@pytest.mark.parametrize("sentinel", ["all", "all-streamers", ""])
def test_streamer_sentinels_do_not_restrict(db_session, feed, sentinel) -> None:
    result = build_service.list_builds(db_session, {"streamer": sentinel})

    assert result.data.total_count == 4


def test_streamer_tag_uses_author_flag(db_session, feed) -> None:
    """The streamer tag selects builds by streamer authors, not stored tags."""
    titles = _titles(build_service.list_builds(db_session, {"tag": "streamer"}))

    assert titles == ["MP7 rush"]


def test_tag_slug_maps_to_stored_label(db_session, feed) -> None:
    titles = _titles(build_service.list_builds(db_session, {"tag": "meta"}))
    assert sorted(titles) == ["M4 laser", "MP7 rush"]

    titles = _titles(build_service.list_builds(db_session, {"tag": "zero-recoil"}))
    assert titles == ["SVD long"]


def test_text_query_matches_title_weapon_and_author(db_session, feed) -> None:
    """Free text searches title, weapon name and author username."""
    assert _titles(build_service.list_builds(db_session, {"query": "laser"})) == ["M4 laser"]
    assert _titles(build_service.list_builds(db_session, {"query": "svd"})) == ["SVD long"]
    assert sorted(_titles(build_service.list_builds(db_session, {"query": "other_"}))) == [
        "AK budget"
    ]


def test_text_query_escapes_like_wildcards(db_session, feed) -> None:
    result = build_service.list_builds(db_session, {"query": "%"})

    assert result.data.total_count == 0


def test_price_bounds(db_session, feed) -> None:
    titles = _titles(
        build_service.list_builds(db_session, {"min_price": 100_000, "max_price": 250_000})
    )

    assert sorted(titles) == ["M4 laser", "MP7 rush"]


@pytest.mark.parametrize(
    ("sort_by", "expected"),
    [
        ("price-low", ["AK budget", "MP7 rush", "M4 laser", "SVD long"]),
        ("price-high", ["SVD long", "M4 laser", "MP7 rush", "AK budget"]),
        ("recent", ["SVD long", "MP7 rush", "AK budget", "M4 laser"]),
        ("bogus", ["SVD long", "MP7 rush", "AK budget", "M4 laser"]),
    ],
)
def test_sorting(db_session, feed, sort_by, expected) -> None:
    assert _titles(build_service.list_builds(db_session, {"sort_by": sort_by})) == expected


def test_most_voted_sort(db_session, feed) -> None:
    feed["ak"].upvotes = 5
    feed["svd"].upvotes = 2
    db_session.commit()

    titles = _titles(build_service.list_builds(db_session, {"sort_by": "most-voted"}))

    assert titles[:2] == ["AK budget", "SVD long"]


def test_public_scope_hides_unpublished(db_session, make_build, test_user) -> None:
    make_build(test_user, title="live")
    make_build(test_user, title="waiting", status="pending")
    make_build(test_user, title="nope", status="rejected")

    assert _titles(build_service.list_builds(db_session)) == ["live"]


def test_pagination_counts_whole_match(db_session, make_build, test_user) -> None:
    for index in range(5):
        make_build(test_user, title=f"b{index}")

    result = build_service.list_builds(db_session, {}, page=2, page_size=2)

    assert result.data.total_count == 5
    assert result.data.total_pages == 3
    assert [b.title for b in result.data.builds] == ["b2", "b1"]


def test_page_size_is_clamped(db_session, make_build, test_user, test_settings) -> None:
    make_build(test_user)

    result = build_service.list_builds(db_session, {}, page=1, page_size=10_000)

    assert result.data.page_size == test_settings.max_page_size


def test_failed_lookup_narrows_to_nothing(db_session, feed, monkeypatch) -> None:
    """A store error during an auxiliary lookup is treated as "no match"."""

    def _boom(self, slugs):
        raise OperationalError("SELECT", {}, Exception("down"))

    monkeypatch.setattr(FilterCompiler, "_weapons_by_slug", _boom)

    result = build_service.list_builds(db_session, {"weapons": "m4a1"}, viewer=Viewer.anonymous())

    assert result.success
    assert result.data.total_count == 0
