# mypy: ignore-errors
"""Tests for profile services and admin role management."""

from datetime import timedelta

from loadout_hub.db.time import utcnow
from loadout_hub.models import Bookmark, BuildVote, Profile
from loadout_hub.services import ledger, profiles
from loadout_hub.services.errors import ErrorKind
from loadout_hub.services.permissions import Viewer


def test_get_profile_is_case_insensitive(db_session, test_user) -> None:
    result = profiles.get_profile(db_session, "TEST_USER")

    assert result.success
    assert result.data.id == test_user.id


def test_get_profile_missing(db_session) -> None:
    assert profiles.get_profile(db_session, "ghost").error_kind is ErrorKind.NOT_FOUND


def test_profile_stats(db_session, make_build, test_user, other_user, viewer_for) -> None:
    live = make_build(test_user)
    make_build(test_user, status="pending")
    ledger.toggle_vote(db_session, live.id, "up", viewer_for(other_user))
    ledger.toggle_bookmark(db_session, live.id, viewer_for(test_user))

    public = profiles.get_profile(db_session, "test_user", Viewer.anonymous()).data.stats
    own = profiles.get_profile(db_session, "test_user", viewer_for(test_user)).data.stats

    assert (public.total_builds, public.total_upvotes, public.total_bookmarks) == (1, 1, 1)
    assert own.total_builds == 2


def test_update_profile_changes_username(db_session, test_user, viewer_for) -> None:
    result = profiles.update_profile(
        db_session,
        viewer_for(test_user),
        {"username": "Fresh_Name", "display_name": "fresh_name", "bio": "hi"},
    )

    assert result.success, result.error
    db_session.refresh(test_user)
    assert test_user.username == "Fresh_Name"
    assert test_user.display_name == "fresh_name"
    assert test_user.last_username_change is not None


def test_display_name_must_match_username(db_session, test_user, viewer_for) -> None:
    result = profiles.update_profile(
        db_session, viewer_for(test_user), {"username": "test_user", "display_name": "Someone"}
    )

    assert result.error_kind is ErrorKind.VALIDATION
    assert "Display Name" in result.error


def test_username_pattern(db_session, test_user, viewer_for) -> None:
    result = profiles.update_profile(db_session, viewer_for(test_user), {"username": "bad name!"})

    assert result.error_kind is ErrorKind.VALIDATION


def test_username_taken_ignoring_case(db_session, test_user, other_user, viewer_for) -> None:
    result = profiles.update_profile(db_session, viewer_for(test_user), {"username": "OTHER_USER"})

    assert result.error_kind is ErrorKind.VALIDATION
    assert result.error == "Username is already taken."


def test_username_cooldown(db_session, test_user, viewer_for) -> None:
    test_user.last_username_change = utcnow() - timedelta(days=10)
    db_session.commit()

    result = profiles.update_profile(db_session, viewer_for(test_user), {"username": "renamed"})

    assert result.error_kind is ErrorKind.VALIDATION
    assert result.error == "You can change your username again in 20 days."


def test_capitalisation_change_ignores_cooldown_for_display_name(db_session, test_user, viewer_for) -> None:
    test_user.last_username_change = utcnow() - timedelta(days=1)
    db_session.commit()

    result = profiles.update_profile(
        db_session, viewer_for(test_user), {"username": "test_user", "display_name": "Test_User"}
    )

    assert result.success
    assert result.data.display_name == "Test_User"


def test_update_requires_login(db_session) -> None:
    result = profiles.update_profile(db_session, Viewer.anonymous(), {"username": "anyone"})

    assert result.error_kind is ErrorKind.AUTH_REQUIRED


def test_search_users_orders_streamers_first(db_session, make_profile) -> None:
    make_profile("alpha_fan")
    make_profile("zeta_fan", is_streamer=True)

    result = profiles.search_users(db_session, "fan")

    assert [user.username for user in result.data] == ["zeta_fan", "alpha_fan"]


def test_search_users_short_query(db_session, test_user) -> None:
    assert profiles.search_users(db_session, "t").data == []


def test_list_streamers(db_session, make_profile, test_user) -> None:
    make_profile("bravo", is_streamer=True)
    make_profile("alpha", is_streamer=True)

    ordered = profiles.list_streamers(db_session).data
    shuffled = profiles.list_streamers(db_session, randomize=True).data

    assert [user.username for user in ordered] == ["alpha", "bravo"]
    assert sorted(user.username for user in shuffled) == ["alpha", "bravo"]


def test_set_roles_admin_only(db_session, admin, moderator, test_user, viewer_for) -> None:
    denied = profiles.set_roles(db_session, viewer_for(moderator), test_user.id, {"is_moderator": True})
    granted = profiles.set_roles(db_session, viewer_for(admin), test_user.id, {"is_moderator": True})

    assert denied.error_kind is ErrorKind.UNAUTHORIZED
    assert denied.error == "Unauthorized: Admins only"
    assert granted.data.is_moderator is True
    assert granted.data.is_admin is False


def test_link_streamer_account(db_session, make_profile, make_build, admin, test_user, other_user, viewer_for) -> None:
    placeholder = make_profile("BigStreamer", is_streamer=True, avatar_url="https://img.example/big.png")
    build = make_build(placeholder)
    voted = make_build(other_user)
    ledger.toggle_vote(db_session, voted.id, "up", viewer_for(placeholder))
    ledger.toggle_bookmark(db_session, voted.id, viewer_for(placeholder))
    placeholder_id = placeholder.id

    result = profiles.link_streamer_account(db_session, viewer_for(admin), "bigstreamer", test_user.id)

    assert result.success, result.error
    db_session.refresh(test_user)
    assert test_user.username == "BigStreamer"
    assert test_user.is_streamer is True
    assert test_user.avatar_url == "https://img.example/big.png"
    db_session.refresh(build)
    assert build.user_id == test_user.id
    assert db_session.get(Profile, placeholder_id) is None
    assert db_session.query(BuildVote).filter_by(user_id=placeholder_id).count() == 0
    assert db_session.query(Bookmark).filter_by(user_id=placeholder_id).count() == 0
    db_session.refresh(voted)
    assert voted.upvotes == 0


def test_link_streamer_requires_placeholder(db_session, admin, test_user, viewer_for) -> None:
    result = profiles.link_streamer_account(db_session, viewer_for(admin), "nobody", test_user.id)

    assert result.error_kind is ErrorKind.NOT_FOUND
    assert result.error == "Placeholder streamer 'nobody' not found."
