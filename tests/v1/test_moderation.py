# mypy: ignore-errors
# tests/v1/test_moderation.py
"""Tests for moderation and admin endpoints."""

from fastapi import status


def test_queue_forbidden_for_regular_users(client, auth_token) -> None:
    response = client.get("/api/v1/moderation/queue", headers=auth_token)

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_queue_requires_auth(client) -> None:
    assert client.get("/api/v1/moderation/queue").status_code == status.HTTP_401_UNAUTHORIZED


def test_queue_lists_pending(client, make_build, test_user, moderator, auth_headers) -> None:
    pending = make_build(test_user, status="pending")
    make_build(test_user)

    data = client.get("/api/v1/moderation/queue", headers=auth_headers(moderator)).json()

    assert [build["id"] for build in data["builds"]] == [pending.id]
    assert data["builds"][0]["can_edit"] is True


def test_verify_build_with_edits(client, make_build, test_user, moderator, auth_headers) -> None:
    pending = make_build(test_user, status="pending")
    headers = auth_headers(moderator)

    response = client.post(
        f"/api/v1/moderation/builds/{pending.id}/status",
        json={"status": "verified", "changes": {"title": "Approved title"}},
        headers=headers,
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "verified"
    assert response.json()["title"] == "Approved title"
    feed = client.get("/api/v1/builds/").json()
    assert [build["id"] for build in feed["builds"]] == [pending.id]


def test_flip_terminal_status_rejected(client, make_build, test_user, admin, auth_headers) -> None:
    verified = make_build(test_user)

    response = client.post(
        f"/api/v1/moderation/builds/{verified.id}/status",
        json={"status": "rejected"},
        headers=auth_headers(admin),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_edit_build(client, make_build, test_user, moderator, auth_headers, auth_token) -> None:
    build = make_build(test_user)

    denied = client.patch(
        f"/api/v1/moderation/builds/{build.id}", json={"price": 5}, headers=auth_token
    )
    allowed = client.patch(
        f"/api/v1/moderation/builds/{build.id}", json={"price": 5}, headers=auth_headers(moderator)
    )

    assert denied.status_code == status.HTTP_403_FORBIDDEN
    assert allowed.json()["price"] == 5


def test_set_roles(client, admin, test_user, auth_headers) -> None:
    response = client.post(
        f"/api/v1/moderation/users/{test_user.id}/roles",
        json={"is_streamer": True},
        headers=auth_headers(admin),
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["is_streamer"] is True


def test_set_roles_moderator_forbidden(client, moderator, test_user, auth_headers) -> None:
    response = client.post(
        f"/api/v1/moderation/users/{test_user.id}/roles",
        json={"is_admin": True},
        headers=auth_headers(moderator),
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "Unauthorized: Admins only"


def test_link_streamer(client, make_profile, admin, test_user, auth_headers) -> None:
    make_profile("CasterX", is_streamer=True)

    response = client.post(
        "/api/v1/moderation/streamers/link",
        json={"placeholder_username": "CasterX", "real_user_id": test_user.id},
        headers=auth_headers(admin),
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["username"] == "CasterX"
    assert response.json()["id"] == test_user.id
