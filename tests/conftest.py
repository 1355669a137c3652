# tests/conftest.py
from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from loadout_hub.core.security import create_access_token  # noqa: E402
from loadout_hub.core.settings import Settings  # noqa: E402
from loadout_hub.db.session import Base  # noqa: E402
from loadout_hub.db.session import get_db as app_get_session  # noqa: E402
from loadout_hub.db.time import utcnow  # noqa: E402
from loadout_hub.main import app as fastapi_app  # noqa: E402
from loadout_hub.models import Build, BuildStatus, Profile, Weapon  # noqa: E402
from loadout_hub.services.permissions import Viewer, resolve_viewer  # noqa: E402
from loadout_hub.services.stats import stats_cache  # noqa: E402

TEST_DB_URL = "sqlite://"

_USERNAME_COUNTER = count(1)

DEFAULT_STATS: dict[str, int] = {
    "v_recoil_control": 60,
    "h_recoil_control": 55,
    "ergonomics": 48,
    "weapon_stability": 70,
    "accuracy": 40,
    "hipfire_stability": 35,
    "effective_range": 300,
    "muzzle_velocity": 880,
}


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite defers BEGIN; take over so SAVEPOINTs nest correctly.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:  # type: ignore[no-untyped-def]
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # Service commits release a SAVEPOINT; service rollbacks only undo work
    # since the last commit, so fixtures commit what they create.
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def clear_stats_cache() -> Iterator[None]:
    stats_cache.clear()
    yield
    stats_cache.clear()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Provide a Settings instance aligned with runtime configuration."""
    return Settings()  # type: ignore[call-arg]


@pytest.fixture()
def make_profile(db_session: Session) -> Callable[..., Profile]:
    """Return a factory that persists profiles with the given role flags."""

    def _make(username: str | None = None, **fields: Any) -> Profile:
        profile = Profile(
            id=str(uuid.uuid4()),
            username=username or f"user_{next(_USERNAME_COUNTER)}",
            **fields,
        )
        db_session.add(profile)
        db_session.commit()
        return profile

    return _make


@pytest.fixture()
def test_user(make_profile: Callable[..., Profile]) -> Profile:
    """Primary regular user."""
    return make_profile("test_user", display_name="test_user")


@pytest.fixture()
def other_user(make_profile: Callable[..., Profile]) -> Profile:
    """Secondary regular user."""
    return make_profile("other_user", display_name="other_user")


@pytest.fixture()
def moderator(make_profile: Callable[..., Profile]) -> Profile:
    return make_profile("mod_user", is_moderator=True)


@pytest.fixture()
def admin(make_profile: Callable[..., Profile]) -> Profile:
    return make_profile("admin_user", is_admin=True)


@pytest.fixture()
def streamer(make_profile: Callable[..., Profile]) -> Profile:
    return make_profile("StreamerOne", is_streamer=True, is_verified=True)


@pytest.fixture()
def viewer_for(db_session: Session) -> Callable[[Profile | None], Viewer]:
    """Return a helper resolving the :class:`Viewer` of a profile."""

    def _viewer(profile: Profile | None) -> Viewer:
        return resolve_viewer(db_session, profile.id if profile is not None else None)

    return _viewer


@pytest.fixture()
def auth_headers() -> Callable[[Profile], dict[str, str]]:
    """Return a helper building bearer headers for a profile."""

    def _headers(profile: Profile) -> dict[str, str]:
        token = create_access_token(profile.id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def auth_token(test_user: Profile, auth_headers: Callable[[Profile], dict[str, str]]) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def weapons(db_session: Session) -> dict[str, Weapon]:
    """Seed a small catalogue mixing category labels and slugs."""
    catalogue = [
        ("M4A1", "Assault Rifle", "https://img.example/m4a1.png"),
        ("AK 74N", "assault-rifle", "https://img.example/ak74n.png"),
        ("MP7", "SMG", "https://img.example/mp7.png"),
        ("Vector", "smg", None),
        ("SVD", "Marksman Rifle", "https://img.example/svd.png"),
    ]
    created = {}
    for name, category, image_url in catalogue:
        weapon = Weapon(name=name, category=category, image_url=image_url)
        db_session.add(weapon)
        created[name] = weapon
    db_session.commit()
    return created


@pytest.fixture()
def make_build(db_session: Session, weapons: dict[str, Weapon]) -> Callable[..., Build]:
    """Return a factory that persists builds (verified unless told otherwise)."""
    sequence = count(1)

    def _make(author: Profile, weapon: str = "M4A1", **overrides: Any) -> Build:
        index = next(sequence)
        target = weapons[weapon]
        fields: dict[str, Any] = {
            "title": f"Build {index}",
            "build_code": f"CODE-{index}",
            "price": 100_000,
            "tags": [],
            "status": BuildStatus.VERIFIED.value,
            # Strictly increasing timestamps keep "recent" ordering deterministic.
            "created_at": utcnow() + timedelta(seconds=index),
            **DEFAULT_STATS,
        }
        fields.update(overrides)
        build = Build(
            user_id=author.id,
            weapon_id=target.id,
            weapon_name=target.name,
            weapon_image=target.image_url,
            **fields,
        )
        db_session.add(build)
        db_session.commit()
        return build

    return _make


@pytest.fixture()
def build_payload() -> Callable[..., dict[str, Any]]:
    """Return a factory for valid build submission bodies."""

    def _payload(weapon_id: int | None = None, **overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": "Laser beam M4",
            "weapon_id": weapon_id,
            "build_code": "M4A1-LASER-1234",
            "price": 250_000,
            "stats": dict(DEFAULT_STATS),
            "description": "Low recoil setup",
            "tags": ["META", "Budget"],
        }
        payload.update(overrides)
        return payload

    return _payload
