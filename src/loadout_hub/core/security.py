"""Access token helpers.

Sessions are owned by the external identity provider. Tokens it issues are
HS256 JWTs whose ``sub`` claim is the profile id; these helpers encode and
decode that format for request authentication, tooling and tests.
"""
from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from loadout_hub.core.settings import settings
from loadout_hub.db.time import utcnow


def create_access_token(subject: str, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token for the given profile id."""
    to_encode: dict[str, object] = {"sub": subject}
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_subject(token: str) -> str | None:
    """Return the ``sub`` claim of a valid token, or None if it cannot be trusted."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        return None
    return subject
