"""Shared API dependencies for authentication and result handling."""

from typing import Annotated, TypeVar

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from loadout_hub.core.security import decode_subject
from loadout_hub.db.session import get_db
from loadout_hub.models import Profile
from loadout_hub.schemas.filters import BuildFilters
from loadout_hub.services.errors import ActionResult, ErrorKind
from loadout_hub.services.permissions import Viewer, resolve_viewer

T = TypeVar("T")

# Browsing is public, so a missing token means an anonymous viewer.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.AUTH_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.STORE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def get_viewer(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> Viewer:
    """Resolve the caller's identity and roles once per request.

    Args:
        credentials: Optional HTTP Bearer token credentials
        db: Database session

    Returns:
        Viewer for the token's profile, or an anonymous viewer without a token

    Raises:
        HTTPException: If a token is sent but is invalid or names no profile
    """
    if credentials is None:
        return Viewer.anonymous()

    subject = decode_subject(credentials.credentials)
    if subject is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    if db.get(Profile, subject) is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return resolve_viewer(db, subject)


# Type alias for the per-request viewer dependency
ViewerDep = Annotated[Viewer, Depends(get_viewer)]


def raise_for_result(result: ActionResult[T]) -> T:
    """Return the payload of a successful result or raise the matching HTTP error."""
    if result.success:
        return result.data  # type: ignore[return-value]
    status_code = ERROR_STATUS.get(result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR)  # type: ignore[arg-type]
    raise HTTPException(status_code=status_code, detail=result.error)


def get_build_filters(
    q: str = Query("", description="Free-text search"),
    category: str = Query("all"),
    weapons: list[str] = Query([], description="Weapon slugs, repeated or comma-separated"),
    streamer: str = Query("all"),
    tag: str = Query("all"),
    sort_by: str | None = Query(None),
    min_price: int | None = Query(None, ge=0),
    max_price: int | None = Query(None, ge=0),
) -> BuildFilters:
    """Rebuild the listing filter set from query parameters."""
    return BuildFilters(
        query=q,
        category=category,
        weapons=weapons,
        streamer=streamer,
        tag=tag,
        sort_by=sort_by,
        min_price=min_price,
        max_price=max_price,
    )


FiltersDep = Annotated[BuildFilters, Depends(get_build_filters)]
