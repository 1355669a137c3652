"""Error taxonomy and explicit result type for service operations.

Services raise the exceptions below internally; every public operation is
wrapped with :func:`service_action`, which converts them (and store failures)
into an :class:`ActionResult` so callers can render inline feedback without
using exceptions for control flow.
"""

from __future__ import annotations

import enum
import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Concatenate, Generic, ParamSpec, TypeVar

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = ParamSpec("P")


class ErrorKind(str, enum.Enum):
    """Failure categories surfaced to callers."""

    VALIDATION = "validation"
    AUTH_REQUIRED = "auth_required"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    STORE = "store"


class ServiceError(RuntimeError):
    """Base class for failures reported by the service layer."""

    kind: ErrorKind = ErrorKind.STORE
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(ServiceError):
    """Missing or malformed submission fields; nothing was written."""

    kind = ErrorKind.VALIDATION
    default_message = "Invalid submission."

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> ValidationError:
        """Flatten pydantic errors into a single readable message."""
        parts = []
        for error in exc.errors():
            location = ".".join(str(item) for item in error.get("loc", ()))
            parts.append(f"{location}: {error['msg']}" if location else error["msg"])
        return cls("; ".join(parts) or cls.default_message)


class AuthRequired(ServiceError):
    """An anonymous caller attempted an action that needs an identity."""

    kind = ErrorKind.AUTH_REQUIRED
    default_message = "You must be logged in to do that."


class Unauthorized(ServiceError):
    """The caller is known but lacks the role or ownership required."""

    kind = ErrorKind.UNAUTHORIZED
    default_message = "You are not allowed to do that."


class NotFound(ServiceError):
    """A referenced build, weapon or profile does not resolve."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Not found."


class StoreError(ServiceError):
    """The underlying store call failed."""

    kind = ErrorKind.STORE
    default_message = "Database error. Please try again."


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Explicit success/failure outcome of a service operation."""

    success: bool
    data: T | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> ActionResult[T]:
        """Build a successful result."""
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: ServiceError) -> ActionResult[T]:
        """Build a failed result from a service error."""
        return cls(success=False, error=exc.message, error_kind=exc.kind)

    def unwrap(self) -> T:
        """Return the payload or raise the matching service error."""
        if self.success:
            return self.data  # type: ignore[return-value]
        raise _ERROR_TYPES.get(self.error_kind, ServiceError)(self.error)


_ERROR_TYPES: dict[ErrorKind | None, type[ServiceError]] = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.AUTH_REQUIRED: AuthRequired,
    ErrorKind.UNAUTHORIZED: Unauthorized,
    ErrorKind.NOT_FOUND: NotFound,
    ErrorKind.STORE: StoreError,
}


def service_action(
    action: str,
) -> Callable[[Callable[Concatenate[Session, P], T]], Callable[Concatenate[Session, P], ActionResult[T]]]:
    """Wrap a service function so it returns an :class:`ActionResult`.

    The wrapped function receives the session as its first argument. Service
    errors and store failures roll the session back; store failures are
    logged and reported as a generic :class:`StoreError`. Nothing is retried.
    """

    def decorator(
        func: Callable[Concatenate[Session, P], T],
    ) -> Callable[Concatenate[Session, P], ActionResult[T]]:
        @functools.wraps(func)
        def wrapper(db: Session, *args: P.args, **kwargs: P.kwargs) -> ActionResult[T]:
            try:
                return ActionResult.ok(func(db, *args, **kwargs))
            except ServiceError as exc:
                db.rollback()
                logger.debug("%s rejected: %s", action, exc.message)
                return ActionResult.fail(exc)
            except PydanticValidationError as exc:
                db.rollback()
                return ActionResult.fail(ValidationError.from_pydantic(exc))
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error("Store failure during %s: %s", action, exc, exc_info=True)
                return ActionResult.fail(StoreError())

        return wrapper

    return decorator
