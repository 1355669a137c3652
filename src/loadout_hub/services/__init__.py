"""Service layer for the Loadout Hub application.

Every public operation takes the request's database session first and returns
an :class:`~loadout_hub.services.errors.ActionResult`.
"""

from .errors import ActionResult, ErrorKind
from .permissions import Viewer, resolve_viewer

__all__ = ["ActionResult", "ErrorKind", "Viewer", "resolve_viewer"]
