"""Convert an inherited folder grant into a direct one, in place.

Unlike ``GrantReconciler`` this workflow never creates a grant: the
principal must already hold one on the folder (typically inherited from
the parent), which is then updated to the override level. The update is
issued even when the level already matches, since writing the grant is
what pins it on this folder.

Teardown never touches the remote grant. The platform offers no
"restore inheritance" primitive this library uses, so forgetting an
override leaves the grant exactly as last converted.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ..exceptions import NoInheritedGrantToOverride
from ..interfaces import RemoteService
from ..models import AccessGrant, PermissionLevel
from .grants import GrantLocator

logger = logging.getLogger(__name__)

NON_REVERSION_WARNING = (
    "Deleting a folder permission override does not revert the folder to "
    "inherited permissions. Grant %s for principal %s on %s is left at '%s'; "
    "manage permissions in the platform UI if reversion is needed."
)


class OverrideStatus(str, Enum):
    IN_PLACE = "in_place"
    REVERTED = "reverted"


class OverrideCheck(BaseModel):
    """Result of re-locating an override on a later pass."""

    status: OverrideStatus
    grant: Optional[AccessGrant] = None
    reason: str = ""


class OverrideWorkflow:
    """Seek → Convert on apply, Verify on read, no-op teardown."""

    def __init__(self, service: RemoteService, locator: Optional[GrantLocator] = None) -> None:
        self._service = service
        self._locator = locator or GrantLocator(service)

    def seek(self, context_id: str, principal_id: str) -> AccessGrant:
        """Locate the pre-existing grant or fail without mutating anything."""
        grant = self._locator.find(context_id, principal_id)
        if grant is None:
            raise NoInheritedGrantToOverride(context_id, principal_id)
        return grant

    def override(self, context_id: str, principal_id: str, level: PermissionLevel) -> AccessGrant:
        """Seek the inherited grant, then convert it to ``level``.

        Returns:
            The updated grant. Its id equals the id found during Seek.

        Raises:
            NoInheritedGrantToOverride: The principal holds no grant here.
            InvariantViolationError: The principal holds several grants here.
            RemoteError: A remote call failed.
        """
        level = PermissionLevel(level)
        grant = self.seek(context_id, principal_id)
        updated = self._service.update_grant(grant.id, level)
        logger.info(
            "Overrode grant %s for principal %s on %s: %s -> %s",
            grant.id,
            principal_id,
            context_id,
            grant.level.value,
            level.value,
        )
        return updated

    def verify(self, context_id: str, principal_id: str, applied_level: PermissionLevel) -> OverrideCheck:
        """Re-locate the grant and compare with the last applied level.

        An absent grant or a different level means the override was
        reverted outside this system. The caller surfaces that as drift;
        nothing is re-applied here.
        """
        grant = self._locator.find(context_id, principal_id)
        if grant is None:
            return OverrideCheck(status=OverrideStatus.REVERTED, reason="grant no longer exists")
        if grant.level != PermissionLevel(applied_level):
            return OverrideCheck(
                status=OverrideStatus.REVERTED,
                grant=grant,
                reason=f"level changed externally to '{grant.level.value}'",
            )
        return OverrideCheck(status=OverrideStatus.IN_PLACE, grant=grant)

    def release(self, grant_id: Optional[str], context_id: str, principal_id: str, level: PermissionLevel) -> None:
        """Stop tracking an override. Issues no remote call."""
        logger.warning(NON_REVERSION_WARNING, grant_id, principal_id, context_id, PermissionLevel(level).value)


__all__ = [
    "NON_REVERSION_WARNING",
    "OverrideCheck",
    "OverrideStatus",
    "OverrideWorkflow",
]
