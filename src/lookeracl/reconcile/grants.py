"""Grant discovery and convergence on one access-control context.

The remote API lists every grant on a context but cannot filter by
principal, so locating "the grant for principal P" is a linear scan.
Cost is O(n) in the grants on the folder; folders carry tens to low
hundreds of grants, and no index is kept on this side.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ..exceptions import InvariantViolationError
from ..interfaces import RemoteService
from ..models import AccessGrant, GrantOrigin, PermissionLevel

logger = logging.getLogger(__name__)


class GrantLocator:
    """Find the single grant a principal holds on a context."""

    def __init__(self, service: RemoteService) -> None:
        self._service = service

    def find(self, context_id: str, principal_id: str) -> Optional[AccessGrant]:
        """Scan all grants on ``context_id`` for ``principal_id``.

        Returns:
            The matching grant, or None.

        Raises:
            InvariantViolationError: More than one grant on the context
                belongs to the principal.
            RemoteError: Listing grants failed.
        """
        matches = [g for g in self._service.list_grants(context_id) if g.principal_id == principal_id]
        if len(matches) > 1:
            raise InvariantViolationError(
                f"Found {len(matches)} access grants for principal {principal_id} on "
                f"content metadata {context_id}; expected at most one",
                context_id=context_id,
                principal_id=principal_id,
                grant_ids=[g.id for g in matches],
            )
        return matches[0] if matches else None


class GrantAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class GrantResolution(BaseModel):
    """What ``GrantReconciler.reconcile`` did and what it ended up with."""

    grant: AccessGrant
    action: GrantAction
    origin: GrantOrigin


class GrantReconciler:
    """Create, update in place, or leave alone the grant for one principal.

    Example::

        reconciler = GrantReconciler(service)
        res = reconciler.reconcile("cm-7", "group-3", PermissionLevel.EDIT)
        res.action   # GrantAction.CREATED on the first call
        res = reconciler.reconcile("cm-7", "group-3", PermissionLevel.EDIT)
        res.action   # GrantAction.UNCHANGED, no remote mutation
    """

    def __init__(self, service: RemoteService, locator: Optional[GrantLocator] = None) -> None:
        self._service = service
        self._locator = locator or GrantLocator(service)

    @property
    def locator(self) -> GrantLocator:
        return self._locator

    def reconcile(self, context_id: str, principal_id: str, desired_level: PermissionLevel) -> GrantResolution:
        desired_level = PermissionLevel(desired_level)
        grant = self._locator.find(context_id, principal_id)

        if grant is None:
            created = self._service.create_grant(context_id, principal_id, desired_level)
            logger.info(
                "Created %s grant %s for principal %s on %s",
                desired_level.value,
                created.id,
                principal_id,
                context_id,
            )
            return GrantResolution(grant=created, action=GrantAction.CREATED, origin=GrantOrigin.CREATED)

        if grant.level == desired_level:
            return GrantResolution(grant=grant, action=GrantAction.UNCHANGED, origin=GrantOrigin.ADOPTED)

        updated = self._service.update_grant(grant.id, desired_level)
        logger.info(
            "Updated grant %s for principal %s on %s: %s -> %s",
            grant.id,
            principal_id,
            context_id,
            grant.level.value,
            desired_level.value,
        )
        return GrantResolution(grant=updated, action=GrantAction.UPDATED, origin=GrantOrigin.ADOPTED)


__all__ = ["GrantAction", "GrantLocator", "GrantReconciler", "GrantResolution"]
