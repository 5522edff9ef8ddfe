"""Direct access grant for one group on one folder.

Grants attach to the folder's content metadata id, not the folder id.
A grant the group already holds is adopted and updated in place rather
than duplicated; the tracked ``origin`` records which happened.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..exceptions import InvalidSpecError, NotFoundError
from ..interfaces import RemoteService
from ..models import GrantOrigin, PermissionLevel
from ..outcomes import Vanished
from ..reconcile.grants import GrantAction, GrantReconciler
from .kinds import ObjectKind

logger = logging.getLogger(__name__)

IMPORT_SEPARATOR = "/"


class FolderAccessSpec(BaseModel):
    model_config = {"extra": "forbid"}

    content_metadata_id: str = Field(min_length=1)
    group_id: str = Field(min_length=1)
    access_level: PermissionLevel


class FolderAccessState(BaseModel):
    id: str
    content_metadata_id: str
    group_id: str
    access_level: PermissionLevel
    origin: GrantOrigin = GrantOrigin.CREATED


def parse_import_id(identifier: str) -> tuple[str, str]:
    """Split ``"<content_metadata_id>/<group_id>"``."""
    parts = identifier.split(IMPORT_SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise InvalidSpecError(
            f"Invalid import ID format: {identifier!r}. Expected '<folder_id>/<group_id>'",
            identifier=identifier,
        )
    return parts[0], parts[1]


class FolderAccessUnit:
    kind = ObjectKind.FOLDER_ACCESS
    spec_model = FolderAccessSpec
    state_model = FolderAccessState

    def __init__(self, service: RemoteService, reconciler: Optional[GrantReconciler] = None) -> None:
        self._service = service
        self._reconciler = reconciler or GrantReconciler(service)

    def create(self, spec: FolderAccessSpec) -> FolderAccessState:
        res = self._reconciler.reconcile(spec.content_metadata_id, spec.group_id, spec.access_level)
        if res.action is not GrantAction.CREATED:
            logger.info(
                "Adopted existing grant %s for group %s on %s",
                res.grant.id,
                spec.group_id,
                spec.content_metadata_id,
            )
        return FolderAccessState(
            id=res.grant.id,
            content_metadata_id=spec.content_metadata_id,
            group_id=spec.group_id,
            access_level=res.grant.level,
            origin=res.origin,
        )

    def read(self, state: FolderAccessState) -> Union[FolderAccessState, Vanished]:
        grant = self._reconciler.locator.find(state.content_metadata_id, state.group_id)
        if grant is None:
            return Vanished(kind=self.kind.value, object_id=state.id, reason="grant no longer exists")
        origin = state.origin
        if grant.id != state.id:
            logger.warning(
                "Grant for group %s on %s was replaced externally (%s -> %s)",
                state.group_id,
                state.content_metadata_id,
                state.id,
                grant.id,
            )
            origin = GrantOrigin.ADOPTED
        return state.model_copy(update={"id": grant.id, "access_level": grant.level, "origin": origin})

    def requires_replacement(self, spec: FolderAccessSpec, state: FolderAccessState) -> bool:
        return spec.content_metadata_id != state.content_metadata_id or spec.group_id != state.group_id

    def has_changes(self, spec: FolderAccessSpec, state: FolderAccessState) -> bool:
        return spec.access_level != state.access_level

    def update(self, spec: FolderAccessSpec, state: FolderAccessState) -> FolderAccessState:
        res = self._reconciler.reconcile(state.content_metadata_id, state.group_id, spec.access_level)
        origin = state.origin if res.grant.id == state.id else res.origin
        return state.model_copy(update={"id": res.grant.id, "access_level": res.grant.level, "origin": origin})

    def delete(self, state: FolderAccessState) -> None:
        if state.origin == GrantOrigin.ADOPTED:
            logger.warning(
                "Deleting adopted grant %s for group %s on %s; it existed before it was tracked",
                state.id,
                state.group_id,
                state.content_metadata_id,
            )
        self._service.delete_grant(state.id)

    def import_state(self, identifier: str) -> FolderAccessState:
        content_metadata_id, group_id = parse_import_id(identifier)
        grant = self._reconciler.locator.find(content_metadata_id, group_id)
        if grant is None:
            raise NotFoundError(
                f"No access found for group {group_id} on folder {content_metadata_id}",
                content_metadata_id=content_metadata_id,
                group_id=group_id,
            )
        return FolderAccessState(
            id=grant.id,
            content_metadata_id=content_metadata_id,
            group_id=group_id,
            access_level=grant.level,
            origin=GrantOrigin.ADOPTED,
        )


__all__ = ["FolderAccessSpec", "FolderAccessState", "FolderAccessUnit", "parse_import_id"]
