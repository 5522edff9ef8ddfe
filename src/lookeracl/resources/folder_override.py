"""Folder permission override: pin an inherited grant on one folder.

Apply converts the grant the group already holds (usually inherited from
the parent folder) to the requested level. Forgetting the override leaves
that grant untouched on the platform.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..exceptions import InvalidSpecError
from ..interfaces import RemoteService
from ..models import GrantOrigin, PermissionLevel
from ..outcomes import Vanished
from ..reconcile.override import OverrideStatus, OverrideWorkflow
from .kinds import ObjectKind

logger = logging.getLogger(__name__)


class FolderOverrideSpec(BaseModel):
    model_config = {"extra": "forbid"}

    content_metadata_id: str = Field(min_length=1)
    group_id: str = Field(min_length=1)
    access_level: PermissionLevel


class FolderOverrideState(BaseModel):
    id: str
    content_metadata_id: str
    group_id: str
    access_level: PermissionLevel
    origin: GrantOrigin = GrantOrigin.ADOPTED


class FolderOverrideUnit:
    kind = ObjectKind.FOLDER_PERMISSION_OVERRIDE
    spec_model = FolderOverrideSpec
    state_model = FolderOverrideState

    def __init__(self, service: RemoteService, workflow: Optional[OverrideWorkflow] = None) -> None:
        self._service = service
        self._workflow = workflow or OverrideWorkflow(service)

    def create(self, spec: FolderOverrideSpec) -> FolderOverrideState:
        grant = self._workflow.override(spec.content_metadata_id, spec.group_id, spec.access_level)
        return FolderOverrideState(
            id=grant.id,
            content_metadata_id=spec.content_metadata_id,
            group_id=spec.group_id,
            access_level=grant.level,
        )

    def read(self, state: FolderOverrideState) -> Union[FolderOverrideState, Vanished]:
        check = self._workflow.verify(state.content_metadata_id, state.group_id, state.access_level)
        if check.status is OverrideStatus.REVERTED:
            return Vanished(kind=self.kind.value, object_id=state.id, reason=check.reason)
        return state.model_copy(update={"id": check.grant.id})

    def requires_replacement(self, spec: FolderOverrideSpec, state: FolderOverrideState) -> bool:
        return spec.content_metadata_id != state.content_metadata_id or spec.group_id != state.group_id

    def has_changes(self, spec: FolderOverrideSpec, state: FolderOverrideState) -> bool:
        return spec.access_level != state.access_level

    def update(self, spec: FolderOverrideSpec, state: FolderOverrideState) -> FolderOverrideState:
        grant = self._workflow.override(state.content_metadata_id, state.group_id, spec.access_level)
        return state.model_copy(update={"id": grant.id, "access_level": grant.level})

    def delete(self, state: FolderOverrideState) -> None:
        self._workflow.release(state.id, state.content_metadata_id, state.group_id, state.access_level)

    def import_state(self, identifier: str) -> FolderOverrideState:
        raise InvalidSpecError(
            "Import is not supported for folder_permission_override",
            identifier=identifier,
        )


__all__ = ["FolderOverrideSpec", "FolderOverrideState", "FolderOverrideUnit"]
