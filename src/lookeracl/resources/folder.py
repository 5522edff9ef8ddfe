"""Folder: a container whose access context may stop inheriting."""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..exceptions import AccessControlError, NotFoundError, PartialApplyError
from ..interfaces import RemoteService
from ..models import Folder
from ..outcomes import AppliedOperation, OperationType, Vanished
from .kinds import ObjectKind

logger = logging.getLogger(__name__)


class FolderSpec(BaseModel):
    """Desired folder.

    ``inherits_permissions`` of None leaves the context as the platform
    set it. New folders inherit from their parent.
    """

    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    parent_id: str = Field(min_length=1)
    inherits_permissions: Optional[bool] = None


class FolderState(BaseModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    content_metadata_id: str
    inherits_permissions: bool = True

    @classmethod
    def from_remote(cls, folder: Folder, inherits: bool) -> "FolderState":
        return cls(
            id=folder.id,
            name=folder.name,
            parent_id=folder.parent_id,
            content_metadata_id=folder.content_metadata_id,
            inherits_permissions=inherits,
        )


class FolderUnit:
    kind = ObjectKind.FOLDER
    spec_model = FolderSpec
    state_model = FolderState

    def __init__(self, service: RemoteService) -> None:
        self._service = service

    def create(self, spec: FolderSpec) -> FolderState:
        folder = self._service.create_container(spec.name, spec.parent_id)
        logger.info("Created folder %s (%s) under %s", folder.id, folder.name, folder.parent_id)
        state = FolderState.from_remote(folder, inherits=True)

        if spec.inherits_permissions is False:
            created = AppliedOperation(op=OperationType.CREATE, target=folder.id)
            state = self._set_inheritance(state, False, applied=[created])
        return state

    def read(self, state: FolderState) -> Union[FolderState, Vanished]:
        try:
            folder = self._service.get_container(state.id)
        except NotFoundError:
            return Vanished(kind=self.kind.value, object_id=state.id)
        context = self._service.get_access_context(folder.content_metadata_id)
        return FolderState.from_remote(folder, inherits=context.inherits)

    def requires_replacement(self, spec: FolderSpec, state: FolderState) -> bool:
        return False

    def has_changes(self, spec: FolderSpec, state: FolderState) -> bool:
        return self._placement_changed(spec, state) or self._inheritance_changed(spec, state)

    def update(self, spec: FolderSpec, state: FolderState) -> FolderState:
        applied: list[AppliedOperation] = []
        if self._placement_changed(spec, state):
            folder = self._service.update_container(state.id, spec.name, spec.parent_id)
            applied.append(AppliedOperation(op=OperationType.UPDATE, target=state.id))
            state = state.model_copy(update={"name": folder.name, "parent_id": folder.parent_id})
        if self._inheritance_changed(spec, state):
            state = self._set_inheritance(state, bool(spec.inherits_permissions), applied=applied)
        return state

    def delete(self, state: FolderState) -> None:
        self._service.delete_container(state.id)

    def import_state(self, identifier: str) -> FolderState:
        folder = self._service.get_container(identifier)
        context = self._service.get_access_context(folder.content_metadata_id)
        return FolderState.from_remote(folder, inherits=context.inherits)

    @staticmethod
    def _placement_changed(spec: FolderSpec, state: FolderState) -> bool:
        return spec.name != state.name or spec.parent_id != state.parent_id

    @staticmethod
    def _inheritance_changed(spec: FolderSpec, state: FolderState) -> bool:
        return spec.inherits_permissions is not None and spec.inherits_permissions != state.inherits_permissions

    def _set_inheritance(self, state: FolderState, inherits: bool, applied: list[AppliedOperation]) -> FolderState:
        op = AppliedOperation(op=OperationType.SET_INHERITANCE, target=state.content_metadata_id)
        try:
            context = self._service.set_inheritance(state.content_metadata_id, inherits)
        except AccessControlError as e:
            if not applied:
                raise
            logger.warning("Folder %s: %s failed after %d call(s): %s", state.id, op, len(applied), e.message)
            raise PartialApplyError(
                f"Failed to apply {op}: {e.message}",
                applied=applied,
                failed=op,
                cause=e,
                partial_state=state,
            ) from e
        return state.model_copy(update={"inherits_permissions": context.inherits})


__all__ = ["FolderSpec", "FolderState", "FolderUnit"]
