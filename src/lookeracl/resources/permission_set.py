"""Permission set: a named bundle of platform permissions."""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..exceptions import NotFoundError
from ..interfaces import RemoteService
from ..models import PermissionSet
from ..outcomes import Vanished
from .kinds import ObjectKind

logger = logging.getLogger(__name__)


class PermissionSetSpec(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    permissions: set[str] = Field(default_factory=set)


class PermissionSetState(BaseModel):
    id: str
    name: str
    permissions: set[str] = Field(default_factory=set)
    built_in: bool = False
    all_access: bool = False
    url: Optional[str] = None

    @classmethod
    def from_remote(cls, ps: PermissionSet) -> "PermissionSetState":
        return cls(
            id=ps.id,
            name=ps.name,
            permissions=set(ps.permissions),
            built_in=ps.built_in,
            all_access=ps.all_access,
            url=ps.url,
        )


class PermissionSetUnit:
    kind = ObjectKind.PERMISSION_SET
    spec_model = PermissionSetSpec
    state_model = PermissionSetState

    def __init__(self, service: RemoteService) -> None:
        self._service = service

    def create(self, spec: PermissionSetSpec) -> PermissionSetState:
        ps = self._service.create_permission_set(spec.name, sorted(spec.permissions))
        logger.info("Created permission set %s (%s)", ps.id, ps.name)
        return PermissionSetState.from_remote(ps)

    def read(self, state: PermissionSetState) -> Union[PermissionSetState, Vanished]:
        try:
            ps = self._service.get_permission_set(state.id)
        except NotFoundError:
            return Vanished(kind=self.kind.value, object_id=state.id)
        return PermissionSetState.from_remote(ps)

    def requires_replacement(self, spec: PermissionSetSpec, state: PermissionSetState) -> bool:
        return False

    def has_changes(self, spec: PermissionSetSpec, state: PermissionSetState) -> bool:
        return spec.name != state.name or spec.permissions != state.permissions

    def update(self, spec: PermissionSetSpec, state: PermissionSetState) -> PermissionSetState:
        if not self.has_changes(spec, state):
            return state
        # The remote write replaces the whole permission list.
        ps = self._service.update_permission_set(state.id, spec.name, sorted(spec.permissions))
        return PermissionSetState.from_remote(ps)

    def delete(self, state: PermissionSetState) -> None:
        self._service.delete_permission_set(state.id)

    def import_state(self, identifier: str) -> PermissionSetState:
        return PermissionSetState.from_remote(self._service.get_permission_set(identifier))


__all__ = ["PermissionSetSpec", "PermissionSetState", "PermissionSetUnit"]
