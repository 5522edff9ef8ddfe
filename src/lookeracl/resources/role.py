"""Role: binds one permission set to one model set."""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..exceptions import NotFoundError
from ..interfaces import RemoteService
from ..models import Role
from ..outcomes import Vanished
from .kinds import ObjectKind

logger = logging.getLogger(__name__)


class RoleSpec(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    permission_set_id: str = Field(min_length=1)
    model_set_id: str = Field(min_length=1)


class RoleState(BaseModel):
    id: str
    name: str
    permission_set_id: Optional[str] = None
    model_set_id: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_remote(cls, role: Role) -> "RoleState":
        return cls(
            id=role.id,
            name=role.name,
            permission_set_id=role.permission_set_id,
            model_set_id=role.model_set_id,
            url=role.url,
        )


class RoleUnit:
    kind = ObjectKind.ROLE
    spec_model = RoleSpec
    state_model = RoleState

    def __init__(self, service: RemoteService) -> None:
        self._service = service

    def create(self, spec: RoleSpec) -> RoleState:
        role = self._service.create_role(spec.name, spec.permission_set_id, spec.model_set_id)
        logger.info("Created role %s (%s)", role.id, role.name)
        return RoleState.from_remote(role)

    def read(self, state: RoleState) -> Union[RoleState, Vanished]:
        try:
            role = self._service.get_role(state.id)
        except NotFoundError:
            return Vanished(kind=self.kind.value, object_id=state.id)
        return RoleState.from_remote(role)

    def requires_replacement(self, spec: RoleSpec, state: RoleState) -> bool:
        return False

    def has_changes(self, spec: RoleSpec, state: RoleState) -> bool:
        return (
            spec.name != state.name
            or spec.permission_set_id != state.permission_set_id
            or spec.model_set_id != state.model_set_id
        )

    def update(self, spec: RoleSpec, state: RoleState) -> RoleState:
        if not self.has_changes(spec, state):
            return state
        role = self._service.update_role(state.id, spec.name, spec.permission_set_id, spec.model_set_id)
        return RoleState.from_remote(role)

    def delete(self, state: RoleState) -> None:
        self._service.delete_role(state.id)

    def import_state(self, identifier: str) -> RoleState:
        return RoleState.from_remote(self._service.get_role(identifier))


__all__ = ["RoleSpec", "RoleState", "RoleUnit"]
