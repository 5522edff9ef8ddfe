"""The set of groups attached to one role.

The platform only exposes full replacement of this list. The membership
differ decides whether a replacement is needed at all.
"""

from __future__ import annotations

import logging
from typing import Union

from pydantic import BaseModel, Field

from ..exceptions import NotFoundError
from ..interfaces import RemoteService
from ..outcomes import Vanished
from ..reconcile.membership import diff_membership
from .kinds import ObjectKind

logger = logging.getLogger(__name__)


class RoleGroupsSpec(BaseModel):
    model_config = {"extra": "forbid"}

    role_id: str = Field(min_length=1)
    group_ids: set[str] = Field(default_factory=set)


class RoleGroupsState(BaseModel):
    """Tracked by role id; ``id`` mirrors ``role_id``."""

    id: str
    role_id: str
    group_ids: set[str] = Field(default_factory=set)


class RoleGroupsUnit:
    kind = ObjectKind.ROLE_GROUPS
    spec_model = RoleGroupsSpec
    state_model = RoleGroupsState

    def __init__(self, service: RemoteService) -> None:
        self._service = service

    def create(self, spec: RoleGroupsSpec) -> RoleGroupsState:
        return self._replace(spec.role_id, spec.group_ids)

    def read(self, state: RoleGroupsState) -> Union[RoleGroupsState, Vanished]:
        try:
            groups = self._service.get_role_groups(state.role_id)
        except NotFoundError:
            return Vanished(kind=self.kind.value, object_id=state.role_id, reason="role not found")
        return RoleGroupsState(id=state.role_id, role_id=state.role_id, group_ids={g.id for g in groups})

    def requires_replacement(self, spec: RoleGroupsSpec, state: RoleGroupsState) -> bool:
        return spec.role_id != state.role_id

    def has_changes(self, spec: RoleGroupsSpec, state: RoleGroupsState) -> bool:
        return not diff_membership(spec.group_ids, state.group_ids).is_empty

    def update(self, spec: RoleGroupsSpec, state: RoleGroupsState) -> RoleGroupsState:
        delta = diff_membership(spec.group_ids, state.group_ids)
        if delta.is_empty:
            return state
        logger.info(
            "Role %s groups: +%s -%s",
            state.role_id,
            sorted(delta.to_add),
            sorted(delta.to_remove),
        )
        return self._replace(state.role_id, spec.group_ids)

    def delete(self, state: RoleGroupsState) -> None:
        self._service.set_role_groups(state.role_id, [])

    def import_state(self, identifier: str) -> RoleGroupsState:
        groups = self._service.get_role_groups(identifier)
        return RoleGroupsState(id=identifier, role_id=identifier, group_ids={g.id for g in groups})

    def _replace(self, role_id: str, group_ids: set[str]) -> RoleGroupsState:
        groups = self._service.set_role_groups(role_id, sorted(group_ids))
        return RoleGroupsState(id=role_id, role_id=role_id, group_ids={g.id for g in groups})


__all__ = ["RoleGroupsSpec", "RoleGroupsState", "RoleGroupsUnit"]
