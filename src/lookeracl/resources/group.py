"""Group with a managed membership set.

Desired members are given as principal ids, emails, or both; the two
are unioned after email resolution. Membership is converged by diffing
against what the platform reports, so only the delta is sent.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..exceptions import NotFoundError, PartialApplyError
from ..interfaces import RemoteService
from ..outcomes import AppliedOperation, OperationType, Vanished
from ..reconcile.identity import IdentityResolver
from ..reconcile.membership import MembershipApplier, diff_membership
from .kinds import ObjectKind

logger = logging.getLogger(__name__)


class GroupSpec(BaseModel):
    model_config = {"extra": "forbid"}

    name: str = Field(min_length=1)
    user_ids: set[str] = Field(default_factory=set)
    user_emails: set[str] = Field(default_factory=set)


class GroupState(BaseModel):
    id: str
    name: str
    user_ids: set[str] = Field(default_factory=set)


class GroupUnit:
    kind = ObjectKind.GROUP
    spec_model = GroupSpec
    state_model = GroupState

    def __init__(self, service: RemoteService, resolver: Optional[IdentityResolver] = None) -> None:
        self._service = service
        self._resolver = resolver or IdentityResolver(service)
        self._applier = MembershipApplier(service)

    def desired_members(self, spec: GroupSpec) -> set[str]:
        """Union of explicit ids and resolved emails.

        Raises:
            NotFoundError: An email matches no principal.
            AmbiguousIdentityError: An email matches several principals.
        """
        return set(spec.user_ids) | self._resolver.resolve_all(spec.user_emails)

    def create(self, spec: GroupSpec) -> GroupState:
        # Resolve before creating so a bad email leaves nothing behind.
        desired = self.desired_members(spec)
        group = self._service.create_group(spec.name)
        logger.info("Created group %s (%s)", group.id, group.name)

        state = GroupState(id=group.id, name=group.name)
        return self._converge(state, desired, applied=[AppliedOperation(op=OperationType.CREATE, target=group.id)])

    def read(self, state: GroupState) -> Union[GroupState, Vanished]:
        try:
            group = self._service.get_group(state.id)
            members = self._service.list_members(state.id)
        except NotFoundError:
            return Vanished(kind=self.kind.value, object_id=state.id)
        return GroupState(id=group.id, name=group.name, user_ids={p.id for p in members})

    def requires_replacement(self, spec: GroupSpec, state: GroupState) -> bool:
        return False

    def has_changes(self, spec: GroupSpec, state: GroupState) -> bool:
        if spec.name != state.name:
            return True
        return not diff_membership(self.desired_members(spec), state.user_ids).is_empty

    def update(self, spec: GroupSpec, state: GroupState) -> GroupState:
        desired = self.desired_members(spec)
        applied: list[AppliedOperation] = []
        if spec.name != state.name:
            group = self._service.update_group(state.id, spec.name)
            applied.append(AppliedOperation(op=OperationType.UPDATE, target=state.id))
            state = state.model_copy(update={"name": group.name})
        return self._converge(state, desired, applied=applied)

    def delete(self, state: GroupState) -> None:
        self._service.delete_group(state.id)

    def import_state(self, identifier: str) -> GroupState:
        group = self._service.get_group(identifier)
        members = self._service.list_members(identifier)
        return GroupState(id=group.id, name=group.name, user_ids={p.id for p in members})

    def _converge(self, state: GroupState, desired: set[str], applied: list[AppliedOperation]) -> GroupState:
        delta = diff_membership(desired, state.user_ids)
        if delta.is_empty:
            return state
        try:
            members = self._applier.apply(state.id, state.user_ids, delta)
        except PartialApplyError as e:
            partial = state.model_copy(update={"user_ids": set(e.partial_state)})
            raise PartialApplyError(
                e.message,
                applied=applied + e.applied,
                failed=e.failed,
                cause=e.cause,
                partial_state=partial,
            ) from e
        return state.model_copy(update={"user_ids": members})


__all__ = ["GroupSpec", "GroupState", "GroupUnit"]
