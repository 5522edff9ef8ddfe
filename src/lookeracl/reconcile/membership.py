"""Set-diffing and application of group membership.

``diff_membership`` is pure set algebra. ``MembershipApplier`` pushes a
delta to the remote service one member at a time, all additions first,
and reports exactly which calls landed if one of them fails.
"""

from __future__ import annotations

import logging
from typing import AbstractSet

from pydantic import BaseModel, Field

from ..exceptions import AccessControlError, PartialApplyError
from ..interfaces import RemoteService
from ..outcomes import AppliedOperation, OperationType

logger = logging.getLogger(__name__)


class MembershipDelta(BaseModel):
    """Members to add and remove to turn an observed set into a desired one."""

    to_add: frozenset[str] = Field(default_factory=frozenset)
    to_remove: frozenset[str] = Field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove

    def apply_to(self, observed: AbstractSet[str]) -> set[str]:
        """Result of applying this delta to ``observed`` (no remote calls)."""
        return (set(observed) | self.to_add) - self.to_remove


def diff_membership(desired: AbstractSet[str], observed: AbstractSet[str]) -> MembershipDelta:
    """Compute ``(desired - observed, observed - desired)``.

    Example::

        >>> d = diff_membership({"u1", "u2", "u3"}, {"u1", "u4"})
        >>> sorted(d.to_add), sorted(d.to_remove)
        (['u2', 'u3'], ['u4'])
    """
    desired = frozenset(desired)
    observed = frozenset(observed)
    return MembershipDelta(to_add=desired - observed, to_remove=observed - desired)


class MembershipApplier:
    """Apply a MembershipDelta to one group through the remote service."""

    def __init__(self, service: RemoteService) -> None:
        self._service = service

    def apply(self, group_id: str, observed: AbstractSet[str], delta: MembershipDelta) -> set[str]:
        """Issue one add/remove call per member; adds run before removes.

        Args:
            group_id: Group being converged.
            observed: Membership before any call in this pass.
            delta: Output of ``diff_membership``.

        Returns:
            The membership after every call succeeded.

        Raises:
            PartialApplyError: A call failed. ``partial_state`` holds the
                membership reflecting only the calls that succeeded.
        """
        current = set(observed)
        applied: list[AppliedOperation] = []

        # Sorted so a failure report is reproducible across runs.
        for principal_id in sorted(delta.to_add):
            op = AppliedOperation(op=OperationType.ADD_MEMBER, target=group_id, subject=principal_id)
            try:
                self._service.add_member(group_id, principal_id)
            except AccessControlError as e:
                raise self._partial(op, applied, current, e) from e
            current.add(principal_id)
            applied.append(op)

        for principal_id in sorted(delta.to_remove):
            op = AppliedOperation(op=OperationType.REMOVE_MEMBER, target=group_id, subject=principal_id)
            try:
                self._service.remove_member(group_id, principal_id)
            except AccessControlError as e:
                raise self._partial(op, applied, current, e) from e
            current.discard(principal_id)
            applied.append(op)

        if applied:
            logger.info(
                "Converged membership of group %s: +%d -%d",
                group_id,
                len(delta.to_add),
                len(delta.to_remove),
            )
        return current

    @staticmethod
    def _partial(
        failed: AppliedOperation,
        applied: list[AppliedOperation],
        current: set[str],
        cause: AccessControlError,
    ) -> PartialApplyError:
        logger.warning(
            "Membership change %s failed after %d successful call(s): %s",
            failed,
            len(applied),
            cause.message,
        )
        return PartialApplyError(
            f"Failed to apply {failed}: {cause.message}",
            applied=applied,
            failed=failed,
            cause=cause,
            partial_state=set(current),
        )


__all__ = ["MembershipApplier", "MembershipDelta", "diff_membership"]
