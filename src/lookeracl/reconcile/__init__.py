"""Reconciliation building blocks shared by the object kinds.

Defines:
- IdentityResolver: email → exactly one principal id
- diff_membership / MembershipApplier: set delta and its ordered application
- GrantLocator / GrantReconciler: one grant per principal per context
- OverrideWorkflow: convert an inherited grant in place, never revert it
"""

from .grants import GrantAction, GrantLocator, GrantReconciler, GrantResolution
from .identity import IdentityResolver
from .membership import MembershipApplier, MembershipDelta, diff_membership
from .override import NON_REVERSION_WARNING, OverrideCheck, OverrideStatus, OverrideWorkflow

__all__ = [
    "NON_REVERSION_WARNING",
    "GrantAction",
    "GrantLocator",
    "GrantReconciler",
    "GrantResolution",
    "IdentityResolver",
    "MembershipApplier",
    "MembershipDelta",
    "OverrideCheck",
    "OverrideStatus",
    "OverrideWorkflow",
    "diff_membership",
]
