"""
Managed object kinds and their reconciliation units.

Each kind maps to one unit class constructed with a RemoteService:

    from lookeracl.resources import ObjectKind, build_units

    units = build_units(service)
    state = units[ObjectKind.GROUP].create(GroupSpec(name="analysts", user_ids={"7"}))
"""

from __future__ import annotations

from ..interfaces import RemoteService
from .folder import FolderSpec, FolderState, FolderUnit
from .folder_access import FolderAccessSpec, FolderAccessState, FolderAccessUnit, parse_import_id
from .folder_override import FolderOverrideSpec, FolderOverrideState, FolderOverrideUnit
from .group import GroupSpec, GroupState, GroupUnit
from .kinds import ObjectKind
from .model_set import ModelSetSpec, ModelSetState, ModelSetUnit
from .permission_set import PermissionSetSpec, PermissionSetState, PermissionSetUnit
from .role import RoleSpec, RoleState, RoleUnit
from .role_groups import RoleGroupsSpec, RoleGroupsState, RoleGroupsUnit

RESOURCE_UNITS: dict[ObjectKind, type] = {
    ObjectKind.PERMISSION_SET: PermissionSetUnit,
    ObjectKind.MODEL_SET: ModelSetUnit,
    ObjectKind.ROLE: RoleUnit,
    ObjectKind.ROLE_GROUPS: RoleGroupsUnit,
    ObjectKind.GROUP: GroupUnit,
    ObjectKind.FOLDER: FolderUnit,
    ObjectKind.FOLDER_ACCESS: FolderAccessUnit,
    ObjectKind.FOLDER_PERMISSION_OVERRIDE: FolderOverrideUnit,
}


def build_units(service: RemoteService) -> dict[ObjectKind, object]:
    """Instantiate every unit against one RemoteService."""
    return {kind: unit_cls(service) for kind, unit_cls in RESOURCE_UNITS.items()}


__all__ = [
    "RESOURCE_UNITS",
    "build_units",
    "ObjectKind",
    # Units
    "FolderAccessUnit",
    "FolderOverrideUnit",
    "FolderUnit",
    "GroupUnit",
    "ModelSetUnit",
    "PermissionSetUnit",
    "RoleGroupsUnit",
    "RoleUnit",
    # Specs and states
    "FolderAccessSpec",
    "FolderAccessState",
    "FolderOverrideSpec",
    "FolderOverrideState",
    "FolderSpec",
    "FolderState",
    "GroupSpec",
    "GroupState",
    "ModelSetSpec",
    "ModelSetState",
    "PermissionSetSpec",
    "PermissionSetState",
    "RoleGroupsSpec",
    "RoleGroupsState",
    "RoleSpec",
    "RoleState",
    "parse_import_id",
]
