"""Closed set of managed object kinds."""

from __future__ import annotations

from enum import Enum


class ObjectKind(str, Enum):
    PERMISSION_SET = "permission_set"
    MODEL_SET = "model_set"
    ROLE = "role"
    ROLE_GROUPS = "role_groups"
    GROUP = "group"
    FOLDER = "folder"
    FOLDER_ACCESS = "folder_access"
    FOLDER_PERMISSION_OVERRIDE = "folder_permission_override"


__all__ = ["ObjectKind"]
