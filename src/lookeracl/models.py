"""Records exchanged with the remote BI platform.

These are Pydantic models describing what the RemoteService returns.
They carry no reconciliation logic.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PermissionLevel(str, Enum):
    """Access level of a folder grant. Closed set."""

    VIEW = "view"
    EDIT = "edit"


class GrantOrigin(str, Enum):
    """How a tracked grant came under management.

    - CREATED: this system minted the grant
    - ADOPTED: the grant pre-existed (inherited or set by someone else)
      and was found by principal, then tracked or mutated in place
    """

    CREATED = "created"
    ADOPTED = "adopted"


class Principal(BaseModel):
    """An identity that can hold access (a platform user)."""

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


class Group(BaseModel):
    id: str
    name: str
    user_count: Optional[int] = None


class Folder(BaseModel):
    """A container resource. Access grants attach to its content metadata."""

    id: str
    name: str
    parent_id: Optional[str] = None
    content_metadata_id: str


class AccessContext(BaseModel):
    """The access-control context (content metadata) attached to a folder."""

    id: str
    inherits: bool = True


class AccessGrant(BaseModel):
    """One (principal, level) pair on exactly one access-control context."""

    id: str
    context_id: str
    principal_id: str
    level: PermissionLevel


class PermissionSet(BaseModel):
    id: str
    name: str
    permissions: set[str] = Field(default_factory=set)
    built_in: bool = False
    all_access: bool = False
    url: Optional[str] = None


class ModelSet(BaseModel):
    id: str
    name: str
    models: set[str] = Field(default_factory=set)
    built_in: bool = False
    all_access: bool = False
    url: Optional[str] = None


class Role(BaseModel):
    id: str
    name: str
    permission_set_id: Optional[str] = None
    model_set_id: Optional[str] = None
    url: Optional[str] = None


__all__ = [
    "AccessContext",
    "AccessGrant",
    "Folder",
    "GrantOrigin",
    "Group",
    "ModelSet",
    "PermissionLevel",
    "PermissionSet",
    "Principal",
    "Role",
]
