"""Read-only lookups by id or by name.

Every lookup takes exactly one of ``id`` or ``name``. A name that
matches nothing raises NotFoundError; a name that matches several
objects raises AmbiguousIdentityError rather than picking one.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, TypeVar

from pydantic import BaseModel, Field

from .exceptions import AmbiguousIdentityError, InvalidSpecError, NotFoundError
from .interfaces import RemoteService
from .models import Folder, ModelSet, PermissionSet, Role

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GroupLookup(BaseModel):
    """A group with its resolved membership."""

    id: str
    name: str
    user_ids: set[str] = Field(default_factory=set)
    user_count: int = 0


def _require_one(kind: str, id: Optional[str], name: Optional[str]) -> None:
    if bool(id) == bool(name):
        raise InvalidSpecError(
            f"Invalid input: exactly one of id or name is required to look up a {kind}",
            kind=kind,
        )


def _single(kind: str, name: str, matches: Sequence[T], id_of: Callable[[T], str]) -> T:
    if not matches:
        raise NotFoundError(f"No {kind} found with name {name}", kind=kind, name=name)
    if len(matches) > 1:
        raise AmbiguousIdentityError(
            f"Multiple {kind}s found with name {name}",
            kind=kind,
            name=name,
            matches=sorted(id_of(m) for m in matches),
        )
    return matches[0]


def lookup_permission_set(
    service: RemoteService, id: Optional[str] = None, name: Optional[str] = None
) -> PermissionSet:
    _require_one("permission set", id, name)
    if id:
        return service.get_permission_set(id)
    return _single("permission set", name, service.search_permission_sets(name), lambda p: p.id)


def lookup_model_set(service: RemoteService, id: Optional[str] = None, name: Optional[str] = None) -> ModelSet:
    _require_one("model set", id, name)
    if id:
        return service.get_model_set(id)
    return _single("model set", name, service.search_model_sets(name), lambda m: m.id)


def lookup_role(service: RemoteService, id: Optional[str] = None, name: Optional[str] = None) -> Role:
    _require_one("role", id, name)
    if id:
        return service.get_role(id)
    return _single("role", name, service.search_roles(name), lambda r: r.id)


def lookup_group(service: RemoteService, id: Optional[str] = None, name: Optional[str] = None) -> GroupLookup:
    """Find a group and list its members.

    ``user_count`` is the number of members actually listed, not the
    platform's cached counter.
    """
    _require_one("group", id, name)
    if id:
        group = service.get_group(id)
    else:
        group = _single("group", name, service.search_groups(name), lambda g: g.id)
    members = {p.id for p in service.list_members(group.id)}
    logger.debug("Group %s has %d member(s)", group.id, len(members))
    return GroupLookup(id=group.id, name=group.name, user_ids=members, user_count=len(members))


def lookup_folder(
    service: RemoteService,
    id: Optional[str] = None,
    name: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> Folder:
    """Find a folder by id, or by name within ``parent_id``."""
    _require_one("folder", id, name)
    if id:
        return service.get_container(id)
    if not parent_id:
        raise InvalidSpecError("Invalid input: parent_id is required when looking up a folder by name", name=name)
    return _single("folder", name, service.search_containers(name, parent_id), lambda f: f.id)


__all__ = [
    "GroupLookup",
    "lookup_folder",
    "lookup_group",
    "lookup_model_set",
    "lookup_permission_set",
    "lookup_role",
]
