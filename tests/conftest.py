"""Shared fixtures: an in-memory RemoteService that records every call."""

from __future__ import annotations

import itertools
from typing import Any, Callable, Iterable, Optional

import pytest
from lookeracl import (
    AccessContext,
    AccessControlError,
    AccessGrant,
    Folder,
    Group,
    InMemoryStateStore,
    ModelSet,
    NotFoundError,
    PermissionLevel,
    PermissionSet,
    Principal,
    ReconciliationDriver,
    RemoteError,
    RemoteService,
    Role,
)

MUTATING_CALLS = frozenset(
    {
        "create_grant",
        "update_grant",
        "delete_grant",
        "create_group",
        "update_group",
        "delete_group",
        "add_member",
        "remove_member",
        "create_container",
        "update_container",
        "delete_container",
        "set_inheritance",
        "create_permission_set",
        "update_permission_set",
        "delete_permission_set",
        "create_model_set",
        "update_model_set",
        "delete_model_set",
        "create_role",
        "update_role",
        "delete_role",
        "set_role_groups",
    }
)


class FakeRemoteService(RemoteService):
    """Dict-backed platform double.

    ``seed_*`` helpers set up remote state without being recorded;
    every RemoteService method appends ``(name, args)`` to ``calls``.
    ``fail(name, ...)`` makes matching calls raise after being recorded.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.principals: dict[str, Principal] = {}
        self.groups: dict[str, Group] = {}
        self.members: dict[str, set[str]] = {}
        self.folders: dict[str, Folder] = {}
        self.contexts: dict[str, AccessContext] = {}
        self.grants: dict[str, AccessGrant] = {}
        self.permission_sets: dict[str, PermissionSet] = {}
        self.model_sets: dict[str, ModelSet] = {}
        self.roles: dict[str, Role] = {}
        self.role_groups: dict[str, list[str]] = {}
        self._failures: list[tuple[str, Callable[..., bool], AccessControlError]] = []
        self._ids = itertools.count(1)

    # ── Test helpers ────────────────────────────────────────────────

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def fail(
        self,
        method: str,
        error: Optional[AccessControlError] = None,
        when: Optional[Callable[..., bool]] = None,
    ) -> None:
        self._failures.append((method, when or (lambda *args: True), error or RemoteError(f"{method} failed")))

    def clear_failures(self) -> None:
        self._failures.clear()

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    @property
    def mutations(self) -> list[tuple[str, tuple[Any, ...]]]:
        return [call for call in self.calls if call[0] in MUTATING_CALLS]

    def reset_calls(self) -> None:
        self.calls.clear()

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append((method, args))
        for name, when, error in self._failures:
            if name == method and when(*args):
                raise error

    def seed_principal(self, principal_id: str, email: Optional[str] = None) -> Principal:
        principal = Principal(id=principal_id, email=email)
        self.principals[principal_id] = principal
        return principal

    def seed_group(self, name: str, members: Iterable[str] = (), group_id: Optional[str] = None) -> Group:
        group = Group(id=group_id or self._next_id("group"), name=name)
        self.groups[group.id] = group
        self.members[group.id] = set(members)
        return group

    def seed_folder(self, name: str, parent_id: Optional[str] = "1", inherits: bool = True) -> Folder:
        folder = Folder(
            id=self._next_id("folder"),
            name=name,
            parent_id=parent_id,
            content_metadata_id=self._next_id("cm"),
        )
        self.folders[folder.id] = folder
        self.contexts[folder.content_metadata_id] = AccessContext(id=folder.content_metadata_id, inherits=inherits)
        return folder

    def seed_grant(self, context_id: str, principal_id: str, level: PermissionLevel) -> AccessGrant:
        grant = AccessGrant(
            id=self._next_id("grant"),
            context_id=context_id,
            principal_id=principal_id,
            level=PermissionLevel(level),
        )
        self.grants[grant.id] = grant
        return grant

    def seed_role(self, name: str, permission_set_id: str = "ps-1", model_set_id: str = "ms-1") -> Role:
        role = Role(id=self._next_id("role"), name=name, permission_set_id=permission_set_id, model_set_id=model_set_id)
        self.roles[role.id] = role
        self.role_groups[role.id] = []
        return role

    @staticmethod
    def _get(table: dict[str, Any], key: str, kind: str) -> Any:
        try:
            return table[key]
        except KeyError:
            raise NotFoundError(f"{kind} {key} not found") from None

    # ── Principals and grants ───────────────────────────────────────

    def search_principals_by_email(self, email: str) -> list[Principal]:
        self._record("search_principals_by_email", email)
        return [p for p in self.principals.values() if p.email == email]

    def list_grants(self, context_id: str) -> list[AccessGrant]:
        self._record("list_grants", context_id)
        return [g for g in self.grants.values() if g.context_id == context_id]

    def create_grant(self, context_id: str, principal_id: str, level: PermissionLevel) -> AccessGrant:
        self._record("create_grant", context_id, principal_id, level)
        grant = AccessGrant(
            id=self._next_id("grant"),
            context_id=context_id,
            principal_id=principal_id,
            level=PermissionLevel(level),
        )
        self.grants[grant.id] = grant
        return grant

    def update_grant(self, grant_id: str, level: PermissionLevel) -> AccessGrant:
        self._record("update_grant", grant_id, level)
        grant = self._get(self.grants, grant_id, "grant")
        updated = grant.model_copy(update={"level": PermissionLevel(level)})
        self.grants[grant_id] = updated
        return updated

    def delete_grant(self, grant_id: str) -> None:
        self._record("delete_grant", grant_id)
        self._get(self.grants, grant_id, "grant")
        del self.grants[grant_id]

    # ── Groups ──────────────────────────────────────────────────────

    def create_group(self, name: str) -> Group:
        self._record("create_group", name)
        group = Group(id=self._next_id("group"), name=name)
        self.groups[group.id] = group
        self.members[group.id] = set()
        return group

    def get_group(self, group_id: str) -> Group:
        self._record("get_group", group_id)
        group = self._get(self.groups, group_id, "group")
        return group.model_copy(update={"user_count": len(self.members[group_id])})

    def update_group(self, group_id: str, name: str) -> Group:
        self._record("update_group", group_id, name)
        group = self._get(self.groups, group_id, "group").model_copy(update={"name": name})
        self.groups[group_id] = group
        return group

    def delete_group(self, group_id: str) -> None:
        self._record("delete_group", group_id)
        self._get(self.groups, group_id, "group")
        del self.groups[group_id]
        self.members.pop(group_id, None)

    def search_groups(self, name: str) -> list[Group]:
        self._record("search_groups", name)
        return [g for g in self.groups.values() if g.name == name]

    def add_member(self, group_id: str, principal_id: str) -> None:
        self._record("add_member", group_id, principal_id)
        self._get(self.groups, group_id, "group")
        self.members[group_id].add(principal_id)

    def remove_member(self, group_id: str, principal_id: str) -> None:
        self._record("remove_member", group_id, principal_id)
        self._get(self.groups, group_id, "group")
        self.members[group_id].discard(principal_id)

    def list_members(self, group_id: str) -> list[Principal]:
        self._record("list_members", group_id)
        self._get(self.groups, group_id, "group")
        return [self.principals.get(pid, Principal(id=pid)) for pid in sorted(self.members[group_id])]

    # ── Folders ─────────────────────────────────────────────────────

    def create_container(self, name: str, parent_id: str) -> Folder:
        self._record("create_container", name, parent_id)
        folder = Folder(
            id=self._next_id("folder"),
            name=name,
            parent_id=parent_id,
            content_metadata_id=self._next_id("cm"),
        )
        self.folders[folder.id] = folder
        self.contexts[folder.content_metadata_id] = AccessContext(id=folder.content_metadata_id)
        return folder

    def get_container(self, folder_id: str) -> Folder:
        self._record("get_container", folder_id)
        return self._get(self.folders, folder_id, "folder")

    def update_container(self, folder_id: str, name: str, parent_id: str) -> Folder:
        self._record("update_container", folder_id, name, parent_id)
        folder = self._get(self.folders, folder_id, "folder").model_copy(update={"name": name, "parent_id": parent_id})
        self.folders[folder_id] = folder
        return folder

    def delete_container(self, folder_id: str) -> None:
        self._record("delete_container", folder_id)
        folder = self._get(self.folders, folder_id, "folder")
        del self.folders[folder_id]
        self.contexts.pop(folder.content_metadata_id, None)

    def search_containers(self, name: str, parent_id: str) -> list[Folder]:
        self._record("search_containers", name, parent_id)
        return [f for f in self.folders.values() if f.name == name and f.parent_id == parent_id]

    def get_access_context(self, context_id: str) -> AccessContext:
        self._record("get_access_context", context_id)
        return self._get(self.contexts, context_id, "content metadata")

    def set_inheritance(self, context_id: str, inherits: bool) -> AccessContext:
        self._record("set_inheritance", context_id, inherits)
        context = self._get(self.contexts, context_id, "content metadata").model_copy(update={"inherits": inherits})
        self.contexts[context_id] = context
        return context

    # ── Permission sets ─────────────────────────────────────────────

    def create_permission_set(self, name: str, permissions: Iterable[str]) -> PermissionSet:
        self._record("create_permission_set", name, tuple(permissions))
        ps = PermissionSet(id=self._next_id("ps"), name=name, permissions=set(permissions), url="/ps")
        self.permission_sets[ps.id] = ps
        return ps

    def get_permission_set(self, permission_set_id: str) -> PermissionSet:
        self._record("get_permission_set", permission_set_id)
        return self._get(self.permission_sets, permission_set_id, "permission set")

    def update_permission_set(self, permission_set_id: str, name: str, permissions: Iterable[str]) -> PermissionSet:
        self._record("update_permission_set", permission_set_id, name, tuple(permissions))
        ps = self._get(self.permission_sets, permission_set_id, "permission set")
        ps = ps.model_copy(update={"name": name, "permissions": set(permissions)})
        self.permission_sets[permission_set_id] = ps
        return ps

    def delete_permission_set(self, permission_set_id: str) -> None:
        self._record("delete_permission_set", permission_set_id)
        self._get(self.permission_sets, permission_set_id, "permission set")
        del self.permission_sets[permission_set_id]

    def search_permission_sets(self, name: str) -> list[PermissionSet]:
        self._record("search_permission_sets", name)
        return [p for p in self.permission_sets.values() if p.name == name]

    # ── Model sets ──────────────────────────────────────────────────

    def create_model_set(self, name: str, models: Iterable[str]) -> ModelSet:
        self._record("create_model_set", name, tuple(models))
        ms = ModelSet(id=self._next_id("ms"), name=name, models=set(models))
        self.model_sets[ms.id] = ms
        return ms

    def get_model_set(self, model_set_id: str) -> ModelSet:
        self._record("get_model_set", model_set_id)
        return self._get(self.model_sets, model_set_id, "model set")

    def update_model_set(self, model_set_id: str, name: str, models: Iterable[str]) -> ModelSet:
        self._record("update_model_set", model_set_id, name, tuple(models))
        ms = self._get(self.model_sets, model_set_id, "model set").model_copy(
            update={"name": name, "models": set(models)}
        )
        self.model_sets[model_set_id] = ms
        return ms

    def delete_model_set(self, model_set_id: str) -> None:
        self._record("delete_model_set", model_set_id)
        self._get(self.model_sets, model_set_id, "model set")
        del self.model_sets[model_set_id]

    def search_model_sets(self, name: str) -> list[ModelSet]:
        self._record("search_model_sets", name)
        return [m for m in self.model_sets.values() if m.name == name]

    # ── Roles ───────────────────────────────────────────────────────

    def create_role(self, name: str, permission_set_id: str, model_set_id: str) -> Role:
        self._record("create_role", name, permission_set_id, model_set_id)
        role = Role(id=self._next_id("role"), name=name, permission_set_id=permission_set_id, model_set_id=model_set_id)
        self.roles[role.id] = role
        self.role_groups[role.id] = []
        return role

    def get_role(self, role_id: str) -> Role:
        self._record("get_role", role_id)
        return self._get(self.roles, role_id, "role")

    def update_role(self, role_id: str, name: str, permission_set_id: str, model_set_id: str) -> Role:
        self._record("update_role", role_id, name, permission_set_id, model_set_id)
        role = self._get(self.roles, role_id, "role").model_copy(
            update={"name": name, "permission_set_id": permission_set_id, "model_set_id": model_set_id}
        )
        self.roles[role_id] = role
        return role

    def delete_role(self, role_id: str) -> None:
        self._record("delete_role", role_id)
        self._get(self.roles, role_id, "role")
        del self.roles[role_id]
        self.role_groups.pop(role_id, None)

    def search_roles(self, name: str) -> list[Role]:
        self._record("search_roles", name)
        return [r for r in self.roles.values() if r.name == name]

    def get_role_groups(self, role_id: str) -> list[Group]:
        self._record("get_role_groups", role_id)
        self._get(self.roles, role_id, "role")
        return [self.groups.get(gid, Group(id=gid, name=gid)) for gid in self.role_groups[role_id]]

    def set_role_groups(self, role_id: str, group_ids: Iterable[str]) -> list[Group]:
        group_ids = list(group_ids)
        self._record("set_role_groups", role_id, tuple(group_ids))
        self._get(self.roles, role_id, "role")
        self.role_groups[role_id] = group_ids
        return [self.groups.get(gid, Group(id=gid, name=gid)) for gid in group_ids]


@pytest.fixture
def service() -> FakeRemoteService:
    return FakeRemoteService()


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def driver(service: FakeRemoteService, store: InMemoryStateStore) -> ReconciliationDriver:
    return ReconciliationDriver(service, store=store, trace_id="test-trace")
