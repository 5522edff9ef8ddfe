"""Seams between the reconciliation core and the outside world.

- ``RemoteService``: the BI platform API as the core consumes it. Concrete
  implementations own transport, auth and retries. Every method raises
  ``RemoteError`` on transport/API failure and lookups by id raise
  ``NotFoundError`` when the object does not exist.
- ``ReconciliationUnit``: what every managed object kind exposes to the
  driver.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Protocol, TypeVar, Union

from pydantic import BaseModel

from .models import (
    AccessContext,
    AccessGrant,
    Folder,
    Group,
    ModelSet,
    PermissionLevel,
    PermissionSet,
    Principal,
    Role,
)
from .outcomes import Vanished


class RemoteService(ABC):
    """Coarse CRUD primitives offered by the remote platform."""

    # ── Principals ──────────────────────────────────────

    @abstractmethod
    def search_principals_by_email(self, email: str) -> list[Principal]:
        raise NotImplementedError

    # ── Access grants ───────────────────────────────────

    @abstractmethod
    def list_grants(self, context_id: str) -> list[AccessGrant]:
        """All grants on a context. There is no server-side principal filter."""
        raise NotImplementedError

    @abstractmethod
    def create_grant(self, context_id: str, principal_id: str, level: PermissionLevel) -> AccessGrant:
        raise NotImplementedError

    @abstractmethod
    def update_grant(self, grant_id: str, level: PermissionLevel) -> AccessGrant:
        raise NotImplementedError

    @abstractmethod
    def delete_grant(self, grant_id: str) -> None:
        raise NotImplementedError

    # ── Groups & membership ─────────────────────────────

    @abstractmethod
    def create_group(self, name: str) -> Group:
        raise NotImplementedError

    @abstractmethod
    def get_group(self, group_id: str) -> Group:
        raise NotImplementedError

    @abstractmethod
    def update_group(self, group_id: str, name: str) -> Group:
        raise NotImplementedError

    @abstractmethod
    def delete_group(self, group_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def search_groups(self, name: str) -> list[Group]:
        raise NotImplementedError

    @abstractmethod
    def add_member(self, group_id: str, principal_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_member(self, group_id: str, principal_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_members(self, group_id: str) -> list[Principal]:
        raise NotImplementedError

    # ── Containers (folders) ────────────────────────────

    @abstractmethod
    def create_container(self, name: str, parent_id: str) -> Folder:
        raise NotImplementedError

    @abstractmethod
    def get_container(self, folder_id: str) -> Folder:
        raise NotImplementedError

    @abstractmethod
    def update_container(self, folder_id: str, name: str, parent_id: str) -> Folder:
        raise NotImplementedError

    @abstractmethod
    def delete_container(self, folder_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def search_containers(self, name: str, parent_id: str) -> list[Folder]:
        raise NotImplementedError

    @abstractmethod
    def get_access_context(self, context_id: str) -> AccessContext:
        raise NotImplementedError

    @abstractmethod
    def set_inheritance(self, context_id: str, inherits: bool) -> AccessContext:
        raise NotImplementedError

    # ── Permission sets ─────────────────────────────────

    @abstractmethod
    def create_permission_set(self, name: str, permissions: Iterable[str]) -> PermissionSet:
        raise NotImplementedError

    @abstractmethod
    def get_permission_set(self, permission_set_id: str) -> PermissionSet:
        raise NotImplementedError

    @abstractmethod
    def update_permission_set(self, permission_set_id: str, name: str, permissions: Iterable[str]) -> PermissionSet:
        raise NotImplementedError

    @abstractmethod
    def delete_permission_set(self, permission_set_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def search_permission_sets(self, name: str) -> list[PermissionSet]:
        raise NotImplementedError

    # ── Model sets ──────────────────────────────────────

    @abstractmethod
    def create_model_set(self, name: str, models: Iterable[str]) -> ModelSet:
        raise NotImplementedError

    @abstractmethod
    def get_model_set(self, model_set_id: str) -> ModelSet:
        raise NotImplementedError

    @abstractmethod
    def update_model_set(self, model_set_id: str, name: str, models: Iterable[str]) -> ModelSet:
        raise NotImplementedError

    @abstractmethod
    def delete_model_set(self, model_set_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def search_model_sets(self, name: str) -> list[ModelSet]:
        raise NotImplementedError

    # ── Roles ───────────────────────────────────────────

    @abstractmethod
    def create_role(self, name: str, permission_set_id: str, model_set_id: str) -> Role:
        raise NotImplementedError

    @abstractmethod
    def get_role(self, role_id: str) -> Role:
        raise NotImplementedError

    @abstractmethod
    def update_role(self, role_id: str, name: str, permission_set_id: str, model_set_id: str) -> Role:
        raise NotImplementedError

    @abstractmethod
    def delete_role(self, role_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def search_roles(self, name: str) -> list[Role]:
        raise NotImplementedError

    @abstractmethod
    def get_role_groups(self, role_id: str) -> list[Group]:
        raise NotImplementedError

    @abstractmethod
    def set_role_groups(self, role_id: str, group_ids: Iterable[str]) -> list[Group]:
        """Replace the complete set of groups attached to a role."""
        raise NotImplementedError


SpecT = TypeVar("SpecT", bound=BaseModel)
StateT = TypeVar("StateT", bound=BaseModel)


class ReconciliationUnit(Protocol[SpecT, StateT]):
    """Create/Read/Update/Delete/Import for one managed object kind.

    Units are constructed with the RemoteService they talk to and hold no
    other mutable state.
    """

    kind: str
    spec_model: type[SpecT]
    state_model: type[StateT]

    def create(self, spec: SpecT) -> StateT: ...

    def read(self, state: StateT) -> Union[StateT, Vanished]: ...

    def requires_replacement(self, spec: SpecT, state: StateT) -> bool: ...

    def has_changes(self, spec: SpecT, state: StateT) -> bool: ...

    def update(self, spec: SpecT, state: StateT) -> StateT: ...

    def delete(self, state: StateT) -> None: ...

    def import_state(self, identifier: str) -> StateT: ...


__all__ = ["ReconciliationUnit", "RemoteService"]
