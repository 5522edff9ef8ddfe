"""Reconciliation driver: Read → plan → Create/Update/Delete across kinds.

The driver owns no remote logic of its own. It dispatches by ObjectKind
to the unit built for that kind, turns ``Vanished`` read outcomes into
drift warnings, and (when given a TrackedStateStore) persists whatever
state a pass produced, including the partial state of a failed pass.

Example::

    driver = ReconciliationDriver(service, store=InMemoryStateStore())
    driver.sync("group.analysts", ObjectKind.GROUP, {"name": "analysts", "user_emails": ["ana@example.com"]})
    driver.sync("group.analysts", ObjectKind.GROUP, {...})   # noop when nothing drifted
    driver.forget("group.analysts")
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ValidationError

from .exceptions import AccessControlError, ConfigurationError, InvalidSpecError, NotFoundError, PartialApplyError
from .interfaces import RemoteService
from .logging import AclLoggerAdapter, get_acl_logger
from .outcomes import AppliedOperation, OperationType, Vanished
from .resources import ObjectKind, build_units
from .state import TrackedStateStore

SpecInput = Union[BaseModel, Mapping[str, Any]]
StateInput = Union[BaseModel, Mapping[str, Any], None]


class PlannedAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    NOOP = "noop"


def _as_kind(kind: Union[ObjectKind, str]) -> ObjectKind:
    try:
        return ObjectKind(kind)
    except ValueError as e:
        raise InvalidSpecError(f"Unknown object kind: {kind!r}", kind=str(kind)) from e


def _coerce(model: type[BaseModel], value: Any, what: str) -> BaseModel:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except ValidationError as e:
        raise InvalidSpecError(f"Invalid {what}: {e}", model=model.__name__) from e


class ReconciliationDriver:
    """Drive units for every ObjectKind against one RemoteService.

    Args:
        service: RemoteService used to build the default units.
        units: Prebuilt units keyed by ObjectKind (overrides ``service``).
        store: Optional TrackedStateStore for ``sync``/``forget``.
        trace_id: Identifier stamped on every log line of this driver.
            A fresh uuid4 when omitted.
    """

    def __init__(
        self,
        service: Optional[RemoteService] = None,
        *,
        units: Optional[Mapping[Union[ObjectKind, str], Any]] = None,
        store: Optional[TrackedStateStore] = None,
        trace_id: Optional[Union[UUID, str]] = None,
    ) -> None:
        if units is None:
            if service is None:
                raise ConfigurationError("ReconciliationDriver needs a RemoteService or prebuilt units")
            units = build_units(service)
        self._units = {_as_kind(kind): unit for kind, unit in units.items()}
        self._store = store
        self.trace_id = str(trace_id or uuid4())
        self._logger = get_acl_logger(__name__, trace_id=self.trace_id)

    @property
    def store(self) -> Optional[TrackedStateStore]:
        return self._store

    def unit_for(self, kind: Union[ObjectKind, str]) -> Any:
        kind = _as_kind(kind)
        try:
            return self._units[kind]
        except KeyError:
            raise InvalidSpecError(f"No unit registered for kind {kind.value}", kind=kind.value) from None

    # ── Single-object operations ────────────────────────────────────

    def refresh(self, kind: Union[ObjectKind, str], tracked: StateInput) -> Optional[BaseModel]:
        """Read current remote state; None (with a drift warning) if it vanished."""
        return self._refresh(self.unit_for(kind), tracked, self._logger)

    def plan(self, kind: Union[ObjectKind, str], spec: SpecInput, tracked: StateInput) -> PlannedAction:
        """Decide what ``apply`` would do against ``tracked`` as given.

        ``tracked`` is not refreshed. Kinds whose change check depends on
        remote lookups (group emails are resolved to principals) still
        query the service.
        """
        unit = self.unit_for(kind)
        spec = _coerce(unit.spec_model, spec, "spec")
        if tracked is None:
            return PlannedAction.CREATE
        state = _coerce(unit.state_model, tracked, "tracked state")
        if unit.requires_replacement(spec, state):
            return PlannedAction.REPLACE
        if unit.has_changes(spec, state):
            return PlannedAction.UPDATE
        return PlannedAction.NOOP

    def apply(self, kind: Union[ObjectKind, str], spec: SpecInput, tracked: StateInput = None) -> BaseModel:
        """Refresh ``tracked``, plan, and converge the remote to ``spec``.

        Returns:
            The new tracked state.

        Raises:
            AccessControlError: Any failure from the unit, unchanged.
                Multi-call failures arrive as PartialApplyError, including
                a replacement whose create fails after the delete landed.
        """
        return self._apply(_as_kind(kind), spec, tracked, self._logger)

    def destroy(self, kind: Union[ObjectKind, str], tracked: StateInput) -> None:
        """Delete the remote object behind ``tracked``.

        An object that is already gone counts as destroyed; the drift is
        logged as a warning.
        """
        self._destroy(self.unit_for(kind), tracked, self._logger)

    def import_object(
        self,
        kind: Union[ObjectKind, str],
        identifier: str,
        address: Optional[str] = None,
    ) -> BaseModel:
        """Build tracked state from an existing remote object.

        When ``address`` is given the state is also saved to the store.
        """
        unit = self.unit_for(kind)
        state = unit.import_state(identifier)
        self._logger.info("Imported %s %s", unit.kind.value, identifier, object_address=address)
        if address is not None:
            self._require_store().save(address, unit.kind, state)
        return state

    # ── Store-backed operations ─────────────────────────────────────

    def sync(self, address: str, kind: Union[ObjectKind, str], spec: SpecInput) -> BaseModel:
        """Apply ``spec`` against the state tracked at ``address`` and save the result.

        On PartialApplyError the partial state is saved before re-raising,
        so the next pass starts from what actually landed.
        """
        store = self._require_store()
        kind = _as_kind(kind)
        log = self._logger.bind(object_address=address)

        record = store.load(address)
        tracked = None
        if record is not None:
            if record.kind != kind.value:
                raise InvalidSpecError(
                    f"Address {address} tracks a {record.kind}, not a {kind.value}",
                    address=address,
                    tracked_kind=record.kind,
                    kind=kind.value,
                )
            tracked = record.state

        try:
            state = self._apply(kind, spec, tracked, log)
        except PartialApplyError as e:
            if e.partial_state is not None:
                store.save(address, kind, e.partial_state)
                log.warning("Saved partial state after %d applied operation(s): %s", len(e.applied), e.message)
            elif any(op.op is OperationType.DELETE for op in e.applied):
                store.delete(address)
                log.warning("Dropped tracking after the replaced object was deleted: %s", e.message)
            raise

        store.save(address, kind, state)
        return state

    def forget(self, address: str) -> bool:
        """Destroy the object tracked at ``address`` and drop its record.

        Returns:
            False when nothing was tracked at ``address``.
        """
        store = self._require_store()
        record = store.load(address)
        if record is None:
            self._logger.debug("Nothing tracked", object_address=address)
            return False
        self._destroy(self.unit_for(record.kind), record.state, self._logger.bind(object_address=address))
        store.delete(address)
        return True

    # ── Internals ───────────────────────────────────────────────────

    def _require_store(self) -> TrackedStateStore:
        if self._store is None:
            raise ConfigurationError("This operation needs a TrackedStateStore")
        return self._store

    @staticmethod
    def _destroy(unit: Any, tracked: StateInput, log: AclLoggerAdapter) -> None:
        state = _coerce(unit.state_model, tracked, "tracked state")
        object_id = getattr(state, "id", None)
        try:
            unit.delete(state)
        except NotFoundError:
            log.warning("Drift: %s %s was already gone; nothing to destroy", unit.kind.value, object_id)
            return
        log.info("Destroyed %s %s", unit.kind.value, object_id)

    @staticmethod
    def _refresh(unit: Any, tracked: StateInput, log: AclLoggerAdapter) -> Optional[BaseModel]:
        state = _coerce(unit.state_model, tracked, "tracked state")
        result = unit.read(state)
        if isinstance(result, Vanished):
            log.warning(
                "Drift: %s %s is gone (%s); tracking dropped",
                result.kind,
                result.object_id,
                result.reason,
            )
            return None
        return result

    def _apply(self, kind: ObjectKind, spec: SpecInput, tracked: StateInput, log: AclLoggerAdapter) -> BaseModel:
        unit = self.unit_for(kind)
        spec = _coerce(unit.spec_model, spec, "spec")
        state = self._refresh(unit, tracked, log) if tracked is not None else None
        action = self.plan(kind, spec, state)
        log.info("Plan for %s: %s", kind.value, action.value)

        if action is PlannedAction.CREATE:
            return unit.create(spec)
        if action is PlannedAction.REPLACE:
            return self._replace(unit, spec, state)
        if action is PlannedAction.UPDATE:
            return unit.update(spec, state)
        return state

    @staticmethod
    def _replace(unit: Any, spec: BaseModel, state: BaseModel) -> BaseModel:
        deleted = AppliedOperation(op=OperationType.DELETE, target=str(getattr(state, "id", unit.kind.value)))
        unit.delete(state)
        try:
            return unit.create(spec)
        except PartialApplyError as e:
            raise PartialApplyError(
                e.message,
                applied=[deleted] + e.applied,
                failed=e.failed,
                cause=e.cause,
                partial_state=e.partial_state,
            ) from e
        except AccessControlError as e:
            raise PartialApplyError(
                f"Replacement of {unit.kind.value} {deleted.target} stopped after delete: {e.message}",
                applied=[deleted],
                failed=AppliedOperation(op=OperationType.CREATE, target=unit.kind.value),
                cause=e,
            ) from e


__all__ = ["PlannedAction", "ReconciliationDriver"]
