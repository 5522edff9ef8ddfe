"""Unified exception hierarchy for lookeracl.

Every failure raised by the reconciliation core derives from
AccessControlError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to classes (callers that
  serialize failures across a process boundary use this)

Usage:
    from lookeracl.exceptions import (
        AccessControlError,
        AmbiguousIdentityError,
        NotFoundError,
    )

    try:
        principal_id = resolver.resolve("ana@example.com")
    except AmbiguousIdentityError as e:
        print(e.code, e.details["matches"])
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AccessControlError",
    "ConfigurationError",
    "NotFoundError",
    "AmbiguousIdentityError",
    "PreconditionFailedError",
    "NoInheritedGrantToOverride",
    "RemoteError",
    "InvalidSpecError",
    "InvariantViolationError",
    "PartialApplyError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AccessControlError(Exception):
    """Base exception for all lookeracl failures.

    Attributes:
        code: Stable error code string (e.g. "NOT_FOUND").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AccessControlError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class NotFoundError(AccessControlError):
    """A lookup yielded nothing.

    For the root read of a tracked object this is turned into a
    ``Vanished`` outcome by the resource unit instead of propagating.
    """

    code: str = "NOT_FOUND"
    message: str = "Object not found"


class AmbiguousIdentityError(AccessControlError):
    """A lookup that must match exactly one object matched several."""

    code: str = "AMBIGUOUS_IDENTITY"


class PreconditionFailedError(AccessControlError):
    """An operation's required starting state is absent."""

    code: str = "PRECONDITION_FAILED"


class NoInheritedGrantToOverride(PreconditionFailedError):
    """Override requested for a principal that holds no grant on the folder."""

    code: str = "NO_INHERITED_GRANT"

    def __init__(self, context_id: str, principal_id: str) -> None:
        super().__init__(
            f"No inherited permission found for principal {principal_id} on "
            f"content metadata {context_id} to override. The principal must have "
            "parent access first.",
            context_id=context_id,
            principal_id=principal_id,
        )


class RemoteError(AccessControlError):
    """Transport or API-level failure. The remote message is kept verbatim."""

    code: str = "REMOTE_ERROR"


class InvalidSpecError(AccessControlError):
    """Missing or mutually exclusive input in a desired spec or identifier."""

    code: str = "INVALID_SPEC"


class InvariantViolationError(AccessControlError):
    """The remote service returned data that breaks an assumed invariant."""

    code: str = "INVARIANT_VIOLATION"


class PartialApplyError(AccessControlError):
    """A multi-call sequence stopped partway through.

    Attributes:
        applied: Operations that completed before the failure, in order.
        failed: The operation that raised.
        partial_state: Tracked state reflecting exactly what succeeded,
            or None when nothing needs tracking.
        cause: The underlying AccessControlError.
    """

    code: str = "PARTIAL_APPLY"

    def __init__(
        self,
        message: str,
        *,
        applied: list[Any],
        failed: Any,
        cause: AccessControlError,
        partial_state: Any = None,
    ) -> None:
        super().__init__(
            message,
            applied=[str(op) for op in applied],
            failed=str(failed),
            cause_code=cause.code,
        )
        self.applied = list(applied)
        self.failed = failed
        self.cause = cause
        self.partial_state = partial_state


# ---- Error Registry for Protocol Mapping ------------------------------------

_E = TypeVar("_E", bound=type[AccessControlError])


class ErrorRegistry:
    """Registry for mapping stable error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AccessControlError]] = {}

    def register(self, code: str, error_cls: type[AccessControlError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[AccessControlError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[AccessControlError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceededError(RemoteError):
            code = "QUOTA_EXCEEDED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", AccessControlError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("NOT_FOUND", NotFoundError)
error_registry.register("AMBIGUOUS_IDENTITY", AmbiguousIdentityError)
error_registry.register("PRECONDITION_FAILED", PreconditionFailedError)
error_registry.register("NO_INHERITED_GRANT", NoInheritedGrantToOverride)
error_registry.register("REMOTE_ERROR", RemoteError)
error_registry.register("INVALID_SPEC", InvalidSpecError)
error_registry.register("INVARIANT_VIOLATION", InvariantViolationError)
error_registry.register("PARTIAL_APPLY", PartialApplyError)
