from .config import AclConfig, LogLevel, load_config_from_env
from .driver import PlannedAction, ReconciliationDriver
from .exceptions import (
    AccessControlError,
    AmbiguousIdentityError,
    ConfigurationError,
    InvalidSpecError,
    InvariantViolationError,
    NoInheritedGrantToOverride,
    NotFoundError,
    PartialApplyError,
    PreconditionFailedError,
    RemoteError,
    error_registry,
    register_error,
)
from .interfaces import ReconciliationUnit, RemoteService
from .logging import (
    AclLogFormatter,
    AclLoggerAdapter,
    get_acl_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from .lookups import (
    GroupLookup,
    lookup_folder,
    lookup_group,
    lookup_model_set,
    lookup_permission_set,
    lookup_role,
)
from .models import (
    AccessContext,
    AccessGrant,
    Folder,
    GrantOrigin,
    Group,
    ModelSet,
    PermissionLevel,
    PermissionSet,
    Principal,
    Role,
)
from .outcomes import AppliedOperation, OperationType, Vanished
from .resources import RESOURCE_UNITS, ObjectKind, build_units
from .state import InMemoryStateStore, RedisStateStore, TrackedRecord, TrackedStateStore

__all__ = [
    'AclConfig',
    'LogLevel',
    'load_config_from_env',
    'PlannedAction',
    'ReconciliationDriver',
    'AccessControlError',
    'AmbiguousIdentityError',
    'ConfigurationError',
    'InvalidSpecError',
    'InvariantViolationError',
    'NoInheritedGrantToOverride',
    'NotFoundError',
    'PartialApplyError',
    'PreconditionFailedError',
    'RemoteError',
    'error_registry',
    'register_error',
    'ReconciliationUnit',
    'RemoteService',
    'AclLogFormatter',
    'AclLoggerAdapter',
    'get_acl_logger',
    'redact_secrets',
    'safe_log_value',
    'safe_preview',
    'setup_logging',
    'GroupLookup',
    'lookup_folder',
    'lookup_group',
    'lookup_model_set',
    'lookup_permission_set',
    'lookup_role',
    'AccessContext',
    'AccessGrant',
    'Folder',
    'GrantOrigin',
    'Group',
    'ModelSet',
    'PermissionLevel',
    'PermissionSet',
    'Principal',
    'Role',
    'AppliedOperation',
    'OperationType',
    'Vanished',
    'RESOURCE_UNITS',
    'ObjectKind',
    'build_units',
    'InMemoryStateStore',
    'RedisStateStore',
    'TrackedRecord',
    'TrackedStateStore',
]
