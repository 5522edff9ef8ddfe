"""Tracked state persistence between reconciliation passes.

Each managed object is stored under an operator-chosen address (for
example ``"group.analysts"``) as ``{"kind": ..., "state": {...}}``.
States are kept as JSON-compatible dicts; the driver turns them back
into the kind's pydantic state model.

Backends:
- InMemoryStateStore: process-local, used in tests and one-shot runs
- RedisStateStore: JSON values under a key prefix in Redis

Redis is an OPTIONAL dependency (``pip install lookeracl[redis]``) and is
only imported when a RedisStateStore is built without an injected client.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel

from .config import load_config_from_env
from .exceptions import ConfigurationError, InvariantViolationError

logger = logging.getLogger(__name__)


@dataclass
class TrackedRecord:
    """One tracked object as persisted."""

    kind: str
    state: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps({"kind": self.kind, "state": self.state}, sort_keys=True)

    @classmethod
    def from_json(cls, address: str, raw: str) -> "TrackedRecord":
        try:
            data = json.loads(raw)
            return cls(kind=data["kind"], state=dict(data["state"]))
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise InvariantViolationError(
                f"Corrupt tracked state for {address}: {e}",
                address=address,
            ) from e


def _kind_name(kind: Union[str, Enum]) -> str:
    return kind.value if isinstance(kind, Enum) else kind


def _dump_state(state: Union[BaseModel, dict[str, Any]]) -> dict[str, Any]:
    if isinstance(state, BaseModel):
        return state.model_dump(mode="json")
    return dict(state)


class TrackedStateStore(ABC):
    """Address → (kind, state) mapping."""

    @abstractmethod
    def load(self, address: str) -> Optional[TrackedRecord]:
        """Return the record at ``address``, or None if nothing is tracked."""
        raise NotImplementedError

    @abstractmethod
    def save(self, address: str, kind: str, state: Union[BaseModel, dict[str, Any]]) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, address: str) -> None:
        """Forget ``address``. Missing addresses are ignored."""
        raise NotImplementedError

    @abstractmethod
    def addresses(self) -> list[str]:
        """All tracked addresses, sorted."""
        raise NotImplementedError


class InMemoryStateStore(TrackedStateStore):
    def __init__(self) -> None:
        self._records: dict[str, TrackedRecord] = {}

    def load(self, address: str) -> Optional[TrackedRecord]:
        record = self._records.get(address)
        if record is None:
            return None
        return TrackedRecord(kind=record.kind, state=dict(record.state))

    def save(self, address: str, kind: str, state: Union[BaseModel, dict[str, Any]]) -> None:
        self._records[address] = TrackedRecord(kind=_kind_name(kind), state=_dump_state(state))

    def delete(self, address: str) -> None:
        self._records.pop(address, None)

    def addresses(self) -> list[str]:
        return sorted(self._records)


# ── Redis backend ───────────────────────────────────────────────────


class RedisStateStore(TrackedStateStore):
    """Tracked state in Redis, one JSON string per address.

    Args:
        redis_url: Redis URL (defaults to REDIS_URL via AclConfig)
        prefix: Key prefix (defaults to LOOKERACL_STATE_PREFIX)
        client: Pre-built sync Redis client. Must use decode_responses=True.

    Raises:
        ConfigurationError: No client was given and no Redis URL is
            configured, or the redis package is not installed.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        prefix: Optional[str] = None,
        client: Any = None,
    ) -> None:
        config = load_config_from_env()
        self._prefix = prefix or config.state_prefix
        if client is None:
            url = redis_url or config.redis_url
            if not url:
                raise ConfigurationError("REDIS_URL not set; RedisStateStore needs a Redis URL")
            try:
                import redis
            except ImportError as e:
                raise ConfigurationError("redis is not installed; install lookeracl[redis]") from e
            client = redis.from_url(url, decode_responses=True)
        self._client = client

    @property
    def prefix(self) -> str:
        return self._prefix

    def _key(self, address: str) -> str:
        return f"{self._prefix}:{address}"

    def load(self, address: str) -> Optional[TrackedRecord]:
        raw = self._client.get(self._key(address))
        if not raw:
            return None
        return TrackedRecord.from_json(address, raw)

    def save(self, address: str, kind: str, state: Union[BaseModel, dict[str, Any]]) -> None:
        record = TrackedRecord(kind=_kind_name(kind), state=_dump_state(state))
        self._client.set(self._key(address), record.to_json())
        logger.debug("Saved tracked state %s (%s)", address, kind)

    def delete(self, address: str) -> None:
        self._client.delete(self._key(address))

    def addresses(self) -> list[str]:
        start = len(self._prefix) + 1
        return sorted(key[start:] for key in self._client.keys(f"{self._prefix}:*"))

    def close(self) -> None:
        self._client.close()


__all__ = [
    "InMemoryStateStore",
    "RedisStateStore",
    "TrackedRecord",
    "TrackedStateStore",
]
