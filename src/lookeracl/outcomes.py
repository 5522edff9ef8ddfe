"""Non-error control outcomes and per-call progress records."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Vanished(BaseModel):
    """Read outcome: the tracked object no longer matches anything remote.

    Not a failure. The caller discards tracked state and the object is
    recreated (or the override re-asserted) on the next apply.
    """

    kind: str
    object_id: Optional[str] = None
    reason: str = "not found"


class OperationType(str, Enum):
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SET_INHERITANCE = "set_inheritance"
    SET_ROLE_GROUPS = "set_role_groups"


class AppliedOperation(BaseModel):
    """One remote mutation, recorded so partial progress can be reported."""

    op: OperationType
    target: str
    subject: Optional[str] = None

    def __str__(self) -> str:
        if self.subject is None:
            return f"{self.op.value}({self.target})"
        return f"{self.op.value}({self.target}, {self.subject})"


__all__ = ["AppliedOperation", "OperationType", "Vanished"]
