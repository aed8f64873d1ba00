"""Status diagnostics emitted by workspace commands."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class StatusKind(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    ERROR = "error"


@dataclass
class Status:
    """One status-bar message. ERROR is a classification, not a severity."""

    kind: StatusKind
    message: str
    time: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.kind is StatusKind.ERROR

    def as_dict(self) -> Dict[str, Any]:
        payload = {
            "kind": self.kind.value,
            "message": self.message,
            "time": self.time,
        }
        if self.metadata:
            payload["metadata"] = dict(self.metadata)
        return payload


class StatusLog:
    """Bounded history of statuses; the newest entry is the current one."""

    def __init__(self, max_entries: int = 200) -> None:
        self.max_entries = max_entries
        self._entries: List[Status] = []

    def record(
        self,
        kind: StatusKind,
        message: str,
        *,
        time: float = 0.0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Status:
        status = Status(kind=StatusKind(kind), message=message, time=time, metadata=metadata or {})
        self._entries.append(status)
        if len(self._entries) > self.max_entries:
            del self._entries[: len(self._entries) - self.max_entries]
        return status

    @property
    def current(self) -> Optional[Status]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):  # pragma: no cover - trivial delegator
        return iter(self._entries)


__all__ = ["Status", "StatusKind", "StatusLog"]
