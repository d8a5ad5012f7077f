"""
Call queue: strict FIFO of pending engine calls plus the single in-flight slot.

State:
- active: the call currently awaiting a worker reply, or None when the slot is free.
- pending: calls enqueued while the slot was occupied, in arrival order.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

from lootasync.core.protocol import Request

Completion = Callable[..., None]


@dataclass(slots=True)
class PendingCall:
    """A request together with the handler that receives its outcome."""

    request: Request
    completion: Completion


class CallQueue:
    """FIFO buffer and in-flight slot. Not thread-safe; the Dispatcher owns locking."""

    def __init__(self) -> None:
        self._pending: deque[PendingCall] = deque()
        self.active: PendingCall | None = None

    @property
    def slot_free(self) -> bool:
        return self.active is None

    def __len__(self) -> int:
        return len(self._pending)

    def push(self, call: PendingCall) -> int:
        """Append to the tail; returns the 1-based queue position."""
        self._pending.append(call)
        return len(self._pending)

    def pop(self) -> PendingCall | None:
        """Remove and return the head, or None when empty."""
        if not self._pending:
            return None
        return self._pending.popleft()

    def occupy(self, call: PendingCall) -> None:
        self.active = call

    def release(self) -> PendingCall | None:
        """Free the slot and return its previous occupant."""
        call, self.active = self.active, None
        return call

    def snapshot(self) -> dict[str, Any]:
        """Observability view: in-flight operation and queued operation names."""
        return {
            "active": self.active.request.kind.value if self.active else None,
            "queued": [call.request.kind.value for call in self._pending],
            "queueDepth": len(self._pending),
        }
