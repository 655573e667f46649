from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventKind(str, Enum):
    ARRIVED = "arrived"
    QUANTUM_EXPIRED = "quantum_expired"
    PREEMPTED = "preempted"
    DISPATCHED = "dispatched"
    RAN = "ran"
    COMPLETED = "completed"
    IDLE = "idle"
    AGED = "aged"


@dataclass(frozen=True, slots=True)
class TickEvent:
    """Something that happened to one process during a tick."""

    kind: EventKind
    process_id: Optional[int] = None
    detail: str = ""

    def describe(self) -> str:
        pid = self.process_id
        if self.kind is EventKind.ARRIVED:
            return f"Process {pid} arrived."
        if self.kind is EventKind.QUANTUM_EXPIRED:
            return f"Process {pid} quantum expired."
        if self.kind is EventKind.PREEMPTED:
            return f"Process {pid} preempted {self.detail}."
        if self.kind is EventKind.DISPATCHED:
            return f"Dispatched Process {pid}."
        if self.kind is EventKind.RAN:
            return f"Running Process {pid} ({self.detail} remaining)."
        if self.kind is EventKind.COMPLETED:
            return f"Process {pid} finished."
        if self.kind is EventKind.AGED:
            return f"[Aged: P{pid} priority={self.detail}]"
        return "CPU Idle."


@dataclass(frozen=True, slots=True)
class TickRecord:
    """Everything that happened during the tick starting at ``time``."""

    time: int
    executed: Optional[int]
    events: tuple[TickEvent, ...]

    def of_kind(self, kind: EventKind) -> list[TickEvent]:
        return [event for event in self.events if event.kind is kind]

    def __str__(self) -> str:
        body = " ".join(event.describe() for event in self.events)
        return f"Time {self.time}: {body}"
