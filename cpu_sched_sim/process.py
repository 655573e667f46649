from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class ProcessSpec:
    """Immutable process description as submitted to the engine."""

    process_id: int
    name: str
    arrival_time: int
    burst_time: int
    priority: int = 0

    def __post_init__(self) -> None:
        if self.burst_time <= 0:
            msg = "burst_time must be strictly positive"
            raise ValueError(msg)
        if self.arrival_time < 0:
            msg = "arrival_time cannot be negative"
            raise ValueError(msg)
        if self.priority < 0:
            msg = "priority cannot be negative"
            raise ValueError(msg)


@dataclass(slots=True)
class ProcessState:
    """Mutable runtime state for a process, owned by the engine."""

    spec: ProcessSpec
    remaining_time: int
    priority: int
    start_time: Optional[int] = None
    completion_time: Optional[int] = None
    waiting_time: int = 0
    turnaround_time: Optional[int] = None
    response_time: Optional[int] = None
    age_counter: int = 0

    @classmethod
    def from_spec(cls, spec: ProcessSpec) -> ProcessState:
        return cls(spec=spec, remaining_time=spec.burst_time, priority=spec.priority)

    def mark_dispatched(self, now: int) -> bool:
        """Record the first dispatch; returns True only the first time."""

        if self.start_time is not None:
            return False
        self.start_time = now
        self.response_time = now - self.arrival_time
        return True

    def record_run(self) -> None:
        self.remaining_time -= 1

    def complete(self, now: int) -> int:
        """Finalise timing at the end of tick ``now``.

        Returns the waiting time accumulated tick by tick, which the
        caller may compare against the derived value now stored.
        """

        accumulated = self.waiting_time
        self.completion_time = now + 1
        self.turnaround_time = self.completion_time - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time
        return accumulated

    def is_complete(self) -> bool:
        return self.remaining_time <= 0

    @property
    def process_id(self) -> int:
        return self.spec.process_id

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def arrival_time(self) -> int:
        return self.spec.arrival_time

    @property
    def burst_time(self) -> int:
        return self.spec.burst_time

    @property
    def original_priority(self) -> int:
        return self.spec.priority
