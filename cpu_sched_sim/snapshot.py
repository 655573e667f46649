from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class CpuEntry:
    id: int
    name: str
    remaining: int
    quantum_used: int


@dataclass(frozen=True, slots=True)
class ProcessRef:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class ReadyEntry:
    id: int
    name: str
    remaining: int
    priority: int
    original_priority: int
    age_counter: int


@dataclass(frozen=True, slots=True)
class PendingEntry:
    id: int
    arrival: int


@dataclass(frozen=True, slots=True)
class FinishedEntry:
    id: int
    name: str
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int


@dataclass(frozen=True, slots=True)
class EngineSnapshot:
    """Read-only view of the engine after the most recent tick."""

    time: int
    policy: str
    cpu_process: Optional[CpuEntry]
    last_executed: Optional[ProcessRef]
    ready_queue: tuple[ReadyEntry, ...]
    job_pool: tuple[PendingEntry, ...]
    finished: tuple[FinishedEntry, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "policy": self.policy,
            "cpu_process": asdict(self.cpu_process) if self.cpu_process is not None else None,
            "last_executed": asdict(self.last_executed) if self.last_executed is not None else None,
            "ready_queue": [asdict(entry) for entry in self.ready_queue],
            "job_pool": [asdict(entry) for entry in self.job_pool],
            "finished": [asdict(entry) for entry in self.finished],
        }

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)
