from __future__ import annotations

from abc import abstractmethod
from typing import Sequence

from .process import ProcessState
from .scheduler import DispatchRule, Policy


class FcfsRule(DispatchRule):
    """Non-preemptive First-Come, First-Served: ready-pool insertion order."""

    policy = Policy.FCFS

    def select(self, ready: Sequence[ProcessState]) -> ProcessState:
        return ready[0]

    def ordered(self, ready: Sequence[ProcessState]) -> list[ProcessState]:
        return list(ready)


class RoundRobinRule(FcfsRule):
    """FIFO dispatch with forced preemption once the quantum is used up."""

    policy = Policy.RR

    def quantum_expired(self, running: ProcessState, quantum_used: int, quantum: int) -> bool:
        return quantum_used >= quantum and running.remaining_time > 0


class _KeyedRule(DispatchRule):
    """Dispatch by a per-policy key, then arrival time, then process id."""

    @abstractmethod
    def _key(self, process: ProcessState) -> int:
        """Primary ordering key; lower values dispatch first."""

    def _order(self, process: ProcessState) -> tuple[int, int, int]:
        return (self._key(process), process.arrival_time, process.process_id)

    def select(self, ready: Sequence[ProcessState]) -> ProcessState:
        return min(ready, key=self._order)

    def ordered(self, ready: Sequence[ProcessState]) -> list[ProcessState]:
        return sorted(ready, key=self._order)

    def _strictly_better(self, running: ProcessState, ready: Sequence[ProcessState]) -> ProcessState | None:
        if not ready:
            return None
        best = min(ready, key=lambda process: (self._key(process), process.process_id))
        if self._key(best) < self._key(running):
            return best
        return None


class SjfRule(_KeyedRule):
    """Non-preemptive Shortest Job First."""

    policy = Policy.SJF

    def _key(self, process: ProcessState) -> int:
        return process.burst_time


class SrtfRule(_KeyedRule):
    """Preemptive Shortest Remaining Time First."""

    policy = Policy.SRTF

    def _key(self, process: ProcessState) -> int:
        return process.remaining_time

    def challenger(self, running: ProcessState, ready: Sequence[ProcessState]) -> ProcessState | None:
        return self._strictly_better(running, ready)


class PriorityRule(_KeyedRule):
    """Priority scheduling where a lower value means more urgent."""

    def __init__(self, *, preemptive: bool) -> None:
        self.preemptive = preemptive
        self.policy = Policy.PRIORITY if preemptive else Policy.PRIORITY_NP

    def _key(self, process: ProcessState) -> int:
        return process.priority

    def challenger(self, running: ProcessState, ready: Sequence[ProcessState]) -> ProcessState | None:
        if not self.preemptive:
            return None
        return self._strictly_better(running, ready)


_RULES: dict[Policy, DispatchRule] = {
    Policy.FCFS: FcfsRule(),
    Policy.SJF: SjfRule(),
    Policy.SRTF: SrtfRule(),
    Policy.RR: RoundRobinRule(),
    Policy.PRIORITY: PriorityRule(preemptive=True),
    Policy.PRIORITY_NP: PriorityRule(preemptive=False),
}


def rule_for(policy: Policy) -> DispatchRule:
    try:
        return _RULES[policy]
    except KeyError:
        msg = f"no dispatch rule registered for policy {policy!r}"
        raise ValueError(msg) from None
