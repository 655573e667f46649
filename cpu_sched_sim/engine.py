from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterator

from .events import EventKind, TickEvent, TickRecord
from .process import ProcessSpec, ProcessState
from .scheduler import DispatchRule, Policy
from .schedulers import rule_for
from .snapshot import CpuEntry, EngineSnapshot, FinishedEntry, PendingEntry, ProcessRef, ReadyEntry

logger = logging.getLogger(__name__)


class DuplicateProcessError(ValueError):
    """Raised when a process id is submitted twice to the same engine."""


@dataclass(slots=True)
class EngineConfig:
    policy: Policy | str = Policy.FCFS
    time_quantum: int = 2
    aging_enabled: bool = False
    aging_threshold: int = 5

    def __post_init__(self) -> None:
        self.policy = Policy.parse(self.policy)
        if self.time_quantum <= 0:
            msg = "time_quantum must be strictly positive"
            raise ValueError(msg)
        if self.aging_threshold <= 0:
            msg = "aging_threshold must be strictly positive"
            raise ValueError(msg)


class SchedulingEngine:
    """Discrete-time, single-CPU scheduling engine advanced one tick at a time.

    Every submitted process lives in exactly one of four pools: the job
    pool (not yet arrived), the ready pool, the CPU slot, or the finished
    list. ``tick`` is the only operation that moves processes between them.

    An engine instance is not thread-safe; drive it from one caller.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self._now = 0
        self._job_pool: list[ProcessState] = []
        self._ready: list[ProcessState] = []
        self._cpu: ProcessState | None = None
        self._quantum_used = 0
        self._finished: list[ProcessState] = []
        self._last_executed: ProcessState | None = None
        self._known_ids: set[int] = set()
        self._history: list[TickRecord] = []
        self._dispatches = 0
        self._context_switches = 0

    # -- configuration -----------------------------------------------------

    def add_process(
        self,
        process_id: int,
        name: str,
        arrival_time: int,
        burst_time: int,
        priority: int = 0,
    ) -> ProcessSpec:
        spec = ProcessSpec(
            process_id=process_id,
            name=name,
            arrival_time=arrival_time,
            burst_time=burst_time,
            priority=priority,
        )
        self.submit(spec)
        return spec

    def submit(self, spec: ProcessSpec) -> None:
        if spec.process_id in self._known_ids:
            msg = f"process id {spec.process_id} has already been submitted"
            raise DuplicateProcessError(msg)
        if spec.arrival_time < self._now:
            logger.warning(
                "Process %d submitted at time %d with past arrival time %d; it is admitted on the next tick",
                spec.process_id,
                self._now,
                spec.arrival_time,
            )
        self._known_ids.add(spec.process_id)
        self._job_pool.append(ProcessState.from_spec(spec))

    def set_policy(self, policy: Policy | str) -> Policy:
        self.config = replace(self.config, policy=policy)
        logger.debug("Policy set to %s", self.config.policy.value)
        return self.config.policy

    def set_time_quantum(self, quantum: int) -> None:
        self.config = replace(self.config, time_quantum=quantum)
        logger.debug("Time quantum set to %d", quantum)

    def set_aging(self, enabled: bool) -> None:
        self.config = replace(self.config, aging_enabled=enabled)
        logger.debug("Aging %s", "enabled" if enabled else "disabled")

    def set_aging_threshold(self, threshold: int) -> None:
        self.config = replace(self.config, aging_threshold=threshold)
        logger.debug("Aging threshold set to %d", threshold)

    # -- simulation --------------------------------------------------------

    def is_finished(self) -> bool:
        return not self._job_pool and not self._ready and self._cpu is None

    def tick(self) -> str:
        """Advance simulated time by one unit and return its trace line."""

        if self.is_finished():
            return f"Time {self._now}: Simulation already finished."

        rule = rule_for(self.config.policy)
        events: list[TickEvent] = []

        # Quantum expiry is handled before arrivals so the preempted process
        # queues ahead of anything arriving on this same tick.
        running = previous = self._cpu
        if running is not None and rule.quantum_expired(running, self._quantum_used, self.config.time_quantum):
            events.append(TickEvent(EventKind.QUANTUM_EXPIRED, running.process_id))
            self._preempt()

        self._admit_arrivals(events)
        self._check_preemption(rule, events)
        self._dispatch(rule, events, previous)
        executed = self._execute(events)
        if executed is None:
            events.append(TickEvent(EventKind.IDLE))
        self._apply_aging(events)

        record = TickRecord(
            time=self._now,
            executed=executed.process_id if executed is not None else None,
            events=tuple(events),
        )
        self._history.append(record)
        self._last_executed = executed
        self._now += 1

        line = str(record)
        logger.debug(line)
        return line

    def _admit_arrivals(self, events: list[TickEvent]) -> None:
        still_pending: list[ProcessState] = []
        for process in self._job_pool:
            if process.arrival_time <= self._now:
                self._ready.append(process)
                events.append(TickEvent(EventKind.ARRIVED, process.process_id))
            else:
                still_pending.append(process)
        self._job_pool = still_pending

    def _check_preemption(self, rule: DispatchRule, events: list[TickEvent]) -> None:
        running = self._cpu
        if running is None:
            return
        challenger = rule.challenger(running, self._ready)
        if challenger is None:
            return
        if rule.policy is Policy.SRTF:
            reason = f"{challenger.remaining_time} < {running.remaining_time}"
        else:
            reason = f"{challenger.priority} < {running.priority}"
        detail = f"by Process {challenger.process_id} ({rule.policy.value} {reason})"
        events.append(TickEvent(EventKind.PREEMPTED, running.process_id, detail))
        self._preempt()

    def _preempt(self) -> None:
        if self._cpu is None:
            return
        self._ready.append(self._cpu)
        self._cpu = None
        self._quantum_used = 0

    def _dispatch(self, rule: DispatchRule, events: list[TickEvent], previous: ProcessState | None) -> None:
        if self._cpu is not None or not self._ready:
            return
        chosen = rule.select(self._ready)
        self._ready.remove(chosen)
        self._cpu = chosen
        self._quantum_used = 0
        self._dispatches += 1
        if chosen is not previous:
            self._context_switches += 1
        chosen.mark_dispatched(self._now)
        events.append(TickEvent(EventKind.DISPATCHED, chosen.process_id))

    def _execute(self, events: list[TickEvent]) -> ProcessState | None:
        running = self._cpu
        for process in self._ready:
            process.waiting_time += 1
        if running is None:
            return None

        events.append(TickEvent(EventKind.RAN, running.process_id, str(running.remaining_time)))
        running.record_run()
        self._quantum_used += 1

        if running.is_complete():
            accumulated = running.complete(self._now)
            if accumulated != running.waiting_time:
                logger.warning(
                    "Process %d accumulated %d waiting ticks but turnaround implies %d",
                    running.process_id,
                    accumulated,
                    running.waiting_time,
                )
            self._finished.append(running)
            self._cpu = None
            self._quantum_used = 0
            events.append(TickEvent(EventKind.COMPLETED, running.process_id))
        return running

    def _apply_aging(self, events: list[TickEvent]) -> None:
        if not self.config.aging_enabled or not self._ready:
            return
        threshold = self.config.aging_threshold
        for process in self._ready:
            process.age_counter += 1
            if process.age_counter < threshold:
                continue
            process.age_counter = 0
            if process.priority > 0:
                process.priority -= 1
                events.append(TickEvent(EventKind.AGED, process.process_id, str(process.priority)))

    # -- inspection --------------------------------------------------------

    @property
    def current_time(self) -> int:
        return self._now

    @property
    def job_pool(self) -> tuple[ProcessState, ...]:
        return tuple(self._job_pool)

    @property
    def ready_pool(self) -> tuple[ProcessState, ...]:
        return tuple(self._ready)

    @property
    def running(self) -> ProcessState | None:
        return self._cpu

    @property
    def quantum_used(self) -> int:
        return self._quantum_used

    @property
    def finished(self) -> tuple[ProcessState, ...]:
        return tuple(self._finished)

    @property
    def history(self) -> tuple[TickRecord, ...]:
        return tuple(self._history)

    @property
    def timeline(self) -> list[int | None]:
        """Process id executed on each tick so far, ``None`` for idle ticks."""

        return [record.executed for record in self._history]

    @property
    def dispatch_count(self) -> int:
        return self._dispatches

    @property
    def context_switch_count(self) -> int:
        """Dispatches that put a different process on the CPU than the one it just held."""

        return self._context_switches

    def processes(self) -> Iterator[ProcessState]:
        yield from self._job_pool
        yield from self._ready
        if self._cpu is not None:
            yield self._cpu
        yield from self._finished

    def export_state(self) -> EngineSnapshot:
        rule = rule_for(self.config.policy)
        cpu = self._cpu
        cpu_entry = None
        if cpu is not None:
            cpu_entry = CpuEntry(
                id=cpu.process_id,
                name=cpu.name,
                remaining=cpu.remaining_time,
                quantum_used=self._quantum_used,
            )
        last = self._last_executed
        last_ref = ProcessRef(id=last.process_id, name=last.name) if last is not None else None
        return EngineSnapshot(
            time=self._now,
            policy=self.config.policy.value,
            cpu_process=cpu_entry,
            last_executed=last_ref,
            ready_queue=tuple(
                ReadyEntry(
                    id=p.process_id,
                    name=p.name,
                    remaining=p.remaining_time,
                    priority=p.priority,
                    original_priority=p.original_priority,
                    age_counter=p.age_counter,
                )
                for p in rule.ordered(self._ready)
            ),
            job_pool=tuple(PendingEntry(id=p.process_id, arrival=p.arrival_time) for p in self._job_pool),
            finished=tuple(
                FinishedEntry(
                    id=p.process_id,
                    name=p.name,
                    completion_time=p.completion_time,
                    waiting_time=p.waiting_time,
                    turnaround_time=p.turnaround_time,
                    response_time=p.response_time,
                )
                for p in self._finished
            ),
        )
