from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .engine import EngineConfig, SchedulingEngine
from .process import ProcessSpec, ProcessState
from .snapshot import EngineSnapshot

logger = logging.getLogger(__name__)


class SimulationStalledError(RuntimeError):
    """Raised when a run exceeds its tick ceiling without draining."""


@dataclass(slots=True)
class SimulationResult:
    processes: list[ProcessState]
    total_time: int
    cpu_busy_time: int
    context_switches: int
    trace: list[str]
    timeline: list[int | None]
    final_state: EngineSnapshot

    @property
    def utilization(self) -> float:
        if self.total_time == 0:
            return 0.0
        return self.cpu_busy_time / self.total_time


class Simulation:
    """Drives a scheduling engine tick by tick until every process finishes."""

    def __init__(
        self,
        processes: Sequence[ProcessSpec],
        config: EngineConfig | None = None,
        *,
        max_ticks: int = 10_000,
    ) -> None:
        if max_ticks <= 0:
            msg = "max_ticks must be strictly positive"
            raise ValueError(msg)
        self.engine = SchedulingEngine(config)
        self.max_ticks = max_ticks
        for spec in processes:
            self.engine.submit(spec)

    def run(self) -> SimulationResult:
        engine = self.engine
        trace: list[str] = []
        while not engine.is_finished():
            if engine.current_time >= self.max_ticks:
                msg = f"simulation did not finish within {self.max_ticks} ticks"
                raise SimulationStalledError(msg)
            trace.append(engine.tick())

        timeline = engine.timeline
        logger.info(
            "%s finished %d processes in %d ticks",
            engine.config.policy.value,
            len(engine.finished),
            engine.current_time,
        )
        return SimulationResult(
            processes=list(engine.finished),
            total_time=engine.current_time,
            cpu_busy_time=sum(1 for pid in timeline if pid is not None),
            context_switches=engine.context_switch_count,
            trace=trace,
            timeline=timeline,
            final_state=engine.export_state(),
        )
