from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from . import metrics
from .engine import EngineConfig
from .process import ProcessSpec
from .scheduler import Policy
from .simulator import Simulation, SimulationResult


@dataclass(slots=True)
class EvaluationOutcome:
    policy: Policy
    simulation: SimulationResult
    per_process: list[metrics.ProcessMetrics]
    aggregate: metrics.AggregateMetrics

    @property
    def name(self) -> str:
        return self.policy.value


def evaluate_policy(
    policy: Policy | str,
    processes: Sequence[ProcessSpec],
    *,
    config: EngineConfig | None = None,
    max_ticks: int = 10_000,
) -> EvaluationOutcome:
    base = config or EngineConfig()
    run_config = replace(base, policy=policy)
    result = Simulation(processes, run_config, max_ticks=max_ticks).run()
    per_process = metrics.build_process_metrics(result.processes)
    aggregate = metrics.summarise(per_process, result.total_time)
    return EvaluationOutcome(
        policy=run_config.policy,
        simulation=result,
        per_process=per_process,
        aggregate=aggregate,
    )


def evaluate_suite(
    processes: Sequence[ProcessSpec],
    policies: Sequence[Policy | str] = tuple(Policy),
    *,
    config: EngineConfig | None = None,
    max_ticks: int = 10_000,
) -> list[EvaluationOutcome]:
    return [evaluate_policy(policy, processes, config=config, max_ticks=max_ticks) for policy in policies]
