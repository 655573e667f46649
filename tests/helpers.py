from __future__ import annotations

from cpu_sched_sim import EngineConfig, SchedulingEngine


def make_engine(specs, **config) -> SchedulingEngine:
    engine = SchedulingEngine(EngineConfig(**config))
    for spec in specs:
        engine.submit(spec)
    return engine


def run_to_end(engine: SchedulingEngine, limit: int = 1_000) -> list[str]:
    lines = []
    while not engine.is_finished():
        assert engine.current_time < limit, "engine did not drain"
        lines.append(engine.tick())
    return lines
