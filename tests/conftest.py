from __future__ import annotations

import pytest

from cpu_sched_sim import ProcessSpec


@pytest.fixture
def fcfs_trio() -> list[ProcessSpec]:
    return [
        ProcessSpec(1, "P1", arrival_time=0, burst_time=5),
        ProcessSpec(2, "P2", arrival_time=1, burst_time=3),
        ProcessSpec(3, "P3", arrival_time=2, burst_time=1),
    ]
