from __future__ import annotations

from dataclasses import dataclass
from statistics import mean
from typing import Iterable, Optional, Sequence

from .process import ProcessState


@dataclass(slots=True)
class ProcessMetrics:
    process_id: int
    name: str
    arrival_time: int
    burst_time: int
    priority: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int


@dataclass(slots=True)
class AggregateMetrics:
    count: int
    mean_waiting_time: float
    mean_turnaround_time: float
    mean_response_time: float
    p50_waiting: float
    p90_waiting: float
    p99_waiting: float
    p50_turnaround: float
    p90_turnaround: float
    p99_turnaround: float
    throughput: float


@dataclass(frozen=True, slots=True)
class GanttSegment:
    """Contiguous run of ticks on the CPU; ``process_id`` is None when idle."""

    process_id: Optional[int]
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


def build_process_metrics(processes: Iterable[ProcessState]) -> list[ProcessMetrics]:
    metrics: list[ProcessMetrics] = []
    for process in processes:
        if process.completion_time is None or process.start_time is None:
            continue
        metrics.append(
            ProcessMetrics(
                process_id=process.process_id,
                name=process.name,
                arrival_time=process.arrival_time,
                burst_time=process.burst_time,
                priority=process.original_priority,
                start_time=process.start_time,
                completion_time=process.completion_time,
                waiting_time=process.waiting_time,
                turnaround_time=process.turnaround_time,
                response_time=process.response_time,
            ),
        )
    return metrics


def summarise(metrics: Sequence[ProcessMetrics], total_time: int) -> AggregateMetrics:
    if not metrics:
        return AggregateMetrics(
            count=0,
            mean_waiting_time=0.0,
            mean_turnaround_time=0.0,
            mean_response_time=0.0,
            p50_waiting=0.0,
            p90_waiting=0.0,
            p99_waiting=0.0,
            p50_turnaround=0.0,
            p90_turnaround=0.0,
            p99_turnaround=0.0,
            throughput=0.0,
        )
    waiting = [m.waiting_time for m in metrics]
    turnaround = [m.turnaround_time for m in metrics]
    return AggregateMetrics(
        count=len(metrics),
        mean_waiting_time=mean(waiting),
        mean_turnaround_time=mean(turnaround),
        mean_response_time=mean(m.response_time for m in metrics),
        p50_waiting=_percentile(waiting, 50),
        p90_waiting=_percentile(waiting, 90),
        p99_waiting=_percentile(waiting, 99),
        p50_turnaround=_percentile(turnaround, 50),
        p90_turnaround=_percentile(turnaround, 90),
        p99_turnaround=_percentile(turnaround, 99),
        throughput=len(metrics) / total_time if total_time else 0.0,
    )


def gantt_segments(timeline: Sequence[Optional[int]]) -> list[GanttSegment]:
    """Collapse a per-tick timeline into contiguous Gantt chart segments."""

    segments: list[GanttSegment] = []
    start = 0
    for tick in range(1, len(timeline) + 1):
        if tick < len(timeline) and timeline[tick] == timeline[start]:
            continue
        segments.append(GanttSegment(process_id=timeline[start], start=start, end=tick))
        start = tick
    return segments


def _percentile(values: Sequence[float], percentile: float) -> float:
    if not values:
        return 0.0
    sorted_values = sorted(values)
    k = (len(sorted_values) - 1) * percentile / 100
    f = int(k)
    c = min(f + 1, len(sorted_values) - 1)
    if f == c:
        return float(sorted_values[f])
    d0 = sorted_values[f] * (c - k)
    d1 = sorted_values[c] * (k - f)
    return d0 + d1
