from __future__ import annotations

import csv
import json
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from random import Random
from typing import Any

from .process import ProcessSpec


def periodic_workload(
    period: int,
    burst_time: int,
    count: int,
    *,
    priority: int = 0,
) -> list[ProcessSpec]:
    return [
        ProcessSpec(process_id=i + 1, name=f"P{i + 1}", arrival_time=i * period, burst_time=burst_time, priority=priority)
        for i in range(count)
    ]


def poisson_workload(
    rate: float,
    burst_sampler: Sequence[int] | Callable[[Random], int] | Iterable[int],
    count: int,
    *,
    seed: int | None = None,
    priority_sampler: Sequence[int] | Callable[[Random], int] | Iterable[int] | None = None,
) -> list[ProcessSpec]:
    """Poisson arrivals truncated to whole ticks."""

    if rate <= 0:
        msg = "arrival rate must be positive"
        raise ValueError(msg)
    rng = Random(seed)
    processes: list[ProcessSpec] = []
    current_time = 0.0
    for i in range(count):
        burst_time = _sample_value(burst_sampler, rng)
        if burst_time <= 0:
            msg = "sampled burst time must be positive"
            raise ValueError(msg)
        priority = 0
        if priority_sampler is not None:
            priority = _sample_value(priority_sampler, rng)
        processes.append(
            ProcessSpec(
                process_id=i + 1,
                name=f"P{i + 1}",
                arrival_time=int(current_time),
                burst_time=burst_time,
                priority=priority,
            ),
        )
        current_time += rng.expovariate(rate)
    return processes


_CSV_COLUMNS = ("id", "name", "arrival", "burst", "priority")


def from_rows(rows: Iterable[Mapping[str, Any]]) -> list[ProcessSpec]:
    """Build specs from mappings with id/name/arrival/burst/priority keys."""

    processes: list[ProcessSpec] = []
    for index, row in enumerate(rows, start=1):
        if not isinstance(row, Mapping):
            msg = f"workload row {index} must be an object, got {type(row).__name__}"
            raise ValueError(msg)
        for key in ("arrival", "burst"):
            if key not in row:
                msg = f"workload row {index} is missing field {key!r}"
                raise ValueError(msg)
        process_id = _int_field(row, "id", index, default=index)
        arrival_time = _int_field(row, "arrival", index)
        burst_time = _int_field(row, "burst", index)
        priority = _int_field(row, "priority", index, default=0)
        name = row.get("name")
        try:
            spec = ProcessSpec(
                process_id=process_id,
                name=str(name) if name is not None else f"P{process_id}",
                arrival_time=arrival_time,
                burst_time=burst_time,
                priority=priority,
            )
        except ValueError as exc:
            msg = f"workload row {index}: {exc}"
            raise ValueError(msg) from exc
        processes.append(spec)
    return processes


def load_workload(path: str | Path) -> list[ProcessSpec]:
    """Load a JSON workload, or a CSV one when the file ends in ``.csv``."""

    if Path(path).suffix.lower() == ".csv":
        return load_csv_workload(path)
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    if isinstance(data, Mapping):
        data = data.get("processes")
    if not isinstance(data, list):
        msg = "workload file must contain a list of processes or an object with a 'processes' list"
        raise ValueError(msg)
    return from_rows(data)


def load_csv_workload(path: str | Path) -> list[ProcessSpec]:
    """Read ``id,name,arrival,burst[,priority]`` lines.

    A first line mentioning ``id`` is a header. Lines with fewer than four
    columns are skipped. Empty id, name or priority cells take their defaults.
    """

    rows: list[dict[str, str]] = []
    with open(path, encoding="utf-8", newline="") as handle:
        for line_no, parts in enumerate(csv.reader(handle)):
            if line_no == 0 and any("id" in part.lower() for part in parts):
                continue
            if len(parts) < 4:
                continue
            rows.append({key: value.strip() for key, value in zip(_CSV_COLUMNS, parts) if value.strip()})
    return from_rows(rows)


def _int_field(row: Mapping[str, Any], key: str, index: int, *, default: int | None = None) -> int:
    value = row.get(key)
    if value is None:
        if default is None:
            msg = f"workload row {index} field {key!r} must not be null"
            raise ValueError(msg)
        return default
    if isinstance(value, bool):
        msg = f"workload row {index} field {key!r} must be an integer, got {value!r}"
        raise ValueError(msg)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    msg = f"workload row {index} field {key!r} must be an integer, got {value!r}"
    raise ValueError(msg)


def _sample_value(source: Sequence[int] | Callable[[Random], int] | Iterable[int], rng: Random) -> int:
    if isinstance(source, Sequence):
        if not source:
            msg = "sampler sequence must not be empty"
            raise ValueError(msg)
        return rng.choice(source)
    if isinstance(source, Iterable):
        materialised = tuple(source)
        if not materialised:
            msg = "sampler iterable must not be empty"
            raise ValueError(msg)
        return rng.choice(materialised)
    return source(rng)
