from __future__ import annotations

import argparse
import logging
from typing import Sequence

from . import evaluation, workload
from .engine import EngineConfig
from .process import ProcessSpec
from .scheduler import Policy
from .simulator import SimulationStalledError


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay CPU scheduling policies one tick at a time.")
    parser.add_argument("--workload", type=str, default=None, help="JSON or CSV file describing the processes to schedule.")
    parser.add_argument("--tasks", type=int, default=8, help="Number of generated processes when no workload file is given.")
    parser.add_argument("--arrival-rate", type=float, default=0.5, help="Poisson arrival rate (processes per tick).")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for workload generation.")
    parser.add_argument(
        "--burst-times",
        type=str,
        default="1,2,3,5,8",
        help="Comma-separated list of possible burst times (ticks).",
    )
    parser.add_argument(
        "--priorities",
        type=str,
        default="0,1,2,3,4",
        help="Comma-separated list of possible priorities (lower is more urgent).",
    )
    parser.add_argument(
        "--policy",
        type=str,
        default=Policy.FCFS.value,
        help="One of FCFS, SJF, SRTF, RR, Priority, PriorityNP. Unknown names fall back to FCFS.",
    )
    parser.add_argument("--quantum", type=int, default=2, help="Round Robin time quantum (ticks).")
    parser.add_argument("--aging", action="store_true", help="Enable priority aging for waiting processes.")
    parser.add_argument("--aging-threshold", type=int, default=5, help="Ready ticks before an aging boost.")
    parser.add_argument("--max-ticks", type=int, default=10_000, help="Abort runs that do not finish in this many ticks.")
    parser.add_argument("--trace", action="store_true", help="Print the per-tick trace.")
    parser.add_argument("--json", action="store_true", help="Print the final engine state as JSON.")
    parser.add_argument("--compare", action="store_true", help="Run every policy on the workload and compare them.")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    return parser.parse_args(argv)


def parse_int_list(raw: str, *, label: str) -> list[int]:
    values = [int(item.strip()) for item in raw.split(",") if item.strip()]
    if not values:
        msg = f"{label} must contain at least one value"
        raise ValueError(msg)
    return values


def build_processes(args: argparse.Namespace) -> list[ProcessSpec]:
    if args.workload:
        return workload.load_workload(args.workload)
    return workload.poisson_workload(
        rate=args.arrival_rate,
        burst_sampler=parse_int_list(args.burst_times, label="burst-times"),
        count=args.tasks,
        seed=args.seed,
        priority_sampler=parse_int_list(args.priorities, label="priorities"),
    )


def print_process_table(outcome: evaluation.EvaluationOutcome) -> None:
    header_fmt = "{:<6} {:<10} {:>7} {:>5} {:>8} {:>10} {:>7} {:>10} {:>8}"
    row_fmt = "{:<6} {:<10} {:>7} {:>5} {:>8} {:>10} {:>7} {:>10} {:>8}"
    print(header_fmt.format("ID", "Name", "Arrival", "Burst", "Priority", "Completion", "Waiting", "Turnaround", "Response"))
    for m in sorted(outcome.per_process, key=lambda m: m.process_id):
        print(
            row_fmt.format(
                m.process_id,
                m.name,
                m.arrival_time,
                m.burst_time,
                m.priority,
                m.completion_time,
                m.waiting_time,
                m.turnaround_time,
                m.response_time,
            ),
        )
    agg = outcome.aggregate
    print(f"\nAverage Waiting Time: {agg.mean_waiting_time:.2f}")
    print(f"Average Turnaround Time: {agg.mean_turnaround_time:.2f}")
    print(f"Average Response Time: {agg.mean_response_time:.2f}")
    print(f"CPU Utilization: {outcome.simulation.utilization:.2%}")


def print_comparison(outcomes: Sequence[evaluation.EvaluationOutcome]) -> None:
    header_fmt = "{:<11} {:>9} {:>9} {:>9} {:>8} {:>9} {:>10}"
    row_fmt = "{:<11} {:>9.2f} {:>9.2f} {:>9.2f} {:>8.2f} {:>9d} {:>10.3f}"
    print(header_fmt.format("Policy", "MeanWait", "MeanTurn", "MeanResp", "p90Wait", "Switches", "Throughput"))
    for outcome in outcomes:
        m = outcome.aggregate
        print(
            row_fmt.format(
                outcome.name,
                m.mean_waiting_time,
                m.mean_turnaround_time,
                m.mean_response_time,
                m.p90_waiting,
                outcome.simulation.context_switches,
                m.throughput,
            ),
        )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_arguments(argv)
    try:
        level = logging.getLevelName(args.log_level.upper())
        if not isinstance(level, int):
            msg = f"unknown log level {args.log_level!r}"
            raise ValueError(msg)
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        processes = build_processes(args)
        config = EngineConfig(
            policy=args.policy,
            time_quantum=args.quantum,
            aging_enabled=args.aging,
            aging_threshold=args.aging_threshold,
        )
    except (OSError, ValueError) as exc:
        raise SystemExit(f"error: {exc}") from exc

    try:
        if args.compare:
            outcomes = evaluation.evaluate_suite(processes, config=config, max_ticks=args.max_ticks)
        else:
            outcome = evaluation.evaluate_policy(config.policy, processes, config=config, max_ticks=args.max_ticks)
    except (SimulationStalledError, ValueError) as exc:
        raise SystemExit(f"error: {exc}") from exc

    if args.compare:
        print(f"Compared {len(outcomes)} policies on {len(processes)} processes (quantum {config.time_quantum})\n")
        print_comparison(outcomes)
        return

    label = outcome.name
    if outcome.policy is Policy.RR:
        label += f" (Q={config.time_quantum})"
    print(f"Policy: {label}, {len(processes)} processes, {outcome.simulation.total_time} ticks\n")
    if args.trace:
        for line in outcome.simulation.trace:
            print(line)
        print()
    print_process_table(outcome)
    if args.json:
        print()
        print(outcome.simulation.final_state.to_json(indent=2))


if __name__ == "__main__":
    main()
