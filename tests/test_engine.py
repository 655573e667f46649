from __future__ import annotations

import logging

import pytest

from cpu_sched_sim import DuplicateProcessError, EngineConfig, Policy, ProcessSpec, SchedulingEngine
from cpu_sched_sim.events import EventKind

from .helpers import make_engine, run_to_end


def _completion_order(engine: SchedulingEngine) -> list[int]:
    return [p.process_id for p in engine.finished]


def _by_id(engine: SchedulingEngine) -> dict:
    return {p.process_id: p for p in engine.processes()}


def test_fcfs_runs_in_arrival_order(fcfs_trio):
    engine = make_engine(fcfs_trio, policy="FCFS")
    run_to_end(engine)
    assert _completion_order(engine) == [1, 2, 3]
    procs = _by_id(engine)
    assert procs[1].waiting_time == 0
    assert procs[2].waiting_time == 4
    assert procs[3].waiting_time == 6
    assert procs[3].completion_time == 9
    assert engine.timeline == [1, 1, 1, 1, 1, 2, 2, 2, 3]


def test_round_robin_quantum_two():
    engine = make_engine(
        [ProcessSpec(1, "P1", 0, 5), ProcessSpec(2, "P2", 1, 3)],
        policy="RR",
        time_quantum=2,
    )
    lines = run_to_end(engine)
    assert engine.timeline == [1, 1, 2, 2, 1, 1, 2, 1]
    assert "Process 1 quantum expired." in lines[2]
    assert "Dispatched Process 2." in lines[2]
    procs = _by_id(engine)
    assert procs[2].completion_time == 7
    assert procs[2].response_time == 1
    assert procs[2].waiting_time == 3
    assert procs[1].completion_time == 8
    assert procs[1].waiting_time == 3


def test_quantum_expiry_queues_ahead_of_same_tick_arrival():
    engine = make_engine(
        [ProcessSpec(1, "P1", 0, 4), ProcessSpec(2, "P2", 2, 2)],
        policy="RR",
        time_quantum=2,
    )
    engine.tick()
    engine.tick()
    engine.tick()
    record = engine.history[2]
    kinds = [event.kind for event in record.events]
    assert kinds.index(EventKind.QUANTUM_EXPIRED) < kinds.index(EventKind.ARRIVED)
    assert record.executed == 1
    assert [entry.id for entry in engine.export_state().ready_queue] == [2]
    run_to_end(engine)
    assert engine.timeline == [1, 1, 1, 1, 2, 2]


def test_srtf_preempts_on_shorter_arrival():
    engine = make_engine([ProcessSpec(1, "P1", 0, 8), ProcessSpec(2, "P2", 1, 2)], policy="SRTF")
    engine.tick()
    line = engine.tick()
    assert "Process 1 preempted by Process 2" in line
    assert engine.history[1].executed == 2
    run_to_end(engine)
    assert _completion_order(engine) == [2, 1]
    procs = _by_id(engine)
    assert procs[1].completion_time == 10
    assert procs[1].waiting_time == 2
    assert procs[1].response_time == 0


def test_srtf_does_not_preempt_on_equal_remaining_time():
    engine = make_engine([ProcessSpec(1, "P1", 0, 3), ProcessSpec(2, "P2", 1, 2)], policy="SRTF")
    run_to_end(engine)
    assert engine.timeline == [1, 1, 1, 2, 2]
    assert not any(record.of_kind(EventKind.PREEMPTED) for record in engine.history)


def test_sjf_picks_shortest_burst_without_preempting():
    specs = [
        ProcessSpec(1, "P1", 0, 7),
        ProcessSpec(2, "P2", 1, 4),
        ProcessSpec(3, "P3", 2, 1),
        ProcessSpec(4, "P4", 3, 4),
    ]
    engine = make_engine(specs, policy="SJF")
    run_to_end(engine)
    assert _completion_order(engine) == [1, 3, 2, 4]


def test_priority_preemptive_and_non_preemptive():
    specs = [
        ProcessSpec(1, "P1", 0, 4, priority=3),
        ProcessSpec(2, "P2", 1, 2, priority=1),
        ProcessSpec(3, "P3", 2, 1, priority=2),
    ]
    preemptive = make_engine(specs, policy="Priority")
    run_to_end(preemptive)
    assert _completion_order(preemptive) == [2, 3, 1]
    assert preemptive.history[1].of_kind(EventKind.PREEMPTED)[0].process_id == 1

    non_preemptive = make_engine(specs, policy="PriorityNP")
    run_to_end(non_preemptive)
    assert _completion_order(non_preemptive) == [1, 2, 3]


def test_ties_break_by_arrival_then_id():
    specs = [ProcessSpec(2, "B", 0, 3), ProcessSpec(1, "A", 0, 3)]
    sjf = make_engine(specs, policy="SJF")
    run_to_end(sjf)
    assert _completion_order(sjf) == [1, 2]

    fcfs = make_engine(specs, policy="FCFS")
    run_to_end(fcfs)
    assert _completion_order(fcfs) == [2, 1]


def test_idle_ticks_until_first_arrival():
    engine = make_engine([ProcessSpec(1, "P1", 3, 1)])
    lines = run_to_end(engine)
    assert lines[0] == "Time 0: CPU Idle."
    assert engine.timeline == [None, None, None, 1]
    assert engine.finished[0].response_time == 0


def test_tick_after_finish_is_a_no_op(fcfs_trio):
    engine = make_engine(fcfs_trio)
    run_to_end(engine)
    finished_at = engine.current_time
    line = engine.tick()
    assert "already finished" in line
    assert engine.current_time == finished_at
    assert len(engine.history) == finished_at


def test_empty_engine_is_finished():
    engine = SchedulingEngine()
    assert engine.is_finished()
    assert "already finished" in engine.tick()
    assert engine.current_time == 0


def test_duplicate_process_id_is_rejected():
    engine = SchedulingEngine()
    engine.add_process(1, "P1", 0, 3, 1)
    with pytest.raises(DuplicateProcessError, match="already been submitted"):
        engine.add_process(1, "again", 2, 1, 0)
    assert len(engine.job_pool) == 1


def test_late_submission_is_admitted_on_next_tick(caplog):
    engine = make_engine([ProcessSpec(1, "P1", 0, 5)])
    engine.tick()
    engine.tick()
    with caplog.at_level(logging.WARNING, logger="cpu_sched_sim.engine"):
        engine.add_process(2, "late", 0, 1)
    assert "past arrival time" in caplog.text
    line = engine.tick()
    assert "Process 2 arrived." in line
    assert [p.process_id for p in engine.ready_pool] == [2]


def test_policy_change_takes_effect_on_next_tick():
    engine = make_engine([ProcessSpec(1, "P1", 0, 4), ProcessSpec(2, "P2", 1, 1)], policy="FCFS")
    engine.tick()
    engine.tick()
    assert engine.history[1].executed == 1
    assert engine.set_policy("srtf") is Policy.SRTF
    engine.tick()
    assert engine.history[2].of_kind(EventKind.PREEMPTED)
    assert engine.history[2].executed == 2


def test_unknown_policy_falls_back_to_fcfs(caplog):
    with caplog.at_level(logging.WARNING, logger="cpu_sched_sim.scheduler"):
        config = EngineConfig(policy="LOTTERY")
    assert config.policy is Policy.FCFS
    assert "falling back to FCFS" in caplog.text


@pytest.mark.parametrize("quantum", [0, -3])
def test_non_positive_quantum_is_rejected(quantum):
    with pytest.raises(ValueError, match="time_quantum"):
        EngineConfig(policy="RR", time_quantum=quantum)
    engine = SchedulingEngine(EngineConfig(policy="RR", time_quantum=3))
    with pytest.raises(ValueError):
        engine.set_time_quantum(quantum)
    assert engine.config.time_quantum == 3


def test_non_positive_aging_threshold_is_rejected():
    engine = SchedulingEngine()
    with pytest.raises(ValueError, match="aging_threshold"):
        engine.set_aging_threshold(0)


def test_quantum_used_resets_on_dispatch():
    engine = make_engine([ProcessSpec(1, "P1", 0, 3), ProcessSpec(2, "P2", 0, 3)], policy="RR", time_quantum=2)
    engine.tick()
    engine.tick()
    assert engine.quantum_used == 2
    engine.tick()
    assert engine.running.process_id == 2
    assert engine.quantum_used == 1


def test_round_robin_redispatch_of_lone_process_is_not_a_switch():
    engine = make_engine([ProcessSpec(1, "solo", 0, 5)], policy="RR", time_quantum=2)
    run_to_end(engine)
    assert engine.timeline == [1, 1, 1, 1, 1]
    assert engine.dispatch_count == 3
    assert engine.context_switch_count == 1


def test_context_switches_count_changes_of_running_process():
    engine = make_engine([ProcessSpec(1, "P1", 0, 5), ProcessSpec(2, "P2", 1, 3)], policy="RR", time_quantum=2)
    run_to_end(engine)
    assert engine.timeline == [1, 1, 2, 2, 1, 1, 2, 1]
    assert engine.context_switch_count == 5
    assert engine.dispatch_count == 5
