import pytest

from schedsim.algorithms import (
    ALGORITHMS,
    response_ratio,
    run_algorithm,
    schedule_fcfs,
    schedule_hrrn,
    schedule_priority,
    schedule_rr,
    schedule_spn,
    schedule_srt,
)
from schedsim.models import Process, ProcessRecord, WorkloadError


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5, priority=2),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=8, priority=3),
    ]


def _spans(res):
    return [(s.name, s.start_time, s.end_time) for s in res.timeline]


def _by_name(res):
    return {p.name: p for p in res.processes}


def _run_all(processes):
    return [run_algorithm(name, processes, quantum=2) for name in ALGORITHMS]


def test_fcfs_order():
    res = schedule_fcfs(_procs())
    assert [s.name for s in res.timeline] == ["P1", "P2", "P3"]
    assert res.processes[0].waiting_time == 0
    assert res.processes[1].waiting_time == 4
    assert res.processes[2].waiting_time == 6


def test_fcfs_example_timeline():
    res = schedule_fcfs([Process("A", 0, 5), Process("B", 1, 3), Process("C", 2, 1)])
    assert _spans(res) == [("A", 0, 5), ("B", 5, 8), ("C", 8, 9)]
    assert [p.waiting_time for p in res.processes] == [0, 4, 6]


def test_fcfs_equal_arrivals_keep_input_order():
    res = schedule_fcfs([Process("Z", 1, 2), Process("Y", 0, 1), Process("X", 1, 1)])
    assert _spans(res) == [("Y", 0, 1), ("Z", 1, 3), ("X", 3, 4)]


def test_fcfs_idles_until_first_arrival():
    res = schedule_fcfs([Process("A", 2, 2)])
    assert res.slots == [None, None, "A", "A"]
    assert _spans(res) == [("A", 2, 4)]
    assert res.processes[0].start_time == 2
    assert res.processes[0].waiting_time == 0


def test_rr_quantum_2():
    res = schedule_rr(_procs(), quantum=2)
    assert {s.name for s in res.timeline} == {"P1", "P2", "P3"}
    assert sum(p.burst_time for p in _procs()) == res.system.cpu_busy_time


def test_rr_alternates_slices():
    res = schedule_rr([Process("A", 0, 5), Process("B", 1, 3)], quantum=2)
    assert _spans(res) == [("A", 0, 2), ("B", 2, 4), ("A", 4, 6), ("B", 6, 7), ("A", 7, 8)]
    procs = _by_name(res)
    assert procs["A"].completion_time == 8
    assert procs["B"].completion_time == 7
    assert procs["A"].start_time == 0
    assert procs["B"].start_time == 2


def test_rr_new_arrival_queued_ahead_of_preempted_process():
    # B arrives exactly when A's first slice expires and must run before A resumes.
    res = schedule_rr([Process("A", 0, 4), Process("B", 2, 2)], quantum=2)
    assert _spans(res) == [("A", 0, 2), ("B", 2, 4), ("A", 4, 6)]


def test_rr_idles_between_arrivals():
    res = schedule_rr([Process("A", 0, 1), Process("B", 3, 1)], quantum=2)
    assert res.slots == ["A", None, None, "B"]
    assert _by_name(res)["B"].completion_time == 4


def test_rr_keeps_idling_until_end_time():
    res = schedule_rr([Process("A", 0, 1)], quantum=2, end_time=5)
    assert res.slots == ["A", None, None, None, None]
    assert res.processes[0].completion_time == 1
    assert res.system.makespan == 1


def test_rr_stops_at_end_time_when_queue_drains():
    res = schedule_rr([Process("A", 0, 1), Process("B", 3, 2)], quantum=2, end_time=1)
    procs = _by_name(res)
    assert res.slots == ["A"]
    assert procs["A"].completed
    assert not procs["B"].completed
    assert procs["B"].start_time is None


def test_rr_requires_positive_quantum():
    with pytest.raises(ValueError):
        schedule_rr(_procs(), quantum=0)
    with pytest.raises(ValueError):
        schedule_rr(_procs())


def test_spn_order():
    res = schedule_spn(_procs())
    assert [s.name for s in res.timeline] == ["P1", "P2", "P3"]


def test_spn_picks_shortest_and_breaks_ties_by_input_order():
    procs = [Process("A", 0, 7), Process("B", 1, 4), Process("C", 2, 1), Process("D", 3, 4)]
    res = schedule_spn(procs)
    assert _spans(res) == [("A", 0, 7), ("C", 7, 8), ("B", 8, 12), ("D", 12, 16)]


def test_srt_preempts_for_shorter_remaining_time():
    res = schedule_srt([Process("A", 0, 8), Process("B", 1, 4)])
    assert _spans(res) == [("A", 0, 1), ("B", 1, 5), ("A", 5, 12)]
    procs = _by_name(res)
    assert procs["A"].start_time == 0
    assert procs["B"].waiting_time == 0
    assert procs["A"].waiting_time == 4


def test_srt_does_not_preempt_on_equal_remaining_time():
    res = schedule_srt([Process("A", 0, 3), Process("B", 1, 2)])
    # At t=1 both have 2 ticks left; A was defined first and keeps the CPU.
    assert _spans(res) == [("A", 0, 3), ("B", 3, 5)]


def test_srt_completes():
    res = schedule_srt(_procs())
    assert {p.name for p in res.processes} == {"P1", "P2", "P3"}
    assert res.system.cpu_busy_time == sum(p.burst_time for p in _procs())


def test_hrrn_tie_goes_to_first_defined():
    res = schedule_hrrn([Process("X", 0, 3), Process("Y", 0, 3)])
    assert _spans(res) == [("X", 0, 3), ("Y", 3, 6)]


def test_hrrn_prefers_highest_ratio():
    res = schedule_hrrn([Process("A", 0, 3), Process("B", 1, 6), Process("C", 2, 2)])
    # At t=3: B = 1 + 2/6, C = 1 + 1/2.
    assert _spans(res) == [("A", 0, 3), ("C", 3, 5), ("B", 5, 11)]


def test_response_ratio():
    rec = ProcessRecord(process=Process("A", 2, 4), index=0)
    assert response_ratio(rec, 2) == 1.0
    assert response_ratio(rec, 4) == 1.5


def test_priority_static():
    res = schedule_priority(_procs())
    # P2 has highest priority (1), should run first when all ready by time 5
    assert res.timeline[0].name == "P1"
    assert res.timeline[1].name == "P2"


def test_priority_missing_value_ranks_last():
    res = schedule_priority([Process("A", 0, 1), Process("B", 0, 1), Process("C", 0, 1, priority=5)])
    assert [s.name for s in res.timeline] == ["C", "A", "B"]


def test_metrics_invariants_hold_for_every_policy():
    procs = [
        Process("A", 0, 6),
        Process("B", 2, 2),
        Process("C", 3, 5),
        Process("D", 9, 1),
        Process("E", 15, 3),
    ]
    for res in _run_all(procs):
        for p in res.processes:
            assert p.completed
            assert p.turnaround_time == p.completion_time - p.arrival_time
            assert p.waiting_time == p.turnaround_time - p.burst_time
            assert p.waiting_time >= 0
            assert p.arrival_time <= p.start_time < p.completion_time
        assert len(res.slots) == max(p.completion_time for p in res.processes)
        for p in procs:
            assert res.slots.count(p.name) == p.burst_time


def test_results_keep_definition_order():
    procs = [Process("Long", 0, 9), Process("Short", 0, 1)]
    for res in _run_all(procs):
        assert [p.name for p in res.processes] == ["Long", "Short"]


def test_rerun_is_identical():
    procs = _procs()
    for first, second in zip(_run_all(procs), _run_all(procs)):
        assert first == second


def test_invalid_process_sets_rejected_before_running():
    with pytest.raises(WorkloadError):
        schedule_fcfs([Process("A", 0, 0)])
    with pytest.raises(WorkloadError):
        schedule_spn([Process("A", -1, 2)])
    with pytest.raises(WorkloadError):
        schedule_hrrn([Process("A", 0, 2), Process("A", 1, 2)])


def test_run_algorithm_aliases_and_unknown():
    assert run_algorithm("SJF", _procs()).algorithm == "SPN"
    assert run_algorithm("srtf", _procs()).algorithm == "SRT"
    with pytest.raises(ValueError):
        run_algorithm("lottery", _procs())


def test_empty_process_set():
    res = schedule_fcfs([])
    assert res.processes == []
    assert res.slots == []
    assert res.system.makespan == 0
