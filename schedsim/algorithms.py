from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional

from .metrics import build_result, finalize
from .models import Process, ProcessRecord, ScheduleResult, make_records
from .timeline import Timeline

logger = logging.getLogger(__name__)


def _dispatch(record: ProcessRecord, time: int, timeline: Timeline, ticks: int) -> int:
    """
    Run ``record`` for ``ticks`` ticks starting at ``time`` and return the new clock.
    """
    if record.start_time is None:
        record.start_time = time
    logger.debug("t=%d: dispatch %s for %d tick(s)", time, record.name, ticks)

    timeline.run(record.name, ticks)
    record.remaining -= ticks
    time += ticks

    if record.remaining == 0:
        finalize(record, time)
    return time


def _ready(records: List[ProcessRecord], time: int) -> List[ProcessRecord]:
    return [r for r in records if not r.done and r.arrival_time <= time]


def default_end_time(processes: List[Process]) -> int:
    """
    Smallest Round Robin end time that still admits every process.
    """
    if not processes:
        return 0
    return max(p.arrival_time for p in processes) + 1


def schedule_fcfs(
    processes: List[Process],
    quantum: Optional[int] = None,
    end_time: Optional[int] = None,
) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.

    Ties on arrival keep input order (``sorted`` is stable).
    """
    records = make_records(processes)
    timeline = Timeline()
    time = 0

    for r in sorted(records, key=lambda r: r.arrival_time):
        while time < r.arrival_time:
            timeline.idle()
            time += 1
        time = _dispatch(r, time, timeline, r.remaining)

    return build_result("FCFS", records, timeline)


def schedule_rr(
    processes: List[Process],
    quantum: Optional[int] = None,
    end_time: Optional[int] = None,
) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    The loop runs while the clock is below ``end_time`` or the ready queue is
    non-empty, so it may idle up to ``end_time`` after the last completion and
    may stop before a process arriving at or after ``end_time`` is admitted.
    Processes arriving when a slice ends are queued ahead of the preempted one.
    """
    if quantum is None or quantum <= 0:
        raise ValueError("Round Robin requires a positive quantum (use --quantum)")

    records = make_records(processes)
    if end_time is None:
        end_time = default_end_time(processes)

    timeline = Timeline()
    ready: Deque[int] = deque()
    admitted = [False] * len(records)
    time = 0

    def enqueue_new_arrivals(current_time: int) -> None:
        for r in records:
            if not admitted[r.index] and r.arrival_time <= current_time:
                ready.append(r.index)
                admitted[r.index] = True

    while time < end_time or ready:
        enqueue_new_arrivals(time)

        if not ready:
            timeline.idle()
            time += 1
            continue

        r = records[ready.popleft()]
        time = _dispatch(r, time, timeline, min(quantum, r.remaining))

        enqueue_new_arrivals(time)

        if not r.done:
            ready.append(r.index)

    unfinished = [r.name for r in records if not r.done]
    if unfinished:
        logger.warning(
            "Round Robin stopped at t=%d (end time %d) with unfinished processes: %s",
            time,
            end_time,
            ", ".join(unfinished),
        )

    return build_result(f"Round Robin (q={quantum})", records, timeline, quantum=quantum)


def schedule_spn(
    processes: List[Process],
    quantum: Optional[int] = None,
    end_time: Optional[int] = None,
) -> ScheduleResult:
    """
    Shortest Process Next (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest total burst time; ties go to
    the process defined first.
    """
    records = make_records(processes)
    timeline = Timeline()
    time = 0

    while not all(r.done for r in records):
        ready = _ready(records, time)
        if not ready:
            timeline.idle()
            time += 1
            continue

        r = min(ready, key=lambda x: (x.burst_time, x.index))
        time = _dispatch(r, time, timeline, r.remaining)

    return build_result("SPN", records, timeline)


def schedule_srt(
    processes: List[Process],
    quantum: Optional[int] = None,
    end_time: Optional[int] = None,
) -> ScheduleResult:
    """
    Shortest Remaining Time (preemptive SPN).

    The choice is re-made every tick, which is what preempts a longer job when
    a shorter one arrives.
    """
    records = make_records(processes)
    timeline = Timeline()
    time = 0

    while not all(r.done for r in records):
        ready = _ready(records, time)
        if not ready:
            timeline.idle()
            time += 1
            continue

        r = min(ready, key=lambda x: (x.remaining, x.index))
        time = _dispatch(r, time, timeline, 1)

    return build_result("SRT", records, timeline)


def response_ratio(record: ProcessRecord, time: int) -> float:
    return 1.0 + (time - record.arrival_time) / record.burst_time


def schedule_hrrn(
    processes: List[Process],
    quantum: Optional[int] = None,
    end_time: Optional[int] = None,
) -> ScheduleResult:
    """
    Highest Response Ratio Next (non-preemptive).

    Ratio is ``1 + waited / burst``; equal ratios go to the process defined first.
    """
    records = make_records(processes)
    timeline = Timeline()
    time = 0

    while not all(r.done for r in records):
        ready = _ready(records, time)
        if not ready:
            timeline.idle()
            time += 1
            continue

        r = max(ready, key=lambda x: (response_ratio(x, time), -x.index))
        time = _dispatch(r, time, timeline, r.remaining)

    return build_result("HRRN", records, timeline)


def schedule_priority(
    processes: List[Process],
    quantum: Optional[int] = None,
    end_time: Optional[int] = None,
) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Processes without a
    priority rank last; ties go to the process defined first.
    """
    records = make_records(processes)
    timeline = Timeline()
    time = 0

    def priority_key(r: ProcessRecord):
        prio = r.process.priority if r.process.priority is not None else float("inf")
        return (prio, r.index)

    while not all(r.done for r in records):
        ready = _ready(records, time)
        if not ready:
            timeline.idle()
            time += 1
            continue

        r = min(ready, key=priority_key)
        time = _dispatch(r, time, timeline, r.remaining)

    return build_result("Priority (static)", records, timeline)


ALGORITHMS = {
    "fcfs": schedule_fcfs,
    "rr": schedule_rr,
    "spn": schedule_spn,
    "srt": schedule_srt,
    "hrrn": schedule_hrrn,
    "priority": schedule_priority,
}

ALIASES = {
    "sjf": "spn",
    "srtf": "srt",
}

# Policies that read Process.priority.
PRIORITY_ALGORITHMS = {"priority"}


def normalize_algorithm(name: str) -> str:
    name = name.strip().lower()
    name = ALIASES.get(name, name)
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown or unimplemented algorithm '{name}'")
    return name


def run_algorithm(
    name: str,
    processes: List[Process],
    quantum: Optional[int] = None,
    end_time: Optional[int] = None,
) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum is only used by round-robin
    and end_time only bounds round-robin.
    """
    func = ALGORITHMS[normalize_algorithm(name)]
    return func(processes, quantum=quantum, end_time=end_time)
