from __future__ import annotations

import logging
from typing import List, Optional

from .models import ProcessMetrics, ProcessRecord, ScheduleResult, SystemMetrics
from .timeline import IDLE, Timeline

logger = logging.getLogger(__name__)


def finalize(record: ProcessRecord, tick: int) -> None:
    """
    Record completion of ``record`` at ``tick``.

    Called exactly once per process, at the tick its remaining burst reaches 0.
    """
    if record.remaining != 0:
        raise RuntimeError(f"Process '{record.name}' finalized with {record.remaining} ticks remaining")

    record.finish_time = tick
    record.turnaround_time = record.finish_time - record.arrival_time
    record.waiting_time = record.turnaround_time - record.burst_time
    logger.debug(
        "%s finished at t=%d (turnaround=%d, waiting=%d)",
        record.name,
        tick,
        record.turnaround_time,
        record.waiting_time,
    )


def record_metrics(record: ProcessRecord) -> ProcessMetrics:
    response_time = None if record.start_time is None else record.start_time - record.arrival_time
    return ProcessMetrics(
        name=record.name,
        arrival_time=record.arrival_time,
        burst_time=record.burst_time,
        start_time=record.start_time,
        completion_time=record.finish_time,
        waiting_time=record.waiting_time,
        turnaround_time=record.turnaround_time,
        response_time=response_time,
        priority=record.process.priority,
        completed=record.done,
    )


def build_result(
    algorithm: str,
    records: List[ProcessRecord],
    timeline: Timeline,
    quantum: Optional[int] = None,
) -> ScheduleResult:
    """
    Package a finished run. Rows keep the original process definition order.
    """
    result = ScheduleResult(
        algorithm=algorithm,
        quantum=quantum,
        processes=[record_metrics(r) for r in sorted(records, key=lambda r: r.index)],
        timeline=timeline.intervals(),
        slots=list(timeline.slots),
    )
    compute_system_metrics(result)
    logger.info("%s finished after %d ticks", algorithm, len(timeline))
    return result


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process metrics
    and the raw timeline.
    """
    finished = [p for p in result.processes if p.completed]
    if not finished:
        system = SystemMetrics(cpu_busy_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = max(p.completion_time for p in finished)
    cpu_busy_time = sum(1 for slot in result.slots if slot is not IDLE)

    throughput = len(finished) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    # Processes waiting more than twice the average are counted as starved.
    avg_wait = sum(p.waiting_time for p in finished) / len(finished)
    starvation_count = sum(1 for p in finished if p.waiting_time > 2 * avg_wait)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        starvation_count=starvation_count,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.

    Processes left unfinished by a truncated run are excluded.
    """
    finished = [p for p in processes if p.completed]
    if not finished:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(finished)
    return {
        "avg_waiting": sum(p.waiting_time for p in finished) / n,
        "avg_turnaround": sum(p.turnaround_time for p in finished) / n,
        "avg_response": sum(p.response_time or 0 for p in finished) / n,
    }
