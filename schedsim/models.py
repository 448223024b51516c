from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional


class WorkloadError(ValueError):
    """
    Raised when a process set violates the simulation preconditions.
    """


@dataclass(frozen=True)
class Process:
    name: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None


@dataclass
class ProcessRecord:
    """
    Mutable per-run state of one process.

    ``index`` is the position of the process in the original input and is the
    tie-breaker used by every policy. ``start_time`` stays ``None`` until the
    process is dispatched for the first time.
    """

    process: Process
    index: int
    remaining: int = 0
    start_time: Optional[int] = None
    finish_time: int = 0
    turnaround_time: int = 0
    waiting_time: int = 0

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.remaining = self.process.burst_time
        self.start_time = None
        self.finish_time = 0
        self.turnaround_time = 0
        self.waiting_time = 0

    @property
    def name(self) -> str:
        return self.process.name

    @property
    def arrival_time(self) -> int:
        return self.process.arrival_time

    @property
    def burst_time(self) -> int:
        return self.process.burst_time

    @property
    def done(self) -> bool:
        return self.remaining == 0


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    name: str
    start_time: int
    end_time: int


@dataclass
class ProcessMetrics:
    name: str
    arrival_time: int
    burst_time: int
    start_time: Optional[int]
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: Optional[int]
    priority: Optional[int] = None
    completed: bool = True


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessMetrics] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    slots: List[Optional[str]] = field(default_factory=list)
    system: Optional[SystemMetrics] = None


def validate_processes(processes: Iterable[Process]) -> None:
    """
    Check the process set before any policy touches it.
    """
    seen: set[str] = set()
    for p in processes:
        if not p.name:
            raise WorkloadError("Process name must not be empty")
        if p.name in seen:
            raise WorkloadError(f"Duplicate process name '{p.name}'")
        if p.arrival_time < 0:
            raise WorkloadError(f"Process '{p.name}' has negative arrival time {p.arrival_time}")
        if p.burst_time <= 0:
            raise WorkloadError(f"Process '{p.name}' must have a positive burst time, got {p.burst_time}")
        seen.add(p.name)


def make_records(processes: Iterable[Process]) -> List[ProcessRecord]:
    processes = list(processes)
    validate_processes(processes)
    return [ProcessRecord(process=p, index=i) for i, p in enumerate(processes)]
