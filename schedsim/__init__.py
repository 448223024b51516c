"""
CPU scheduling simulator package.

Runs classical dispatch policies (FCFS, Round Robin, SPN, SRT, HRRN and
static Priority) over a process set and reports per-process timing metrics
together with the per-tick Gantt timeline.
"""

__all__ = ["algorithms", "cli", "driver"]
