from __future__ import annotations

from itertools import groupby
from typing import Iterator, List, Optional, Sequence

from .models import ScheduledSlice

IDLE: Optional[str] = None


class Timeline:
    """
    Per-tick record of which process held the CPU.

    Every slot covers exactly one tick, so the length of the timeline is the
    simulated clock value.
    """

    def __init__(self) -> None:
        self.slots: List[Optional[str]] = []

    def run(self, name: str, ticks: int = 1) -> None:
        self.slots.extend([name] * ticks)

    def idle(self, ticks: int = 1) -> None:
        self.slots.extend([IDLE] * ticks)

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[Optional[str]]:
        return iter(self.slots)

    def intervals(self) -> List[ScheduledSlice]:
        return compress_timeline(self.slots)


def compress_timeline(slots: Sequence[Optional[str]]) -> List[ScheduledSlice]:
    """
    Collapse runs of identical slots into slices, dropping idle runs.
    """
    slices: List[ScheduledSlice] = []
    tick = 0
    for name, run in groupby(slots):
        width = sum(1 for _ in run)
        if name is not IDLE:
            slices.append(ScheduledSlice(name=name, start_time=tick, end_time=tick + width))
        tick += width
    return slices
