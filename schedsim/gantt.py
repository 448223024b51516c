from __future__ import annotations

from itertools import groupby
from typing import Dict, List, Optional, Sequence, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ProcessMetrics, ScheduledSlice

COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def _blocks(slots: Sequence[Optional[str]]) -> List[Tuple[Optional[str], int]]:
    """
    Runs of identical slots as ``(name, width)``; idle runs have name ``None``.
    """
    return [(name, sum(1 for _ in run)) for name, run in groupby(slots)]


def time_axis(slots: Sequence[Optional[str]]) -> str:
    """
    Tick marks for a chart drawn one column per tick.

    Each mark starts in the column of the tick it labels, so a block of width
    ``w`` starting at column ``t`` is closed by the mark at column ``t + w``.
    Marks that would touch the previous one are left out.
    """
    if not slots:
        return ""

    axis = "0"
    tick = 0
    for _, width in _blocks(slots):
        tick += width
        gap = tick - len(axis)
        if gap >= 1:
            axis += " " * gap + str(tick)
    return axis


def render_gantt(slots: Sequence[Optional[str]]) -> str:
    """
    Plain-text Gantt chart, one column per tick; idle ticks are drawn as dots.
    """
    if not slots:
        return "Gantt Chart:\n(no execution)"

    bar = ""
    labels = ""
    for name, width in _blocks(slots):
        if name is None:
            bar += "." * width
            labels += " " * width
        else:
            bar += "=" * width
            labels += name[:width].ljust(width)

    return "\n".join(["Gantt Chart:", bar, labels.rstrip(), time_axis(slots)])


def render_slots(slots: Sequence[Optional[str]]) -> str:
    """
    One cell per tick, e.g. ``| A | A |   | B |``.
    """
    if not slots:
        return "|"
    return "| " + " | ".join(" " if s is None else s for s in slots) + " |"


def render_process_table(processes: List[ProcessMetrics]) -> str:
    """
    Tab separated per-process table: arrival, burst, completion, turnaround, waiting.
    """
    lines = ["Process\tAT\tBT\tCT\tTAT\tWT"]
    for p in processes:
        if p.completed:
            done = f"{p.completion_time}\t{p.turnaround_time}\t{p.waiting_time}"
        else:
            done = "-\t-\t-"
        lines.append(f"{p.name}\t{p.arrival_time}\t{p.burst_time}\t{done}")
    return "\n".join(lines)


def format_gantt_data(slices: List[ScheduledSlice]) -> str:
    """
    Machine-readable interval line: ``GANTT: A,0,5; B,5,8;``.
    """
    parts = [f"{sl.name},{sl.start_time},{sl.end_time};" for sl in slices]
    return " ".join(["GANTT:"] + parts)


def build_rich_gantt(slots: Sequence[Optional[str]]) -> Panel:
    """
    Colored Gantt chart with name labels and the tick axis, one column per tick.
    """
    if not slots:
        return Panel("No execution", title="Gantt Chart")

    name_to_color: Dict[str, str] = {}

    def name_color(name: str) -> str:
        if name not in name_to_color:
            name_to_color[name] = COLORS[len(name_to_color) % len(COLORS)]
        return name_to_color[name]

    bar = Text()
    labels = Text()
    for name, width in _blocks(slots):
        if name is None:
            bar.append("·" * width, style="dim")
            labels.append(" " * width)
        else:
            bar.append(" " * width, style=f"on {name_color(name)}")
            labels.append(name[:width].ljust(width), style="bold")

    table = Table.grid(padding=(0, 0))
    table.add_row(bar)
    table.add_row(labels)
    table.add_row(Text(time_axis(slots)))

    return Panel.fit(table, title="Gantt Chart")
