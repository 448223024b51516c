from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .driver import DEFAULT_QUANTUM, PolicyRequest, parse_policies, requires_priority, run_simulation
from .gantt import build_rich_gantt, format_gantt_data, render_gantt, render_process_table, render_slots
from .metrics import summarize_process_metrics
from .models import Process, ScheduleResult
from .workload_io import load_workload, parse_process_line

logger = logging.getLogger(__name__)

ALL_POLICIES = ["fcfs", "rr", "spn", "srt", "hrrn", "priority"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, RR, SPN, SRT, HRRN, Priority).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch decision.",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Print plain-text charts and tables instead of Rich panels.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run scheduling algorithms on a workload file.")
    run_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        required=True,
        help="Algorithms to run in order (fcfs, rr, rr-<q>, spn, srt, hrrn, priority; "
        "numeric tags 1, 2-<q>, 3, 4, 5 are also accepted).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Quantum for a bare 'rr' (default: {DEFAULT_QUANTUM}).",
    )
    run_parser.add_argument(
        "--end-time",
        "-e",
        type=int,
        default=None,
        help="Simulation end time; only bounds round robin (default: latest arrival + 1).",
    )
    run_parser.add_argument(
        "--gantt-data",
        action="store_true",
        help="Also print the machine-readable GANTT interval line.",
    )
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Show a simple time-stepped simulation in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=ALL_POLICIES,
        help=f"Algorithms to compare (default: {' '.join(ALL_POLICIES)}).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for RR when included (default: {DEFAULT_QUANTUM}).",
    )
    compare_parser.add_argument(
        "--end-time",
        "-e",
        type=int,
        default=None,
        help="Simulation end time; only bounds round robin.",
    )

    subparsers.add_parser(
        "interactive",
        help="Enter algorithms, end time and processes at the prompt.",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _parse_requests(tokens: List[str], quantum: int) -> List[PolicyRequest]:
    return parse_policies(",".join(tokens), default_quantum=quantum)


def _print_plain(result: ScheduleResult, console: Console, gantt_data: bool = False) -> None:
    """
    Text-only report: chart, per-tick cells and the per-process table.
    """
    console.print(f"=== {result.algorithm} ===", markup=False, highlight=False)
    if gantt_data:
        console.print(format_gantt_data(result.timeline), markup=False, highlight=False)
    console.print(render_gantt(result.slots), markup=False, highlight=False)
    console.print(render_slots(result.slots), markup=False, highlight=False)
    console.print()
    console.print(render_process_table(result.processes), markup=False, highlight=False)
    console.print()


def _print_result(
    result: ScheduleResult,
    console: Console,
    gantt_data: bool = False,
    plain: bool = False,
) -> None:
    if plain:
        _print_plain(result, console, gantt_data=gantt_data)
        return

    console.rule(f"[bold]{result.algorithm}[/bold]")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    if gantt_data:
        console.print(format_gantt_data(result.timeline), markup=False, highlight=False)

    console.print(build_rich_gantt(result.slots))
    console.print(render_slots(result.slots), markup=False, highlight=False)

    console.print()

    headers = [
        "Process",
        "Arrive",
        "Burst",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
        "Priority",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"Process", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        if not p.completed:
            proc_table.add_row(
                p.name,
                str(p.arrival_time),
                str(p.burst_time),
                "" if p.start_time is None else str(p.start_time),
                "unfinished",
                "",
                "",
                "",
                "" if p.priority is None else str(p.priority),
            )
            continue
        proc_table.add_row(
            p.name,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.start_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            str(p.response_time),
            "" if p.priority is None else str(p.priority),
        )

    console.print(proc_table)

    summary = summarize_process_metrics(result.processes)
    if result.system:
        sys = result.system
        sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
        sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.2f}")
        sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        sys_table.add_row("Starvation count", str(sys.starvation_count))

        console.print(sys_table)


def _print_comparison(results: List[ScheduleResult], console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for result in results:
        summary = summarize_process_metrics(result.processes)
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
        )

    console.print(summary_table)


def _animate_result(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Simple time-stepped textual simulation using the per-tick timeline.
    """
    if not result.slots:
        console.print("[red]No execution to animate.[/red]")
        return

    console.print(f"[bold]Simulating {result.algorithm}[/bold] (duration {len(result.slots)} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    streak = 0
    previous = None
    for t, running in enumerate(result.slots):
        streak = streak + 1 if running is not None and running == previous else 1
        previous = running
        bar = f"[green]{'█' * streak}[/green]" if running is not None else ""
        msg = f"t={t:2d}: " + (running or "[idle]")
        console.print(msg + (" " + bar if bar else ""))
        time.sleep(delay)


def _prompt(console: Console, message: str) -> str:
    console.print(message, end="")
    return input().strip()


def _interactive(console: Console, plain: bool = False) -> int:
    """
    Collect algorithms, end time and processes at the prompt, then run them.
    """
    requests = parse_policies(
        _prompt(console, "Enter algorithms (comma separated, e.g. 1 for FCFS, 2-2 for RR with quantum 2): ")
    )
    if not requests:
        raise ValueError("No algorithms selected")

    end_text = _prompt(console, "Enter simulation end time (blank for automatic): ")
    try:
        end_time = int(end_text) if end_text else None
        count = int(_prompt(console, "Enter number of processes: "))
    except ValueError as exc:
        raise ValueError(f"Expected an integer: {exc}") from exc

    with_priority = requires_priority(requests)
    fmt = "ProcessID ArrivalTime BurstTime" + (" Priority" if with_priority else "")
    console.print(f"Enter each process as: {fmt}")

    processes: List[Process] = []
    for i in range(count):
        processes.append(parse_process_line(_prompt(console, f"Process {i + 1}: "), with_priority))

    for result in run_simulation(requests, processes, end_time=end_time):
        _print_result(result, console, gantt_data=True, plain=plain)
    console.print("Simulation complete.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            processes = load_workload(Path(args.workload))
            requests = _parse_requests(args.algorithms, args.quantum)
            for result in run_simulation(requests, processes, end_time=args.end_time):
                if args.step:
                    try:
                        _animate_result(result, delay=args.step_delay, console=console)
                    except KeyboardInterrupt:
                        console.print("[yellow]Animation skipped.[/yellow]")
                _print_result(result, console, gantt_data=args.gantt_data, plain=args.plain)
            console.print("Simulation complete.")
            return 0

        if args.command == "compare":
            processes = load_workload(Path(args.workload))
            requests = _parse_requests(args.algorithms, args.quantum)
            _print_comparison(run_simulation(requests, processes, end_time=args.end_time), console)
            return 0

        if args.command == "interactive":
            return _interactive(console, plain=args.plain)
    except (OSError, ValueError) as exc:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]", highlight=False)
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
