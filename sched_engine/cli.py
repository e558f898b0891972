from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .algorithms import ALGORITHMS, DEFAULT_QUANTUM, best_algorithm, compare_algorithms, run_algorithm
from .gantt import build_rich_gantt, color_style, render_gantt
from .models import ScheduleResult
from .workload_io import (
    SAMPLE_PREFIX,
    SAMPLE_WORKLOADS,
    dump_workload,
    load_workload,
    sample_quantum,
    sample_workload,
    workload_to_dicts,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sched-engine",
        description="CPU scheduling simulator (FCFS, SJF, Round Robin, Priority).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every scheduling decision.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    workload_help = f"Path to JSON or CSV workload file, or {SAMPLE_PREFIX}<name> for a built-in sample."
    quantum_help = (
        "Time quantum for round-robin (ignored by FCFS, SJF, Priority; "
        f"default: the sample's own quantum, otherwise {DEFAULT_QUANTUM})."
    )

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({', '.join(ALGORITHMS)}).",
    )
    run_parser.add_argument("--workload", "-w", required=True, help=workload_help)
    run_parser.add_argument("--quantum", "-q", type=int, default=None, help=quantum_help)
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Play back the scheduler's decisions one step at a time.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.3,
        help="Seconds to wait between steps when --step is used (default: 0.3).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text instead of coloured blocks.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument("--workload", "-w", required=True, help=workload_help)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help=f"Algorithms to compare (default: {' '.join(ALGORITHMS)}).",
    )
    compare_parser.add_argument("--quantum", "-q", type=int, default=None, help=quantum_help)

    export_parser = subparsers.add_parser("export", help="Write a full schedule (intervals, results, steps) as JSON.")
    export_parser.add_argument("--algorithm", "-a", required=True, help=f"Algorithm to use ({', '.join(ALGORITHMS)}).")
    export_parser.add_argument("--workload", "-w", required=True, help=workload_help)
    export_parser.add_argument("--quantum", "-q", type=int, default=None, help=quantum_help)
    export_parser.add_argument("--output", "-o", default=None, help="Output file (default: stdout).")

    samples_parser = subparsers.add_parser("samples", help="Print or save one of the built-in sample workloads.")
    samples_parser.add_argument("name", choices=sorted(SAMPLE_WORKLOADS), help="Sample workload name.")
    samples_parser.add_argument("--output", "-o", default=None, help="Write the workload to this JSON file.")

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    if plain:
        console.print(render_gantt(result.intervals), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.intervals)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Turnaround",
        "Wait",
        "Response",
    ]

    proc_table = Table(title="Per-process results (completion order)", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.results:
        proc_table.add_row(
            Text(p.pid, style=color_style(p.color) or ""),
            str(p.arrival_time),
            str(p.burst_time),
            "" if p.priority is None else str(p.priority),
            str(p.start_time),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.avg_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.avg_turnaround_time:.2f}")
    if result.system:
        sys = result.system
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Idle time", str(sys.idle_time))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _play_steps(result: ScheduleResult, delay: float, console: Console) -> None:
    """
    Walk through the recorded decisions in order, one line per step.
    """
    if not result.steps:
        console.print("[red]No execution to animate.[/red]")
        return

    console.print(f"[bold]Simulating {result.algorithm}[/bold] ({len(result.steps)} steps)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    for index, step in enumerate(result.steps, start=1):
        queue = ", ".join(step.ready_queue) if step.ready_queue else "empty"
        style = "yellow" if step.pid is None else "green"
        ready = escape(f"[{queue}]")
        console.print(f"[bold]{index:>3}[/bold] t={step.time:<3} [{style}]{escape(step.action)}[/{style}]  ready: {ready}")
        console.print(f"      [dim]{escape(step.reason)}[/dim]")
        if delay > 0:
            time.sleep(delay)


def _print_comparison(title: str, processes, quantum: int, algorithms: List[str], console: Console) -> None:
    summaries = compare_algorithms(processes, quantum=quantum, algorithms=algorithms)
    best = best_algorithm(summaries)

    summary_table = Table(title=title, box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for summary in summaries:
        marker = " [green]*[/green]" if summary is best else ""
        summary_table.add_row(
            summary.name + marker,
            f"{summary.avg_waiting_time:.2f}",
            f"{summary.avg_turnaround_time:.2f}",
            f"{summary.avg_response_time:.2f}",
        )

    console.print(summary_table)
    if best is not None:
        console.print(f"[bold]Lowest average waiting time:[/bold] {best.name}")


def _write_json(data, output: Optional[str]) -> None:
    text = json.dumps(data, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    quantum = getattr(args, "quantum", None)
    if quantum is None and hasattr(args, "workload"):
        quantum = sample_quantum(args.workload, DEFAULT_QUANTUM)

    try:
        if args.command == "run":
            processes = load_workload(args.workload)
            result = run_algorithm(args.algorithm, processes, quantum=quantum)
            if args.step:
                try:
                    _play_steps(result, delay=args.step_delay, console=console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
                console.print()
            _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            processes = load_workload(args.workload)
            _print_comparison(
                f"Algorithm comparison: {escape(args.workload)}",
                processes,
                quantum,
                args.algorithms,
                console,
            )
            return 0

        if args.command == "export":
            processes = load_workload(args.workload)
            result = run_algorithm(args.algorithm, processes, quantum=quantum)
            _write_json(result.to_dict(), args.output)
            if args.output:
                logger.info("Wrote %s schedule to %s", result.algorithm, args.output)
            return 0

        if args.command == "samples":
            processes = sample_workload(args.name)
            if args.output:
                dump_workload(processes, args.output)
                console.print(f"Saved sample '{args.name}' to {escape(args.output)}")
            else:
                _write_json(workload_to_dicts(processes), None)
            return 0
    except (ValueError, OSError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
