from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import ALGORITHMS, MENU_CHOICES, build_schedulers, resolve_algorithm
from .errors import SchedulerSimError, SelectionError
from .gantt import build_rich_gantt, lanes_from_trace
from .metrics import compute_process_metrics, compute_system_metrics, summarize_process_metrics
from .models import Process
from .simulation import SimulationResult, TraceRecorder, run_simulation
from .trace import LiveRecorder, NullRecorder, write_trace
from .workload_io import load_workload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scheduler-sim",
        description="Tick-by-tick CPU/IO scheduling simulator (FCFS, Priority, RR).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log scheduling decisions (admissions, selections, routing).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Simulate a workload with one algorithm.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help="Algorithm to use (fcfs, priority, rr).",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a text or JSON workload file.",
    )
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by FCFS and Priority).",
    )
    run_parser.add_argument(
        "--io-algorithm",
        default=None,
        help="Algorithm for the IO scheduler (default: same as --algorithm).",
    )
    run_parser.add_argument(
        "--live",
        action="store_true",
        help="Print every tick while the simulation runs.",
    )
    run_parser.add_argument(
        "--delay",
        type=float,
        default=0.0,
        help="Seconds to wait between ticks when --live is used (default: 0).",
    )
    run_parser.add_argument(
        "--output",
        "-o",
        default=None,
        help="Write the trace to this file (.json for structured output).",
    )

    menu_parser = subparsers.add_parser(
        "menu",
        help="Load a workload, then pick the algorithm interactively.",
    )
    menu_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a text or JSON workload file.",
    )
    menu_parser.add_argument(
        "--delay",
        type=float,
        default=0.0,
        help="Seconds to wait between ticks (default: 0).",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to a text or JSON workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help="Algorithms to compare (default: fcfs priority rr).",
    )
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=2,
        help="Time quantum used for RR when included (default: 2).",
    )

    return parser


def configure_logging(verbose: bool, console: Console) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def simulate(
    processes: List[Process],
    algorithm: str,
    quantum: Optional[int] = None,
    io_algorithm: Optional[str] = None,
    recorder: Optional[TraceRecorder] = None,
) -> SimulationResult:
    cpu, io = build_schedulers(algorithm, quantum=quantum, io_name=io_algorithm)
    return run_simulation(processes, cpu, io, recorder=recorder)


def _print_result(result: SimulationResult, processes: List[Process], console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")
    console.print(f"[bold]Elapsed ticks:[/bold] {result.elapsed}")

    console.print()

    console.print(build_rich_gantt(lanes_from_trace(result.trace)))

    console.print()

    headers = [
        "PID",
        "Name",
        "Arrive",
        "Priority",
        "CPU",
        "IO",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Name", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    per_process = compute_process_metrics(result.trace, processes)
    for p in per_process:
        proc_table.add_row(
            str(p.pid),
            p.name,
            str(p.arrival_time),
            str(p.priority),
            str(p.cpu_time),
            str(p.io_time),
            str(p.completion_time),
            str(p.waiting_time),
            str(p.turnaround_time),
            "" if p.response_time is None else str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(per_process)
    system = compute_system_metrics(result.trace)
    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
    sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.2f}")
    sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
    sys_table.add_row("Throughput (proc/tick)", f"{system.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{system.cpu_utilization*100:.1f}%")
    sys_table.add_row("IO utilization", f"{system.io_utilization*100:.1f}%")

    console.print(sys_table)


def _run_compare(workload_path: Path, algorithms: List[str], quantum: int, console: Console) -> None:
    summary_table = Table(title=f"Algorithm comparison: {workload_path}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Ticks", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for alg in algorithms:
        # bursts are consumed during a run, so every algorithm gets a fresh load
        processes = load_workload(workload_path)
        q = quantum if resolve_algorithm(alg) == "rr" else None
        result = simulate(processes, alg, quantum=q)
        summary = summarize_process_metrics(compute_process_metrics(result.trace, processes))
        summary_table.add_row(
            result.algorithm,
            "" if result.quantum is None else str(result.quantum),
            str(result.elapsed),
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
        )

    console.print(summary_table)


def _prompt_algorithm(console: Console) -> tuple[str, Optional[int]]:
    console.print("[bold]Select algorithm by number:[/bold]")
    for number, alg in MENU_CHOICES.items():
        console.print(f"  [yellow]{number}[/yellow]. [white]{ALGORITHMS[alg].label}[/white]")

    alg = resolve_algorithm(input(f"Choice [1-{len(MENU_CHOICES)}]: "))

    quantum = None
    if alg == "rr":
        q_in = input("Quantum: ").strip()
        try:
            quantum = int(q_in)
        except ValueError as exc:
            raise SelectionError(f"Invalid quantum '{q_in}'") from exc
        if quantum <= 0:
            raise SelectionError("Quantum must be a positive integer")
    return alg, quantum


def _interactive_menu(workload: str, delay: float, console: Console) -> None:
    processes = load_workload(workload)
    console.print(f"[bold cyan]Loaded {len(processes)} processes[/bold cyan] from [green]{workload}[/green]")

    alg, quantum = _prompt_algorithm(console)
    result = simulate(processes, alg, quantum=quantum, recorder=LiveRecorder(console, delay=delay))
    _print_result(result, processes, console)

    out = input("Save trace to file [Enter to skip]: ").strip()
    if out:
        path = write_trace(out, result.trace)
        console.print(f"[green]Trace written to {path}[/green]")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console()
    configure_logging(args.verbose, console)

    try:
        if args.command == "run":
            processes = load_workload(args.workload)
            recorder = LiveRecorder(console, delay=args.delay) if args.live else NullRecorder()
            result = simulate(
                processes,
                args.algorithm,
                quantum=args.quantum,
                io_algorithm=args.io_algorithm,
                recorder=recorder,
            )
            _print_result(result, processes, console)
            if args.output:
                path = write_trace(args.output, result.trace)
                console.print(f"[green]Trace written to {path}[/green]")
            return 0

        if args.command == "compare":
            _run_compare(Path(args.workload), args.algorithms, args.quantum, console)
            return 0

        if args.command == "menu":
            _interactive_menu(args.workload, args.delay, console)
            return 0
    except SchedulerSimError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
