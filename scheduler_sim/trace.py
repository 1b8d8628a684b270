from __future__ import annotations

import json
import time
from pathlib import Path
from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from .errors import TraceWriteError
from .gantt import render_gantt, slices_from_trace
from .models import BurstKind, Process, SchedulerResult, TickEntry, TickStatus

_STATUS_STYLE = {
    TickStatus.IDLE: "dim",
    TickStatus.PROCESSING: "green",
    TickStatus.FINISHED: "bold cyan",
    TickStatus.NO_BURST_LEFT: "yellow",
    TickStatus.WRONG_KIND: "bold red",
}


def describe_result(result: SchedulerResult) -> str:
    if result.process is None:
        return result.status.value
    return f"{result.status.value} {result.process.label()}"


def describe_processes(processes: Sequence[Process]) -> str:
    if not processes:
        return "-"
    return ", ".join(_describe_process(p) for p in processes)


def _describe_process(process: Process) -> str:
    bursts = " ".join(f"{b.kind.value}:{b.remaining}" for b in process.bursts)
    return f"{process.label()}[{bursts}]"


def render_tick(entry: TickEntry) -> Table:
    """
    Rich table showing one tick of the simulation.
    """
    table = Table(title=f"t = {entry.time}", box=box.SIMPLE_HEAVY, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("CPU", describe_result(entry.cpu), style=_STATUS_STYLE[entry.cpu.status])
    table.add_row("IO", describe_result(entry.io), style=_STATUS_STYLE[entry.io.status])
    if entry.arrived:
        table.add_row("Arrived", describe_processes(entry.arrived))
    table.add_row("CPU queue", describe_processes(entry.cpu_queue))
    table.add_row("IO queue", describe_processes(entry.io_queue))
    table.add_row("Yet to arrive", describe_processes(entry.yet_to_arrive))
    table.add_row("Finished", describe_processes(entry.finished))
    return table


class LiveRecorder:
    """
    Prints every tick as it happens, optionally pausing between ticks.
    """

    def __init__(self, console: Optional[Console] = None, delay: float = 0.0) -> None:
        self.console = console or Console()
        self.delay = delay

    def record(self, entry: TickEntry) -> None:
        self.console.print(render_tick(entry))
        if self.delay > 0:
            time.sleep(self.delay)

    def finish(self, trace: List[TickEntry]) -> None:
        self.console.print(f"[bold]Simulation finished after {len(trace)} ticks.[/bold]")


class NullRecorder:
    def record(self, entry: TickEntry) -> None:
        pass

    def finish(self, trace: List[TickEntry]) -> None:
        pass


def trace_to_text(trace: Sequence[TickEntry]) -> str:
    lines: List[str] = []
    for entry in trace:
        lines.append(f"t={entry.time}")
        lines.append(f"  cpu:           {describe_result(entry.cpu)}")
        lines.append(f"  io:            {describe_result(entry.io)}")
        if entry.arrived:
            lines.append(f"  arrived:       {describe_processes(entry.arrived)}")
        lines.append(f"  cpu queue:     {describe_processes(entry.cpu_queue)}")
        lines.append(f"  io queue:      {describe_processes(entry.io_queue)}")
        lines.append(f"  yet to arrive: {describe_processes(entry.yet_to_arrive)}")
        lines.append(f"  finished:      {describe_processes(entry.finished)}")
    lines.append("")
    lines.append(render_gantt(slices_from_trace(trace, BurstKind.CPU), title="CPU"))
    lines.append(render_gantt(slices_from_trace(trace, BurstKind.IO), title="IO"))
    return "\n".join(lines) + "\n"


def _process_to_dict(process: Process) -> dict:
    return {
        "name": process.name,
        "pid": process.pid,
        "priority": process.priority,
        "arrival": process.arrival,
        "bursts": [{"kind": b.kind.value, "remaining": b.remaining} for b in process.bursts],
    }


def _result_to_dict(result: SchedulerResult) -> dict:
    return {
        "status": result.status.value,
        "pid": None if result.process is None else result.process.pid,
    }


def trace_to_dicts(trace: Sequence[TickEntry]) -> List[dict]:
    return [
        {
            "time": e.time,
            "cpu": _result_to_dict(e.cpu),
            "io": _result_to_dict(e.io),
            "arrived": [p.pid for p in e.arrived],
            "cpu_queue": [_process_to_dict(p) for p in e.cpu_queue],
            "io_queue": [_process_to_dict(p) for p in e.io_queue],
            "yet_to_arrive": [p.pid for p in e.yet_to_arrive],
            "finished": [p.pid for p in e.finished],
        }
        for e in trace
    ]


def write_trace(path: str | Path, trace: Sequence[TickEntry]) -> Path:
    """
    Write the trace to ``path``: JSON for a ``.json`` suffix, plain text otherwise.
    """
    path = Path(path)
    if path.suffix.lower() == ".json":
        payload = json.dumps(trace_to_dicts(trace), indent=2)
    else:
        payload = trace_to_text(trace)
    try:
        path.write_text(payload, encoding="utf-8")
    except OSError as exc:
        raise TraceWriteError(f"Cannot write trace to {path}: {exc}") from exc
    return path
