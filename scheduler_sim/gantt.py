from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import BurstKind, ScheduledSlice, TickEntry


def slices_from_trace(trace: Sequence[TickEntry], kind: BurstKind) -> List[ScheduledSlice]:
    """
    Collapse consecutive ticks of work for the same process into slices.
    """
    slices: List[ScheduledSlice] = []
    for entry in trace:
        result = entry.cpu if kind is BurstKind.CPU else entry.io
        if not result.ran:
            continue
        label = result.process.label()
        last: Optional[ScheduledSlice] = slices[-1] if slices else None
        # a preempted process re-selected straight away still shows as one slice
        if last is not None and last.pid == label and last.end_time == entry.time:
            last.end_time = entry.time + 1
        else:
            slices.append(ScheduledSlice(pid=label, start_time=entry.time, end_time=entry.time + 1))
    return slices


def render_gantt(slices: List[ScheduledSlice], title: str = "Gantt Chart") -> str:
    """
    Plain-text Gantt chart renderer, used for trace files.
    """
    if not slices:
        return f"{title}:\n(no execution)"

    slices = sorted(slices, key=lambda s: (s.start_time, s.end_time))

    line = "|"
    labels = " "
    time_marks = "0"
    last_time = 0

    for sl in slices:
        idle_gap = sl.start_time - last_time
        if idle_gap > 0:
            line += "." * idle_gap
            labels += " " * idle_gap
            last_time = sl.start_time

        width = max(1, sl.end_time - sl.start_time)
        line += "=" * width
        labels += sl.pid[:width].ljust(width)
        last_time = sl.end_time
        time_marks += f" {last_time}"

    line += "|"

    return "\n".join(
        [
            f"{title}:",
            line,
            labels,
            time_marks,
        ]
    )


def lanes_from_trace(trace: Sequence[TickEntry]) -> Dict[str, List[ScheduledSlice]]:
    return {
        "CPU": slices_from_trace(trace, BurstKind.CPU),
        "IO": slices_from_trace(trace, BurstKind.IO),
    }


def _ruler(end: int, step: int = 5) -> str:
    marks = ""
    for t in range(0, end + 1, step):
        marks = marks.ljust(t) + str(t)
    return marks


def build_rich_gantt(lanes: Dict[str, List[ScheduledSlice]], title: str = "Gantt Chart") -> Panel:
    """
    Build one Rich Panel with a row per lane, sharing a time axis and one
    colour per process so a process can be followed from CPU to IO.
    """
    if not any(lanes.values()):
        return Panel("No execution", title=title)

    end = max(sl.end_time for slices in lanes.values() for sl in slices)

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[str, str] = {}

    def pid_color(pid: str) -> str:
        if pid not in pid_to_color:
            pid_to_color[pid] = colors[len(pid_to_color) % len(colors)]
        return pid_to_color[pid]

    grid = Table.grid(padding=(0, 1))
    grid.add_column(style="bold", no_wrap=True)
    grid.add_column(no_wrap=True)

    for name, slices in lanes.items():
        bar = Text()
        labels = Text()
        cursor = 0
        for sl in sorted(slices, key=lambda s: s.start_time):
            if sl.start_time > cursor:
                bar.append("." * (sl.start_time - cursor), style="dim")
                labels.append(" " * (sl.start_time - cursor))
            width = max(1, sl.end_time - sl.start_time)
            bar.append(" " * width, style=f"on {pid_color(sl.pid)}")
            labels.append(sl.pid[:width].ljust(width))
            cursor = sl.end_time
        if cursor < end:
            bar.append("." * (end - cursor), style="dim")
        grid.add_row(name, bar)
        grid.add_row("", labels)

    grid.add_row("", Text(_ruler(end), style="dim"))
    return Panel.fit(grid, title=title)
