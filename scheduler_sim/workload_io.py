from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Sequence

from .errors import WorkloadError
from .models import Burst, BurstKind, Process


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload file into a list of processes sorted by arrival.

    ``.json`` files hold a list of process objects; anything else is read as
    the plain text format, one ``name arrival priority burst...`` record per
    line.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise WorkloadError(f"Cannot read workload {path}: {exc}") from exc

    if path.suffix.lower() == ".json":
        processes = _load_json(text)
    else:
        processes = parse_workload(text)

    # stable: equal arrivals keep file order
    return sorted(processes, key=lambda p: p.arrival)


def parse_workload(text: str) -> List[Process]:
    records = [line.split() for line in text.splitlines() if line.strip()]
    return [_process_from_fields(pid, fields) for pid, fields in enumerate(records)]


def _load_json(text: str) -> List[Process]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise WorkloadError(f"Invalid JSON workload: {exc}") from exc

    if not isinstance(raw, list):
        raise WorkloadError("JSON workload must be a list of process objects")

    processes: List[Process] = []
    for pid, entry in enumerate(raw):
        try:
            bursts = entry.get("bursts", [])
            fields = [entry["name"], entry["arrival"], entry["priority"]]
        except (KeyError, TypeError, AttributeError) as exc:
            raise WorkloadError(f"Invalid process entry: {entry!r}") from exc
        if not isinstance(bursts, list):
            raise WorkloadError(f"Process entry {pid} needs a list of bursts: {entry!r}")
        fields.extend(bursts)
        processes.append(_process_from_fields(pid, [str(f) for f in fields]))
    return processes


def _process_from_fields(pid: int, fields: Sequence[str]) -> Process:
    if len(fields) < 3:
        raise WorkloadError(f"Record {pid} needs at least name, arrival and priority: {' '.join(fields)!r}")

    name = fields[0]
    try:
        arrival = int(fields[1])
        priority = int(fields[2])
        durations = [int(v) for v in fields[3:]]
    except ValueError as exc:
        raise WorkloadError(f"Invalid process record {pid}: {' '.join(fields)!r}") from exc

    if arrival < 0:
        raise WorkloadError(f"Record {pid} ({name}) has a negative arrival time")
    if any(d < 0 for d in durations):
        raise WorkloadError(f"Record {pid} ({name}) has a negative burst")

    return Process(name=name, pid=pid, priority=priority, arrival=arrival, bursts=build_bursts(durations))


def build_bursts(durations: Iterable[int]) -> List[Burst]:
    """
    Alternate burst kinds starting with CPU.
    """
    bursts: List[Burst] = []
    kind = BurstKind.CPU
    for d in durations:
        bursts.append(Burst(kind, d))
        kind = kind.other()
    return bursts
