from __future__ import annotations

from typing import Dict, List, Sequence

from .models import Process, ProcessMetrics, SystemMetrics, TickEntry


def compute_process_metrics(trace: Sequence[TickEntry], processes: Sequence[Process]) -> List[ProcessMetrics]:
    """
    Derive per-process timings from a trace. ``processes`` supplies identity
    and arrival; the trace supplies everything else.
    """
    cpu_time: Dict[int, int] = {p.pid: 0 for p in processes}
    io_time: Dict[int, int] = {p.pid: 0 for p in processes}
    first_run: Dict[int, int] = {}
    completion: Dict[int, int] = {}

    for entry in trace:
        if entry.cpu.ran:
            pid = entry.cpu.process.pid
            cpu_time[pid] += 1
            first_run.setdefault(pid, entry.time)
        if entry.io.ran:
            io_time[entry.io.process.pid] += 1
        for p in entry.finished:
            completion.setdefault(p.pid, entry.time + 1)

    metrics: List[ProcessMetrics] = []
    for p in sorted(processes, key=lambda x: x.pid):
        done = completion.get(p.pid, len(trace))
        turnaround = done - p.arrival
        start = first_run.get(p.pid)
        metrics.append(
            ProcessMetrics(
                pid=p.pid,
                name=p.name,
                arrival_time=p.arrival,
                cpu_time=cpu_time[p.pid],
                io_time=io_time[p.pid],
                first_run=start,
                completion_time=done,
                waiting_time=turnaround - cpu_time[p.pid] - io_time[p.pid],
                turnaround_time=turnaround,
                response_time=None if start is None else start - p.arrival,
                priority=p.priority,
            )
        )
    return metrics


def compute_system_metrics(trace: Sequence[TickEntry]) -> SystemMetrics:
    """
    Compute throughput and CPU/IO utilization over the whole run.
    """
    makespan = len(trace)
    if makespan == 0:
        return SystemMetrics(0, 0, 0, 0.0, 0.0, 0.0)

    cpu_busy = sum(1 for e in trace if e.cpu.ran)
    io_busy = sum(1 for e in trace if e.io.ran)
    finished = len(trace[-1].finished)

    return SystemMetrics(
        makespan=makespan,
        cpu_busy_time=cpu_busy,
        io_busy_time=io_busy,
        throughput=finished / makespan,
        cpu_utilization=cpu_busy / makespan,
        io_utilization=io_busy / makespan,
    )


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    responses = [p.response_time for p in processes if p.response_time is not None]
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(responses) / len(responses) if responses else 0.0,
    }
