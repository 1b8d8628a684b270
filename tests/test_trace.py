import json
from pathlib import Path

import pytest
from rich.panel import Panel
from rich.table import Table

from scheduler_sim.algorithms import build_schedulers
from scheduler_sim.errors import SchedulerSimError
from scheduler_sim.gantt import build_rich_gantt, lanes_from_trace, render_gantt, slices_from_trace
from scheduler_sim.metrics import compute_process_metrics, compute_system_metrics, summarize_process_metrics
from scheduler_sim.models import BurstKind
from scheduler_sim.simulation import run_simulation
from scheduler_sim.trace import render_tick, write_trace
from scheduler_sim.workload_io import parse_workload


def _run(text, algorithm="fcfs", quantum=None):
    processes = parse_workload(text)
    cpu, io = build_schedulers(algorithm, quantum=quantum)
    return processes, run_simulation(processes, cpu, io)


def test_slices_from_trace():
    _, result = _run("A 0 1 5 3 2")
    cpu = slices_from_trace(result.trace, BurstKind.CPU)
    io = slices_from_trace(result.trace, BurstKind.IO)
    assert [(s.pid, s.start_time, s.end_time) for s in cpu] == [("A#0", 0, 5), ("A#0", 8, 10)]
    assert [(s.pid, s.start_time, s.end_time) for s in io] == [("A#0", 5, 8)]


def test_slices_keep_same_named_processes_apart():
    _, result = _run("A 0 0 2\nA 0 0 2")
    cpu = slices_from_trace(result.trace, BurstKind.CPU)
    assert [(s.pid, s.start_time, s.end_time) for s in cpu] == [("A#0", 0, 2), ("A#1", 2, 4)]


def test_rich_gantt_has_one_panel_for_both_lanes():
    _, result = _run("A 0 1 5 3 2")
    lanes = lanes_from_trace(result.trace)
    assert list(lanes) == ["CPU", "IO"]
    assert isinstance(build_rich_gantt(lanes), Panel)
    assert isinstance(build_rich_gantt({"CPU": [], "IO": []}), Panel)


def test_render_gantt_text():
    _, result = _run("A 0 0 2\nB 0 0 1")
    text = render_gantt(slices_from_trace(result.trace, BurstKind.CPU), title="CPU")
    assert text.splitlines()[0] == "CPU:"
    assert "|===|" in text
    assert render_gantt([], title="IO") == "IO:\n(no execution)"


def test_render_tick_is_a_table():
    _, result = _run("A 0 1 5 3 2")
    assert isinstance(render_tick(result.trace[0]), Table)


def test_write_trace_text(tmp_path: Path):
    _, result = _run("A 0 1 5 3 2")
    out = write_trace(tmp_path / "trace.txt", result.trace)
    content = out.read_text()
    assert content.startswith("t=0\n")
    assert "cpu:           finished A#0" in content
    assert "CPU:" in content and "IO:" in content


def test_write_trace_json(tmp_path: Path):
    _, result = _run("A 0 1 5 3 2")
    out = write_trace(tmp_path / "trace.json", result.trace)
    data = json.loads(out.read_text())
    assert len(data) == 10
    assert data[4]["cpu"] == {"status": "finished", "pid": 0}
    assert data[4]["io_queue"][0]["bursts"][0] == {"kind": "io", "remaining": 3}
    assert data[9]["finished"] == [0]


def test_metrics_single_process():
    processes, result = _run("A 0 1 5 3 2")
    (m,) = compute_process_metrics(result.trace, processes)
    assert (m.cpu_time, m.io_time) == (7, 3)
    assert m.completion_time == 10
    assert m.turnaround_time == 10
    assert m.waiting_time == 0
    assert m.response_time == 0

    system = compute_system_metrics(result.trace)
    assert system.makespan == 10
    assert system.cpu_busy_time == 7
    assert system.io_busy_time == 3
    assert system.throughput == 0.1


def test_metrics_waiting_and_response():
    processes, result = _run("A 0 0 3\nB 0 0 2")
    metrics = {m.name: m for m in compute_process_metrics(result.trace, processes)}
    assert metrics["B"].completion_time == 5
    assert metrics["B"].waiting_time == 3
    assert metrics["B"].response_time == 3
    summary = summarize_process_metrics(list(metrics.values()))
    assert summary["avg_waiting"] == 1.5
    assert summary["avg_turnaround"] == 4.0


def test_summarize_empty():
    assert summarize_process_metrics([]) == {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}


def test_write_trace_to_missing_directory(tmp_path: Path):
    _, result = _run("A 0 0 1")
    with pytest.raises(SchedulerSimError):
        write_trace(tmp_path / "nodir" / "trace.txt", result.trace)
