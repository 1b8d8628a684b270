import json
from pathlib import Path

import pytest

from scheduler_sim.errors import WorkloadError
from scheduler_sim.models import BurstKind, Process
from scheduler_sim.workload_io import load_workload, parse_workload


def test_load_text(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_text("A 4 1 5 3 2\n\nB 0 2 7\nC 4 0 1 1\n")
    procs = load_workload(p)
    assert isinstance(procs[0], Process)
    # sorted by arrival, file order kept on ties
    assert [x.name for x in procs] == ["B", "A", "C"]
    assert [x.pid for x in procs] == [1, 0, 2]
    a = procs[1]
    assert a.arrival == 4 and a.priority == 1
    assert [(b.kind, b.remaining) for b in a.bursts] == [
        (BurstKind.CPU, 5),
        (BurstKind.IO, 3),
        (BurstKind.CPU, 2),
    ]


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text(
        json.dumps(
            [
                {"name": "A", "arrival": 2, "priority": 1, "bursts": [3, 1]},
                {"name": "B", "arrival": 0, "priority": 0},
            ]
        )
    )
    procs = load_workload(p)
    assert [x.name for x in procs] == ["B", "A"]
    assert procs[0].bursts == []
    assert procs[1].bursts[1].kind is BurstKind.IO


def test_parse_keeps_input_order():
    procs = parse_workload("X 3 0 1\nY 1 0 1")
    assert [x.pid for x in procs] == [0, 1]


@pytest.mark.parametrize(
    "text",
    [
        "A 0",
        "A zero 1 5",
        "A 0 1 5 x",
        "A -1 1 5",
        "A 0 1 5 -3",
    ],
)
def test_malformed_records(text):
    with pytest.raises(WorkloadError):
        parse_workload(text)


def test_json_must_be_a_list(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('{"name": "A"}')
    with pytest.raises(WorkloadError):
        load_workload(p)


def test_json_missing_field(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"name": "A", "arrival": 0}]')
    with pytest.raises(WorkloadError):
        load_workload(p)


def test_missing_file(tmp_path: Path):
    with pytest.raises(WorkloadError):
        load_workload(tmp_path / "nope.txt")


def test_json_bursts_must_be_a_list(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"name": "A", "arrival": 0, "priority": 1, "bursts": "53"}]')
    with pytest.raises(WorkloadError):
        load_workload(p)


def test_undecodable_file(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_bytes(b"A 0 1 \xff\xfe 3\n")
    with pytest.raises(WorkloadError):
        load_workload(p)
