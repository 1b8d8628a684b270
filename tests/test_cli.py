from pathlib import Path

import pytest

from scheduler_sim import cli


@pytest.fixture
def workload(tmp_path: Path) -> Path:
    p = tmp_path / "w.txt"
    p.write_text("A 0 1 5 3 2\nB 1 0 2 1 1\n")
    return p


def _answers(monkeypatch, *values):
    it = iter(values)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(it))


def test_run_writes_trace(workload: Path, tmp_path: Path):
    out = tmp_path / "trace.json"
    assert cli.main(["run", "-a", "priority", "-w", str(workload), "-o", str(out)]) == 0
    assert out.exists()


def test_run_live_rr(workload: Path, capsys):
    assert cli.main(["run", "-a", "rr", "-q", "2", "-w", str(workload), "--live"]) == 0
    assert "t = 0" in capsys.readouterr().out


def test_run_rr_without_quantum_fails(workload: Path):
    assert cli.main(["run", "-a", "rr", "-w", str(workload)]) == 1


def test_run_unknown_algorithm_fails(workload: Path):
    assert cli.main(["run", "-a", "sjf", "-w", str(workload)]) == 1


def test_run_missing_workload_fails(tmp_path: Path):
    assert cli.main(["run", "-a", "fcfs", "-w", str(tmp_path / "missing.txt")]) == 1


def test_compare(workload: Path, capsys):
    assert cli.main(["compare", "-w", str(workload)]) == 0
    assert "FCFS" in capsys.readouterr().out


def test_menu_round_robin_and_save(monkeypatch, workload: Path, tmp_path: Path):
    out = tmp_path / "trace.txt"
    _answers(monkeypatch, "3", "2", str(out))
    assert cli.main(["menu", "-w", str(workload)]) == 0
    assert out.read_text().startswith("t=0")


def test_menu_skip_save(monkeypatch, workload: Path, tmp_path: Path):
    _answers(monkeypatch, "1", "")
    assert cli.main(["menu", "-w", str(workload)]) == 0
    assert list(tmp_path.iterdir()) == [workload]


@pytest.mark.parametrize("answers", [("9",), ("3", "x"), ("3", "0")])
def test_menu_bad_selection_is_fatal(monkeypatch, workload: Path, answers):
    _answers(monkeypatch, *answers)
    assert cli.main(["menu", "-w", str(workload)]) == 1


def test_run_undecodable_workload_fails(tmp_path: Path):
    p = tmp_path / "w.txt"
    p.write_bytes(b"A 0 1 \xff\xfe 3\n")
    assert cli.main(["run", "-a", "fcfs", "-w", str(p)]) == 1


def test_run_unwritable_output_fails(workload: Path, tmp_path: Path):
    out = tmp_path / "nodir" / "t.txt"
    assert cli.main(["run", "-a", "fcfs", "-w", str(workload), "-o", str(out)]) == 1
