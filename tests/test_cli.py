import json

from sched_engine.cli import main


def test_run_prints_gantt_and_results(capsys):
    assert main(["run", "-a", "fcfs", "-w", "sample:default", "--plain"]) == 0
    out = capsys.readouterr().out
    assert "FCFS" in out
    assert "Gantt Chart:" in out
    assert "5.75" in out


def test_run_with_step_playback(capsys):
    assert main(["run", "-a", "rr", "-w", "sample:default", "--step", "--step-delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "Execute P1" in out
    assert "P1 Preempted" in out
    assert "Quantum:" in out


def test_compare(capsys):
    assert main(["compare", "-w", "sample:default"]) == 0
    out = capsys.readouterr().out
    assert "Round Robin (T=2)" in out
    assert "Lowest average waiting time" in out


def test_export_to_file(tmp_path):
    out = tmp_path / "rr.json"
    assert main(["export", "-a", "rr", "-w", "sample:demo", "-o", str(out)]) == 0
    data = json.loads(out.read_text())
    assert data["quantum"] == 3
    assert data["algorithm"] == "Round Robin"
    assert {r["pid"] for r in data["results"]} == {"P1", "P2", "P3", "P4", "P5"}
    assert data["steps"][0]["action"] == "Execute P1"


def test_samples_to_stdout(capsys):
    assert main(["samples", "demo"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert len(data) == 5


def test_unknown_algorithm_is_an_error(capsys):
    assert main(["run", "-a", "bogus", "-w", "sample:default"]) == 2
    assert "Unknown algorithm" in capsys.readouterr().out


def test_missing_workload_file(tmp_path, capsys):
    assert main(["run", "-a", "fcfs", "-w", str(tmp_path / "missing.json")]) == 2
    assert "Error" in capsys.readouterr().out


def test_step_playback_shows_idle_and_queue(tmp_path, capsys):
    workload = tmp_path / "w.json"
    workload.write_text(json.dumps([
        {"pid": "a", "arrival_time": 0, "burst_time": 1},
        {"pid": "b", "arrival_time": 3, "burst_time": 1},
    ]))
    assert main(["run", "-a", "sjf", "-w", str(workload), "--step", "--step-delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "CPU Idle" in out
    assert "ready: [empty]" in out


def test_odd_colors_and_pids_are_printed_verbatim(tmp_path, capsys):
    workload = tmp_path / "w.json"
    workload.write_text(json.dumps([
        {"pid": "[bold]x", "arrival_time": 0, "burst_time": 2, "color": "/"},
        {"pid": "y", "arrival_time": 0, "burst_time": 1, "color": "[red]"},
    ]))
    assert main(["run", "-a", "fcfs", "-w", str(workload)]) == 0
    out = capsys.readouterr().out
    # Gantt labels are cut to the slice width and must not be read as markup.
    assert "[b" in out
    assert "Per-process results" in out
