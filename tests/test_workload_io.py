import json
from pathlib import Path

import pytest

from sched_engine.models import PROCESS_COLORS, ProcessSpec
from sched_engine.workload_io import (
    dump_workload,
    load_workload,
    sample_quantum,
    sample_workload,
    validate_workload,
)


def test_load_json(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('[{"pid":"A","arrival_time":0,"burst_time":3,"priority":1},'
                 '{"pid":"B","arrival_time":1,"burst_time":2,"color":"red"}]')
    procs = load_workload(p)
    assert isinstance(procs[0], ProcessSpec)
    assert procs[0].color == PROCESS_COLORS[0]
    assert procs[1].priority is None
    assert procs[1].arrival_time == 1
    assert procs[1].color == "red"


def test_load_csv(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\nA,0,3,1\nB,1,2,\n")
    procs = load_workload(p)
    assert procs[0].pid == "A"
    assert procs[1].priority is None
    assert procs[1].color == PROCESS_COLORS[1]


def test_colors_cycle_through_palette(tmp_path: Path):
    entries = [{"pid": f"P{i}", "arrival_time": 0, "burst_time": 1} for i in range(len(PROCESS_COLORS) + 1)]
    p = tmp_path / "w.json"
    p.write_text(json.dumps(entries))
    procs = load_workload(p)
    assert procs[-1].color == PROCESS_COLORS[0]


def test_unsupported_suffix(tmp_path: Path):
    with pytest.raises(ValueError, match="Unsupported workload format"):
        load_workload(tmp_path / "w.txt")


def test_json_must_be_a_list(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text('{"pid": "A"}')
    with pytest.raises(ValueError, match="must be a list"):
        load_workload(p)


def test_bad_entry_is_reported(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time\nA,zero,3\n")
    with pytest.raises(ValueError, match="Invalid process entry"):
        load_workload(p)


@pytest.mark.parametrize(
    "procs, message",
    [
        ([ProcessSpec("A", 0, 1), ProcessSpec("A", 1, 1)], "Duplicate process id"),
        ([ProcessSpec("A", -1, 1)], "negative arrival"),
        ([ProcessSpec("A", 0, 0)], "positive burst"),
    ],
)
def test_validate_workload_rejects(procs, message):
    with pytest.raises(ValueError, match=message):
        validate_workload(procs)


def test_samples():
    default = sample_workload("default")
    assert [p.pid for p in default] == ["P1", "P2", "P3", "P4"]
    assert load_workload("sample:demo")[4].arrival_time == 8
    with pytest.raises(ValueError, match="Unknown sample workload"):
        sample_workload("nope")


def test_sample_quantum():
    assert sample_quantum("sample:demo", 2) == 3
    assert sample_quantum("workload.json", 5) == 5


def test_dump_then_load(tmp_path: Path):
    out = tmp_path / "demo.json"
    dump_workload(sample_workload("demo"), out)
    assert load_workload(out) == sample_workload("demo")


@pytest.mark.parametrize("burst", [3.7, True, "3.7", None])
def test_non_integer_times_are_rejected(tmp_path: Path, burst):
    p = tmp_path / "w.json"
    p.write_text(json.dumps([{"pid": "A", "arrival_time": 0, "burst_time": burst}]))
    with pytest.raises(ValueError, match="Invalid process entry"):
        load_workload(p)


def test_non_integer_priority_is_rejected(tmp_path: Path):
    p = tmp_path / "w.json"
    p.write_text(json.dumps([{"pid": "A", "arrival_time": 0, "burst_time": 1, "priority": 1.5}]))
    with pytest.raises(ValueError, match="Invalid priority"):
        load_workload(p)


def test_csv_integers_may_be_padded(tmp_path: Path):
    p = tmp_path / "w.csv"
    p.write_text("pid,arrival_time,burst_time,priority\nA, 0, 3 ,2\n")
    procs = load_workload(p)
    assert (procs[0].arrival_time, procs[0].burst_time, procs[0].priority) == (0, 3, 2)
