from rich.panel import Panel

from sched_engine.algorithms import schedule_fcfs
from sched_engine.gantt import build_rich_gantt, color_style, layout_timeline, render_gantt
from sched_engine.models import ExecutionInterval, ProcessSpec


def _result():
    return schedule_fcfs(
        [
            ProcessSpec("P1", arrival_time=2, burst_time=3, color="#3B82F6"),
            ProcessSpec("P2", arrival_time=5, burst_time=2),
        ]
    )


def test_render_gantt_plain():
    chart = render_gantt(_result().intervals)
    lines = chart.splitlines()
    assert lines[0] == "Gantt Chart:"
    assert lines[1] == "|..=====|"
    assert lines[2].startswith("   P1 P2")
    assert lines[3] == "0  2  5  7"


def test_render_gantt_empty():
    assert render_gantt([]) == "(no execution)"


def test_build_rich_gantt():
    panel, marks = build_rich_gantt(_result().intervals)
    assert isinstance(panel, Panel)
    assert marks == "0  2  5  7"

    _, no_marks = build_rich_gantt([])
    assert no_marks == ""


def test_layout_timeline_includes_idle_segments():
    segments, marks = layout_timeline(_result().intervals)
    assert [(s.pid, s.width) for s in segments] == [(None, 2), ("P1", 3), ("P2", 2)]
    assert marks == "0  2  5  7"


def test_unusable_color_falls_back():
    assert color_style("/") is None
    assert color_style(None) is None
    assert color_style("#3B82F6") is not None
    panel, _ = build_rich_gantt([ExecutionInterval("P1", 0, 2, color="not a colour")])
    assert isinstance(panel, Panel)
