from __future__ import annotations

from typing import Dict, List, NamedTuple, Optional, Tuple

from rich.errors import StyleSyntaxError
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from .models import ExecutionInterval

FALLBACK_COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]


class Segment(NamedTuple):
    pid: Optional[str]  # None for an idle gap
    width: int
    color: Optional[str]


def layout_timeline(intervals: List[ExecutionInterval]) -> Tuple[List[Segment], str]:
    """
    Turn intervals into consecutive chart segments, idle gaps included, plus
    the time-mark ruler printed under the chart.
    """
    segments: List[Segment] = []
    marks = ["0"]
    last_time = 0

    for iv in sorted(intervals, key=lambda s: (s.start_time, s.end_time)):
        if iv.start_time > last_time:
            segments.append(Segment(None, iv.start_time - last_time, None))
            marks.append(f"{iv.start_time:>3}")
        segments.append(Segment(iv.pid, max(1, iv.duration), iv.color))
        last_time = iv.end_time
        marks.append(f"{last_time:>3}")

    return segments, "".join(marks)


def color_style(color: Optional[str], background: bool = False) -> Optional[Style]:
    """
    Parse a workload colour into a rich Style; unusable colours give None.
    """
    if not color:
        return None
    try:
        return Style.parse(f"on {color}" if background else color)
    except StyleSyntaxError:
        return None


def render_gantt(intervals: List[ExecutionInterval]) -> str:
    """
    Plain-text Gantt chart; idle gaps are drawn with dots.
    """
    if not intervals:
        return "(no execution)"

    segments, time_marks = layout_timeline(intervals)
    bars = "".join(("=" if seg.pid else ".") * seg.width for seg in segments)
    labels = "".join((seg.pid or "")[: seg.width].ljust(seg.width) for seg in segments)

    return "\n".join(["Gantt Chart:", f"|{bars}|", f" {labels}", time_marks])


def build_rich_gantt(intervals: List[ExecutionInterval]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a Gantt chart drawn in each process's own
    colour, and a string with time marks.
    """
    if not intervals:
        return Panel("No execution", title="Gantt Chart"), ""

    segments, time_marks = layout_timeline(intervals)
    pid_styles: Dict[str, Style] = {}

    timeline = Text()
    labels = Text()
    for seg in segments:
        if seg.pid is None:
            timeline.append("." * seg.width, style="dim")
            labels.append(" " * seg.width)
            continue
        if seg.pid not in pid_styles:
            fallback = FALLBACK_COLORS[len(pid_styles) % len(FALLBACK_COLORS)]
            pid_styles[seg.pid] = color_style(seg.color, background=True) or Style.parse(f"on {fallback}")
        timeline.append(" " * seg.width, style=pid_styles[seg.pid])
        labels.append(seg.pid[: seg.width].ljust(seg.width), style="bold")

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    return Panel.fit(table, title="Gantt Chart"), time_marks
