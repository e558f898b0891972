"""
CPU scheduling simulation engine.

Computes FCFS, SJF, Round Robin and Priority schedules as Gantt intervals,
per-process results and a narrated step log, with a small command-line
front-end for running and comparing them.
"""

from .algorithms import run_algorithm, schedule_fcfs, schedule_priority, schedule_rr, schedule_sjf
from .models import ProcessSpec, ScheduleResult

__all__ = [
    "ProcessSpec",
    "ScheduleResult",
    "run_algorithm",
    "schedule_fcfs",
    "schedule_priority",
    "schedule_rr",
    "schedule_sjf",
]
