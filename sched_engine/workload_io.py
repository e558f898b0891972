from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .models import PROCESS_COLORS, ProcessSpec

logger = logging.getLogger(__name__)

SAMPLE_PREFIX = "sample:"

# Built-in workloads matching the visualizer's "default" and "demo" forms.
SAMPLE_WORKLOADS: Dict[str, List[dict]] = {
    "default": [
        {"pid": "P1", "arrival_time": 0, "burst_time": 5, "priority": 2},
        {"pid": "P2", "arrival_time": 1, "burst_time": 3, "priority": 1},
        {"pid": "P3", "arrival_time": 2, "burst_time": 8, "priority": 4},
        {"pid": "P4", "arrival_time": 3, "burst_time": 6, "priority": 3},
    ],
    "demo": [
        {"pid": "P1", "arrival_time": 0, "burst_time": 6, "priority": 2},
        {"pid": "P2", "arrival_time": 2, "burst_time": 2, "priority": 1},
        {"pid": "P3", "arrival_time": 4, "burst_time": 8, "priority": 4},
        {"pid": "P4", "arrival_time": 6, "burst_time": 3, "priority": 3},
        {"pid": "P5", "arrival_time": 8, "burst_time": 4, "priority": 2},
    ],
}

# Quantum each sample is meant to be run with.
SAMPLE_QUANTA = {"default": 2, "demo": 3}


def load_workload(path: str | Path) -> List[ProcessSpec]:
    """
    Load a workload from a JSON or CSV file (or a ``sample:<name>`` reference)
    into a validated list of ProcessSpec objects.
    """
    if isinstance(path, str) and path.startswith(SAMPLE_PREFIX):
        return sample_workload(path[len(SAMPLE_PREFIX):])

    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    validate_workload(processes)
    logger.info("Loaded %d processes from %s", len(processes), path)
    return processes


def sample_quantum(workload: str | Path, fallback: int) -> int:
    """
    Quantum suggested for a ``sample:<name>`` workload, else ``fallback``.
    """
    if isinstance(workload, str) and workload.startswith(SAMPLE_PREFIX):
        return SAMPLE_QUANTA.get(workload[len(SAMPLE_PREFIX):], fallback)
    return fallback


def sample_workload(name: str) -> List[ProcessSpec]:
    try:
        entries = SAMPLE_WORKLOADS[name]
    except KeyError:
        raise ValueError(
            f"Unknown sample workload '{name}' (choose from {', '.join(SAMPLE_WORKLOADS)})"
        ) from None
    return [_process_from_mapping(entry, index) for index, entry in enumerate(entries)]


def _load_json(path: Path) -> List[ProcessSpec]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry, index) for index, entry in enumerate(raw)]


def _load_csv(path: Path) -> List[ProcessSpec]:
    processes: List[ProcessSpec] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for index, row in enumerate(reader):
            processes.append(_process_from_mapping(row, index))
    return processes


def _as_int(value) -> int:
    # JSON gives real ints; CSV gives strings. Floats and booleans are rejected
    # rather than truncated.
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"expected an integer, got {value!r}")


def _process_from_mapping(mapping, index: int = 0) -> ProcessSpec:
    try:
        pid = str(mapping["pid"])
        arrival_time = _as_int(mapping["arrival_time"])
        burst_time = _as_int(mapping["burst_time"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    priority_val = mapping.get("priority")
    try:
        priority = _as_int(priority_val) if priority_val not in (None, "") else None
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid priority in process entry: {mapping!r}") from exc

    color = mapping.get("color") or PROCESS_COLORS[index % len(PROCESS_COLORS)]

    return ProcessSpec(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
        color=color,
    )


def validate_workload(processes: Sequence[ProcessSpec]) -> None:
    """
    Reject workloads the scheduler does not define behaviour for: duplicate
    ids, negative arrival times and non-positive burst times.
    """
    seen = set()
    for p in processes:
        if p.pid in seen:
            raise ValueError(f"Duplicate process id: {p.pid}")
        seen.add(p.pid)
        if p.arrival_time < 0:
            raise ValueError(f"Process {p.pid} has negative arrival time {p.arrival_time}")
        if p.burst_time <= 0:
            raise ValueError(f"Process {p.pid} must have a positive burst time (got {p.burst_time})")


def workload_to_dicts(processes: Iterable[ProcessSpec]) -> List[dict]:
    return [
        {
            "pid": p.pid,
            "arrival_time": p.arrival_time,
            "burst_time": p.burst_time,
            "priority": p.priority,
            "color": p.color,
        }
        for p in processes
    ]


def dump_workload(processes: Iterable[ProcessSpec], path: str | Path) -> None:
    """
    Write a workload back out as JSON, the format ``load_workload`` reads.
    """
    data = workload_to_dicts(processes)
    Path(path).write_text(json.dumps(data, indent=2), encoding="utf-8")
