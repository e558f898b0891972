from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import List, Optional

# Display palette handed out to processes that arrive without a colour.
PROCESS_COLORS = [
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#06B6D4",
    "#84CC16",
    "#F97316",
    "#6366F1",
]


@dataclass(frozen=True)
class ProcessSpec:
    pid: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None
    color: Optional[str] = None


@dataclass(eq=False)
class RunState:
    """
    Mutable bookkeeping for one process inside the round-robin loop.
    """

    spec: ProcessSpec
    remaining_time: int
    start_time: Optional[int] = None


@dataclass
class ExecutionInterval:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int
    color: Optional[str] = None

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ExecutionStep:
    time: int
    action: str
    pid: Optional[str]
    reason: str
    ready_queue: List[str] = field(default_factory=list)


@dataclass
class ProcessResult:
    pid: str
    arrival_time: int
    burst_time: int
    start_time: int
    completion_time: int
    waiting_time: int
    turnaround_time: int
    response_time: int
    priority: Optional[int] = None
    color: Optional[str] = None

    @classmethod
    def from_spec(cls, spec: ProcessSpec, start_time: int, completion_time: int) -> "ProcessResult":
        turnaround_time = completion_time - spec.arrival_time
        return cls(
            pid=spec.pid,
            arrival_time=spec.arrival_time,
            burst_time=spec.burst_time,
            start_time=start_time,
            completion_time=completion_time,
            waiting_time=turnaround_time - spec.burst_time,
            turnaround_time=turnaround_time,
            response_time=start_time - spec.arrival_time,
            priority=spec.priority,
            color=spec.color,
        )


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    intervals: List[ExecutionInterval] = field(default_factory=list)
    results: List[ProcessResult] = field(default_factory=list)
    steps: List[ExecutionStep] = field(default_factory=list)
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    system: Optional[SystemMetrics] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AlgorithmSummary:
    """
    Averages for one algorithm run, as shown in the comparison table.
    """

    key: str
    name: str
    avg_waiting_time: float
    avg_turnaround_time: float
    avg_response_time: float
