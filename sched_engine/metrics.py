from __future__ import annotations

from typing import List, Sequence

from .models import ProcessResult, ScheduleResult, SystemMetrics


def average(values: Sequence[float]) -> float:
    """
    Arithmetic mean; an empty sequence averages to 0.0 rather than NaN.
    """
    if not values:
        return 0.0
    return sum(values) / len(values)


def finalize_result(result: ScheduleResult) -> ScheduleResult:
    """
    Fill in the aggregate fields of a result once every process has completed.
    """
    result.avg_waiting_time = average([p.waiting_time for p in result.results])
    result.avg_turnaround_time = average([p.turnaround_time for p in result.results])
    compute_system_metrics(result)
    return result


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given populated per-process results
    and execution intervals.
    """
    if not result.results:
        system = SystemMetrics(cpu_busy_time=0, idle_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = max(p.completion_time for p in result.results)
    cpu_busy_time = sum(interval.duration for interval in result.intervals)

    throughput = len(result.results) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=makespan - cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
    )
    result.system = system
    return system


def summarize_process_metrics(processes: List[ProcessResult]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    return {
        "avg_waiting": average([p.waiting_time for p in processes]),
        "avg_turnaround": average([p.turnaround_time for p in processes]),
        "avg_response": average([p.response_time for p in processes]),
    }
