from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, List, Optional, Sequence

from .metrics import finalize_result, summarize_process_metrics
from .models import (
    AlgorithmSummary,
    ExecutionInterval,
    ExecutionStep,
    ProcessResult,
    ProcessSpec,
    RunState,
    ScheduleResult,
)

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2

CPU_IDLE = "CPU Idle"


def _execute_action(pid: str) -> str:
    return f"Execute {pid}"


def _completed_action(pid: str) -> str:
    return f"{pid} Completed"


def _preempted_action(pid: str) -> str:
    return f"{pid} Preempted"


def _completion_reason(done: ProcessResult) -> str:
    return (
        f"{done.pid} finished execution. CT={done.completion_time}, "
        f"TAT={done.turnaround_time}, WT={done.waiting_time}"
    )


def _run_to_completion(
    result: ScheduleResult,
    spec: ProcessSpec,
    time: int,
    reason: str,
    ready_queue: List[str],
) -> ProcessResult:
    """
    Dispatch a process for its whole burst: log the decision, record the
    interval and its final metrics. The caller emits the completion step.
    """
    logger.debug("%s: t=%d dispatch %s for %d", result.algorithm, time, spec.pid, spec.burst_time)
    result.steps.append(
        ExecutionStep(
            time=time,
            action=_execute_action(spec.pid),
            pid=spec.pid,
            reason=reason,
            ready_queue=ready_queue,
        )
    )

    end_time = time + spec.burst_time
    result.intervals.append(
        ExecutionInterval(pid=spec.pid, start_time=time, end_time=end_time, color=spec.color)
    )

    done = ProcessResult.from_spec(spec, start_time=time, completion_time=end_time)
    result.results.append(done)
    return done


def schedule_fcfs(processes: Sequence[ProcessSpec], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.

    Processes run in arrival order; ties keep their input order because
    ``sorted`` is stable.
    """
    processes_sorted = sorted(processes, key=lambda p: p.arrival_time)

    result = ScheduleResult(algorithm="FCFS", quantum=None)
    completed: List[ProcessSpec] = []
    time = 0

    def waiting(current_time: int, exclude: Optional[ProcessSpec] = None) -> List[str]:
        return [
            p.pid
            for p in processes_sorted
            if p.arrival_time <= current_time
            and not any(p is c for c in completed)
            and p is not exclude
        ]

    for p in processes_sorted:
        if time < p.arrival_time:
            result.steps.append(
                ExecutionStep(
                    time=time,
                    action=CPU_IDLE,
                    pid=None,
                    reason=f"No process available. Waiting for {p.pid} to arrive at time {p.arrival_time}.",
                )
            )
            time = p.arrival_time

        reason = (
            f"{p.pid} selected using FCFS - it arrived first among waiting processes "
            f"(Arrival Time: {p.arrival_time})."
        )
        done = _run_to_completion(result, p, time, reason, waiting(time, exclude=p))
        completed.append(p)
        time = done.completion_time

        result.steps.append(
            ExecutionStep(
                time=time,
                action=_completed_action(p.pid),
                pid=p.pid,
                reason=_completion_reason(done),
                ready_queue=waiting(time),
            )
        )

    return finalize_result(result)


def _schedule_by_key(
    processes: Sequence[ProcessSpec],
    algorithm: str,
    key: Callable[[ProcessSpec], float],
    explain: Callable[[ProcessSpec, List[str]], str],
) -> ScheduleResult:
    """
    Non-preemptive selection loop shared by SJF and Priority.

    At each decision point the arrived, unfinished process with the smallest
    ``key`` runs to completion. ``sorted`` is stable and ``pending`` keeps the
    caller's order, so ties go to whichever process was listed first.
    """
    pending: List[ProcessSpec] = list(processes)

    result = ScheduleResult(algorithm=algorithm, quantum=None)
    time = 0

    while pending:
        ready = [p for p in pending if p.arrival_time <= time]

        if not ready:
            next_arrival = min(p.arrival_time for p in pending)
            result.steps.append(
                ExecutionStep(
                    time=time,
                    action=CPU_IDLE,
                    pid=None,
                    reason=f"No process in ready queue. CPU idle until time {next_arrival}.",
                )
            )
            time = next_arrival
            continue

        ranked = sorted(ready, key=key)
        chosen = ranked[0]
        ranked_ids = [p.pid for p in ranked]

        done = _run_to_completion(
            result,
            chosen,
            time,
            explain(chosen, ranked_ids),
            [p.pid for p in ranked[1:]],
        )
        pending = [p for p in pending if p is not chosen]
        time = done.completion_time

        result.steps.append(
            ExecutionStep(
                time=time,
                action=_completed_action(chosen.pid),
                pid=chosen.pid,
                reason=_completion_reason(done),
                ready_queue=[p.pid for p in pending if p.arrival_time <= time],
            )
        )

    return finalize_result(result)


def schedule_sjf(processes: Sequence[ProcessSpec], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time. A shorter job that
    arrives while another is running waits for it to finish.
    """

    def explain(p: ProcessSpec, ready_ids: List[str]) -> str:
        return (
            f"{p.pid} selected - has shortest burst time ({p.burst_time}) "
            f"among ready processes: {', '.join(ready_ids)}."
        )

    return _schedule_by_key(processes, "SJF (non-preemptive)", lambda p: p.burst_time, explain)


def _priority_key(p: ProcessSpec) -> float:
    # Treat missing priority as lowest priority.
    return p.priority if p.priority is not None else float("inf")


def schedule_priority(processes: Sequence[ProcessSpec], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Among ready
    processes, choose the one with the smallest priority; break ties
    by input order.
    """

    def explain(p: ProcessSpec, ready_ids: List[str]) -> str:
        label = "none" if p.priority is None else str(p.priority)
        return (
            f"{p.pid} selected - has highest priority (priority {label}, lower number = more urgent) "
            f"among ready processes: {', '.join(ready_ids)}."
        )

    return _schedule_by_key(processes, "Priority (non-preemptive)", _priority_key, explain)


def schedule_rr(processes: Sequence[ProcessSpec], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice is running join the ready queue
    before the preempted process is put back at its tail.
    """
    if quantum is None or quantum <= 0:
        raise ValueError("Round Robin requires a positive quantum (use --quantum)")

    states = [RunState(spec=p, remaining_time=p.burst_time) for p in sorted(processes, key=lambda p: p.arrival_time)]
    ready: Deque[RunState] = deque()

    result = ScheduleResult(algorithm="Round Robin", quantum=quantum)
    time = 0

    def queued_ids() -> List[str]:
        return [s.spec.pid for s in ready]

    def enqueue_new_arrivals(current_time: int, exclude: Optional[RunState] = None) -> None:
        for state in states:
            if (
                state.spec.arrival_time <= current_time
                and state.remaining_time > 0
                and state is not exclude
                and state not in ready
            ):
                ready.append(state)

    enqueue_new_arrivals(time)

    while any(s.remaining_time > 0 for s in states):
        if not ready:
            upcoming = min((s for s in states if s.remaining_time > 0), key=lambda s: s.spec.arrival_time)
            result.steps.append(
                ExecutionStep(
                    time=time,
                    action=CPU_IDLE,
                    pid=None,
                    reason=(
                        f"No process in ready queue. Waiting for {upcoming.spec.pid} "
                        f"at time {upcoming.spec.arrival_time}."
                    ),
                )
            )
            time = upcoming.spec.arrival_time
            enqueue_new_arrivals(time)
            continue

        current = ready.popleft()
        pid = current.spec.pid
        run_time = min(quantum, current.remaining_time)
        if current.start_time is None:
            current.start_time = time

        logger.debug("Round Robin: t=%d dispatch %s for %d (remaining %d)", time, pid, run_time, current.remaining_time)
        result.steps.append(
            ExecutionStep(
                time=time,
                action=_execute_action(pid),
                pid=pid,
                reason=(
                    f"{pid} gets CPU for {run_time} units "
                    f"(Time Quantum: {quantum}, Remaining: {current.remaining_time})."
                ),
                ready_queue=queued_ids(),
            )
        )

        slice_start = time
        time += run_time
        current.remaining_time -= run_time
        result.intervals.append(
            ExecutionInterval(pid=pid, start_time=slice_start, end_time=time, color=current.spec.color)
        )

        # Arrivals during the slice go ahead of the process that just ran.
        enqueue_new_arrivals(time, exclude=current)

        if current.remaining_time > 0:
            result.steps.append(
                ExecutionStep(
                    time=time,
                    action=_preempted_action(pid),
                    pid=pid,
                    reason=(
                        f"Time quantum expired. {pid} moved to end of queue. "
                        f"Remaining burst: {current.remaining_time}"
                    ),
                    ready_queue=queued_ids(),
                )
            )
            ready.append(current)
        else:
            done = ProcessResult.from_spec(current.spec, start_time=current.start_time, completion_time=time)
            result.results.append(done)
            result.steps.append(
                ExecutionStep(
                    time=time,
                    action=_completed_action(pid),
                    pid=pid,
                    reason=_completion_reason(done),
                    ready_queue=queued_ids(),
                )
            )

    return finalize_result(result)


ALGORITHMS = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "rr": schedule_rr,
    "priority": schedule_priority,
}

ALIASES = {
    "round-robin": "rr",
}


def run_algorithm(name: str, processes: Sequence[ProcessSpec], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm. Quantum is only used by round-robin.
    """
    name = name.lower()
    name = ALIASES.get(name, name)
    if name not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    func = ALGORITHMS[name]
    result = func(processes, quantum=quantum)
    logger.info(
        "%s scheduled %d processes: avg waiting %.2f, avg turnaround %.2f",
        result.algorithm,
        len(result.results),
        result.avg_waiting_time,
        result.avg_turnaround_time,
    )
    return result


def compare_algorithms(
    processes: Sequence[ProcessSpec],
    quantum: int = DEFAULT_QUANTUM,
    algorithms: Optional[Sequence[str]] = None,
) -> List[AlgorithmSummary]:
    """
    Run several algorithms on the same workload and summarize their averages.
    """
    summaries: List[AlgorithmSummary] = []
    for key in algorithms or list(ALGORITHMS):
        result = run_algorithm(key, processes, quantum=quantum)
        summary = summarize_process_metrics(result.results)
        name = f"{result.algorithm} (T={quantum})" if result.quantum is not None else result.algorithm
        summaries.append(
            AlgorithmSummary(
                key=ALIASES.get(key.lower(), key.lower()),
                name=name,
                avg_waiting_time=summary["avg_waiting"],
                avg_turnaround_time=summary["avg_turnaround"],
                avg_response_time=summary["avg_response"],
            )
        )
    return summaries


def best_algorithm(summaries: Sequence[AlgorithmSummary]) -> Optional[AlgorithmSummary]:
    """
    Pick the summary with the lowest average waiting time (first wins on ties).
    """
    if not summaries:
        return None
    return min(summaries, key=lambda s: (s.avg_waiting_time, s.avg_turnaround_time))
