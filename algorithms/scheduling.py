"""
CPU Scheduling Algorithms for the Simulator.

Implements FCFS, non-preemptive SJF, non-preemptive Priority and Round
Robin over a discrete time axis.
"""

import statistics
from collections import deque
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from models.errors import ValidationError, ValidationErrorKind
from models.process import (
    GanttEntry,
    Process,
    ProcessResult,
    SchedulingPolicy,
    SchedulingResult,
)


Timeline = Tuple[List[GanttEntry], Dict[int, ProcessResult]]


def _finish(process: Process, start_time: int, completion_time: int) -> ProcessResult:
    turnaround = completion_time - process.arrival_time
    return ProcessResult(
        pid=process.pid,
        arrival_time=process.arrival_time,
        burst_time=process.burst_time,
        priority=process.priority,
        start_time=start_time,
        completion_time=completion_time,
        turnaround_time=turnaround,
        waiting_time=turnaround - process.burst_time
    )


def fcfs_scheduling(processes: Sequence[Process]) -> Timeline:
    """
    FCFS (First Come First Served).

    Processes run to completion in arrival order; equal arrivals keep
    their input order.
    """
    gantt: List[GanttEntry] = []
    results: Dict[int, ProcessResult] = {}
    current_time = 0

    for process in sorted(processes, key=lambda p: p.arrival_time):
        start_time = max(current_time, process.arrival_time)
        completion_time = start_time + process.burst_time
        gantt.append(GanttEntry(process.pid, start_time, completion_time))
        results[process.pid] = _finish(process, start_time, completion_time)
        current_time = completion_time

    return gantt, results


def _non_preemptive(
    processes: Sequence[Process],
    selection_key: Callable[[Process], Tuple[int, int]]
) -> Timeline:
    """
    Shared loop for SJF and Priority.

    At each decision point pick the ready process with the smallest key;
    if nothing has arrived yet, idle for one time unit.
    """
    gantt: List[GanttEntry] = []
    results: Dict[int, ProcessResult] = {}
    pending = list(processes)
    current_time = 0

    while pending:
        ready = [p for p in pending if p.arrival_time <= current_time]
        if not ready:
            current_time += 1
            continue

        # min() returns the first of equal keys, so input order breaks ties
        process = min(ready, key=selection_key)
        completion_time = current_time + process.burst_time
        gantt.append(GanttEntry(process.pid, current_time, completion_time))
        results[process.pid] = _finish(process, current_time, completion_time)
        pending.remove(process)
        current_time = completion_time

    return gantt, results


def sjf_scheduling(processes: Sequence[Process]) -> Timeline:
    """SJF (Shortest Job First), non-preemptive. Ties by earliest arrival."""
    return _non_preemptive(processes, lambda p: (p.burst_time, p.arrival_time))


def priority_scheduling(processes: Sequence[Process]) -> Timeline:
    """
    Priority scheduling, non-preemptive.

    Lower numeric priority runs first; ties by earliest arrival. Every
    process must carry an explicit priority.
    """
    return _non_preemptive(processes, lambda p: (p.priority, p.arrival_time))


def round_robin_scheduling(processes: Sequence[Process], time_quantum: int) -> Timeline:
    """
    Round Robin with a fixed time quantum.

    After each slice, processes that arrived up to the end of the slice
    join the ready queue ahead of the process that just yielded.
    """
    gantt: List[GanttEntry] = []
    results: Dict[int, ProcessResult] = {}

    arrivals = deque(sorted(processes, key=lambda p: p.arrival_time))
    remaining = {p.pid: p.burst_time for p in processes}
    start_times: Dict[int, int] = {}
    ready_queue: deque = deque()
    current_time = 0

    def admit_arrivals() -> None:
        while arrivals and arrivals[0].arrival_time <= current_time:
            ready_queue.append(arrivals.popleft())

    admit_arrivals()

    while ready_queue or arrivals:
        if not ready_queue:
            # CPU idle until the next arrival
            current_time = arrivals[0].arrival_time
            admit_arrivals()
            continue

        process = ready_queue.popleft()
        if process.pid not in start_times:
            start_times[process.pid] = current_time

        run_time = min(time_quantum, remaining[process.pid])
        gantt.append(GanttEntry(process.pid, current_time, current_time + run_time))
        current_time += run_time
        remaining[process.pid] -= run_time

        admit_arrivals()

        if remaining[process.pid] > 0:
            ready_queue.append(process)
        else:
            results[process.pid] = _finish(process, start_times[process.pid], current_time)

    return gantt, results


def _validate(
    processes: Sequence[Process],
    policy: SchedulingPolicy,
    time_quantum: Optional[int]
) -> Optional[ValidationError]:
    seen = set()
    for process in processes:
        if process.pid in seen:
            return ValidationError(
                ValidationErrorKind.DUPLICATE_PROCESS_ID,
                f"Process ID P{process.pid} appears more than once"
            )
        seen.add(process.pid)

    if policy == SchedulingPolicy.ROUND_ROBIN and (time_quantum is None or time_quantum < 1):
        return ValidationError(
            ValidationErrorKind.INVALID_TIME_QUANTUM,
            f"Time quantum must be at least 1 (got {time_quantum})"
        )

    if policy == SchedulingPolicy.PRIORITY:
        missing = [p.pid for p in processes if p.priority is None]
        if missing:
            pids = ", ".join(f"P{pid}" for pid in missing)
            return ValidationError(
                ValidationErrorKind.MISSING_PRIORITY,
                f"Priority scheduling requires a priority for every process (missing: {pids})"
            )

    return None


def simulate_scheduling(
    processes: Sequence[Process],
    policy: SchedulingPolicy,
    time_quantum: Optional[int] = None
) -> SchedulingResult:
    """
    Run one scheduling policy over a set of processes.

    Args:
        processes: Process descriptors (order only matters for ties)
        policy: Scheduling policy
        time_quantum: Slice length, required for Round Robin

    Returns:
        SchedulingResult with Gantt intervals, per-process metrics in input
        order and averages. Bad input yields a result carrying the error.
    """
    error = _validate(processes, policy, time_quantum)
    if error:
        return SchedulingResult(policy=policy, error=error)

    if not processes:
        return SchedulingResult(policy=policy)

    if policy == SchedulingPolicy.FCFS:
        gantt, results = fcfs_scheduling(processes)
    elif policy == SchedulingPolicy.SJF:
        gantt, results = sjf_scheduling(processes)
    elif policy == SchedulingPolicy.PRIORITY:
        gantt, results = priority_scheduling(processes)
    else:
        gantt, results = round_robin_scheduling(processes, time_quantum)

    per_process = [results[p.pid] for p in processes]

    return SchedulingResult(
        policy=policy,
        gantt=gantt,
        per_process=per_process,
        avg_waiting=float(statistics.mean(r.waiting_time for r in per_process)),
        avg_turnaround=float(statistics.mean(r.turnaround_time for r in per_process))
    )
