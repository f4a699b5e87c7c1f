"""
Metrics for the OS Concepts Simulator.

Derives summary metrics from simulation results and formats them as
plain-text reports.
"""

from dataclasses import dataclass
from typing import Optional
import statistics

from models.paging import PagingResult
from models.process import SchedulingResult
from models.resource_state import ResourceState, SafetyResult


@dataclass
class SchedulingMetrics:
    """
    Metrics for a single scheduling run.

    Tracks:
    1. Average Waiting / Turnaround / Response Time per process
    2. Makespan: time from 0 to the last completion
    3. CPU Utilization %: busy time / makespan × 100
    4. Throughput: completed processes / makespan
    """
    total_processes: int = 0
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    avg_response_time: float = 0.0
    makespan: int = 0
    busy_time: int = 0

    @classmethod
    def from_result(cls, result: SchedulingResult) -> "SchedulingMetrics":
        """Build metrics from a scheduling result (empty for errors)."""
        if not result.ok or not result.per_process:
            return cls()

        return cls(
            total_processes=len(result.per_process),
            avg_waiting_time=result.avg_waiting,
            avg_turnaround_time=result.avg_turnaround,
            avg_response_time=float(statistics.mean(r.response_time for r in result.per_process)),
            makespan=max(r.completion_time for r in result.per_process),
            busy_time=sum(entry.duration for entry in result.gantt)
        )

    @property
    def idle_time(self) -> int:
        return self.makespan - self.busy_time

    def get_cpu_utilization(self) -> float:
        """Calculate CPU utilization percentage."""
        if self.makespan == 0:
            return 0.0
        return (self.busy_time / self.makespan) * 100

    def get_throughput(self) -> float:
        """Calculate throughput (processes completed per time unit)."""
        if self.makespan == 0:
            return 0.0
        return self.total_processes / self.makespan


@dataclass
class PagingMetrics:
    """Hit and fault statistics for a single page replacement run."""
    references: int = 0
    faults: int = 0

    @classmethod
    def from_result(cls, result: PagingResult) -> "PagingMetrics":
        return cls(references=len(result.steps), faults=result.total_faults)

    @property
    def hits(self) -> int:
        return self.references - self.faults

    def get_hit_rate(self) -> float:
        if self.references == 0:
            return 0.0
        return self.hits / self.references

    def get_fault_rate(self) -> float:
        if self.references == 0:
            return 0.0
        return self.faults / self.references


def format_safety_report(state: Optional[ResourceState], result: SafetyResult) -> str:
    """
    Format a Banker's Algorithm result for display.

    Args:
        state: Checked state (matrices are shown when given)
        result: Safety check result

    Returns:
        Formatted report string
    """
    lines = []
    lines.append("\n" + "="*60)
    lines.append("BANKER'S ALGORITHM RESULTS")
    lines.append("="*60)

    if result.error:
        lines.append(f"[ERROR] {result.error}")
        lines.append("="*60)
        return "\n".join(lines)

    if state is not None:
        lines.append(state.display())

    if result.safe:
        lines.append("System is in SAFE state. Safe sequence found.")
        if result.sequence:
            lines.append(f"Safe Sequence: {result.sequence_str()}")
        lines.append("")
        lines.append("All processes can be completed in the order shown above without")
        lines.append("causing a deadlock.")
    else:
        lines.append("System is in UNSAFE state. Deadlock may occur.")
        if result.sequence:
            lines.append(f"Processes able to finish before stalling: {result.sequence_str()}")
        lines.append("")
        lines.append("Suggestions:")
        lines.append("  - Increase available resources")
        lines.append("  - Reduce maximum resource requirements")
        lines.append("  - Wait for some processes to release resources")

    lines.append("="*60)
    return "\n".join(lines)


def format_paging_report(result: PagingResult, num_frames: int, verbose: bool = False) -> str:
    """
    Format one page replacement trace as a table.

    Args:
        result: Paging result
        num_frames: Number of frames (table width)
        verbose: If True, include the action column
    """
    lines = []
    lines.append("\n" + "="*60)
    lines.append(f"{result.strategy.value} PAGE REPLACEMENT")
    lines.append("="*60)

    if result.error:
        lines.append(f"[ERROR] {result.error}")
        lines.append("="*60)
        return "\n".join(lines)

    header = f"{'Step':>4} {'Page':>4}  " + " ".join(f"F{k + 1:<3}" for k in range(num_frames))
    header += "  Fault"
    if verbose:
        header += "  Action"
    lines.append(header)
    lines.append("-" * 60)

    for step in result.steps:
        cells = [f"{page:<4}" for page in step.frames]
        cells += ["-   "] * (num_frames - len(step.frames))
        row = f"{step.step:>4} {step.page:>4}  " + " ".join(cells)
        row += "  " + ("  F  " if step.fault else "     ")
        if verbose:
            row += f"  {step.action}"
        lines.append(row.rstrip())

    metrics = PagingMetrics.from_result(result)
    lines.append("-" * 60)
    lines.append(f"Page Faults: {metrics.faults}   Hits: {metrics.hits}")
    lines.append(f"Fault Rate: {metrics.get_fault_rate():.2%}   Hit Rate: {metrics.get_hit_rate():.2%}")
    lines.append("="*60)
    return "\n".join(lines)


def format_scheduling_report(result: SchedulingResult, verbose: bool = False) -> str:
    """
    Format a scheduling result: Gantt chart, per-process table, averages.

    Args:
        result: Scheduling result
        verbose: If True, include utilization and throughput
    """
    lines = []
    lines.append("\n" + "="*60)
    lines.append(f"{result.policy.value.upper()} SCHEDULING")
    lines.append("="*60)

    if result.error:
        lines.append(f"[ERROR] {result.error}")
        lines.append("="*60)
        return "\n".join(lines)

    if not result.per_process:
        lines.append("No processes to schedule.")
        lines.append("="*60)
        return "\n".join(lines)

    lines.append("Gantt Chart:")
    lines.append("  " + " | ".join(f"P{e.pid} [{e.start}-{e.end}]" for e in result.gantt))
    lines.append("")

    lines.append(
        f"{'PID':>4} {'Arr':>4} {'Burst':>5} {'Prio':>4} {'Start':>5} "
        f"{'Done':>5} {'TAT':>4} {'Wait':>4}"
    )
    lines.append("-" * 60)
    for r in result.per_process:
        priority = "-" if r.priority is None else str(r.priority)
        lines.append(
            f"{'P' + str(r.pid):>4} {r.arrival_time:>4} {r.burst_time:>5} {priority:>4} "
            f"{r.start_time:>5} {r.completion_time:>5} {r.turnaround_time:>4} {r.waiting_time:>4}"
        )
    lines.append("-" * 60)
    lines.append(f"Average Waiting Time: {result.avg_waiting:.2f}")
    lines.append(f"Average Turnaround Time: {result.avg_turnaround:.2f}")

    if verbose:
        metrics = SchedulingMetrics.from_result(result)
        lines.append(f"Average Response Time: {metrics.avg_response_time:.2f}")
        lines.append(f"CPU Utilization: {metrics.get_cpu_utilization():.2f}% (idle {metrics.idle_time} units)")
        lines.append(f"Throughput: {metrics.get_throughput():.4f} processes/unit")

    lines.append("="*60)
    return "\n".join(lines)
