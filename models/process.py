"""
Process model for the OS Concepts Simulator.

Represents process descriptors fed to the CPU scheduler and the timing
results it produces.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from models.errors import ValidationError, ValidationErrorKind


MAX_PROCESSES = 10


class SchedulingPolicy(Enum):
    """CPU scheduling policies supported by the simulator."""
    FCFS = "FCFS"
    SJF = "SJF"
    PRIORITY = "Priority"
    ROUND_ROBIN = "Round Robin"


@dataclass(frozen=True)
class Process:
    """
    Represents a process submitted to the scheduler.

    Attributes:
        pid: Process identifier (unique within a process table)
        arrival_time: Time unit at which the process becomes ready
        burst_time: CPU time required to complete
        priority: Priority level (lower value = higher priority), only
            meaningful under the Priority policy
    """
    pid: int
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None

    def __post_init__(self):
        """Validate descriptor values."""
        if self.pid < 0:
            raise ValueError(f"P{self.pid}: pid cannot be negative")
        if self.arrival_time < 0:
            raise ValueError(f"P{self.pid}: arrival_time cannot be negative")
        if self.burst_time < 1:
            raise ValueError(f"P{self.pid}: burst_time must be at least 1")
        if self.priority is not None and self.priority < 0:
            raise ValueError(f"P{self.pid}: priority cannot be negative")


@dataclass
class ProcessTable:
    """
    Ordered collection of processes with unique pids.

    Insertion order is kept for display; scheduling order is decided by
    the policy.
    """
    processes: List[Process] = field(default_factory=list)

    def add(self, process: Process) -> Optional[ValidationError]:
        """
        Add a process to the table.

        Args:
            process: Process to add

        Returns:
            None if added, otherwise a DuplicateProcessId error
        """
        if any(p.pid == process.pid for p in self.processes):
            return ValidationError(
                ValidationErrorKind.DUPLICATE_PROCESS_ID,
                f"Process ID P{process.pid} already exists"
            )
        self.processes.append(process)
        return None

    def remove(self, pid: int) -> bool:
        """Remove the process with the given pid. Returns True if removed."""
        for i, process in enumerate(self.processes):
            if process.pid == pid:
                del self.processes[i]
                return True
        return False

    def clear(self) -> None:
        """Remove all processes."""
        self.processes = []

    def __len__(self) -> int:
        return len(self.processes)

    def __iter__(self):
        return iter(self.processes)


@dataclass(frozen=True)
class GanttEntry:
    """A contiguous interval during which one process held the CPU."""
    pid: int
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ProcessResult:
    """
    Timing results for a single process.

    Attributes:
        start_time: First time the process was dispatched
        completion_time: Time the process finished
        turnaround_time: completion_time - arrival_time
        waiting_time: turnaround_time - burst_time
    """
    pid: int
    arrival_time: int
    burst_time: int
    priority: Optional[int]
    start_time: int
    completion_time: int
    turnaround_time: int
    waiting_time: int

    @property
    def response_time(self) -> int:
        """Delay between arrival and first dispatch."""
        return self.start_time - self.arrival_time


@dataclass(frozen=True)
class SchedulingResult:
    """
    Output of one scheduling run.

    Attributes:
        policy: Policy that produced this result
        gantt: Execution intervals in time order
        per_process: Per-process metrics, in the caller's input order
        avg_waiting: Mean waiting time (0.0 for an empty set)
        avg_turnaround: Mean turnaround time (0.0 for an empty set)
        error: Validation error, if the input was rejected
    """
    policy: SchedulingPolicy
    gantt: List[GanttEntry] = field(default_factory=list)
    per_process: List[ProcessResult] = field(default_factory=list)
    avg_waiting: float = 0.0
    avg_turnaround: float = 0.0
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def result_for(self, pid: int) -> Optional[ProcessResult]:
        """Look up the result row for a pid."""
        return next((r for r in self.per_process if r.pid == pid), None)
