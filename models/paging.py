"""
Paging model for the OS Concepts Simulator.

Step records and results produced by the page replacement strategies.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from models.errors import ValidationError


MAX_FRAMES = 10


class PagingStrategy(Enum):
    """Page replacement strategies."""
    FIFO = "FIFO"
    LRU = "LRU"
    OPTIMAL = "Optimal"


@dataclass(frozen=True)
class StepRecord:
    """
    One memory reference in a page replacement trace.

    Attributes:
        step: 1-based position in the reference string
        page: Page requested
        frames: Frame contents after the step, in slot order
        fault: True if the page was not resident
        action: Human-readable description of what happened
        evicted: Page removed from memory (replacement faults only)
        slot: Frame slot written (faults only)
    """
    step: int
    page: int
    frames: Tuple[int, ...]
    fault: bool
    action: str
    evicted: Optional[int] = None
    slot: Optional[int] = None


@dataclass(frozen=True)
class PagingResult:
    """
    Output of one strategy over a reference string.

    Attributes:
        strategy: Strategy that produced the trace
        steps: One record per reference
        total_faults: Number of page faults
        fault_rate: total_faults / len(reference_string), 0.0 when empty
        error: Validation error, if the input was rejected
    """
    strategy: PagingStrategy
    steps: List[StepRecord] = field(default_factory=list)
    total_faults: int = 0
    fault_rate: float = 0.0
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def total_hits(self) -> int:
        return len(self.steps) - self.total_faults
