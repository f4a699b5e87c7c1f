"""
Resource State model for the OS Concepts Simulator.

Holds the matrices and vectors required by Banker's Algorithm.
"""

import numpy as np
from typing import List, Optional, Sequence
from dataclasses import dataclass, field

from models.errors import ValidationError, ValidationErrorKind


MAX_RESOURCES = 10


def validate_shapes(
    allocation: Sequence[Sequence[int]],
    max_demand: Sequence[Sequence[int]],
    available: Sequence[int]
) -> Optional[ValidationError]:
    """
    Check that allocation and max are P x R and available has length R.

    Returns:
        None if consistent, otherwise a ShapeMismatch error
    """
    num_resources = len(available)

    if len(allocation) != len(max_demand):
        return ValidationError(
            ValidationErrorKind.SHAPE_MISMATCH,
            f"Allocation has {len(allocation)} rows but Max has {len(max_demand)}"
        )

    for i, (alloc_row, max_row) in enumerate(zip(allocation, max_demand)):
        if len(alloc_row) != num_resources:
            return ValidationError(
                ValidationErrorKind.SHAPE_MISMATCH,
                f"Allocation row P{i} has {len(alloc_row)} entries, expected {num_resources}"
            )
        if len(max_row) != num_resources:
            return ValidationError(
                ValidationErrorKind.SHAPE_MISMATCH,
                f"Max row P{i} has {len(max_row)} entries, expected {num_resources}"
            )

    return None


def validate_values(
    allocation: Sequence[Sequence[int]],
    available: Sequence[int]
) -> Optional[ValidationError]:
    """
    Check that allocation and available hold no negative entries.

    Negative Max entries are not checked here; they surface as a
    negative need.

    Returns:
        None if all entries are >= 0, otherwise a NegativeValue error
    """
    for i, row in enumerate(allocation):
        for j, value in enumerate(row):
            if value < 0:
                return ValidationError(
                    ValidationErrorKind.NEGATIVE_VALUE,
                    f"Allocation[P{i}][R{j}] cannot be negative (got {value})"
                )

    for j, value in enumerate(available):
        if value < 0:
            return ValidationError(
                ValidationErrorKind.NEGATIVE_VALUE,
                f"Available[R{j}] cannot be negative (got {value})"
            )

    return None


@dataclass(eq=False)
class ResourceState:
    """
    Resource allocation state for a Banker's Algorithm check.

    Built fresh for every computation and never mutated by the algorithms;
    use copy() before changing it.

    Attributes:
        allocation_matrix: [P][R] Resources currently held by each process
        max_demand_matrix: [P][R] Maximum resources each process may request
        available_vector: [R] Free resource instances by type
        need_matrix: [P][R] Computed as Max - Allocation
    """
    allocation_matrix: np.ndarray
    max_demand_matrix: np.ndarray
    available_vector: np.ndarray
    _need_matrix: Optional[np.ndarray] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        """Coerce inputs to integer arrays and validate them."""
        num_resources = len(self.available_vector)
        num_processes = len(self.allocation_matrix)

        self.available_vector = np.array(self.available_vector, dtype=int).reshape(num_resources)
        self.allocation_matrix = np.array(self.allocation_matrix, dtype=int).reshape(
            num_processes, num_resources
        )
        self.max_demand_matrix = np.array(self.max_demand_matrix, dtype=int).reshape(
            len(self.max_demand_matrix), num_resources
        )

        if self.max_demand_matrix.shape != self.allocation_matrix.shape:
            raise ValueError(
                f"Max shape {self.max_demand_matrix.shape} does not match "
                f"Allocation shape {self.allocation_matrix.shape}"
            )
        if np.any(self.allocation_matrix < 0):
            raise ValueError("Allocation matrix cannot contain negative values")
        if np.any(self.max_demand_matrix < 0):
            raise ValueError("Max matrix cannot contain negative values")
        if np.any(self.available_vector < 0):
            raise ValueError("Available vector cannot contain negative values")

    @classmethod
    def from_lists(
        cls,
        allocation: Sequence[Sequence[int]],
        max_demand: Sequence[Sequence[int]],
        available: Sequence[int]
    ) -> "ResourceState":
        """
        Build a state from plain nested lists.

        Raises:
            ValueError: If shapes are inconsistent or values negative
        """
        error = validate_shapes(allocation, max_demand, available)
        if error:
            raise ValueError(error.message)
        return cls(
            allocation_matrix=[list(row) for row in allocation],
            max_demand_matrix=[list(row) for row in max_demand],
            available_vector=list(available)
        )

    @property
    def num_processes(self) -> int:
        """Number of processes in the state."""
        return self.allocation_matrix.shape[0]

    @property
    def num_resources(self) -> int:
        """Number of resource types in the state."""
        return self.available_vector.shape[0]

    @property
    def need_matrix(self) -> np.ndarray:
        """
        Get need matrix [P][R].
        Computed as: Need = Max - Allocation
        May contain negative entries for an invalid state.
        """
        if self._need_matrix is None:
            self._need_matrix = self.max_demand_matrix - self.allocation_matrix
        return self._need_matrix

    def has_negative_need(self) -> bool:
        """True if some process holds more than its declared maximum."""
        return bool(np.any(self.need_matrix < 0))

    def total_instances(self) -> np.ndarray:
        """Total instances per resource type (allocated + available)."""
        return self.allocation_matrix.sum(axis=0) + self.available_vector

    def __eq__(self, other) -> bool:
        if not isinstance(other, ResourceState):
            return NotImplemented
        return (
            np.array_equal(self.allocation_matrix, other.allocation_matrix)
            and np.array_equal(self.max_demand_matrix, other.max_demand_matrix)
            and np.array_equal(self.available_vector, other.available_vector)
        )

    def copy(self) -> "ResourceState":
        """Return an independent copy of this state."""
        return ResourceState(
            allocation_matrix=self.allocation_matrix.copy(),
            max_demand_matrix=self.max_demand_matrix.copy(),
            available_vector=self.available_vector.copy()
        )

    def display(self) -> str:
        """
        Generate readable string representation of the resource state.

        Returns:
            Formatted string showing all matrices and vectors
        """
        output = []
        output.append("\n" + "="*60)
        output.append("RESOURCE STATE")
        output.append("="*60)

        header = "     " + " ".join([f"R{j:<2}" for j in range(self.num_resources)])

        for title, matrix in (
            ("Allocation Matrix:", self.allocation_matrix),
            ("Max Matrix:", self.max_demand_matrix),
            ("Need Matrix (Max - Allocation):", self.need_matrix),
        ):
            output.append(f"\n{title}")
            output.append(header)
            for i in range(self.num_processes):
                row = f"  P{i}: "
                row += " ".join([f"{matrix[i][j]:3}" for j in range(self.num_resources)])
                output.append(row)

        output.append("\nAvailable Resources:")
        output.append(
            "  [" + ", ".join(
                f"R{j}:{self.available_vector[j]:2}" for j in range(self.num_resources)
            ) + "]"
        )

        output.append("\n" + "="*60)
        return "\n".join(output)


@dataclass(frozen=True)
class SafetyResult:
    """
    Output of the Banker's safety check.

    Attributes:
        safe: True if every process can finish
        sequence: Process indices in the order they were found to finish
            (complete safe sequence if safe, partial otherwise)
        need: Need matrix as plain lists
        error: Validation error, if the state was rejected before searching
    """
    safe: bool
    sequence: List[int] = field(default_factory=list)
    need: List[List[int]] = field(default_factory=list)
    error: Optional[ValidationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def sequence_str(self) -> str:
        """Format the sequence as 'P1 -> P3 -> ...'."""
        return " -> ".join(f"P{i}" for i in self.sequence)


@dataclass(frozen=True)
class RequestResult:
    """
    Output of the Banker's resource-request check.

    Attributes:
        granted: True if the request can be granted safely right now
        reason: Human-readable explanation of the decision
        safety: Safety check of the tentative state (None if never reached)
        new_state: State after the grant (None unless granted)
        error: Validation error for malformed requests
    """
    granted: bool
    reason: str
    safety: Optional[SafetyResult] = None
    new_state: Optional[ResourceState] = None
    error: Optional[ValidationError] = None
