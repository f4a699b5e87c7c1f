"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the Simulator.

Implements the Banker's safety check and the resource-request algorithm
built on top of it. Both are pure: the input state is never modified.
"""

import numpy as np
from typing import List, Sequence

from models.errors import ValidationError, ValidationErrorKind
from models.resource_state import (
    ResourceState,
    SafetyResult,
    RequestResult,
    validate_shapes,
    validate_values,
)


def _negative_need_result(allocation: np.ndarray, max_demand: np.ndarray) -> SafetyResult:
    """Build the NegativeNeed result naming the first offending cell."""
    need = max_demand - allocation
    i, j = (int(k) for k in np.argwhere(need < 0)[0])
    return SafetyResult(
        safe=False,
        sequence=[],
        need=[[int(x) for x in row] for row in need],
        error=ValidationError(
            ValidationErrorKind.NEGATIVE_NEED,
            f"Invalid state: Max[P{i}][R{j}] ({max_demand[i][j]}) is less than "
            f"Allocation[P{i}][R{j}] ({allocation[i][j]})"
        )
    )


def check_safety(state: ResourceState) -> SafetyResult:
    """
    Check if a resource state is safe using Banker's Algorithm.

    Algorithm:
    1. Need = Max - Allocation; reject the state if any entry is negative
    2. Initialize Work = Available, Finish = [False] * num_processes
    3. Find the lowest index i where Finish[i] == False and Need[i] <= Work
    4. If found: Finish[i] = True, Work += Allocation[i], append i to the
       sequence and restart the scan from index 0
    5. Stop when a full scan finds no such process; SAFE iff all finished

    Time Complexity: O(P²×R)

    Args:
        state: Resource state to check

    Returns:
        SafetyResult with the verdict and the (possibly partial) sequence

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    if state.has_negative_need():
        return _negative_need_result(state.allocation_matrix, state.max_demand_matrix)

    need = state.need_matrix
    need_rows = [[int(x) for x in row] for row in need]

    # Work = copy of Available (prevents modification of original)
    work = state.available_vector.copy()
    finish = np.zeros(state.num_processes, dtype=bool)
    safe_sequence: List[int] = []

    made_progress = True
    while made_progress:
        made_progress = False

        for i in range(state.num_processes):
            if finish[i]:
                continue

            if np.all(need[i] <= work):
                # Process can finish: add its allocation back to work
                work += state.allocation_matrix[i]
                finish[i] = True
                safe_sequence.append(i)
                made_progress = True
                break  # Restart search from beginning for determinism

    return SafetyResult(
        safe=bool(np.all(finish)),
        sequence=safe_sequence,
        need=need_rows
    )


def check_safety_matrices(
    allocation: Sequence[Sequence[int]],
    max_demand: Sequence[Sequence[int]],
    available: Sequence[int]
) -> SafetyResult:
    """
    Run the safety check on plain nested lists.

    Args:
        allocation: [P][R] resources currently held
        max_demand: [P][R] maximum resources each process may request
        available: [R] free instances

    Returns:
        SafetyResult; a ShapeMismatch error if dimensions are inconsistent,
        a NegativeValue error for negative allocation or available entries,
        and a NegativeNeed error if some Max entry is below Allocation
    """
    error = validate_shapes(allocation, max_demand, available) or validate_values(allocation, available)
    if error:
        return SafetyResult(safe=False, error=error)

    num_resources = len(available)
    allocation_matrix = np.array(allocation, dtype=int).reshape(len(allocation), num_resources)
    max_matrix = np.array(max_demand, dtype=int).reshape(len(max_demand), num_resources)

    # A negative Max is rejected by ResourceState; it always means negative need
    if np.any(max_matrix < 0):
        return _negative_need_result(allocation_matrix, max_matrix)

    return check_safety(ResourceState.from_lists(allocation, max_demand, available))


def check_request(
    state: ResourceState,
    pid: int,
    request: Sequence[int]
) -> RequestResult:
    """
    Decide whether a resource request can be granted immediately.

    Steps:
    1. Validate: request <= need (otherwise error)
    2. Check: request <= available (if not, the process must wait)
    3. Tentatively allocate on a copy of the state
    4. Run the safety algorithm on the tentative state
    5. Grant if safe, otherwise deny and leave the state unchanged

    Args:
        state: Current resource state (not modified)
        pid: Index of the requesting process
        request: [R] instances requested per resource type

    Returns:
        RequestResult with the decision and, if granted, the new state
    """
    if pid < 0 or pid >= state.num_processes:
        return RequestResult(
            granted=False,
            reason=f"Unknown process P{pid}",
            error=ValidationError(
                ValidationErrorKind.INVALID_REQUEST,
                f"Process index {pid} out of range 0..{state.num_processes - 1}"
            )
        )

    if len(request) != state.num_resources:
        return RequestResult(
            granted=False,
            reason="Request length does not match resource count",
            error=ValidationError(
                ValidationErrorKind.INVALID_REQUEST,
                f"Request has {len(request)} entries, expected {state.num_resources}"
            )
        )

    request_vector = np.array(request, dtype=int)

    if np.any(request_vector < 0):
        return RequestResult(
            granted=False,
            reason=f"Invalid request amounts: {list(request)}",
            error=ValidationError(
                ValidationErrorKind.INVALID_REQUEST,
                "Request amounts cannot be negative"
            )
        )

    # Step 1: Validate request doesn't exceed need
    need = state.need_matrix[pid]
    if np.any(request_vector > need):
        return RequestResult(
            granted=False,
            reason=f"Request exceeds need (requested: {list(request)}, need: {[int(x) for x in need]})",
            error=ValidationError(
                ValidationErrorKind.REQUEST_EXCEEDS_NEED,
                f"P{pid} requested more than its declared maximum"
            )
        )

    # Step 2: Check if resources are available
    if np.any(request_vector > state.available_vector):
        available = [int(x) for x in state.available_vector]
        return RequestResult(
            granted=False,
            reason=f"Insufficient resources (requested: {list(request)}, available: {available}) - P{pid} must wait"
        )

    # Step 3: Tentatively allocate resources on a copy
    tentative = state.copy()
    tentative.allocation_matrix[pid] += request_vector
    tentative.available_vector -= request_vector

    # Step 4: Run safety algorithm
    safety = check_safety(tentative)

    # Step 5: Decide
    if safety.safe:
        return RequestResult(
            granted=True,
            reason=f"Safe state maintained, sequence: {safety.sequence_str()}",
            safety=safety,
            new_state=tentative
        )

    return RequestResult(
        granted=False,
        reason=f"Unsafe state detected - P{pid} must wait",
        safety=safety
    )
