"""
Banker's Algorithm Tests

Tests the safety check, its scan-order tie-breaks, validation errors and
the resource-request algorithm.
"""

import sys
import random
from itertools import permutations
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.avoidance import check_request, check_safety, check_safety_matrices
from models.errors import ValidationErrorKind
from models.resource_state import ResourceState


CLASSIC_ALLOCATION = [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]]
CLASSIC_MAX = [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]]
CLASSIC_AVAILABLE = [3, 3, 2]


def classic_state() -> ResourceState:
    return ResourceState.from_lists(CLASSIC_ALLOCATION, CLASSIC_MAX, CLASSIC_AVAILABLE)


def test_classic_safe_sequence():
    """Classic 5x3 example is safe; index-ascending restart scan fixes the order."""
    print("\n" + "="*60)
    print("TEST: Classic Safe State")
    print("="*60)

    result = check_safety(classic_state())
    print(f"  Safe: {result.safe}, sequence: {result.sequence_str()}")

    assert result.ok, f"Unexpected error: {result.error}"
    assert result.safe, "Classic example should be safe"
    assert result.sequence == [1, 3, 0, 2, 4], f"Unexpected sequence {result.sequence}"
    assert result.need == [[7, 4, 3], [1, 2, 2], [6, 0, 0], [0, 1, 1], [4, 3, 1]]
    print("  ✓ Safe sequence P1 -> P3 -> P0 -> P2 -> P4")


def test_scan_restarts_from_first_process():
    """After each finish the scan restarts at P0 instead of continuing."""
    result = check_safety_matrices(
        allocation=[[0], [0], [2], [0]],
        max_demand=[[3], [3], [3], [1]],
        available=[1]
    )
    # Continuing the scan after P2 would give [2, 3, 0, 1]
    assert result.safe
    assert result.sequence == [2, 0, 1, 3], f"Scan order not preserved: {result.sequence}"


def test_lowest_index_wins_ties():
    result = check_safety_matrices([[1], [1]], [[2], [2]], [1])
    assert result.sequence == [0, 1]


def test_unsafe_state_reports_partial_sequence():
    result = check_safety_matrices(CLASSIC_ALLOCATION, CLASSIC_MAX, [0, 1, 1])
    print(f"\n  Unsafe partial sequence: {result.sequence}")
    assert result.ok
    assert not result.safe, "State should be unsafe"
    assert result.sequence == [3, 1], f"Unexpected partial sequence {result.sequence}"


def test_negative_need_is_validation_error():
    """Max < Allocation is an input error, distinct from unsafe."""
    result = check_safety_matrices([[1, 0], [3, 1]], [[2, 2], [2, 2]], [1, 1])
    assert result.error is not None, "Negative need should be rejected"
    assert result.error.kind == ValidationErrorKind.NEGATIVE_NEED
    assert not result.safe
    assert result.sequence == []
    assert result.need == [[1, 2], [-1, 1]]
    assert "P1" in result.error.message and "R0" in result.error.message


def test_shape_mismatch_is_validation_error():
    result = check_safety_matrices([[1, 0]], [[2, 2, 2]], [1, 1])
    assert result.error is not None
    assert result.error.kind == ValidationErrorKind.SHAPE_MISMATCH

    result = check_safety_matrices([[1, 0], [0, 0]], [[2, 2]], [1, 1])
    assert result.error.kind == ValidationErrorKind.SHAPE_MISMATCH


def test_negative_entries_are_validation_errors():
    """Negative inputs come back as typed errors, not exceptions."""
    result = check_safety_matrices([[-1]], [[0]], [0])
    assert result.error is not None
    assert result.error.kind == ValidationErrorKind.NEGATIVE_VALUE
    assert "Allocation[P0][R0]" in result.error.message

    result = check_safety_matrices([[0, 1]], [[1, 1]], [2, -3])
    assert result.error.kind == ValidationErrorKind.NEGATIVE_VALUE
    assert "Available[R1]" in result.error.message

    # Max below zero is always below Allocation
    result = check_safety_matrices([[0, 1], [0, 0]], [[1, 1], [0, -2]], [1, 1])
    assert result.error.kind == ValidationErrorKind.NEGATIVE_NEED
    assert result.need == [[1, 0], [0, -2]]
    assert "Max[P1][R1]" in result.error.message
    assert not result.safe and result.sequence == []


def test_no_processes_is_trivially_safe():
    result = check_safety_matrices([], [], [1, 2])
    assert result.ok
    assert result.safe
    assert result.sequence == []
    assert result.need == []


def test_negative_values_rejected_by_model():
    try:
        ResourceState.from_lists([[-1]], [[2]], [1])
        assert False, "Negative allocation should raise ValueError"
    except ValueError as e:
        print(f"  ✓ Correctly rejected: {e}")


def _brute_force_safe(allocation, max_demand, available) -> bool:
    """A state is safe iff some ordering lets every process finish."""
    num_processes = len(allocation)
    need = [[m - a for m, a in zip(mr, ar)] for mr, ar in zip(max_demand, allocation)]
    for order in permutations(range(num_processes)):
        work = list(available)
        for i in order:
            if any(n > w for n, w in zip(need[i], work)):
                break
            work = [w + a for w, a in zip(work, allocation[i])]
        else:
            return True
    return num_processes == 0


def test_verdict_matches_brute_force():
    """Greedy scan verdict agrees with exhaustive search on random states."""
    rng = random.Random(323)
    checked = 0

    for _ in range(300):
        num_processes = rng.randint(1, 4)
        num_resources = rng.randint(1, 3)
        allocation = [[rng.randint(0, 3) for _ in range(num_resources)] for _ in range(num_processes)]
        max_demand = [[a + rng.randint(0, 4) for a in row] for row in allocation]
        available = [rng.randint(0, 4) for _ in range(num_resources)]

        result = check_safety_matrices(allocation, max_demand, available)
        expected = _brute_force_safe(allocation, max_demand, available)
        assert result.safe == expected, (
            f"Mismatch for alloc={allocation}, max={max_demand}, avail={available}"
        )
        if result.safe:
            assert sorted(result.sequence) == list(range(num_processes))
        checked += 1

    print(f"\n  ✓ {checked} random states agree with brute force")


def test_safety_check_is_pure_and_deterministic():
    state = classic_state()
    before = state.copy()

    first = check_safety(state)
    second = check_safety(state)

    assert first == second, "Repeated runs must be identical"
    assert state == before, "Input state must not be modified"


def test_request_sequence_on_classic_example():
    """P1 [1,0,2] granted; then P4 [3,3,0] must wait; then P0 [0,2,0] unsafe."""
    print("\n" + "="*60)
    print("TEST: Resource-Request Algorithm")
    print("="*60)

    state = classic_state()

    result = check_request(state, 1, [1, 0, 2])
    print(f"  P1 [1,0,2]: granted={result.granted} ({result.reason})")
    assert result.granted
    assert result.error is None
    assert result.safety.sequence == [1, 3, 0, 2, 4]
    assert list(result.new_state.available_vector) == [2, 3, 0]
    assert list(result.new_state.allocation_matrix[1]) == [3, 0, 2]
    assert list(state.available_vector) == [3, 3, 2], "Original state must be untouched"
    assert list(result.new_state.total_instances()) == list(state.total_instances())

    state = result.new_state

    result = check_request(state, 4, [3, 3, 0])
    print(f"  P4 [3,3,0]: granted={result.granted} ({result.reason})")
    assert not result.granted
    assert result.error is None
    assert result.safety is None, "Safety check should not run when resources are unavailable"
    assert "Insufficient" in result.reason

    result = check_request(state, 0, [0, 2, 0])
    print(f"  P0 [0,2,0]: granted={result.granted} ({result.reason})")
    assert not result.granted
    assert result.safety is not None and not result.safety.safe
    assert result.new_state is None
    print("  ✓ Request decisions match the textbook walk-through")


def test_request_validation_errors():
    state = classic_state()

    result = check_request(state, 3, [1, 0, 0])
    assert result.error.kind == ValidationErrorKind.REQUEST_EXCEEDS_NEED

    result = check_request(state, 7, [0, 0, 0])
    assert result.error.kind == ValidationErrorKind.INVALID_REQUEST

    result = check_request(state, 0, [0, 1])
    assert result.error.kind == ValidationErrorKind.INVALID_REQUEST

    result = check_request(state, 0, [0, -1, 0])
    assert result.error.kind == ValidationErrorKind.INVALID_REQUEST


def test_display_lists_all_matrices():
    output = classic_state().display()
    assert "Allocation Matrix:" in output
    assert "Max Matrix:" in output
    assert "Need Matrix (Max - Allocation):" in output
    assert "Available Resources:" in output
    assert "  P4: " in output


def main():
    """Run all Banker's tests."""
    tests = [
        test_classic_safe_sequence,
        test_scan_restarts_from_first_process,
        test_lowest_index_wins_ties,
        test_unsafe_state_reports_partial_sequence,
        test_negative_need_is_validation_error,
        test_shape_mismatch_is_validation_error,
        test_negative_entries_are_validation_errors,
        test_no_processes_is_trivially_safe,
        test_negative_values_rejected_by_model,
        test_verdict_matches_brute_force,
        test_safety_check_is_pure_and_deterministic,
        test_request_sequence_on_classic_example,
        test_request_validation_errors,
        test_display_lists_all_matrices,
    ]

    try:
        for test in tests:
            test()
        print("\n✅ ALL BANKER'S TESTS PASSED")
        return 0
    except AssertionError as e:
        print(f"\n❌ TEST FAILED: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
