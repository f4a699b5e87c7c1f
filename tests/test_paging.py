"""
Page Replacement Tests

Tests FIFO, LRU and Optimal traces, fault counts, tie-breaks and frame
count validation.
"""

import sys
import random
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.paging import (
    EMPTY_FRAME_ACTION,
    HIT_ACTION,
    simulate_all_strategies,
    simulate_paging,
    validate_frame_count,
)
from models.errors import ValidationErrorKind
from models.paging import PagingStrategy


CLASSIC_REFERENCE = [7, 0, 1, 2, 0, 3, 0, 4, 2, 3, 0, 3, 2]


def test_classic_fault_counts():
    """Textbook string with 3 frames: FIFO 10, LRU 9, Optimal 7."""
    print("\n" + "="*60)
    print("TEST: Classic Reference String")
    print("="*60)

    expected = {
        PagingStrategy.FIFO: (10, (0, 2, 3)),
        PagingStrategy.LRU: (9, (0, 3, 2)),
        PagingStrategy.OPTIMAL: (7, (2, 0, 3)),
    }

    for strategy, (faults, final_frames) in expected.items():
        result = simulate_paging(CLASSIC_REFERENCE, 3, strategy)
        print(f"  {strategy.value:<8} faults={result.total_faults} final={result.steps[-1].frames}")
        assert result.ok
        assert result.total_faults == faults, f"{strategy.value}: {result.total_faults} faults"
        assert result.total_hits == len(CLASSIC_REFERENCE) - faults
        assert result.fault_rate == faults / len(CLASSIC_REFERENCE)
        assert result.steps[-1].frames == final_frames

    print("  ✓ Fault counts and final frames match hand traces")


def test_step_actions():
    result = simulate_paging(CLASSIC_REFERENCE, 3, PagingStrategy.FIFO)
    steps = result.steps

    assert [s.step for s in steps] == list(range(1, len(CLASSIC_REFERENCE) + 1))
    assert steps[0].action == EMPTY_FRAME_ACTION
    assert steps[0].frames == (7,)
    assert steps[3].action == "Page Fault - Replaced page 7 in frame 1"
    assert steps[3].evicted == 7 and steps[3].slot == 0
    assert steps[4].action == HIT_ACTION
    assert not steps[4].fault
    assert steps[4].evicted is None


def test_fifo_hits_do_not_refresh():
    """A hit on the oldest page does not save it from FIFO eviction."""
    fifo = simulate_paging([1, 2, 3, 1, 4], 3, PagingStrategy.FIFO)
    lru = simulate_paging([1, 2, 3, 1, 4], 3, PagingStrategy.LRU)

    assert fifo.steps[-1].evicted == 1
    assert fifo.steps[-1].frames == (4, 2, 3)
    assert lru.steps[-1].evicted == 2
    assert lru.steps[-1].frames == (1, 4, 3)


def test_fifo_replacement_slots_rotate():
    rng = random.Random(7)
    reference = [rng.randint(0, 6) for _ in range(40)]

    for num_frames in (1, 2, 3, 4):
        result = simulate_paging(reference, num_frames, PagingStrategy.FIFO)
        slots = [s.slot for s in result.steps if s.evicted is not None]
        assert slots == [k % num_frames for k in range(len(slots))], (
            f"FIFO slots out of order with {num_frames} frames: {slots}"
        )


def test_optimal_prefers_never_used_page():
    # At page 4: page 2 and page 3 are never used again; slot 1 comes first
    result = simulate_paging([1, 2, 3, 4, 1], 3, PagingStrategy.OPTIMAL)
    assert result.steps[3].evicted == 2
    assert result.steps[3].frames == (1, 4, 3)

    # Every resident page recurs; page 3 is needed last
    result = simulate_paging([1, 2, 3, 4, 1, 2, 3], 3, PagingStrategy.OPTIMAL)
    assert result.steps[3].evicted == 3
    assert result.steps[3].slot == 2


def test_trace_invariants():
    """Frames never exceed capacity, evicted pages were resident, hits mean resident."""
    rng = random.Random(42)

    for _ in range(50):
        reference = [rng.randint(0, 8) for _ in range(rng.randint(1, 30))]
        num_frames = rng.randint(1, min(5, len(reference)))

        results = simulate_all_strategies(reference, num_frames)
        faults = {r.strategy: r.total_faults for r in results}
        assert faults[PagingStrategy.OPTIMAL] <= faults[PagingStrategy.LRU]
        assert faults[PagingStrategy.OPTIMAL] <= faults[PagingStrategy.FIFO]

        for result in results:
            assert result.ok
            assert 0.0 <= result.fault_rate <= 1.0
            previous = ()
            for step in result.steps:
                assert len(step.frames) <= num_frames
                assert len(set(step.frames)) == len(step.frames)
                assert step.page in step.frames
                assert step.fault == (step.page not in previous)
                if step.evicted is not None:
                    assert step.evicted in previous
                previous = step.frames


def test_empty_reference_string():
    for strategy in PagingStrategy:
        result = simulate_paging([], 3, strategy)
        assert result.ok
        assert result.steps == []
        assert result.total_faults == 0
        assert result.fault_rate == 0.0


def test_invalid_frame_counts():
    for frames in (0, -1, 4):
        result = simulate_paging([1, 2, 3], frames, PagingStrategy.LRU)
        assert result.error is not None, f"{frames} frames should be rejected"
        assert result.error.kind == ValidationErrorKind.INVALID_FRAME_COUNT
        assert result.steps == []

    long_reference = list(range(20))
    result = simulate_paging(long_reference, 11, PagingStrategy.FIFO)
    assert result.error.kind == ValidationErrorKind.INVALID_FRAME_COUNT

    assert validate_frame_count(long_reference, 10) is None
    assert validate_frame_count(long_reference, 12, max_frames=16) is None


def test_single_frame():
    result = simulate_paging([1, 1, 2, 1], 1, PagingStrategy.LRU)
    assert [s.fault for s in result.steps] == [True, False, True, True]


def test_strategies_are_independent_and_deterministic():
    first = simulate_all_strategies(CLASSIC_REFERENCE, 3)
    second = simulate_all_strategies(CLASSIC_REFERENCE, 3)

    assert [r.strategy for r in first] == list(PagingStrategy)
    assert first == second
    assert first[0] == simulate_paging(CLASSIC_REFERENCE, 3, PagingStrategy.FIFO)


def main():
    """Run all paging tests."""
    tests = [
        test_classic_fault_counts,
        test_step_actions,
        test_fifo_hits_do_not_refresh,
        test_fifo_replacement_slots_rotate,
        test_optimal_prefers_never_used_page,
        test_trace_invariants,
        test_empty_reference_string,
        test_invalid_frame_counts,
        test_single_frame,
        test_strategies_are_independent_and_deterministic,
    ]

    try:
        for test in tests:
            test()
        print("\n✅ ALL PAGING TESTS PASSED")
        return 0
    except AssertionError as e:
        print(f"\n❌ TEST FAILED: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
