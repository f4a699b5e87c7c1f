"""
Page Replacement Algorithms for the Simulator.

Implements FIFO, LRU and Optimal replacement over a reference string.
Each run owns its own frame set and produces a step-by-step trace.
"""

from typing import Dict, List, Optional, Sequence

from models.errors import ValidationError, ValidationErrorKind
from models.paging import MAX_FRAMES, PagingResult, PagingStrategy, StepRecord


HIT_ACTION = "Hit - Page already in memory"
EMPTY_FRAME_ACTION = "Page Fault - Added to empty frame"


def _replaced_action(victim: int, slot: int) -> str:
    return f"Page Fault - Replaced page {victim} in frame {slot + 1}"


def validate_frame_count(
    reference_string: Sequence[int],
    num_frames: int,
    max_frames: int = MAX_FRAMES
) -> Optional[ValidationError]:
    """
    Check the frame count against the reference string and the frame cap.

    Returns:
        None if valid, otherwise an InvalidFrameCount error
    """
    if num_frames < 1:
        message = "Number of frames must be at least 1"
    elif num_frames > max_frames:
        message = f"Number of frames cannot exceed {max_frames}"
    elif num_frames > len(reference_string):
        message = "Number of frames cannot exceed the length of the reference string"
    else:
        return None
    return ValidationError(ValidationErrorKind.INVALID_FRAME_COUNT, message)


def fifo_page_replacement(reference_string: Sequence[int], num_frames: int) -> List[StepRecord]:
    """
    FIFO (First In First Out) replacement.

    Frames form a ring; a single pointer marks the next slot to evict.
    Hits never move the pointer, so eviction order is insertion order.
    """
    frames: List[int] = []
    steps: List[StepRecord] = []
    frame_pointer = 0  # Next slot to replace (circular)

    for i, page in enumerate(reference_string):
        if page in frames:
            steps.append(StepRecord(i + 1, page, tuple(frames), False, HIT_ACTION))
            continue

        if len(frames) < num_frames:
            frames.append(page)
            steps.append(StepRecord(
                i + 1, page, tuple(frames), True, EMPTY_FRAME_ACTION, slot=len(frames) - 1
            ))
        else:
            slot = frame_pointer
            victim = frames[slot]
            frames[slot] = page
            frame_pointer = (frame_pointer + 1) % num_frames
            steps.append(StepRecord(
                i + 1, page, tuple(frames), True, _replaced_action(victim, slot),
                evicted=victim, slot=slot
            ))

    return steps


def lru_page_replacement(reference_string: Sequence[int], num_frames: int) -> List[StepRecord]:
    """
    LRU (Least Recently Used) replacement.

    Evicts the resident page with the oldest last reference; ties go to
    the lowest frame slot.
    """
    frames: List[int] = []
    last_used: Dict[int, int] = {}
    steps: List[StepRecord] = []

    for i, page in enumerate(reference_string):
        if page in frames:
            last_used[page] = i
            steps.append(StepRecord(i + 1, page, tuple(frames), False, HIT_ACTION))
            continue

        if len(frames) < num_frames:
            frames.append(page)
            last_used[page] = i
            steps.append(StepRecord(
                i + 1, page, tuple(frames), True, EMPTY_FRAME_ACTION, slot=len(frames) - 1
            ))
        else:
            # Strict < keeps the first slot among equal timestamps
            slot = 0
            for j in range(1, len(frames)):
                if last_used[frames[j]] < last_used[frames[slot]]:
                    slot = j

            victim = frames[slot]
            del last_used[victim]
            frames[slot] = page
            last_used[page] = i
            steps.append(StepRecord(
                i + 1, page, tuple(frames), True, _replaced_action(victim, slot),
                evicted=victim, slot=slot
            ))

    return steps


def _next_use(reference_string: Sequence[int], page: int, after: int) -> Optional[int]:
    """Index of the next reference to page strictly after `after`, or None."""
    for k in range(after + 1, len(reference_string)):
        if reference_string[k] == page:
            return k
    return None


def optimal_page_replacement(reference_string: Sequence[int], num_frames: int) -> List[StepRecord]:
    """
    Optimal (Belady's MIN) replacement.

    Evicts the first resident page that is never referenced again, or else
    the page whose next reference is farthest away. Ties go to the lowest
    frame slot.
    """
    frames: List[int] = []
    steps: List[StepRecord] = []

    for i, page in enumerate(reference_string):
        if page in frames:
            steps.append(StepRecord(i + 1, page, tuple(frames), False, HIT_ACTION))
            continue

        if len(frames) < num_frames:
            frames.append(page)
            steps.append(StepRecord(
                i + 1, page, tuple(frames), True, EMPTY_FRAME_ACTION, slot=len(frames) - 1
            ))
            continue

        slot = 0
        farthest = -1
        for j, resident in enumerate(frames):
            next_use = _next_use(reference_string, resident, i)
            if next_use is None:
                slot = j
                break
            if next_use > farthest:
                slot = j
                farthest = next_use

        victim = frames[slot]
        frames[slot] = page
        steps.append(StepRecord(
            i + 1, page, tuple(frames), True, _replaced_action(victim, slot),
            evicted=victim, slot=slot
        ))

    return steps


_STRATEGIES = {
    PagingStrategy.FIFO: fifo_page_replacement,
    PagingStrategy.LRU: lru_page_replacement,
    PagingStrategy.OPTIMAL: optimal_page_replacement,
}


def simulate_paging(
    reference_string: Sequence[int],
    num_frames: int,
    strategy: PagingStrategy,
    max_frames: int = MAX_FRAMES
) -> PagingResult:
    """
    Run one page replacement strategy over a reference string.

    Args:
        reference_string: Page ids in reference order
        num_frames: Number of physical frames
        strategy: Replacement strategy
        max_frames: Upper bound on num_frames

    Returns:
        PagingResult with the trace and fault statistics. An empty
        reference string gives an empty result; a bad frame count gives
        an InvalidFrameCount error.
    """
    if not reference_string:
        return PagingResult(strategy=strategy)

    error = validate_frame_count(reference_string, num_frames, max_frames)
    if error:
        return PagingResult(strategy=strategy, error=error)

    steps = _STRATEGIES[strategy](list(reference_string), num_frames)
    total_faults = sum(1 for s in steps if s.fault)

    return PagingResult(
        strategy=strategy,
        steps=steps,
        total_faults=total_faults,
        fault_rate=total_faults / len(reference_string)
    )


def simulate_all_strategies(
    reference_string: Sequence[int],
    num_frames: int,
    max_frames: int = MAX_FRAMES
) -> List[PagingResult]:
    """Run FIFO, LRU and Optimal independently on the same input."""
    return [
        simulate_paging(reference_string, num_frames, strategy, max_frames)
        for strategy in PagingStrategy
    ]
